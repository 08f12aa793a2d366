import logging
import time
import uuid
from urllib.parse import parse_qs

from fastapi import APIRouter, Request

from ibm_provider.emulator.exceptions import BadRequestError
from ibm_provider.infra.ibm.auth import IAM_APIKEY_GRANT_TYPE

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/identity", tags=["iam"])

TOKEN_LIFETIME_S = 3600


@router.post("/token", summary="Exchange an API key for an access token")
async def create_token(request: Request) -> dict[str, object]:
    form = parse_qs((await request.body()).decode())
    grant_type = form.get("grant_type", [""])[0]
    apikey = form.get("apikey", [""])[0]
    if grant_type != IAM_APIKEY_GRANT_TYPE:
        raise BadRequestError(f"Unsupported grant_type '{grant_type}'")
    if not apikey:
        raise BadRequestError("The apikey parameter is required")

    now = int(time.time())
    logger.info("Access token issued", extra={"expires_in": TOKEN_LIFETIME_S})
    return {
        "access_token": uuid.uuid4().hex,
        "refresh_token": "not_supported",
        "token_type": "Bearer",
        "expires_in": TOKEN_LIFETIME_S,
        "expiration": now + TOKEN_LIFETIME_S,
        "scope": "ibm openid",
    }
