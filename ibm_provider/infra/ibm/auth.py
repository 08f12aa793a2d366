import asyncio
import logging
import time
from abc import ABC, abstractmethod

import httpx

from ibm_provider.core.exceptions import AuthenticationError, ProviderConfigurationError

logger = logging.getLogger(__name__)

IAM_APIKEY_GRANT_TYPE = "urn:ibm:params:oauth:grant-type:apikey"
DEFAULT_IAM_URL = "https://iam.cloud.ibm.com"


class Authenticator(ABC):
    """Adds credentials to an outbound request."""

    auth_type: str = ""

    @abstractmethod
    async def authenticate(self, request: httpx.Request) -> None: ...

    def validate(self) -> None:
        return None


class NoAuthAuthenticator(Authenticator):
    auth_type = "noAuth"

    async def authenticate(self, request: httpx.Request) -> None:
        return None


class BearerTokenAuthenticator(Authenticator):
    auth_type = "bearerToken"

    def __init__(self, bearer_token: str) -> None:
        self.bearer_token = bearer_token
        self.validate()

    def validate(self) -> None:
        if not self.bearer_token:
            raise ProviderConfigurationError("bearer token must be set")

    async def authenticate(self, request: httpx.Request) -> None:
        request.headers["Authorization"] = f"Bearer {self.bearer_token}"


class IamAuthenticator(Authenticator):
    """Exchanges an API key for IAM access tokens and caches them.

    A token is refreshed once 80% of its lifetime has elapsed. Refreshes are
    serialized with a lock so concurrent callers share one token request.
    """

    auth_type = "iam"

    def __init__(
        self,
        apikey: str,
        url: str = DEFAULT_IAM_URL,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 60.0,
    ) -> None:
        self.apikey = apikey
        self.url = url or DEFAULT_IAM_URL
        self.validate()
        self._client = http_client
        self._owns_client = http_client is None
        self._timeout = timeout
        self._access_token: str | None = None
        self._refresh_at: float = 0.0
        self._lock = asyncio.Lock()

    def validate(self) -> None:
        if not self.apikey:
            raise ProviderConfigurationError("IAM API key must be set")
        if self.apikey.startswith(("{", '"')) or self.apikey.endswith(("}", '"')):
            raise ProviderConfigurationError(
                "IAM API key must not be wrapped in braces or quotes"
            )

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def get_token(self) -> str:
        async with self._lock:
            if self._access_token is None or time.time() >= self._refresh_at:
                self._access_token = await self._request_token()
            return self._access_token

    async def _request_token(self) -> str:
        token_url = self.url.rstrip("/") + "/identity/token"
        logger.debug("Requesting IAM access token", extra={"url": token_url})
        try:
            response = await self.client.post(
                token_url,
                data={
                    "grant_type": IAM_APIKEY_GRANT_TYPE,
                    "apikey": self.apikey,
                    "response_type": "cloud_iam",
                },
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as exc:
            raise AuthenticationError(f"IAM token request failed: {exc}") from exc

        if not response.is_success:
            logger.warning(
                "IAM token request rejected",
                extra={"status_code": response.status_code},
            )
            raise AuthenticationError(
                f"IAM token request failed with status {response.status_code}",
                details=response.text,
            )

        payload = response.json()
        access_token = payload.get("access_token")
        if not access_token:
            raise AuthenticationError("IAM token response has no access_token")

        now = time.time()
        expires_in = float(payload.get("expires_in") or 3600)
        expiration = float(payload.get("expiration") or now + expires_in)
        self._refresh_at = expiration - expires_in * 0.2
        logger.debug("IAM access token obtained", extra={"expires_in": expires_in})
        return str(access_token)

    async def authenticate(self, request: httpx.Request) -> None:
        token = await self.get_token()
        request.headers["Authorization"] = f"Bearer {token}"
