"""Emulator middleware."""

import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from ibm_provider.core.logging import transaction_id_var


class TransactionIdMiddleware(BaseHTTPMiddleware):
    """Extracts or generates the IBM transaction ID of every request.

    Behaviour:
    - A ``Transaction-Id`` header is reused; ``X-Correlation-Id`` is the
      fallback; otherwise a fresh UUID4 hex string is generated.
    - The ID is bound to ``transaction_id_var`` for the duration of the
      request and echoed back in the ``Transaction-Id`` response header.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        transaction_id = (
            request.headers.get("Transaction-Id")
            or request.headers.get("X-Correlation-Id")
            or uuid.uuid4().hex
        )
        request.state.transaction_id = transaction_id
        token = transaction_id_var.set(transaction_id)
        try:
            response = await call_next(request)
            response.headers["Transaction-Id"] = transaction_id
            return response
        finally:
            transaction_id_var.reset(token)
