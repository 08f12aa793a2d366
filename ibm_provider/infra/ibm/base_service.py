"""
BaseService: the shared transport behind every generated-style API client.

Holds the service URL, authenticator and default headers, and executes one
declared Operation per call: build the request, authenticate it, send it
(optionally retrying transient failures), map HTTP errors and decode the body.
"""

import logging
import platform
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import httpx
from pydantic import BaseModel
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
)

from ibm_provider.config import settings
from ibm_provider.core.exceptions import ApiError, ServiceTransportError
from ibm_provider.core.logging import transaction_id_var
from ibm_provider.infra.ibm.auth import Authenticator
from ibm_provider.infra.ibm.options import BaseOptions
from ibm_provider.infra.ibm.request_builder import Operation, build_request
from ibm_provider.infra.ibm.unmarshal import parse_json, unmarshal_model

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


@dataclass(frozen=True)
class DetailedResponse(Generic[T]):
    status_code: int
    headers: httpx.Headers
    result: T | None
    raw_result: bytes


def get_sdk_headers(service_name: str, service_version: str, operation_id: str) -> dict[str, str]:
    return {
        "User-Agent": (
            f"ibm-provider-python/{settings.app_version} "
            f"(lang=python; python_version={platform.python_version()}; "
            f"os={platform.system().lower()})"
        ),
        "X-IBMCloud-SDK-Analytics": (
            f"service_name={service_name};service_version={service_version};"
            f"operation_id={operation_id}"
        ),
    }


def _is_retryable_response(response: httpx.Response) -> bool:
    return response.status_code in RETRYABLE_STATUS_CODES


def _last_outcome(retry_state: RetryCallState) -> Any:
    # Attempts exhausted: hand back the final response (or re-raise the final error)
    return retry_state.outcome.result()  # type: ignore[union-attr]


class BaseService:
    def __init__(
        self,
        service_url: str,
        authenticator: Authenticator,
        *,
        service_name: str,
        service_version: str = "V1",
        default_headers: Mapping[str, str] | None = None,
        default_query: Mapping[str, Any] | None = None,
        timeout: float = 60.0,
        http_client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._service_url = service_url
        self.authenticator = authenticator
        self.service_name = service_name
        self.service_version = service_version
        self._default_headers = dict(default_headers or {})
        self._default_query = dict(default_query or {})
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout), transport=transport
        )
        self._max_retries = 0
        self._max_retry_interval = 0.0

    @property
    def service_url(self) -> str:
        return self._service_url

    def set_service_url(self, url: str) -> None:
        self._service_url = url

    @property
    def default_headers(self) -> dict[str, str]:
        return dict(self._default_headers)

    def set_default_headers(self, headers: Mapping[str, str]) -> None:
        self._default_headers = dict(headers)

    def enable_retries(self, max_retries: int = 4, max_retry_interval: float = 30.0) -> None:
        """Retry connection errors and 429/5xx responses with exponential back-off."""
        self._max_retries = max_retries if max_retries > 0 else 4
        self._max_retry_interval = max_retry_interval if max_retry_interval > 0 else 30.0

    def disable_retries(self) -> None:
        self._max_retries = 0
        self._max_retry_interval = 0.0

    @property
    def retries_enabled(self) -> bool:
        return self._max_retries > 0

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "BaseService":
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        await self.aclose()

    async def _send_once(self, request: httpx.Request) -> httpx.Response:
        return await self._client.send(request)

    async def _send(self, request: httpx.Request) -> httpx.Response:
        if not self.retries_enabled:
            return await self._send_once(request)

        retrying = AsyncRetrying(
            retry=(
                retry_if_exception_type(httpx.TransportError)
                | retry_if_result(_is_retryable_response)
            ),
            stop=stop_after_attempt(self._max_retries + 1),
            wait=wait_exponential(multiplier=1, max=self._max_retry_interval),
            retry_error_callback=_last_outcome,
            reraise=True,
        )
        return await retrying(self._send_once, request)

    async def invoke(
        self,
        operation: Operation,
        options: BaseOptions,
        decoder: type[BaseModel] | None = None,
    ) -> DetailedResponse[Any]:
        """Execute one operation.

        With a decoder the JSON body is unmarshaled into that model; without
        one the decoded JSON value is returned as-is. Bodiless responses have
        a result of None.
        """
        request = build_request(
            self._service_url,
            operation,
            options,
            default_headers=self._default_headers,
            default_query=self._default_query,
            sdk_headers=get_sdk_headers(
                self.service_name, self.service_version, operation.operation_id
            ),
        )

        token = transaction_id_var.set(
            options.x_correlation_id or options.transaction_id or transaction_id_var.get()
        )
        try:
            await self.authenticator.authenticate(request)
            started = time.monotonic()
            try:
                response = await self._send(request)
            except httpx.TransportError as exc:
                logger.error(
                    "API request failed",
                    extra={
                        "operation_id": operation.operation_id,
                        "method": request.method,
                        "url": str(request.url),
                        "exc_type": type(exc).__name__,
                    },
                )
                raise ServiceTransportError(request.method, str(request.url), exc) from exc

            logger.debug(
                "API response",
                extra={
                    "operation_id": operation.operation_id,
                    "method": request.method,
                    "url": str(request.url),
                    "status_code": response.status_code,
                    "elapsed_ms": int((time.monotonic() - started) * 1000),
                },
            )
            if not response.is_success:
                logger.warning(
                    "API error response",
                    extra={
                        "operation_id": operation.operation_id,
                        "status_code": response.status_code,
                    },
                )
                raise ApiError.from_response(response)

            content = response.content
            result: Any = None
            if content and content.strip():
                data = parse_json(content)
                result = unmarshal_model(decoder, data) if decoder is not None else data
            return DetailedResponse(
                status_code=response.status_code,
                headers=response.headers,
                result=result,
                raw_result=content,
            )
        finally:
            transaction_id_var.reset(token)
