import json
from dataclasses import dataclass
from typing import Any

import httpx


@dataclass(frozen=True)
class Diagnostic:
    """A single entry on the declarative framework's diagnostic channel."""

    severity: str
    summary: str
    detail: str | None = None
    error_code: str | None = None


class ProviderError(Exception):
    """Base provider exception."""

    error_code: str = "PROVIDER_ERROR"

    def __init__(self, message: str, details: object = None) -> None:
        self.message = message
        self.details = details
        super().__init__(message)

    def to_diagnostic(self) -> Diagnostic:
        detail = None if self.details is None else str(self.details)
        return Diagnostic(
            severity="error", summary=str(self), detail=detail, error_code=self.error_code
        )


class OptionsValidationError(ProviderError):
    error_code = "INVALID_OPTIONS"


class ProviderConfigurationError(ProviderError):
    error_code = "PROVIDER_CONFIGURATION"


class SchemaError(ProviderError):
    error_code = "SCHEMA_ERROR"


class AuthenticationError(ProviderError):
    error_code = "AUTHENTICATION_FAILED"


class ServiceTransportError(ProviderError):
    error_code = "TRANSPORT_ERROR"

    def __init__(self, method: str, url: str, cause: Exception) -> None:
        super().__init__(
            f"{method} {url} failed: {type(cause).__name__}: {cause}",
            details={"method": method, "url": url},
        )


def _server_message(payload: Any) -> str | None:
    if not isinstance(payload, dict):
        return None
    errors = payload.get("errors")
    if isinstance(errors, list) and errors and isinstance(errors[0], dict):
        message = errors[0].get("message")
        if message:
            return str(message)
    error = payload.get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if isinstance(error, str) and error:
        return error
    for key in ("message", "errorMessage"):
        if payload.get(key):
            return str(payload[key])
    return None


class ApiError(ProviderError):
    """Non-2xx response, carrying the raw body for diagnostics."""

    error_code = "API_ERROR"

    def __init__(
        self,
        status_code: int,
        message: str,
        body: str = "",
        headers: httpx.Headers | None = None,
    ) -> None:
        self.status_code = status_code
        self.body = body
        self.headers = headers or httpx.Headers()
        super().__init__(message, details={"status_code": status_code})

    def __str__(self) -> str:
        if self.body:
            return f"{self.message}\n{self.body}"
        return self.message

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ApiError":
        body = response.text
        try:
            message = _server_message(response.json())
        except (json.JSONDecodeError, UnicodeDecodeError):
            message = None
        if not message:
            message = response.reason_phrase or f"HTTP {response.status_code}"
        return cls(
            status_code=response.status_code,
            message=message,
            body=body,
            headers=response.headers,
        )


class DecodeError(ProviderError):
    error_code = "DECODE_ERROR"


class UnrecognizedDiscriminatorError(DecodeError):
    error_code = "UNRECOGNIZED_DISCRIMINATOR"

    def __init__(self, property_name: str, value: object = None) -> None:
        if value is None:
            message = (
                f"required discriminator property '{property_name}' not found in JSON object"
            )
        else:
            message = f"unrecognized value for discriminator property '{property_name}': {value}"
        super().__init__(message, details={"property": property_name, "value": value})


class ResourceNotFoundError(ProviderError):
    error_code = "NOT_FOUND"


class InstanceNotFoundError(ResourceNotFoundError):
    error_code = "INSTANCE_NOT_FOUND"

    def __init__(self, instance_name: str) -> None:
        super().__init__(f"Instance {instance_name} not found.")


class NetworkInterfaceNotFoundError(ResourceNotFoundError):
    error_code = "NETWORK_INTERFACE_NOT_FOUND"

    def __init__(self, network_interface_name: str) -> None:
        super().__init__(f"Network interface {network_interface_name} not found.")
