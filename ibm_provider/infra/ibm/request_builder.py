"""
Request building: one outbound HTTP request per API operation.

An Operation declares where each options field goes (path, query, header or
JSON body). build_request turns an Operation plus its options into an
httpx.Request without sending anything; missing required parameters are
reported before a request object exists.
"""

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

import httpx

from ibm_provider.core.exceptions import OptionsValidationError
from ibm_provider.infra.ibm.options import BaseOptions

# Header name -> options attribute, sent on every operation when set
COMMON_HEADER_PARAMS: Mapping[str, str] = {
    "X-Correlation-Id": "x_correlation_id",
    "Transaction-Id": "transaction_id",
}


@dataclass(frozen=True)
class Operation:
    operation_id: str
    method: str
    path: str
    path_params: tuple[str, ...] = ()
    query_params: tuple[str, ...] = ()
    header_params: Mapping[str, str] = field(default_factory=dict)
    # Attributes that must be set; path params are always required and non-empty
    required: tuple[str, ...] = ()
    # None means the request has no body
    body_fields: tuple[str, ...] | None = None
    accept_json: bool = True


def _wire_value(value: Any) -> str:
    if isinstance(value, enum.Enum):
        value = value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _validate(operation: Operation, options: BaseOptions) -> None:
    missing: list[str] = []
    for name in operation.path_params:
        value = getattr(options, name, None)
        if value is None or str(value) == "":
            missing.append(name)
    for name in operation.required:
        if getattr(options, name, None) is None and name not in missing:
            missing.append(name)
    if missing:
        raise OptionsValidationError(
            f"{operation.operation_id}: required parameter(s) not set: {', '.join(missing)}",
            details={"operation_id": operation.operation_id, "missing": missing},
        )


def resolve_url(service_url: str, path: str, path_params: Mapping[str, Any]) -> str:
    resolved = path
    for name, value in path_params.items():
        resolved = resolved.replace("{" + name + "}", quote(str(value), safe=""))
    return service_url.rstrip("/") + resolved


def build_request(
    service_url: str,
    operation: Operation,
    options: BaseOptions,
    *,
    default_headers: Mapping[str, str] | None = None,
    default_query: Mapping[str, Any] | None = None,
    sdk_headers: Mapping[str, str] | None = None,
) -> httpx.Request:
    if not service_url:
        raise OptionsValidationError("service URL is not set")
    _validate(operation, options)

    url = resolve_url(
        service_url,
        operation.path,
        {name: getattr(options, name) for name in operation.path_params},
    )

    params: dict[str, str] = {}
    for name, value in (default_query or {}).items():
        if value is not None:
            params[name] = _wire_value(value)
    for name in operation.query_params:
        value = getattr(options, name, None)
        if value is not None:
            params[name] = _wire_value(value)

    headers = httpx.Headers(default_headers or {})
    headers.update(sdk_headers or {})
    if operation.accept_json:
        headers["Accept"] = "application/json"
    if operation.body_fields is not None:
        headers["Content-Type"] = "application/json"
    for header_name, attr in {**COMMON_HEADER_PARAMS, **operation.header_params}.items():
        value = getattr(options, attr, None)
        if value is not None:
            headers[header_name] = _wire_value(value)
    if options.headers:
        headers.update(options.headers)

    body = None
    if operation.body_fields is not None:
        body = options.model_dump(
            mode="json", include=set(operation.body_fields), exclude_none=True
        )

    return httpx.Request(operation.method, url, params=params, headers=headers, json=body)
