"""
Response unmarshaling: raw JSON into typed models.

Validation failures from pydantic are mapped onto the provider's decode
errors. A discriminated union whose tag is missing or unknown is reported as
an unrecognized discriminator rather than falling back to a default variant.
"""

import json
from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from ibm_provider.core.exceptions import DecodeError, UnrecognizedDiscriminatorError

M = TypeVar("M", bound=BaseModel)
T = TypeVar("T")

_DISCRIMINATOR_ERRORS = {"union_tag_invalid", "union_tag_not_found"}


def _raise_decode_error(exc: ValidationError, target: str) -> None:
    for error in exc.errors(include_url=False):
        if error["type"] in _DISCRIMINATOR_ERRORS:
            ctx = error.get("ctx", {})
            prop = str(ctx.get("discriminator", "type")).strip("'")
            raise UnrecognizedDiscriminatorError(prop, ctx.get("tag")) from exc

    problems = [
        f"{'.'.join(str(p) for p in error['loc']) or '<root>'}: {error['msg']}"
        for error in exc.errors(include_url=False)
    ]
    raise DecodeError(
        f"error unmarshalling {target}: " + "; ".join(problems),
        details=problems,
    ) from exc


def unmarshal_model(model: type[M], data: Any) -> M:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        _raise_decode_error(exc, model.__name__)
        raise


def unmarshal_with(adapter: TypeAdapter[T], data: Any, target: str) -> T:
    try:
        return adapter.validate_python(data)
    except ValidationError as exc:
        _raise_decode_error(exc, target)
        raise


def parse_json(content: bytes) -> Any:
    try:
        return json.loads(content)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DecodeError(f"response body is not valid JSON: {exc}") from exc
