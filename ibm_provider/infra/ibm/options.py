from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from ibm_provider.core.exceptions import OptionsValidationError


class BaseOptions(BaseModel):
    """Common fields of every operation's options.

    Options are immutable once built. A missing or empty required field fails
    here, at construction, with an OptionsValidationError.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Logged by the service and echoed back; passed through verbatim
    x_correlation_id: str | None = None
    # Same as X-Correlation-Id for services that only understand Transaction-Id
    transaction_id: str | None = None
    # Merged into the request last, so these override any computed header
    headers: dict[str, str] | None = None

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as exc:
            problems = [
                f"{'.'.join(str(p) for p in error['loc'])}: {error['msg']}"
                for error in exc.errors(include_url=False)
            ]
            raise OptionsValidationError(
                f"{type(self).__name__} is invalid: " + "; ".join(problems),
                details=problems,
            ) from exc
