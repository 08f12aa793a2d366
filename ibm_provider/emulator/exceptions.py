import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ibm_provider.core.logging import transaction_id_var

logger = logging.getLogger(__name__)


class EmulatorError(Exception):
    """Base emulator exception, rendered in the IBM platform error shape."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "internal_error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class BadRequestError(EmulatorError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "bad_request"


class NotFoundError(EmulatorError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "not_found"

    def __init__(self, kind: str, object_id: str) -> None:
        super().__init__(f"The {kind} with id '{object_id}' was not found")


class PreconditionFailedError(EmulatorError):
    status_code = status.HTTP_412_PRECONDITION_FAILED
    error_code = "precondition_failed"

    def __init__(self, kind: str, object_id: str) -> None:
        super().__init__(
            f"The If-Match value does not match the current version of {kind} '{object_id}'"
        )


class PreconditionRequiredError(EmulatorError):
    status_code = status.HTTP_428_PRECONDITION_REQUIRED
    error_code = "precondition_required"

    def __init__(self) -> None:
        super().__init__("The If-Match header is required")


def error_body(code: str, message: str, status_code: int) -> dict[str, object]:
    return {
        "errors": [{"code": code, "message": message}],
        "trace": transaction_id_var.get(),
        "status_code": status_code,
    }


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(EmulatorError)
    async def emulator_exception_handler(request: Request, exc: EmulatorError) -> JSONResponse:
        log_fn = logger.error if exc.status_code >= 500 else logger.warning
        log_fn(
            exc.error_code,
            extra={
                "error_code": exc.error_code,
                "status_code": exc.status_code,
                "path": request.url.path,
                "detail": exc.message,
            },
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.error_code, exc.message, exc.status_code),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        problems = [
            f"{'.'.join(str(part) for part in e.get('loc', []))}: {e.get('msg', '')}"
            for e in exc.errors()
        ]
        logger.info(
            "Request validation failed",
            extra={"path": request.url.path, "error_count": len(problems)},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body("bad_request", "; ".join(problems), status.HTTP_400_BAD_REQUEST),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Unhandled exception",
            exc_info=True,
            extra={"path": request.url.path, "exc_type": type(exc).__name__},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(
                "internal_error",
                "An unexpected error occurred",
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
        )
