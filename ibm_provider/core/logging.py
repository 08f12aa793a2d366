"""Structured JSON logging configuration for the provider."""

import logging
from contextvars import ContextVar

from pythonjsonlogger.json import JsonFormatter as _JsonFormatter

from ibm_provider.config import settings

# Transaction ID of the API call in flight; set by BaseService and the emulator middleware
transaction_id_var: ContextVar[str] = ContextVar("transaction_id", default="-")


class _TransactionIdFilter(logging.Filter):
    """Injects the current transaction_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.transaction_id = transaction_id_var.get()
        return True


class _ProviderJsonFormatter(_JsonFormatter):
    """Extends the standard JSON formatter with provider-level metadata."""

    def add_fields(
        self,
        log_record: dict[str, object],
        record: logging.LogRecord,
        message_dict: dict[str, object],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record.setdefault("service", settings.app_name)
        log_record.setdefault("version", settings.app_version)
        log_record.setdefault("env", settings.env)


def configure_logging() -> None:
    """Set up structured JSON logging for the provider process.

    Call once when the provider (or the emulator app) starts, before any
    client is built, so that all handlers are consistently configured.

    Log levels:
        DEBUG:   read operations, individual HTTP exchanges, page fetches
        INFO:    create/replace/delete operations, startup
        WARNING: not-found lookups, 4xx responses, rejected configuration
        ERROR:   unexpected exceptions, exhausted retries
    """
    log_level = logging.DEBUG if settings.debug else logging.INFO

    handler = logging.StreamHandler()
    handler.setFormatter(
        _ProviderJsonFormatter(
            fmt="%(asctime)s %(name)s %(levelname)s %(message)s %(transaction_id)s",
            datefmt="%Y-%m-%dT%H:%M:%SZ",
        )
    )
    handler.addFilter(_TransactionIdFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(log_level)

    # Suppress noisy third-party loggers
    for name in ("httpx", "httpcore", "sqlalchemy.engine", "uvicorn.access"):
        logging.getLogger(name).setLevel(logging.WARNING)
