from datetime import UTC, datetime

from fastapi import Request


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def base_url(request: Request) -> str:
    return str(request.base_url).rstrip("/")
