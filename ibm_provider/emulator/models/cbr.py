import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from ibm_provider.emulator.db.base import Base


def _new_id() -> str:
    return uuid.uuid4().hex


def new_etag() -> str:
    return f'W/"{uuid.uuid4().hex}"'


def _now() -> datetime:
    return datetime.now(UTC)


class CbrZone(Base):
    __tablename__ = "cbr_zones"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    account_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    description: Mapped[str] = mapped_column(String(300), nullable=False, default="")
    addresses: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    excluded: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    etag: Mapped[str] = mapped_column(String(64), nullable=False, default=new_etag)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)
    created_by_id: Mapped[str] = mapped_column(String(64), nullable=False)
    last_modified_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)
    last_modified_by_id: Mapped[str] = mapped_column(String(64), nullable=False)


class CbrRule(Base):
    __tablename__ = "cbr_rules"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    # accountId resource attribute, if any; rules are listed per account
    account_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    description: Mapped[str] = mapped_column(String(300), nullable=False, default="")
    contexts: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    resources: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    etag: Mapped[str] = mapped_column(String(64), nullable=False, default=new_etag)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)
    created_by_id: Mapped[str] = mapped_column(String(64), nullable=False)
    last_modified_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)
    last_modified_by_id: Mapped[str] = mapped_column(String(64), nullable=False)
