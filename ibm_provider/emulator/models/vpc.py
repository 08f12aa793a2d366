from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ibm_provider.emulator.db.base import Base


class Instance(Base):
    __tablename__ = "vpc_instances"

    # Ids sort in creation order; the list cursor is the first id of the next page
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(63), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="running")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )


class NetworkInterface(Base):
    __tablename__ = "vpc_network_interfaces"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    instance_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("vpc_instances.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(63), nullable=False)
    type: Mapped[str] = mapped_column(String(16), nullable=False, default="primary")
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="available")
    allow_ip_spoofing: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    port_speed: Mapped[int] = mapped_column(Integer, nullable=False, default=1000)
    primary_ipv4_address: Mapped[str] = mapped_column(String(45), nullable=False)
    # Reference objects exactly as returned on the wire
    subnet: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    security_groups: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    floating_ips: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )
