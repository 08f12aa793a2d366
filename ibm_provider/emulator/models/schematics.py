from typing import Any

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from ibm_provider.emulator.db.base import Base


class WorkspaceTemplateState(Base):
    __tablename__ = "schematics_template_states"

    workspace_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    template_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    state: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
