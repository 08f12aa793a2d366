from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from ibm_provider.emulator.exceptions import NotFoundError
from ibm_provider.emulator.models.schematics import WorkspaceTemplateState


class SchematicsService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_template_state(self, workspace_id: str, template_id: str) -> dict[str, Any]:
        record = await self._session.get(WorkspaceTemplateState, (workspace_id, template_id))
        if record is None:
            raise NotFoundError("workspace template state", f"{workspace_id}/{template_id}")
        return record.state
