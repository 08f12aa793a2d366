from typing import Annotated, Any

from fastapi import APIRouter, Depends

from ibm_provider.emulator.dependencies import get_schematics_service
from ibm_provider.emulator.services.schematics_service import SchematicsService

router = APIRouter(prefix="/v1/workspaces", tags=["schematics"])


@router.get(
    "/{w_id}/runtime_data/{t_id}/state_store",
    summary="Get the Terraform state file of a workspace template",
)
async def get_workspace_template_state(
    w_id: str,
    t_id: str,
    service: Annotated[SchematicsService, Depends(get_schematics_service)],
) -> dict[str, Any]:
    return await service.get_template_state(w_id, t_id)
