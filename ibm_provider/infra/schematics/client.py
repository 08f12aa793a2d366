from typing import Any

import httpx
from pydantic import Field

from ibm_provider.infra.ibm.auth import Authenticator
from ibm_provider.infra.ibm.base_service import BaseService, DetailedResponse
from ibm_provider.infra.ibm.options import BaseOptions
from ibm_provider.infra.ibm.request_builder import Operation

DEFAULT_SERVICE_URL = "https://schematics.cloud.ibm.com"
DEFAULT_SERVICE_NAME = "schematics"


class GetWorkspaceTemplateStateOptions(BaseOptions):
    # Workspace ID
    w_id: str = Field(min_length=1)
    # Template ID within the workspace (template_data.id)
    t_id: str = Field(min_length=1)


GET_WORKSPACE_TEMPLATE_STATE = Operation(
    "GetWorkspaceTemplateState",
    "GET",
    "/v1/workspaces/{w_id}/runtime_data/{t_id}/state_store",
    path_params=("w_id", "t_id"),
)


class SchematicsV1(BaseService):
    def __init__(
        self,
        authenticator: Authenticator,
        service_url: str = DEFAULT_SERVICE_URL,
        *,
        http_client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 60.0,
    ) -> None:
        super().__init__(
            service_url or DEFAULT_SERVICE_URL,
            authenticator,
            service_name=DEFAULT_SERVICE_NAME,
            http_client=http_client,
            transport=transport,
            timeout=timeout,
        )

    async def get_workspace_template_state(
        self, options: GetWorkspaceTemplateStateOptions
    ) -> DetailedResponse[Any]:
        """Return the Terraform state file of one workspace template as decoded JSON."""
        return await self.invoke(GET_WORKSPACE_TEMPLATE_STATE, options)
