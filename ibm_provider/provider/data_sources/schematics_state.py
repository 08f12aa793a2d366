"""ibm_schematics_state: the Terraform state file of a Schematics workspace template."""

import json
from datetime import datetime, timezone

from ibm_provider.infra.schematics.client import GetWorkspaceTemplateStateOptions
from ibm_provider.provider.schema import Attribute, ResourceData, ResourceSchema, ValueType
from ibm_provider.provider.session import ClientSession

SCHEMA = ResourceSchema(
    attributes={
        "workspace_id": Attribute(
            ValueType.STRING,
            required=True,
            description="The ID of the workspace that holds the template.",
        ),
        "template_id": Attribute(
            ValueType.STRING,
            required=True,
            description="The ID of the Terraform template (template_data.id).",
        ),
        "state_store": Attribute(ValueType.STRING, computed=True),
        "state_store_json": Attribute(ValueType.STRING, computed=True),
        "resource_controller_url": Attribute(
            ValueType.STRING,
            computed=True,
            description="Dashboard URL for exploring this workspace.",
        ),
    },
)


async def read(data: ResourceData, session: ClientSession) -> None:
    response = await session.schematics.get_workspace_template_state(
        GetWorkspaceTemplateStateOptions(
            w_id=data.get("workspace_id"), t_id=data.get("template_id")
        )
    )
    state_store = response.result if response.result is not None else {}

    data.set_id(str(datetime.now(timezone.utc)))
    data.set("state_store", str(state_store))
    data.set("state_store_json", json.dumps(state_store, sort_keys=True, indent=0))
    data.set("resource_controller_url", session.resource_controller_url.rstrip("/") + "/schematics")
