"""ibm_cbr_rule data source: read a rule by ID."""

from ibm_provider.infra.cbr.options import GetRuleOptions
from ibm_provider.provider.resources.cbr_rule import (
    COMPUTED_RULE_ATTRIBUTES,
    CONTEXT_BLOCK,
    RESOURCE_BLOCK,
    set_rule,
)
from ibm_provider.provider.schema import Attribute, ResourceData, ResourceSchema, ValueType
from ibm_provider.provider.session import ClientSession

SCHEMA = ResourceSchema(
    attributes={
        "rule_id": Attribute(ValueType.STRING, required=True),
        "description": Attribute(ValueType.STRING, computed=True),
        "contexts": Attribute(ValueType.LIST, computed=True, elem=CONTEXT_BLOCK),
        "resources": Attribute(ValueType.LIST, computed=True, elem=RESOURCE_BLOCK),
        **COMPUTED_RULE_ATTRIBUTES,
    },
)


async def read(data: ResourceData, session: ClientSession) -> None:
    response = await session.cbr.get_rule(GetRuleOptions(rule_id=data.get("rule_id")))
    data.set_id(response.result.id)
    set_rule(data, response.result, response.headers.get("ETag"))
