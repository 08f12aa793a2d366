"""ibm_cbr_rule: a context-based-restrictions rule binding contexts to resources."""

import logging

from ibm_provider.core.exceptions import ApiError
from ibm_provider.infra.cbr.models import Rule
from ibm_provider.infra.cbr.options import (
    CreateRuleOptions,
    DeleteRuleOptions,
    GetRuleOptions,
    ReplaceRuleOptions,
)
from ibm_provider.provider.flatten import (
    format_datetime,
    resource_from_map,
    resource_to_map,
    rule_context_from_map,
    rule_context_to_map,
)
from ibm_provider.provider.schema import Attribute, ResourceData, ResourceSchema, ValueType
from ibm_provider.provider.session import ClientSession

logger = logging.getLogger(__name__)

_S = ValueType.STRING

_NAME_VALUE = {
    "name": Attribute(_S, required=True),
    "value": Attribute(_S, required=True),
}

_MATCHER = {**_NAME_VALUE, "operator": Attribute(_S, optional=True)}

CONTEXT_BLOCK = {
    "attributes": Attribute(ValueType.LIST, required=True, elem=_NAME_VALUE),
}

RESOURCE_BLOCK = {
    "attributes": Attribute(ValueType.LIST, required=True, elem=_MATCHER),
    "tags": Attribute(ValueType.LIST, optional=True, elem=_MATCHER),
}

COMPUTED_RULE_ATTRIBUTES = {
    "crn": Attribute(_S, computed=True),
    "href": Attribute(_S, computed=True),
    "created_at": Attribute(_S, computed=True),
    "created_by_id": Attribute(_S, computed=True),
    "last_modified_at": Attribute(_S, computed=True),
    "last_modified_by_id": Attribute(_S, computed=True),
    "version": Attribute(_S, computed=True),
}

SCHEMA = ResourceSchema(
    attributes={
        "description": Attribute(_S, optional=True),
        "contexts": Attribute(ValueType.LIST, required=True, elem=CONTEXT_BLOCK),
        "resources": Attribute(ValueType.LIST, required=True, elem=RESOURCE_BLOCK),
        **COMPUTED_RULE_ATTRIBUTES,
    },
)


def set_rule(data: ResourceData, rule: Rule, etag: str | None) -> None:
    data.set("description", rule.description)
    data.set("contexts", [rule_context_to_map(context) for context in rule.contexts])
    data.set("resources", [resource_to_map(resource) for resource in rule.resources])
    data.set("crn", rule.crn)
    data.set("href", rule.href)
    data.set("created_at", format_datetime(rule.created_at))
    data.set("created_by_id", rule.created_by_id)
    data.set("last_modified_at", format_datetime(rule.last_modified_at))
    data.set("last_modified_by_id", rule.last_modified_by_id)
    if etag:
        data.set("version", etag)


def _rule_body(data: ResourceData) -> dict:
    return {
        "description": data.get_config("description"),
        "contexts": [rule_context_from_map(item) for item in data.get_config("contexts", [])],
        "resources": [resource_from_map(item) for item in data.get_config("resources", [])],
    }


async def create(data: ResourceData, session: ClientSession) -> None:
    response = await session.cbr.create_rule(CreateRuleOptions(**_rule_body(data)))
    data.set_id(response.result.id)
    set_rule(data, response.result, response.headers.get("ETag"))


async def read(data: ResourceData, session: ClientSession) -> None:
    try:
        response = await session.cbr.get_rule(GetRuleOptions(rule_id=data.id))
    except ApiError as exc:
        if exc.status_code == 404:
            logger.warning("Rule gone, removing from state", extra={"rule_id": data.id})
            data.set_id("")
            return
        raise
    set_rule(data, response.result, response.headers.get("ETag"))


async def update(data: ResourceData, session: ClientSession) -> None:
    response = await session.cbr.replace_rule(
        ReplaceRuleOptions(rule_id=data.id, if_match=data.get("version", "*"), **_rule_body(data))
    )
    set_rule(data, response.result, response.headers.get("ETag"))


async def delete(data: ResourceData, session: ClientSession) -> None:
    await session.cbr.delete_rule(DeleteRuleOptions(rule_id=data.id))
    data.set_id("")
