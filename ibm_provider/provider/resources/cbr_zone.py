"""
ibm_cbr_zone: a context-based-restrictions network zone.

Updates are full replacements guarded by the zone's ETag, kept in the
computed ``version`` attribute.
"""

import logging

from ibm_provider.core.exceptions import ApiError
from ibm_provider.infra.cbr.models import Zone
from ibm_provider.infra.cbr.options import (
    CreateZoneOptions,
    DeleteZoneOptions,
    GetZoneOptions,
    ReplaceZoneOptions,
)
from ibm_provider.provider.flatten import addresses_from_list, addresses_to_list, format_datetime
from ibm_provider.provider.schema import Attribute, ResourceData, ResourceSchema, ValueType
from ibm_provider.provider.session import ClientSession

logger = logging.getLogger(__name__)

_S = ValueType.STRING

SERVICE_REF_BLOCK = {
    "account_id": Attribute(_S, required=True),
    "service_type": Attribute(_S, optional=True),
    "service_name": Attribute(_S, optional=True),
    "service_instance": Attribute(_S, optional=True),
}

ADDRESS_BLOCK = {
    "type": Attribute(
        _S, required=True, description="ipAddress, ipRange, subnet, vpc or serviceRef."
    ),
    "value": Attribute(_S, optional=True, description="Set for every type except serviceRef."),
    "ref": Attribute(ValueType.LIST, optional=True, elem=SERVICE_REF_BLOCK),
}

COMPUTED_ZONE_ATTRIBUTES = {
    "crn": Attribute(_S, computed=True),
    "address_count": Attribute(ValueType.INT, computed=True),
    "excluded_count": Attribute(ValueType.INT, computed=True),
    "href": Attribute(_S, computed=True),
    "created_at": Attribute(_S, computed=True),
    "created_by_id": Attribute(_S, computed=True),
    "last_modified_at": Attribute(_S, computed=True),
    "last_modified_by_id": Attribute(_S, computed=True),
    "version": Attribute(_S, computed=True, description="ETag of the last read or write."),
}

SCHEMA = ResourceSchema(
    attributes={
        "name": Attribute(_S, optional=True, description="The name of the zone."),
        "account_id": Attribute(_S, optional=True, description="The owning account."),
        "description": Attribute(_S, optional=True),
        "addresses": Attribute(ValueType.LIST, required=True, elem=ADDRESS_BLOCK),
        "excluded": Attribute(ValueType.LIST, optional=True, elem=ADDRESS_BLOCK),
        **COMPUTED_ZONE_ATTRIBUTES,
    },
)


def set_zone(data: ResourceData, zone: Zone, etag: str | None) -> None:
    data.set("name", zone.name)
    data.set("account_id", zone.account_id)
    data.set("description", zone.description)
    data.set("addresses", addresses_to_list(zone.addresses))
    data.set("excluded", addresses_to_list(zone.excluded))
    data.set("crn", zone.crn)
    data.set("address_count", zone.address_count)
    data.set("excluded_count", zone.excluded_count)
    data.set("href", zone.href)
    data.set("created_at", format_datetime(zone.created_at))
    data.set("created_by_id", zone.created_by_id)
    data.set("last_modified_at", format_datetime(zone.last_modified_at))
    data.set("last_modified_by_id", zone.last_modified_by_id)
    if etag:
        data.set("version", etag)


def _zone_body(data: ResourceData) -> dict:
    return {
        "name": data.get_config("name"),
        "account_id": data.get_config("account_id"),
        "description": data.get_config("description"),
        "addresses": addresses_from_list(data.get_config("addresses")),
        "excluded": addresses_from_list(data.get_config("excluded")) or None,
    }


async def create(data: ResourceData, session: ClientSession) -> None:
    response = await session.cbr.create_zone(CreateZoneOptions(**_zone_body(data)))
    data.set_id(response.result.id)
    set_zone(data, response.result, response.headers.get("ETag"))


async def read(data: ResourceData, session: ClientSession) -> None:
    try:
        response = await session.cbr.get_zone(GetZoneOptions(zone_id=data.id))
    except ApiError as exc:
        if exc.status_code == 404:
            logger.warning("Zone gone, removing from state", extra={"zone_id": data.id})
            data.set_id("")
            return
        raise
    set_zone(data, response.result, response.headers.get("ETag"))


async def update(data: ResourceData, session: ClientSession) -> None:
    response = await session.cbr.replace_zone(
        ReplaceZoneOptions(
            zone_id=data.id, if_match=data.get("version", "*"), **_zone_body(data)
        )
    )
    set_zone(data, response.result, response.headers.get("ETag"))


async def delete(data: ResourceData, session: ClientSession) -> None:
    await session.cbr.delete_zone(DeleteZoneOptions(zone_id=data.id))
    data.set_id("")
