"""ibm_cbr_zone data source: read a network zone by ID."""

from ibm_provider.infra.cbr.options import GetZoneOptions
from ibm_provider.provider.resources.cbr_zone import (
    ADDRESS_BLOCK,
    COMPUTED_ZONE_ATTRIBUTES,
    set_zone,
)
from ibm_provider.provider.schema import Attribute, ResourceData, ResourceSchema, ValueType
from ibm_provider.provider.session import ClientSession

SCHEMA = ResourceSchema(
    attributes={
        "zone_id": Attribute(ValueType.STRING, required=True),
        "name": Attribute(ValueType.STRING, computed=True),
        "account_id": Attribute(ValueType.STRING, computed=True),
        "description": Attribute(ValueType.STRING, computed=True),
        "addresses": Attribute(ValueType.LIST, computed=True, elem=ADDRESS_BLOCK),
        "excluded": Attribute(ValueType.LIST, computed=True, elem=ADDRESS_BLOCK),
        **COMPUTED_ZONE_ATTRIBUTES,
    },
)


async def read(data: ResourceData, session: ClientSession) -> None:
    response = await session.cbr.get_zone(GetZoneOptions(zone_id=data.get("zone_id")))
    data.set_id(response.result.id)
    set_zone(data, response.result, response.headers.get("ETag"))
