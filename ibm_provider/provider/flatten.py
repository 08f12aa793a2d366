"""
Flatteners and expanders between API models and schema attribute trees.

Flatteners are one level deep: each nested reference type has its own
function, and absent nested objects or optional fields are left out of the
resulting map instead of appearing as empty values.
"""

from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any, assert_never

from ibm_provider.core.exceptions import SchemaError
from ibm_provider.infra.cbr.models import (
    Address,
    AddressIPAddress,
    AddressIPAddressRange,
    AddressServiceRef,
    AddressSubnet,
    AddressType,
    AddressVPC,
    Resource,
    ResourceAttribute,
    ResourceTagAttribute,
    RuleContext,
    RuleContextAttribute,
    ServiceRefValue,
)
from ibm_provider.infra.vpc.models import (
    FloatingIPReference,
    ReferenceDeleted,
    SecurityGroupReference,
    SubnetReference,
)


def format_datetime(value: datetime | None) -> str | None:
    """Render a timestamp as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def composite_id(parent_id: str, child_id: str) -> str:
    return f"{parent_id}/{child_id}"


def _compact(values: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


# --- VPC references ---


def deleted_to_map(deleted: ReferenceDeleted) -> dict[str, Any]:
    return _compact({"more_info": deleted.more_info})


def _reference_to_map(
    reference: FloatingIPReference | SecurityGroupReference | SubnetReference,
) -> dict[str, Any]:
    result = _compact(
        {
            "crn": reference.crn,
            "href": reference.href,
            "id": reference.id,
            "name": reference.name,
        }
    )
    if reference.deleted is not None:
        result["deleted"] = [deleted_to_map(reference.deleted)]
    return result


def floating_ip_to_map(floating_ip: FloatingIPReference) -> dict[str, Any]:
    result = _reference_to_map(floating_ip)
    result["address"] = floating_ip.address
    return result


def security_group_to_map(security_group: SecurityGroupReference) -> dict[str, Any]:
    return _reference_to_map(security_group)


def subnet_to_map(subnet: SubnetReference) -> dict[str, Any]:
    return _reference_to_map(subnet)


def floating_ips_to_list(
    floating_ips: Iterable[FloatingIPReference] | None,
) -> list[dict[str, Any]]:
    return [floating_ip_to_map(item) for item in floating_ips or ()]


def security_groups_to_list(
    security_groups: Iterable[SecurityGroupReference] | None,
) -> list[dict[str, Any]]:
    return [security_group_to_map(item) for item in security_groups or ()]


# --- CBR addresses ---


def service_ref_to_map(ref: ServiceRefValue) -> dict[str, Any]:
    return _compact(
        {
            "account_id": ref.account_id,
            "service_type": ref.service_type,
            "service_name": ref.service_name,
            "service_instance": ref.service_instance,
        }
    )


def address_to_map(address: Address) -> dict[str, Any]:
    match address:
        case AddressIPAddress() | AddressIPAddressRange() | AddressSubnet() | AddressVPC():
            return {"type": address.type, "value": address.value}
        case AddressServiceRef():
            return {"type": address.type, "ref": [service_ref_to_map(address.ref)]}
        case _:
            assert_never(address)


def addresses_to_list(addresses: Iterable[Address] | None) -> list[dict[str, Any]]:
    return [address_to_map(address) for address in addresses or ()]


def address_from_map(values: Mapping[str, Any]) -> Address:
    raw_type = values.get("type")
    try:
        address_type = AddressType(raw_type)
    except ValueError:
        raise SchemaError(f"unsupported address type {raw_type!r}") from None

    if address_type is AddressType.SERVICE_REF:
        refs = values.get("ref") or []
        if not refs:
            raise SchemaError("a serviceRef address needs a ref block")
        return AddressServiceRef(ref=ServiceRefValue(**_compact(refs[0])))

    value = values.get("value")
    if not value:
        raise SchemaError(f"a {address_type.value} address needs a value")
    if address_type is AddressType.IP_ADDRESS:
        return AddressIPAddress(value=value)
    if address_type is AddressType.IP_RANGE:
        return AddressIPAddressRange(value=value)
    if address_type is AddressType.SUBNET:
        return AddressSubnet(value=value)
    return AddressVPC(value=value)


def addresses_from_list(values: Iterable[Mapping[str, Any]] | None) -> list[Address]:
    return [address_from_map(item) for item in values or ()]


# --- CBR rules ---


def rule_context_to_map(context: RuleContext) -> dict[str, Any]:
    return {
        "attributes": [{"name": a.name, "value": a.value} for a in context.attributes],
    }


def resource_to_map(resource: Resource) -> dict[str, Any]:
    result: dict[str, Any] = {
        "attributes": [
            _compact({"name": a.name, "value": a.value, "operator": a.operator})
            for a in resource.attributes
        ],
    }
    if resource.tags is not None:
        result["tags"] = [
            _compact({"name": t.name, "value": t.value, "operator": t.operator})
            for t in resource.tags
        ]
    return result


def rule_context_from_map(values: Mapping[str, Any]) -> RuleContext:
    return RuleContext(
        attributes=[
            RuleContextAttribute(name=item["name"], value=item["value"])
            for item in values.get("attributes") or ()
        ]
    )


def resource_from_map(values: Mapping[str, Any]) -> Resource:
    tags = values.get("tags")
    return Resource(
        attributes=[ResourceAttribute(**_compact(item)) for item in values.get("attributes") or ()],
        tags=[ResourceTagAttribute(**_compact(item)) for item in tags] if tags else None,
    )
