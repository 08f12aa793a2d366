"""
ibm_is_instance_network_interface: one network interface of a VPC instance,
looked up by instance name and interface name.
"""

import logging

from ibm_provider.core.exceptions import InstanceNotFoundError, NetworkInterfaceNotFoundError
from ibm_provider.core.pagination import collect_pages, find_by_name, get_next_start
from ibm_provider.infra.vpc.client import (
    ListInstanceNetworkInterfacesOptions,
    ListInstancesOptions,
)
from ibm_provider.infra.vpc.models import Instance, NetworkInterface
from ibm_provider.provider.flatten import (
    composite_id,
    floating_ips_to_list,
    format_datetime,
    security_groups_to_list,
    subnet_to_map,
)
from ibm_provider.provider.schema import Attribute, ResourceData, ResourceSchema, ValueType
from ibm_provider.provider.session import ClientSession

logger = logging.getLogger(__name__)

_S = ValueType.STRING

_DELETED = {"more_info": Attribute(_S, computed=True)}

_REFERENCE = {
    "crn": Attribute(_S, computed=True),
    "deleted": Attribute(ValueType.LIST, computed=True, elem=_DELETED),
    "href": Attribute(_S, computed=True),
    "id": Attribute(_S, computed=True),
    "name": Attribute(_S, computed=True),
}

SCHEMA = ResourceSchema(
    description="A network interface attached to a virtual server instance.",
    attributes={
        "instance_name": Attribute(_S, required=True, description="The instance name."),
        "network_interface_name": Attribute(
            _S, required=True, description="The network interface name."
        ),
        "allow_ip_spoofing": Attribute(ValueType.BOOL, computed=True),
        "created_at": Attribute(_S, computed=True),
        "floating_ips": Attribute(
            ValueType.LIST,
            computed=True,
            elem={**_REFERENCE, "address": Attribute(_S, computed=True)},
        ),
        "href": Attribute(_S, computed=True),
        "name": Attribute(_S, computed=True),
        "port_speed": Attribute(ValueType.INT, computed=True),
        "primary_ipv4_address": Attribute(_S, computed=True),
        "resource_type": Attribute(_S, computed=True),
        "security_groups": Attribute(ValueType.LIST, computed=True, elem=_REFERENCE),
        "status": Attribute(_S, computed=True),
        "subnet": Attribute(ValueType.LIST, computed=True, elem=_REFERENCE),
        "type": Attribute(_S, computed=True),
    },
)


async def read(data: ResourceData, session: ClientSession) -> None:
    instance_name = data.get("instance_name")
    network_interface_name = data.get("network_interface_name")
    vpc = session.vpc

    async def fetch_page(start: str | None) -> tuple[list[Instance], str | None]:
        page = (await vpc.list_instances(ListInstancesOptions(start=start))).result
        return page.instances, get_next_start(page.next)

    instance = find_by_name(await collect_pages(fetch_page), instance_name)
    if instance is None:
        logger.warning("Instance not found", extra={"instance_name": instance_name})
        raise InstanceNotFoundError(instance_name)

    response = await vpc.list_instance_network_interfaces(
        ListInstanceNetworkInterfacesOptions(instance_id=instance.id)
    )
    network_interface = find_by_name(
        response.result.network_interfaces, network_interface_name
    )
    if network_interface is None:
        logger.warning(
            "Network interface not found",
            extra={"instance_id": instance.id, "network_interface_name": network_interface_name},
        )
        raise NetworkInterfaceNotFoundError(network_interface_name)

    data.set_id(composite_id(instance.id, network_interface.id))
    _set_network_interface(data, network_interface)


def _set_network_interface(data: ResourceData, network_interface: NetworkInterface) -> None:
    data.set("allow_ip_spoofing", network_interface.allow_ip_spoofing)
    data.set("created_at", format_datetime(network_interface.created_at))
    if network_interface.floating_ips is not None:
        data.set("floating_ips", floating_ips_to_list(network_interface.floating_ips))
    data.set("href", network_interface.href)
    data.set("name", network_interface.name)
    data.set("port_speed", network_interface.port_speed)
    data.set("primary_ipv4_address", network_interface.primary_ipv4_address)
    data.set("resource_type", network_interface.resource_type)
    data.set("security_groups", security_groups_to_list(network_interface.security_groups))
    data.set("status", network_interface.status)
    data.set("subnet", [subnet_to_map(network_interface.subnet)])
    data.set("type", network_interface.type)
