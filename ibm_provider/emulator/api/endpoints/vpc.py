from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from ibm_provider.emulator.api.common import as_utc, base_url
from ibm_provider.emulator.api.pagination import CursorPaginationParams
from ibm_provider.emulator.dependencies import get_vpc_service
from ibm_provider.emulator.models.vpc import Instance as InstanceRecord
from ibm_provider.emulator.models.vpc import NetworkInterface as NetworkInterfaceRecord
from ibm_provider.emulator.services.vpc_service import VpcService
from ibm_provider.infra.vpc.models import (
    Instance,
    InstanceCollection,
    NetworkInterface,
    NetworkInterfaceUnpaginatedCollection,
    PageLink,
)

router = APIRouter(prefix="/v1", tags=["vpc"])

VpcServiceDep = Annotated[VpcService, Depends(get_vpc_service)]


class ApiVersionParams:
    # Every VPC call must name the API version it was written against
    def __init__(
        self,
        version: str = Query(..., pattern=r"^\d{4}-\d{2}-\d{2}$"),
        generation: int = Query(default=2, ge=1, le=2),
    ) -> None:
        self.version = version
        self.generation = generation


VersionDep = Annotated[ApiVersionParams, Depends()]


def _instance_crn(instance_id: str) -> str:
    return f"crn:v1:bluemix:public:is:us-south-1:a/emulator::instance:{instance_id}"


def _to_instance(request: Request, instance: InstanceRecord) -> Instance:
    return Instance(
        id=instance.id,
        crn=_instance_crn(instance.id),
        href=f"{base_url(request)}/v1/instances/{instance.id}",
        name=instance.name,
        status=instance.status,
        created_at=as_utc(instance.created_at),
    )


def _to_network_interface(request: Request, interface: NetworkInterfaceRecord) -> NetworkInterface:
    return NetworkInterface(
        allow_ip_spoofing=interface.allow_ip_spoofing,
        created_at=as_utc(interface.created_at),
        floating_ips=interface.floating_ips,
        href=(
            f"{base_url(request)}/v1/instances/{interface.instance_id}"
            f"/network_interfaces/{interface.id}"
        ),
        id=interface.id,
        name=interface.name,
        port_speed=interface.port_speed,
        primary_ipv4_address=interface.primary_ipv4_address,
        resource_type="network_interface",
        security_groups=interface.security_groups,
        status=interface.status,
        subnet=interface.subnet,
        type=interface.type,
    )


@router.get(
    "/instances",
    response_model=InstanceCollection,
    response_model_exclude_none=True,
    summary="List instances (cursor paginated)",
)
async def list_instances(
    request: Request,
    _version: VersionDep,
    pagination: Annotated[CursorPaginationParams, Depends()],
    service: VpcServiceDep,
    name: str | None = None,
) -> InstanceCollection:
    instances, total, next_start = await service.list_instances(
        start=pagination.start, limit=pagination.limit, name=name
    )
    collection_href = f"{base_url(request)}/v1/instances?limit={pagination.limit}"
    next_link = None
    if next_start is not None:
        next_link = PageLink(href=f"{collection_href}&start={next_start}", start=next_start)
    return InstanceCollection(
        first=PageLink(href=collection_href),
        limit=pagination.limit,
        next=next_link,
        total_count=total,
        instances=[_to_instance(request, i) for i in instances],
    )


@router.get(
    "/instances/{instance_id}",
    response_model=Instance,
    summary="Get an instance",
)
async def get_instance(
    instance_id: str, request: Request, _version: VersionDep, service: VpcServiceDep
) -> Instance:
    return _to_instance(request, await service.get_instance(instance_id))


@router.get(
    "/instances/{instance_id}/network_interfaces",
    response_model=NetworkInterfaceUnpaginatedCollection,
    response_model_exclude_none=True,
    summary="List the network interfaces of an instance",
)
async def list_instance_network_interfaces(
    instance_id: str, request: Request, _version: VersionDep, service: VpcServiceDep
) -> NetworkInterfaceUnpaginatedCollection:
    interfaces = await service.list_network_interfaces(instance_id)
    return NetworkInterfaceUnpaginatedCollection(
        network_interfaces=[_to_network_interface(request, i) for i in interfaces]
    )


@router.get(
    "/instances/{instance_id}/network_interfaces/{interface_id}",
    response_model=NetworkInterface,
    response_model_exclude_none=True,
    summary="Get one network interface of an instance",
)
async def get_instance_network_interface(
    instance_id: str,
    interface_id: str,
    request: Request,
    _version: VersionDep,
    service: VpcServiceDep,
) -> NetworkInterface:
    interface = await service.get_network_interface(instance_id, interface_id)
    return _to_network_interface(request, interface)
