import httpx
from pydantic import Field

from ibm_provider.infra.ibm.auth import Authenticator
from ibm_provider.infra.ibm.base_service import BaseService, DetailedResponse
from ibm_provider.infra.ibm.options import BaseOptions
from ibm_provider.infra.ibm.request_builder import Operation
from ibm_provider.infra.vpc.models import (
    Instance,
    InstanceCollection,
    NetworkInterface,
    NetworkInterfaceUnpaginatedCollection,
)

DEFAULT_SERVICE_URL = "https://us-south.iaas.cloud.ibm.com/v1"
DEFAULT_SERVICE_NAME = "vpc"
DEFAULT_API_VERSION = "2021-10-12"


class ListInstancesOptions(BaseOptions):
    start: str | None = None
    limit: int | None = Field(None, ge=1, le=100)
    name: str | None = None


class GetInstanceOptions(BaseOptions):
    id: str = Field(min_length=1)


class ListInstanceNetworkInterfacesOptions(BaseOptions):
    instance_id: str = Field(min_length=1)


class GetInstanceNetworkInterfaceOptions(BaseOptions):
    instance_id: str = Field(min_length=1)
    id: str = Field(min_length=1)


LIST_INSTANCES = Operation(
    "ListInstances", "GET", "/instances", query_params=("start", "limit", "name")
)
GET_INSTANCE = Operation("GetInstance", "GET", "/instances/{id}", path_params=("id",))
LIST_INSTANCE_NETWORK_INTERFACES = Operation(
    "ListInstanceNetworkInterfaces",
    "GET",
    "/instances/{instance_id}/network_interfaces",
    path_params=("instance_id",),
)
GET_INSTANCE_NETWORK_INTERFACE = Operation(
    "GetInstanceNetworkInterface",
    "GET",
    "/instances/{instance_id}/network_interfaces/{id}",
    path_params=("instance_id", "id"),
)


class VpcV1(BaseService):
    """Read access to VPC virtual server instances and their network interfaces.

    Every request carries the mandatory ``version`` and ``generation`` query
    parameters.
    """

    def __init__(
        self,
        authenticator: Authenticator,
        service_url: str = DEFAULT_SERVICE_URL,
        *,
        version: str = DEFAULT_API_VERSION,
        generation: int = 2,
        http_client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 60.0,
    ) -> None:
        super().__init__(
            service_url or DEFAULT_SERVICE_URL,
            authenticator,
            service_name=DEFAULT_SERVICE_NAME,
            default_query={"version": version, "generation": generation},
            http_client=http_client,
            transport=transport,
            timeout=timeout,
        )

    async def list_instances(
        self, options: ListInstancesOptions | None = None
    ) -> DetailedResponse[InstanceCollection]:
        return await self.invoke(
            LIST_INSTANCES, options or ListInstancesOptions(), InstanceCollection
        )

    async def get_instance(self, options: GetInstanceOptions) -> DetailedResponse[Instance]:
        return await self.invoke(GET_INSTANCE, options, Instance)

    async def list_instance_network_interfaces(
        self, options: ListInstanceNetworkInterfacesOptions
    ) -> DetailedResponse[NetworkInterfaceUnpaginatedCollection]:
        return await self.invoke(
            LIST_INSTANCE_NETWORK_INTERFACES, options, NetworkInterfaceUnpaginatedCollection
        )

    async def get_instance_network_interface(
        self, options: GetInstanceNetworkInterfaceOptions
    ) -> DetailedResponse[NetworkInterface]:
        return await self.invoke(GET_INSTANCE_NETWORK_INTERFACE, options, NetworkInterface)
