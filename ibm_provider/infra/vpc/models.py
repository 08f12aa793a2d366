from datetime import datetime

from pydantic import BaseModel, ConfigDict


class _Model(BaseModel):
    model_config = ConfigDict(frozen=True)


class PageLink(_Model):
    href: str
    start: str | None = None


class ReferenceDeleted(_Model):
    """Present on a reference whose target has been deleted."""

    more_info: str


class FloatingIPReference(_Model):
    address: str
    crn: str
    deleted: ReferenceDeleted | None = None
    href: str
    id: str
    name: str


class SecurityGroupReference(_Model):
    crn: str
    deleted: ReferenceDeleted | None = None
    href: str
    id: str
    name: str


class SubnetReference(_Model):
    crn: str
    deleted: ReferenceDeleted | None = None
    href: str
    id: str
    name: str


class NetworkInterface(_Model):
    allow_ip_spoofing: bool
    created_at: datetime
    floating_ips: list[FloatingIPReference] | None = None
    href: str
    id: str
    name: str
    port_speed: int
    primary_ipv4_address: str
    resource_type: str
    security_groups: list[SecurityGroupReference]
    status: str
    subnet: SubnetReference
    type: str


class NetworkInterfaceUnpaginatedCollection(_Model):
    network_interfaces: list[NetworkInterface]


class Instance(_Model):
    id: str
    crn: str
    href: str
    name: str
    status: str
    created_at: datetime
    resource_type: str = "instance"


class InstanceCollection(_Model):
    first: PageLink
    limit: int
    next: PageLink | None = None
    total_count: int
    instances: list[Instance]
