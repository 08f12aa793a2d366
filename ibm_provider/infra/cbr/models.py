import enum
from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from ibm_provider.infra.ibm.unmarshal import unmarshal_with


class _Model(BaseModel):
    model_config = ConfigDict(frozen=True)


class AddressType(str, enum.Enum):
    IP_ADDRESS = "ipAddress"
    IP_RANGE = "ipRange"
    SUBNET = "subnet"
    VPC = "vpc"
    SERVICE_REF = "serviceRef"


class ServiceRefTargetType(str, enum.Enum):
    ALL = "all"
    PLATFORM_SERVICE = "platform_service"


class ServiceRefValue(_Model):
    account_id: str
    service_type: str | None = None
    service_name: str | None = None
    service_instance: str | None = None


class AddressIPAddress(_Model):
    type: Literal["ipAddress"] = "ipAddress"
    value: str


class AddressIPAddressRange(_Model):
    type: Literal["ipRange"] = "ipRange"
    value: str


class AddressSubnet(_Model):
    type: Literal["subnet"] = "subnet"
    value: str


class AddressVPC(_Model):
    type: Literal["vpc"] = "vpc"
    value: str


class AddressServiceRef(_Model):
    type: Literal["serviceRef"] = "serviceRef"
    ref: ServiceRefValue


Address = Annotated[
    AddressIPAddress | AddressIPAddressRange | AddressSubnet | AddressVPC | AddressServiceRef,
    Field(discriminator="type"),
]

_address_adapter: TypeAdapter[Address] = TypeAdapter(Address)


def unmarshal_address(data: Any) -> Address:
    return unmarshal_with(_address_adapter, data, "Address")


def marshal_address(address: Address) -> dict[str, Any]:
    return _address_adapter.dump_python(address, mode="json", exclude_none=True)


class Zone(_Model):
    id: str
    crn: str
    address_count: int
    excluded_count: int
    name: str
    account_id: str
    description: str
    addresses: list[Address]
    excluded: list[Address]
    href: str
    created_at: datetime
    created_by_id: str
    last_modified_at: datetime
    last_modified_by_id: str


class ZoneSummary(_Model):
    id: str
    crn: str
    name: str
    description: str | None = None
    addresses_preview: list[Address]
    address_count: int
    excluded_count: int
    href: str
    created_at: datetime
    created_by_id: str
    last_modified_at: datetime
    last_modified_by_id: str


class ZoneList(_Model):
    count: int
    zones: list[ZoneSummary]


class RuleContextAttribute(_Model):
    name: str
    value: str


class RuleContext(_Model):
    attributes: list[RuleContextAttribute]


class ResourceAttribute(_Model):
    name: str
    value: str
    operator: str | None = None


class ResourceTagAttribute(_Model):
    name: str
    value: str
    operator: str | None = None


class Resource(_Model):
    attributes: list[ResourceAttribute]
    tags: list[ResourceTagAttribute] | None = None


class Rule(_Model):
    id: str
    crn: str
    description: str
    contexts: list[RuleContext]
    resources: list[Resource]
    href: str
    created_at: datetime
    created_by_id: str
    last_modified_at: datetime
    last_modified_by_id: str


class RuleList(_Model):
    count: int
    rules: list[Rule]


class ServiceRefTarget(_Model):
    service_name: str
    service_type: str | None = None


class ServiceRefTargetList(_Model):
    count: int
    targets: list[ServiceRefTarget]


class AccountSettings(_Model):
    id: str
    crn: str
    rule_count_limit: int
    zone_count_limit: int
    current_rule_count: int
    current_zone_count: int
    href: str
    created_at: datetime
    created_by_id: str
    last_modified_at: datetime
    last_modified_by_id: str
