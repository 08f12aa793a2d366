from pydantic import Field

from ibm_provider.infra.cbr.models import Address, Resource, RuleContext, ServiceRefTargetType
from ibm_provider.infra.ibm.options import BaseOptions


class CreateZoneOptions(BaseOptions):
    name: str | None = None
    account_id: str | None = None
    description: str | None = None
    addresses: list[Address] | None = None
    excluded: list[Address] | None = None


class ListZonesOptions(BaseOptions):
    account_id: str
    name: str | None = None
    sort: str | None = None


class GetZoneOptions(BaseOptions):
    zone_id: str = Field(min_length=1)


class ReplaceZoneOptions(BaseOptions):
    zone_id: str = Field(min_length=1)
    # Current ETag of the zone; a stale value is rejected by the service
    if_match: str
    name: str | None = None
    account_id: str | None = None
    description: str | None = None
    addresses: list[Address] | None = None
    excluded: list[Address] | None = None


class DeleteZoneOptions(BaseOptions):
    zone_id: str = Field(min_length=1)


class ListAvailableServicerefTargetsOptions(BaseOptions):
    type: ServiceRefTargetType | None = None


class CreateRuleOptions(BaseOptions):
    description: str | None = None
    contexts: list[RuleContext] | None = None
    resources: list[Resource] | None = None


class ListRulesOptions(BaseOptions):
    account_id: str
    region: str | None = None
    resource: str | None = None
    resource_type: str | None = None
    service_instance: str | None = None
    service_name: str | None = None
    service_type: str | None = None
    zone_id: str | None = None
    sort: str | None = None


class GetRuleOptions(BaseOptions):
    rule_id: str = Field(min_length=1)


class ReplaceRuleOptions(BaseOptions):
    rule_id: str = Field(min_length=1)
    if_match: str
    description: str | None = None
    contexts: list[RuleContext] | None = None
    resources: list[Resource] | None = None


class DeleteRuleOptions(BaseOptions):
    rule_id: str = Field(min_length=1)


class GetAccountSettingsOptions(BaseOptions):
    account_id: str = Field(min_length=1)
