"""
ContextBasedRestrictionsV1: network zones, rules and account settings.

Each public method is one declared Operation executed by the shared
BaseService; the options object carries everything the call sends.
"""

import logging

import httpx

from ibm_provider.infra.cbr.models import (
    AccountSettings,
    Rule,
    RuleList,
    ServiceRefTargetList,
    Zone,
    ZoneList,
)
from ibm_provider.infra.cbr.options import (
    CreateRuleOptions,
    CreateZoneOptions,
    DeleteRuleOptions,
    DeleteZoneOptions,
    GetAccountSettingsOptions,
    GetRuleOptions,
    GetZoneOptions,
    ListAvailableServicerefTargetsOptions,
    ListRulesOptions,
    ListZonesOptions,
    ReplaceRuleOptions,
    ReplaceZoneOptions,
)
from ibm_provider.infra.ibm.auth import Authenticator
from ibm_provider.infra.ibm.base_service import BaseService, DetailedResponse
from ibm_provider.infra.ibm.request_builder import Operation

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_URL = "https://cbr.cloud.ibm.com"
DEFAULT_SERVICE_NAME = "context_based_restrictions"

_ZONE_BODY = ("name", "account_id", "description", "addresses", "excluded")
_RULE_BODY = ("description", "contexts", "resources")
_IF_MATCH = {"If-Match": "if_match"}

CREATE_ZONE = Operation("CreateZone", "POST", "/v1/zones", body_fields=_ZONE_BODY)
LIST_ZONES = Operation(
    "ListZones",
    "GET",
    "/v1/zones",
    query_params=("account_id", "name", "sort"),
    required=("account_id",),
)
GET_ZONE = Operation("GetZone", "GET", "/v1/zones/{zone_id}", path_params=("zone_id",))
REPLACE_ZONE = Operation(
    "ReplaceZone",
    "PUT",
    "/v1/zones/{zone_id}",
    path_params=("zone_id",),
    header_params=_IF_MATCH,
    required=("if_match",),
    body_fields=_ZONE_BODY,
)
DELETE_ZONE = Operation(
    "DeleteZone", "DELETE", "/v1/zones/{zone_id}", path_params=("zone_id",), accept_json=False
)
LIST_AVAILABLE_SERVICEREF_TARGETS = Operation(
    "ListAvailableServicerefTargets",
    "GET",
    "/v1/zones/serviceref_targets",
    query_params=("type",),
)
CREATE_RULE = Operation("CreateRule", "POST", "/v1/rules", body_fields=_RULE_BODY)
LIST_RULES = Operation(
    "ListRules",
    "GET",
    "/v1/rules",
    query_params=(
        "account_id",
        "region",
        "resource",
        "resource_type",
        "service_instance",
        "service_name",
        "service_type",
        "zone_id",
        "sort",
    ),
    required=("account_id",),
)
GET_RULE = Operation("GetRule", "GET", "/v1/rules/{rule_id}", path_params=("rule_id",))
REPLACE_RULE = Operation(
    "ReplaceRule",
    "PUT",
    "/v1/rules/{rule_id}",
    path_params=("rule_id",),
    header_params=_IF_MATCH,
    required=("if_match",),
    body_fields=_RULE_BODY,
)
DELETE_RULE = Operation(
    "DeleteRule", "DELETE", "/v1/rules/{rule_id}", path_params=("rule_id",), accept_json=False
)
GET_ACCOUNT_SETTINGS = Operation(
    "GetAccountSettings",
    "GET",
    "/v1/account_settings/{account_id}",
    path_params=("account_id",),
)


class ContextBasedRestrictionsV1(BaseService):
    """Create, list, get, replace and delete network zones and rules; read account settings."""

    def __init__(
        self,
        authenticator: Authenticator,
        service_url: str = DEFAULT_SERVICE_URL,
        *,
        http_client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 60.0,
    ) -> None:
        super().__init__(
            service_url or DEFAULT_SERVICE_URL,
            authenticator,
            service_name=DEFAULT_SERVICE_NAME,
            http_client=http_client,
            transport=transport,
            timeout=timeout,
        )

    # --- Zones ---

    async def create_zone(self, options: CreateZoneOptions) -> DetailedResponse[Zone]:
        response = await self.invoke(CREATE_ZONE, options, Zone)
        zone_id = response.result.id if response.result is not None else None
        logger.info("Zone created", extra={"zone_id": zone_id, "account_id": options.account_id})
        return response

    async def list_zones(self, options: ListZonesOptions) -> DetailedResponse[ZoneList]:
        return await self.invoke(LIST_ZONES, options, ZoneList)

    async def get_zone(self, options: GetZoneOptions) -> DetailedResponse[Zone]:
        return await self.invoke(GET_ZONE, options, Zone)

    async def replace_zone(self, options: ReplaceZoneOptions) -> DetailedResponse[Zone]:
        response = await self.invoke(REPLACE_ZONE, options, Zone)
        logger.info("Zone replaced", extra={"zone_id": options.zone_id})
        return response

    async def delete_zone(self, options: DeleteZoneOptions) -> DetailedResponse[None]:
        response = await self.invoke(DELETE_ZONE, options)
        logger.info("Zone deleted", extra={"zone_id": options.zone_id})
        return response

    async def list_available_serviceref_targets(
        self, options: ListAvailableServicerefTargetsOptions | None = None
    ) -> DetailedResponse[ServiceRefTargetList]:
        return await self.invoke(
            LIST_AVAILABLE_SERVICEREF_TARGETS,
            options or ListAvailableServicerefTargetsOptions(),
            ServiceRefTargetList,
        )

    # --- Rules ---

    async def create_rule(self, options: CreateRuleOptions) -> DetailedResponse[Rule]:
        response = await self.invoke(CREATE_RULE, options, Rule)
        rule_id = response.result.id if response.result is not None else None
        logger.info("Rule created", extra={"rule_id": rule_id})
        return response

    async def list_rules(self, options: ListRulesOptions) -> DetailedResponse[RuleList]:
        return await self.invoke(LIST_RULES, options, RuleList)

    async def get_rule(self, options: GetRuleOptions) -> DetailedResponse[Rule]:
        return await self.invoke(GET_RULE, options, Rule)

    async def replace_rule(self, options: ReplaceRuleOptions) -> DetailedResponse[Rule]:
        response = await self.invoke(REPLACE_RULE, options, Rule)
        logger.info("Rule replaced", extra={"rule_id": options.rule_id})
        return response

    async def delete_rule(self, options: DeleteRuleOptions) -> DetailedResponse[None]:
        response = await self.invoke(DELETE_RULE, options)
        logger.info("Rule deleted", extra={"rule_id": options.rule_id})
        return response

    # --- Account settings ---

    async def get_account_settings(
        self, options: GetAccountSettingsOptions
    ) -> DetailedResponse[AccountSettings]:
        return await self.invoke(GET_ACCOUNT_SETTINGS, options, AccountSettings)
