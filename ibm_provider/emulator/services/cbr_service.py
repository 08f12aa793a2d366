"""
CBR service: zones, rules and account settings for the emulator.

Applies the server-side validation of the real service: zones need a name,
an account and at least one address; rules need at least one context and one
resource. Replacements are guarded by the stored ETag.
"""

import ipaddress
import logging
import uuid
from datetime import UTC, datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ibm_provider.emulator.exceptions import (
    BadRequestError,
    NotFoundError,
    PreconditionFailedError,
    PreconditionRequiredError,
)
from ibm_provider.emulator.models.cbr import CbrRule, CbrZone, new_etag
from ibm_provider.emulator.schemas.cbr import RuleBody, ZoneBody
from ibm_provider.infra.cbr.models import (
    Address,
    AddressIPAddress,
    AddressIPAddressRange,
    AddressServiceRef,
    AddressSubnet,
    AddressVPC,
    ServiceRefTarget,
    ServiceRefTargetType,
    marshal_address,
)

logger = logging.getLogger(__name__)

EMULATOR_IAM_ID = "IBMid-0000000EMU"
RULE_COUNT_LIMIT = 1000
ZONE_COUNT_LIMIT = 500

SERVICEREF_TARGETS = [
    ServiceRefTarget(service_name="cloud-object-storage", service_type="platform_service"),
    ServiceRefTarget(service_name="containers-kubernetes", service_type="platform_service"),
    ServiceRefTarget(service_name="iam-groups", service_type="platform_service"),
    ServiceRefTarget(service_name="kms"),
    ServiceRefTarget(service_name="secrets-manager"),
]

# list_rules filter parameter -> resource attribute name
_RULE_FILTERS = {
    "region": "region",
    "resource": "resource",
    "resource_type": "resourceType",
    "service_instance": "serviceInstance",
    "service_name": "serviceName",
    "service_type": "serviceType",
}


def _check_address(address: Address) -> None:
    try:
        match address:
            case AddressIPAddress():
                ipaddress.ip_address(address.value)
            case AddressIPAddressRange():
                first, _, last = address.value.partition("-")
                if ipaddress.ip_address(first) > ipaddress.ip_address(last):
                    raise ValueError(address.value)
            case AddressSubnet():
                ipaddress.ip_network(address.value)
            case AddressVPC():
                if not address.value.startswith("crn:"):
                    raise ValueError(address.value)
            case AddressServiceRef():
                return
    except (TypeError, ValueError):
        raise BadRequestError(
            f"The address value '{address.value}' is not a valid {address.type}"
        ) from None


def _validate_zone(body: ZoneBody) -> None:
    if not body.name:
        raise BadRequestError("The zone name is required")
    if not body.account_id:
        raise BadRequestError("The zone account_id is required")
    if not body.addresses:
        raise BadRequestError("A zone must contain at least one address")
    for address in [*body.addresses, *(body.excluded or [])]:
        _check_address(address)


def _validate_rule(body: RuleBody) -> None:
    if not body.contexts:
        raise BadRequestError("A rule must contain at least one context")
    if not body.resources:
        raise BadRequestError("A rule must contain at least one resource")


def _rule_account(body: RuleBody) -> str | None:
    for resource in body.resources or []:
        for attribute in resource.attributes:
            if attribute.name == "accountId":
                return attribute.value
    return None


def _has_resource_attribute(rule: CbrRule, name: str, value: str) -> bool:
    return any(
        attribute["name"] == name and attribute["value"] == value
        for resource in rule.resources
        for attribute in resource["attributes"]
    )


def _has_zone(rule: CbrRule, zone_id: str) -> bool:
    return any(
        attribute["name"] == "networkZoneId" and zone_id in attribute["value"].split(",")
        for context in rule.contexts
        for attribute in context["attributes"]
    )


class CbrService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    # --- Zones ---

    async def create_zone(self, body: ZoneBody) -> CbrZone:
        _validate_zone(body)
        zone = CbrZone(
            id=uuid.uuid4().hex,
            account_id=body.account_id,
            name=body.name,
            description=body.description or "",
            addresses=[marshal_address(a) for a in body.addresses or []],
            excluded=[marshal_address(a) for a in body.excluded or []],
            etag=new_etag(),
            created_by_id=EMULATOR_IAM_ID,
            last_modified_by_id=EMULATOR_IAM_ID,
        )
        self._session.add(zone)
        await self._session.flush()
        logger.info(
            "Zone created",
            extra={"zone_id": zone.id, "account_id": zone.account_id, "zone_name": zone.name},
        )
        return zone

    async def list_zones(
        self, account_id: str | None, name: str | None = None, sort: str | None = None
    ) -> list[CbrZone]:
        if not account_id:
            raise BadRequestError("The account_id query parameter is required")
        query = select(CbrZone).where(CbrZone.account_id == account_id)
        if name:
            query = query.where(CbrZone.name == name)
        query = query.order_by(self._sort_column(CbrZone, sort, "name"), CbrZone.id)
        result = await self._session.execute(query)
        return list(result.scalars().all())

    async def get_zone(self, zone_id: str) -> CbrZone:
        zone = await self._session.get(CbrZone, zone_id)
        if zone is None:
            raise NotFoundError("zone", zone_id)
        return zone

    async def replace_zone(self, zone_id: str, if_match: str | None, body: ZoneBody) -> CbrZone:
        zone = await self.get_zone(zone_id)
        self._check_precondition("zone", zone_id, zone.etag, if_match)
        _validate_zone(body)
        zone.account_id = body.account_id
        zone.name = body.name
        zone.description = body.description or ""
        zone.addresses = [marshal_address(a) for a in body.addresses or []]
        zone.excluded = [marshal_address(a) for a in body.excluded or []]
        zone.etag = new_etag()
        zone.last_modified_at = datetime.now(UTC)
        zone.last_modified_by_id = EMULATOR_IAM_ID
        await self._session.flush()
        logger.info("Zone replaced", extra={"zone_id": zone_id})
        return zone

    async def delete_zone(self, zone_id: str) -> None:
        zone = await self.get_zone(zone_id)
        await self._session.delete(zone)
        await self._session.flush()
        logger.info("Zone deleted", extra={"zone_id": zone_id})

    def list_serviceref_targets(
        self, target_type: ServiceRefTargetType | None = None
    ) -> list[ServiceRefTarget]:
        if target_type is ServiceRefTargetType.PLATFORM_SERVICE:
            return [t for t in SERVICEREF_TARGETS if t.service_type == "platform_service"]
        return list(SERVICEREF_TARGETS)

    # --- Rules ---

    async def create_rule(self, body: RuleBody) -> CbrRule:
        _validate_rule(body)
        rule = CbrRule(
            id=uuid.uuid4().hex,
            account_id=_rule_account(body),
            description=body.description or "",
            contexts=[c.model_dump(mode="json", exclude_none=True) for c in body.contexts or []],
            resources=[r.model_dump(mode="json", exclude_none=True) for r in body.resources or []],
            etag=new_etag(),
            created_by_id=EMULATOR_IAM_ID,
            last_modified_by_id=EMULATOR_IAM_ID,
        )
        self._session.add(rule)
        await self._session.flush()
        logger.info("Rule created", extra={"rule_id": rule.id, "account_id": rule.account_id})
        return rule

    async def list_rules(
        self,
        account_id: str | None,
        *,
        zone_id: str | None = None,
        sort: str | None = None,
        **filters: str | None,
    ) -> list[CbrRule]:
        if not account_id:
            raise BadRequestError("The account_id query parameter is required")
        query = select(CbrRule).where(CbrRule.account_id == account_id)
        query = query.order_by(self._sort_column(CbrRule, sort, "created_at"), CbrRule.id)
        result = await self._session.execute(query)
        rules = list(result.scalars().all())

        for key, value in filters.items():
            if value:
                attribute = _RULE_FILTERS[key]
                rules = [r for r in rules if _has_resource_attribute(r, attribute, value)]
        if zone_id:
            rules = [r for r in rules if _has_zone(r, zone_id)]
        return rules

    async def get_rule(self, rule_id: str) -> CbrRule:
        rule = await self._session.get(CbrRule, rule_id)
        if rule is None:
            raise NotFoundError("rule", rule_id)
        return rule

    async def replace_rule(self, rule_id: str, if_match: str | None, body: RuleBody) -> CbrRule:
        rule = await self.get_rule(rule_id)
        self._check_precondition("rule", rule_id, rule.etag, if_match)
        _validate_rule(body)
        rule.account_id = _rule_account(body)
        rule.description = body.description or ""
        rule.contexts = [c.model_dump(mode="json", exclude_none=True) for c in body.contexts or []]
        rule.resources = [
            r.model_dump(mode="json", exclude_none=True) for r in body.resources or []
        ]
        rule.etag = new_etag()
        rule.last_modified_at = datetime.now(UTC)
        rule.last_modified_by_id = EMULATOR_IAM_ID
        await self._session.flush()
        logger.info("Rule replaced", extra={"rule_id": rule_id})
        return rule

    async def delete_rule(self, rule_id: str) -> None:
        rule = await self.get_rule(rule_id)
        await self._session.delete(rule)
        await self._session.flush()
        logger.info("Rule deleted", extra={"rule_id": rule_id})

    # --- Account settings ---

    async def account_counts(self, account_id: str) -> tuple[int, int]:
        """Current (rule count, zone count) of one account."""
        rules = await self._session.execute(
            select(func.count()).select_from(CbrRule).where(CbrRule.account_id == account_id)
        )
        zones = await self._session.execute(
            select(func.count()).select_from(CbrZone).where(CbrZone.account_id == account_id)
        )
        return rules.scalar_one(), zones.scalar_one()

    # --- helpers ---

    @staticmethod
    def _check_precondition(kind: str, object_id: str, etag: str, if_match: str | None) -> None:
        if not if_match:
            raise PreconditionRequiredError()
        if if_match != "*" and if_match != etag:
            logger.warning(
                "Stale If-Match rejected", extra={"kind": kind, "object_id": object_id}
            )
            raise PreconditionFailedError(kind, object_id)

    @staticmethod
    def _sort_column(model: type[CbrZone] | type[CbrRule], sort: str | None, default: str):
        field = (sort or default).lstrip("-")
        column = getattr(model, field, None)
        if column is None or field not in model.__table__.columns:
            raise BadRequestError(f"The sort field '{field}' is not supported")
        return column.desc() if (sort or "").startswith("-") else column.asc()
