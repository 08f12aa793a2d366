from typing import Annotated

from fastapi import APIRouter, Depends, Header, Request, Response, status

from ibm_provider.emulator.api.common import as_utc, base_url
from ibm_provider.emulator.dependencies import get_cbr_service
from ibm_provider.emulator.models.cbr import CbrRule, CbrZone
from ibm_provider.emulator.schemas.cbr import RuleBody, ZoneBody
from ibm_provider.emulator.services.cbr_service import (
    EMULATOR_IAM_ID,
    RULE_COUNT_LIMIT,
    ZONE_COUNT_LIMIT,
    CbrService,
)
from ibm_provider.infra.cbr.models import (
    AccountSettings,
    Rule,
    RuleList,
    ServiceRefTargetList,
    ServiceRefTargetType,
    Zone,
    ZoneList,
    ZoneSummary,
)

router = APIRouter(prefix="/v1", tags=["context-based-restrictions"])

ADDRESSES_PREVIEW_LIMIT = 5

CbrServiceDep = Annotated[CbrService, Depends(get_cbr_service)]


def _crn(account_id: str | None, kind: str, object_id: str) -> str:
    scope = f"a/{account_id}" if account_id else ""
    return f"crn:v1:bluemix:public:context-based-restrictions:global:{scope}::{kind}:{object_id}"


def _to_zone(request: Request, zone: CbrZone) -> Zone:
    return Zone(
        id=zone.id,
        crn=_crn(zone.account_id, "zone", zone.id),
        address_count=len(zone.addresses),
        excluded_count=len(zone.excluded),
        name=zone.name,
        account_id=zone.account_id,
        description=zone.description,
        addresses=zone.addresses,
        excluded=zone.excluded,
        href=f"{base_url(request)}/v1/zones/{zone.id}",
        created_at=as_utc(zone.created_at),
        created_by_id=zone.created_by_id,
        last_modified_at=as_utc(zone.last_modified_at),
        last_modified_by_id=zone.last_modified_by_id,
    )


def _to_zone_summary(request: Request, zone: CbrZone) -> ZoneSummary:
    return ZoneSummary(
        id=zone.id,
        crn=_crn(zone.account_id, "zone", zone.id),
        name=zone.name,
        description=zone.description or None,
        addresses_preview=zone.addresses[:ADDRESSES_PREVIEW_LIMIT],
        address_count=len(zone.addresses),
        excluded_count=len(zone.excluded),
        href=f"{base_url(request)}/v1/zones/{zone.id}",
        created_at=as_utc(zone.created_at),
        created_by_id=zone.created_by_id,
        last_modified_at=as_utc(zone.last_modified_at),
        last_modified_by_id=zone.last_modified_by_id,
    )


def _to_rule(request: Request, rule: CbrRule) -> Rule:
    return Rule(
        id=rule.id,
        crn=_crn(rule.account_id, "rule", rule.id),
        description=rule.description,
        contexts=rule.contexts,
        resources=rule.resources,
        href=f"{base_url(request)}/v1/rules/{rule.id}",
        created_at=as_utc(rule.created_at),
        created_by_id=rule.created_by_id,
        last_modified_at=as_utc(rule.last_modified_at),
        last_modified_by_id=rule.last_modified_by_id,
    )


# --- Zones ---


@router.post(
    "/zones",
    response_model=Zone,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Create a network zone",
)
async def create_zone(
    payload: ZoneBody, request: Request, response: Response, service: CbrServiceDep
) -> Zone:
    zone = await service.create_zone(payload)
    response.headers["ETag"] = zone.etag
    return _to_zone(request, zone)


@router.get(
    "/zones",
    response_model=ZoneList,
    response_model_exclude_none=True,
    summary="List network zones of an account",
)
async def list_zones(
    request: Request,
    service: CbrServiceDep,
    account_id: str | None = None,
    name: str | None = None,
    sort: str | None = None,
) -> ZoneList:
    zones = await service.list_zones(account_id, name, sort)
    return ZoneList(count=len(zones), zones=[_to_zone_summary(request, z) for z in zones])


@router.get(
    "/zones/serviceref_targets",
    response_model=ServiceRefTargetList,
    response_model_exclude_none=True,
    summary="List services that can be used in serviceRef addresses",
)
async def list_available_serviceref_targets(
    service: CbrServiceDep, type: ServiceRefTargetType | None = None
) -> ServiceRefTargetList:
    targets = service.list_serviceref_targets(type)
    return ServiceRefTargetList(count=len(targets), targets=targets)


@router.get(
    "/zones/{zone_id}",
    response_model=Zone,
    response_model_exclude_none=True,
    summary="Get a network zone",
)
async def get_zone(
    zone_id: str, request: Request, response: Response, service: CbrServiceDep
) -> Zone:
    zone = await service.get_zone(zone_id)
    response.headers["ETag"] = zone.etag
    return _to_zone(request, zone)


@router.put(
    "/zones/{zone_id}",
    response_model=Zone,
    response_model_exclude_none=True,
    summary="Replace a network zone",
)
async def replace_zone(
    zone_id: str,
    payload: ZoneBody,
    request: Request,
    response: Response,
    service: CbrServiceDep,
    if_match: Annotated[str | None, Header()] = None,
) -> Zone:
    zone = await service.replace_zone(zone_id, if_match, payload)
    response.headers["ETag"] = zone.etag
    return _to_zone(request, zone)


@router.delete(
    "/zones/{zone_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a network zone",
)
async def delete_zone(zone_id: str, service: CbrServiceDep) -> Response:
    await service.delete_zone(zone_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Rules ---


@router.post(
    "/rules",
    response_model=Rule,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Create a rule",
)
async def create_rule(
    payload: RuleBody, request: Request, response: Response, service: CbrServiceDep
) -> Rule:
    rule = await service.create_rule(payload)
    response.headers["ETag"] = rule.etag
    return _to_rule(request, rule)


@router.get(
    "/rules",
    response_model=RuleList,
    response_model_exclude_none=True,
    summary="List rules of an account",
)
async def list_rules(
    request: Request,
    service: CbrServiceDep,
    account_id: str | None = None,
    region: str | None = None,
    resource: str | None = None,
    resource_type: str | None = None,
    service_instance: str | None = None,
    service_name: str | None = None,
    service_type: str | None = None,
    zone_id: str | None = None,
    sort: str | None = None,
) -> RuleList:
    rules = await service.list_rules(
        account_id,
        zone_id=zone_id,
        sort=sort,
        region=region,
        resource=resource,
        resource_type=resource_type,
        service_instance=service_instance,
        service_name=service_name,
        service_type=service_type,
    )
    return RuleList(count=len(rules), rules=[_to_rule(request, r) for r in rules])


@router.get(
    "/rules/{rule_id}",
    response_model=Rule,
    response_model_exclude_none=True,
    summary="Get a rule",
)
async def get_rule(
    rule_id: str, request: Request, response: Response, service: CbrServiceDep
) -> Rule:
    rule = await service.get_rule(rule_id)
    response.headers["ETag"] = rule.etag
    return _to_rule(request, rule)


@router.put(
    "/rules/{rule_id}",
    response_model=Rule,
    response_model_exclude_none=True,
    summary="Replace a rule",
)
async def replace_rule(
    rule_id: str,
    payload: RuleBody,
    request: Request,
    response: Response,
    service: CbrServiceDep,
    if_match: Annotated[str | None, Header()] = None,
) -> Rule:
    rule = await service.replace_rule(rule_id, if_match, payload)
    response.headers["ETag"] = rule.etag
    return _to_rule(request, rule)


@router.delete(
    "/rules/{rule_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a rule",
)
async def delete_rule(rule_id: str, service: CbrServiceDep) -> Response:
    await service.delete_rule(rule_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Account settings ---


@router.get(
    "/account_settings/{account_id}",
    response_model=AccountSettings,
    summary="Get the CBR settings of an account",
)
async def get_account_settings(
    account_id: str, request: Request, service: CbrServiceDep
) -> AccountSettings:
    rule_count, zone_count = await service.account_counts(account_id)
    started = request.app.state.started_at
    return AccountSettings(
        id=account_id,
        crn=_crn(account_id, "account_settings", account_id),
        rule_count_limit=RULE_COUNT_LIMIT,
        zone_count_limit=ZONE_COUNT_LIMIT,
        current_rule_count=rule_count,
        current_zone_count=zone_count,
        href=f"{base_url(request)}/v1/account_settings/{account_id}",
        created_at=started,
        created_by_id=EMULATOR_IAM_ID,
        last_modified_at=started,
        last_modified_by_id=EMULATOR_IAM_ID,
    )
