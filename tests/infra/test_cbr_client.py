"""
Tests for ContextBasedRestrictionsV1 against the emulator.
"""

import pytest
from httpx import AsyncClient

from ibm_provider.core.exceptions import ApiError
from ibm_provider.infra.cbr.client import ContextBasedRestrictionsV1
from ibm_provider.infra.cbr.models import (
    AddressIPAddress,
    AddressIPAddressRange,
    AddressServiceRef,
    AddressSubnet,
    Resource,
    ResourceAttribute,
    RuleContext,
    RuleContextAttribute,
    ServiceRefTargetType,
    ServiceRefValue,
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
from ibm_provider.infra.ibm.auth import NoAuthAuthenticator

ACCOUNT_ID = "12ab34cd56ef78ab90cd12ef34ab56cd"
EMULATOR_URL = "http://ibm-emulator.local"


@pytest.fixture
def cbr(http_client: AsyncClient) -> ContextBasedRestrictionsV1:
    return ContextBasedRestrictionsV1(NoAuthAuthenticator(), EMULATOR_URL, http_client=http_client)


async def create_test_zone(
    cbr: ContextBasedRestrictionsV1, name: str = "office", **overrides
) -> tuple[str, str]:
    options = {
        "name": name,
        "account_id": ACCOUNT_ID,
        "description": "office network",
        "addresses": [
            AddressIPAddress(value="169.23.56.234"),
            AddressSubnet(value="192.0.2.0/24"),
        ],
        "excluded": [AddressIPAddress(value="192.0.2.7")],
    }
    options.update(overrides)
    response = await cbr.create_zone(CreateZoneOptions(**options))
    return response.result.id, response.headers["ETag"]


def rule_options(zone_id: str, service_name: str = "kms") -> dict:
    return {
        "description": "kms only from office",
        "contexts": [
            RuleContext(attributes=[RuleContextAttribute(name="networkZoneId", value=zone_id)])
        ],
        "resources": [
            Resource(
                attributes=[
                    ResourceAttribute(name="accountId", value=ACCOUNT_ID),
                    ResourceAttribute(name="serviceName", value=service_name),
                ]
            )
        ],
    }


class TestZones:
    async def test_create_zone(self, cbr: ContextBasedRestrictionsV1):
        response = await cbr.create_zone(
            CreateZoneOptions(
                name="office",
                account_id=ACCOUNT_ID,
                addresses=[
                    AddressIPAddressRange(value="169.23.22.0-169.23.22.255"),
                    AddressServiceRef(
                        ref=ServiceRefValue(account_id=ACCOUNT_ID, service_name="kms")
                    ),
                ],
            )
        )
        assert response.status_code == 201
        zone = response.result
        assert zone.name == "office"
        assert zone.address_count == 2
        assert zone.excluded_count == 0
        assert isinstance(zone.addresses[1], AddressServiceRef)
        assert zone.addresses[1].ref.service_name == "kms"
        assert response.headers["ETag"]

    async def test_get_zone(self, cbr: ContextBasedRestrictionsV1):
        zone_id, etag = await create_test_zone(cbr)
        response = await cbr.get_zone(GetZoneOptions(zone_id=zone_id))
        assert response.result.id == zone_id
        assert response.result.excluded == [AddressIPAddress(value="192.0.2.7")]
        assert response.headers["ETag"] == etag

    async def test_get_missing_zone_is_404(self, cbr: ContextBasedRestrictionsV1):
        with pytest.raises(ApiError) as exc_info:
            await cbr.get_zone(GetZoneOptions(zone_id="does-not-exist"))
        assert exc_info.value.status_code == 404
        assert "does-not-exist" in exc_info.value.message

    async def test_create_zone_needs_an_address(self, cbr: ContextBasedRestrictionsV1):
        with pytest.raises(ApiError) as exc_info:
            await cbr.create_zone(CreateZoneOptions(name="empty", account_id=ACCOUNT_ID))
        assert exc_info.value.status_code == 400

    async def test_create_zone_rejects_bad_ip(self, cbr: ContextBasedRestrictionsV1):
        with pytest.raises(ApiError) as exc_info:
            await create_test_zone(cbr, addresses=[AddressIPAddress(value="999.1.1.1")])
        assert exc_info.value.status_code == 400
        assert "999.1.1.1" in exc_info.value.message

    async def test_list_zones(self, cbr: ContextBasedRestrictionsV1):
        await create_test_zone(cbr, "b-zone")
        await create_test_zone(cbr, "a-zone")
        await create_test_zone(cbr, "other", account_id="another-account")
        response = await cbr.list_zones(ListZonesOptions(account_id=ACCOUNT_ID))
        assert response.result.count == 2
        assert [z.name for z in response.result.zones] == ["a-zone", "b-zone"]
        assert response.result.zones[0].address_count == 2

    async def test_list_zones_by_name(self, cbr: ContextBasedRestrictionsV1):
        await create_test_zone(cbr, "office")
        await create_test_zone(cbr, "lab")
        response = await cbr.list_zones(ListZonesOptions(account_id=ACCOUNT_ID, name="lab"))
        assert [z.name for z in response.result.zones] == ["lab"]

    async def test_replace_zone_with_current_etag(self, cbr: ContextBasedRestrictionsV1):
        zone_id, etag = await create_test_zone(cbr)
        response = await cbr.replace_zone(
            ReplaceZoneOptions(
                zone_id=zone_id,
                if_match=etag,
                name="office-renamed",
                account_id=ACCOUNT_ID,
                addresses=[AddressIPAddress(value="10.0.0.1")],
            )
        )
        assert response.result.name == "office-renamed"
        assert response.result.address_count == 1
        assert response.result.excluded == []
        assert response.headers["ETag"] != etag

    async def test_replace_zone_with_stale_etag_is_412(self, cbr: ContextBasedRestrictionsV1):
        zone_id, _ = await create_test_zone(cbr)
        with pytest.raises(ApiError) as exc_info:
            await cbr.replace_zone(
                ReplaceZoneOptions(
                    zone_id=zone_id,
                    if_match='W/"stale"',
                    name="x",
                    account_id=ACCOUNT_ID,
                    addresses=[AddressIPAddress(value="10.0.0.1")],
                )
            )
        assert exc_info.value.status_code == 412

    async def test_delete_zone(self, cbr: ContextBasedRestrictionsV1):
        zone_id, _ = await create_test_zone(cbr)
        response = await cbr.delete_zone(DeleteZoneOptions(zone_id=zone_id))
        assert response.status_code == 204
        with pytest.raises(ApiError):
            await cbr.get_zone(GetZoneOptions(zone_id=zone_id))

    async def test_serviceref_targets(self, cbr: ContextBasedRestrictionsV1):
        everything = await cbr.list_available_serviceref_targets()
        platform = await cbr.list_available_serviceref_targets(
            ListAvailableServicerefTargetsOptions(type=ServiceRefTargetType.PLATFORM_SERVICE)
        )
        assert everything.result.count > platform.result.count > 0
        assert all(t.service_type == "platform_service" for t in platform.result.targets)


class TestRules:
    async def test_create_and_get_rule(self, cbr: ContextBasedRestrictionsV1):
        zone_id, _ = await create_test_zone(cbr)
        created = await cbr.create_rule(CreateRuleOptions(**rule_options(zone_id)))
        assert created.status_code == 201
        fetched = await cbr.get_rule(GetRuleOptions(rule_id=created.result.id))
        assert fetched.result.contexts[0].attributes[0].value == zone_id
        assert fetched.result.resources[0].tags is None
        assert fetched.headers["ETag"] == created.headers["ETag"]

    async def test_rule_needs_contexts_and_resources(self, cbr: ContextBasedRestrictionsV1):
        with pytest.raises(ApiError) as exc_info:
            await cbr.create_rule(CreateRuleOptions(description="empty"))
        assert exc_info.value.status_code == 400

    async def test_list_rules_filters(self, cbr: ContextBasedRestrictionsV1):
        zone_id, _ = await create_test_zone(cbr)
        await cbr.create_rule(CreateRuleOptions(**rule_options(zone_id, "kms")))
        await cbr.create_rule(CreateRuleOptions(**rule_options(zone_id, "cloud-object-storage")))

        all_rules = await cbr.list_rules(ListRulesOptions(account_id=ACCOUNT_ID))
        kms_rules = await cbr.list_rules(
            ListRulesOptions(account_id=ACCOUNT_ID, service_name="kms")
        )
        zone_rules = await cbr.list_rules(ListRulesOptions(account_id=ACCOUNT_ID, zone_id=zone_id))
        assert all_rules.result.count == 2
        assert kms_rules.result.count == 1
        assert zone_rules.result.count == 2

    async def test_replace_and_delete_rule(self, cbr: ContextBasedRestrictionsV1):
        zone_id, _ = await create_test_zone(cbr)
        created = await cbr.create_rule(CreateRuleOptions(**rule_options(zone_id)))
        rule_id = created.result.id
        replaced = await cbr.replace_rule(
            ReplaceRuleOptions(
                rule_id=rule_id,
                if_match=created.headers["ETag"],
                **{**rule_options(zone_id), "description": "updated"},
            )
        )
        assert replaced.result.description == "updated"

        await cbr.delete_rule(DeleteRuleOptions(rule_id=rule_id))
        with pytest.raises(ApiError) as exc_info:
            await cbr.get_rule(GetRuleOptions(rule_id=rule_id))
        assert exc_info.value.status_code == 404


class TestAccountSettings:
    async def test_counts_follow_the_account(self, cbr: ContextBasedRestrictionsV1):
        zone_id, _ = await create_test_zone(cbr)
        await cbr.create_rule(CreateRuleOptions(**rule_options(zone_id)))
        response = await cbr.get_account_settings(GetAccountSettingsOptions(account_id=ACCOUNT_ID))
        settings = response.result
        assert settings.id == ACCOUNT_ID
        assert settings.current_zone_count == 1
        assert settings.current_rule_count == 1
        assert settings.zone_count_limit > settings.current_zone_count
