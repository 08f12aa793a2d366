"""
Tests for BaseService: response handling, error mapping and retries.
"""

import httpx
import pytest

from ibm_provider.core.exceptions import ApiError, DecodeError, ServiceTransportError
from ibm_provider.infra.cbr.client import ContextBasedRestrictionsV1
from ibm_provider.infra.cbr.options import (
    CreateRuleOptions,
    CreateZoneOptions,
    DeleteZoneOptions,
    GetZoneOptions,
)
from ibm_provider.infra.ibm.auth import BearerTokenAuthenticator, NoAuthAuthenticator
from ibm_provider.infra.ibm.base_service import get_sdk_headers

SERVICE_URL = "https://cbr.cloud.ibm.com"

ZONE = {
    "id": "z1",
    "crn": "crn:v1:bluemix:public:context-based-restrictions:global:a/acct::zone:z1",
    "address_count": 1,
    "excluded_count": 0,
    "name": "office",
    "account_id": "acct",
    "description": "",
    "addresses": [{"type": "ipAddress", "value": "10.0.0.1"}],
    "excluded": [],
    "href": "https://cbr.cloud.ibm.com/v1/zones/z1",
    "created_at": "2024-03-01T12:30:45Z",
    "created_by_id": "IBMid-1",
    "last_modified_at": "2024-03-01T12:30:45Z",
    "last_modified_by_id": "IBMid-1",
}


def make_service(handler, authenticator=None) -> ContextBasedRestrictionsV1:
    return ContextBasedRestrictionsV1(
        authenticator or NoAuthAuthenticator(),
        SERVICE_URL,
        transport=httpx.MockTransport(handler),
    )


def sequence(*responses: httpx.Response):
    """Handler returning the given responses in order, recording requests."""
    seen: list[httpx.Request] = []
    queue = list(responses)

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return queue.pop(0)

    return handler, seen


class TestInvoke:
    async def test_success_decodes_model_and_keeps_headers(self):
        handler, seen = sequence(httpx.Response(200, json=ZONE, headers={"ETag": 'W/"1"'}))
        async with make_service(handler) as service:
            response = await service.get_zone(GetZoneOptions(zone_id="z1"))
        assert response.status_code == 200
        assert response.result.name == "office"
        assert response.headers["ETag"] == 'W/"1"'
        assert response.raw_result
        assert len(seen) == 1

    async def test_empty_body_gives_none_result(self):
        handler, _ = sequence(httpx.Response(204))
        async with make_service(handler) as service:
            response = await service.delete_zone(DeleteZoneOptions(zone_id="z1"))
        assert response.status_code == 204
        assert response.result is None

    async def test_create_with_empty_body_returns_none_result(self):
        handler, _ = sequence(httpx.Response(201), httpx.Response(201))
        async with make_service(handler) as service:
            zone = await service.create_zone(CreateZoneOptions(name="office", account_id="acct"))
            rule = await service.create_rule(CreateRuleOptions(description="r"))
        assert zone.status_code == 201
        assert zone.result is None
        assert rule.result is None

    async def test_sdk_and_auth_headers_sent(self):
        handler, seen = sequence(httpx.Response(200, json=ZONE))
        service = make_service(handler, BearerTokenAuthenticator("tok"))
        async with service:
            await service.get_zone(GetZoneOptions(zone_id="z1"))
        request = seen[0]
        assert request.headers["Authorization"] == "Bearer tok"
        assert request.headers["User-Agent"].startswith("ibm-provider-python/")
        assert "operation_id=GetZone" in request.headers["X-IBMCloud-SDK-Analytics"]

    async def test_default_headers_sent(self):
        handler, seen = sequence(httpx.Response(200, json=ZONE))
        async with make_service(handler) as service:
            service.set_default_headers({"X-Team": "network"})
            await service.get_zone(GetZoneOptions(zone_id="z1"))
        assert seen[0].headers["X-Team"] == "network"

    async def test_error_response_raises_api_error_with_body(self):
        body = {"errors": [{"code": "not_found", "message": "zone z9 not found"}], "trace": "t"}
        handler, _ = sequence(httpx.Response(404, json=body))
        async with make_service(handler) as service:
            with pytest.raises(ApiError) as exc_info:
                await service.get_zone(GetZoneOptions(zone_id="z9"))
        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "zone z9 not found"
        assert '"trace"' in str(exc_info.value)

    async def test_malformed_body_is_a_decode_error(self):
        html = httpx.Response(200, content=b"<html>", headers={"Content-Type": "text/html"})
        handler, _ = sequence(html)
        async with make_service(handler) as service:
            with pytest.raises(DecodeError):
                await service.get_zone(GetZoneOptions(zone_id="z1"))

    async def test_connection_error_is_wrapped(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with make_service(handler) as service:
            with pytest.raises(ServiceTransportError, match="ConnectError"):
                await service.get_zone(GetZoneOptions(zone_id="z1"))

    async def test_service_url_can_be_changed(self):
        handler, seen = sequence(httpx.Response(200, json=ZONE))
        async with make_service(handler) as service:
            service.set_service_url("https://private.cbr.cloud.ibm.com")
            await service.get_zone(GetZoneOptions(zone_id="z1"))
        assert seen[0].url.host == "private.cbr.cloud.ibm.com"


class TestRetries:
    async def test_not_retried_by_default(self):
        handler, seen = sequence(httpx.Response(503), httpx.Response(200, json=ZONE))
        async with make_service(handler) as service:
            assert not service.retries_enabled
            with pytest.raises(ApiError):
                await service.get_zone(GetZoneOptions(zone_id="z1"))
        assert len(seen) == 1

    async def test_transient_status_retried_until_success(self):
        handler, seen = sequence(
            httpx.Response(429), httpx.Response(503), httpx.Response(200, json=ZONE)
        )
        async with make_service(handler) as service:
            service.enable_retries(max_retries=3, max_retry_interval=0.01)
            response = await service.get_zone(GetZoneOptions(zone_id="z1"))
        assert response.result.id == "z1"
        assert len(seen) == 3

    async def test_exhausted_retries_return_last_error(self):
        handler, seen = sequence(*[httpx.Response(500) for _ in range(3)])
        async with make_service(handler) as service:
            service.enable_retries(max_retries=2, max_retry_interval=0.01)
            with pytest.raises(ApiError) as exc_info:
                await service.get_zone(GetZoneOptions(zone_id="z1"))
        assert exc_info.value.status_code == 500
        assert len(seen) == 3

    async def test_client_errors_not_retried(self):
        handler, seen = sequence(httpx.Response(400, json={"message": "bad"}))
        async with make_service(handler) as service:
            service.enable_retries(max_retries=3, max_retry_interval=0.01)
            with pytest.raises(ApiError):
                await service.get_zone(GetZoneOptions(zone_id="z1"))
        assert len(seen) == 1

    async def test_connection_errors_retried(self):
        attempts = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal attempts
            attempts += 1
            if attempts == 1:
                raise httpx.ConnectError("reset", request=request)
            return httpx.Response(200, json=ZONE)

        async with make_service(handler) as service:
            service.enable_retries(max_retries=2, max_retry_interval=0.01)
            response = await service.get_zone(GetZoneOptions(zone_id="z1"))
        assert response.status_code == 200
        assert attempts == 2

    def test_disable_retries(self):
        service = make_service(lambda request: httpx.Response(200))
        service.enable_retries()
        assert service.retries_enabled
        service.disable_retries()
        assert not service.retries_enabled


def test_sdk_headers():
    headers = get_sdk_headers("vpc", "V1", "ListInstances")
    assert headers["X-IBMCloud-SDK-Analytics"] == (
        "service_name=vpc;service_version=V1;operation_id=ListInstances"
    )
    assert "lang=python" in headers["User-Agent"]
