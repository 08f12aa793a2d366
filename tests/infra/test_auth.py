"""
Tests for the authenticators.
"""

import time

import httpx
import pytest

from ibm_provider.core.exceptions import AuthenticationError, ProviderConfigurationError
from ibm_provider.infra.ibm.auth import (
    IAM_APIKEY_GRANT_TYPE,
    BearerTokenAuthenticator,
    IamAuthenticator,
    NoAuthAuthenticator,
)


def token_server(*, status_code: int = 200, expires_in: int = 3600):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if status_code != 200:
            return httpx.Response(status_code, json={"errorMessage": "key not found"})
        now = int(time.time())
        return httpx.Response(
            200,
            json={
                "access_token": f"token-{len(seen)}",
                "expires_in": expires_in,
                "expiration": now + expires_in,
            },
        )

    return httpx.AsyncClient(transport=httpx.MockTransport(handler)), seen


class TestIamAuthenticator:
    async def test_token_request_form(self):
        http, seen = token_server()
        authenticator = IamAuthenticator("my-key", "https://iam.test", http_client=http)
        assert await authenticator.get_token() == "token-1"
        request = seen[0]
        assert str(request.url) == "https://iam.test/identity/token"
        form = request.content.decode()
        assert "grant_type=" + IAM_APIKEY_GRANT_TYPE.replace(":", "%3A") in form
        assert "apikey=my-key" in form
        await http.aclose()

    async def test_token_is_cached(self):
        http, seen = token_server()
        authenticator = IamAuthenticator("my-key", "https://iam.test", http_client=http)
        await authenticator.get_token()
        await authenticator.get_token()
        assert len(seen) == 1
        await http.aclose()

    async def test_token_refreshed_when_due(self):
        # expires_in=0 puts the refresh time in the past
        http, seen = token_server(expires_in=0)
        authenticator = IamAuthenticator("my-key", "https://iam.test", http_client=http)
        await authenticator.get_token()
        assert await authenticator.get_token() == "token-2"
        assert len(seen) == 2
        await http.aclose()

    async def test_authenticate_sets_bearer_header(self):
        http, _ = token_server()
        authenticator = IamAuthenticator("my-key", "https://iam.test", http_client=http)
        request = httpx.Request("GET", "https://cbr.cloud.ibm.com/v1/zones")
        await authenticator.authenticate(request)
        assert request.headers["Authorization"] == "Bearer token-1"
        await http.aclose()

    async def test_rejected_key_raises(self):
        http, _ = token_server(status_code=400)
        authenticator = IamAuthenticator("bad-key", "https://iam.test", http_client=http)
        with pytest.raises(AuthenticationError, match="status 400"):
            await authenticator.get_token()
        await http.aclose()

    @pytest.mark.parametrize("apikey", ["", "{my-key}", '"my-key"'])
    def test_invalid_api_key_rejected(self, apikey):
        with pytest.raises(ProviderConfigurationError):
            IamAuthenticator(apikey)


class TestSimpleAuthenticators:
    async def test_no_auth_leaves_request_alone(self):
        request = httpx.Request("GET", "https://x")
        await NoAuthAuthenticator().authenticate(request)
        assert "Authorization" not in request.headers

    async def test_bearer_token(self):
        request = httpx.Request("GET", "https://x")
        await BearerTokenAuthenticator("abc").authenticate(request)
        assert request.headers["Authorization"] == "Bearer abc"

    def test_bearer_token_required(self):
        with pytest.raises(ProviderConfigurationError):
            BearerTokenAuthenticator("")
