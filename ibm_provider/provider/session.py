"""
ClientSession: the per-provider bundle of service clients.

One httpx.AsyncClient is shared by the authenticator and every service
client. Service clients are built lazily on first use and read-only
afterwards, so independent calls can reuse them.
"""

import logging

import httpx

from ibm_provider.config import Settings
from ibm_provider.core.exceptions import ProviderConfigurationError
from ibm_provider.infra.cbr.client import ContextBasedRestrictionsV1
from ibm_provider.infra.ibm.auth import Authenticator, IamAuthenticator, NoAuthAuthenticator
from ibm_provider.infra.ibm.base_service import BaseService
from ibm_provider.infra.schematics.client import SchematicsV1
from ibm_provider.infra.vpc.client import VpcV1

logger = logging.getLogger(__name__)


class ClientSession:
    def __init__(
        self,
        config: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = config
        self._http = httpx.AsyncClient(
            timeout=httpx.Timeout(config.request_timeout_s), transport=transport
        )
        self.authenticator = self._build_authenticator()
        self._vpc: VpcV1 | None = None
        self._schematics: SchematicsV1 | None = None
        self._cbr: ContextBasedRestrictionsV1 | None = None

    def _build_authenticator(self) -> Authenticator:
        apikey = self.settings.ibmcloud_api_key.get_secret_value()
        if apikey:
            iam_url = (
                self.settings.emulator_url
                if self.settings.use_local_emulator
                else self.settings.iam_url
            )
            return IamAuthenticator(apikey, iam_url, http_client=self._http)
        if self.settings.use_local_emulator:
            return NoAuthAuthenticator()
        raise ProviderConfigurationError(
            "ibmcloud_api_key must be set",
            details="set IBMCLOUD_API_KEY or enable the local emulator",
        )

    def _url(self, real_url: str, emulator_suffix: str = "") -> str:
        if self.settings.use_local_emulator:
            return self.settings.emulator_url.rstrip("/") + emulator_suffix
        return real_url

    def _prepare(self, service: BaseService) -> None:
        if self.settings.max_retries > 0:
            service.enable_retries(self.settings.max_retries, self.settings.max_retry_interval_s)
        logger.debug(
            "Service client ready",
            extra={
                "service_name": service.service_name,
                "service_url": service.service_url,
                "retries_enabled": service.retries_enabled,
            },
        )

    @property
    def vpc(self) -> VpcV1:
        if self._vpc is None:
            self._vpc = VpcV1(
                self.authenticator,
                self._url(self.settings.resolved_vpc_url, "/v1"),
                version=self.settings.vpc_api_version,
                generation=self.settings.vpc_generation,
                http_client=self._http,
            )
            self._prepare(self._vpc)
        return self._vpc

    @property
    def schematics(self) -> SchematicsV1:
        if self._schematics is None:
            self._schematics = SchematicsV1(
                self.authenticator,
                self._url(self.settings.schematics_url),
                http_client=self._http,
            )
            self._prepare(self._schematics)
        return self._schematics

    @property
    def cbr(self) -> ContextBasedRestrictionsV1:
        if self._cbr is None:
            self._cbr = ContextBasedRestrictionsV1(
                self.authenticator,
                self._url(self.settings.cbr_url),
                http_client=self._http,
            )
            self._prepare(self._cbr)
        return self._cbr

    @property
    def resource_controller_url(self) -> str:
        return self.settings.resource_controller_url

    async def aclose(self) -> None:
        await self._http.aclose()
