"""
Provider: registry of data sources and resources, and the call dispatcher.

Every dispatch method validates the configuration against the schema, runs
the handler, and commits staged state only when the handler succeeds. Errors
never escape: they become diagnostics on the returned OperationResult.
"""

import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from ibm_provider.config import Settings, settings
from ibm_provider.core.exceptions import (
    Diagnostic,
    ProviderConfigurationError,
    ProviderError,
)
from ibm_provider.core.logging import configure_logging
from ibm_provider.provider.data_sources import (
    cbr_rule as cbr_rule_data_source,
    cbr_zone as cbr_zone_data_source,
    is_instance_network_interface,
    schematics_state,
)
from ibm_provider.provider.resources import cbr_rule, cbr_zone
from ibm_provider.provider.schema import OperationResult, ResourceData, ResourceSchema
from ibm_provider.provider.session import ClientSession

logger = logging.getLogger(__name__)

Handler = Callable[[ResourceData, ClientSession], Awaitable[None]]


@dataclass(frozen=True)
class DataSource:
    schema: ResourceSchema
    read: Handler


@dataclass(frozen=True)
class Resource:
    schema: ResourceSchema
    create: Handler
    read: Handler
    update: Handler
    delete: Handler


DATA_SOURCES: dict[str, DataSource] = {
    "ibm_is_instance_network_interface": DataSource(
        is_instance_network_interface.SCHEMA, is_instance_network_interface.read
    ),
    "ibm_schematics_state": DataSource(schematics_state.SCHEMA, schematics_state.read),
    "ibm_cbr_zone": DataSource(cbr_zone_data_source.SCHEMA, cbr_zone_data_source.read),
    "ibm_cbr_rule": DataSource(cbr_rule_data_source.SCHEMA, cbr_rule_data_source.read),
}

RESOURCES: dict[str, Resource] = {
    "ibm_cbr_zone": Resource(
        cbr_zone.SCHEMA, cbr_zone.create, cbr_zone.read, cbr_zone.update, cbr_zone.delete
    ),
    "ibm_cbr_rule": Resource(
        cbr_rule.SCHEMA, cbr_rule.create, cbr_rule.read, cbr_rule.update, cbr_rule.delete
    ),
}


class Provider:
    def __init__(
        self,
        config: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = config or settings
        self._transport = transport
        self._session: ClientSession | None = None

    @property
    def data_sources(self) -> Mapping[str, DataSource]:
        return DATA_SOURCES

    @property
    def resources(self) -> Mapping[str, Resource]:
        return RESOURCES

    @property
    def session(self) -> ClientSession:
        if self._session is None:
            raise ProviderConfigurationError("provider is not configured")
        return self._session

    async def configure(self) -> list[Diagnostic]:
        """Build the client session. Returns diagnostics; empty on success."""
        configure_logging()
        try:
            self._session = ClientSession(self.settings, transport=self._transport)
        except ProviderError as exc:
            logger.warning(
                "Provider configuration rejected",
                extra={"error_code": exc.error_code, "error_message": exc.message},
            )
            return [exc.to_diagnostic()]
        logger.info(
            "Provider configured",
            extra={
                "region": self.settings.ibmcloud_region,
                "use_local_emulator": self.settings.use_local_emulator,
            },
        )
        return []

    async def aclose(self) -> None:
        if self._session is not None:
            await self._session.aclose()
            self._session = None

    async def __aenter__(self) -> "Provider":
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        await self.aclose()

    def _data_source(self, type_name: str) -> DataSource:
        try:
            return DATA_SOURCES[type_name]
        except KeyError:
            raise ProviderConfigurationError(f"unknown data source {type_name!r}") from None

    def _resource(self, type_name: str) -> Resource:
        try:
            return RESOURCES[type_name]
        except KeyError:
            raise ProviderConfigurationError(f"unknown resource {type_name!r}") from None

    async def _run(
        self,
        action: str,
        type_name: str,
        lookup: Callable[[], tuple[ResourceSchema, Handler]],
        config: Mapping[str, Any] | None,
        state: Mapping[str, Any] | None,
    ) -> OperationResult:
        try:
            schema, handler = lookup()
            if config is not None:
                schema.validate_config(config)
            data = ResourceData(schema, config=dict(config or {}), state=dict(state or {}))
            await handler(data, self.session)
        except ProviderError as exc:
            logger.warning(
                "Provider operation failed",
                extra={
                    "action": action,
                    "type_name": type_name,
                    "error_code": exc.error_code,
                    "error_message": exc.message,
                },
            )
            return OperationResult(state=None, diagnostics=[exc.to_diagnostic()])
        except Exception as exc:
            logger.error(
                "Unexpected error in provider operation",
                extra={"action": action, "type_name": type_name},
                exc_info=True,
            )
            return OperationResult(
                state=None,
                diagnostics=[
                    Diagnostic(
                        severity="error",
                        summary=f"{type(exc).__name__}: {exc}",
                        error_code="INTERNAL_ERROR",
                    )
                ],
            )

        new_state = data.commit()
        logger.debug(
            "Provider operation finished",
            extra={"action": action, "type_name": type_name, "id": data.id or None},
        )
        return OperationResult(state=new_state)

    async def read_data_source(
        self, type_name: str, config: Mapping[str, Any]
    ) -> OperationResult:
        def lookup() -> tuple[ResourceSchema, Handler]:
            source = self._data_source(type_name)
            return source.schema, source.read

        return await self._run("read_data_source", type_name, lookup, config, None)

    async def create_resource(self, type_name: str, config: Mapping[str, Any]) -> OperationResult:
        def lookup() -> tuple[ResourceSchema, Handler]:
            resource = self._resource(type_name)
            return resource.schema, resource.create

        return await self._run("create_resource", type_name, lookup, config, None)

    async def read_resource(self, type_name: str, state: Mapping[str, Any]) -> OperationResult:
        def lookup() -> tuple[ResourceSchema, Handler]:
            resource = self._resource(type_name)
            return resource.schema, resource.read

        return await self._run("read_resource", type_name, lookup, None, state)

    async def update_resource(
        self, type_name: str, config: Mapping[str, Any], state: Mapping[str, Any]
    ) -> OperationResult:
        def lookup() -> tuple[ResourceSchema, Handler]:
            resource = self._resource(type_name)
            return resource.schema, resource.update

        return await self._run("update_resource", type_name, lookup, config, state)

    async def delete_resource(self, type_name: str, state: Mapping[str, Any]) -> OperationResult:
        def lookup() -> tuple[ResourceSchema, Handler]:
            resource = self._resource(type_name)
            return resource.schema, resource.delete

        return await self._run("delete_resource", type_name, lookup, None, state)
