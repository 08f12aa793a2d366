"""VPC service: read-only instances and network interfaces with cursor pagination."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ibm_provider.emulator.exceptions import NotFoundError
from ibm_provider.emulator.models.vpc import Instance, NetworkInterface


class VpcService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_instances(
        self, *, start: str | None, limit: int, name: str | None = None
    ) -> tuple[list[Instance], int, str | None]:
        """One page of instances, the filtered total, and the next page cursor."""
        query = select(Instance)
        count_query = select(func.count()).select_from(Instance)
        if name:
            query = query.where(Instance.name == name)
            count_query = count_query.where(Instance.name == name)
        if start:
            query = query.where(Instance.id >= start)

        total = (await self._session.execute(count_query)).scalar_one()
        result = await self._session.execute(query.order_by(Instance.id).limit(limit + 1))
        instances = list(result.scalars().all())
        next_start = instances[limit].id if len(instances) > limit else None
        return instances[:limit], total, next_start

    async def get_instance(self, instance_id: str) -> Instance:
        instance = await self._session.get(Instance, instance_id)
        if instance is None:
            raise NotFoundError("instance", instance_id)
        return instance

    async def list_network_interfaces(self, instance_id: str) -> list[NetworkInterface]:
        await self.get_instance(instance_id)
        result = await self._session.execute(
            select(NetworkInterface)
            .where(NetworkInterface.instance_id == instance_id)
            .order_by(NetworkInterface.id)
        )
        return list(result.scalars().all())

    async def get_network_interface(self, instance_id: str, interface_id: str) -> NetworkInterface:
        await self.get_instance(instance_id)
        interface = await self._session.get(NetworkInterface, interface_id)
        if interface is None or interface.instance_id != instance_id:
            raise NotFoundError("network interface", interface_id)
        return interface
