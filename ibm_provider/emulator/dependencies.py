from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ibm_provider.emulator.db.session import get_db
from ibm_provider.emulator.services.cbr_service import CbrService
from ibm_provider.emulator.services.schematics_service import SchematicsService
from ibm_provider.emulator.services.vpc_service import VpcService


async def get_cbr_service(session: Annotated[AsyncSession, Depends(get_db)]) -> CbrService:
    return CbrService(session)


async def get_vpc_service(session: Annotated[AsyncSession, Depends(get_db)]) -> VpcService:
    return VpcService(session)


async def get_schematics_service(
    session: Annotated[AsyncSession, Depends(get_db)],
) -> SchematicsService:
    return SchematicsService(session)
