from fastapi import APIRouter

from ibm_provider.emulator.api.endpoints import cbr, iam, schematics, vpc

router = APIRouter()

router.include_router(iam.router)
router.include_router(cbr.router)
router.include_router(vpc.router)
router.include_router(schematics.router)
