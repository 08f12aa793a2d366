import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncSession

from ibm_provider.config import settings
from ibm_provider.core.logging import configure_logging
from ibm_provider.emulator.db.base import Base
from ibm_provider.emulator.db.session import AsyncSessionLocal, engine
from ibm_provider.emulator.exceptions import register_exception_handlers
from ibm_provider.emulator.middleware import TransactionIdMiddleware
from ibm_provider.emulator.models.schematics import WorkspaceTemplateState
from ibm_provider.emulator.models.vpc import Instance, NetworkInterface

logger = logging.getLogger(__name__)

# Fixed ids so seed data is stable across restarts
SEED_INSTANCES = [
    {
        "id": "0717-00000000-0000-0000-0000-000000000001",
        "name": "emulator-instance-1",
        "status": "running",
    },
]

SEED_NETWORK_INTERFACES = [
    {
        "id": "0717-00000000-0000-0000-0000-0000000000a1",
        "instance_id": "0717-00000000-0000-0000-0000-000000000001",
        "name": "eth0",
        "type": "primary",
        "primary_ipv4_address": "10.240.0.4",
        "subnet": {
            "crn": "crn:v1:bluemix:public:is:us-south-1:a/emulator::subnet:0717-subnet-1",
            "href": "http://ibm-emulator.local/v1/subnets/0717-subnet-1",
            "id": "0717-subnet-1",
            "name": "emulator-subnet-1",
        },
        "security_groups": [
            {
                "crn": "crn:v1:bluemix:public:is:us-south:a/emulator::security-group:r006-sg-1",
                "href": "http://ibm-emulator.local/v1/security_groups/r006-sg-1",
                "id": "r006-sg-1",
                "name": "emulator-default-sg",
            },
        ],
        "floating_ips": [],
    },
]

SEED_TEMPLATE_STATES = [
    {
        "workspace_id": "us-south.workspace.emulator.00000001",
        "template_id": "00000000-0000-0000-0000-000000000001",
        "state": {
            "version": 4,
            "terraform_version": "1.5.7",
            "serial": 1,
            "lineage": "00000000-0000-0000-0000-000000000001",
            "outputs": {},
            "resources": [],
        },
    },
]


async def seed_data(session: AsyncSession) -> None:
    result = await session.execute(select(Instance).limit(1))
    if result.scalar_one_or_none() is None:
        for instance_data in SEED_INSTANCES:
            session.add(Instance(**instance_data))
        await session.flush()
        for interface_data in SEED_NETWORK_INTERFACES:
            session.add(NetworkInterface(**interface_data))
        logger.info("Seed instances inserted", extra={"count": len(SEED_INSTANCES)})

    result = await session.execute(select(WorkspaceTemplateState).limit(1))
    if result.scalar_one_or_none() is None:
        for state_data in SEED_TEMPLATE_STATES:
            session.add(WorkspaceTemplateState(**state_data))
        logger.info("Seed template states inserted", extra={"count": len(SEED_TEMPLATE_STATES)})

    await session.commit()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info(
        "Emulator starting",
        extra={"version": settings.app_version, "env": settings.env, "debug": settings.debug},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready")

    async with AsyncSessionLocal() as session:
        await seed_data(session)

    logger.info("Emulator ready", extra={"version": settings.app_version})

    yield

    logger.info("Emulator shutting down")
    await engine.dispose()
    logger.info("Database engine disposed")


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title=f"{settings.app_name} emulator",
        version=settings.app_version,
        description=(
            "Local stand-in for the IBM Cloud IAM, Context-Based-Restrictions, VPC and "
            "Schematics endpoints used by the provider."
        ),
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url=None,
        openapi_url="/openapi.json",
    )
    app.state.started_at = datetime.now(UTC)

    app.add_middleware(TransactionIdMiddleware)
    register_exception_handlers(app)

    from ibm_provider.emulator.api.router import router

    app.include_router(router)

    @app.get("/health", tags=["health"])
    async def health_check() -> JSONResponse:
        db_status = "healthy"
        try:
            async with AsyncSessionLocal() as session:
                await session.execute(text("SELECT 1"))
        except Exception:
            db_status = "unhealthy"

        overall = "healthy" if db_status == "healthy" else "unhealthy"
        uptime = int((datetime.now(UTC) - app.state.started_at).total_seconds())
        return JSONResponse(
            status_code=200 if overall == "healthy" else 503,
            content={
                "status": overall,
                "version": settings.app_version,
                "env": settings.env,
                "uptime_s": uptime,
                "checks": {"database": {"status": db_status}},
            },
        )

    return app


app = create_app()
