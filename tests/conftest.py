"""
Shared fixtures for all tests.

Uses an in-memory SQLite database so tests are isolated and fast. The
emulator app is reached in-process through httpx.ASGITransport, so API
clients and the provider run against it without any network.
"""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from ibm_provider.config import Settings
from ibm_provider.emulator.db.base import Base
from ibm_provider.emulator.db.session import get_db
from ibm_provider.emulator.main import seed_data
from ibm_provider.emulator.models.vpc import Instance, NetworkInterface
from ibm_provider.provider.provider import Provider

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
EMULATOR_URL = "http://ibm-emulator.local"


def make_interface(instance_id: str, interface_id: str, name: str, **overrides) -> NetworkInterface:
    values = {
        "id": interface_id,
        "instance_id": instance_id,
        "name": name,
        "primary_ipv4_address": "10.240.0.10",
        "subnet": {
            "crn": "crn:v1:bluemix:public:is:us-south-1:a/test::subnet:subnet-1",
            "href": f"{EMULATOR_URL}/v1/subnets/subnet-1",
            "id": "subnet-1",
            "name": "test-subnet",
        },
        "security_groups": [
            {
                "crn": "crn:v1:bluemix:public:is:us-south:a/test::security-group:sg-1",
                "href": f"{EMULATOR_URL}/v1/security_groups/sg-1",
                "id": "sg-1",
                "name": "test-sg",
            }
        ],
        "floating_ips": [],
        "created_at": datetime(2024, 3, 1, 12, 30, 45, 123456, tzinfo=UTC),
    }
    values.update(overrides)
    return NetworkInterface(**values)


# --- Fixtures ---


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    engine = create_async_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def seeded_session(test_session: AsyncSession) -> AsyncSession:
    await seed_data(test_session)
    return test_session


@pytest_asyncio.fixture(scope="function")
async def many_instances(test_session: AsyncSession) -> list[Instance]:
    """Five instances (so pages of two span three pages), each with two interfaces."""
    instances = [Instance(id=f"inst-{n:02d}", name=f"web-{n}") for n in range(1, 6)]
    for instance in instances:
        test_session.add(instance)
    await test_session.flush()
    for instance in instances:
        test_session.add(make_interface(instance.id, f"{instance.id}-eth0", "eth0"))
        test_session.add(
            make_interface(instance.id, f"{instance.id}-eth1", "eth1", type="secondary")
        )
    await test_session.commit()
    return instances


@pytest_asyncio.fixture(scope="function")
async def emulator_app(test_session: AsyncSession) -> AsyncGenerator[FastAPI, None]:
    from ibm_provider.emulator.main import create_app

    test_app = create_app()

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield test_session

    test_app.dependency_overrides[get_db] = override_get_db
    yield test_app
    test_app.dependency_overrides.clear()


@pytest.fixture
def emulator_transport(emulator_app: FastAPI) -> ASGITransport:
    return ASGITransport(app=emulator_app)


@pytest_asyncio.fixture(scope="function")
async def client(emulator_transport: ASGITransport) -> AsyncGenerator[AsyncClient, None]:
    """Return an HTTPX AsyncClient wired to the emulator with an in-memory DB."""
    async with AsyncClient(transport=emulator_transport, base_url=EMULATOR_URL) as ac:
        yield ac


@pytest_asyncio.fixture(scope="function")
async def http_client(emulator_transport: ASGITransport) -> AsyncGenerator[AsyncClient, None]:
    """A bare client for service classes; they build absolute URLs themselves."""
    async with AsyncClient(transport=emulator_transport) as ac:
        yield ac


@pytest.fixture
def provider_settings() -> Settings:
    return Settings(
        ibmcloud_api_key="test-api-key",
        use_local_emulator=True,
        emulator_url=EMULATOR_URL,
        max_retries=0,
        resource_controller_url="https://cloud.ibm.com",
    )


@pytest_asyncio.fixture(scope="function")
async def provider(
    provider_settings: Settings, emulator_transport: ASGITransport
) -> AsyncGenerator[Provider, None]:
    async with Provider(provider_settings, transport=emulator_transport) as configured:
        diagnostics = await configured.configure()
        assert diagnostics == []
        yield configured
