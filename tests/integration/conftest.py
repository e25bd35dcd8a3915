import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlmodel import SQLModel

from config import ApplicationConfig
from tenant_access.api.app import create_app
from tenant_access.depends import build_container
from tests.fixtures.json_loader import TestDataLoader


class TestConfig(ApplicationConfig):
    __test__ = False

    BCRYPT_ROUNDS = 4
    CREATE_TABLES = False
    JWT_SECRET = "integration-test-secret"
    PUBLIC_BASE_URL = "https://app.example.com"


@pytest_asyncio.fixture
def test_data():
    return TestDataLoader()


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def container(engine):
    return build_container(TestConfig, engine=engine)


@pytest_asyncio.fixture
async def db_session(container):
    async with container.session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(container):
    app = create_app(TestConfig, container=container)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
