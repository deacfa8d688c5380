import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from config import DEFAULT_RATE_LIMITS
from src.adapter.services.rate_limiter import InMemoryRateLimiter
from src.adapter.services.token_denylist import InMemoryTokenDenylist
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.token_authority import TokenAuthority
from src.depends import get_notifier, get_rate_limiter, get_token_authority, get_unit_of_work
from src.domain.entities import UserRole
from tests.fixtures.json_loader import TestDataLoader
from tests.utils.api import RecordingNotifier, create_user, login


@pytest_asyncio.fixture
def test_data():
    return TestDataLoader()


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///./test.db")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with Session() as session:
        yield session


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def token_authority():
    return TokenAuthority("integration-test-secret", InMemoryTokenDenylist())


@pytest.fixture
def rate_limiter():
    """Rate limiting is off unless a test asks for strict_client"""
    return None


def _build_app(db_session, token_authority, notifier, rate_limiter):
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    async def override_get_unit_of_work():
        yield SqlAlchemyUnitOfWork(db_session)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    app.dependency_overrides[get_token_authority] = lambda: token_authority
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter
    return app


@pytest_asyncio.fixture
async def client(db_session, token_authority, notifier, rate_limiter):
    app = _build_app(db_session, token_authority, notifier, rate_limiter)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def strict_client(db_session, token_authority, notifier):
    """Client with the default production rate limits enforced"""
    app = _build_app(db_session, token_authority, notifier, InMemoryRateLimiter(DEFAULT_RATE_LIMITS))
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac



@pytest_asyncio.fixture
async def admin_token(client, db_session):
    await create_user(db_session, "admin@example.com", role=UserRole.admin)
    response = await login(client, "admin@example.com")
    assert response.status_code == 200
    return response.json()["token"]
