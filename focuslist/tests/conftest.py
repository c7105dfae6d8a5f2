"""
Test fixtures - in-memory SQLite database + authenticated HTTP clients
"""
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from focuslist.database import Base, get_db
from focuslist.main import app
from focuslist.api.auth import get_password_hash, create_access_token
from focuslist.models.user import User
from focuslist.services.rate_limiter import RateLimiter, get_rate_limiter


@pytest_asyncio.fixture()
async def db_session():
    """Create a fresh in-memory SQLite database for each test"""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture()
async def seed_data(db_session):
    """Insert baseline test data: two users"""
    alice = User(
        email="alice@example.com",
        full_name="Alice",
        hashed_password=get_password_hash("testpass123"),
    )
    bob = User(
        email="bob@example.com",
        full_name="Bob",
        hashed_password=get_password_hash("testpass123"),
    )

    db_session.add_all([alice, bob])
    await db_session.commit()
    await db_session.refresh(alice)
    await db_session.refresh(bob)

    return {"user": alice, "other_user": bob}


@pytest_asyncio.fixture()
async def limiter():
    """Fresh in-memory limiter so buckets never leak between tests"""
    return RateLimiter()


@pytest_asyncio.fixture()
async def overrides(db_session, limiter):
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    yield
    app.dependency_overrides.clear()


def _client_for(user: User = None) -> AsyncClient:
    transport = ASGITransport(app=app)
    ac = AsyncClient(transport=transport, base_url="http://test", follow_redirects=True)
    if user is not None:
        token = create_access_token(data={"sub": user.email})
        ac.headers["Authorization"] = f"Bearer {token}"
    return ac


@pytest_asyncio.fixture()
async def client(overrides, seed_data):
    """Authenticated httpx AsyncClient bound to the FastAPI app"""
    async with _client_for(seed_data["user"]) as ac:
        yield ac


@pytest_asyncio.fixture()
async def other_client(overrides, seed_data):
    """Client for a second user, used for ownership checks"""
    async with _client_for(seed_data["other_user"]) as ac:
        yield ac


@pytest_asyncio.fixture()
async def unauth_client(overrides):
    """Unauthenticated httpx AsyncClient"""
    async with _client_for() as ac:
        yield ac
