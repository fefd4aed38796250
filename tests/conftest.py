"""
Test configuration and fixtures for LoanBuddy backend tests.
"""
import pytest
from typing import AsyncGenerator
from unittest.mock import AsyncMock
from decimal import Decimal
from datetime import date

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool
from httpx import AsyncClient, ASGITransport
from redis import asyncio as aioredis

from app.core.database import Base, get_db, get_redis
from app.core.security import create_access_token, get_password_hash
from main import app


# ============================================================
# Database Fixtures
# ============================================================

# Use SQLite for testing (in-memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def test_engine():
    """Create test database engine"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for each test"""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest.fixture
def redis_stub() -> AsyncMock:
    """Redis mock whose get/setex read and write a plain dict"""
    store = {}

    async def setex(key, ttl, value):
        store[key] = value

    redis = AsyncMock(spec=aioredis.Redis)
    redis.get = AsyncMock(side_effect=store.get)
    redis.setex = AsyncMock(side_effect=setex)
    return redis


@pytest.fixture
async def client(db_session, redis_stub) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database and redis overrides"""

    async def override_get_db():
        yield db_session

    async def override_get_redis():
        return redis_stub

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ============================================================
# User Fixtures
# ============================================================

async def _make_user(db_session, name, username, password, role):
    from app.modules.users.models import User

    user = User(
        name=name,
        username=username,
        email=f"{username}@loanbuddy.com",
        hashed_password=get_password_hash(password),
        role=role
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def admin_user(db_session):
    """Create an administrator"""
    from app.modules.users.models import UserRole
    return await _make_user(db_session, "Admin Account", "admin", "admin123", UserRole.ADMIN)


@pytest.fixture
async def staff_user(db_session):
    """Create a regular staff user"""
    from app.modules.users.models import UserRole
    return await _make_user(db_session, "Jhoy", "jhoy", "jhoy1234", UserRole.USER)


def _headers(user) -> dict:
    token = create_access_token(data={"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin_user):
    """Generate auth headers for the administrator"""
    return _headers(admin_user)


@pytest.fixture
def staff_headers(staff_user):
    """Generate auth headers for the staff user"""
    return _headers(staff_user)


# ============================================================
# Client Fixtures
# ============================================================

@pytest.fixture
async def borrower(db_session):
    """Create a borrower with an untouched loan taken out today"""
    from app.modules.clients.models import Client, ClientStatus

    record = Client(
        name="Maria Santos",
        passport_number="P1234567",
        mobile="+853 6612 3456",
        occupation="Room Attendant",
        years_working=4,
        original_loan_amount=Decimal("10000.00"),
        interest_rate=Decimal("10.00"),
        loan_date=date.today(),
        remaining_balance=Decimal("10000.00"),
        status=ClientStatus.ACTIVE
    )
    db_session.add(record)
    await db_session.commit()
    await db_session.refresh(record)
    return record
