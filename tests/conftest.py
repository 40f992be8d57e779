"""Pytest configuration and shared fixtures."""

import os
from collections.abc import AsyncGenerator
from datetime import datetime, timezone

os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from twofa.core.db import Base, get_db, make_engine
from twofa.core.security import create_access_token, hash_password
from twofa.main import app
from twofa.models.user import User
from twofa.services.provisioner import SecretProvisioner
from twofa.services.store import SqlAlchemyTwoFactorStore
from twofa.services.verifier import OtpVerifier

from tests.helpers import ACCOUNT_EMAIL, ACCOUNT_ID, ACCOUNT_PASSWORD, FrozenClock


@pytest.fixture
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """File-backed SQLite so separate sessions share one database."""
    engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'twofa.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def account(db) -> User:
    """Account A1 / a@example.com with no 2FA."""
    user = User(id=ACCOUNT_ID, email=ACCOUNT_EMAIL, hashed_password=hash_password(ACCOUNT_PASSWORD))
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
def clock() -> FrozenClock:
    # 10 s into a 30 s step
    return FrozenClock(datetime(2026, 10, 18, 12, 0, 10, tzinfo=timezone.utc))


@pytest.fixture
def store(db) -> SqlAlchemyTwoFactorStore:
    return SqlAlchemyTwoFactorStore(db)


@pytest.fixture
def provisioner(store) -> SecretProvisioner:
    return SecretProvisioner(store)


@pytest.fixture
def verifier(store, clock) -> OtpVerifier:
    return OtpVerifier(store, clock=clock)


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """ASGI client whose requests use the per-test database."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(account) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(subject=account.id)}"}
