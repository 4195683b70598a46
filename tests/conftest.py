"""
Test fixtures for the Yield Wallet test suite.

This module provides shared fixtures used across all test files:

  - db_engine / session_factory: Fresh file-backed SQLite database per test
  - client: Async HTTP test client with the test database injected
  - member_id / member_headers: A member identity and its bearer header
  - other_member_id / other_member_headers: A second member for isolation tests
  - admin_headers: Bearer header carrying the admin claim
  - plan / inactive_plan: Plans inserted straight into the catalog
  - fund_wallet: Opens a wallet and credits it through the service layer

Key design decisions:
  - The database is a file under tmp_path, not in-memory, so that
    concurrent sessions get their own connections and really contend for
    the same rows.
  - get_db and get_session_factory are overridden so the application code
    runs exactly as it does in production, against the test database.
  - Tokens are minted with the same signing routine the identity service
    uses; there is no signup flow in this service.
  - Service-level tests take a fresh session from session_factory for each
    call, since every core operation opens its own transaction.
"""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")

import uuid

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from yieldwallet.database import Base, get_db, get_session_factory
from yieldwallet.main import app
from yieldwallet.models.plan import InvestmentPlan
from yieldwallet.security import create_access_token
from yieldwallet.services import wallet_service


def auth_headers(user_id: uuid.UUID, is_admin: bool = False) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id, is_admin=is_admin)}"}


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """Create a fresh async engine with all tables for each test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'wallet.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine):
    """Session factory bound to the test engine."""
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture
async def client(session_factory):
    """
    Async HTTP test client with the test database injected.

    ASGITransport does not run the lifespan, so the accrual scheduler never
    starts during tests.
    """
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def member_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def member_headers(member_id) -> dict:
    return auth_headers(member_id)


@pytest.fixture
def other_member_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def other_member_headers(other_member_id) -> dict:
    return auth_headers(other_member_id)


@pytest.fixture
def admin_headers() -> dict:
    return auth_headers(uuid.uuid4(), is_admin=True)


async def _insert_plan(session_factory, **fields) -> int:
    values = {
        "name": "Starter",
        "price_cents": 300,
        "daily_profit_cents": 20,
        "duration_days": 10,
        "total_roi_cents": 200,
        "is_active": True,
    }
    values.update(fields)
    async with session_factory() as session:
        plan = InvestmentPlan(**values)
        session.add(plan)
        await session.commit()
        return plan.id


@pytest_asyncio.fixture
async def plan(session_factory) -> int:
    """An active plan: price 300, 20 per day for 10 days."""
    return await _insert_plan(session_factory)


@pytest_asyncio.fixture
async def inactive_plan(session_factory) -> int:
    return await _insert_plan(session_factory, name="Retired", is_active=False)


@pytest_asyncio.fixture
async def fund_wallet(session_factory):
    """
    Returns an async helper that opens a wallet for a user and credits it.

    Usage:
        await fund_wallet(member_id, 1000)
    """
    async def _fund(user_id: uuid.UUID, amount_cents: int) -> None:
        async with session_factory() as session:
            await wallet_service.create_wallet(session, user_id)
        if amount_cents:
            async with session_factory() as session:
                await wallet_service.credit_wallet_admin(session, user_id, amount_cents)

    return _fund
