# File: tests/conftest.py
"""Pytest configuration and fixtures."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from shiftledger.api.auth import get_current_operator
from shiftledger.core.db import Base, get_db
from shiftledger.ledger.registers import PreviewRegister, UndoRegister
from shiftledger.main import create_app

# Import all models
from shiftledger.models.app_config import AppConfig  # noqa: F401
from shiftledger.models.daily_expense import DailyExpense  # noqa: F401
from shiftledger.models.operator import Operator
from shiftledger.models.sale import Sale, SaleItem  # noqa: F401
from shiftledger.models.shift import Shift  # noqa: F401

OPERATOR = Operator(username="alice")


@pytest.fixture
def test_database_url(tmp_path) -> str:
    """File-backed SQLite so every connection sees the same tables."""
    return f"sqlite+aiosqlite:///{tmp_path / 'shiftledger_test.db'}"


@pytest_asyncio.fixture(scope="function")
async def db_engine(test_database_url):
    engine = create_async_engine(test_database_url, echo=False)

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Cleanup
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine):
    """Create fresh DB session for each test."""
    async_session_maker = async_sessionmaker(
        db_engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def operator() -> Operator:
    return OPERATOR


@pytest.fixture
def registers() -> tuple[PreviewRegister, UndoRegister]:
    return PreviewRegister(), UndoRegister()


@pytest_asyncio.fixture
async def client(db_session):
    """Create async test client with overridden DB and operator dependencies."""
    app = create_app()

    async def override_get_db():
        yield db_session

    async def override_get_current_operator():
        return OPERATOR

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_operator] = override_get_current_operator

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        # Attach app and session for test access
        ac.app = app
        ac.db_session = db_session
        yield ac


@pytest_asyncio.fixture
async def unauthenticated_client(db_session: AsyncSession):
    """AsyncClient without the operator override (for X-Operator checks)."""
    app = create_app()

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        ac.db_session = db_session
        yield ac


@pytest_asyncio.fixture
async def client_for_health_checks(db_engine):
    """
    Test client whose get_db opens a new session per request, the way
    production does, so the health check exercises a real connection.
    """
    app = create_app()

    async_session_maker = async_sessionmaker(
        db_engine, class_=AsyncSession, expire_on_commit=False
    )

    async def override_get_db():
        async with async_session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac
