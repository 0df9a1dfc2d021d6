"""
Pytest Configuration and Fixtures

Shared fixtures for unit and integration tests.
"""

import itertools
from datetime import datetime, timezone
from typing import AsyncGenerator, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from payment_service.main import app
from payment_service.api.deps import get_store_gateway
from payment_service.core.idempotency.ledger import IdempotencyLedger
from payment_service.core.payments.decision import ChargeDecisionEngine
from payment_service.core.payments.recorder import PaymentRecorder
from payment_service.core.store.gateway import StoreGateway
from payment_service.db import models  # noqa: F401
from payment_service.db.base import Base

FIXED_NOW = datetime(2024, 5, 1, 12, 30, 15, 250000, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def test_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Create a file-backed test database so sessions see each other's commits."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'payments.db'}",
        connect_args={"timeout": 30},
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def gateway(test_engine: AsyncEngine) -> StoreGateway:
    """Store gateway bound to the test database."""
    session_factory = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    return StoreGateway(session_factory)


@pytest.fixture
def ledger(gateway: StoreGateway) -> IdempotencyLedger:
    return IdempotencyLedger(gateway)


@pytest.fixture
def recorder(gateway: StoreGateway, ledger: IdempotencyLedger) -> PaymentRecorder:
    return PaymentRecorder(gateway, ledger)


@pytest.fixture
def id_factory() -> Callable[[], str]:
    """Deterministic identifier source."""
    counter = itertools.count(1)
    return lambda: f"id-{next(counter):04d}"


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def decision_engine(id_factory: Callable[[], str], fixed_now: datetime) -> ChargeDecisionEngine:
    """Decision engine with injected ids and a frozen clock."""
    return ChargeDecisionEngine(id_factory=id_factory, clock=lambda: fixed_now)


@pytest_asyncio.fixture
async def async_client(gateway: StoreGateway) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client backed by the test database."""
    app.dependency_overrides[get_store_gateway] = lambda: gateway

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def count_rows(gateway: StoreGateway) -> Callable:
    """Count rows in a table through the gateway."""

    async def _count(model) -> int:
        rows = await gateway.query(select(func.count()).select_from(model))
        return rows[0][0]

    return _count


@pytest.fixture
def sample_charge() -> dict:
    """Sample charge request body."""
    return {
        "order_id": "order-123",
        "amount": 250.75,
        "method": "card",
    }
