"""Integration-test fixtures.

Each test gets a fresh in-memory LedgerEngine injected through
`app.dependency_overrides`, so the API runs end to end without a database.
"""

from collections.abc import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.main import app
from src.rp_common.pool_config import PoolConfig
from src.rp_engine.application.service import get_ledger_engine
from src.rp_engine.domain.risk_pool import RiskPool
from src.rp_engine.engine.engine import LedgerEngine


@pytest_asyncio.fixture
async def ledger_engine() -> LedgerEngine:
    return LedgerEngine(RiskPool(PoolConfig()))


@pytest_asyncio.fixture
async def client(ledger_engine: LedgerEngine) -> AsyncGenerator[AsyncClient, None]:
    app.dependency_overrides[get_ledger_engine] = lambda: ledger_engine
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
