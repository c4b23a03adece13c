"""Shared domain fixtures: a fresh RiskPool with default constants."""

import pytest

from src.rp_common.pool_config import PoolConfig
from src.rp_engine.domain.risk_pool import RiskPool


@pytest.fixture
def config() -> PoolConfig:
    return PoolConfig()


@pytest.fixture
def pool(config: PoolConfig) -> RiskPool:
    return RiskPool(config)


@pytest.fixture
def funded_event(pool: RiskPool) -> int:
    """Event with base premium 5% and a sole insurer allocating 10,000."""
    pool.ledger.deposit("ins-1", 10_000)
    pool.insurers.register("ins-1", 10_000)
    event_id = pool.registry.register_event("registrar", "BTC -20%", "drop", 2_000, 500)
    pool.insurers.allocate_to_event("ins-1", event_id, 10_000)
    return event_id
