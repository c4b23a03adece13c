"""Process-wide LedgerEngine provider (FastAPI dependency)."""

from config.settings import settings
from src.rp_common.pool_config import PoolConfig
from src.rp_engine.domain.risk_pool import RiskPool
from src.rp_engine.engine.engine import LedgerEngine
from src.rp_engine.infrastructure.persistence import StateRepository

_engine: LedgerEngine | None = None


def get_ledger_engine() -> LedgerEngine:
    global _engine  # noqa: PLW0603
    if _engine is None:
        repo = StateRepository() if settings.PERSISTENCE_ENABLED else None
        _engine = LedgerEngine(RiskPool(PoolConfig.from_settings()), repo=repo)
    return _engine
