"""StateRepository Protocol — dependency inversion for testability.

Unit tests inject an AsyncMock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.rp_engine.domain.risk_pool import RiskPool


class StateRepositoryProtocol(Protocol):
    async def load(self, db: AsyncSession, pool: RiskPool) -> RiskPool: ...

    async def flush(self, before: RiskPool, after: RiskPool, db: AsyncSession) -> None: ...
