"""DistributionApplicationService — permissionless keeper operations.

Collection, distribution and settlement can be called by any authenticated
participant, any number of times; each is safe to retry.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.rp_distribution.application.schemas import (
    CollectionResponse,
    DistributionResponse,
    SettlementResponse,
)
from src.rp_engine.engine.engine import LedgerEngine


class DistributionApplicationService:
    async def collect(
        self, engine: LedgerEngine, db: AsyncSession | None, event_id: int, now: int
    ) -> CollectionResponse:
        result = await engine.execute(
            lambda pool: pool.distribution.collect_ongoing_premiums(event_id, now), db
        )
        return CollectionResponse.from_result(result)

    async def distribute(
        self, engine: LedgerEngine, db: AsyncSession | None, event_id: int, now: int
    ) -> DistributionResponse:
        result = await engine.execute(
            lambda pool: pool.distribution.distribute_event_premiums(event_id, now), db
        )
        return DistributionResponse.from_result(result)

    async def distribute_periodically(
        self,
        engine: LedgerEngine,
        db: AsyncSession | None,
        caller: str,
        event_id: int,
        interval: int,
        now: int,
    ) -> DistributionResponse:
        result = await engine.execute(
            lambda pool: pool.distribution.distribute_periodically(caller, event_id, interval, now),
            db,
        )
        return DistributionResponse.from_result(result)

    async def settle(
        self, engine: LedgerEngine, db: AsyncSession | None, event_id: int, now: int
    ) -> SettlementResponse:
        result = await engine.execute(
            lambda pool: pool.distribution.settle_claims(event_id, now), db
        )
        return SettlementResponse.from_result(result)
