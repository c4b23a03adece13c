"""PoolApplicationService — insurer and reinsurer capital operations."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.rp_common.errors import NotRegisteredError
from src.rp_engine.engine.engine import LedgerEngine
from src.rp_pool.application.schemas import (
    AllocationResponse,
    InsurerResponse,
    ReinsurerResponse,
)


class PoolApplicationService:
    # --- insurers -------------------------------------------------------

    async def register_insurer(
        self, engine: LedgerEngine, db: AsyncSession | None, participant_id: str, collateral: int
    ) -> InsurerResponse:
        account = await engine.execute(
            lambda pool: pool.insurers.register(participant_id, collateral), db
        )
        return InsurerResponse.from_domain(account)

    async def add_insurer_capital(
        self, engine: LedgerEngine, db: AsyncSession | None, participant_id: str, amount: int
    ) -> InsurerResponse:
        account = await engine.execute(
            lambda pool: pool.insurers.add_capital(participant_id, amount), db
        )
        return InsurerResponse.from_domain(account)

    async def allocate(
        self,
        engine: LedgerEngine,
        db: AsyncSession | None,
        participant_id: str,
        event_id: int,
        amount: int,
    ) -> InsurerResponse:
        account = await engine.execute(
            lambda pool: pool.insurers.allocate_to_event(participant_id, event_id, amount), db
        )
        return InsurerResponse.from_domain(account)

    async def remove_allocation(
        self,
        engine: LedgerEngine,
        db: AsyncSession | None,
        participant_id: str,
        event_id: int,
        amount: int,
    ) -> InsurerResponse:
        account = await engine.execute(
            lambda pool: pool.insurers.remove_from_event(participant_id, event_id, amount), db
        )
        return InsurerResponse.from_domain(account)

    async def get_insurer(self, engine: LedgerEngine, participant_id: str) -> InsurerResponse:
        account = engine.pool.insurers.get(participant_id)
        if account is None:
            raise NotRegisteredError(participant_id, "insurer")
        return InsurerResponse.from_domain(account)

    async def get_allocation(
        self, engine: LedgerEngine, participant_id: str, event_id: int
    ) -> AllocationResponse:
        engine.pool.registry.get(event_id)
        return AllocationResponse(
            participant_id=participant_id,
            event_id=event_id,
            allocation=engine.pool.insurers.allocation(participant_id, event_id),
        )

    # --- reinsurers -----------------------------------------------------

    async def register_reinsurer(
        self, engine: LedgerEngine, db: AsyncSession | None, participant_id: str, collateral: int
    ) -> ReinsurerResponse:
        account = await engine.execute(
            lambda pool: pool.reinsurers.register(participant_id, collateral), db
        )
        return ReinsurerResponse.from_domain(account)

    async def add_reinsurer_capital(
        self, engine: LedgerEngine, db: AsyncSession | None, participant_id: str, amount: int
    ) -> ReinsurerResponse:
        account = await engine.execute(
            lambda pool: pool.reinsurers.add_capital(participant_id, amount), db
        )
        return ReinsurerResponse.from_domain(account)

    async def get_reinsurer(self, engine: LedgerEngine, participant_id: str) -> ReinsurerResponse:
        account = engine.pool.reinsurers.get(participant_id)
        if account is None:
            raise NotRegisteredError(participant_id, "reinsurer")
        return ReinsurerResponse.from_domain(account)
