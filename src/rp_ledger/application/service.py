"""AccountApplicationService — thin composition layer.

Mutations go through LedgerEngine.execute, which owns the transaction;
reads use the live aggregate without locking.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.rp_engine.engine.engine import LedgerEngine
from src.rp_ledger.application.schemas import BalanceResponse, TransferResponse


class AccountApplicationService:
    async def get_balance(self, engine: LedgerEngine, participant_id: str) -> BalanceResponse:
        return BalanceResponse.from_domain(engine.pool.ledger.get_balance(participant_id))

    async def deposit(
        self, engine: LedgerEngine, db: AsyncSession | None, participant_id: str, amount: int
    ) -> TransferResponse:
        balance = await engine.execute(
            lambda pool: pool.ledger.deposit(participant_id, amount), db
        )
        return TransferResponse.from_result(balance, amount)

    async def withdraw(
        self, engine: LedgerEngine, db: AsyncSession | None, participant_id: str, amount: int
    ) -> TransferResponse:
        balance = await engine.execute(lambda pool: pool.withdraw(participant_id, amount), db)
        return TransferResponse.from_result(balance, amount)
