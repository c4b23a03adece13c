"""PolicyApplicationService — purchase, activation, claims and quotes."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.rp_common.errors import NotPolicyHolderError
from src.rp_engine.engine.engine import LedgerEngine
from src.rp_policy.application.schemas import (
    BuyPolicyRequest,
    ClaimResponse,
    PolicyListResponse,
    PolicyResponse,
    QuoteResponse,
)


class PolicyApplicationService:
    async def quote(self, engine: LedgerEngine, event_id: int, coverage: int) -> QuoteResponse:
        pool = engine.pool
        event = pool.registry.require_open(event_id)
        return QuoteResponse.from_domain(pool.pricing.quote_annual_premium(event, coverage))

    async def buy_policy(
        self,
        engine: LedgerEngine,
        db: AsyncSession | None,
        holder: str,
        body: BuyPolicyRequest,
        now: int,
    ) -> PolicyResponse:
        policy = await engine.execute(
            lambda pool: pool.distribution.buy_policy(
                holder, body.event_id, body.coverage, body.max_loss_limit, now
            ),
            db,
        )
        return PolicyResponse.from_domain(policy)

    async def activate_policy(
        self, engine: LedgerEngine, db: AsyncSession | None, holder: str, policy_id: int, now: int
    ) -> PolicyResponse:
        policy = await engine.execute(
            lambda pool: pool.distribution.activate_policy(holder, policy_id, now), db
        )
        return PolicyResponse.from_domain(policy)

    async def claim_policy(
        self, engine: LedgerEngine, db: AsyncSession | None, holder: str, policy_id: int, now: int
    ) -> ClaimResponse:
        result = await engine.execute(
            lambda pool: pool.distribution.claim_policy(holder, policy_id, now), db
        )
        return ClaimResponse.from_result(policy_id, result)

    async def get_policy(self, engine: LedgerEngine, holder: str, policy_id: int) -> PolicyResponse:
        policy = engine.pool.book.get(policy_id)
        if policy.holder != holder:
            raise NotPolicyHolderError(policy_id, holder)
        return PolicyResponse.from_domain(policy)

    async def list_policies(self, engine: LedgerEngine, holder: str) -> PolicyListResponse:
        policies = engine.pool.book.policies_for_holder(holder)
        return PolicyListResponse(items=[PolicyResponse.from_domain(p) for p in policies])
