"""Pydantic schemas for the policy API."""

from pydantic import BaseModel, Field

from src.rp_distribution.domain.models import SettlementResult
from src.rp_policy.domain.models import Policy
from src.rp_pricing.domain.models import PremiumQuote

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class BuyPolicyRequest(BaseModel):
    event_id: int = Field(..., ge=1)
    coverage: int = Field(..., gt=0, description="Payout on trigger, smallest units")
    max_loss_limit: int = Field(
        ..., gt=0, description="Highest acceptable annual premium; must be available"
    )


class QuoteRequest(BaseModel):
    event_id: int = Field(..., ge=1)
    coverage: int = Field(..., gt=0)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class PolicyResponse(BaseModel):
    id: int
    holder: str
    event_id: int
    status: str
    coverage: int
    annualized_premium: int
    start_time: int
    activation_time: int
    is_active: bool
    is_claimed: bool
    lockup_deposit: int
    last_collection_time: int
    premiums_collected: int
    total_paid: int

    @classmethod
    def from_domain(cls, policy: Policy) -> "PolicyResponse":
        return cls(
            id=policy.id,
            holder=policy.holder,
            event_id=policy.event_id,
            status=policy.status.value,
            coverage=policy.coverage,
            annualized_premium=policy.annualized_premium,
            start_time=policy.start_time,
            activation_time=policy.activation_time,
            is_active=policy.is_active,
            is_claimed=policy.is_claimed,
            lockup_deposit=policy.lockup_deposit,
            last_collection_time=policy.last_collection_time,
            premiums_collected=policy.premiums_collected,
            total_paid=policy.total_paid,
        )


class PolicyListResponse(BaseModel):
    items: list[PolicyResponse]


class QuoteResponse(BaseModel):
    event_id: int
    coverage: int
    annualized_premium: int
    probability_bps: int
    max_premium: int
    beta_bps: int
    model_priced: bool

    @classmethod
    def from_domain(cls, quote: PremiumQuote) -> "QuoteResponse":
        return cls(
            event_id=quote.event_id,
            coverage=quote.coverage,
            annualized_premium=quote.annualized_premium,
            probability_bps=quote.probability_bps,
            max_premium=quote.max_premium,
            beta_bps=quote.beta_bps,
            model_priced=quote.model_priced,
        )


class ClaimResponse(BaseModel):
    policy_id: int
    payout: int
    insurer_consumed: int
    reinsurer_consumed: int

    @classmethod
    def from_result(cls, policy_id: int, result: SettlementResult) -> "ClaimResponse":
        return cls(
            policy_id=policy_id,
            payout=result.total_payouts,
            insurer_consumed=result.insurer_consumed,
            reinsurer_consumed=result.reinsurer_consumed,
        )
