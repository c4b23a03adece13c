"""Pydantic schemas for the capital-pool API."""

from pydantic import BaseModel, Field

from src.rp_pool.domain.models import InsurerAccount, ReinsurerAccount

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class RegisterCapitalRequest(BaseModel):
    collateral: int = Field(..., gt=0, description="Initial collateral, smallest units")


class AddCapitalRequest(BaseModel):
    amount: int = Field(..., gt=0)


class AllocationRequest(BaseModel):
    event_id: int = Field(..., ge=1)
    amount: int = Field(..., gt=0)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class InsurerResponse(BaseModel):
    participant_id: str
    total_collateral: int
    consumed_capital: int
    deployable_capital: int
    total_premiums: int
    total_losses: int
    active: bool
    allocations: dict[int, int]

    @classmethod
    def from_domain(cls, account: InsurerAccount) -> "InsurerResponse":
        return cls(
            participant_id=account.participant_id,
            total_collateral=account.total_collateral,
            consumed_capital=account.consumed_capital,
            deployable_capital=account.deployable_capital,
            total_premiums=account.total_premiums,
            total_losses=account.total_losses,
            active=account.active,
            allocations=dict(account.allocations),
        )


class AllocationResponse(BaseModel):
    participant_id: str
    event_id: int
    allocation: int


class ReinsurerResponse(BaseModel):
    participant_id: str
    collateral: int
    consumed_capital: int
    total_premiums: int
    active: bool

    @classmethod
    def from_domain(cls, account: ReinsurerAccount) -> "ReinsurerResponse":
        return cls(
            participant_id=account.participant_id,
            collateral=account.collateral,
            consumed_capital=account.consumed_capital,
            total_premiums=account.total_premiums,
            active=account.active,
        )
