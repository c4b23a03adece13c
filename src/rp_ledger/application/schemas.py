"""Pydantic schemas for the account API."""

from pydantic import BaseModel, Field

from config.settings import settings
from src.rp_common.fixed_point import format_amount
from src.rp_ledger.domain.models import ParticipantBalance

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class DepositRequest(BaseModel):
    amount: int = Field(..., gt=0, description="Amount to deposit, smallest units")


class WithdrawRequest(BaseModel):
    amount: int = Field(..., gt=0, description="Amount to withdraw, smallest units")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BalanceResponse(BaseModel):
    participant_id: str
    available: int
    available_display: str
    locked_as_insurer: int
    locked_as_reinsurer: int
    locked_as_policyholder_funds: int
    total: int
    total_display: str
    total_deposited: int
    total_withdrawn: int

    @classmethod
    def from_domain(cls, balance: ParticipantBalance) -> "BalanceResponse":
        return cls(
            participant_id=balance.participant_id,
            available=balance.available,
            available_display=format_amount(balance.available, settings.AMOUNT_DECIMALS),
            locked_as_insurer=balance.locked_as_insurer,
            locked_as_reinsurer=balance.locked_as_reinsurer,
            locked_as_policyholder_funds=balance.locked_as_policyholder_funds,
            total=balance.total,
            total_display=format_amount(balance.total, settings.AMOUNT_DECIMALS),
            total_deposited=balance.total_deposited,
            total_withdrawn=balance.total_withdrawn,
        )


class TransferResponse(BaseModel):
    """Result of a deposit or withdrawal."""

    participant_id: str
    amount: int
    available: int
    available_display: str

    @classmethod
    def from_result(cls, balance: ParticipantBalance, amount: int) -> "TransferResponse":
        return cls(
            participant_id=balance.participant_id,
            amount=amount,
            available=balance.available,
            available_display=format_amount(balance.available, settings.AMOUNT_DECIMALS),
        )
