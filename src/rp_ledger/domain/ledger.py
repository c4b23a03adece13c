"""Ledger — sole owner of participant balance mutation.

Balances are virtual: the payment asset holds the real funds in custody and
is touched only by deposit and withdraw. Every other move (lock, unlock,
credit, debit, protocol fee) shifts value between ledger buckets without
changing total_system_liquidity.

Each method validates fully before writing, so a raised error never leaves a
half-applied move behind.
"""

import logging

from src.rp_common.errors import (
    InsufficientBalanceError,
    InsufficientBalanceForActivePoliciesError,
    ParticipantNotFoundError,
)
from src.rp_common.fixed_point import ensure_bounded, ensure_positive
from src.rp_ledger.domain.models import LockBucket, ParticipantBalance
from src.rp_ledger.domain.payment import PaymentAsset

logger = logging.getLogger(__name__)


class Ledger:
    def __init__(self, payment_asset: PaymentAsset) -> None:
        self.payment_asset = payment_asset
        self.balances: dict[str, ParticipantBalance] = {}
        self.total_system_liquidity = 0
        self.protocol_fees = 0

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_balance(self, participant_id: str) -> ParticipantBalance:
        """Balance view; unknown participants read as an all-zero balance."""
        return self.balances.get(participant_id) or ParticipantBalance(participant_id)

    def require_participant(self, participant_id: str) -> ParticipantBalance:
        balance = self.balances.get(participant_id)
        if balance is None:
            raise ParticipantNotFoundError(participant_id)
        return balance

    def sum_balances(self) -> int:
        return sum(b.total for b in self.balances.values())

    def _account(self, participant_id: str) -> ParticipantBalance:
        balance = self.balances.get(participant_id)
        if balance is None:
            balance = ParticipantBalance(participant_id)
            self.balances[participant_id] = balance
        return balance

    # ------------------------------------------------------------------
    # External boundary
    # ------------------------------------------------------------------

    def deposit(self, participant_id: str, amount: int) -> ParticipantBalance:
        ensure_positive(amount, "deposit amount")
        ensure_bounded(self.total_system_liquidity + amount, "deposit")
        self.payment_asset.transfer_in(participant_id, amount)
        balance = self._account(participant_id)
        balance.available += amount
        balance.total_deposited += amount
        self.total_system_liquidity += amount
        logger.info("deposit participant=%s amount=%d available=%d",
                    participant_id, amount, balance.available)
        return balance

    def withdraw(
        self, participant_id: str, amount: int, required_retained: int = 0
    ) -> ParticipantBalance:
        """Withdraw to the participant's wallet.

        `required_retained` is the policy-continuity floor computed from the
        holder's active policies; `available - amount` must not drop below it.
        """
        ensure_positive(amount, "withdraw amount")
        balance = self.get_balance(participant_id)
        if balance.available < amount:
            raise InsufficientBalanceError(amount, balance.available)
        remaining = balance.available - amount
        if required_retained > 0 and remaining < required_retained:
            raise InsufficientBalanceForActivePoliciesError(remaining, required_retained)
        self.payment_asset.transfer_out(participant_id, amount)
        balance = self._account(participant_id)
        balance.available -= amount
        balance.total_withdrawn += amount
        self.total_system_liquidity -= amount
        logger.info("withdraw participant=%s amount=%d available=%d",
                    participant_id, amount, balance.available)
        return balance

    # ------------------------------------------------------------------
    # Internal moves (called only by other components)
    # ------------------------------------------------------------------

    def credit(self, participant_id: str, amount: int) -> None:
        if amount == 0:
            return
        ensure_positive(amount, "credit amount")
        self._account(participant_id).available += amount

    def debit(self, participant_id: str, amount: int) -> None:
        if amount == 0:
            return
        ensure_positive(amount, "debit amount")
        balance = self.get_balance(participant_id)
        if balance.available < amount:
            raise InsufficientBalanceError(amount, balance.available)
        self._account(participant_id).available -= amount

    def lock(self, participant_id: str, amount: int, bucket: LockBucket) -> None:
        """available → locked bucket."""
        ensure_positive(amount, "lock amount")
        balance = self.get_balance(participant_id)
        if balance.available < amount:
            raise InsufficientBalanceError(amount, balance.available)
        balance = self._account(participant_id)
        balance.available -= amount
        setattr(balance, bucket.value, balance.locked(bucket) + amount)

    def unlock(self, participant_id: str, amount: int, bucket: LockBucket) -> None:
        """locked bucket → available."""
        if amount == 0:
            return
        self.debit_locked(participant_id, amount, bucket)
        self._account(participant_id).available += amount

    def debit_locked(self, participant_id: str, amount: int, bucket: LockBucket) -> None:
        """Remove value from a locked bucket; the caller credits it elsewhere."""
        if amount == 0:
            return
        ensure_positive(amount, "locked debit amount")
        balance = self.require_participant(participant_id)
        held = balance.locked(bucket)
        if held < amount:
            raise InsufficientBalanceError(amount, held)
        setattr(balance, bucket.value, held - amount)

    def accrue_protocol_fee(self, amount: int) -> None:
        """Book value already removed from a participant or event pool."""
        if amount == 0:
            return
        ensure_positive(amount, "protocol fee")
        self.protocol_fees += amount
