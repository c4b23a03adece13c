"""ReinsurancePool — reinsurer side: global collateral backing every event.

Reinsurers have no per-event allocation. They receive the residual premium
share at distribution and absorb their share of claims pro rata to
collateral.
"""

import logging
from collections.abc import Callable

from src.rp_common.errors import (
    AlreadyRegisteredError,
    BelowMinimumCollateralError,
    InsufficientCollateralError,
    NotRegisteredError,
)
from src.rp_common.fixed_point import ensure_positive, pro_rata
from src.rp_ledger.domain.ledger import Ledger
from src.rp_ledger.domain.models import LockBucket
from src.rp_pool.domain.models import ReinsurerAccount

logger = logging.getLogger(__name__)

_ROLE = "reinsurer"


class ReinsurancePool:
    def __init__(
        self,
        ledger: Ledger,
        min_collateral: int,
        on_capital_change: Callable[[], None],
    ) -> None:
        self._ledger = ledger
        self._min_collateral = min_collateral
        self._on_capital_change = on_capital_change
        self.accounts: dict[str, ReinsurerAccount] = {}

    def get(self, participant_id: str) -> ReinsurerAccount | None:
        return self.accounts.get(participant_id)

    def require(self, participant_id: str) -> ReinsurerAccount:
        account = self.accounts.get(participant_id)
        if account is None or not account.active:
            raise NotRegisteredError(participant_id, _ROLE)
        return account

    def total_collateral(self) -> int:
        return sum(a.collateral for a in self.accounts.values() if a.active)

    def collateral_weights(self) -> dict[str, int]:
        return {
            pid: account.collateral
            for pid, account in self.accounts.items()
            if account.active and account.collateral > 0
        }

    def register(self, participant_id: str, collateral: int) -> ReinsurerAccount:
        existing = self.accounts.get(participant_id)
        if existing is not None and existing.active:
            raise AlreadyRegisteredError(participant_id, _ROLE)
        if collateral < self._min_collateral:
            raise BelowMinimumCollateralError(collateral, self._min_collateral)
        self._ledger.lock(participant_id, collateral, LockBucket.REINSURER)
        account = ReinsurerAccount(participant_id=participant_id, collateral=collateral)
        self.accounts[participant_id] = account
        logger.info("reinsurer registered %s collateral=%d", participant_id, collateral)
        self._on_capital_change()
        return account

    def add_capital(self, participant_id: str, amount: int) -> ReinsurerAccount:
        account = self.require(participant_id)
        ensure_positive(amount, "capital amount")
        self._ledger.lock(participant_id, amount, LockBucket.REINSURER)
        account.collateral += amount
        self._on_capital_change()
        return account

    def record_premium(self, participant_id: str, amount: int) -> None:
        self.require(participant_id).total_premiums += amount

    def consume_for_claim(self, event_id: int, amount: int) -> dict[str, int]:
        """Deduct the reinsurer share of a claim pro rata to collateral."""
        weights = self.collateral_weights()
        total = sum(weights.values())
        if amount > total:
            raise InsufficientCollateralError(amount, total)
        if amount == 0:
            return {}
        deductions = pro_rata(amount, weights)
        for participant_id, deducted in deductions.items():
            if deducted == 0:
                continue
            account = self.accounts[participant_id]
            self._ledger.debit_locked(participant_id, deducted, LockBucket.REINSURER)
            account.collateral -= deducted
            account.consumed_capital += deducted
        logger.warning("event %d: reinsurance capital consumed %d across %d reinsurers",
                       event_id, amount, len(deductions))
        self._on_capital_change()
        return deductions
