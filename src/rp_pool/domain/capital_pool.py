"""CapitalPool — insurer side: collateral, per-event allocation, claim consumption.

Insurer collateral lives in the participant's `locked_as_insurer` bucket and
always equals `InsurerAccount.total_collateral`. Allocating to an event only
commits capital (`consumed_capital`); no funds move until a claim consumes it.

After every capital change the pool pushes the event's allocation total into
the EventRegistry and calls the `on_capital_change` hook so the global risk
state is recomputed explicitly.
"""

import logging
from collections.abc import Callable

from src.rp_common.errors import (
    AlreadyRegisteredError,
    AlreadyTriggeredError,
    BelowMinimumCollateralError,
    InsufficientAllocationError,
    InsufficientCollateralError,
    NotRegisteredError,
)
from src.rp_common.fixed_point import ensure_positive, pro_rata
from src.rp_event.domain.registry import EventRegistry
from src.rp_ledger.domain.ledger import Ledger
from src.rp_ledger.domain.models import LockBucket
from src.rp_pool.domain.models import InsurerAccount

logger = logging.getLogger(__name__)

_ROLE = "insurer"


class CapitalPool:
    def __init__(
        self,
        ledger: Ledger,
        registry: EventRegistry,
        min_collateral: int,
        on_capital_change: Callable[[], None],
    ) -> None:
        self._ledger = ledger
        self._registry = registry
        self._min_collateral = min_collateral
        self._on_capital_change = on_capital_change
        self.accounts: dict[str, InsurerAccount] = {}

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, participant_id: str) -> InsurerAccount | None:
        return self.accounts.get(participant_id)

    def require(self, participant_id: str) -> InsurerAccount:
        account = self.accounts.get(participant_id)
        if account is None or not account.active:
            raise NotRegisteredError(participant_id, _ROLE)
        return account

    def allocation(self, participant_id: str, event_id: int) -> int:
        account = self.accounts.get(participant_id)
        return account.allocation(event_id) if account else 0

    def total_collateral(self) -> int:
        return sum(a.total_collateral for a in self.accounts.values() if a.active)

    def allocations_for_event(self, event_id: int) -> dict[str, int]:
        """participant_id -> allocation, only non-zero, in registration order."""
        return {
            pid: account.allocation(event_id)
            for pid, account in self.accounts.items()
            if account.active and account.allocation(event_id) > 0
        }

    # ------------------------------------------------------------------
    # Capital
    # ------------------------------------------------------------------

    def register(self, participant_id: str, collateral: int) -> InsurerAccount:
        existing = self.accounts.get(participant_id)
        if existing is not None and existing.active:
            raise AlreadyRegisteredError(participant_id, _ROLE)
        if collateral < self._min_collateral:
            raise BelowMinimumCollateralError(collateral, self._min_collateral)
        self._ledger.lock(participant_id, collateral, LockBucket.INSURER)
        account = InsurerAccount(participant_id=participant_id, total_collateral=collateral)
        self.accounts[participant_id] = account
        logger.info("insurer registered %s collateral=%d", participant_id, collateral)
        self._on_capital_change()
        return account

    def add_capital(self, participant_id: str, amount: int) -> InsurerAccount:
        account = self.require(participant_id)
        ensure_positive(amount, "capital amount")
        self._ledger.lock(participant_id, amount, LockBucket.INSURER)
        account.total_collateral += amount
        self._on_capital_change()
        return account

    # ------------------------------------------------------------------
    # Allocation
    # ------------------------------------------------------------------

    def allocate_to_event(self, participant_id: str, event_id: int, amount: int) -> InsurerAccount:
        account = self.require(participant_id)
        ensure_positive(amount, "allocation amount")
        self._registry.require_open(event_id)
        if account.deployable_capital < amount:
            raise InsufficientCollateralError(amount, account.deployable_capital)
        account.allocations[event_id] = account.allocation(event_id) + amount
        account.consumed_capital += amount
        self._sync_event_capital(event_id)
        logger.info("insurer %s allocated %d to event %d", participant_id, amount, event_id)
        self._on_capital_change()
        return account

    def remove_from_event(self, participant_id: str, event_id: int, amount: int) -> InsurerAccount:
        account = self.require(participant_id)
        ensure_positive(amount, "allocation amount")
        event = self._registry.get(event_id)
        if event.is_triggered:
            raise AlreadyTriggeredError(event_id)
        allocated = account.allocation(event_id)
        if allocated < amount:
            raise InsufficientAllocationError(event_id, amount, allocated)
        if allocated == amount:
            del account.allocations[event_id]
        else:
            account.allocations[event_id] = allocated - amount
        account.consumed_capital -= amount
        self._sync_event_capital(event_id)
        logger.info("insurer %s removed %d from event %d", participant_id, amount, event_id)
        self._on_capital_change()
        return account

    # ------------------------------------------------------------------
    # Premiums and claims (called by the distribution coordinator)
    # ------------------------------------------------------------------

    def record_premium(self, participant_id: str, amount: int) -> None:
        self.require(participant_id).total_premiums += amount

    def consume_for_claim(self, event_id: int, amount: int) -> dict[str, int]:
        """Deduct `amount` from the event's insurers by allocation weight.

        Returns participant_id -> deducted. The deducted value leaves the
        insurer's locked bucket; the caller credits it to policyholders.
        """
        weights = self.allocations_for_event(event_id)
        total = sum(weights.values())
        if amount > total:
            raise InsufficientAllocationError(event_id, amount, total)
        if amount == 0:
            return {}
        deductions = pro_rata(amount, weights)
        for participant_id, deducted in deductions.items():
            if deducted == 0:
                continue
            account = self.accounts[participant_id]
            self._ledger.debit_locked(participant_id, deducted, LockBucket.INSURER)
            remaining = account.allocation(event_id) - deducted
            if remaining == 0:
                del account.allocations[event_id]
            else:
                account.allocations[event_id] = remaining
            account.consumed_capital -= deducted
            account.total_collateral -= deducted
            account.total_losses += deducted
        self._sync_event_capital(event_id)
        logger.warning("event %d: insurer capital consumed %d across %d insurers",
                       event_id, amount, len(deductions))
        self._on_capital_change()
        return deductions

    def release_event(self, event_id: int) -> int:
        """Return every remaining allocation on a settled event to deployable capital."""
        released = 0
        for participant_id in list(self.allocations_for_event(event_id)):
            account = self.accounts[participant_id]
            amount = account.allocations.pop(event_id)
            account.consumed_capital -= amount
            released += amount
        if released:
            self._sync_event_capital(event_id)
            logger.info("event %d: released %d of insurer allocations", event_id, released)
            self._on_capital_change()
        return released

    def _sync_event_capital(self, event_id: int) -> None:
        total = sum(self.allocations_for_event(event_id).values())
        self._registry.set_total_insurer_capital(event_id, total)
