"""EventRegistry — named peril definitions and their per-event accumulators.

State machine per event:
    Registered(active) --trigger--> Triggered (terminal)
    Registered(active) --deactivate--> Registered(inactive)

Registration, trigger, deactivation and risk-parameter changes require the
registrar capability. Accumulator mutations are internal and called only by
the pools and the distribution coordinator.
"""

import logging

from src.rp_common.errors import (
    AlreadyTriggeredError,
    EventNotActiveError,
    EventNotFoundError,
    InvalidRiskParameterError,
    UnauthorizedRegistrarError,
    ValidationError,
)
from src.rp_common.fixed_point import BPS, ensure_positive
from src.rp_event.domain.models import MAX_PREMIUM_MULTIPLIER, Event

logger = logging.getLogger(__name__)


class EventRegistry:
    def __init__(self, registrar_ids: frozenset[str] | set[str] = frozenset()) -> None:
        self.events: dict[int, Event] = {}
        self.registrars: set[str] = set(registrar_ids)
        self.next_event_id = 1

    # ------------------------------------------------------------------
    # Capability
    # ------------------------------------------------------------------

    def is_registrar(self, participant_id: str) -> bool:
        return participant_id in self.registrars

    def require_registrar(self, participant_id: str) -> None:
        if not self.is_registrar(participant_id):
            raise UnauthorizedRegistrarError(participant_id)

    def grant_registrar(self, caller: str, participant_id: str) -> None:
        self.require_registrar(caller)
        self.registrars.add(participant_id)
        logger.info("registrar granted: %s by %s", participant_id, caller)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, event_id: int) -> Event:
        event = self.events.get(event_id)
        if event is None:
            raise EventNotFoundError(event_id)
        return event

    def require_open(self, event_id: int) -> Event:
        """Existing, active and untriggered, i.e. accepting new business."""
        event = self.get(event_id)
        if event.is_triggered:
            raise AlreadyTriggeredError(event_id)
        if not event.is_active:
            raise EventNotActiveError(event_id)
        return event

    def list_events(self) -> list[Event]:
        return list(self.events.values())

    def open_events(self) -> list[Event]:
        return [e for e in self.events.values() if e.is_open]

    # ------------------------------------------------------------------
    # Registrar operations
    # ------------------------------------------------------------------

    def register_event(
        self,
        caller: str,
        name: str,
        description: str,
        trigger_threshold: int,
        base_premium: int,
    ) -> int:
        self.require_registrar(caller)
        if not name.strip():
            raise ValidationError(1009, "Event name must not be empty", 422)
        if not (0 < trigger_threshold <= BPS):
            raise InvalidRiskParameterError(f"trigger_threshold={trigger_threshold}")
        if not (0 < base_premium <= BPS):
            raise InvalidRiskParameterError(f"base_premium={base_premium}")

        event_id = self.next_event_id
        self.events[event_id] = Event(
            id=event_id,
            name=name,
            description=description,
            trigger_threshold=trigger_threshold,
            base_premium=base_premium,
            max_premium=min(base_premium * MAX_PREMIUM_MULTIPLIER, BPS),
        )
        self.next_event_id += 1
        logger.info("event registered id=%d name=%s base_premium=%dbps", event_id, name, base_premium)
        return event_id

    def trigger(self, caller: str, event_id: int, now: int) -> Event:
        """Accept the oracle's verdict at face value; terminal."""
        self.require_registrar(caller)
        event = self.get(event_id)
        if event.is_triggered:
            raise AlreadyTriggeredError(event_id)
        if not event.is_active:
            raise EventNotActiveError(event_id)
        event.is_triggered = True
        event.trigger_time = now
        logger.warning("event triggered id=%d at=%d", event_id, now)
        return event

    def deactivate(self, caller: str, event_id: int) -> Event:
        self.require_registrar(caller)
        event = self.require_open(event_id)
        event.is_active = False
        logger.info("event deactivated id=%d", event_id)
        return event

    def set_risk_parameters(
        self,
        caller: str,
        event_id: int,
        expected_loss_ratio: int,
        total_loss_ratio: int,
    ) -> Event:
        self.require_registrar(caller)
        event = self.require_open(event_id)
        if not (0 < expected_loss_ratio <= BPS):
            raise InvalidRiskParameterError(f"expected_loss_ratio={expected_loss_ratio}")
        if total_loss_ratio < expected_loss_ratio:
            raise InvalidRiskParameterError(
                f"total_loss_ratio={total_loss_ratio} below expected_loss_ratio"
            )
        event.expected_loss_ratio = expected_loss_ratio
        event.total_loss_ratio = total_loss_ratio
        return event

    # ------------------------------------------------------------------
    # Accumulators (internal)
    # ------------------------------------------------------------------

    def add_coverage(self, event_id: int, amount: int) -> None:
        ensure_positive(amount, "coverage")
        self.require_open(event_id).total_coverage += amount

    def accumulate_premiums(self, event_id: int, amount: int) -> None:
        """Add collected premium to the accumulator.

        A triggered event still accepts premium that accrued before its
        trigger_time; the coordinator caps accrual there. A deactivated
        event accepts nothing.
        """
        ensure_positive(amount, "premium")
        event = self.get(event_id)
        if not event.is_active:
            raise EventNotActiveError(event_id)
        event.accumulated_premiums += amount
        event.total_premiums += amount

    def clear_accumulated_premiums(self, event_id: int, now: int) -> int:
        """Zero the accumulator and stamp the distribution time.

        Allowed after trigger: premiums earned before the trigger still
        belong to the capital providers.
        """
        event = self.get(event_id)
        cleared = event.accumulated_premiums
        event.accumulated_premiums = 0
        event.last_distribution_time = now
        return cleared

    def set_total_insurer_capital(self, event_id: int, total: int) -> None:
        self.get(event_id).total_insurer_capital = total

    def record_payouts(self, event_id: int, amount: int) -> None:
        self.get(event_id).total_payouts += amount
