"""Domain models for rp_event — pure dataclasses, no business logic."""

from dataclasses import dataclass

from src.rp_common.enums import EventStatus

DEFAULT_EXPECTED_LOSS_RATIO_BPS = 500      # 5%
DEFAULT_TOTAL_LOSS_RATIO_BPS = 15_000      # 150%
MAX_PREMIUM_MULTIPLIER = 10


@dataclass
class Event:
    id: int
    name: str
    description: str
    trigger_threshold: int          # bps, e.g. 2000 = "drops more than 20%"
    base_premium: int               # bps of coverage per year
    is_active: bool = True
    is_triggered: bool = False
    trigger_time: int | None = None
    total_coverage: int = 0
    total_premiums: int = 0         # lifetime premiums collected
    total_insurer_capital: int = 0  # Σ insurer allocations to this event
    accumulated_premiums: int = 0   # collected, not yet distributed
    last_distribution_time: int | None = None   # None until the first distribution
    total_payouts: int = 0
    # Risk parameters, bps
    expected_loss_ratio: int = DEFAULT_EXPECTED_LOSS_RATIO_BPS
    total_loss_ratio: int = DEFAULT_TOTAL_LOSS_RATIO_BPS
    max_premium: int = 0

    @property
    def status(self) -> EventStatus:
        if self.is_triggered:
            return EventStatus.TRIGGERED
        return EventStatus.ACTIVE if self.is_active else EventStatus.INACTIVE

    @property
    def is_open(self) -> bool:
        """Accepting new business: active and not yet triggered."""
        return self.is_active and not self.is_triggered
