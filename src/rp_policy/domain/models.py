"""Policy domain model — pure dataclass, no SQLAlchemy dependency."""

from dataclasses import dataclass

from src.rp_common.enums import PolicyStatus
from src.rp_common.fixed_point import SECONDS_PER_YEAR


@dataclass
class Policy:
    id: int
    holder: str
    event_id: int
    coverage: int
    annualized_premium: int
    start_time: int
    activation_time: int               # start_time + lockup period
    is_active: bool = False            # flips once, after the lockup
    is_claimed: bool = False           # flips at most once, after trigger
    lockup_deposit: int = 0            # reserved at purchase, paid in at activation
    accrual_start: int = 0             # set at activation
    last_collection_time: int = 0      # last successful collection
    premiums_collected: int = 0        # ongoing premiums, excludes the deposit

    @property
    def status(self) -> PolicyStatus:
        if self.is_claimed:
            return PolicyStatus.CLAIMED
        return PolicyStatus.ACTIVE if self.is_active else PolicyStatus.LOCKED

    @property
    def premium_per_second(self) -> int:
        """Truncated per-second rate; accrual itself uses the exact ratio."""
        return self.annualized_premium // SECONDS_PER_YEAR

    @property
    def total_paid(self) -> int:
        return self.lockup_deposit + self.premiums_collected
