"""Domain models for rp_ledger — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from enum import Enum


class LockBucket(str, Enum):
    """Which locked sub-balance a move touches (value = attribute name)."""
    INSURER = "locked_as_insurer"
    REINSURER = "locked_as_reinsurer"
    POLICYHOLDER = "locked_as_policyholder_funds"


@dataclass
class ParticipantBalance:
    participant_id: str
    available: int = 0
    locked_as_insurer: int = 0
    locked_as_reinsurer: int = 0
    locked_as_policyholder_funds: int = 0
    total_deposited: int = 0     # lifetime, via payment asset
    total_withdrawn: int = 0     # lifetime, via payment asset

    @property
    def total_locked(self) -> int:
        return (
            self.locked_as_insurer
            + self.locked_as_reinsurer
            + self.locked_as_policyholder_funds
        )

    @property
    def total(self) -> int:
        return self.available + self.total_locked

    def locked(self, bucket: LockBucket) -> int:
        return int(getattr(self, bucket.value))
