"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class PoolType(str, Enum):
    INSURER = "INSURER"
    REINSURER = "REINSURER"


class EventStatus(str, Enum):
    """Derived from (is_active, is_triggered); TRIGGERED is terminal."""
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    TRIGGERED = "TRIGGERED"


class PolicyStatus(str, Enum):
    LOCKED = "LOCKED"
    ACTIVE = "ACTIVE"
    CLAIMED = "CLAIMED"
