"""Domain models for rp_pool — pure dataclasses."""

from dataclasses import dataclass, field


@dataclass
class InsurerAccount:
    participant_id: str
    total_collateral: int          # net of claim losses; mirrors locked_as_insurer
    consumed_capital: int = 0      # committed to events, == Σ allocations
    total_premiums: int = 0
    total_losses: int = 0
    active: bool = True
    allocations: dict[int, int] = field(default_factory=dict)   # event_id -> amount

    @property
    def deployable_capital(self) -> int:
        return self.total_collateral - self.consumed_capital

    def allocation(self, event_id: int) -> int:
        return self.allocations.get(event_id, 0)


@dataclass
class ReinsurerAccount:
    participant_id: str
    collateral: int                # net of claim losses; mirrors locked_as_reinsurer
    consumed_capital: int = 0      # cumulative capital consumed by claims
    total_premiums: int = 0
    active: bool = True
