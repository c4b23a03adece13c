"""Result records returned by the distribution coordinator."""

from dataclasses import dataclass, field


@dataclass
class CollectionResult:
    event_id: int
    collected: int = 0
    policies_charged: int = 0
    policies_skipped: int = 0     # holder could not pay; backlog keeps accruing


@dataclass
class DistributionResult:
    event_id: int
    distributed: int = 0          # accumulator value cleared
    gratification: int = 0        # caller incentive (periodic variant only)
    protocol_fee: int = 0
    insurer_share: int = 0
    reinsurer_share: int = 0
    unassigned: int = 0           # no counterparty on that side → protocol fees
    insurer_payouts: dict[str, int] = field(default_factory=dict)
    reinsurer_payouts: dict[str, int] = field(default_factory=dict)


@dataclass
class SettlementResult:
    event_id: int
    total_payouts: int = 0
    policies_settled: int = 0
    insurer_consumed: int = 0
    reinsurer_consumed: int = 0
    deposits_refunded: int = 0
    capital_released: int = 0     # leftover allocations returned to insurers
    premiums_collected: int = 0   # pre-trigger accrual pulled in before paying claims
    premiums_distributed: int = 0
    claim_payouts: dict[int, int] = field(default_factory=dict)        # policy_id -> coverage
    insurer_deductions: dict[str, int] = field(default_factory=dict)
    reinsurer_deductions: dict[str, int] = field(default_factory=dict)
