"""PolicyBook — policy records and the lockup/activation/claim state machine.

    LOCKED --activate (now >= activation_time)--> ACTIVE --claim--> CLAIMED

Policies are indexed by (event_id, holder) for the premium-collection scan.
Balance moves around these transitions are done by the distribution
coordinator; the book owns only policy state.
"""

import logging

from src.rp_common.errors import (
    AlreadyActiveError,
    AlreadyClaimedError,
    LockupNotExpiredError,
    NotPolicyHolderError,
    PolicyNotActiveError,
    PolicyNotFoundError,
)
from src.rp_common.fixed_point import SECONDS_PER_YEAR, ensure_positive, mul_div
from src.rp_event.domain.registry import EventRegistry
from src.rp_policy.domain.models import Policy

logger = logging.getLogger(__name__)


class PolicyBook:
    def __init__(self, registry: EventRegistry) -> None:
        self._registry = registry
        self.policies: dict[int, Policy] = {}
        self.next_policy_id = 1
        # event_id -> holder -> [policy_id]
        self._index: dict[int, dict[str, list[int]]] = {}

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, policy_id: int) -> Policy:
        policy = self.policies.get(policy_id)
        if policy is None:
            raise PolicyNotFoundError(policy_id)
        return policy

    def policies_for_event(self, event_id: int) -> list[Policy]:
        by_holder = self._index.get(event_id, {})
        return [self.policies[pid] for ids in by_holder.values() for pid in ids]

    def policies_for_holder(self, holder: str) -> list[Policy]:
        return [p for p in self.policies.values() if p.holder == holder]

    def collectible(self, event_id: int) -> list[Policy]:
        """Active, unclaimed policies on the event."""
        return [p for p in self.policies_for_event(event_id) if p.is_active and not p.is_claimed]

    def required_retained_balance(self, holder: str, period: int) -> int:
        """Premium the holder must keep available to cover `period` seconds
        of every active, unclaimed policy on an open event."""
        required = 0
        for policy in self.policies_for_holder(holder):
            if not policy.is_active or policy.is_claimed:
                continue
            if not self._registry.get(policy.event_id).is_open:
                continue
            required += mul_div(policy.annualized_premium, period, SECONDS_PER_YEAR, "retained")
        return required

    @staticmethod
    def premium_due(policy: Policy, now: int) -> int:
        """Premium accrued since activation and not yet collected.

        Computed from the cumulative elapsed time so that collecting often
        or rarely yields the same total; negative elapsed counts as zero.
        """
        elapsed = max(0, now - policy.accrual_start)
        accrued = mul_div(policy.annualized_premium, elapsed, SECONDS_PER_YEAR, "premium_due")
        return max(0, accrued - policy.premiums_collected)

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    def create(
        self,
        holder: str,
        event_id: int,
        coverage: int,
        annualized_premium: int,
        now: int,
        lockup_period: int,
        lockup_deposit: int,
    ) -> Policy:
        ensure_positive(coverage, "coverage")
        policy = Policy(
            id=self.next_policy_id,
            holder=holder,
            event_id=event_id,
            coverage=coverage,
            annualized_premium=annualized_premium,
            start_time=now,
            activation_time=now + lockup_period,
            lockup_deposit=lockup_deposit,
        )
        self.policies[policy.id] = policy
        self._index.setdefault(event_id, {}).setdefault(holder, []).append(policy.id)
        self.next_policy_id += 1
        logger.info("policy %d created holder=%s event=%d coverage=%d premium=%d",
                    policy.id, holder, event_id, coverage, annualized_premium)
        return policy

    def check_activation(self, holder: str, policy_id: int, now: int) -> Policy:
        """Validate the LOCKED → ACTIVE transition without applying it."""
        policy = self.get(policy_id)
        if policy.holder != holder:
            raise NotPolicyHolderError(policy_id, holder)
        if policy.is_active:
            raise AlreadyActiveError(policy_id)
        if policy.is_claimed:
            raise AlreadyClaimedError(policy_id)
        if now < policy.activation_time:
            raise LockupNotExpiredError(policy_id, policy.activation_time, now)
        return policy

    def activate(self, holder: str, policy_id: int, now: int) -> Policy:
        policy = self.check_activation(holder, policy_id, now)
        policy.is_active = True
        policy.accrual_start = now
        policy.last_collection_time = now
        return policy

    def record_collection(self, policy_id: int, amount: int, now: int) -> None:
        policy = self.get(policy_id)
        policy.premiums_collected += amount
        policy.last_collection_time = now

    def check_claimable(self, policy_id: int) -> Policy:
        policy = self.get(policy_id)
        if policy.is_claimed:
            raise AlreadyClaimedError(policy_id)
        if not policy.is_active:
            raise PolicyNotActiveError(policy_id)
        return policy

    def mark_claimed(self, policy_id: int) -> Policy:
        policy = self.check_claimable(policy_id)
        policy.is_claimed = True
        return policy

    def rebuild_index(self) -> None:
        """Recreate the (event_id, holder) index after loading from storage."""
        self._index = {}
        for policy in sorted(self.policies.values(), key=lambda p: p.id):
            self._index.setdefault(policy.event_id, {}).setdefault(policy.holder, []).append(policy.id)

    def release_lockup_deposit(self, policy_id: int) -> int:
        """Forfeit-free exit for a policy that can never activate.

        Returns the deposit to hand back to the holder and zeroes it on the
        record so it cannot be released twice.
        """
        policy = self.get(policy_id)
        if policy.is_active or policy.is_claimed:
            return 0
        deposit = policy.lockup_deposit
        policy.lockup_deposit = 0
        return deposit
