"""DistributionCoordinator — premium flow in, claim payouts out.

Premium lifecycle of a policy:

    buy       → lockup deposit reserved in the holder's policyholder bucket
    activate  → deposit paid into the event accumulator
    collect   → accrued premium debited from the holder into the accumulator
    distribute→ accumulator split: protocol fee, insurer share, reinsurer share

Claims after trigger are paid at full coverage from insurer allocations
(INSURER_CLAIM_SHARE_BPS) and reinsurer collateral (the remainder). The
reinsurer part is capped by live reinsurance capital; any shortfall falls
back on the event's insurers.

The coordinator is the only place that moves value between the ledger and
the event accumulators, so conservation is checked around its operations.
"""

import logging
from collections.abc import Callable

from src.rp_common.errors import (
    EventNotTriggeredError,
    InsufficientBalanceError,
    InsufficientCollateralError,
    InsufficientInsurerCapitalError,
    InvalidIntervalError,
    NoCapitalAllocatedError,
    NotPolicyHolderError,
    PremiumExceedsLimitError,
    TooEarlyError,
)
from src.rp_common.fixed_point import (
    SECONDS_PER_YEAR,
    apply_bps,
    ensure_positive,
    mul_div,
    pro_rata,
)
from src.rp_common.pool_config import PoolConfig
from src.rp_distribution.domain.models import (
    CollectionResult,
    DistributionResult,
    SettlementResult,
)
from src.rp_event.domain.models import Event
from src.rp_event.domain.registry import EventRegistry
from src.rp_ledger.domain.ledger import Ledger
from src.rp_ledger.domain.models import LockBucket
from src.rp_policy.domain.book import PolicyBook
from src.rp_policy.domain.models import Policy
from src.rp_pool.domain.capital_pool import CapitalPool
from src.rp_pool.domain.reinsurance_pool import ReinsurancePool
from src.rp_pricing.domain.engine import RiskPricingEngine

logger = logging.getLogger(__name__)


class DistributionCoordinator:
    def __init__(
        self,
        ledger: Ledger,
        registry: EventRegistry,
        insurers: CapitalPool,
        reinsurers: ReinsurancePool,
        book: PolicyBook,
        pricing: RiskPricingEngine,
        config: PoolConfig,
        on_capital_change: Callable[[], None],
    ) -> None:
        self._ledger = ledger
        self._registry = registry
        self._insurers = insurers
        self._reinsurers = reinsurers
        self._book = book
        self._pricing = pricing
        self._config = config
        self._on_capital_change = on_capital_change

    # ------------------------------------------------------------------
    # Policies
    # ------------------------------------------------------------------

    def buy_policy(
        self,
        holder: str,
        event_id: int,
        coverage: int,
        max_loss_limit: int,
        now: int,
    ) -> Policy:
        """Quote, reserve the lockup deposit and open a LOCKED policy.

        `max_loss_limit` is the most the buyer is prepared to pay per year:
        the holder must have that much available, and the quoted annual
        premium may not exceed it.
        """
        ensure_positive(coverage, "coverage")
        ensure_positive(max_loss_limit, "max_loss_limit")
        event = self._registry.require_open(event_id)
        if event.total_insurer_capital == 0:
            raise NoCapitalAllocatedError(event_id)

        available = self._ledger.get_balance(holder).available
        if available < max_loss_limit:
            raise InsufficientBalanceError(max_loss_limit, available)

        capacity = event.total_insurer_capital - event.total_coverage
        if coverage > capacity:
            raise InsufficientCollateralError(coverage, max(capacity, 0))

        quote = self._pricing.quote_annual_premium(event, coverage)
        if quote.annualized_premium > max_loss_limit:
            raise PremiumExceedsLimitError(quote.annualized_premium, max_loss_limit)

        deposit = mul_div(
            quote.annualized_premium, self._config.lockup_period, SECONDS_PER_YEAR, "lockup_deposit"
        )
        if deposit > 0:
            self._ledger.lock(holder, deposit, LockBucket.POLICYHOLDER)
        self._registry.add_coverage(event_id, coverage)
        return self._book.create(
            holder=holder,
            event_id=event_id,
            coverage=coverage,
            annualized_premium=quote.annualized_premium,
            now=now,
            lockup_period=self._config.lockup_period,
            lockup_deposit=deposit,
        )

    def activate_policy(self, holder: str, policy_id: int, now: int) -> Policy:
        policy = self._book.check_activation(holder, policy_id, now)
        self._registry.require_open(policy.event_id)
        if policy.lockup_deposit > 0:
            self._ledger.debit_locked(holder, policy.lockup_deposit, LockBucket.POLICYHOLDER)
            self._registry.accumulate_premiums(policy.event_id, policy.lockup_deposit)
        policy = self._book.activate(holder, policy_id, now)
        logger.info("policy %d activated holder=%s deposit=%d", policy_id, holder, policy.lockup_deposit)
        return policy

    def deactivate_event(self, caller: str, event_id: int) -> Event:
        """Close an event to new business and return locked deposits."""
        event = self._registry.deactivate(caller, event_id)
        self._refund_lockup_deposits(event_id)
        self._on_capital_change()
        return event

    # ------------------------------------------------------------------
    # Premium collection and distribution
    # ------------------------------------------------------------------

    def collect_ongoing_premiums(self, event_id: int, now: int) -> CollectionResult:
        """Pull accrued premium from every active holder of the event.

        A holder who cannot cover the amount due is skipped; the unpaid
        premium keeps accruing and is picked up by a later collection.
        On a triggered event accrual stops at trigger_time, so premium
        earned before the trigger can still be collected. A deactivated
        event collects nothing.
        """
        event = self._registry.get(event_id)
        result = CollectionResult(event_id=event_id)
        if not event.is_active:
            return result
        if event.is_triggered and event.trigger_time is not None:
            now = min(now, event.trigger_time)

        for policy in self._book.collectible(event_id):
            due = self._book.premium_due(policy, now)
            if due == 0:
                continue
            if self._ledger.get_balance(policy.holder).available < due:
                result.policies_skipped += 1
                logger.info("policy %d: holder %s short of premium %d, skipped",
                            policy.id, policy.holder, due)
                continue
            self._ledger.debit(policy.holder, due)
            self._registry.accumulate_premiums(event_id, due)
            self._book.record_collection(policy.id, due, now)
            result.collected += due
            result.policies_charged += 1
        return result

    def distribute_event_premiums(self, event_id: int, now: int) -> DistributionResult:
        self._registry.get(event_id)
        amount = self._registry.clear_accumulated_premiums(event_id, now)
        result = DistributionResult(event_id=event_id, distributed=amount)
        self._split(event_id, amount, result)
        return result

    def distribute_periodically(
        self, caller: str, event_id: int, interval: int, now: int
    ) -> DistributionResult:
        """Rate-limited distribution open to anyone; the caller earns a fee."""
        if interval < self._config.min_distribution_interval:
            raise InvalidIntervalError(interval, self._config.min_distribution_interval)
        event = self._registry.get(event_id)
        last = event.last_distribution_time
        if last is not None and now < last + interval:
            raise TooEarlyError(event_id, last + interval)

        amount = self._registry.clear_accumulated_premiums(event_id, now)
        gratification = apply_bps(amount, self._config.gratification_bps)
        self._ledger.credit(caller, gratification)
        result = DistributionResult(event_id=event_id, distributed=amount, gratification=gratification)
        self._split(event_id, amount - gratification, result)
        return result

    def _split(self, event_id: int, amount: int, result: DistributionResult) -> None:
        if amount == 0:
            self._on_capital_change()
            return
        event = self._registry.get(event_id)

        fee = apply_bps(amount, self._config.protocol_fee_bps)
        net = amount - fee
        insurer_share = self._pricing.insurer_premium_share(
            event, net, self._config.insurer_claim_share_bps
        )
        reinsurer_share = net - insurer_share

        insurer_weights = self._insurers.allocations_for_event(event_id)
        reinsurer_weights = self._reinsurers.collateral_weights()
        unassigned = 0
        if insurer_share and not insurer_weights:
            unassigned += insurer_share
            insurer_share = 0
        if reinsurer_share and not reinsurer_weights:
            unassigned += reinsurer_share
            reinsurer_share = 0

        if insurer_share:
            result.insurer_payouts = pro_rata(insurer_share, insurer_weights)
            for participant_id, share in result.insurer_payouts.items():
                self._ledger.credit(participant_id, share)
                self._insurers.record_premium(participant_id, share)
        if reinsurer_share:
            result.reinsurer_payouts = pro_rata(reinsurer_share, reinsurer_weights)
            for participant_id, share in result.reinsurer_payouts.items():
                self._ledger.credit(participant_id, share)
                self._reinsurers.record_premium(participant_id, share)

        self._ledger.accrue_protocol_fee(fee + unassigned)
        result.protocol_fee = fee
        result.unassigned = unassigned
        result.insurer_share = insurer_share
        result.reinsurer_share = reinsurer_share
        logger.info(
            "event %d distributed %d: insurers=%d reinsurers=%d fee=%d unassigned=%d",
            event_id, amount, insurer_share, reinsurer_share, fee, unassigned,
        )
        self._on_capital_change()

    # ------------------------------------------------------------------
    # Claims
    # ------------------------------------------------------------------

    def settle_claims(self, event_id: int, now: int) -> SettlementResult:
        """Pay every active, unclaimed policy on a triggered event.

        Premium earned before the trigger is collected and distributed
        first, while the event's allocations still weight the insurer
        payouts; claims then consume those allocations and whatever is
        left is released.
        """
        event = self._registry.get(event_id)
        if not event.is_triggered:
            raise EventNotTriggeredError(event_id)

        claimable = self._book.collectible(event_id)
        total = sum(p.coverage for p in claimable)
        self._require_event_capital(event, total)
        result = SettlementResult(event_id=event_id)
        self._distribute_before_claims(event_id, now, result)
        if total > 0:
            self._fund_payouts(event, total, result)
            for policy in claimable:
                self._pay_claim(policy, result)
            self._registry.record_payouts(event_id, total)
            logger.warning("event %d settled: %d policies, payouts=%d",
                           event_id, result.policies_settled, total)
        result.deposits_refunded = self._refund_lockup_deposits(event_id)
        result.capital_released = self._insurers.release_event(event_id)
        return result

    def claim_policy(self, holder: str, policy_id: int, now: int) -> SettlementResult:
        """Settle a single policy; same funding rules as settle_claims."""
        policy = self._book.check_claimable(policy_id)
        if policy.holder != holder:
            raise NotPolicyHolderError(policy_id, holder)
        event = self._registry.get(policy.event_id)
        if not event.is_triggered:
            raise EventNotTriggeredError(event.id)
        self._require_event_capital(event, policy.coverage)
        result = SettlementResult(event_id=event.id)
        self._distribute_before_claims(event.id, now, result)
        self._fund_payouts(event, policy.coverage, result)
        self._pay_claim(policy, result)
        self._registry.record_payouts(event.id, policy.coverage)
        return result

    def _distribute_before_claims(self, event_id: int, now: int, result: SettlementResult) -> None:
        collection = self.collect_ongoing_premiums(event_id, now)
        result.premiums_collected = collection.collected
        if self._registry.get(event_id).accumulated_premiums == 0:
            return
        distribution = self.distribute_event_premiums(event_id, now)
        result.premiums_distributed = distribution.distributed

    def _require_event_capital(self, event: Event, total: int) -> None:
        if event.total_insurer_capital < total:
            logger.critical(
                "event %d: insurer capital %d cannot cover payouts %d",
                event.id, event.total_insurer_capital, total,
            )
            raise InsufficientInsurerCapitalError(event.id, event.total_insurer_capital, total)

    def _fund_payouts(self, event: Event, total: int, result: SettlementResult) -> None:
        reinsurer_part = total - apply_bps(total, self._config.insurer_claim_share_bps)
        reinsurer_part = min(reinsurer_part, self._reinsurers.total_collateral())
        insurer_part = total - reinsurer_part

        result.insurer_deductions = self._insurers.consume_for_claim(event.id, insurer_part)
        result.reinsurer_deductions = self._reinsurers.consume_for_claim(event.id, reinsurer_part)
        result.insurer_consumed += insurer_part
        result.reinsurer_consumed += reinsurer_part

    def _pay_claim(self, policy: Policy, result: SettlementResult) -> None:
        self._book.mark_claimed(policy.id)
        self._ledger.credit(policy.holder, policy.coverage)
        result.claim_payouts[policy.id] = policy.coverage
        result.policies_settled += 1
        result.total_payouts += policy.coverage

    def _refund_lockup_deposits(self, event_id: int) -> int:
        refunded = 0
        for policy in self._book.policies_for_event(event_id):
            deposit = self._book.release_lockup_deposit(policy.id)
            if deposit == 0:
                continue
            self._ledger.unlock(policy.holder, deposit, LockBucket.POLICYHOLDER)
            refunded += deposit
            logger.info("policy %d: lockup deposit %d returned to %s", policy.id, deposit, policy.holder)
        return refunded
