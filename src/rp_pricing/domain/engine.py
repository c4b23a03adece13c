"""RiskPricingEngine — closed-form capital-allocation pricing model.

With no market feed, premiums come from pooled-capital ratios:

    beta  = mu * (K / N) / S
        K = insurer capital allocated to the event
        N = policy notional (event coverage including the new policy)
        S = Σ expected-loss ratios over open events with capital

    leverage = total_loss_ratio * N / K
    leverage <= 1  → capital absorbs the full-loss scenario, p = elr
    leverage >  1  → p = elr + elr * (leverage - 1) * w
        w = beta / (beta + R / T) — insurer weight of the tail,
        R = reinsurance capital, T = total capital

    max_premium  = N * p * total_loss_ratio
    shared_risk_premium = beta / (beta + R / T) * max_premium

Hard bounds (not organic results, kept as explicit limits):
    p           ∈ [1%, 50%]
    max_premium ∈ [0.1 K, 10 K]

Every quantity is an int: amounts in smallest units, ratios in bps.
"""

import logging
from collections.abc import Iterable

from src.rp_common.fixed_point import BPS, apply_bps, clamp, mul_div
from src.rp_event.domain.models import Event
from src.rp_pricing.domain.models import PremiumQuote, ReinsuranceState

logger = logging.getLogger(__name__)

PROBABILITY_FLOOR_BPS = 100
PROBABILITY_CAP_BPS = 5_000
MAX_PREMIUM_FLOOR_DIVISOR = 10     # max_premium >= K / 10
MAX_PREMIUM_CAP_MULTIPLIER = 10    # max_premium <= 10 K


def beta(
    insurer_capital: int,
    policy_notional: int,
    total_expected_loss_ratio_sum: int,
    mu: int,
) -> int:
    """Risk weight of the insurer capital relative to the pool, in bps."""
    return mul_div(
        mu * insurer_capital,
        BPS,
        policy_notional * total_expected_loss_ratio_sum,
        "beta",
    )


def reinsurance_ratio(reinsurance_capital: int, total_capital: int) -> int:
    """R / T in bps."""
    return mul_div(reinsurance_capital, BPS, total_capital, "reinsurance_ratio")


def solve_event_probability_and_max_premium(
    insurer_capital: int,
    notional: int,
    beta_bps: int,
    expected_loss_ratio: int,
    total_loss_ratio: int,
    reinsurance_capital: int,
    total_capital: int,
) -> tuple[int, int]:
    """Return (probability_bps, max_premium) for an event.

    Falls back to probability = expected_loss_ratio when the leverage term
    (leverage - 1) would underflow, i.e. alpha * N / K <= 1.
    """
    leverage = mul_div(total_loss_ratio, notional, insurer_capital, "leverage")
    if leverage <= BPS:
        probability = expected_loss_ratio
    else:
        r = reinsurance_ratio(reinsurance_capital, total_capital) if reinsurance_capital else 0
        weight = mul_div(beta_bps, BPS, beta_bps + r, "insurer_weight")
        excess = mul_div(expected_loss_ratio * (leverage - BPS), weight, BPS * BPS, "excess")
        probability = expected_loss_ratio + excess
    probability = clamp(probability, PROBABILITY_FLOOR_BPS, PROBABILITY_CAP_BPS)

    max_premium = mul_div(notional * probability, total_loss_ratio, BPS * BPS, "max_premium")
    max_premium = clamp(
        max_premium,
        insurer_capital // MAX_PREMIUM_FLOOR_DIVISOR,
        insurer_capital * MAX_PREMIUM_CAP_MULTIPLIER,
    )
    return probability, max_premium


def shared_risk_premium(
    beta_bps: int,
    reinsurance_capital: int,
    total_capital: int,
    max_premium: int,
) -> int:
    """Insurer part of `max_premium`: beta / (beta + R/T) * max_premium."""
    r = reinsurance_ratio(reinsurance_capital, total_capital) if reinsurance_capital else 0
    return mul_div(max_premium, beta_bps, beta_bps + r, "shared_risk_premium")


class RiskPricingEngine:
    """Holds the global ReinsuranceState and prices against it."""

    def __init__(self, mu_bps: int, reinsurer_claim_share_bps: int) -> None:
        self.mu_bps = mu_bps
        self.reinsurer_claim_share_bps = reinsurer_claim_share_bps
        self.state = ReinsuranceState()

    def update_reinsurance_state(
        self,
        total_capital: int,
        reinsurance_capital: int,
        expected_reinsurance_loss: int,
        total_expected_loss: int,
        total_expected_loss_ratio_sum: int | None = None,
    ) -> ReinsuranceState:
        ratio_sum = (
            self.state.total_expected_loss_ratio_sum
            if total_expected_loss_ratio_sum is None
            else total_expected_loss_ratio_sum
        )
        self.state = ReinsuranceState(
            total_capital=total_capital,
            reinsurance_capital=reinsurance_capital,
            expected_reinsurance_loss=expected_reinsurance_loss,
            total_expected_loss=total_expected_loss,
            total_expected_loss_ratio_sum=ratio_sum,
        )
        return self.state

    def recompute(
        self,
        insurer_capital: int,
        reinsurance_capital: int,
        events: Iterable[Event],
    ) -> ReinsuranceState:
        """Derive the aggregate from live pool totals and open events."""
        total_expected_loss = 0
        ratio_sum = 0
        for event in events:
            if not event.is_open or event.total_insurer_capital == 0:
                continue
            total_expected_loss += apply_bps(event.total_insurer_capital, event.expected_loss_ratio)
            ratio_sum += event.expected_loss_ratio
        expected_reinsurance_loss = min(
            apply_bps(total_expected_loss, self.reinsurer_claim_share_bps),
            reinsurance_capital,
        )
        state = self.update_reinsurance_state(
            total_capital=insurer_capital + reinsurance_capital,
            reinsurance_capital=reinsurance_capital,
            expected_reinsurance_loss=expected_reinsurance_loss,
            total_expected_loss=total_expected_loss,
            total_expected_loss_ratio_sum=ratio_sum,
        )
        logger.debug(
            "risk state recomputed: total=%d reins=%d exp_loss=%d ratio_sum=%d",
            state.total_capital, state.reinsurance_capital,
            state.total_expected_loss, state.total_expected_loss_ratio_sum,
        )
        return state

    def quote_annual_premium(self, event: Event, coverage: int) -> PremiumQuote:
        """Annualized premium for `coverage` against the current event state.

        Increasing in coverage for fixed event state: the probability never
        falls as notional grows, so every term is coverage times a
        non-decreasing rate. The max_premium floor is not applied per
        policy, since K / 10 spread over the notional is a falling rate.
        """
        state = self.state
        if not state.is_initialized or event.total_insurer_capital == 0:
            return PremiumQuote(
                event_id=event.id,
                coverage=coverage,
                annualized_premium=apply_bps(coverage, event.base_premium),
                probability_bps=event.expected_loss_ratio,
                max_premium=0,
                beta_bps=0,
                model_priced=False,
            )

        notional = event.total_coverage + coverage
        capital = event.total_insurer_capital
        beta_bps = beta(capital, notional, state.total_expected_loss_ratio_sum, self.mu_bps)
        probability, max_premium = solve_event_probability_and_max_premium(
            capital,
            notional,
            beta_bps,
            event.expected_loss_ratio,
            event.total_loss_ratio,
            state.reinsurance_capital,
            state.total_capital,
        )
        # Organic rate p * alpha, bounded by this policy's share of the
        # clamped event max and by the event's max_premium rate.
        premium = min(
            mul_div(coverage * probability, event.total_loss_ratio, BPS * BPS, "policy_premium"),
            mul_div(max_premium, coverage, notional, "policy_premium_cap"),
            apply_bps(coverage, event.max_premium),
        )
        return PremiumQuote(
            event_id=event.id,
            coverage=coverage,
            annualized_premium=premium,
            probability_bps=probability,
            max_premium=max_premium,
            beta_bps=beta_bps,
            model_priced=True,
        )

    def insurer_premium_share(self, event: Event, amount: int, default_share_bps: int) -> int:
        """Portion of `amount` owed to the event's insurers; the rest is reinsurers'."""
        state = self.state
        if amount == 0 or event.total_insurer_capital == 0:
            return 0
        if state.reinsurance_capital == 0:
            return amount
        if event.total_coverage == 0 or state.total_expected_loss_ratio_sum == 0:
            return apply_bps(amount, default_share_bps)
        beta_bps = beta(
            event.total_insurer_capital,
            event.total_coverage,
            state.total_expected_loss_ratio_sum,
            self.mu_bps,
        )
        return shared_risk_premium(
            beta_bps, state.reinsurance_capital, state.total_capital, amount
        )
