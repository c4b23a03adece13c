"""Unit tests for the closed-form pricing model and RiskPricingEngine."""

import pytest

from src.rp_common.errors import DivisionByZeroError
from src.rp_engine.domain.risk_pool import RiskPool
from src.rp_pricing.domain.engine import (
    PROBABILITY_CAP_BPS,
    beta,
    reinsurance_ratio,
    shared_risk_premium,
    solve_event_probability_and_max_premium,
)


class TestBeta:
    def test_closed_form(self) -> None:
        # mu * K / (N * S) in bps: 10000 * 10000 * 10000 / (5000 * 500)
        assert beta(10_000, 5_000, 500, 10_000) == 400_000

    def test_zero_notional(self) -> None:
        with pytest.raises(DivisionByZeroError):
            beta(10_000, 0, 500, 10_000)

    def test_reinsurance_ratio(self) -> None:
        assert reinsurance_ratio(2_500, 10_000) == 2_500


class TestSolveProbability:
    def test_low_leverage_falls_back_to_expected_loss(self) -> None:
        # leverage = 15000 * 5000 / 10000 = 7500 bps <= 100%
        probability, max_premium = solve_event_probability_and_max_premium(
            10_000, 5_000, 400_000, 500, 15_000, 0, 10_000
        )
        assert probability == 500
        # organic 375, clamped up to insurer_capital / 10
        assert max_premium == 1_000

    def test_high_leverage_without_reinsurance(self) -> None:
        # leverage 75000 bps; w = 100%; p = 500 + 500 * 6.5 = 3750
        probability, max_premium = solve_event_probability_and_max_premium(
            1_000, 5_000, 4_000, 500, 15_000, 0, 1_000
        )
        assert probability == 3_750
        assert max_premium == 2_812

    def test_reinsurance_takes_part_of_the_tail(self) -> None:
        alone, _ = solve_event_probability_and_max_premium(
            1_000, 5_000, 4_000, 500, 15_000, 0, 1_000
        )
        shared, _ = solve_event_probability_and_max_premium(
            1_000, 5_000, 4_000, 500, 15_000, 10_000, 11_000
        )
        assert shared < alone

    def test_probability_cap(self) -> None:
        probability, max_premium = solve_event_probability_and_max_premium(
            100, 100_000, 1, 500, 15_000, 0, 100
        )
        assert probability == PROBABILITY_CAP_BPS
        assert max_premium == 1_000  # 10 x insurer capital

    def test_zero_capital(self) -> None:
        with pytest.raises(DivisionByZeroError):
            solve_event_probability_and_max_premium(0, 5_000, 1, 500, 15_000, 0, 0)


class TestSharedRiskPremium:
    def test_no_reinsurance_keeps_everything(self) -> None:
        assert shared_risk_premium(400_000, 0, 10_000, 1_000) == 1_000

    def test_with_reinsurance(self) -> None:
        # r = 5000; 1000 * 400000 / 405000
        assert shared_risk_premium(400_000, 10_000, 20_000, 1_000) == 987


class TestRecompute:
    def test_aggregate_follows_capital(self, pool: RiskPool, funded_event: int) -> None:
        state = pool.pricing.state
        assert state.total_capital == 10_000
        assert state.reinsurance_capital == 0
        assert state.total_expected_loss == 500
        assert state.total_expected_loss_ratio_sum == 500
        assert state.expected_reinsurance_loss == 0
        assert state.is_initialized

        pool.ledger.deposit("re-1", 10_000)
        pool.reinsurers.register("re-1", 10_000)
        state = pool.pricing.state
        assert state.total_capital == 20_000
        assert state.reinsurance_capital == 10_000
        # 30% of expected loss 500
        assert state.expected_reinsurance_loss == 150

    def test_closed_events_drop_out(self, pool: RiskPool, funded_event: int) -> None:
        pool.trigger_event("registrar", funded_event, now=1)
        state = pool.pricing.state
        assert state.total_expected_loss_ratio_sum == 0
        assert not state.is_initialized

    def test_risk_parameters_reprice(self, pool: RiskPool, funded_event: int) -> None:
        pool.set_risk_parameters("registrar", funded_event, 1_000, 15_000)
        assert pool.pricing.state.total_expected_loss_ratio_sum == 1_000
        assert pool.pricing.state.total_expected_loss == 1_000

    def test_explicit_update(self, pool: RiskPool) -> None:
        state = pool.pricing.update_reinsurance_state(100, 40, 5, 20, 300)
        assert state.total_capital == 100
        assert state.total_expected_loss_ratio_sum == 300
        kept = pool.pricing.update_reinsurance_state(200, 40, 5, 20)
        assert kept.total_expected_loss_ratio_sum == 300


class TestQuote:
    def test_end_to_end_quote(self, pool: RiskPool, funded_event: int) -> None:
        event = pool.registry.get(funded_event)
        quote = pool.pricing.quote_annual_premium(event, 5_000)
        assert quote.model_priced
        assert quote.beta_bps == 400_000
        assert quote.probability_bps == 500
        assert quote.max_premium == 1_000
        # 5000 * 5% * 150%
        assert quote.annualized_premium == 375

    def test_base_premium_fallback(self, pool: RiskPool) -> None:
        event_id = pool.registry.register_event("registrar", "quake", "", 1_000, 500)
        quote = pool.pricing.quote_annual_premium(pool.registry.get(event_id), 5_000)
        assert not quote.model_priced
        assert quote.annualized_premium == 250

    def test_strictly_increasing_in_coverage(self, pool: RiskPool, funded_event: int) -> None:
        event = pool.registry.get(funded_event)
        premiums = [
            pool.pricing.quote_annual_premium(event, coverage).annualized_premium
            for coverage in range(1_000, 10_001, 1_000)
        ]
        assert all(a < b for a, b in zip(premiums, premiums[1:]))

    def test_capped_by_event_max_premium_rate(self, pool: RiskPool, funded_event: int) -> None:
        event = pool.registry.get(funded_event)
        event.max_premium = 100  # 1% of coverage
        quote = pool.pricing.quote_annual_premium(event, 5_000)
        assert quote.annualized_premium == 50


class TestInsurerPremiumShare:
    def test_no_reinsurance(self, pool: RiskPool, funded_event: int) -> None:
        event = pool.registry.get(funded_event)
        event.total_coverage = 5_000
        assert pool.pricing.insurer_premium_share(event, 100, 7_000) == 100

    def test_default_share_without_coverage(self, pool: RiskPool, funded_event: int) -> None:
        pool.ledger.deposit("re-1", 10_000)
        pool.reinsurers.register("re-1", 10_000)
        event = pool.registry.get(funded_event)
        assert pool.pricing.insurer_premium_share(event, 100, 7_000) == 70

    def test_risk_weighted(self, pool: RiskPool, funded_event: int) -> None:
        pool.ledger.deposit("re-1", 10_000)
        pool.reinsurers.register("re-1", 10_000)
        event = pool.registry.get(funded_event)
        event.total_coverage = 5_000
        # beta 400000, r = 5000 -> 100 * 400000 / 405000
        assert pool.pricing.insurer_premium_share(event, 100, 7_000) == 98
