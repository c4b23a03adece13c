"""Domain models for rp_pricing."""

from dataclasses import dataclass


@dataclass
class ReinsuranceState:
    """Global risk aggregate, derived from live pool totals.

    Never edited field by field: RiskPricingEngine.recompute() or
    update_reinsurance_state() replace it whenever capital changes.
    """

    total_capital: int = 0                   # insurer collateral + reinsurance capital
    reinsurance_capital: int = 0             # Σ reinsurer collateral
    expected_reinsurance_loss: int = 0
    total_expected_loss: int = 0
    total_expected_loss_ratio_sum: int = 0   # bps, Σ over open events with capital

    @property
    def is_initialized(self) -> bool:
        return self.total_capital > 0 and self.total_expected_loss_ratio_sum > 0


@dataclass(frozen=True)
class PremiumQuote:
    event_id: int
    coverage: int
    annualized_premium: int
    probability_bps: int
    max_premium: int
    beta_bps: int
    model_priced: bool   # False → base_premium fallback
