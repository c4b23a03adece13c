"""Admin application service — read-only views over the whole ledger."""

from typing import Any

from src.rp_engine.domain.invariants import verify_global_invariants
from src.rp_engine.engine.engine import LedgerEngine


class AdminService:
    async def get_risk_state(self, engine: LedgerEngine) -> dict[str, Any]:
        pool = engine.pool
        state = pool.pricing.state
        return {
            "total_capital": state.total_capital,
            "reinsurance_capital": state.reinsurance_capital,
            "insurer_capital": pool.insurers.total_collateral(),
            "expected_reinsurance_loss": state.expected_reinsurance_loss,
            "total_expected_loss": state.total_expected_loss,
            "total_expected_loss_ratio_sum": state.total_expected_loss_ratio_sum,
            "is_initialized": state.is_initialized,
            "open_events": len(pool.registry.open_events()),
        }

    async def verify_all_invariants(self, engine: LedgerEngine) -> dict[str, object]:
        """Run the conservation and consistency checks on the live aggregate."""
        pool = engine.pool
        violations = verify_global_invariants(pool)
        return {
            "ok": len(violations) == 0,
            "violations": violations,
            "total_system_liquidity": pool.ledger.total_system_liquidity,
            "custody_balance": pool.ledger.payment_asset.custody_balance,
            "protocol_fees": pool.ledger.protocol_fees,
        }
