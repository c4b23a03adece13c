"""Unit tests for verify_global_invariants on consistent and tampered state."""

from src.rp_engine.domain.invariants import verify_global_invariants
from src.rp_engine.domain.risk_pool import RiskPool

T0 = 1_700_000_000


def _populated(pool: RiskPool, event_id: int) -> None:
    pool.ledger.deposit("alice", 2_000)
    pool.distribution.buy_policy("alice", event_id, 5_000, 1_000, T0)


class TestConsistentState:
    def test_empty_pool(self, pool: RiskPool) -> None:
        assert verify_global_invariants(pool) == []

    def test_populated_pool(self, pool: RiskPool, funded_event: int) -> None:
        _populated(pool, funded_event)
        assert verify_global_invariants(pool) == []


class TestTamperedState:
    def test_value_created_from_nothing(self, pool: RiskPool, funded_event: int) -> None:
        _populated(pool, funded_event)
        pool.ledger.balances["alice"].available += 1
        violations = verify_global_invariants(pool)
        assert any(v.startswith("conservation") for v in violations)

    def test_custody_drift(self, pool: RiskPool, funded_event: int) -> None:
        pool.ledger.payment_asset.transfer_in("outsider", 5)
        violations = verify_global_invariants(pool)
        assert any(v.startswith("custody") for v in violations)

    def test_negative_bucket(self, pool: RiskPool, funded_event: int) -> None:
        balance = pool.ledger.balances["ins-1"]
        balance.available = -1
        balance.locked_as_insurer = 10_001
        violations = verify_global_invariants(pool)
        assert "ins-1: negative available=-1" in violations

    def test_collateral_out_of_sync(self, pool: RiskPool, funded_event: int) -> None:
        pool.insurers.accounts["ins-1"].total_collateral += 1
        violations = verify_global_invariants(pool)
        assert any("locked_as_insurer" in v for v in violations)

    def test_allocation_out_of_sync(self, pool: RiskPool, funded_event: int) -> None:
        pool.registry.get(funded_event).total_insurer_capital = 1
        violations = verify_global_invariants(pool)
        assert any(v.startswith(f"event {funded_event}") for v in violations)

    def test_consumed_exceeds_collateral(self, pool: RiskPool, funded_event: int) -> None:
        account = pool.insurers.accounts["ins-1"]
        account.consumed_capital += 1
        account.allocations[funded_event] += 1
        violations = verify_global_invariants(pool)
        assert any("consumed(10001) > collateral(10000)" in v for v in violations)

    def test_lockup_deposit_out_of_sync(self, pool: RiskPool, funded_event: int) -> None:
        _populated(pool, funded_event)
        pool.book.get(1).lockup_deposit += 1
        violations = verify_global_invariants(pool)
        assert any("lockup deposits" in v for v in violations)
