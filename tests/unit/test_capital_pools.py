"""Unit tests for CapitalPool (insurers) and ReinsurancePool."""

import pytest

from src.rp_common.errors import (
    AlreadyRegisteredError,
    AlreadyTriggeredError,
    BelowMinimumCollateralError,
    EventNotActiveError,
    InsufficientAllocationError,
    InsufficientBalanceError,
    InsufficientCollateralError,
    NotRegisteredError,
)
from src.rp_engine.domain.risk_pool import RiskPool


def _event(pool: RiskPool) -> int:
    return pool.registry.register_event("registrar", "storm", "", 1_000, 300)


def _insurer(pool: RiskPool, pid: str, collateral: int) -> None:
    pool.ledger.deposit(pid, collateral)
    pool.insurers.register(pid, collateral)


class TestInsurerRegistration:
    def test_register_locks_collateral(self, pool: RiskPool) -> None:
        _insurer(pool, "ins-1", 5_000)
        balance = pool.ledger.get_balance("ins-1")
        assert balance.available == 0
        assert balance.locked_as_insurer == 5_000
        account = pool.insurers.require("ins-1")
        assert account.total_collateral == 5_000
        assert account.deployable_capital == 5_000
        assert pool.pricing.state.total_capital == 5_000

    def test_below_minimum(self, pool: RiskPool) -> None:
        pool.ledger.deposit("ins-1", 5_000)
        with pytest.raises(BelowMinimumCollateralError):
            pool.insurers.register("ins-1", 999)

    def test_needs_available_balance(self, pool: RiskPool) -> None:
        with pytest.raises(InsufficientBalanceError):
            pool.insurers.register("ins-1", 1_000)
        assert pool.insurers.get("ins-1") is None

    def test_twice(self, pool: RiskPool) -> None:
        _insurer(pool, "ins-1", 1_000)
        pool.ledger.deposit("ins-1", 1_000)
        with pytest.raises(AlreadyRegisteredError):
            pool.insurers.register("ins-1", 1_000)

    def test_add_capital_requires_registration(self, pool: RiskPool) -> None:
        pool.ledger.deposit("ins-1", 1_000)
        with pytest.raises(NotRegisteredError):
            pool.insurers.add_capital("ins-1", 500)

    def test_add_capital(self, pool: RiskPool) -> None:
        _insurer(pool, "ins-1", 1_000)
        pool.ledger.deposit("ins-1", 500)
        account = pool.insurers.add_capital("ins-1", 500)
        assert account.total_collateral == 1_500
        assert pool.ledger.get_balance("ins-1").locked_as_insurer == 1_500


class TestAllocation:
    def test_allocate_updates_event_capital(self, pool: RiskPool) -> None:
        _insurer(pool, "ins-1", 4_000)
        _insurer(pool, "ins-2", 2_000)
        event_id = _event(pool)
        pool.insurers.allocate_to_event("ins-1", event_id, 3_000)
        pool.insurers.allocate_to_event("ins-2", event_id, 1_000)
        assert pool.registry.get(event_id).total_insurer_capital == 4_000
        assert pool.insurers.require("ins-1").consumed_capital == 3_000
        assert pool.insurers.allocations_for_event(event_id) == {"ins-1": 3_000, "ins-2": 1_000}

    def test_cannot_exceed_deployable(self, pool: RiskPool) -> None:
        _insurer(pool, "ins-1", 4_000)
        a, b = _event(pool), _event(pool)
        pool.insurers.allocate_to_event("ins-1", a, 3_000)
        with pytest.raises(InsufficientCollateralError):
            pool.insurers.allocate_to_event("ins-1", b, 1_001)

    def test_closed_event(self, pool: RiskPool) -> None:
        _insurer(pool, "ins-1", 4_000)
        event_id = _event(pool)
        pool.registry.deactivate("registrar", event_id)
        with pytest.raises(EventNotActiveError):
            pool.insurers.allocate_to_event("ins-1", event_id, 1_000)

    def test_remove(self, pool: RiskPool) -> None:
        _insurer(pool, "ins-1", 4_000)
        event_id = _event(pool)
        pool.insurers.allocate_to_event("ins-1", event_id, 3_000)
        account = pool.insurers.remove_from_event("ins-1", event_id, 1_000)
        assert account.allocation(event_id) == 2_000
        assert account.consumed_capital == 2_000
        pool.insurers.remove_from_event("ins-1", event_id, 2_000)
        assert event_id not in account.allocations
        assert pool.registry.get(event_id).total_insurer_capital == 0

    def test_remove_more_than_allocated(self, pool: RiskPool) -> None:
        _insurer(pool, "ins-1", 4_000)
        event_id = _event(pool)
        pool.insurers.allocate_to_event("ins-1", event_id, 1_000)
        with pytest.raises(InsufficientAllocationError):
            pool.insurers.remove_from_event("ins-1", event_id, 1_001)

    def test_remove_after_trigger(self, pool: RiskPool) -> None:
        _insurer(pool, "ins-1", 4_000)
        event_id = _event(pool)
        pool.insurers.allocate_to_event("ins-1", event_id, 1_000)
        pool.trigger_event("registrar", event_id, now=1)
        with pytest.raises(AlreadyTriggeredError):
            pool.insurers.remove_from_event("ins-1", event_id, 1_000)


class TestInsurerClaims:
    def test_consume_pro_rata_to_allocation(self, pool: RiskPool) -> None:
        _insurer(pool, "ins-1", 6_000)
        _insurer(pool, "ins-2", 2_000)
        event_id = _event(pool)
        pool.insurers.allocate_to_event("ins-1", event_id, 3_000)
        pool.insurers.allocate_to_event("ins-2", event_id, 1_000)

        deductions = pool.insurers.consume_for_claim(event_id, 2_000)
        assert deductions == {"ins-1": 1_500, "ins-2": 500}
        first = pool.insurers.require("ins-1")
        assert first.total_collateral == 4_500
        assert first.total_losses == 1_500
        assert first.allocation(event_id) == 1_500
        assert first.consumed_capital == 1_500
        assert pool.ledger.get_balance("ins-1").locked_as_insurer == 4_500
        assert pool.registry.get(event_id).total_insurer_capital == 2_000

    def test_odd_unit_charged_to_earliest_registered_on_tie(self, pool: RiskPool) -> None:
        _insurer(pool, "ins-1", 6_000)
        _insurer(pool, "ins-2", 6_000)
        event_id = _event(pool)
        pool.insurers.allocate_to_event("ins-1", event_id, 1_000)
        pool.insurers.allocate_to_event("ins-2", event_id, 1_000)

        deductions = pool.insurers.consume_for_claim(event_id, 1_001)
        assert deductions == {"ins-1": 501, "ins-2": 500}
        assert pool.registry.get(event_id).total_insurer_capital == 999

    def test_consume_beyond_allocation(self, pool: RiskPool) -> None:
        _insurer(pool, "ins-1", 6_000)
        event_id = _event(pool)
        pool.insurers.allocate_to_event("ins-1", event_id, 1_000)
        with pytest.raises(InsufficientAllocationError):
            pool.insurers.consume_for_claim(event_id, 1_001)

    def test_release_event(self, pool: RiskPool) -> None:
        _insurer(pool, "ins-1", 6_000)
        _insurer(pool, "ins-2", 2_000)
        event_id = _event(pool)
        pool.insurers.allocate_to_event("ins-1", event_id, 3_000)
        pool.insurers.allocate_to_event("ins-2", event_id, 1_000)
        assert pool.insurers.release_event(event_id) == 4_000
        assert pool.insurers.require("ins-1").deployable_capital == 6_000
        assert pool.insurers.require("ins-2").consumed_capital == 0
        assert pool.registry.get(event_id).total_insurer_capital == 0
        assert pool.insurers.release_event(event_id) == 0


class TestReinsurancePool:
    def test_register(self, pool: RiskPool) -> None:
        pool.ledger.deposit("re-1", 3_000)
        account = pool.reinsurers.register("re-1", 3_000)
        assert account.collateral == 3_000
        assert pool.ledger.get_balance("re-1").locked_as_reinsurer == 3_000
        assert pool.pricing.state.reinsurance_capital == 3_000

    def test_below_minimum(self, pool: RiskPool) -> None:
        pool.ledger.deposit("re-1", 3_000)
        with pytest.raises(BelowMinimumCollateralError):
            pool.reinsurers.register("re-1", 10)

    def test_add_capital(self, pool: RiskPool) -> None:
        pool.ledger.deposit("re-1", 3_000)
        pool.reinsurers.register("re-1", 2_000)
        assert pool.reinsurers.add_capital("re-1", 1_000).collateral == 3_000

    def test_consume_pro_rata_to_collateral(self, pool: RiskPool) -> None:
        pool.ledger.deposit("re-1", 3_000)
        pool.ledger.deposit("re-2", 1_000)
        pool.reinsurers.register("re-1", 3_000)
        pool.reinsurers.register("re-2", 1_000)
        deductions = pool.reinsurers.consume_for_claim(1, 400)
        assert deductions == {"re-1": 300, "re-2": 100}
        account = pool.reinsurers.require("re-1")
        assert account.collateral == 2_700
        assert account.consumed_capital == 300
        assert pool.ledger.get_balance("re-2").locked_as_reinsurer == 900

    def test_consume_beyond_collateral(self, pool: RiskPool) -> None:
        pool.ledger.deposit("re-1", 1_000)
        pool.reinsurers.register("re-1", 1_000)
        with pytest.raises(InsufficientCollateralError):
            pool.reinsurers.consume_for_claim(1, 1_001)
