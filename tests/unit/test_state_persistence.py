"""Unit tests for StateRepository using a mocked AsyncSession."""

import copy
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.rp_engine.domain.invariants import verify_global_invariants
from src.rp_engine.domain.risk_pool import RiskPool
from src.rp_engine.infrastructure.persistence import StateRepository


def _scalar_result(value: object) -> MagicMock:
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


def _rows_result(rows: list[SimpleNamespace]) -> MagicMock:
    result = MagicMock()
    result.scalars.return_value = rows
    return result


def _sql_of(call: object) -> str:
    return str(call.args[0])  # type: ignore[attr-defined]


@pytest.fixture
def db() -> MagicMock:
    session = MagicMock()
    session.execute = AsyncMock()
    return session


class TestFlush:
    async def test_writes_only_changed_rows(self, db: MagicMock) -> None:
        before = RiskPool()
        before.ledger.deposit("bob", 50)
        after = copy.deepcopy(before)
        after.ledger.deposit("alice", 100)

        await StateRepository().flush(before, after, db)

        assert db.execute.await_count == 2
        first, second = db.execute.await_args_list
        assert "INSERT INTO participants" in _sql_of(first)
        assert first.args[1]["participant_id"] == "alice"
        assert first.args[1]["available"] == 100
        assert "INSERT INTO system_state" in _sql_of(second)
        assert second.args[1]["total_system_liquidity"] == 150
        assert second.args[1]["custody_balance"] == 150

    async def test_full_lifecycle_rows(self, db: MagicMock, funded_event: int, pool: RiskPool) -> None:
        before = RiskPool()
        await StateRepository().flush(before, pool, db)

        statements = [_sql_of(c) for c in db.execute.await_args_list]
        assert sum("INSERT INTO participants" in s for s in statements) == 1
        assert sum("INSERT INTO pools" in s for s in statements) == 1
        assert sum("INSERT INTO events" in s for s in statements) == 1

        pool_call = next(c for c in db.execute.await_args_list if "INSERT INTO pools" in _sql_of(c))
        params = pool_call.args[1]
        assert params["pool_type"] == "INSURER"
        assert json.loads(params["allocations"]) == {str(funded_event): 10_000}

        state_call = db.execute.await_args_list[-1]
        assert json.loads(state_call.args[1]["registrars"]) == ["registrar"]
        assert state_call.args[1]["next_event_id"] == 2

    async def test_reinsurer_row(self, db: MagicMock) -> None:
        before = RiskPool()
        after = copy.deepcopy(before)
        after.ledger.deposit("re-1", 2_000)
        after.reinsurers.register("re-1", 2_000)

        await StateRepository().flush(before, after, db)

        pool_call = next(c for c in db.execute.await_args_list if "INSERT INTO pools" in _sql_of(c))
        assert pool_call.args[1]["pool_type"] == "REINSURER"
        assert pool_call.args[1]["collateral"] == 2_000
        assert pool_call.args[1]["allocations"] == "{}"


class TestLoad:
    async def test_empty_database(self, db: MagicMock) -> None:
        db.execute.return_value = _scalar_result(None)
        pool = RiskPool()
        loaded = await StateRepository().load(db, pool)
        assert loaded is pool
        assert db.execute.await_count == 1
        assert loaded.ledger.balances == {}

    async def test_rebuilds_aggregate(self, db: MagicMock) -> None:
        state = SimpleNamespace(
            total_system_liquidity=12_000,
            protocol_fees=0,
            custody_balance=12_000,
            next_event_id=2,
            next_policy_id=2,
            registrars=["registrar", "oracle-2"],
        )
        participants = [
            SimpleNamespace(
                participant_id="ins-1", available=0, locked_as_insurer=10_000,
                locked_as_reinsurer=0, locked_as_policyholder_funds=0,
                total_deposited=10_000, total_withdrawn=0,
            ),
            SimpleNamespace(
                participant_id="alice", available=1_993, locked_as_insurer=0,
                locked_as_reinsurer=0, locked_as_policyholder_funds=7,
                total_deposited=2_000, total_withdrawn=0,
            ),
        ]
        pools = [
            SimpleNamespace(
                participant_id="ins-1", pool_type="INSURER", collateral=10_000,
                consumed_capital=10_000, total_premiums=0, total_losses=0,
                active=True, allocations={"1": 10_000},
            ),
        ]
        events = [
            SimpleNamespace(
                id=1, name="BTC -20%", description="drop", trigger_threshold=2_000,
                base_premium=500, is_active=True, is_triggered=False, trigger_time=None,
                total_coverage=5_000, total_premiums=0, total_insurer_capital=10_000,
                accumulated_premiums=0, last_distribution_time=None, total_payouts=0,
                expected_loss_ratio=500, total_loss_ratio=15_000, max_premium=5_000,
            ),
        ]
        policies = [
            SimpleNamespace(
                id=1, holder="alice", event_id=1, coverage=5_000, annualized_premium=375,
                start_time=100, activation_time=100 + 604_800, is_active=False,
                is_claimed=False, lockup_deposit=7, accrual_start=0,
                last_collection_time=0, premiums_collected=0,
            ),
        ]
        db.execute.side_effect = [
            _scalar_result(state),
            _rows_result(participants),
            _rows_result(pools),
            _rows_result(events),
            _rows_result(policies),
        ]

        pool = await StateRepository().load(db, RiskPool())

        assert pool.ledger.total_system_liquidity == 12_000
        assert pool.ledger.payment_asset.custody_balance == 12_000
        assert pool.registry.is_registrar("oracle-2")
        assert pool.registry.get(1).last_distribution_time is None
        assert pool.insurers.require("ins-1").allocation(1) == 10_000
        assert pool.book.policies_for_event(1)[0].holder == "alice"
        assert pool.book.next_policy_id == 2
        assert pool.pricing.state.total_capital == 10_000
        assert pool.pricing.state.total_expected_loss_ratio_sum == 500
        assert verify_global_invariants(pool) == []

        # new ids continue after the persisted ones
        assert pool.registry.register_event("oracle-2", "next", "", 1_000, 100) == 2
