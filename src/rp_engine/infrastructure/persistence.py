"""StateRepository — concrete implementation of StateRepositoryProtocol.

Load reads every table through the ORM models once at startup. Flush
compares the state before and after a mutation and upserts only the rows
that changed, using raw text() SQL.

Transaction ownership: the CALLER (LedgerEngine) commits or rolls back.
"""

import json
import logging
from dataclasses import asdict
from typing import Any

from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncSession

from src.rp_common.enums import PoolType
from src.rp_engine.domain.risk_pool import RiskPool
from src.rp_engine.infrastructure.db_models import (
    EventORM,
    ParticipantORM,
    PolicyORM,
    PoolAccountORM,
    SystemStateORM,
)
from src.rp_event.domain.models import Event
from src.rp_ledger.domain.models import ParticipantBalance
from src.rp_ledger.domain.payment import InMemoryPaymentAsset
from src.rp_policy.domain.models import Policy
from src.rp_pool.domain.models import InsurerAccount, ReinsurerAccount

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_UPSERT_PARTICIPANT_SQL = text("""
    INSERT INTO participants
        (participant_id, available, locked_as_insurer, locked_as_reinsurer,
         locked_as_policyholder_funds, total_deposited, total_withdrawn)
    VALUES
        (:participant_id, :available, :locked_as_insurer, :locked_as_reinsurer,
         :locked_as_policyholder_funds, :total_deposited, :total_withdrawn)
    ON CONFLICT (participant_id) DO UPDATE SET
        available = EXCLUDED.available,
        locked_as_insurer = EXCLUDED.locked_as_insurer,
        locked_as_reinsurer = EXCLUDED.locked_as_reinsurer,
        locked_as_policyholder_funds = EXCLUDED.locked_as_policyholder_funds,
        total_deposited = EXCLUDED.total_deposited,
        total_withdrawn = EXCLUDED.total_withdrawn,
        updated_at = NOW()
""")

_UPSERT_POOL_SQL = text("""
    INSERT INTO pools
        (participant_id, pool_type, collateral, consumed_capital,
         total_premiums, total_losses, active, allocations)
    VALUES
        (:participant_id, :pool_type, :collateral, :consumed_capital,
         :total_premiums, :total_losses, :active, CAST(:allocations AS JSONB))
    ON CONFLICT (participant_id, pool_type) DO UPDATE SET
        collateral = EXCLUDED.collateral,
        consumed_capital = EXCLUDED.consumed_capital,
        total_premiums = EXCLUDED.total_premiums,
        total_losses = EXCLUDED.total_losses,
        active = EXCLUDED.active,
        allocations = EXCLUDED.allocations,
        updated_at = NOW()
""")

_UPSERT_EVENT_SQL = text("""
    INSERT INTO events
        (id, name, description, trigger_threshold, base_premium,
         is_active, is_triggered, trigger_time,
         total_coverage, total_premiums, total_insurer_capital,
         accumulated_premiums, last_distribution_time, total_payouts,
         expected_loss_ratio, total_loss_ratio, max_premium)
    VALUES
        (:id, :name, :description, :trigger_threshold, :base_premium,
         :is_active, :is_triggered, :trigger_time,
         :total_coverage, :total_premiums, :total_insurer_capital,
         :accumulated_premiums, :last_distribution_time, :total_payouts,
         :expected_loss_ratio, :total_loss_ratio, :max_premium)
    ON CONFLICT (id) DO UPDATE SET
        is_active = EXCLUDED.is_active,
        is_triggered = EXCLUDED.is_triggered,
        trigger_time = EXCLUDED.trigger_time,
        total_coverage = EXCLUDED.total_coverage,
        total_premiums = EXCLUDED.total_premiums,
        total_insurer_capital = EXCLUDED.total_insurer_capital,
        accumulated_premiums = EXCLUDED.accumulated_premiums,
        last_distribution_time = EXCLUDED.last_distribution_time,
        total_payouts = EXCLUDED.total_payouts,
        expected_loss_ratio = EXCLUDED.expected_loss_ratio,
        total_loss_ratio = EXCLUDED.total_loss_ratio,
        max_premium = EXCLUDED.max_premium
""")

_UPSERT_POLICY_SQL = text("""
    INSERT INTO policies
        (id, holder, event_id, coverage, annualized_premium,
         start_time, activation_time, is_active, is_claimed,
         lockup_deposit, accrual_start, last_collection_time, premiums_collected)
    VALUES
        (:id, :holder, :event_id, :coverage, :annualized_premium,
         :start_time, :activation_time, :is_active, :is_claimed,
         :lockup_deposit, :accrual_start, :last_collection_time, :premiums_collected)
    ON CONFLICT (id) DO UPDATE SET
        is_active = EXCLUDED.is_active,
        is_claimed = EXCLUDED.is_claimed,
        lockup_deposit = EXCLUDED.lockup_deposit,
        accrual_start = EXCLUDED.accrual_start,
        last_collection_time = EXCLUDED.last_collection_time,
        premiums_collected = EXCLUDED.premiums_collected
""")

_UPSERT_SYSTEM_STATE_SQL = text("""
    INSERT INTO system_state
        (id, total_system_liquidity, protocol_fees, custody_balance,
         next_event_id, next_policy_id, registrars)
    VALUES
        (1, :total_system_liquidity, :protocol_fees, :custody_balance,
         :next_event_id, :next_policy_id, CAST(:registrars AS JSONB))
    ON CONFLICT (id) DO UPDATE SET
        total_system_liquidity = EXCLUDED.total_system_liquidity,
        protocol_fees = EXCLUDED.protocol_fees,
        custody_balance = EXCLUDED.custody_balance,
        next_event_id = EXCLUDED.next_event_id,
        next_policy_id = EXCLUDED.next_policy_id,
        registrars = EXCLUDED.registrars
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _insurer_params(account: InsurerAccount) -> dict[str, Any]:
    return {
        "participant_id": account.participant_id,
        "pool_type": PoolType.INSURER.value,
        "collateral": account.total_collateral,
        "consumed_capital": account.consumed_capital,
        "total_premiums": account.total_premiums,
        "total_losses": account.total_losses,
        "active": account.active,
        "allocations": json.dumps({str(k): v for k, v in account.allocations.items()}),
    }


def _reinsurer_params(account: ReinsurerAccount) -> dict[str, Any]:
    return {
        "participant_id": account.participant_id,
        "pool_type": PoolType.REINSURER.value,
        "collateral": account.collateral,
        "consumed_capital": account.consumed_capital,
        "total_premiums": account.total_premiums,
        "total_losses": account.consumed_capital,
        "active": account.active,
        "allocations": "{}",
    }


def _changed(before: dict[Any, Any], after: dict[Any, Any]) -> list[Any]:
    """Values of `after` that are new or differ from `before`."""
    return [value for key, value in after.items() if before.get(key) != value]


class StateRepository:
    async def load(self, db: AsyncSession, pool: RiskPool) -> RiskPool:
        """Populate an empty RiskPool from the database."""
        state = (await db.execute(select(SystemStateORM).where(SystemStateORM.id == 1))).scalar_one_or_none()
        if state is None:
            logger.info("no persisted ledger state, starting empty")
            return pool

        ledger = pool.ledger
        ledger.total_system_liquidity = int(state.total_system_liquidity)
        ledger.protocol_fees = int(state.protocol_fees)
        if isinstance(ledger.payment_asset, InMemoryPaymentAsset):
            ledger.payment_asset = InMemoryPaymentAsset(custody=int(state.custody_balance))
        pool.registry.registrars |= set(state.registrars)
        pool.registry.next_event_id = state.next_event_id
        pool.book.next_policy_id = state.next_policy_id

        for row in (await db.execute(select(ParticipantORM))).scalars():
            ledger.balances[row.participant_id] = ParticipantBalance(
                participant_id=row.participant_id,
                available=int(row.available),
                locked_as_insurer=int(row.locked_as_insurer),
                locked_as_reinsurer=int(row.locked_as_reinsurer),
                locked_as_policyholder_funds=int(row.locked_as_policyholder_funds),
                total_deposited=int(row.total_deposited),
                total_withdrawn=int(row.total_withdrawn),
            )

        for row in (await db.execute(select(PoolAccountORM))).scalars():
            if row.pool_type == PoolType.INSURER.value:
                pool.insurers.accounts[row.participant_id] = InsurerAccount(
                    participant_id=row.participant_id,
                    total_collateral=int(row.collateral),
                    consumed_capital=int(row.consumed_capital),
                    total_premiums=int(row.total_premiums),
                    total_losses=int(row.total_losses),
                    active=row.active,
                    allocations={int(k): int(v) for k, v in row.allocations.items()},
                )
            else:
                pool.reinsurers.accounts[row.participant_id] = ReinsurerAccount(
                    participant_id=row.participant_id,
                    collateral=int(row.collateral),
                    consumed_capital=int(row.consumed_capital),
                    total_premiums=int(row.total_premiums),
                    active=row.active,
                )

        for row in (await db.execute(select(EventORM).order_by(EventORM.id))).scalars():
            pool.registry.events[row.id] = Event(
                id=row.id,
                name=row.name,
                description=row.description,
                trigger_threshold=row.trigger_threshold,
                base_premium=row.base_premium,
                is_active=row.is_active,
                is_triggered=row.is_triggered,
                trigger_time=row.trigger_time,
                total_coverage=int(row.total_coverage),
                total_premiums=int(row.total_premiums),
                total_insurer_capital=int(row.total_insurer_capital),
                accumulated_premiums=int(row.accumulated_premiums),
                last_distribution_time=row.last_distribution_time,
                total_payouts=int(row.total_payouts),
                expected_loss_ratio=row.expected_loss_ratio,
                total_loss_ratio=row.total_loss_ratio,
                max_premium=row.max_premium,
            )

        for row in (await db.execute(select(PolicyORM).order_by(PolicyORM.id))).scalars():
            pool.book.policies[row.id] = Policy(
                id=row.id,
                holder=row.holder,
                event_id=row.event_id,
                coverage=int(row.coverage),
                annualized_premium=int(row.annualized_premium),
                start_time=row.start_time,
                activation_time=row.activation_time,
                is_active=row.is_active,
                is_claimed=row.is_claimed,
                lockup_deposit=int(row.lockup_deposit),
                accrual_start=row.accrual_start,
                last_collection_time=row.last_collection_time,
                premiums_collected=int(row.premiums_collected),
            )
        pool.book.rebuild_index()
        pool.recompute_risk_state()
        logger.info(
            "ledger state loaded: %d participants, %d events, %d policies",
            len(ledger.balances), len(pool.registry.events), len(pool.book.policies),
        )
        return pool

    async def flush(self, before: RiskPool, after: RiskPool, db: AsyncSession) -> None:
        """Write the rows that differ between two snapshots of the aggregate."""
        for balance in _changed(before.ledger.balances, after.ledger.balances):
            await db.execute(_UPSERT_PARTICIPANT_SQL, asdict(balance))
        for insurer in _changed(before.insurers.accounts, after.insurers.accounts):
            await db.execute(_UPSERT_POOL_SQL, _insurer_params(insurer))
        for reinsurer in _changed(before.reinsurers.accounts, after.reinsurers.accounts):
            await db.execute(_UPSERT_POOL_SQL, _reinsurer_params(reinsurer))
        for event in _changed(before.registry.events, after.registry.events):
            await db.execute(_UPSERT_EVENT_SQL, asdict(event))
        for policy in _changed(before.book.policies, after.book.policies):
            await db.execute(_UPSERT_POLICY_SQL, asdict(policy))
        await db.execute(
            _UPSERT_SYSTEM_STATE_SQL,
            {
                "total_system_liquidity": after.ledger.total_system_liquidity,
                "protocol_fees": after.ledger.protocol_fees,
                "custody_balance": after.ledger.payment_asset.custody_balance,
                "next_event_id": after.registry.next_event_id,
                "next_policy_id": after.book.next_policy_id,
                "registrars": json.dumps(sorted(after.registry.registrars)),
            },
        )
