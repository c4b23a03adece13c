"""SQLAlchemy ORM models for the ledger state tables.

These map to tables created by Alembic migration 001.
DO NOT add/remove columns here without a corresponding migration.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import BigInteger, Boolean, DateTime, Integer, Numeric, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from src.rp_common.database import Base

# Amounts can exceed BIGINT after many years of accrual in 6-decimal units;
# NUMERIC(39, 0) holds the full MAX_AMOUNT range.
_Amount = Numeric(39, 0)


class ParticipantORM(Base):
    __tablename__ = "participants"

    participant_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    available: Mapped[int] = mapped_column(_Amount, nullable=False, default=0)
    locked_as_insurer: Mapped[int] = mapped_column(_Amount, nullable=False, default=0)
    locked_as_reinsurer: Mapped[int] = mapped_column(_Amount, nullable=False, default=0)
    locked_as_policyholder_funds: Mapped[int] = mapped_column(_Amount, nullable=False, default=0)
    total_deposited: Mapped[int] = mapped_column(_Amount, nullable=False, default=0)
    total_withdrawn: Mapped[int] = mapped_column(_Amount, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class PoolAccountORM(Base):
    __tablename__ = "pools"

    participant_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    pool_type: Mapped[str] = mapped_column(String(16), primary_key=True)
    collateral: Mapped[int] = mapped_column(_Amount, nullable=False, default=0)
    consumed_capital: Mapped[int] = mapped_column(_Amount, nullable=False, default=0)
    total_premiums: Mapped[int] = mapped_column(_Amount, nullable=False, default=0)
    total_losses: Mapped[int] = mapped_column(_Amount, nullable=False, default=0)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    allocations: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False, default=dict)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class EventORM(Base):
    __tablename__ = "events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    trigger_threshold: Mapped[int] = mapped_column(Integer, nullable=False)
    base_premium: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_triggered: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    trigger_time: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    total_coverage: Mapped[int] = mapped_column(_Amount, nullable=False, default=0)
    total_premiums: Mapped[int] = mapped_column(_Amount, nullable=False, default=0)
    total_insurer_capital: Mapped[int] = mapped_column(_Amount, nullable=False, default=0)
    accumulated_premiums: Mapped[int] = mapped_column(_Amount, nullable=False, default=0)
    last_distribution_time: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    total_payouts: Mapped[int] = mapped_column(_Amount, nullable=False, default=0)
    expected_loss_ratio: Mapped[int] = mapped_column(Integer, nullable=False)
    total_loss_ratio: Mapped[int] = mapped_column(Integer, nullable=False)
    max_premium: Mapped[int] = mapped_column(Integer, nullable=False)


class PolicyORM(Base):
    __tablename__ = "policies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    holder: Mapped[str] = mapped_column(String(128), nullable=False)
    event_id: Mapped[int] = mapped_column(Integer, nullable=False)
    coverage: Mapped[int] = mapped_column(_Amount, nullable=False)
    annualized_premium: Mapped[int] = mapped_column(_Amount, nullable=False)
    start_time: Mapped[int] = mapped_column(BigInteger, nullable=False)
    activation_time: Mapped[int] = mapped_column(BigInteger, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_claimed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    lockup_deposit: Mapped[int] = mapped_column(_Amount, nullable=False, default=0)
    accrual_start: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    last_collection_time: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    premiums_collected: Mapped[int] = mapped_column(_Amount, nullable=False, default=0)


class SystemStateORM(Base):
    __tablename__ = "system_state"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    total_system_liquidity: Mapped[int] = mapped_column(_Amount, nullable=False, default=0)
    protocol_fees: Mapped[int] = mapped_column(_Amount, nullable=False, default=0)
    custody_balance: Mapped[int] = mapped_column(_Amount, nullable=False, default=0)
    next_event_id: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    next_policy_id: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    registrars: Mapped[list[str]] = mapped_column(JSONB, nullable=False, default=list)
