"""001: create ledger state tables

Revision ID: 001
Revises:
Create Date: 2026-10-18

Amount columns are NUMERIC(39, 0) so every int up to 2**127 - 1 fits.
Ratios are INT basis points; timestamps are BIGINT unix seconds.
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_touch_updated_at()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TABLE participants (
            participant_id                  VARCHAR(128)    PRIMARY KEY,
            available                       NUMERIC(39, 0)  NOT NULL DEFAULT 0,
            locked_as_insurer               NUMERIC(39, 0)  NOT NULL DEFAULT 0,
            locked_as_reinsurer             NUMERIC(39, 0)  NOT NULL DEFAULT 0,
            locked_as_policyholder_funds    NUMERIC(39, 0)  NOT NULL DEFAULT 0,
            total_deposited                 NUMERIC(39, 0)  NOT NULL DEFAULT 0,
            total_withdrawn                 NUMERIC(39, 0)  NOT NULL DEFAULT 0,
            updated_at                      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_participants_available_gte_0 CHECK (available >= 0),
            CONSTRAINT ck_participants_locked_gte_0 CHECK (
                locked_as_insurer >= 0
                AND locked_as_reinsurer >= 0
                AND locked_as_policyholder_funds >= 0
            )
        );
    """)
    op.execute("""
        CREATE TABLE pools (
            participant_id      VARCHAR(128)    NOT NULL,
            pool_type           VARCHAR(16)     NOT NULL,
            collateral          NUMERIC(39, 0)  NOT NULL DEFAULT 0,
            consumed_capital    NUMERIC(39, 0)  NOT NULL DEFAULT 0,
            total_premiums      NUMERIC(39, 0)  NOT NULL DEFAULT 0,
            total_losses        NUMERIC(39, 0)  NOT NULL DEFAULT 0,
            active              BOOLEAN         NOT NULL DEFAULT TRUE,
            allocations         JSONB           NOT NULL DEFAULT '{}'::jsonb,
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            PRIMARY KEY (participant_id, pool_type),
            CONSTRAINT ck_pools_pool_type CHECK (pool_type IN ('INSURER', 'REINSURER')),
            CONSTRAINT ck_pools_collateral_gte_0 CHECK (collateral >= 0)
        );
    """)
    op.execute("""
        CREATE TABLE events (
            id                      INT             PRIMARY KEY,
            name                    VARCHAR(256)    NOT NULL,
            description             TEXT            NOT NULL DEFAULT '',
            trigger_threshold       INT             NOT NULL,
            base_premium            INT             NOT NULL,
            is_active               BOOLEAN         NOT NULL DEFAULT TRUE,
            is_triggered            BOOLEAN         NOT NULL DEFAULT FALSE,
            trigger_time            BIGINT,
            total_coverage          NUMERIC(39, 0)  NOT NULL DEFAULT 0,
            total_premiums          NUMERIC(39, 0)  NOT NULL DEFAULT 0,
            total_insurer_capital   NUMERIC(39, 0)  NOT NULL DEFAULT 0,
            accumulated_premiums    NUMERIC(39, 0)  NOT NULL DEFAULT 0,
            last_distribution_time  BIGINT,
            total_payouts           NUMERIC(39, 0)  NOT NULL DEFAULT 0,
            expected_loss_ratio     INT             NOT NULL,
            total_loss_ratio        INT             NOT NULL,
            max_premium             INT             NOT NULL,
            CONSTRAINT ck_events_base_premium CHECK (base_premium > 0 AND base_premium <= 10000),
            CONSTRAINT ck_events_trigger_threshold CHECK (
                trigger_threshold > 0 AND trigger_threshold <= 10000
            )
        );
    """)
    op.execute("""
        CREATE TABLE policies (
            id                      INT             PRIMARY KEY,
            holder                  VARCHAR(128)    NOT NULL,
            event_id                INT             NOT NULL REFERENCES events(id),
            coverage                NUMERIC(39, 0)  NOT NULL,
            annualized_premium      NUMERIC(39, 0)  NOT NULL,
            start_time              BIGINT          NOT NULL,
            activation_time         BIGINT          NOT NULL,
            is_active               BOOLEAN         NOT NULL DEFAULT FALSE,
            is_claimed              BOOLEAN         NOT NULL DEFAULT FALSE,
            lockup_deposit          NUMERIC(39, 0)  NOT NULL DEFAULT 0,
            accrual_start           BIGINT          NOT NULL DEFAULT 0,
            last_collection_time    BIGINT          NOT NULL DEFAULT 0,
            premiums_collected      NUMERIC(39, 0)  NOT NULL DEFAULT 0,
            CONSTRAINT ck_policies_coverage_gt_0 CHECK (coverage > 0),
            CONSTRAINT ck_policies_claim_requires_active CHECK (NOT is_claimed OR is_active)
        );
    """)
    op.execute("CREATE INDEX idx_policies_event_holder ON policies (event_id, holder);")
    op.execute("""
        CREATE TABLE system_state (
            id                      INT             PRIMARY KEY,
            total_system_liquidity  NUMERIC(39, 0)  NOT NULL DEFAULT 0,
            protocol_fees           NUMERIC(39, 0)  NOT NULL DEFAULT 0,
            custody_balance         NUMERIC(39, 0)  NOT NULL DEFAULT 0,
            next_event_id           INT             NOT NULL DEFAULT 1,
            next_policy_id          INT             NOT NULL DEFAULT 1,
            registrars              JSONB           NOT NULL DEFAULT '[]'::jsonb,
            CONSTRAINT ck_system_state_singleton CHECK (id = 1)
        );
    """)
    for table in ("participants", "pools"):
        op.execute(f"""
            CREATE TRIGGER trg_{table}_updated_at
                BEFORE UPDATE ON {table}
                FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
        """)
    op.execute(
        "COMMENT ON TABLE participants IS "
        "'Ledger balances — amounts in smallest units of the payment asset';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS system_state CASCADE;")
    op.execute("DROP TABLE IF EXISTS policies CASCADE;")
    op.execute("DROP TABLE IF EXISTS events CASCADE;")
    op.execute("DROP TABLE IF EXISTS pools CASCADE;")
    op.execute("DROP TABLE IF EXISTS participants CASCADE;")
    op.execute("DROP FUNCTION IF EXISTS fn_touch_updated_at();")
