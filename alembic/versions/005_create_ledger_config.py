"""005: create ledger_config table

Revision ID: 005
Revises: 004
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE ledger_config (
            id                          SMALLINT        PRIMARY KEY DEFAULT 1,
            authority                   VARCHAR(44)     NOT NULL,
            treasury                    VARCHAR(44)     NOT NULL,
            min_liquidity_lamports      BIGINT          NOT NULL,
            treasury_rake_bps           SMALLINT        NOT NULL,
            creator_rake_bps            SMALLINT        NOT NULL,
            market_count                BIGINT          NOT NULL,
            paused                      BOOLEAN         NOT NULL,
            min_trade_lamports          BIGINT          NOT NULL,
            betting_cutoff_seconds      BIGINT          NOT NULL,
            challenge_period_seconds    BIGINT          NOT NULL,
            swap_fee_bps                SMALLINT        NOT NULL,
            bump                        SMALLINT        NOT NULL,
            created_at                  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at                  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_ledger_config_single_row CHECK (id = 1),
            CONSTRAINT ck_ledger_config_challenge_gte_0 CHECK (challenge_period_seconds >= 0)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_ledger_config_updated_at
            BEFORE UPDATE ON ledger_config
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE ledger_config IS 'Single-row mirror of the ledger Config account';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS ledger_config CASCADE;")
