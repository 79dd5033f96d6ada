"""002: create markets table

Revision ID: 002
Revises: 001
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE markets (
            market_id               BIGINT          PRIMARY KEY,
            pubkey                  VARCHAR(44)     NOT NULL,
            creator                 VARCHAR(44)     NOT NULL,
            question                VARCHAR(256)    NOT NULL,
            resolution_source       VARCHAR(512)    NOT NULL,
            resolution_timestamp    BIGINT          NOT NULL,
            yes_reserve             BIGINT          NOT NULL DEFAULT 0,
            no_reserve              BIGINT          NOT NULL DEFAULT 0,
            total_minted            BIGINT          NOT NULL DEFAULT 0,
            initial_liquidity       BIGINT          NOT NULL DEFAULT 0,
            swap_fee_bps            SMALLINT        NOT NULL DEFAULT 0,
            status                  VARCHAR(10)     NOT NULL DEFAULT 'open',
            outcome                 BOOLEAN,
            resolved_at             BIGINT          NOT NULL DEFAULT 0,
            ai_reasoning            TEXT,
            creator_fee_claimed     BOOLEAN         NOT NULL DEFAULT FALSE,
            treasury_fee_claimed    BOOLEAN         NOT NULL DEFAULT FALSE,
            treasury_fee            BIGINT          NOT NULL DEFAULT 0,
            creator_fee             BIGINT          NOT NULL DEFAULT 0,
            created_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_markets_pubkey                UNIQUE (pubkey),
            CONSTRAINT ck_markets_market_id_gte_0       CHECK (market_id >= 0),
            CONSTRAINT ck_markets_yes_reserve_gte_0     CHECK (yes_reserve >= 0),
            CONSTRAINT ck_markets_no_reserve_gte_0      CHECK (no_reserve >= 0),
            CONSTRAINT ck_markets_total_minted_gte_0    CHECK (total_minted >= 0),
            CONSTRAINT ck_markets_fees_gte_0            CHECK (treasury_fee >= 0 AND creator_fee >= 0),
            CONSTRAINT ck_markets_swap_fee CHECK (swap_fee_bps >= 0 AND swap_fee_bps <= 10000),
            CONSTRAINT ck_markets_status CHECK (status IN ('open', 'resolved', 'voided')),
            CONSTRAINT ck_markets_outcome_iff_resolved CHECK (
                (status = 'resolved') = (outcome IS NOT NULL)
            ),
            CONSTRAINT ck_markets_resolved_at_iff_resolved CHECK (
                (status = 'resolved') = (resolved_at > 0)
            )
        );
    """)
    # Scheduler scan: open markets, earliest deadline first
    op.execute("""
        CREATE INDEX idx_markets_status_deadline
            ON markets (status, resolution_timestamp);
    """)
    op.execute("CREATE INDEX idx_markets_creator ON markets (creator);")
    op.execute("""
        CREATE TRIGGER trg_markets_updated_at
            BEFORE UPDATE ON markets
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE markets IS 'Mirror of ledger Market accounts + resolution state';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS markets CASCADE;")
