"""003: create positions table

Revision ID: 003
Revises: 002
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE positions (
            id              BIGSERIAL       PRIMARY KEY,
            market_id       BIGINT          NOT NULL REFERENCES markets(market_id),
            pubkey          VARCHAR(44)     NOT NULL,
            user_wallet     VARCHAR(44)     NOT NULL,
            yes_shares      BIGINT          NOT NULL DEFAULT 0,
            no_shares       BIGINT          NOT NULL DEFAULT 0,
            claimed         BOOLEAN         NOT NULL DEFAULT FALSE,
            cost_basis      BIGINT          NOT NULL DEFAULT 0,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_positions_market_wallet   UNIQUE (market_id, user_wallet),
            CONSTRAINT uq_positions_pubkey          UNIQUE (pubkey),
            CONSTRAINT ck_positions_yes_gte_0       CHECK (yes_shares >= 0),
            CONSTRAINT ck_positions_no_gte_0        CHECK (no_shares >= 0),
            CONSTRAINT ck_positions_cost_basis_gte_0 CHECK (cost_basis >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_positions_wallet ON positions (user_wallet);")
    op.execute("""
        CREATE TRIGGER trg_positions_updated_at
            BEFORE UPDATE ON positions
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE positions IS 'Mirror of ledger Position accounts + off-ledger cost basis';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS positions CASCADE;")
