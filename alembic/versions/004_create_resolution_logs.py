"""004: create resolution_logs table

Revision ID: 004
Revises: 003
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE resolution_logs (
            id              BIGSERIAL       PRIMARY KEY,
            market_id       BIGINT          NOT NULL REFERENCES markets(market_id),
            source_url      VARCHAR(512)    NOT NULL,
            source_text     TEXT,
            ai_reasoning    TEXT,
            ai_decision     VARCHAR(10)     NOT NULL,
            confidence      DOUBLE PRECISION NOT NULL DEFAULT 0,
            tx_signature    VARCHAR(88),
            error_message   TEXT,
            attempted_at    TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_resolution_logs_decision CHECK (
                ai_decision IN ('yes', 'no', 'void', 'error')
            ),
            CONSTRAINT ck_resolution_logs_confidence CHECK (
                confidence >= 0 AND confidence <= 1
            ),
            CONSTRAINT ck_resolution_logs_source_text_len CHECK (
                source_text IS NULL OR char_length(source_text) <= 10000
            )
        );
    """)
    op.execute("""
        CREATE INDEX idx_resolution_logs_market
            ON resolution_logs (market_id, id DESC);
    """)
    op.execute("""
        CREATE TRIGGER trg_resolution_logs_guard
            BEFORE UPDATE OR DELETE ON resolution_logs
            FOR EACH ROW EXECUTE FUNCTION fn_resolution_log_guard();
    """)
    op.execute("COMMENT ON TABLE resolution_logs IS 'Append-only audit trail, one row per scheduler attempt';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS resolution_logs CASCADE;")
