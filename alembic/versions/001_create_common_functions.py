"""001: create common functions

Revision ID: 001
Revises: 
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_update_timestamp()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    # Audit rows are append-only; the single allowed UPDATE fills a NULL
    # tx_signature and changes nothing else.
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_resolution_log_guard()
        RETURNS TRIGGER AS $$
        BEGIN
            IF TG_OP = 'DELETE' THEN
                RAISE EXCEPTION 'resolution_logs is append-only';
            END IF;
            IF OLD.tx_signature IS NOT NULL
               OR NEW.tx_signature IS NULL
               OR (NEW.id, NEW.market_id, NEW.source_url, NEW.source_text, NEW.ai_reasoning,
                   NEW.ai_decision, NEW.confidence, NEW.error_message, NEW.attempted_at)
                  IS DISTINCT FROM
                  (OLD.id, OLD.market_id, OLD.source_url, OLD.source_text, OLD.ai_reasoning,
                   OLD.ai_decision, OLD.confidence, OLD.error_message, OLD.attempted_at)
            THEN
                RAISE EXCEPTION 'resolution_logs rows may only backfill tx_signature';
            END IF;
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)


def downgrade() -> None:
    op.execute("DROP FUNCTION IF EXISTS fn_resolution_log_guard();")
    op.execute("DROP FUNCTION IF EXISTS fn_update_timestamp();")
