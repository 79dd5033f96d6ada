"""ResolutionRepository — raw text() SQL for the scheduler.

Lifecycle transitions are guarded by `WHERE status = 'open'` and report
whether a row actually changed, so an overlapping sweep or a replayed
confirmation can never move a market twice.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.dg_mirror.domain.models import Market
from src.dg_mirror.infrastructure.persistence import MARKET_COLUMNS, row_to_market
from src.dg_resolution.domain.models import NewResolutionLog, ResolutionLog

_GET_MARKET_SQL = text(f"SELECT {MARKET_COLUMNS} FROM markets WHERE market_id = :market_id")

_LIST_DUE_SQL = text(f"""
    SELECT {MARKET_COLUMNS}
    FROM markets
    WHERE status = 'open' AND resolution_timestamp <= :now
    ORDER BY resolution_timestamp ASC, market_id ASC
    LIMIT :limit
""")

_INSERT_LOG_SQL = text("""
    INSERT INTO resolution_logs
        (market_id, source_url, source_text, ai_reasoning, ai_decision,
         confidence, error_message)
    VALUES
        (:market_id, :source_url, :source_text, :ai_reasoning, :ai_decision,
         :confidence, :error_message)
    RETURNING id
""")

_BACKFILL_SIGNATURE_SQL = text("""
    UPDATE resolution_logs
    SET tx_signature = :tx_signature
    WHERE id = :log_id AND tx_signature IS NULL
""")

_MARK_RESOLVED_SQL = text("""
    UPDATE markets
    SET status       = 'resolved',
        outcome      = :outcome,
        resolved_at  = :resolved_at,
        ai_reasoning = COALESCE(CAST(:reasoning AS TEXT), ai_reasoning)
    WHERE market_id = :market_id AND status = 'open'
    RETURNING market_id
""")

_MARK_VOIDED_SQL = text("""
    UPDATE markets
    SET status       = 'voided',
        ai_reasoning = COALESCE(CAST(:reasoning AS TEXT), ai_reasoning)
    WHERE market_id = :market_id AND status = 'open'
    RETURNING market_id
""")

_COUNT_UNSIGNED_SQL = text("""
    SELECT COUNT(*) FROM resolution_logs
    WHERE market_id = :market_id AND tx_signature IS NULL
""")

_LIST_LOGS_SQL = text("""
    SELECT id, market_id, source_url, source_text, ai_reasoning, ai_decision,
           confidence, tx_signature, error_message, attempted_at
    FROM resolution_logs
    WHERE market_id = :market_id
    ORDER BY id DESC
    LIMIT :limit
""")


def _row_to_log(row: Any) -> ResolutionLog:
    return ResolutionLog(
        id=int(row.id),
        market_id=int(row.market_id),
        source_url=row.source_url,
        source_text=row.source_text,
        ai_reasoning=row.ai_reasoning,
        ai_decision=row.ai_decision,
        confidence=float(row.confidence),
        tx_signature=row.tx_signature,
        error_message=row.error_message,
        attempted_at=row.attempted_at,
    )


class ResolutionRepository:
    async def get_market(self, db: AsyncSession, market_id: int) -> Market | None:
        row = (await db.execute(_GET_MARKET_SQL, {"market_id": market_id})).fetchone()
        return row_to_market(row) if row else None

    async def list_due_markets(self, db: AsyncSession, now: int, limit: int) -> list[Market]:
        result = await db.execute(_LIST_DUE_SQL, {"now": now, "limit": limit})
        return [row_to_market(r) for r in result.fetchall()]

    async def insert_log(self, db: AsyncSession, entry: NewResolutionLog) -> int:
        result = await db.execute(
            _INSERT_LOG_SQL,
            {
                "market_id": entry.market_id,
                "source_url": entry.source_url,
                "source_text": entry.source_text,
                "ai_reasoning": entry.ai_reasoning,
                "ai_decision": entry.ai_decision,
                "confidence": entry.confidence,
                "error_message": entry.error_message,
            },
        )
        return int(result.scalar_one())

    async def backfill_signature(self, db: AsyncSession, log_id: int, tx_signature: str) -> None:
        await db.execute(_BACKFILL_SIGNATURE_SQL, {"log_id": log_id, "tx_signature": tx_signature})

    async def mark_resolved(
        self,
        db: AsyncSession,
        market_id: int,
        outcome: bool,
        reasoning: str | None,
        resolved_at: int,
    ) -> bool:
        result = await db.execute(
            _MARK_RESOLVED_SQL,
            {
                "market_id": market_id,
                "outcome": outcome,
                "reasoning": reasoning,
                "resolved_at": resolved_at,
            },
        )
        return result.fetchone() is not None

    async def mark_voided(self, db: AsyncSession, market_id: int, reasoning: str | None) -> bool:
        result = await db.execute(
            _MARK_VOIDED_SQL, {"market_id": market_id, "reasoning": reasoning}
        )
        return result.fetchone() is not None

    async def count_unsigned_attempts(self, db: AsyncSession, market_id: int) -> int:
        result = await db.execute(_COUNT_UNSIGNED_SQL, {"market_id": market_id})
        return int(result.scalar_one())

    async def list_logs(self, db: AsyncSession, market_id: int, limit: int) -> list[ResolutionLog]:
        result = await db.execute(_LIST_LOGS_SQL, {"market_id": market_id, "limit": limit})
        return [_row_to_log(r) for r in result.fetchall()]
