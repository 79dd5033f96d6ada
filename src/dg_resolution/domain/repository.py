"""Repository Protocol — dependency inversion for testability."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.dg_mirror.domain.models import Market
from src.dg_resolution.domain.models import NewResolutionLog, ResolutionLog


class ResolutionRepositoryProtocol(Protocol):
    async def get_market(self, db: AsyncSession, market_id: int) -> Market | None: ...

    async def list_due_markets(
        self, db: AsyncSession, now: int, limit: int
    ) -> list[Market]: ...

    async def insert_log(self, db: AsyncSession, entry: NewResolutionLog) -> int: ...

    async def backfill_signature(
        self, db: AsyncSession, log_id: int, tx_signature: str
    ) -> None: ...

    async def mark_resolved(
        self,
        db: AsyncSession,
        market_id: int,
        outcome: bool,
        reasoning: str | None,
        resolved_at: int,
    ) -> bool: ...

    async def mark_voided(
        self, db: AsyncSession, market_id: int, reasoning: str | None
    ) -> bool: ...

    async def count_unsigned_attempts(self, db: AsyncSession, market_id: int) -> int: ...

    async def list_logs(
        self, db: AsyncSession, market_id: int, limit: int
    ) -> list[ResolutionLog]: ...
