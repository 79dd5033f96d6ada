# src/dg_admin/application/service.py
"""AdminService — operator actions: sweeps, single-market resolution, audit
reads, creation fee refresh."""

import logging
import math
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.dg_fees.application.service import FeeUpdaterService
from src.dg_mirror.application.service import MirrorService
from src.dg_resolution.application.service import ResolutionService
from src.dg_resolution.domain.models import AttemptResult, ResolutionLog

logger = logging.getLogger(__name__)


class AdminService:
    def __init__(
        self,
        resolution: ResolutionService | None = None,
        mirror: MirrorService | None = None,
        fees: FeeUpdaterService | None = None,
    ) -> None:
        self._resolution = resolution or ResolutionService()
        self._mirror = mirror or MirrorService()
        self._fees = fees or FeeUpdaterService()

    async def run_sweep(self, db: AsyncSession, operator: str) -> dict[str, int]:
        logger.info("Resolution sweep triggered by %s", operator)
        result = await self._resolution.run_sweep(db)
        return result.counts()

    async def resolve_market(
        self, db: AsyncSession, market_id: int, operator: str
    ) -> dict[str, Any]:
        logger.info("Resolution of market %d triggered by %s", market_id, operator)
        attempt = await self._resolution.resolve_one(db, market_id)
        return _attempt_to_dict(attempt)

    async def list_resolution_logs(
        self, db: AsyncSession, market_id: int, limit: int
    ) -> list[dict[str, Any]]:
        logs = await self._resolution.list_logs(db, market_id, limit)
        return [_log_to_dict(log) for log in logs]

    async def sync_config(self, db: AsyncSession) -> dict[str, Any] | None:
        config = await self._mirror.sync_config(db)
        if config is None:
            return None
        return {
            "authority": config.authority,
            "treasury": config.treasury,
            "treasury_rake_bps": config.treasury_rake_bps,
            "creator_rake_bps": config.creator_rake_bps,
            "challenge_period_seconds": config.challenge_period_seconds,
            "market_count": config.market_count,
            "paused": config.paused,
        }

    async def update_creation_fee(self, db: AsyncSession, operator: str) -> dict[str, Any]:
        logger.info("Creation fee update triggered by %s", operator)
        result = await self._fees.update_creation_fee()
        if result.updated:
            try:
                await self._mirror.sync_config(db)
            except Exception:
                logger.warning("Config mirror refresh after fee update failed", exc_info=True)
        return {
            "sol_price_usd": result.sol_price_usd,
            "target_fee_lamports": result.target_fee_lamports,
            "current_fee_lamports": result.current_fee_lamports,
            # inf when the current fee is 0; JSON has no infinity
            "change_ratio": result.change_ratio if math.isfinite(result.change_ratio) else None,
            "updated": result.updated,
            "tx_signature": result.tx_signature,
            "skipped_reason": result.skipped_reason,
        }


def _attempt_to_dict(attempt: AttemptResult) -> dict[str, Any]:
    decision = attempt.decision
    return {
        "market_id": attempt.market_id,
        "outcome": attempt.outcome.value,
        "decision": decision.decision.value if decision else None,
        "confidence": decision.confidence if decision else None,
        "reasoning": decision.reasoning if decision else None,
        "log_id": attempt.log_id,
        "tx_signature": attempt.tx_signature,
        "error": attempt.error,
    }


def _log_to_dict(log: ResolutionLog) -> dict[str, Any]:
    return {
        "id": log.id,
        "market_id": log.market_id,
        "source_url": log.source_url,
        "ai_decision": log.ai_decision,
        "confidence": log.confidence,
        "ai_reasoning": log.ai_reasoning,
        "tx_signature": log.tx_signature,
        "error_message": log.error_message,
        "attempted_at": log.attempted_at.isoformat() if log.attempted_at else None,
    }
