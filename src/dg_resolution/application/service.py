"""ResolutionService — drives one market from Open to Resolved/Voided.

Pipeline per market (strictly sequential, one market at a time):
  1. Re-read the market; skip unless still open and past its deadline.
  2. Fetch the resolution source and reduce it to plain text. A fetch
     failure becomes "[FETCH ERROR: <msg>]" and is still shown to the oracle.
  3. Ask the oracle for a decision.
  4. Append exactly one resolution_logs row and commit it.
  5. yes/no → ledger resolve, void → ledger void, error → stop here.
  6. After confirmation: guarded status transition + signature backfill in
     one transaction, then a best-effort mirror refresh from the ledger.

The mirrored status only changes after the ledger has confirmed. A ledger
failure leaves the market open and it is retried on the next sweep.
"""

import logging
from collections.abc import Callable
from dataclasses import replace

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.dg_common.datetime_utils import unix_now
from src.dg_common.enums import AttemptOutcome, MarketStatus
from src.dg_common.errors import (
    FetchError,
    LedgerError,
    MarketNotFoundError,
    MarketNotOpenError,
    MarketNotReadyError,
)
from src.dg_ledger.domain.gateway import LedgerGatewayProtocol
from src.dg_ledger.infrastructure.solana_gateway import get_ledger_gateway
from src.dg_mirror.application.service import MirrorService
from src.dg_mirror.domain.models import Market
from src.dg_oracle.domain.models import Decision
from src.dg_oracle.infrastructure.client import OracleClient, get_oracle_client
from src.dg_resolution.domain.models import (
    AttemptResult,
    NewResolutionLog,
    ResolutionLog,
    SweepResult,
)
from src.dg_resolution.domain.policy import (
    LOG_SOURCE_TEXT_CHARS,
    error_message_for,
    fetch_error_text,
    is_due,
)
from src.dg_resolution.domain.repository import ResolutionRepositoryProtocol
from src.dg_resolution.infrastructure.persistence import ResolutionRepository
from src.dg_source.domain.text import strip_control_chars, to_plain_text
from src.dg_source.infrastructure.fetcher import SourceFetcher

logger = logging.getLogger(__name__)


class ResolutionService:
    def __init__(
        self,
        fetcher: SourceFetcher | None = None,
        oracle: OracleClient | None = None,
        ledger: LedgerGatewayProtocol | None = None,
        repo: ResolutionRepositoryProtocol | None = None,
        mirror: MirrorService | None = None,
        clock: Callable[[], int] = unix_now,
    ) -> None:
        self._fetcher = fetcher or SourceFetcher()
        self._oracle = oracle or get_oracle_client()
        self._ledger: LedgerGatewayProtocol = ledger or get_ledger_gateway()
        self._repo: ResolutionRepositoryProtocol = repo or ResolutionRepository()
        self._mirror = mirror or MirrorService(ledger=self._ledger)
        self._clock = clock

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def run_sweep(self, db: AsyncSession, limit: int | None = None) -> SweepResult:
        """Process up to `limit` due markets, earliest deadline first."""
        batch = limit or settings.RESOLUTION_BATCH_SIZE
        markets = await self._repo.list_due_markets(db, self._clock(), batch)
        await db.commit()

        result = SweepResult()
        for market in markets:
            try:
                attempt = await self.process_market(db, market.market_id)
            except Exception as e:
                # Only DB failures land here; the next market still runs
                logger.exception("Resolution of market %d failed", market.market_id)
                await db.rollback()
                attempt = AttemptResult(
                    market_id=market.market_id, outcome=AttemptOutcome.ERROR, error=str(e)
                )
            result.record(attempt)

        if markets:
            logger.info("Resolution sweep finished: %s", result.counts())
        return result

    async def resolve_one(self, db: AsyncSession, market_id: int) -> AttemptResult:
        """Operator trigger for a single market; refuses ineligible markets."""
        market = await self._repo.get_market(db, market_id)
        await db.commit()
        if market is None:
            raise MarketNotFoundError(market_id)
        if not market.is_open:
            raise MarketNotOpenError(market_id, market.status.value)
        now = self._clock()
        if market.resolution_timestamp > now:
            raise MarketNotReadyError(market_id, market.resolution_timestamp - now)
        return await self.process_market(db, market_id)

    async def list_logs(
        self, db: AsyncSession, market_id: int, limit: int = 50
    ) -> list[ResolutionLog]:
        return await self._repo.list_logs(db, market_id, limit)

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def process_market(self, db: AsyncSession, market_id: int) -> AttemptResult:
        market = await self._repo.get_market(db, market_id)
        # End the read transaction before slow network calls
        await db.commit()
        if market is None or not is_due(market, self._clock()):
            logger.info("Market %d no longer eligible, skipping", market_id)
            return AttemptResult(market_id=market_id, outcome=AttemptOutcome.SKIPPED)

        source_text, fetch_error = await self._gather_evidence(market)
        decision = await self._decide(market, source_text)
        log_id = await self._append_log(db, market, source_text, fetch_error, decision)
        await self._alert_if_stuck(db, market_id)

        attempt = AttemptResult(
            market_id=market_id,
            outcome=AttemptOutcome.ERROR,
            decision=decision,
            log_id=log_id,
        )
        if not decision.is_actionable:
            logger.warning(
                "Market %d: oracle returned no decision (%s), left open",
                market_id, decision.reasoning,
            )
            attempt.error = decision.reasoning
            return attempt

        try:
            signature = await self._submit(market_id, decision)
        except LedgerError as e:
            logger.error("Market %d: ledger submission failed: %s", market_id, e.message)
            attempt.error = e.message
            reconciled = await self._reconcile(db, market_id, log_id)
            if reconciled is not None:
                attempt.outcome, attempt.tx_signature = reconciled
                attempt.error = None
            return attempt

        attempt.tx_signature = signature
        attempt.outcome = await self._apply_confirmed(db, market_id, decision, log_id, signature)
        await self._refresh(db, market_id)
        return attempt

    async def _gather_evidence(self, market: Market) -> tuple[str, str | None]:
        try:
            raw = await self._fetcher.fetch_text(market.resolution_source)
        except FetchError as e:
            logger.warning("Market %d: %s", market.market_id, e.message)
            return fetch_error_text(e.message), e.message
        return to_plain_text(raw), None

    async def _decide(self, market: Market, source_text: str) -> Decision:
        try:
            decision = await self._oracle.decide(
                market.question, market.resolution_source, source_text
            )
        except Exception as e:
            # The client already folds API failures into ERROR; this catches bugs
            logger.exception("Market %d: oracle client raised", market.market_id)
            decision = Decision.error(f"Oracle failure: {e}")
        # Reasoning is stored in TEXT columns and may echo the source verbatim
        return replace(decision, reasoning=strip_control_chars(decision.reasoning, ""))

    async def _append_log(
        self,
        db: AsyncSession,
        market: Market,
        source_text: str,
        fetch_error: str | None,
        decision: Decision,
    ) -> int:
        entry = NewResolutionLog(
            market_id=market.market_id,
            source_url=strip_control_chars(market.resolution_source, ""),
            source_text=strip_control_chars(source_text[:LOG_SOURCE_TEXT_CHARS], ""),
            ai_reasoning=decision.reasoning,
            ai_decision=decision.decision.value,
            confidence=decision.confidence,
            error_message=_clean(error_message_for(fetch_error, decision)),
        )
        try:
            log_id = await self._repo.insert_log(db, entry)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return log_id

    async def _alert_if_stuck(self, db: AsyncSession, market_id: int) -> None:
        threshold = settings.RESOLUTION_ALERT_AFTER_ATTEMPTS
        if threshold <= 0:
            return
        attempts = await self._repo.count_unsigned_attempts(db, market_id)
        await db.commit()
        if attempts >= threshold:
            logger.error(
                "Market %d has %d resolution attempts without a confirmed transaction",
                market_id, attempts,
            )

    async def _submit(self, market_id: int, decision: Decision) -> str:
        outcome = decision.outcome
        if outcome is not None:
            return await self._ledger.submit_resolve(market_id, outcome)
        return await self._ledger.submit_void(market_id, decision.reasoning)

    async def _apply_confirmed(
        self,
        db: AsyncSession,
        market_id: int,
        decision: Decision,
        log_id: int,
        signature: str,
    ) -> AttemptOutcome:
        outcome = decision.outcome
        try:
            if outcome is not None:
                changed = await self._repo.mark_resolved(
                    db, market_id, outcome, decision.reasoning, self._clock()
                )
                result = AttemptOutcome.RESOLVED
            else:
                changed = await self._repo.mark_voided(db, market_id, decision.reasoning)
                result = AttemptOutcome.VOIDED
            await self._repo.backfill_signature(db, log_id, signature)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        if changed:
            logger.info("Market %d %s (tx %s)", market_id, result.value, signature)
        else:
            logger.warning(
                "Market %d was already closed when tx %s confirmed", market_id, signature
            )
        return result

    async def _refresh(self, db: AsyncSession, market_id: int) -> None:
        """Pull exact resolved_at and fee amounts from the ledger. Best effort."""
        try:
            await self._mirror.refresh_market(db, market_id)
        except Exception:
            logger.warning("Market %d: post-settlement refresh failed", market_id, exc_info=True)

    async def _reconcile(
        self, db: AsyncSession, market_id: int, log_id: int
    ) -> tuple[AttemptOutcome, str] | None:
        """Adopt a terminal ledger status after a failed submission.

        Covers a previous attempt whose transaction confirmed but whose DB
        write was lost; without this the market would be retried forever.
        The mirror only closes together with the recovered signature, which
        is backfilled onto this attempt's log row. No signature, no change.
        """
        try:
            account = await self._mirror.refresh_market(db, market_id)
        except Exception:
            logger.warning("Market %d: reconcile read failed", market_id, exc_info=True)
            return None
        if account is None or account.status is MarketStatus.OPEN:
            return None

        try:
            signature = await self._ledger.find_settlement_signature(market_id)
        except LedgerError as e:
            logger.error("Market %d: settlement signature lookup failed: %s", market_id, e.message)
            return None
        if signature is None:
            logger.error(
                "Market %d is %s on ledger but no settlement transaction was found; left open",
                market_id, account.status.value,
            )
            return None

        try:
            if account.status is MarketStatus.RESOLVED:
                changed = await self._repo.mark_resolved(
                    db, market_id, bool(account.outcome), None, account.resolved_at
                )
                result = AttemptOutcome.RESOLVED
            else:
                changed = await self._repo.mark_voided(db, market_id, None)
                result = AttemptOutcome.VOIDED
            await self._repo.backfill_signature(db, log_id, signature)
            await db.commit()
        except Exception:
            await db.rollback()
            logger.warning("Market %d: reconcile write failed", market_id, exc_info=True)
            return None
        if changed:
            logger.warning(
                "Market %d already %s on ledger (tx %s); mirror reconciled",
                market_id, account.status.value, signature,
            )
        return result, signature


def _clean(text: str | None) -> str | None:
    return strip_control_chars(text, "") if text is not None else None
