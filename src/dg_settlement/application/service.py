"""SettlementService — answers "what can this wallet claim" from the mirror.

Read-only: never touches the ledger, never writes. The challenge period
comes from the mirrored ledger config, falling back to settings until the
config account has been synced.
"""

from collections.abc import Callable

from solders.pubkey import Pubkey
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.dg_common.datetime_utils import unix_now
from src.dg_common.errors import MarketNotFoundError, PositionNotFoundError
from src.dg_mirror.domain.models import Market, Position
from src.dg_mirror.domain.repository import MirrorRepositoryProtocol
from src.dg_mirror.infrastructure.persistence import MirrorRepository
from src.dg_settlement.application.schemas import ClaimQuoteResponse, CreatorPayoutResponse
from src.dg_settlement.domain.economics import (
    assert_claimable,
    quote_claim,
    quote_creator_payout,
)


class SettlementService:
    def __init__(
        self,
        repo: MirrorRepositoryProtocol | None = None,
        clock: Callable[[], int] = unix_now,
    ) -> None:
        self._repo: MirrorRepositoryProtocol = repo or MirrorRepository()
        self._clock = clock

    async def challenge_period_seconds(self, db: AsyncSession) -> int:
        config = await self._repo.get_config(db)
        if config is None:
            return settings.CHALLENGE_PERIOD_SECONDS
        return config.challenge_period_seconds

    async def get_claim_quote(
        self, db: AsyncSession, market_id: int, wallet: Pubkey
    ) -> ClaimQuoteResponse:
        market, position = await self._load(db, market_id, wallet)
        period = await self.challenge_period_seconds(db)
        quote = quote_claim(position, market, period, self._clock())
        return ClaimQuoteResponse.from_quote(market_id, position.user_wallet, quote)

    async def preflight_claim(
        self, db: AsyncSession, market_id: int, wallet: Pubkey
    ) -> ClaimQuoteResponse:
        """Raises AlreadyClaimed / ChallengePeriodActive / NotClaimable on refusal."""
        market, position = await self._load(db, market_id, wallet)
        period = await self.challenge_period_seconds(db)
        quote = assert_claimable(position, market, period, self._clock())
        return ClaimQuoteResponse.from_quote(market_id, position.user_wallet, quote)

    async def get_creator_payout(self, db: AsyncSession, market_id: int) -> CreatorPayoutResponse:
        market = await self._get_market(db, market_id)
        period = await self.challenge_period_seconds(db)
        quote = quote_creator_payout(market, period, self._clock())
        return CreatorPayoutResponse.from_quote(market_id, market.creator, quote)

    async def _get_market(self, db: AsyncSession, market_id: int) -> Market:
        market = await self._repo.get_market(db, market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        return market

    async def _load(
        self, db: AsyncSession, market_id: int, wallet: Pubkey
    ) -> tuple[Market, Position]:
        market = await self._get_market(db, market_id)
        position = await self._repo.get_position(db, market_id, str(wallet))
        if position is None:
            raise PositionNotFoundError(market_id, str(wallet))
        return market, position
