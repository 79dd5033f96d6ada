"""FeeUpdaterService — keeps the ledger's creation fee near a USD target.

  1. Fetch the SOL/USD price.
  2. Convert FEE_TARGET_USD into lamports.
  3. Read the current fee from the ledger config account.
  4. Skip when the drift is under FEE_MIN_CHANGE_RATIO, else send update_fee.

The fee lives in the config field at offset 72, mirrored as
``min_liquidity_lamports``. A current fee of 0 always updates.
"""

import logging

from config.settings import settings
from src.dg_common.errors import LedgerError
from src.dg_common.lamports import lamports_to_display
from src.dg_fees.domain.models import FeeUpdateResult
from src.dg_fees.domain.policy import fee_change_ratio, needs_update, target_fee_lamports
from src.dg_fees.infrastructure.price_feed import SolPriceFeed
from src.dg_ledger.domain.gateway import LedgerGatewayProtocol
from src.dg_ledger.infrastructure.solana_gateway import get_ledger_gateway

logger = logging.getLogger(__name__)


class FeeUpdaterService:
    def __init__(
        self,
        ledger: LedgerGatewayProtocol | None = None,
        price_feed: SolPriceFeed | None = None,
        target_usd: float | None = None,
        min_change_ratio: float | None = None,
    ) -> None:
        self._ledger: LedgerGatewayProtocol = ledger or get_ledger_gateway()
        self._price_feed = price_feed or SolPriceFeed()
        self._target_usd = target_usd or settings.FEE_TARGET_USD
        self._min_ratio = (
            min_change_ratio if min_change_ratio is not None else settings.FEE_MIN_CHANGE_RATIO
        )

    async def update_creation_fee(self) -> FeeUpdateResult:
        """Raises PriceFeedError or LedgerError; nothing is sent on either."""
        price = await self._price_feed.sol_usd()
        target = target_fee_lamports(self._target_usd, price)

        config = await self._ledger.fetch_config()
        if config is None:
            raise LedgerError("Config account not found on-chain")
        current = config.min_liquidity_lamports

        result = FeeUpdateResult(
            sol_price_usd=price,
            target_fee_lamports=target,
            current_fee_lamports=current,
            change_ratio=fee_change_ratio(current, target),
        )
        logger.info(
            "SOL=$%.2f, creation fee target %d lamports (%s), current %d",
            price, target, lamports_to_display(target), current,
        )

        if not needs_update(current, target, self._min_ratio):
            result.skipped_reason = (
                f"change {result.change_ratio:.1%} below {self._min_ratio:.0%}"
            )
            logger.info("Creation fee unchanged: %s", result.skipped_reason)
            return result

        result.tx_signature = await self._ledger.submit_update_fee(target)
        logger.info("Creation fee updated to %d lamports (tx %s)", target, result.tx_signature)
        return result
