"""MirrorService — pull-based refill of the relational replica from the ledger.

sync() is triggered by clients after every buy/sell/claim/create. Each call
reads fresh ledger snapshots and overwrites the mirrored rows, so replays and
concurrent syncs of the same (market, wallet) converge on ledger truth.
Write operations commit on success and roll back on any error.
"""

import asyncio
import logging

from solders.pubkey import Pubkey
from sqlalchemy.ext.asyncio import AsyncSession

from src.dg_common.errors import LedgerError
from src.dg_ledger.domain.gateway import LedgerGatewayProtocol
from src.dg_ledger.domain.layouts import ConfigAccount, MarketAccount, PositionAccount
from src.dg_ledger.infrastructure.solana_gateway import get_ledger_gateway
from src.dg_mirror.domain.cost_basis import next_cost_basis
from src.dg_mirror.domain.models import Position, SyncResult
from src.dg_mirror.domain.repository import MirrorRepositoryProtocol
from src.dg_mirror.infrastructure.persistence import MirrorRepository

logger = logging.getLogger(__name__)


class MirrorService:
    def __init__(
        self,
        ledger: LedgerGatewayProtocol | None = None,
        repo: MirrorRepositoryProtocol | None = None,
    ) -> None:
        self._ledger: LedgerGatewayProtocol = ledger or get_ledger_gateway()
        self._repo: MirrorRepositoryProtocol = repo or MirrorRepository()

    async def sync(
        self,
        db: AsyncSession,
        market_id: int,
        wallet: Pubkey,
        cost_basis_delta: int | None = None,
    ) -> SyncResult:
        market_acct, position_acct = await asyncio.gather(
            self._ledger.fetch_market(market_id),
            self._ledger.fetch_position(market_id, wallet),
        )
        wallet_str = str(wallet)
        market_pubkey = self._ledger.market_pubkey(market_id)
        if position_acct is not None:
            _check_position_owner(position_acct, market_pubkey, wallet_str)

        cost_basis: int | None = None
        position_synced = False
        try:
            if market_acct is not None:
                await self._repo.upsert_market(db, market_pubkey, market_acct)
            if position_acct is not None:
                if market_acct is None and await self._repo.get_market(db, market_id) is None:
                    logger.warning(
                        "Position for %s in market %d has no market row, skipping",
                        wallet_str, market_id,
                    )
                else:
                    cost_basis = await self._sync_position(
                        db, market_id, wallet, position_acct, cost_basis_delta
                    )
                    position_synced = cost_basis is not None
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Synced market=%d wallet=%s market=%s position=%s",
            market_id, wallet_str, market_acct is not None, position_synced,
        )
        return SyncResult(
            market_id=market_id,
            wallet=wallet_str,
            market_synced=market_acct is not None,
            position_synced=position_synced,
            cost_basis=cost_basis,
        )

    async def _sync_position(
        self,
        db: AsyncSession,
        market_id: int,
        wallet: Pubkey,
        account: PositionAccount,
        delta: int | None,
    ) -> int | None:
        wallet_str = str(wallet)
        existing = await self._repo.get_position(db, market_id, wallet_str, for_update=True)
        if existing is None and account.is_empty:
            # Rows are created lazily on the first non-empty snapshot
            return None

        previous_shares = existing.total_shares if existing else 0
        current_basis = existing.cost_basis if existing else 0
        cost_basis = next_cost_basis(
            current_basis,
            previous_shares,
            account.yes_shares + account.no_shares,
            delta,
        )
        return await self._repo.upsert_position(
            db,
            market_id,
            self._ledger.position_pubkey(market_id, wallet),
            wallet_str,
            account,
            cost_basis,
            delta,
        )

    async def refresh_market(self, db: AsyncSession, market_id: int) -> MarketAccount | None:
        """Re-read one market account and overwrite its mirrored AMM/fee state."""
        account = await self._ledger.fetch_market(market_id)
        if account is None:
            return None
        try:
            await self._repo.upsert_market(db, self._ledger.market_pubkey(market_id), account)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return account

    async def sync_config(self, db: AsyncSession) -> ConfigAccount | None:
        config = await self._ledger.fetch_config()
        if config is None:
            logger.warning("Ledger config account not found")
            return None
        try:
            await self._repo.upsert_config(db, config)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return config

    async def get_position(
        self, db: AsyncSession, market_id: int, wallet: Pubkey
    ) -> Position | None:
        return await self._repo.get_position(db, market_id, str(wallet))


def _check_position_owner(account: PositionAccount, market_pubkey: str, wallet: str) -> None:
    if account.market != market_pubkey or account.user != wallet:
        raise LedgerError(
            f"Position account does not belong to market {market_pubkey} / wallet {wallet}"
        )
