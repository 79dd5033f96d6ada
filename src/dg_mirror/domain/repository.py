"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.dg_ledger.domain.layouts import ConfigAccount, MarketAccount, PositionAccount
from src.dg_mirror.domain.models import Market, Position


class MirrorRepositoryProtocol(Protocol):
    async def get_market(self, db: AsyncSession, market_id: int) -> Market | None: ...

    async def upsert_market(
        self, db: AsyncSession, pubkey: str, account: MarketAccount
    ) -> None: ...

    async def get_position(
        self, db: AsyncSession, market_id: int, wallet: str, for_update: bool = False
    ) -> Position | None: ...

    async def upsert_position(
        self,
        db: AsyncSession,
        market_id: int,
        pubkey: str,
        wallet: str,
        account: PositionAccount,
        cost_basis: int,
        delta: int | None = None,
    ) -> int:
        """Returns the stored cost basis. With a delta, it is added to the
        stored row on conflict rather than overwriting it."""
        ...

    async def get_config(self, db: AsyncSession) -> ConfigAccount | None: ...

    async def upsert_config(self, db: AsyncSession, config: ConfigAccount) -> None: ...
