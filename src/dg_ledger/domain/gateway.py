"""Ledger gateway Protocol — dependency inversion for testability.

Unit tests inject an AsyncMock that conforms to this Protocol.
infrastructure/solana_gateway.py provides the real implementation.

Every method raises LedgerError (or a subclass) on failure; fetch_* return
None when the account does not exist.
"""

from typing import Protocol

from solders.pubkey import Pubkey

from src.dg_ledger.domain.layouts import ConfigAccount, MarketAccount, PositionAccount


class LedgerGatewayProtocol(Protocol):
    async def fetch_config(self) -> ConfigAccount | None: ...

    async def fetch_market(self, market_id: int) -> MarketAccount | None: ...

    async def fetch_position(
        self, market_id: int, wallet: Pubkey
    ) -> PositionAccount | None: ...

    def position_pubkey(self, market_id: int, wallet: Pubkey) -> str: ...

    def market_pubkey(self, market_id: int) -> str: ...

    async def submit_resolve(self, market_id: int, outcome: bool) -> str:
        """Send resolve_market and wait for confirmation. Returns the signature."""
        ...

    async def submit_void(self, market_id: int, reason: str) -> str:
        """Send void_market and wait for confirmation. Returns the signature."""
        ...

    async def submit_update_fee(self, new_fee_lamports: int) -> str:
        """Send update_fee and wait for confirmation. Returns the signature."""
        ...

    async def find_settlement_signature(self, market_id: int) -> str | None:
        """Recover the signature of an already confirmed resolve/void, if any."""
        ...
