"""Domain models for dg_mirror — pure dataclasses, no business logic.

These are the relational replica of ledger state. Amounts are lamports,
timestamps are unix seconds (0 = never).
"""

from dataclasses import dataclass

from src.dg_common.enums import MarketStatus


@dataclass
class Market:
    market_id: int
    pubkey: str
    creator: str
    question: str
    resolution_source: str
    resolution_timestamp: int
    yes_reserve: int
    no_reserve: int
    total_minted: int
    initial_liquidity: int
    swap_fee_bps: int
    status: MarketStatus
    outcome: bool | None
    resolved_at: int
    ai_reasoning: str | None
    creator_fee_claimed: bool
    treasury_fee_claimed: bool
    treasury_fee: int
    creator_fee: int

    @property
    def is_open(self) -> bool:
        return self.status is MarketStatus.OPEN

    @property
    def is_resolved(self) -> bool:
        return self.status is MarketStatus.RESOLVED

    @property
    def is_voided(self) -> bool:
        return self.status is MarketStatus.VOIDED


@dataclass
class Position:
    market_id: int
    pubkey: str
    user_wallet: str
    yes_shares: int
    no_shares: int
    claimed: bool
    cost_basis: int

    @property
    def total_shares(self) -> int:
        return self.yes_shares + self.no_shares


@dataclass
class SyncResult:
    market_id: int
    wallet: str
    market_synced: bool
    position_synced: bool
    cost_basis: int | None
