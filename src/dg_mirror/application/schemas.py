"""Pydantic schemas for the dg_mirror sync API."""

from pydantic import BaseModel, Field

from src.dg_common.lamports import lamports_to_display
from src.dg_mirror.domain.models import Position, SyncResult

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class SyncRequest(BaseModel):
    # Identifiers are validated by parse_market_id / parse_wallet so a bad
    # value maps to the 1xxx error codes rather than a generic 422.
    market_id: int | str = Field(..., description="Ledger market id (u64)")
    wallet: str = Field(..., description="Base58 wallet address")
    cost_basis_delta: int | None = Field(
        None, description="Lamports paid (+) or received (-) by the triggering trade"
    )


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class SyncResponse(BaseModel):
    market_id: int
    wallet: str
    market_synced: bool
    position_synced: bool
    cost_basis: int | None

    @classmethod
    def from_result(cls, result: SyncResult) -> "SyncResponse":
        return cls(
            market_id=result.market_id,
            wallet=result.wallet,
            market_synced=result.market_synced,
            position_synced=result.position_synced,
            cost_basis=result.cost_basis,
        )


class PositionResponse(BaseModel):
    market_id: int
    pubkey: str
    wallet: str
    yes_shares: int
    no_shares: int
    claimed: bool
    cost_basis: int
    cost_basis_display: str

    @classmethod
    def from_domain(cls, position: Position) -> "PositionResponse":
        return cls(
            market_id=position.market_id,
            pubkey=position.pubkey,
            wallet=position.user_wallet,
            yes_shares=position.yes_shares,
            no_shares=position.no_shares,
            claimed=position.claimed,
            cost_basis=position.cost_basis,
            cost_basis_display=lamports_to_display(position.cost_basis),
        )
