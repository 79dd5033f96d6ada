"""Pydantic schemas for the dg_settlement API."""

from pydantic import BaseModel

from src.dg_common.datetime_utils import unix_to_iso
from src.dg_common.lamports import lamports_to_display
from src.dg_settlement.domain.economics import ClaimQuote, CreatorPayoutQuote


class ClaimQuoteResponse(BaseModel):
    market_id: int
    wallet: str
    kind: str
    amount: int
    amount_display: str
    claimable: bool
    reason: str | None
    challenge_ends_at: str | None

    @classmethod
    def from_quote(cls, market_id: int, wallet: str, quote: ClaimQuote) -> "ClaimQuoteResponse":
        return cls(
            market_id=market_id,
            wallet=wallet,
            kind=quote.kind.value,
            amount=quote.amount,
            amount_display=lamports_to_display(quote.amount),
            claimable=quote.claimable,
            reason=quote.reason,
            challenge_ends_at=unix_to_iso(quote.challenge_ends_at or 0),
        )


class CreatorPayoutResponse(BaseModel):
    market_id: int
    creator: str
    fee: int
    lp_component: int
    total: int
    total_display: str
    claimable: bool
    reason: str | None
    challenge_ends_at: str | None

    @classmethod
    def from_quote(
        cls, market_id: int, creator: str, quote: CreatorPayoutQuote
    ) -> "CreatorPayoutResponse":
        return cls(
            market_id=market_id,
            creator=creator,
            fee=quote.fee,
            lp_component=quote.lp_component,
            total=quote.total,
            total_display=lamports_to_display(quote.total),
            claimable=quote.claimable,
            reason=quote.reason,
            challenge_ends_at=unix_to_iso(quote.challenge_ends_at or 0),
        )
