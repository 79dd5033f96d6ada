"""Settlement economics — pure functions over mirrored market/position state.

All amounts are lamports (int) and every division floors, so the numbers
agree with the ledger program's u128 math:

    prize_pool     = total_minted - treasury_fee - creator_fee
    winnings       = winning_shares * prize_pool // total_minted
    refund         = (yes_shares + no_shares) // 2      (voided markets)
    creator_payout = creator_fee + winning_reserve * prize_pool // total_minted

The refund is a flat half-of-shares rule that ignores prices actually paid.
It is kept as-is to match the ledger program.

Once a position is claimed every payout for it is 0, and a claimed fee
pays 0 to its recipient.
"""

from dataclasses import dataclass

from src.dg_common.enums import ClaimKind
from src.dg_common.errors import (
    AlreadyClaimedError,
    ChallengePeriodActiveError,
    NotClaimableError,
)
from src.dg_common.lamports import mul_div_floor
from src.dg_mirror.domain.models import Market, Position


@dataclass(frozen=True)
class ClaimQuote:
    kind: ClaimKind
    amount: int
    claimable: bool
    reason: str | None = None
    challenge_ends_at: int | None = None


@dataclass(frozen=True)
class CreatorPayoutQuote:
    fee: int
    lp_component: int
    total: int
    claimable: bool
    reason: str | None = None
    challenge_ends_at: int | None = None


# ---------------------------------------------------------------------------
# Building blocks
# ---------------------------------------------------------------------------


def prize_pool(market: Market) -> int:
    return max(0, market.total_minted - market.treasury_fee - market.creator_fee)


def winning_shares(position: Position, market: Market) -> int:
    if not market.is_resolved or market.outcome is None:
        return 0
    return position.yes_shares if market.outcome else position.no_shares


def is_winner(position: Position, market: Market) -> bool:
    return winning_shares(position, market) > 0


def winnings(position: Position, market: Market) -> int:
    if position.claimed or market.total_minted == 0:
        return 0
    return mul_div_floor(winning_shares(position, market), prize_pool(market), market.total_minted)


def refund(position: Position, market: Market | None = None) -> int:
    """Half of all shares held, either side. `market` gates on Voided when given."""
    if position.claimed:
        return 0
    if market is not None and not market.is_voided:
        return 0
    return (position.yes_shares + position.no_shares) // 2


def creator_lp_component(market: Market) -> int:
    """Creator's seeded liquidity, revalued against the winning side's reserve."""
    if not market.is_resolved or market.outcome is None or market.total_minted == 0:
        return 0
    winning_reserve = market.yes_reserve if market.outcome else market.no_reserve
    return mul_div_floor(winning_reserve, prize_pool(market), market.total_minted)


def creator_payout(market: Market) -> int:
    if not market.is_resolved or market.creator_fee_claimed:
        return 0
    return market.creator_fee + creator_lp_component(market)


def treasury_payout(market: Market) -> int:
    if not market.is_resolved or market.treasury_fee_claimed:
        return 0
    return market.treasury_fee


# ---------------------------------------------------------------------------
# Challenge window
# ---------------------------------------------------------------------------


def challenge_ends_at(market: Market, challenge_period_seconds: int) -> int | None:
    if market.resolved_at <= 0:
        return None
    return market.resolved_at + challenge_period_seconds


def challenge_active(market: Market, challenge_period_seconds: int, now: int) -> bool:
    ends_at = challenge_ends_at(market, challenge_period_seconds)
    return ends_at is not None and now < ends_at


# ---------------------------------------------------------------------------
# Claim quotes
# ---------------------------------------------------------------------------


def quote_claim(
    position: Position, market: Market, challenge_period_seconds: int, now: int
) -> ClaimQuote:
    """What `position` could claim right now, and why not if it can't."""
    if market.is_voided:
        if position.claimed:
            return ClaimQuote(ClaimKind.REFUND, 0, False, "already claimed")
        # Refunds are not gated by the challenge window
        return ClaimQuote(ClaimKind.REFUND, refund(position, market), True)

    if not market.is_resolved:
        return ClaimQuote(ClaimKind.NONE, 0, False, "market not settled")

    ends_at = challenge_ends_at(market, challenge_period_seconds)
    if position.claimed:
        return ClaimQuote(ClaimKind.WINNINGS, 0, False, "already claimed", ends_at)
    if not is_winner(position, market):
        return ClaimQuote(ClaimKind.NONE, 0, False, "not a winning position", ends_at)

    amount = winnings(position, market)
    if challenge_active(market, challenge_period_seconds, now):
        return ClaimQuote(ClaimKind.WINNINGS, amount, False, "challenge period active", ends_at)
    return ClaimQuote(ClaimKind.WINNINGS, amount, True, None, ends_at)


def assert_claimable(
    position: Position, market: Market, challenge_period_seconds: int, now: int
) -> ClaimQuote:
    """Raise the matching AppError unless a claim may be submitted now."""
    if position.claimed:
        raise AlreadyClaimedError()
    quote = quote_claim(position, market, challenge_period_seconds, now)
    if quote.claimable:
        return quote
    if quote.reason == "challenge period active" and quote.challenge_ends_at is not None:
        raise ChallengePeriodActiveError(quote.challenge_ends_at)
    raise NotClaimableError(quote.reason or "unknown")


def quote_creator_payout(
    market: Market, challenge_period_seconds: int, now: int
) -> CreatorPayoutQuote:
    ends_at = challenge_ends_at(market, challenge_period_seconds)
    lp = creator_lp_component(market)
    if not market.is_resolved:
        return CreatorPayoutQuote(0, 0, 0, False, "market not resolved", ends_at)
    if market.creator_fee_claimed:
        return CreatorPayoutQuote(market.creator_fee, lp, 0, False, "already claimed", ends_at)
    total = creator_payout(market)
    if challenge_active(market, challenge_period_seconds, now):
        return CreatorPayoutQuote(
            market.creator_fee, lp, total, False, "challenge period active", ends_at
        )
    return CreatorPayoutQuote(market.creator_fee, lp, total, True, None, ends_at)
