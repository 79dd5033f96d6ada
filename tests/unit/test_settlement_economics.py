"""Unit tests for settlement economics (pure functions, no DB)."""

import pytest

from src.dg_common.enums import ClaimKind, MarketStatus
from src.dg_common.errors import (
    AlreadyClaimedError,
    ChallengePeriodActiveError,
    NotClaimableError,
)
from src.dg_settlement.domain.economics import (
    assert_claimable,
    challenge_active,
    challenge_ends_at,
    creator_lp_component,
    creator_payout,
    prize_pool,
    quote_claim,
    quote_creator_payout,
    refund,
    treasury_payout,
    winnings,
)

RESOLVED_AT = 1_700_000_000
PERIOD = 86_400
AFTER_CHALLENGE = RESOLVED_AT + PERIOD


@pytest.fixture
def resolved_yes(make_market):  # type: ignore[no-untyped-def]
    return make_market(
        status=MarketStatus.RESOLVED, outcome=True, resolved_at=RESOLVED_AT,
        yes_reserve=4, no_reserve=6, total_minted=10, treasury_fee=1, creator_fee=1,
    )


class TestPayouts:
    def test_prize_pool(self, resolved_yes) -> None:
        assert prize_pool(resolved_yes) == 8

    def test_prize_pool_clamped(self, make_market) -> None:
        assert prize_pool(make_market(total_minted=1, treasury_fee=1, creator_fee=1)) == 0

    def test_winnings_floor(self, resolved_yes, make_position) -> None:
        # 5 * 8 / 10 = 4
        assert winnings(make_position(yes_shares=5, no_shares=3), resolved_yes) == 4

    def test_six_yes_shares_of_ten_with_two_fee_lamports_pay_four(
        self, make_market, make_position
    ) -> None:
        market = make_market(
            status=MarketStatus.RESOLVED, outcome=True, resolved_at=RESOLVED_AT,
            yes_reserve=6, no_reserve=4, total_minted=10, treasury_fee=1, creator_fee=1,
        )
        assert prize_pool(market) == 8
        # floor(6 * 8 / 10) = 4
        assert winnings(make_position(yes_shares=6), market) == 4

    def test_losing_side_gets_nothing(self, resolved_yes, make_position) -> None:
        assert winnings(make_position(yes_shares=0, no_shares=7), resolved_yes) == 0

    def test_no_outcome(self, make_market, make_position) -> None:
        assert winnings(make_position(yes_shares=5), make_market()) == 0

    def test_empty_market(self, make_market, make_position) -> None:
        market = make_market(
            status=MarketStatus.RESOLVED, outcome=True, resolved_at=1, total_minted=0,
            treasury_fee=0, creator_fee=0,
        )
        assert winnings(make_position(yes_shares=5), market) == 0

    def test_refund_is_half_of_all_shares(self, make_market, make_position) -> None:
        voided = make_market(status=MarketStatus.VOIDED)
        assert refund(make_position(yes_shares=3, no_shares=5), voided) == 4
        assert refund(make_position(yes_shares=3, no_shares=0), voided) == 1

    def test_refund_only_for_voided(self, resolved_yes, make_position) -> None:
        assert refund(make_position(yes_shares=3, no_shares=5), resolved_yes) == 0
        assert refund(make_position(yes_shares=3, no_shares=5)) == 4

    def test_claimed_position_pays_nothing(self, resolved_yes, make_market, make_position) -> None:
        claimed = make_position(yes_shares=5, claimed=True)
        assert winnings(claimed, resolved_yes) == 0
        assert refund(claimed, make_market(status=MarketStatus.VOIDED)) == 0

    def test_creator_payout(self, resolved_yes) -> None:
        assert creator_lp_component(resolved_yes) == 3
        assert creator_payout(resolved_yes) == 4
        assert treasury_payout(resolved_yes) == 1

    def test_claimed_fees_pay_nothing(self, make_market) -> None:
        market = make_market(
            status=MarketStatus.RESOLVED, outcome=False, resolved_at=1,
            creator_fee_claimed=True, treasury_fee_claimed=True,
        )
        assert creator_payout(market) == 0
        assert treasury_payout(market) == 0

    def test_no_payouts_before_resolution(self, make_market) -> None:
        assert creator_payout(make_market()) == 0
        assert treasury_payout(make_market()) == 0

    def test_payouts_never_exceed_the_pool(self, resolved_yes, make_position) -> None:
        # Every yes share not held by the pool sits in user positions
        outstanding = resolved_yes.total_minted - resolved_yes.yes_reserve
        users = winnings(make_position(yes_shares=outstanding), resolved_yes)
        total = users + creator_payout(resolved_yes) + treasury_payout(resolved_yes)
        assert total <= resolved_yes.total_minted


class TestChallengeWindow:
    def test_ends_at(self, resolved_yes, make_market) -> None:
        assert challenge_ends_at(resolved_yes, PERIOD) == RESOLVED_AT + PERIOD
        assert challenge_ends_at(make_market(), PERIOD) is None

    def test_active_until_end(self, resolved_yes) -> None:
        assert challenge_active(resolved_yes, PERIOD, RESOLVED_AT + PERIOD - 1)
        assert not challenge_active(resolved_yes, PERIOD, RESOLVED_AT + PERIOD)


class TestQuoteClaim:
    def test_winner_after_challenge(self, resolved_yes, make_position) -> None:
        quote = quote_claim(make_position(yes_shares=5), resolved_yes, PERIOD, AFTER_CHALLENGE)
        assert quote.kind is ClaimKind.WINNINGS
        assert quote.amount == 4
        assert quote.claimable
        assert quote.challenge_ends_at == AFTER_CHALLENGE

    def test_winner_during_challenge(self, resolved_yes, make_position) -> None:
        quote = quote_claim(make_position(yes_shares=5), resolved_yes, PERIOD, RESOLVED_AT + 10)
        assert quote.amount == 4
        assert not quote.claimable
        assert quote.reason == "challenge period active"

    def test_loser(self, resolved_yes, make_position) -> None:
        quote = quote_claim(make_position(no_shares=5), resolved_yes, PERIOD, AFTER_CHALLENGE)
        assert quote.kind is ClaimKind.NONE
        assert quote.reason == "not a winning position"

    def test_open_market(self, make_market, make_position) -> None:
        quote = quote_claim(make_position(yes_shares=5), make_market(), PERIOD, AFTER_CHALLENGE)
        assert quote.kind is ClaimKind.NONE
        assert quote.reason == "market not settled"

    def test_voided_refund_ignores_challenge(self, make_market, make_position) -> None:
        voided = make_market(status=MarketStatus.VOIDED)
        quote = quote_claim(make_position(yes_shares=3, no_shares=5), voided, PERIOD, 0)
        assert quote.kind is ClaimKind.REFUND
        assert quote.amount == 4
        assert quote.claimable

    def test_second_claim_is_refused(self, resolved_yes, make_position) -> None:
        quote = quote_claim(
            make_position(yes_shares=5, claimed=True), resolved_yes, PERIOD, AFTER_CHALLENGE
        )
        assert quote.amount == 0
        assert quote.reason == "already claimed"


class TestAssertClaimable:
    def test_returns_quote(self, resolved_yes, make_position) -> None:
        quote = assert_claimable(make_position(yes_shares=5), resolved_yes, PERIOD, AFTER_CHALLENGE)
        assert quote.amount == 4

    def test_already_claimed(self, make_market, make_position) -> None:
        voided = make_market(status=MarketStatus.VOIDED)
        with pytest.raises(AlreadyClaimedError):
            assert_claimable(make_position(yes_shares=2, claimed=True), voided, PERIOD, 0)

    def test_challenge_active(self, resolved_yes, make_position) -> None:
        with pytest.raises(ChallengePeriodActiveError) as exc:
            assert_claimable(make_position(yes_shares=5), resolved_yes, PERIOD, RESOLVED_AT)
        assert str(AFTER_CHALLENGE) in exc.value.message

    def test_not_a_winner(self, resolved_yes, make_position) -> None:
        with pytest.raises(NotClaimableError, match="not a winning position"):
            assert_claimable(make_position(no_shares=5), resolved_yes, PERIOD, AFTER_CHALLENGE)


class TestCreatorQuote:
    def test_claimable_after_challenge(self, resolved_yes) -> None:
        quote = quote_creator_payout(resolved_yes, PERIOD, AFTER_CHALLENGE)
        assert (quote.fee, quote.lp_component, quote.total) == (1, 3, 4)
        assert quote.claimable

    def test_gated_by_challenge(self, resolved_yes) -> None:
        quote = quote_creator_payout(resolved_yes, PERIOD, RESOLVED_AT)
        assert quote.total == 4
        assert not quote.claimable

    def test_claimed(self, make_market) -> None:
        market = make_market(
            status=MarketStatus.RESOLVED, outcome=True, resolved_at=1, creator_fee_claimed=True
        )
        quote = quote_creator_payout(market, PERIOD, AFTER_CHALLENGE)
        assert quote.total == 0
        assert quote.reason == "already claimed"

    def test_not_resolved(self, make_market) -> None:
        quote = quote_creator_payout(make_market(status=MarketStatus.VOIDED), PERIOD, 0)
        assert quote.total == 0
        assert quote.reason == "market not resolved"
