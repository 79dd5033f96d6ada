"""Unit tests for SettlementService with a mocked mirror repository."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from solders.pubkey import Pubkey

from src.dg_common.enums import MarketStatus
from src.dg_common.errors import (
    ChallengePeriodActiveError,
    MarketNotFoundError,
    PositionNotFoundError,
)
from src.dg_settlement.application.service import SettlementService

WALLET = Pubkey.new_unique()
RESOLVED_AT = 1_700_000_000


def _config(period: int) -> MagicMock:
    config = MagicMock()
    config.challenge_period_seconds = period
    return config


@pytest.fixture
def repo(make_market, make_position):  # type: ignore[no-untyped-def]
    repo = AsyncMock()
    repo.get_market.return_value = make_market(
        status=MarketStatus.RESOLVED, outcome=True, resolved_at=RESOLVED_AT
    )
    repo.get_position.return_value = make_position(user_wallet=str(WALLET), yes_shares=5)
    repo.get_config.return_value = None
    return repo


async def test_challenge_period_falls_back_to_settings(repo) -> None:
    from config.settings import settings

    svc = SettlementService(repo=repo)
    assert await svc.challenge_period_seconds(AsyncMock()) == settings.CHALLENGE_PERIOD_SECONDS


async def test_challenge_period_from_config(repo) -> None:
    repo.get_config.return_value = _config(3_600)
    svc = SettlementService(repo=repo)
    assert await svc.challenge_period_seconds(AsyncMock()) == 3_600


async def test_claim_quote(repo) -> None:
    repo.get_config.return_value = _config(60)
    svc = SettlementService(repo=repo, clock=lambda: RESOLVED_AT + 60)

    quote = await svc.get_claim_quote(AsyncMock(), 7, WALLET)

    assert quote.kind == "winnings"
    assert quote.amount == 4
    assert quote.claimable
    assert quote.wallet == str(WALLET)
    assert quote.challenge_ends_at is not None


async def test_preflight_during_challenge(repo) -> None:
    repo.get_config.return_value = _config(60)
    svc = SettlementService(repo=repo, clock=lambda: RESOLVED_AT + 1)

    with pytest.raises(ChallengePeriodActiveError):
        await svc.preflight_claim(AsyncMock(), 7, WALLET)


async def test_missing_market(repo) -> None:
    repo.get_market.return_value = None
    with pytest.raises(MarketNotFoundError):
        await SettlementService(repo=repo).get_claim_quote(AsyncMock(), 7, WALLET)


async def test_missing_position(repo) -> None:
    repo.get_position.return_value = None
    with pytest.raises(PositionNotFoundError):
        await SettlementService(repo=repo).get_claim_quote(AsyncMock(), 7, WALLET)


async def test_creator_payout(repo) -> None:
    svc = SettlementService(repo=repo, clock=lambda: RESOLVED_AT + 86_400)

    payout = await svc.get_creator_payout(AsyncMock(), 7)

    assert payout.total == 4
    assert payout.claimable
    assert payout.creator == repo.get_market.return_value.creator
