"""Unit tests for MirrorService using mock ledger + repository."""

from dataclasses import replace
from unittest.mock import AsyncMock, MagicMock

import pytest
from solders.pubkey import Pubkey

from src.dg_common.enums import MarketStatus
from src.dg_common.errors import LedgerError
from src.dg_ledger.domain.layouts import MarketAccount, PositionAccount
from src.dg_mirror.application.service import MirrorService
from src.dg_mirror.domain.models import Position

WALLET = Pubkey.new_unique()
MARKET_PUBKEY = str(Pubkey.new_unique())
POSITION_PUBKEY = str(Pubkey.new_unique())


def _market_account(**overrides) -> MarketAccount:  # type: ignore[no-untyped-def]
    fields = dict(
        creator=str(Pubkey.new_unique()),
        question="Q?",
        resolution_source="https://example.com",
        yes_reserve=40,
        no_reserve=60,
        total_minted=100,
        initial_liquidity=100,
        swap_fee_bps=100,
        resolution_timestamp=1_700_000_000,
        status=MarketStatus.OPEN,
        outcome=None,
        creator_fee_claimed=False,
        treasury_fee_claimed=False,
        market_id=1,
        resolved_at=0,
        bump=255,
        treasury_fee=0,
        creator_fee=0,
        treasury_rake_bps=200,
        creator_rake_bps=100,
    )
    fields.update(overrides)
    return MarketAccount(**fields)


def _position_account(yes: int = 0, no: int = 0, claimed: bool = False) -> PositionAccount:
    return PositionAccount(
        market=MARKET_PUBKEY, user=str(WALLET), yes_shares=yes, no_shares=no, claimed=claimed, bump=1
    )


def _existing(yes: int, no: int, cost_basis: int) -> Position:
    return Position(
        market_id=1,
        pubkey=POSITION_PUBKEY,
        user_wallet=str(WALLET),
        yes_shares=yes,
        no_shares=no,
        claimed=False,
        cost_basis=cost_basis,
    )


def _ledger(market: MarketAccount | None, position: PositionAccount | None) -> MagicMock:
    ledger = MagicMock()
    ledger.fetch_market = AsyncMock(return_value=market)
    ledger.fetch_position = AsyncMock(return_value=position)
    ledger.fetch_config = AsyncMock(return_value=None)
    ledger.market_pubkey = MagicMock(return_value=MARKET_PUBKEY)
    ledger.position_pubkey = MagicMock(return_value=POSITION_PUBKEY)
    return ledger


def _repo(existing: Position | None) -> AsyncMock:
    """Repository whose upsert echoes the cost basis it was given, like the
    SQL does for an uncontended row."""
    repo = AsyncMock()
    repo.get_position.return_value = existing
    repo.upsert_position.side_effect = lambda db, m, p, w, a, cost_basis, delta=None: cost_basis
    return repo


class TestSync:
    async def test_first_buy_creates_position_with_delta(self) -> None:
        repo = _repo(None)
        position = _position_account(yes=10)
        svc = MirrorService(ledger=_ledger(_market_account(), position), repo=repo)
        db = AsyncMock()

        result = await svc.sync(db, 1, WALLET, cost_basis_delta=5_000)

        assert result.market_synced and result.position_synced
        assert result.cost_basis == 5_000
        repo.upsert_market.assert_awaited_once()
        repo.upsert_position.assert_awaited_once_with(
            db, 1, POSITION_PUBKEY, str(WALLET), position, 5_000, 5_000
        )
        db.commit.assert_awaited_once()

    async def test_empty_ledger_position_without_row_is_not_inserted(self) -> None:
        repo = _repo(None)
        svc = MirrorService(ledger=_ledger(_market_account(), _position_account()), repo=repo)

        result = await svc.sync(AsyncMock(), 1, WALLET)

        assert result.position_synced is False
        assert result.cost_basis is None
        repo.upsert_position.assert_not_awaited()

    async def test_full_sell_updates_existing_row_to_zero(self) -> None:
        repo = _repo(_existing(10, 0, 5_000))
        svc = MirrorService(ledger=_ledger(_market_account(), _position_account()), repo=repo)

        result = await svc.sync(AsyncMock(), 1, WALLET)

        assert result.cost_basis == 0
        repo.upsert_position.assert_awaited_once()

    async def test_partial_sell_without_delta_reduces_proportionally(self) -> None:
        repo = _repo(_existing(10, 0, 5_000))
        svc = MirrorService(ledger=_ledger(_market_account(), _position_account(yes=4)), repo=repo)

        result = await svc.sync(AsyncMock(), 1, WALLET)

        assert result.cost_basis == 2_000

    async def test_replay_is_idempotent(self) -> None:
        repo = _repo(_existing(10, 0, 5_000))
        svc = MirrorService(ledger=_ledger(_market_account(), _position_account(yes=10)), repo=repo)

        first = await svc.sync(AsyncMock(), 1, WALLET)
        second = await svc.sync(AsyncMock(), 1, WALLET)

        assert first.cost_basis == second.cost_basis == 5_000

    async def test_negative_delta_floors_at_zero(self) -> None:
        repo = _repo(_existing(10, 0, 1_000))
        svc = MirrorService(ledger=_ledger(_market_account(), _position_account(yes=2)), repo=repo)

        result = await svc.sync(AsyncMock(), 1, WALLET, cost_basis_delta=-5_000)

        assert result.cost_basis == 0

    async def test_concurrent_first_buy_reports_stored_basis(self) -> None:
        # Another sync inserted the row after our read; the upsert adds our
        # delta to its 3_000 instead of overwriting it
        repo = _repo(None)
        repo.upsert_position.side_effect = None
        repo.upsert_position.return_value = 8_000
        svc = MirrorService(ledger=_ledger(_market_account(), _position_account(yes=20)), repo=repo)

        result = await svc.sync(AsyncMock(), 1, WALLET, cost_basis_delta=5_000)

        assert result.cost_basis == 8_000
        assert repo.upsert_position.await_args.args[-1] == 5_000

    async def test_no_market_and_no_row_skips_position(self) -> None:
        repo = AsyncMock()
        repo.get_market.return_value = None
        svc = MirrorService(ledger=_ledger(None, _position_account(yes=3)), repo=repo)

        result = await svc.sync(AsyncMock(), 1, WALLET)

        assert result.market_synced is False
        assert result.position_synced is False
        repo.upsert_position.assert_not_awaited()

    async def test_nothing_on_ledger(self) -> None:
        repo = AsyncMock()
        svc = MirrorService(ledger=_ledger(None, None), repo=repo)
        db = AsyncMock()

        result = await svc.sync(db, 1, WALLET)

        assert not result.market_synced and not result.position_synced
        repo.upsert_market.assert_not_awaited()
        db.commit.assert_awaited_once()

    async def test_position_for_other_wallet_is_rejected(self) -> None:
        repo = AsyncMock()
        foreign = replace(_position_account(yes=1), user=str(Pubkey.new_unique()))
        svc = MirrorService(ledger=_ledger(_market_account(), foreign), repo=repo)

        with pytest.raises(LedgerError, match="does not belong"):
            await svc.sync(AsyncMock(), 1, WALLET)
        repo.upsert_market.assert_not_awaited()

    async def test_db_failure_rolls_back(self) -> None:
        repo = AsyncMock()
        repo.upsert_market.side_effect = RuntimeError("db down")
        svc = MirrorService(ledger=_ledger(_market_account(), None), repo=repo)
        db = AsyncMock()

        with pytest.raises(RuntimeError):
            await svc.sync(db, 1, WALLET)
        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()

    async def test_ledger_error_propagates_before_any_write(self) -> None:
        repo = AsyncMock()
        ledger = _ledger(None, None)
        ledger.fetch_market = AsyncMock(side_effect=LedgerError("rpc down"))
        svc = MirrorService(ledger=ledger, repo=repo)
        db = AsyncMock()

        with pytest.raises(LedgerError):
            await svc.sync(db, 1, WALLET)
        db.commit.assert_not_awaited()


class TestRefresh:
    async def test_refresh_market_upserts(self) -> None:
        repo = AsyncMock()
        account = _market_account(status=MarketStatus.RESOLVED, outcome=True, resolved_at=99)
        svc = MirrorService(ledger=_ledger(account, None), repo=repo)
        db = AsyncMock()

        assert await svc.refresh_market(db, 1) is account
        repo.upsert_market.assert_awaited_once_with(db, MARKET_PUBKEY, account)
        db.commit.assert_awaited_once()

    async def test_refresh_missing_market(self) -> None:
        repo = AsyncMock()
        svc = MirrorService(ledger=_ledger(None, None), repo=repo)
        assert await svc.refresh_market(AsyncMock(), 1) is None
        repo.upsert_market.assert_not_awaited()

    async def test_sync_config_missing(self) -> None:
        repo = AsyncMock()
        svc = MirrorService(ledger=_ledger(None, None), repo=repo)
        assert await svc.sync_config(AsyncMock()) is None
        repo.upsert_config.assert_not_awaited()
