"""Builders for raw ledger account bytes and mirrored domain rows."""

import struct
from collections.abc import Callable
from typing import Any

import pytest
from solders.pubkey import Pubkey

from src.dg_common.enums import MarketStatus
from src.dg_ledger.domain.layouts import (
    CONFIG_DISCRIMINATOR,
    MARKET_DISCRIMINATOR,
    POSITION_DISCRIMINATOR,
)
from src.dg_mirror.domain.models import Market, Position

_STATUS_TAGS = {MarketStatus.OPEN: 0, MarketStatus.RESOLVED: 1, MarketStatus.VOIDED: 2}


def _borsh_str(value: str) -> bytes:
    raw = value.encode("utf-8")
    return struct.pack("<I", len(raw)) + raw


def _option_bool(value: bool | None) -> bytes:
    if value is None:
        return b"\x00"
    return b"\x01" + (b"\x01" if value else b"\x00")


@pytest.fixture
def market_bytes() -> Callable[..., bytes]:
    def build(**overrides: Any) -> bytes:
        f: dict[str, Any] = {
            "creator": Pubkey.new_unique(),
            "question": "Will BTC close above $100k on Dec 31?",
            "resolution_source": "https://example.com/btc",
            "yes_reserve": 4_000,
            "no_reserve": 6_000,
            "total_minted": 10_000,
            "initial_liquidity": 10_000,
            "swap_fee_bps": 100,
            "resolution_timestamp": 1_700_000_000,
            "status": MarketStatus.OPEN,
            "outcome": None,
            "creator_fee_claimed": False,
            "treasury_fee_claimed": False,
            "market_id": 7,
            "resolved_at": 0,
            "bump": 254,
            "treasury_fee": 100,
            "creator_fee": 50,
            "treasury_rake_bps": 200,
            "creator_rake_bps": 100,
        }
        f.update(overrides)
        return (
            MARKET_DISCRIMINATOR
            + bytes(f["creator"])
            + _borsh_str(f["question"])
            + _borsh_str(f["resolution_source"])
            + struct.pack(
                "<QQQQHq",
                f["yes_reserve"],
                f["no_reserve"],
                f["total_minted"],
                f["initial_liquidity"],
                f["swap_fee_bps"],
                f["resolution_timestamp"],
            )
            + bytes([_STATUS_TAGS[f["status"]]])
            + _option_bool(f["outcome"])
            + bytes([int(f["creator_fee_claimed"]), int(f["treasury_fee_claimed"])])
            + struct.pack("<QqB", f["market_id"], f["resolved_at"], f["bump"])
            + struct.pack(
                "<QQHH",
                f["treasury_fee"],
                f["creator_fee"],
                f["treasury_rake_bps"],
                f["creator_rake_bps"],
            )
        )

    return build


@pytest.fixture
def position_bytes() -> Callable[..., bytes]:
    def build(
        market: Pubkey,
        user: Pubkey,
        yes_shares: int = 0,
        no_shares: int = 0,
        claimed: bool = False,
        bump: int = 255,
    ) -> bytes:
        return (
            POSITION_DISCRIMINATOR
            + bytes(market)
            + bytes(user)
            + struct.pack("<QQBB", yes_shares, no_shares, int(claimed), bump)
        )

    return build


@pytest.fixture
def config_bytes() -> Callable[..., bytes]:
    def build(challenge_period_seconds: int = 86_400, paused: bool = False) -> bytes:
        return (
            CONFIG_DISCRIMINATOR
            + bytes(Pubkey.new_unique())
            + bytes(Pubkey.new_unique())
            + struct.pack("<QHHQ", 100_000_000, 200, 100, 12)
            + bytes([int(paused)])
            + struct.pack("<Qqq", 10_000_000, 300, challenge_period_seconds)
            + struct.pack("<HB", 100, 253)
        )

    return build


@pytest.fixture
def make_market() -> Callable[..., Market]:
    def build(**overrides: Any) -> Market:
        f: dict[str, Any] = {
            "market_id": 7,
            "pubkey": str(Pubkey.new_unique()),
            "creator": str(Pubkey.new_unique()),
            "question": "Will it rain in Lisbon tomorrow?",
            "resolution_source": "https://example.com/weather",
            "resolution_timestamp": 1_700_000_000,
            "yes_reserve": 4,
            "no_reserve": 6,
            "total_minted": 10,
            "initial_liquidity": 10,
            "swap_fee_bps": 100,
            "status": MarketStatus.OPEN,
            "outcome": None,
            "resolved_at": 0,
            "ai_reasoning": None,
            "creator_fee_claimed": False,
            "treasury_fee_claimed": False,
            "treasury_fee": 1,
            "creator_fee": 1,
        }
        f.update(overrides)
        return Market(**f)

    return build


@pytest.fixture
def make_position() -> Callable[..., Position]:
    def build(**overrides: Any) -> Position:
        f: dict[str, Any] = {
            "market_id": 7,
            "pubkey": str(Pubkey.new_unique()),
            "user_wallet": str(Pubkey.new_unique()),
            "yes_shares": 0,
            "no_shares": 0,
            "claimed": False,
            "cost_basis": 0,
        }
        f.update(overrides)
        return Position(**f)

    return build
