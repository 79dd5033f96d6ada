"""Fixed binary layouts of the ledger program's accounts.

All integers are little-endian. Strings are Borsh strings (u32 length + UTF-8).
Option<bool> is a tag byte followed by a value byte only when the tag is 1.
Every account starts with an 8-byte Anchor discriminator,
sha256("account:<Name>")[:8], which is verified before anything else.

Market:
    disc[8] creator[32] question[str] resolution_source[str]
    yes_reserve u64, no_reserve u64, total_minted u64, initial_liquidity u64
    swap_fee_bps u16, resolution_timestamp i64, status u8, outcome Option<bool>
    creator_fee_claimed bool, treasury_fee_claimed bool, market_id u64
    resolved_at i64, bump u8, treasury_fee u64, creator_fee u64
    treasury_rake_bps u16, creator_rake_bps u16

Position:
    disc[8] market[32] user[32] yes_shares u64, no_shares u64, claimed bool, bump u8

Config:
    disc[8] authority[32] treasury[32] min_liquidity_lamports u64
    treasury_rake_bps u16, creator_rake_bps u16, market_count u64, paused bool
    min_trade_lamports u64, betting_cutoff_seconds i64
    challenge_period_seconds i64, swap_fee_bps u16, bump u8

Each decode_* function returns a fully-populated frozen dataclass or raises
AccountDecodeError; there is no partially-decoded state.
"""

import hashlib
import struct
from dataclasses import dataclass

from solders.pubkey import Pubkey

from src.dg_common.enums import MarketStatus
from src.dg_common.errors import AccountDecodeError

MAX_QUESTION_LEN = 256
MAX_SOURCE_LEN = 512


def account_discriminator(name: str) -> bytes:
    return hashlib.sha256(f"account:{name}".encode()).digest()[:8]


MARKET_DISCRIMINATOR = account_discriminator("Market")
POSITION_DISCRIMINATOR = account_discriminator("Position")
CONFIG_DISCRIMINATOR = account_discriminator("Config")


@dataclass(frozen=True)
class MarketAccount:
    creator: str
    question: str
    resolution_source: str
    yes_reserve: int
    no_reserve: int
    total_minted: int
    initial_liquidity: int
    swap_fee_bps: int
    resolution_timestamp: int
    status: MarketStatus
    outcome: bool | None
    creator_fee_claimed: bool
    treasury_fee_claimed: bool
    market_id: int
    resolved_at: int
    bump: int
    treasury_fee: int
    creator_fee: int
    treasury_rake_bps: int
    creator_rake_bps: int


@dataclass(frozen=True)
class PositionAccount:
    market: str
    user: str
    yes_shares: int
    no_shares: int
    claimed: bool
    bump: int

    @property
    def is_empty(self) -> bool:
        return self.yes_shares == 0 and self.no_shares == 0 and not self.claimed


@dataclass(frozen=True)
class ConfigAccount:
    authority: str
    treasury: str
    min_liquidity_lamports: int
    treasury_rake_bps: int
    creator_rake_bps: int
    market_count: int
    paused: bool
    min_trade_lamports: int
    betting_cutoff_seconds: int
    challenge_period_seconds: int
    swap_fee_bps: int
    bump: int


class _Reader:
    """Cursor over account data; every read is bounds-checked."""

    def __init__(self, data: bytes, account: str) -> None:
        self._data = data
        self._offset = 0
        self._account = account

    def _take(self, size: int) -> bytes:
        end = self._offset + size
        if end > len(self._data):
            raise AccountDecodeError(
                self._account,
                f"need {size} bytes at offset {self._offset}, have {len(self._data) - self._offset}",
            )
        chunk = self._data[self._offset : end]
        self._offset = end
        return chunk

    def _unpack(self, fmt: str) -> int:
        raw = self._take(struct.calcsize(fmt))
        return struct.unpack(fmt, raw)[0]  # type: ignore[no-any-return]

    def expect_discriminator(self, expected: bytes) -> None:
        if self._take(8) != expected:
            raise AccountDecodeError(self._account, "discriminator mismatch")

    def u8(self) -> int:
        return self._unpack("<B")

    def u16(self) -> int:
        return self._unpack("<H")

    def u32(self) -> int:
        return self._unpack("<I")

    def u64(self) -> int:
        return self._unpack("<Q")

    def i64(self) -> int:
        return self._unpack("<q")

    def boolean(self) -> bool:
        value = self.u8()
        if value > 1:
            raise AccountDecodeError(self._account, f"invalid bool byte {value}")
        return value == 1

    def pubkey(self) -> str:
        return str(Pubkey(self._take(32)))

    def string(self, max_len: int) -> str:
        length = self.u32()
        if length > max_len:
            raise AccountDecodeError(self._account, f"string length {length} exceeds {max_len}")
        try:
            return self._take(length).decode("utf-8")
        except UnicodeDecodeError:
            raise AccountDecodeError(self._account, "string is not valid UTF-8") from None

    def option_bool(self) -> bool | None:
        tag = self.u8()
        if tag == 0:
            return None
        if tag == 1:
            return self.boolean()
        raise AccountDecodeError(self._account, f"invalid Option tag {tag}")


def decode_market(data: bytes) -> MarketAccount:
    r = _Reader(data, "Market")
    r.expect_discriminator(MARKET_DISCRIMINATOR)
    creator = r.pubkey()
    question = r.string(MAX_QUESTION_LEN)
    resolution_source = r.string(MAX_SOURCE_LEN)
    yes_reserve = r.u64()
    no_reserve = r.u64()
    total_minted = r.u64()
    initial_liquidity = r.u64()
    swap_fee_bps = r.u16()
    resolution_timestamp = r.i64()
    status_tag = r.u8()
    try:
        status = MarketStatus.from_ledger_tag(status_tag)
    except KeyError:
        raise AccountDecodeError("Market", f"unknown status tag {status_tag}") from None
    outcome = r.option_bool()
    return MarketAccount(
        creator=creator,
        question=question,
        resolution_source=resolution_source,
        yes_reserve=yes_reserve,
        no_reserve=no_reserve,
        total_minted=total_minted,
        initial_liquidity=initial_liquidity,
        swap_fee_bps=swap_fee_bps,
        resolution_timestamp=resolution_timestamp,
        status=status,
        outcome=outcome,
        creator_fee_claimed=r.boolean(),
        treasury_fee_claimed=r.boolean(),
        market_id=r.u64(),
        resolved_at=r.i64(),
        bump=r.u8(),
        treasury_fee=r.u64(),
        creator_fee=r.u64(),
        treasury_rake_bps=r.u16(),
        creator_rake_bps=r.u16(),
    )


def decode_position(data: bytes) -> PositionAccount:
    r = _Reader(data, "Position")
    r.expect_discriminator(POSITION_DISCRIMINATOR)
    return PositionAccount(
        market=r.pubkey(),
        user=r.pubkey(),
        yes_shares=r.u64(),
        no_shares=r.u64(),
        claimed=r.boolean(),
        bump=r.u8(),
    )


def decode_config(data: bytes) -> ConfigAccount:
    r = _Reader(data, "Config")
    r.expect_discriminator(CONFIG_DISCRIMINATOR)
    return ConfigAccount(
        authority=r.pubkey(),
        treasury=r.pubkey(),
        min_liquidity_lamports=r.u64(),
        treasury_rake_bps=r.u16(),
        creator_rake_bps=r.u16(),
        market_count=r.u64(),
        paused=r.boolean(),
        min_trade_lamports=r.u64(),
        betting_cutoff_seconds=r.i64(),
        challenge_period_seconds=r.i64(),
        swap_fee_bps=r.u16(),
        bump=r.u8(),
    )
