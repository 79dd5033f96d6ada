"""Boundary validation for wallet addresses and market ids.

Both helpers raise an InputValidationError subclass and touch nothing else,
so a bad request never reaches the database or the ledger.
"""

from solders.pubkey import Pubkey

from src.dg_common.errors import InvalidMarketIdError, InvalidWalletError

# Ledger ids are u64, the mirror stores them as BIGINT
_MARKET_ID_MAX = (1 << 63) - 1


def parse_wallet(wallet: str) -> Pubkey:
    """Parse a base58 wallet address into a Pubkey."""
    if not wallet or len(wallet) > 44:
        raise InvalidWalletError(wallet)
    try:
        return Pubkey.from_string(wallet)
    except ValueError:
        raise InvalidWalletError(wallet) from None


def parse_market_id(market_id: object) -> int:
    """Market ids are ledger sequence numbers, non-negative and BIGINT-sized."""
    if isinstance(market_id, bool) or (
        isinstance(market_id, float) and not market_id.is_integer()
    ):
        raise InvalidMarketIdError(market_id)
    try:
        value = int(market_id)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        raise InvalidMarketIdError(market_id) from None
    if not (0 <= value <= _MARKET_ID_MAX):
        raise InvalidMarketIdError(market_id)
    return value
