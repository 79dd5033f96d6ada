"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Input validation (API boundary)
  2xxx: Auth
  3xxx: Market
  5xxx: Position / claims
  6xxx: Source fetch
  7xxx: Oracle
  8xxx: Ledger
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Input validation ---

class InputValidationError(AppError):
    """Malformed identifier at the API boundary. Raised before any DB/ledger access."""


class InvalidWalletError(InputValidationError):
    def __init__(self, wallet: str) -> None:
        super().__init__(1001, f"Invalid wallet address: {wallet!r}", 400)


class InvalidMarketIdError(InputValidationError):
    def __init__(self, market_id: object) -> None:
        super().__init__(1002, f"Invalid market id: {market_id!r}", 400)


# --- 2xxx: Auth ---

class AdminAuthError(AppError):
    def __init__(self, detail: str = "Admin token required") -> None:
        super().__init__(2001, detail, 401)


# --- 3xxx: Market ---

class MarketNotFoundError(AppError):
    def __init__(self, market_id: int) -> None:
        super().__init__(3001, f"Market not found: {market_id}", 404)


class MarketNotOpenError(AppError):
    def __init__(self, market_id: int, status: str) -> None:
        super().__init__(3002, f"Market {market_id} is already {status}", 422)


class MarketNotReadyError(AppError):
    def __init__(self, market_id: int, remaining_seconds: int) -> None:
        super().__init__(
            3003,
            f"Market {market_id} resolution time not reached ({remaining_seconds}s remaining)",
            422,
        )


# --- 5xxx: Position / claims ---

class PositionNotFoundError(AppError):
    def __init__(self, market_id: int, wallet: str) -> None:
        super().__init__(5001, f"No position for {wallet} in market {market_id}", 404)


class AlreadyClaimedError(AppError):
    def __init__(self) -> None:
        super().__init__(5002, "Position already claimed", 422)


class ChallengePeriodActiveError(AppError):
    def __init__(self, ends_at: int) -> None:
        super().__init__(5003, f"Challenge period active until {ends_at}", 422)


class NotClaimableError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(5004, f"Nothing to claim: {detail}", 422)


# --- 6xxx: Source fetch ---

class FetchError(AppError):
    def __init__(self, message: str, code: int = 6001) -> None:
        super().__init__(code, message, 502)


class FetchTimeoutError(FetchError):
    def __init__(self, url: str) -> None:
        super().__init__(f"Timeout fetching {url}", 6002)


class FetchHttpError(FetchError):
    def __init__(self, status: int, url: str) -> None:
        self.status = status
        super().__init__(f"HTTP {status} fetching {url}", 6003)


class PriceFeedError(FetchError):
    def __init__(self, detail: str) -> None:
        super().__init__(f"SOL price unavailable: {detail}", 6004)


# --- 7xxx: Oracle ---

class OracleError(AppError):
    """Never escapes the oracle client; converted into an ERROR decision."""

    def __init__(self, message: str) -> None:
        super().__init__(7001, message, 502)


# --- 8xxx: Ledger ---

class LedgerError(AppError):
    def __init__(self, message: str, code: int = 8001) -> None:
        super().__init__(code, message, 502)


class LedgerNotConfiguredError(LedgerError):
    def __init__(self, missing: list[str]) -> None:
        super().__init__(f"Ledger not configured, missing: {', '.join(missing)}", 8002)


class AccountDecodeError(LedgerError):
    def __init__(self, account: str, detail: str) -> None:
        super().__init__(f"Cannot decode {account} account: {detail}", 8003)


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self) -> None:
        super().__init__(9001, "Rate limit exceeded", 429)
