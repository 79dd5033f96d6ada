"""Tests for dg_common.errors and dg_common.response."""

from src.dg_common.errors import (
    AdminAuthError,
    AppError,
    ChallengePeriodActiveError,
    FetchHttpError,
    FetchTimeoutError,
    InputValidationError,
    InvalidMarketIdError,
    InvalidWalletError,
    LedgerError,
    LedgerNotConfiguredError,
    MarketNotFoundError,
    MarketNotReadyError,
    PriceFeedError,
    RateLimitError,
)
from src.dg_common.response import ApiResponse, error_response, success_response


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500

    def test_is_exception(self) -> None:
        assert isinstance(AppError(code=1, message="x"), Exception)


class TestSpecificErrors:
    def test_validation_errors_are_400(self) -> None:
        wallet = InvalidWalletError("nope")
        market = InvalidMarketIdError("-1")
        assert isinstance(wallet, InputValidationError)
        assert (wallet.code, wallet.http_status) == (1001, 400)
        assert (market.code, market.http_status) == (1002, 400)

    def test_admin_auth(self) -> None:
        err = AdminAuthError()
        assert err.code == 2001
        assert err.http_status == 401

    def test_market_not_found(self) -> None:
        err = MarketNotFoundError(42)
        assert err.code == 3001
        assert err.http_status == 404
        assert "42" in err.message

    def test_market_not_ready(self) -> None:
        assert "30s remaining" in MarketNotReadyError(1, 30).message

    def test_challenge_period(self) -> None:
        err = ChallengePeriodActiveError(1_700_086_400)
        assert err.code == 5003
        assert "1700086400" in err.message

    def test_fetch_errors(self) -> None:
        http = FetchHttpError(500, "https://x")
        assert http.status == 500
        assert http.message == "HTTP 500 fetching https://x"
        price = PriceFeedError("HTTP 429")
        assert (price.code, price.http_status) == (6004, 502)
        assert price.message == "SOL price unavailable: HTTP 429"
        assert FetchTimeoutError("https://x").code == 6002

    def test_ledger_not_configured(self) -> None:
        err = LedgerNotConfiguredError(["PROGRAM_ID", "AUTHORITY_PRIVATE_KEY"])
        assert isinstance(err, LedgerError)
        assert err.code == 8002
        assert "PROGRAM_ID, AUTHORITY_PRIVATE_KEY" in err.message

    def test_rate_limit(self) -> None:
        assert RateLimitError().http_status == 429


class TestApiResponse:
    def test_success(self) -> None:
        resp = success_response({"market_id": 7})
        assert resp.code == 0
        assert resp.message == "success"
        assert resp.data == {"market_id": 7}
        assert resp.request_id.startswith("req_")

    def test_error(self) -> None:
        resp = error_response(3001, "Market not found: 7")
        assert resp.code == 3001
        assert resp.data is None

    def test_serialization(self) -> None:
        dumped = ApiResponse(data={"amount": 4}).model_dump()
        assert set(dumped) == {"code", "message", "data", "timestamp", "request_id"}
