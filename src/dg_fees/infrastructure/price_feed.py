"""SolPriceFeed — SOL/USD spot price from a CoinGecko-style endpoint.

Expects ``{"solana": {"usd": <price>}}``. Anything else, a non-2xx status
or a non-positive price is a PriceFeedError.
"""

import logging
from typing import Any

import httpx

from config.settings import settings
from src.dg_common.errors import PriceFeedError

logger = logging.getLogger(__name__)

_HTTP_BAD_REQUEST = 400


class SolPriceFeed:
    def __init__(
        self,
        url: str | None = None,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url or settings.SOL_PRICE_URL
        self._timeout = timeout_seconds or settings.SOL_PRICE_TIMEOUT_SECONDS
        self._transport = transport

    async def sol_usd(self) -> float:
        async with httpx.AsyncClient(
            timeout=self._timeout,
            headers={"User-Agent": settings.FETCH_USER_AGENT},
            transport=self._transport,
        ) as client:
            try:
                response = await client.get(self._url)
            except httpx.HTTPError as e:
                raise PriceFeedError(f"request failed: {e}") from e

        if response.status_code >= _HTTP_BAD_REQUEST:
            raise PriceFeedError(f"HTTP {response.status_code}")
        try:
            data: Any = response.json()
            price = float(data["solana"]["usd"])
        except (ValueError, KeyError, TypeError) as e:
            raise PriceFeedError(f"unexpected response: {e!r}") from e
        if not price > 0:
            raise PriceFeedError(f"non-positive price {price}")

        logger.debug("SOL/USD %.4f", price)
        return price
