"""SourceFetcher — pulls a market's resolution source over HTTP.

Limits (all from settings):
  - one redirect hop at most; a second redirect is a FetchError
  - FETCH_TIMEOUT_SECONDS for the whole exchange, redirect included
  - stop reading after FETCH_MAX_BYTES; the truncated body is returned

Errors:
  status >= 400     → FetchHttpError (message "HTTP <status> fetching <url>")
  timeout           → FetchTimeoutError
  any other failure → FetchError
"""

import asyncio
import logging

import httpx

from config.settings import settings
from src.dg_common.errors import FetchError, FetchHttpError, FetchTimeoutError

logger = logging.getLogger(__name__)


class SourceFetcher:
    def __init__(
        self,
        timeout_seconds: float | None = None,
        max_bytes: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = timeout_seconds or settings.FETCH_TIMEOUT_SECONDS
        self._max_bytes = max_bytes or settings.FETCH_MAX_BYTES
        # Tests inject httpx.MockTransport here
        self._transport = transport

    async def fetch_text(self, url: str) -> str:
        """Return the (possibly truncated) body of ``url`` decoded as text."""
        async with httpx.AsyncClient(
            timeout=self._timeout,
            follow_redirects=False,
            headers={"User-Agent": settings.FETCH_USER_AGENT},
            transport=self._transport,
        ) as client:
            try:
                async with asyncio.timeout(self._timeout):
                    return await self._get(client, url, redirects_left=1)
            except (TimeoutError, httpx.TimeoutException):
                raise FetchTimeoutError(url) from None
            except httpx.InvalidURL as e:
                raise FetchError(f"Invalid URL {url}: {e}") from e
            except httpx.HTTPError as e:
                raise FetchError(f"Network error fetching {url}: {e}") from e

    async def _get(self, client: httpx.AsyncClient, url: str, redirects_left: int) -> str:
        next_url: str | None = None
        async with client.stream("GET", url) as resp:
            if resp.is_redirect:
                if redirects_left <= 0:
                    raise FetchError(f"Too many redirects fetching {url}")
                next_url = str(resp.url.join(resp.headers["location"]))
            elif resp.status_code >= 400:
                raise FetchHttpError(resp.status_code, url)
            else:
                body = await self._read_capped(resp)
                return _decode(body, resp.charset_encoding)

        logger.debug("Following redirect %s -> %s", url, next_url)
        return await self._get(client, next_url, redirects_left - 1)

    async def _read_capped(self, resp: httpx.Response) -> bytes:
        buf = bytearray()
        async for chunk in resp.aiter_bytes():
            buf.extend(chunk)
            if len(buf) >= self._max_bytes:
                logger.debug("Source body capped at %d bytes: %s", self._max_bytes, resp.url)
                break
        return bytes(buf[: self._max_bytes])


def _decode(body: bytes, charset: str | None) -> str:
    try:
        return body.decode(charset or "utf-8", errors="replace")
    except LookupError:
        # Unknown charset label from the server
        return body.decode("utf-8", errors="replace")
