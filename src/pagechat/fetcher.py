"""HTTP page fetcher.

All network I/O for page extraction goes through a single Fetcher instance.
The Fetcher receives an httpx.AsyncClient via constructor injection; the
lifespan owns the client lifecycle.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import httpx
import structlog

from pagechat.errors import ErrorCode, PageChatError

if TYPE_CHECKING:
    from pagechat.config import FetcherSettings

log = structlog.get_logger()


def build_http_client(settings: FetcherSettings) -> httpx.AsyncClient:
    """Create the shared httpx client. Called once at startup."""
    return httpx.AsyncClient(
        follow_redirects=True,
        max_redirects=settings.max_redirects,
        timeout=httpx.Timeout(settings.timeout_seconds),
        # Identify automated fetches honestly
        headers={"User-Agent": settings.user_agent},
        limits=httpx.Limits(
            max_connections=10,
            max_keepalive_connections=5,
        ),
    )


class Fetcher:
    """Fetches raw page markup with a hard overall deadline."""

    def __init__(self, client: httpx.AsyncClient, timeout_seconds: float = 10.0) -> None:
        self._client = client
        self._timeout_seconds = timeout_seconds

    async def fetch(self, url: str) -> str:
        """Fetch a URL and return the decoded response body.

        Raises PageChatError(FETCH_FAILED) on timeout, network errors and
        non-2xx responses.
        """
        try:
            async with asyncio.timeout(self._timeout_seconds):
                response = await self._client.get(url)
        except (TimeoutError, httpx.TimeoutException) as exc:
            log.warning("fetch_timeout", url=url, timeout=self._timeout_seconds)
            raise PageChatError(
                code=ErrorCode.FETCH_FAILED,
                message=f"Timed out after {self._timeout_seconds:g}s fetching {url}",
                suggestion="The site is slow or unreachable. Try again later.",
                recoverable=True,
            ) from exc
        except httpx.HTTPError as exc:
            log.warning("fetch_network_error", url=url, error=str(exc))
            raise PageChatError(
                code=ErrorCode.FETCH_FAILED,
                message=f"Network error fetching {url}: {exc}",
                suggestion="Check the URL and your connection, then try again.",
                recoverable=True,
            ) from exc

        if not response.is_success:
            log.warning("fetch_bad_status", url=url, status_code=response.status_code)
            raise PageChatError(
                code=ErrorCode.FETCH_FAILED,
                message=f"HTTP {response.status_code} fetching {url}",
                suggestion="Failed to scrape content. Please check the URL and try again.",
                recoverable=response.status_code >= 500,
            )

        log.info(
            "fetch_complete",
            url=url,
            status_code=response.status_code,
            content_length=len(response.text),
        )
        return response.text
