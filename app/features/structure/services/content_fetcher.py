"""
Preview content fetching with per-URL request de-duplication.

One ``ContentFetcher`` is owned by the application (``app.state``) and shared
by every request in the process. It is not safe to share across threads: the
check-and-insert in ``fetch`` relies on running on a single event loop.
"""
import asyncio
from typing import Dict, Optional, Union

import httpx

from app.platform.exceptions import ContentFetchError
from app.platform.logger import get_logger

logger = get_logger(__name__)

STRUCTURE_ANALYSIS_HEADER = "X-A11y-Structure-Analysis"


class ContentFetcher:
    def __init__(
        self,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            follow_redirects=True,
            headers={STRUCTURE_ANALYSIS_HEADER: "1"},
        )
        # url -> resolved html, or the task still fetching it
        self._cache: Dict[str, Union[str, "asyncio.Task[str]"]] = {}

    async def fetch(self, url: str) -> str:
        """
        Return the content behind ``url``.

        A resolved entry is returned without network access. Concurrent callers
        for the same URL share one in-flight request. A failed request leaves no
        entry behind, so the next call retries.

        Raises:
            ValueError: If ``url`` is empty or not a string
            ContentFetchError: If the request fails or returns no text
        """
        if not url or not isinstance(url, str):
            raise ValueError("Invalid URL provided to ContentFetcher.fetch")

        cached = self._cache.get(url)
        if isinstance(cached, str):
            return cached

        if cached is None:
            # Stored before the first await so concurrent callers find it
            cached = asyncio.ensure_future(self._load(url))
            self._cache[url] = cached

        # shield: one caller going away must not cancel the fetch for the others
        return await asyncio.shield(cached)

    async def _load(self, url: str) -> str:
        task = asyncio.current_task()
        try:
            html = await self._request(url)
        except BaseException:
            # a failed or cancelled load never stays cached
            if self._cache.get(url) is task:
                del self._cache[url]
            raise

        # An invalidate() during the request wins over this result
        if self._cache.get(url) is task:
            self._cache[url] = html
        return html

    async def _request(self, url: str) -> str:
        try:
            response = await self._client.get(url)
            response.raise_for_status()
            html = response.text
            if not html or not isinstance(html, str):
                raise ValueError(f"Invalid response received for URL: {url}")
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            logger.error(f"Failed to fetch content from {url}: {e}")
            raise ContentFetchError(f"Failed to fetch content from {url}: {e}") from e
        return html

    def invalidate(self, url: str) -> None:
        """Drop any cached or pending entry for ``url``; the next fetch starts fresh."""
        self._cache.pop(url, None)

    def contains(self, url: str) -> bool:
        return url in self._cache

    def is_resolved(self, url: str) -> bool:
        return isinstance(self._cache.get(url), str)

    async def aclose(self) -> None:
        for entry in self._cache.values():
            if isinstance(entry, asyncio.Task) and not entry.done():
                entry.cancel()
        self._cache.clear()
        await self._client.aclose()
