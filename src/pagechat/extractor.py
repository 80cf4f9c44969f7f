"""Page extraction pipeline.

URL -> ScrapedDocument, in this order: TTL cache, document store, network
fetch. A URL that is already stored is never fetched again, so one URL maps
to one corpus for the lifetime of the store. The store insert happens only
after a successful fetch and parse.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from pagechat.errors import PageChatError
from pagechat.parser import extract_corpus, parse_markup
from pagechat.result import Err, Ok

if TYPE_CHECKING:
    from pagechat.cache import TTLCache
    from pagechat.models.document import ScrapedDocument
    from pagechat.protocols import FetcherProtocol, StoreProtocol
    from pagechat.result import Result


class Extractor:
    def __init__(
        self,
        fetcher: FetcherProtocol,
        store: StoreProtocol,
        cache: TTLCache[ScrapedDocument],
    ) -> None:
        self._fetcher = fetcher
        self._store = store
        self._cache = cache

    async def extract(self, url: str) -> Result[ScrapedDocument]:
        """Return the corpus for ``url`` as ``Ok(document)`` or ``Err(error)``."""
        try:
            return Ok(await self._extract(url))
        except PageChatError as exc:
            structlog.get_logger().warning(
                "extract_failed",
                url=url,
                code=exc.code,
                message=exc.message,
                recoverable=exc.recoverable,
            )
            return Err(exc)

    async def _extract(self, url: str) -> ScrapedDocument:
        log = structlog.get_logger().bind(pipeline="extract", url=url)

        cached = self._cache.get(url)
        if cached is not None:
            log.info("cache_hit")
            return cached

        existing = await self._store.get(url)
        if existing is not None:
            log.info("store_hit", document_id=existing.id)
            self._cache.set(url, existing)
            return existing

        log.info("cache_miss_fetching")
        markup = await self._fetcher.fetch(url)
        soup = parse_markup(markup, url)
        content = await extract_corpus(soup)
        if not content:
            log.info("extract_empty_corpus")

        document = await self._store.insert(url, content)
        self._cache.set(url, document)
        log.info("extract_complete", document_id=document.id, content_length=len(content))
        return document
