"""Shared test fixtures for the pagechat test suite."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import aiosqlite
import pytest

from pagechat.cache import TTLCache
from pagechat.config import ResponderSettings
from pagechat.errors import PageChatError
from pagechat.extractor import Extractor
from pagechat.responder import Responder
from pagechat.store import DocumentStore

if TYPE_CHECKING:
    from pagechat.generator import PromptMessage
    from pagechat.models.document import ScrapedDocument

SAMPLE_URL = "https://example.com/about"

# Zones deliberately appear in reverse priority order in the document
SAMPLE_HTML = """\
<html>
  <head><title>About</title><style>body { color: red; }</style></head>
  <body>
    <ul><li>Bullet one.</li></ul>
    <p>A paragraph.</p>
    <div class="main">Main text body.</div>
    <h1>Intro heading.</h1>
    <script>console.log("noise");</script>
  </body>
</html>
"""

SAMPLE_CORPUS = "Intro heading. Main text body. A paragraph. Bullet one."


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self) -> None:
        self.now = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeFetcher:
    """In-memory FetcherProtocol that counts calls."""

    def __init__(self, pages: dict[str, str] | None = None) -> None:
        self.pages = pages if pages is not None else {SAMPLE_URL: SAMPLE_HTML}
        self.calls: list[str] = []
        self.error: PageChatError | None = None

    async def fetch(self, url: str) -> str:
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return self.pages[url]


class FakeGenerator:
    """GeneratorProtocol that records every prompt it receives."""

    def __init__(self, answer: str = f"It is an about page. [Source]({SAMPLE_URL})") -> None:
        self.answer = answer
        self.calls: list[list[PromptMessage]] = []
        self.error: PageChatError | None = None

    async def generate(self, messages: Sequence[PromptMessage]) -> str:
        self.calls.append(list(messages))
        if self.error is not None:
            raise self.error
        return self.answer


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
async def store() -> DocumentStore:
    """Document store over an in-memory SQLite database."""
    async with aiosqlite.connect(":memory:") as db:
        document_store = DocumentStore(db)
        await document_store.init_db()
        yield document_store


@pytest.fixture()
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture()
def generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture()
def extraction_cache(clock: FakeClock) -> TTLCache[ScrapedDocument]:
    return TTLCache("extraction", 300, clock=clock)


@pytest.fixture()
def response_cache(clock: FakeClock) -> TTLCache[str]:
    return TTLCache("response", 300, clock=clock)


@pytest.fixture()
def extractor(
    fetcher: FakeFetcher,
    store: DocumentStore,
    extraction_cache: TTLCache[ScrapedDocument],
) -> Extractor:
    return Extractor(fetcher=fetcher, store=store, cache=extraction_cache)


@pytest.fixture()
def responder(
    store: DocumentStore,
    generator: FakeGenerator,
    response_cache: TTLCache[str],
) -> Responder:
    return Responder(
        store=store,
        generator=generator,
        cache=response_cache,
        settings=ResponderSettings(),
    )


@pytest.fixture()
def sample_url() -> str:
    return SAMPLE_URL


@pytest.fixture()
def sample_html() -> str:
    return SAMPLE_HTML


@pytest.fixture()
def sample_corpus() -> str:
    return SAMPLE_CORPUS
