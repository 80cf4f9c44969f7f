"""Integration test fixtures.

Provides a fully wired AppState: real httpx-based Fetcher (mocked with respx
in the tests), in-memory SQLite store, fresh TTL caches driven by a fake
clock, and a fake generation engine. Shared fakes come from tests/conftest.py.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from pagechat.cache import TTLCache
from pagechat.config import Settings
from pagechat.extractor import Extractor
from pagechat.fetcher import Fetcher, build_http_client
from pagechat.responder import Responder
from pagechat.state import AppState

if TYPE_CHECKING:
    from pagechat.store import DocumentStore


@pytest.fixture()
async def app_state(store: DocumentStore, generator, clock) -> AppState:
    """Full AppState wired for integration tests."""
    settings = Settings()
    async with build_http_client(settings.fetcher) as client:
        extractor = Extractor(
            fetcher=Fetcher(client, settings.fetcher.timeout_seconds),
            store=store,
            cache=TTLCache("extraction", settings.cache.ttl_seconds, clock=clock),
        )
        responder = Responder(
            store=store,
            generator=generator,
            cache=TTLCache("response", settings.cache.ttl_seconds, clock=clock),
            settings=settings.responder,
            lookup_timeout_seconds=settings.store.lookup_timeout_seconds,
        )
        yield AppState(
            settings=settings,
            extractor=extractor,
            responder=responder,
            http_client=client,
        )
