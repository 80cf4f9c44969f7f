"""Unit tests for pagechat.cache."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pagechat.cache import TTLCache

if TYPE_CHECKING:
    from conftest import FakeClock


class TestTTLCache:
    def test_miss_returns_none(self, clock: FakeClock) -> None:
        cache: TTLCache[str] = TTLCache("test", 300, clock=clock)
        assert cache.get("missing") is None

    def test_set_and_get(self, clock: FakeClock) -> None:
        cache: TTLCache[str] = TTLCache("test", 300, clock=clock)
        cache.set("k", "value")
        assert cache.get("k") == "value"
        assert len(cache) == 1

    def test_served_just_before_ttl(self, clock: FakeClock) -> None:
        cache: TTLCache[str] = TTLCache("test", 300, clock=clock)
        cache.set("k", "value")
        clock.advance(299)
        assert cache.get("k") == "value"

    def test_absent_just_after_ttl(self, clock: FakeClock) -> None:
        cache: TTLCache[str] = TTLCache("test", 300, clock=clock)
        cache.set("k", "value")
        clock.advance(301)
        assert cache.get("k") is None

    def test_absent_exactly_at_ttl(self, clock: FakeClock) -> None:
        cache: TTLCache[str] = TTLCache("test", 300, clock=clock)
        cache.set("k", "value")
        clock.advance(300)
        assert cache.get("k") is None

    def test_expired_entry_is_not_evicted(self, clock: FakeClock) -> None:
        cache: TTLCache[str] = TTLCache("test", 300, clock=clock)
        cache.set("k", "value")
        clock.advance(600)
        assert cache.get("k") is None
        assert len(cache) == 1

    def test_reinsert_after_expiry_restarts_ttl(self, clock: FakeClock) -> None:
        cache: TTLCache[str] = TTLCache("test", 300, clock=clock)
        cache.set("k", "old")
        clock.advance(301)
        cache.set("k", "new")
        clock.advance(299)
        assert cache.get("k") == "new"

    def test_instances_are_isolated(self, clock: FakeClock) -> None:
        first: TTLCache[str] = TTLCache("first", 300, clock=clock)
        second: TTLCache[str] = TTLCache("second", 300, clock=clock)
        first.set("k", "value")
        assert second.get("k") is None

    def test_default_clock_serves_fresh_entry(self) -> None:
        cache: TTLCache[int] = TTLCache("test", 300)
        cache.set("k", 42)
        assert cache.get("k") == 42
