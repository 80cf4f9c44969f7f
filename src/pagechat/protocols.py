"""Protocol interfaces for swappable components.

The extractor, responder and API layer reference these protocols, not the
concrete implementations. Tests use lightweight in-memory fakes, most
notably for the generation engine.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from pagechat.generator import PromptMessage
    from pagechat.models.document import ScrapedDocument


class StoreProtocol(Protocol):
    """Keyed document collection for extracted corpora."""

    async def get(self, url: str) -> ScrapedDocument | None: ...

    async def insert(self, url: str, content: str) -> ScrapedDocument: ...


class FetcherProtocol(Protocol):
    """Interface for the HTTP page fetcher."""

    async def fetch(self, url: str) -> str: ...


class GeneratorProtocol(Protocol):
    """Black-box text completion over an ordered message list."""

    async def generate(self, messages: Sequence[PromptMessage]) -> str: ...
