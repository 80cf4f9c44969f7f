"""Application state container.

AppState is the composition root: it is created once at startup (inside the
Starlette lifespan) and owns the shared HTTP client, the store, both TTL
caches and the two pipelines. Tests build their own instance with fresh
caches and fakes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx

    from pagechat.config import Settings
    from pagechat.extractor import Extractor
    from pagechat.responder import Responder


@dataclass
class AppState:
    """Holds all shared runtime state. Passed to every request handler."""

    settings: Settings
    extractor: Extractor
    responder: Responder
    http_client: httpx.AsyncClient | None = None
