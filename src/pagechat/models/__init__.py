from __future__ import annotations

from pagechat.models.api import ChatRequest, ChatResponse, ScrapeRequest
from pagechat.models.cache import CacheEntry
from pagechat.models.conversation import ChatSession, ConversationMessage, Role, VisitedUrl
from pagechat.models.document import ScrapedDocument

__all__ = [
    # storage
    "ScrapedDocument",
    "CacheEntry",
    # conversation
    "Role",
    "ConversationMessage",
    "ChatSession",
    "VisitedUrl",
    # api
    "ScrapeRequest",
    "ChatRequest",
    "ChatResponse",
]
