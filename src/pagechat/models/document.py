from __future__ import annotations

import uuid
from datetime import UTC, datetime

from pydantic import BaseModel, Field


class ScrapedDocument(BaseModel):
    """Extracted text corpus for one web page, keyed by its URL."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    url: str
    content: str  # Zone texts joined in priority order; may be empty
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
