from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, Field

Role = Literal["user", "assistant"]


class ConversationMessage(BaseModel):
    """One turn of the dialogue transcript for the active URL.

    ``role`` is a closed set; anything other than ``user`` or ``assistant``
    fails validation instead of being forwarded to the generation engine.
    """

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    role: Role
    content: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class ChatSession(BaseModel):
    """Transcript bound to the URL currently under discussion."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    url: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    messages: list[ConversationMessage] = []


class VisitedUrl(BaseModel):
    url: str
    date: datetime
