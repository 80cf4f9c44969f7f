"""Request and response bodies for the HTTP API."""

from __future__ import annotations

from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator

from pagechat.models.conversation import ConversationMessage


def _validate_url(v: str) -> str:
    v = v.strip()
    if len(v) > 2048:
        raise ValueError("url must be at most 2048 characters")
    parsed = urlparse(v)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"url must be an absolute http(s) URL, got {v!r}")
    return v


class ScrapeRequest(BaseModel):
    url: str

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        return _validate_url(v)


class ChatRequest(BaseModel):
    message: str = Field(min_length=1)
    url: str
    history: list[ConversationMessage] = []

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        return _validate_url(v)

    @field_validator("message")
    @classmethod
    def validate_message(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("message must not be blank")
        return v


class ChatResponse(BaseModel):
    response: str
