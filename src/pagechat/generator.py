"""OpenAI-compatible generation client.

Wraps the async ``openai`` SDK behind a single ``generate`` call. Sampling
parameters come from GenerationSettings and are the same for every request.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

import openai
import structlog
from openai import AsyncOpenAI

from pagechat.errors import ErrorCode, PageChatError

if TYPE_CHECKING:
    from pagechat.config import GenerationSettings

log = structlog.get_logger()

PromptRole = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class PromptMessage:
    role: PromptRole
    content: str


def build_openai_client(settings: GenerationSettings) -> AsyncOpenAI:
    api_key = settings.api_key.get_secret_value() if settings.api_key else None
    return AsyncOpenAI(api_key=api_key, base_url=settings.base_url)


class Generator:
    """Chat-completions client implementing GeneratorProtocol.

    When no client is passed, one is built from settings on the first
    ``generate`` call, so a missing API key only affects chat requests.
    """

    def __init__(self, client: AsyncOpenAI | None, settings: GenerationSettings) -> None:
        self._client = client
        self._settings = settings

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            try:
                self._client = build_openai_client(self._settings)
            except openai.OpenAIError as exc:
                log.error("generation_client_unconfigured", error=str(exc))
                raise PageChatError(
                    code=ErrorCode.GENERATION_FAILED,
                    message=f"Generation client is not configured: {exc}",
                    suggestion="Set PAGECHAT__GENERATION__API_KEY or OPENAI_API_KEY.",
                    recoverable=False,
                ) from exc
        return self._client

    async def generate(self, messages: Sequence[PromptMessage]) -> str:
        """Return the completion text for ``messages``.

        Raises PageChatError(GENERATION_FAILED) on SDK errors, on a missing
        API key and on an empty completion.
        """
        client = self._get_client()
        payload = [{"role": m.role, "content": m.content} for m in messages]
        try:
            completion = await client.chat.completions.create(
                model=self._settings.model,
                messages=payload,
                temperature=self._settings.temperature,
                max_tokens=self._settings.max_tokens,
                presence_penalty=self._settings.presence_penalty,
                frequency_penalty=self._settings.frequency_penalty,
            )
        except openai.OpenAIError as exc:
            log.warning("generation_error", model=self._settings.model, error=str(exc))
            raise PageChatError(
                code=ErrorCode.GENERATION_FAILED,
                message=f"Generation request failed: {exc}",
                suggestion="The answer service is unavailable. Try asking again.",
                recoverable=True,
            ) from exc

        content = None
        if completion.choices:
            content = completion.choices[0].message.content
        if not content:
            log.warning("generation_empty", model=self._settings.model)
            raise PageChatError(
                code=ErrorCode.GENERATION_FAILED,
                message="Generation returned no content",
                suggestion="Try rephrasing the question.",
                recoverable=True,
            )

        log.info(
            "generation_complete",
            model=self._settings.model,
            message_count=len(payload),
            response_length=len(content),
        )
        return content
