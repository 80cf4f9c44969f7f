"""Grounded answer pipeline.

(question, URL, history) -> answer text. The stored corpus is truncated to a
fixed character budget and embedded in a system prompt that demands a
markdown citation link to the URL. Citation presence is left to the
generation engine; the returned text is not checked.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

import pydantic
import structlog

from pagechat.errors import ErrorCode, PageChatError
from pagechat.generator import PromptMessage
from pagechat.models.conversation import ConversationMessage
from pagechat.result import Err, Ok

if TYPE_CHECKING:
    from pagechat.cache import TTLCache
    from pagechat.config import ResponderSettings
    from pagechat.models.document import ScrapedDocument
    from pagechat.protocols import GeneratorProtocol, StoreProtocol
    from pagechat.result import Result

SYSTEM_PROMPT_TEMPLATE = """\
You are a helpful assistant analyzing content from {url}.
Use the following scraped content to answer questions.
Always include a source reference at the end of your response using markdown link syntax.
Format your response like this: "Your detailed answer... [Source]({url})"
Content to analyze:
{excerpt}"""

EMPTY_CORPUS_EXCERPT = "(No readable text was extracted from this page.)"


def response_cache_key(url: str, question: str, history: Sequence[Any]) -> str:
    """Fingerprint of a chat request.

    Only the history length participates: two different histories of the same
    length share a key within the TTL window.
    """
    return f"{url}:{question}:{len(history)}"


def coerce_history(
    history: Sequence[ConversationMessage | Mapping[str, Any]],
) -> list[ConversationMessage]:
    """Validate raw history items against the closed role set."""
    messages: list[ConversationMessage] = []
    for index, item in enumerate(history):
        if isinstance(item, ConversationMessage):
            messages.append(item)
            continue
        try:
            messages.append(ConversationMessage.model_validate(item))
        except pydantic.ValidationError as exc:
            structlog.get_logger().warning("history_invalid", index=index, error=str(exc))
            raise PageChatError(
                code=ErrorCode.INVALID_INPUT,
                message=f"Invalid history message at index {index}: {exc}",
                suggestion="Each history message needs role 'user' or 'assistant' and content.",
                recoverable=False,
            ) from exc
    return messages


def build_messages(
    question: str,
    url: str,
    corpus: str,
    history: Sequence[ConversationMessage],
    context_chars: int,
) -> list[PromptMessage]:
    """Assemble system prompt, prior turns in order, then the new question."""
    excerpt = corpus[:context_chars] or EMPTY_CORPUS_EXCERPT
    messages = [
        PromptMessage(
            role="system",
            content=SYSTEM_PROMPT_TEMPLATE.format(url=url, excerpt=excerpt),
        )
    ]
    messages.extend(PromptMessage(role=m.role, content=m.content) for m in history)
    messages.append(PromptMessage(role="user", content=question))
    return messages


class Responder:
    def __init__(
        self,
        store: StoreProtocol,
        generator: GeneratorProtocol,
        cache: TTLCache[str],
        settings: ResponderSettings,
        *,
        lookup_timeout_seconds: float = 5.0,
    ) -> None:
        self._store = store
        self._generator = generator
        self._cache = cache
        self._settings = settings
        self._lookup_timeout_seconds = lookup_timeout_seconds

    async def respond(
        self,
        question: str,
        url: str,
        history: Sequence[ConversationMessage | Mapping[str, Any]],
    ) -> Result[str]:
        """Return ``Ok(answer)`` or ``Err(error)``. Failures leave no cache entry."""
        try:
            return Ok(await self._respond(question, url, history))
        except PageChatError as exc:
            structlog.get_logger().warning(
                "respond_failed",
                url=url,
                code=exc.code,
                message=exc.message,
                recoverable=exc.recoverable,
            )
            return Err(exc)

    async def _respond(
        self,
        question: str,
        url: str,
        history: Sequence[ConversationMessage | Mapping[str, Any]],
    ) -> str:
        log = structlog.get_logger().bind(pipeline="respond", url=url)
        messages_history = coerce_history(history)

        key = response_cache_key(url, question, messages_history)
        cached = self._cache.get(key)
        if cached is not None:
            log.info("cache_hit")
            return cached

        document = await self._lookup(url)
        messages = build_messages(
            question,
            url,
            document.content,
            messages_history,
            self._settings.context_chars,
        )
        log.info(
            "generation_requested",
            history_length=len(messages_history),
            corpus_length=len(document.content),
        )
        answer = await self._generator.generate(messages)

        self._cache.set(key, answer)
        return answer

    async def _lookup(self, url: str) -> ScrapedDocument:
        try:
            document = await asyncio.wait_for(
                self._store.get(url), timeout=self._lookup_timeout_seconds
            )
        except TimeoutError as exc:
            structlog.get_logger().warning(
                "store_lookup_timeout", url=url, timeout=self._lookup_timeout_seconds
            )
            raise PageChatError(
                code=ErrorCode.TIMEOUT,
                message=f"Looking up content for {url} took longer than "
                f"{self._lookup_timeout_seconds:g}s",
                suggestion="The document store is slow. Try again shortly.",
                recoverable=True,
            ) from exc

        if document is None:
            structlog.get_logger().warning("corpus_not_found", url=url)
            raise PageChatError(
                code=ErrorCode.NOT_FOUND,
                message=f"No scraped content found for {url}",
                suggestion="Submit the URL for scraping before asking questions about it.",
                recoverable=False,
            )
        return document
