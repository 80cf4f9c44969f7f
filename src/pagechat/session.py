"""Conversation state for one user.

ChatController keeps the transcript for the URL under discussion and drives
the extractor and responder. Submitting a new URL discards the transcript
wholesale; asking a question appends the user turn, and the assistant turn
only when the responder succeeds.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog

from pagechat.errors import ErrorCode, PageChatError
from pagechat.models.conversation import ChatSession, ConversationMessage, VisitedUrl
from pagechat.result import Err, Ok

if TYPE_CHECKING:
    from pagechat.cache import Clock
    from pagechat.extractor import Extractor
    from pagechat.models.document import ScrapedDocument
    from pagechat.responder import Responder
    from pagechat.result import Result

log = structlog.get_logger()

WELCOME_TEMPLATE = (
    "I've successfully analyzed the content from {url}. "
    "Feel free to ask me any questions about it! [Source]({url})"
)

EXPORT_FILENAME_FORMAT = "chat-export-%Y-%m-%d-%H-%M.json"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ChatController:
    def __init__(
        self,
        extractor: Extractor,
        responder: Responder,
        *,
        clock: Clock = _utcnow,
    ) -> None:
        self._extractor = extractor
        self._responder = responder
        self._clock = clock
        self.session: ChatSession | None = None
        self.visited: list[VisitedUrl] = []

    @property
    def messages(self) -> list[ConversationMessage]:
        return list(self.session.messages) if self.session is not None else []

    async def submit_url(self, url: str) -> Result[ScrapedDocument]:
        """Extract ``url`` and start a fresh transcript for it on success.

        On failure the current session is left untouched.
        """
        result = await self._extractor.extract(url)
        if isinstance(result, Err):
            return result

        now = self._clock()
        self.session = ChatSession(
            url=url,
            created_at=now,
            messages=[
                ConversationMessage(
                    role="assistant",
                    content=WELCOME_TEMPLATE.format(url=url),
                    created_at=now,
                )
            ],
        )
        self.visited.append(VisitedUrl(url=url, date=now))
        log.info("session_started", url=url, session_id=self.session.id)
        return result

    async def ask(self, question: str) -> Result[str]:
        if self.session is None:
            log.warning("ask_without_session")
            return Err(
                PageChatError(
                    code=ErrorCode.INVALID_INPUT,
                    message="No page has been analyzed yet",
                    suggestion="Submit a URL before asking questions.",
                    recoverable=False,
                )
            )

        history = list(self.session.messages)
        self.session.messages.append(
            ConversationMessage(role="user", content=question, created_at=self._clock())
        )

        result = await self._responder.respond(question, self.session.url, history)
        if isinstance(result, Ok):
            self.session.messages.append(
                ConversationMessage(
                    role="assistant", content=result.value, created_at=self._clock()
                )
            )
        return result

    def export(self) -> dict[str, Any]:
        """Transcript as a JSON-ready dict."""
        return {
            "url": self.session.url if self.session is not None else None,
            "messages": [m.model_dump(mode="json") for m in self.messages],
            "exportDate": self._clock().isoformat(),
        }

    def export_filename(self) -> str:
        return self._clock().strftime(EXPORT_FILENAME_FORMAT)
