"""SQLite document store for extracted corpora.

Unlike the TTL caches, store failures are never swallowed: every
``aiosqlite.Error`` is logged and re-raised as ``STORE_FAILED`` so the caller
knows the corpus was not read or persisted.

The ``url`` column is UNIQUE. ``insert`` is a plain INSERT; when a concurrent
extraction of the same URL has already inserted a row, the constraint
violation is resolved by returning that row, so every caller converges on one
stored document per URL.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

import aiosqlite
import structlog

from pagechat.errors import ErrorCode, PageChatError
from pagechat.models.document import ScrapedDocument

log = structlog.get_logger()

_CREATE_DOCUMENT_TABLE = """
CREATE TABLE IF NOT EXISTS scraped_content (
    id         TEXT PRIMARY KEY,
    url        TEXT NOT NULL UNIQUE,
    content    TEXT NOT NULL,
    created_at TEXT NOT NULL
)
"""


def _store_error(action: str, url: str, exc: Exception) -> PageChatError:
    return PageChatError(
        code=ErrorCode.STORE_FAILED,
        message=f"Document store {action} failed for {url}: {exc}",
        suggestion="The document store is unavailable. Try again shortly.",
        recoverable=True,
    )


class DocumentStore:
    """SQLite-backed document collection implementing StoreProtocol."""

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def init_db(self) -> None:
        """Create tables and set WAL mode. Called once at startup."""
        await self._db.execute("PRAGMA journal_mode = WAL")
        await self._db.execute(_CREATE_DOCUMENT_TABLE)
        await self._db.commit()

    async def get(self, url: str) -> ScrapedDocument | None:
        """Look up the stored document for ``url``. Returns ``None`` if absent."""
        try:
            cursor = await self._db.execute(
                "SELECT id, url, content, created_at FROM scraped_content WHERE url = ?",
                (url,),
            )
            row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            log.warning("store_read_error", url=url, exc_info=True)
            raise _store_error("lookup", url, exc) from exc

        if row is None:
            return None
        return ScrapedDocument(
            id=row[0],
            url=row[1],
            content=row[2],
            created_at=datetime.fromisoformat(row[3]),
        )

    async def insert(self, url: str, content: str) -> ScrapedDocument:
        """Insert a new document and return it as stored."""
        document = ScrapedDocument(
            id=uuid.uuid4().hex,
            url=url,
            content=content,
            created_at=datetime.now(UTC),
        )
        try:
            await self._db.execute(
                "INSERT INTO scraped_content (id, url, content, created_at) VALUES (?, ?, ?, ?)",
                (document.id, document.url, document.content, document.created_at.isoformat()),
            )
            await self._db.commit()
        except aiosqlite.IntegrityError:
            # Another extraction of the same URL won the insert
            try:
                await self._db.rollback()
            except aiosqlite.Error as exc:
                log.warning("store_rollback_error", url=url, exc_info=True)
                raise _store_error("insert", url, exc) from exc
            existing = await self.get(url)
            if existing is None:
                log.warning("store_insert_conflict_missing", url=url)
                raise _store_error("insert", url, RuntimeError("conflicting row vanished"))
            log.info("store_insert_conflict", url=url, document_id=existing.id)
            return existing
        except aiosqlite.Error as exc:
            log.warning("store_write_error", url=url, exc_info=True)
            raise _store_error("insert", url, exc) from exc

        log.info("store_insert", url=url, document_id=document.id, content_length=len(content))
        return document
