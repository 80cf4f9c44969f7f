"""HTML zone parser.

Reduces a page to four text zones: headings, main-content containers,
paragraphs and list items. Noise elements are removed before any text is
read. Each zone is queried independently, so the zones may be extracted
concurrently over the same parsed tree.
"""

from __future__ import annotations

import asyncio
import re

import structlog
from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

from pagechat.errors import ErrorCode, PageChatError

log = structlog.get_logger()

NOISE_SELECTOR = "script, style, noscript, iframe, img"

MAIN_CONTENT_SELECTOR = "main, article, .content, .main"
HEADING_SELECTOR = "h1, h2, h3, h4, h5, h6"
PARAGRAPH_SELECTOR = "p"
LIST_ITEM_SELECTOR = "ul li, ol li"

# Corpus order. Truncation downstream keeps the head, so earlier zones win.
ZONE_ORDER: tuple[str, ...] = (
    HEADING_SELECTOR,
    MAIN_CONTENT_SELECTOR,
    PARAGRAPH_SELECTOR,
    LIST_ITEM_SELECTOR,
)

_WHITESPACE_RE = re.compile(r"\s+")


def clean_text(text: str) -> str:
    """Collapse whitespace runs (newlines included) to one space and trim."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def parse_markup(markup: str, url: str = "") -> BeautifulSoup:
    """Parse markup and strip elements that never carry readable text.

    Raises PageChatError(PARSE_FAILED) if the parser rejects the markup.
    """
    try:
        soup = BeautifulSoup(markup, "html.parser")
    except ParserRejectedMarkup as exc:
        log.warning("parse_rejected", url=url, error=str(exc))
        raise PageChatError(
            code=ErrorCode.PARSE_FAILED,
            message=f"Could not parse markup from {url}: {exc}",
            suggestion="The page does not look like HTML. Try a different URL.",
            recoverable=False,
        ) from exc

    for element in soup.select(NOISE_SELECTOR):
        element.extract()
    return soup


def extract_zone(soup: BeautifulSoup, selector: str) -> list[str]:
    """Return the cleaned, non-empty text of every element matching ``selector``."""
    texts = (clean_text(element.get_text()) for element in soup.select(selector))
    return [text for text in texts if text]


async def extract_corpus(soup: BeautifulSoup) -> str:
    """Extract all zones concurrently and join them in ``ZONE_ORDER``.

    Waits for every zone; the first failure propagates.
    """
    zones = await asyncio.gather(
        *(asyncio.to_thread(extract_zone, soup, selector) for selector in ZONE_ORDER)
    )
    return " ".join(text for zone in zones for text in zone)
