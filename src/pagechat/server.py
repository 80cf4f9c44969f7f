"""HTTP API entrypoint.

Responsibilities (and nothing more):
- Configure structlog
- Build AppState (the composition root) inside the Starlette lifespan
- Register the API routes and translate error results into status codes
- Start the selected transport (HTTP or terminal)
"""

from __future__ import annotations

import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING, TypeVar

import aiosqlite
import pydantic
import structlog
from starlette.applications import Starlette
from starlette.responses import JSONResponse
from starlette.routing import Route

from pagechat import __version__
from pagechat.cache import TTLCache
from pagechat.config import Settings
from pagechat.errors import ErrorCode, PageChatError
from pagechat.extractor import Extractor
from pagechat.fetcher import Fetcher, build_http_client
from pagechat.generator import Generator
from pagechat.models.api import ChatRequest, ChatResponse, ScrapeRequest
from pagechat.models.document import ScrapedDocument
from pagechat.responder import Responder
from pagechat.result import Err
from pagechat.state import AppState
from pagechat.store import DocumentStore
from pagechat.transport import run_http_server, run_terminal

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from starlette.requests import Request

log = structlog.get_logger()

M = TypeVar("M", bound=pydantic.BaseModel)


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(settings: Settings) -> None:
    """Configure structlog. Called once at startup before any log statements."""
    log_level = logging.getLevelNamesMapping()[settings.logging.level]

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.logging.format == "json":
        processors = [*shared_processors, structlog.processors.JSONRenderer()]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        # Logs go to stderr; stdout belongs to the terminal transport
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Composition root
# ---------------------------------------------------------------------------


@asynccontextmanager
async def open_state(settings: Settings) -> AsyncGenerator[AppState, None]:
    """Create and tear down all shared resources for the process lifetime."""
    http_client = build_http_client(settings.fetcher)

    db_path = Path(settings.store.db_path).expanduser()
    db_path.parent.mkdir(parents=True, exist_ok=True)
    db = await aiosqlite.connect(str(db_path))
    store = DocumentStore(db)
    await store.init_db()

    extractor = Extractor(
        fetcher=Fetcher(http_client, settings.fetcher.timeout_seconds),
        store=store,
        cache=TTLCache[ScrapedDocument]("extraction", settings.cache.ttl_seconds),
    )
    responder = Responder(
        store=store,
        generator=Generator(None, settings.generation),
        cache=TTLCache[str]("response", settings.cache.ttl_seconds),
        settings=settings.responder,
        lookup_timeout_seconds=settings.store.lookup_timeout_seconds,
    )

    state = AppState(
        settings=settings,
        extractor=extractor,
        responder=responder,
        http_client=http_client,
    )
    log.info("state_ready", db_path=str(db_path), model=settings.generation.model)

    try:
        yield state
    finally:
        await http_client.aclose()
        await db.close()
        log.info("state_closed")


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


def _error_response(error: PageChatError) -> JSONResponse:
    return JSONResponse(error.to_dict(), status_code=error.status_code)


def _invalid_input(message: str) -> PageChatError:
    return PageChatError(
        code=ErrorCode.INVALID_INPUT,
        message=message,
        suggestion="Check the request body against the API schema.",
        recoverable=False,
    )


async def _parse_body(request: Request, model: type[M]) -> M:
    try:
        body = await request.json()
    except ValueError as exc:  # JSONDecodeError or UnicodeDecodeError
        raise _invalid_input(f"Request body is not valid JSON: {exc}") from exc
    try:
        return model.model_validate(body)
    except pydantic.ValidationError as exc:
        raise _invalid_input(str(exc)) from exc


async def scrape(request: Request) -> JSONResponse:
    """POST /api/scrape: extract a page and return the stored document."""
    state: AppState = request.app.state.pagechat
    try:
        payload = await _parse_body(request, ScrapeRequest)
        result = await state.extractor.extract(payload.url)
    except PageChatError as exc:
        log.warning("request_error", route="scrape", code=exc.code, message=exc.message)
        return _error_response(exc)
    except Exception:
        log.error("request_unexpected_error", route="scrape", exc_info=True)
        raise

    if isinstance(result, Err):
        return _error_response(result.error)
    return JSONResponse(result.value.model_dump(mode="json"))


async def chat(request: Request) -> JSONResponse:
    """POST /api/chat: answer a question about a previously scraped page."""
    state: AppState = request.app.state.pagechat
    try:
        payload = await _parse_body(request, ChatRequest)
        result = await state.responder.respond(payload.message, payload.url, payload.history)
    except PageChatError as exc:
        log.warning("request_error", route="chat", code=exc.code, message=exc.message)
        return _error_response(exc)
    except Exception:
        log.error("request_unexpected_error", route="chat", exc_info=True)
        raise

    if isinstance(result, Err):
        return _error_response(result.error)
    return JSONResponse(ChatResponse(response=result.value).model_dump())


async def health(request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok", "version": __version__})


def create_app(state: AppState | None = None, settings: Settings | None = None) -> Starlette:
    """Build the ASGI app.

    When ``state`` is given (tests), it is used as-is and the lifespan does not
    open any resources.
    """

    @asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncGenerator[None, None]:
        if state is not None:
            yield
            return
        async with open_state(settings or Settings()) as opened:
            app.state.pagechat = opened
            yield

    app = Starlette(
        routes=[
            Route("/api/scrape", scrape, methods=["POST"]),
            Route("/api/chat", chat, methods=["POST"]),
            Route("/health", health, methods=["GET"]),
        ],
        lifespan=lifespan,
    )
    if state is not None:
        app.state.pagechat = state
    return app


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


async def _run_terminal(settings: Settings) -> None:
    async with open_state(settings) as state:
        await run_terminal(state)


def main() -> None:
    settings = Settings()
    _setup_logging(settings)
    log.info("server_starting", version=__version__, transport=settings.server.transport)

    if settings.server.transport == "terminal":
        asyncio.run(_run_terminal(settings))
        return

    run_http_server(create_app(settings=settings), settings)


if __name__ == "__main__":
    main()
