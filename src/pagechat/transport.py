"""Transports: the HTTP API under uvicorn, and an interactive terminal chat."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

import structlog
import uvicorn

from pagechat.result import Err
from pagechat.session import ChatController

if TYPE_CHECKING:
    from starlette.types import ASGIApp

    from pagechat.config import Settings
    from pagechat.state import AppState

log = structlog.get_logger()

TERMINAL_HELP = """\
Commands:
  /url <address>   analyze a new page (starts a new conversation)
  /export          save the conversation as JSON in the current directory
  /quit            exit
Anything else is sent as a question about the current page."""


def run_http_server(app: ASGIApp, settings: Settings) -> None:
    """Serve the HTTP API with uvicorn."""
    log.bind(transport="http").info(
        "http_server_starting", host=settings.server.host, port=settings.server.port
    )
    uvicorn.run(
        app,
        host=settings.server.host,
        port=settings.server.port,
        log_config=None,  # Disable uvicorn's default logging; structlog handles it
    )


async def handle_line(controller: ChatController, line: str, out: TextIO) -> bool:
    """Process one line of terminal input. Returns False when the user quits."""
    line = line.strip()
    if not line:
        return True

    if line in ("/quit", "/exit"):
        return False

    if line == "/help":
        print(TERMINAL_HELP, file=out)
        return True

    if line == "/export":
        path = Path(controller.export_filename())
        path.write_text(json.dumps(controller.export(), indent=2), encoding="utf-8")
        print(f"Saved {path}", file=out)
        return True

    if line.startswith("/url "):
        result = await controller.submit_url(line.removeprefix("/url ").strip())
        if isinstance(result, Err):
            print(f"Error: {result.error.message}", file=out)
        else:
            print(controller.messages[-1].content, file=out)
        return True

    result = await controller.ask(line)
    if isinstance(result, Err):
        print(f"Error: {result.error.message}", file=out)
    else:
        print(result.value, file=out)
    return True


async def run_terminal(state: AppState, out: TextIO | None = None) -> None:
    """Read questions from stdin until EOF or /quit."""
    out = out or sys.stdout
    controller = ChatController(state.extractor, state.responder)
    print(TERMINAL_HELP, file=out)

    while True:
        try:
            line = await asyncio.to_thread(input, "> ")
        except EOFError:
            break
        if not await handle_line(controller, line, out):
            break
