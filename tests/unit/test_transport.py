"""Unit tests for the terminal transport."""

from __future__ import annotations

import io
import json
from typing import TYPE_CHECKING

import pytest

from pagechat.session import ChatController
from pagechat.transport import TERMINAL_HELP, handle_line

if TYPE_CHECKING:
    from pathlib import Path

    from conftest import FakeClock

    from pagechat.extractor import Extractor
    from pagechat.responder import Responder


@pytest.fixture()
def controller(extractor: Extractor, responder: Responder, clock: FakeClock) -> ChatController:
    return ChatController(extractor, responder, clock=clock)


async def test_url_command_prints_welcome(controller: ChatController, sample_url: str) -> None:
    out = io.StringIO()
    assert await handle_line(controller, f"/url {sample_url}", out) is True
    assert f"analyzed the content from {sample_url}" in out.getvalue()


async def test_question_prints_answer(controller: ChatController, sample_url: str) -> None:
    out = io.StringIO()
    await handle_line(controller, f"/url {sample_url}", out)
    await handle_line(controller, "What is this about?", out)
    assert f"[Source]({sample_url})" in out.getvalue().splitlines()[-1]


async def test_question_without_page_prints_error(controller: ChatController) -> None:
    out = io.StringIO()
    await handle_line(controller, "Hello?", out)
    assert out.getvalue().startswith("Error: No page has been analyzed yet")


async def test_quit_and_blank_lines(controller: ChatController) -> None:
    out = io.StringIO()
    assert await handle_line(controller, "   ", out) is True
    assert await handle_line(controller, "/quit", out) is False
    assert out.getvalue() == ""


async def test_help(controller: ChatController) -> None:
    out = io.StringIO()
    await handle_line(controller, "/help", out)
    assert out.getvalue().strip() == TERMINAL_HELP


async def test_export_writes_file(
    controller: ChatController,
    sample_url: str,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.chdir(tmp_path)
    out = io.StringIO()
    await handle_line(controller, f"/url {sample_url}", out)
    await handle_line(controller, "/export", out)

    exported = json.loads((tmp_path / "chat-export-2026-01-01-12-00.json").read_text())
    assert exported["url"] == sample_url
    assert len(exported["messages"]) == 1
