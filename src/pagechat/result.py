"""Success-or-error values returned by the extractor and responder."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from pagechat.errors import PageChatError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    error: PageChatError

    @property
    def ok(self) -> bool:
        return False


Result = Ok[T] | Err
