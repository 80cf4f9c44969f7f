from __future__ import annotations

from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel

V = TypeVar("V")


class CacheEntry(BaseModel, Generic[V]):
    """A cached computation result with its insertion time."""

    key: str  # Request fingerprint
    value: V
    stored_at: datetime
