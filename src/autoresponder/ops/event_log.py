"""Bounded, newest-first log of registration, match and error events."""

from __future__ import annotations

from enum import Enum
from typing import Iterable, List, Optional, Tuple

from pydantic import BaseModel, Field

from ..utils.time import utc_now_z

MAX_LOG_ENTRIES = 500


class LogAction(str, Enum):
    REGISTERED = "RULE_REGISTERED"
    INTERCEPTED = "REQUEST_INTERCEPTED"
    ERROR = "RULE_ERROR"


class LogEntry(BaseModel):
    """One diagnostic record."""

    action: LogAction
    pattern: Optional[str] = None
    url: Optional[str] = None
    timestamp: str = Field(default_factory=utc_now_z)
    detail: Optional[str] = None
    rule_id: Optional[int] = None
    match_type: Optional[str] = None
    response_type: Optional[str] = None
    resource_type: Optional[str] = None

    @property
    def subject(self) -> str:
        """What the entry is about: the URL, else the pattern, else the detail."""
        return self.url or self.pattern or self.detail or ""


class EventLog:
    """
    In-memory ring buffer, newest entry first.

    Holds at most `capacity` entries; appending beyond that drops the
    oldest. Nothing is persisted, so the log starts empty on every start.
    The entries are held in a tuple that is swapped on every write, so
    readers on other threads always see a complete list.
    """

    def __init__(self, capacity: int = MAX_LOG_ENTRIES):
        if capacity < 1:
            raise ValueError("Event log capacity must be at least 1")
        self.capacity = capacity
        self._entries: Tuple[LogEntry, ...] = ()

    def append(self, entry: LogEntry) -> None:
        self._entries = ((entry,) + self._entries)[: self.capacity]

    def extend(self, entries: Iterable[LogEntry]) -> None:
        """Append entries in order; the last one ends up newest."""
        newest_first = tuple(reversed(list(entries)))
        self._entries = (newest_first + self._entries)[: self.capacity]

    def list(self) -> List[LogEntry]:
        return list(self._entries)

    def clear(self) -> None:
        self._entries = ()

    def __len__(self) -> int:
        return len(self._entries)
