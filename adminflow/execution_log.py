"""Append-only audit trail of step lifecycle events."""

from __future__ import annotations

from collections import deque
from datetime import datetime
from typing import Deque, Iterator, List, Literal, Optional

from pydantic import BaseModel, Field

from .models import utcnow

LogEvent = Literal["started", "completed", "failed"]


class LogEntry(BaseModel):
    """A single timestamped, human-readable log line."""

    timestamp: datetime = Field(default_factory=utcnow)
    text: str
    event: Optional[LogEvent] = None
    step_id: Optional[str] = None

    def format(self) -> str:
        return f"{self.timestamp.strftime('%H:%M:%S')}: {self.text}"


class ExecutionLog:
    """Chronological list of log entries, most recent last.

    With ``max_entries`` set, the oldest entries are evicted once the cap is
    reached; ``None`` keeps every entry.
    """

    def __init__(self, max_entries: Optional[int] = None) -> None:
        if max_entries is not None and max_entries <= 0:
            raise ValueError("max_entries must be positive or None")
        self.max_entries = max_entries
        self._entries: Deque[LogEntry] = deque(maxlen=max_entries)
        self.evicted = 0

    def append(
        self,
        text: str,
        event: Optional[LogEvent] = None,
        step_id: Optional[str] = None,
        timestamp: Optional[datetime] = None,
    ) -> LogEntry:
        entry = LogEntry(
            timestamp=timestamp or utcnow(), text=text, event=event, step_id=step_id
        )
        if self.max_entries is not None and len(self._entries) == self.max_entries:
            self.evicted += 1
        self._entries.append(entry)
        return entry

    def started(self, step_name: str, step_id: Optional[str] = None) -> LogEntry:
        return self.append(f"Starting step: {step_name}", "started", step_id)

    def completed(self, step_name: str, step_id: Optional[str] = None) -> LogEntry:
        return self.append(f"Completed: {step_name}", "completed", step_id)

    def failed(
        self, step_name: str, error: str, step_id: Optional[str] = None
    ) -> LogEntry:
        return self.append(f"Failed: {step_name} - {error}", "failed", step_id)

    def entries(self) -> List[LogEntry]:
        """Return a copy of the entries, oldest first."""
        return list(self._entries)

    def lines(self) -> List[str]:
        return [entry.format() for entry in self._entries]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(list(self._entries))
