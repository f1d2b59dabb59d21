"""
Execution log for the hash table engine.
Entries are kept newest first and capped at MAX_LOG_ENTRIES; older ones fall off.
Every entry is also written to the standard logging module.
"""

import logging
import time
import uuid
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import List

MAX_LOG_ENTRIES = 50

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.SUCCESS: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class LogEntry:
    message: str
    type: Severity = Severity.INFO
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: int = field(default_factory=_now_ms)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "message": self.message,
            "type": self.type.value,
            "timestamp": self.timestamp,
        }


class EventLog:
    def __init__(self, max_entries: int = MAX_LOG_ENTRIES):
        self.max_entries = max_entries
        self._entries = deque(maxlen=max_entries)

    def add(self, message: str, severity: Severity = Severity.INFO) -> LogEntry:
        """Record a new entry at the front; the oldest is dropped when full."""
        entry = LogEntry(message=message, type=severity)
        self._entries.appendleft(entry)
        logger.log(_LEVELS[severity], "[%s] %s", severity.value, message)
        return entry

    def entries(self) -> List[LogEntry]:
        return list(self._entries)

    def as_list(self) -> List[dict]:
        return [e.to_dict() for e in self._entries]

    def clear(self):
        self._entries.clear()

    def __len__(self):
        return len(self._entries)
