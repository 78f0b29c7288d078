"""In-process activity log.

A bounded FIFO of recent events kept for diagnostics. Nothing here is persisted:
restarting the process loses the history.
"""

import threading
from collections import Counter, deque
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from backend.app.core.time import utc_now

ACTIVITY_LOG_CAPACITY = 1000


@dataclass
class ActivityEntry:
    event: str
    payload: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=utc_now)


class ActivityLog:
    def __init__(self, capacity: int = ACTIVITY_LOG_CAPACITY):
        self.capacity = capacity
        self._entries: deque[ActivityEntry] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def append(self, event: str, payload: Optional[Dict[str, Any]] = None) -> ActivityEntry:
        entry = ActivityEntry(event=event, payload=dict(payload or {}))
        with self._lock:
            # deque(maxlen=...) drops the oldest entry once full
            self._entries.append(entry)
        return entry

    def recent(self, limit: int = 20) -> List[ActivityEntry]:
        """Return up to ``limit`` entries, newest first."""
        if limit <= 0:
            return []
        with self._lock:
            snapshot = list(self._entries)
        return list(reversed(snapshot[-limit:]))

    def statistics(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or utc_now()
        cutoff = now - timedelta(hours=24)
        with self._lock:
            snapshot = list(self._entries)
        by_event = Counter(entry.event for entry in snapshot)
        last_24h = sum(1 for entry in snapshot if entry.timestamp >= cutoff)
        return {"total": len(snapshot), "by_event": dict(by_event), "last_24h": last_24h}

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


activity_log = ActivityLog()


def get_activity_log() -> ActivityLog:
    return activity_log
