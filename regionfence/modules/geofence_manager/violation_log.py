"""
Violation Log - Session-scoped record of geofence violations
"""

import threading
from collections import deque
from typing import Deque, Iterator, List, Optional

from regionfence.models.geofence import GeofenceViolation

class ViolationLog:
    """Append-only violation history, bounded when max_entries is set"""

    def __init__(self, max_entries: Optional[int] = None):
        if max_entries is not None and max_entries <= 0:
            raise ValueError("max_entries must be positive")

        self.max_entries = max_entries
        self._entries: Deque[GeofenceViolation] = deque(maxlen=max_entries)
        self._lock = threading.Lock()

    def record(self, violation: GeofenceViolation) -> None:
        with self._lock:
            self._entries.append(violation)

    def recent(self, n: int = 10) -> List[GeofenceViolation]:
        """Last n entries in append order"""

        if n < 0:
            raise ValueError("n must be non-negative")
        if n == 0:
            return []

        with self._lock:
            entries = list(self._entries)
        return entries[-n:]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[GeofenceViolation]:
        with self._lock:
            return iter(list(self._entries))
