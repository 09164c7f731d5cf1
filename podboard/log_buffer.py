"""In-memory buffer of recent log lines, shown on the /logs page."""

import logging
import threading
from collections import deque
from typing import List


class RecentLogHandler(logging.Handler):
    """Logging handler that keeps the last ``capacity`` formatted records."""

    def __init__(self, capacity: int = 50, level: int = logging.NOTSET):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        super().__init__(level=level)
        self._lines: deque = deque(maxlen=capacity)
        self._lines_lock = threading.Lock()

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = self.format(record)
        except Exception:
            self.handleError(record)
            return

        with self._lines_lock:
            self._lines.append(line)

    def recent(self) -> List[str]:
        """Buffered lines, newest first."""
        with self._lines_lock:
            return list(reversed(self._lines))

    def clear(self) -> None:
        with self._lines_lock:
            self._lines.clear()
