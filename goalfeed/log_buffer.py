"""In-memory ring buffer of recent engine log lines, served at /api/logs."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import asdict, dataclass
from datetime import datetime, timezone

DEFAULT_CAPACITY = 500


@dataclass(frozen=True)
class LogEntry:
    timestamp: str
    level: str
    levelno: int
    logger: str
    message: str


class BufferHandler(logging.Handler):
    """Keeps the last *capacity* records; the watch loop logs every second."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        super().__init__()
        self._buffer: deque[LogEntry] = deque(maxlen=capacity)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self._buffer.append(
                LogEntry(
                    timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc)
                    .strftime("%Y-%m-%d %H:%M:%S UTC"),
                    level=record.levelname,
                    levelno=record.levelno,
                    logger=record.name,
                    message=self.format(record),
                )
            )
        except Exception:
            self.handleError(record)

    def entries(self, limit: int = 100, min_level: int = logging.NOTSET) -> list[dict]:
        """Newest-first entries at or above *min_level*."""
        items = [entry for entry in self._buffer if entry.levelno >= min_level]
        items = items[-limit:] if limit > 0 else []
        items.reverse()
        return [asdict(entry) for entry in items]


_handler: BufferHandler | None = None


def get_buffer_handler() -> BufferHandler:
    global _handler
    if _handler is None:
        _handler = BufferHandler()
        _handler.setFormatter(logging.Formatter("%(message)s"))
        _handler.setLevel(logging.INFO)
    return _handler


def install_buffer_handler(logger_name: str = "goalfeed") -> BufferHandler:
    """Attach the buffer to the package logger so every engine module feeds it."""
    handler = get_buffer_handler()
    lg = logging.getLogger(logger_name)
    if handler not in lg.handlers:
        lg.addHandler(handler)
    if lg.level == logging.NOTSET or lg.level > logging.INFO:
        lg.setLevel(logging.INFO)
    return handler
