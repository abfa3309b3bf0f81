"""Application logger with an in-memory history.

One `AppLogger` is created by the composition root (see `di.py`) and handed
to every component that logs. Messages go to the standard `logging` tree
and are also kept in a bounded history so admins can read recent entries
through `GET /api/logs`.
"""
import datetime
import logging
from collections import deque
from typing import Deque, Dict, List, Optional


class AppLogger:
    def __init__(self, name: str = 'cms_backend', history_size: int = 500, level: Optional[str] = None):
        self._log = logging.getLogger(name)
        if level:
            self._log.setLevel(level.upper())
        self._history: Deque[Dict[str, str]] = deque(maxlen=history_size)

    def _record(self, level: str, message: str):
        self._history.append({
            'timestamp': datetime.datetime.now(datetime.timezone.utc).isoformat(),
            'level': level,
            'message': message,
        })

    def log(self, message: str, level: str = 'INFO'):
        level = level.upper()
        self._record(level, message)
        self._log.log(logging.getLevelName(level), message)

    def info(self, message: str):
        self.log(message, 'INFO')

    def warning(self, message: str):
        self.log(message, 'WARNING')

    def error(self, message: str):
        self.log(message, 'ERROR')

    def exception(self, message: str):
        """Log at ERROR level with the active traceback attached."""
        self._record('ERROR', message)
        self._log.exception(message)

    def entries(self) -> List[Dict[str, str]]:
        return list(self._history)


def configure_logging(level: str = 'INFO'):
    """Install a basic stream handler for the process (used by the CLI entry points)."""
    logging.basicConfig(
        level=level.upper(),
        format='[%(levelname)s] %(asctime)s %(name)s: %(message)s',
    )
