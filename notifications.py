"""In-page toast notifications. Every toast is also logged."""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from models import Notification
from priority import utc_now

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    "success": logging.INFO,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class Notifier:
    """Collects toasts until the presentation layer drains them."""

    def __init__(self, clock: Callable[[], datetime] = utc_now, max_pending: int = 200) -> None:
        self._clock = clock
        self._max_pending = max_pending
        self._pending: List[Notification] = []

    def notify(self, level: str, title: str, description: Optional[str] = None) -> Notification:
        toast = Notification(level=level, title=title, description=description, created_at=self._clock())
        logger.log(_LOG_LEVELS[level], "Toast [%s] %s%s", level, title, f" - {description}" if description else "")
        self._pending.append(toast)
        if len(self._pending) > self._max_pending:
            del self._pending[: len(self._pending) - self._max_pending]
        return toast

    def success(self, title: str, description: Optional[str] = None) -> Notification:
        return self.notify("success", title, description)

    def info(self, title: str, description: Optional[str] = None) -> Notification:
        return self.notify("info", title, description)

    def warning(self, title: str, description: Optional[str] = None) -> Notification:
        return self.notify("warning", title, description)

    def error(self, title: str, description: Optional[str] = None) -> Notification:
        return self.notify("error", title, description)

    def pending(self) -> List[Notification]:
        return list(self._pending)

    def drain(self) -> List[Notification]:
        """Return and clear pending toasts, oldest first."""
        out, self._pending = self._pending, []
        return out
