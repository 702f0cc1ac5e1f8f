"""
Background boundary checker: re-evaluate task priorities on an interval and
raise one-time attention/overdue toasts.
Run standalone: python worker.py
"""

import asyncio
import logging
from typing import Optional

from config import BOUNDARY_CHECK_INTERVAL, LOG_FORMAT, LOG_LEVEL
from task_store import TaskStore

logger = logging.getLogger(__name__)


class BoundaryWorker:
    """Runs TaskStore.check_boundaries once at start, then every ``interval`` seconds."""

    def __init__(self, store: TaskStore, interval: float = BOUNDARY_CHECK_INTERVAL) -> None:
        self.store = store
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def run_once(self) -> int:
        try:
            sent = self.store.check_boundaries()
        except Exception as e:
            logger.exception("Boundary check failed: %s", e)
            return 0
        if sent:
            logger.info("Boundary check raised %d notification(s)", len(sent))
        return len(sent)

    async def run(self) -> None:
        """Check every ``interval`` seconds, starting one interval from now."""
        while True:
            await asyncio.sleep(self.interval)
            self.run_once()

    def start(self) -> None:
        """Check once immediately, then schedule the loop. Idempotent."""
        if self.running:
            return
        self.run_once()
        self._task = asyncio.get_running_loop().create_task(self.run())
        logger.info("Boundary worker started (every %.0fs)", self.interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Boundary worker stopped")


def main() -> None:
    from notifications import Notifier
    from storage import get_storage

    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
    store = TaskStore(get_storage(), Notifier())
    worker = BoundaryWorker(store)
    logger.info("Watching %d tasks", len(store.tasks))
    worker.run_once()
    try:
        asyncio.run(worker.run())
    except KeyboardInterrupt:
        logger.info("Shutting down")


if __name__ == "__main__":
    main()
