"""Task collection: persistence, priority view, and boundary notifications."""

import logging
import random
from datetime import datetime
from typing import Callable, List, Optional, Set

from pydantic import TypeAdapter, ValidationError

from config import TASKS_KEY
from ids import generate_task_id
from models import Notification, Task, TaskOverview, TaskPriority, TaskStatus, TaskWithPriority
from notifications import Notifier
from priority import compute_priority, task_overview, utc_now
from seed_data import create_seed_tasks
from storage import KeyValueStorage, MalformedStateError, StorageReadError

logger = logging.getLogger(__name__)

_TASK_LIST = TypeAdapter(List[Task])


class TaskStore:
    """Owns the task collection. Every mutation replaces the list and persists it."""

    def __init__(
        self,
        storage: KeyValueStorage,
        notifier: Optional[Notifier] = None,
        clock: Callable[[], datetime] = utc_now,
        rng: Optional[random.Random] = None,
        key: str = TASKS_KEY,
    ) -> None:
        self._storage = storage
        self._notifier = notifier or Notifier(clock=clock)
        self._clock = clock
        self._rng = rng or random.Random()
        self._key = key
        # "{tier}-{task id}" pairs already announced; kept for the store's lifetime
        self._notified: Set[str] = set()
        self._tasks: List[Task] = self._load()

    @property
    def tasks(self) -> List[Task]:
        return list(self._tasks)

    @property
    def notifier(self) -> Notifier:
        return self._notifier

    def _load(self) -> List[Task]:
        persist_seed = True
        try:
            data = self._storage.load_json(self._key)
            if data is not None:
                tasks = _TASK_LIST.validate_python(data)
                logger.info("Loaded %d tasks from %s", len(tasks), self._key)
                return tasks
        except (MalformedStateError, ValidationError) as e:
            logger.warning("Discarding persisted tasks: %s", e)
        except StorageReadError as e:
            # Entry may still exist; keep the seed in memory only
            logger.warning("Could not read persisted tasks, using demo data: %s", e)
            persist_seed = False
        tasks = create_seed_tasks(self._clock(), self._rng)
        logger.info("Seeded %d demo tasks", len(tasks))
        if persist_seed:
            self._save(tasks)
        return tasks

    def _save(self, tasks: List[Task]) -> None:
        self._storage.save_json(self._key, _TASK_LIST.dump_python(tasks, mode="json"))

    def _replace(self, tasks: List[Task]) -> None:
        self._tasks = tasks
        self._save(tasks)

    def get_task(self, task_id: str) -> Optional[Task]:
        return next((t for t in self._tasks if t.id == task_id), None)

    def add_task(
        self,
        title: str,
        description: str,
        deadline: datetime,
        warning_boundary_hours: float,
    ) -> Task:
        """Create an active task at the front of the collection."""
        now = self._clock()
        task = Task(
            id=generate_task_id(now, self._rng),
            title=title,
            description=description,
            deadline=deadline,
            warning_boundary_hours=warning_boundary_hours,
            status=TaskStatus.ACTIVE,
            created_at=now,
        )
        self._replace([task] + self._tasks)
        self._notifier.success("Task created successfully!")
        return task

    def complete_task(self, task_id: str) -> Optional[Task]:
        """Mark a task completed. None if the id is unknown."""
        task = self.get_task(task_id)
        if task is None:
            return None
        if task.status == TaskStatus.COMPLETED:
            return task
        done = task.model_copy(update={"status": TaskStatus.COMPLETED, "completed_at": self._clock()})
        self._replace([done if t.id == task_id else t for t in self._tasks])
        self._notifier.success("Task completed!")
        return done

    def delete_task(self, task_id: str) -> bool:
        remaining = [t for t in self._tasks if t.id != task_id]
        if len(remaining) == len(self._tasks):
            return False
        self._replace(remaining)
        self._notifier.info("Task deleted")
        return True

    def list_with_priority(self, now: Optional[datetime] = None) -> List[TaskWithPriority]:
        now = now or self._clock()
        return [compute_priority(t, now) for t in self._tasks]

    def overview(self, now: Optional[datetime] = None) -> TaskOverview:
        return task_overview(self.list_with_priority(now))

    def check_boundaries(self, now: Optional[datetime] = None) -> List[Notification]:
        """Announce each task's first entry into attention or overdue.

        A (task, tier) pair is announced at most once per store, even if the
        task later leaves the tier and comes back.
        """
        sent = []
        for task in self.list_with_priority(now):
            if task.priority not in (TaskPriority.ATTENTION, TaskPriority.OVERDUE):
                continue
            key = f"{task.priority.value}-{task.id}"
            if key in self._notified:
                continue
            self._notified.add(key)
            if task.priority == TaskPriority.ATTENTION:
                sent.append(self._notifier.warning(f'"{task.title}" needs attention', task.boundary_message))
            else:
                sent.append(self._notifier.error(f'"{task.title}" is overdue!', "This task has passed its deadline."))
        return sent
