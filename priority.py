"""Deadline-driven priority tiers for tasks, and remaining-time formatting."""

from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List

from models import Task, TaskOverview, TaskPriority, TaskStatus, TaskWithPriority

MINUTE_MS = 60 * 1000
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS

OVERDUE_MESSAGE = "This task is overdue. Please complete it as soon as possible."


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _to_ms(delta: timedelta) -> int:
    return delta // timedelta(milliseconds=1)


def compute_priority(task: Task, now: datetime) -> TaskWithPriority:
    """Annotate a task with its tier, remaining time and progress as of ``now``.

    Tiers are checked in order: overdue when the deadline has been reached,
    attention when the deadline is within ``warning_boundary_hours``, else active.
    Completed tasks short-circuit to the completed tier.
    """
    if task.status == TaskStatus.COMPLETED:
        return TaskWithPriority(
            **task.model_dump(),
            priority=TaskPriority.COMPLETED,
            remaining_ms=0,
            progress_percent=100,
        )

    remaining = task.deadline - now
    total = task.deadline - task.created_at
    if total > timedelta(0):
        progress = min(100.0, max(0.0, 100 * (now - task.created_at) / total))
    else:
        progress = 100.0

    remaining_ms = _to_ms(remaining)
    priority = TaskPriority.ACTIVE
    message = None
    if remaining <= timedelta(0):
        priority = TaskPriority.OVERDUE
        message = OVERDUE_MESSAGE
    elif remaining_ms <= task.warning_boundary_hours * HOUR_MS:
        priority = TaskPriority.ATTENTION
        message = f"Only {format_time_remaining(remaining_ms)} left. Please complete this task soon."

    return TaskWithPriority(
        **task.model_dump(),
        priority=priority,
        remaining_ms=remaining_ms,
        progress_percent=progress,
        boundary_message=message,
    )


def format_time_remaining(ms: int) -> str:
    """Render a positive duration as "2d 3h", "5h 12m" or "40m"."""
    if ms <= 0:
        return "Overdue"
    days, rest = divmod(ms, DAY_MS)
    hours, rest = divmod(rest, HOUR_MS)
    minutes = rest // MINUTE_MS
    if days > 0:
        return f"{days}d {hours}h"
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def format_overdue_time(ms: int) -> str:
    """Render how far past the deadline a task is, e.g. "1d 4h overdue"."""
    days, rest = divmod(abs(ms), DAY_MS)
    hours = rest // HOUR_MS
    if days > 0:
        return f"{days}d {hours}h overdue"
    if hours > 0:
        return f"{hours}h overdue"
    return f"{abs(ms) // MINUTE_MS}m overdue"


def group_by_priority(tasks: Iterable[TaskWithPriority]) -> Dict[TaskPriority, List[TaskWithPriority]]:
    groups: Dict[TaskPriority, List[TaskWithPriority]] = {p: [] for p in TaskPriority}
    for task in tasks:
        groups[task.priority].append(task)
    return groups


def task_overview(tasks: Iterable[TaskWithPriority]) -> TaskOverview:
    groups = group_by_priority(tasks)
    return TaskOverview(
        total=sum(len(groups[p]) for p in TaskPriority if p != TaskPriority.COMPLETED),
        attention=len(groups[TaskPriority.ATTENTION]),
        overdue=len(groups[TaskPriority.OVERDUE]),
        completed=len(groups[TaskPriority.COMPLETED]),
    )
