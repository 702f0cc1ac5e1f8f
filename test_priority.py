from datetime import datetime, timedelta, timezone

import pytest

from models import Task, TaskPriority, TaskStatus
from priority import (
    DAY_MS,
    HOUR_MS,
    OVERDUE_MESSAGE,
    compute_priority,
    format_overdue_time,
    format_time_remaining,
    group_by_priority,
    task_overview,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_task(deadline, warning_hours=1.0, created=None, completed=False):
    return Task(
        id="task-1",
        title="Write report",
        deadline=deadline,
        warning_boundary_hours=warning_hours,
        status=TaskStatus.COMPLETED if completed else TaskStatus.ACTIVE,
        created_at=created or NOW - timedelta(days=1),
        completed_at=NOW if completed else None,
    )


def test_completed_task_is_terminal_regardless_of_deadline():
    task = make_task(NOW - timedelta(days=3), completed=True)
    result = compute_priority(task, NOW)
    assert result.priority == TaskPriority.COMPLETED
    assert result.remaining_ms == 0
    assert result.progress_percent == 100
    assert result.boundary_message is None


def test_half_hour_left_with_one_hour_boundary_needs_attention():
    result = compute_priority(make_task(NOW + timedelta(minutes=30)), NOW)
    assert result.priority == TaskPriority.ATTENTION
    assert result.remaining_ms == 1_800_000
    assert result.boundary_message == "Only 30m left. Please complete this task soon."


def test_past_deadline_is_overdue():
    result = compute_priority(make_task(NOW - timedelta(hours=1)), NOW)
    assert result.priority == TaskPriority.OVERDUE
    assert result.remaining_ms == -HOUR_MS
    assert result.boundary_message == OVERDUE_MESSAGE
    assert format_overdue_time(result.remaining_ms) == "1h overdue"


def test_far_deadline_is_active_without_message():
    result = compute_priority(make_task(NOW + timedelta(hours=5)), NOW)
    assert result.priority == TaskPriority.ACTIVE
    assert result.boundary_message is None


def test_boundaries_are_inclusive():
    at_deadline = compute_priority(make_task(NOW), NOW)
    assert at_deadline.priority == TaskPriority.OVERDUE
    at_threshold = compute_priority(make_task(NOW + timedelta(hours=1)), NOW)
    assert at_threshold.priority == TaskPriority.ATTENTION
    just_outside = compute_priority(make_task(NOW + timedelta(hours=1, milliseconds=1)), NOW)
    assert just_outside.priority == TaskPriority.ACTIVE


def test_zero_hour_boundary_stays_active_until_overdue():
    task = make_task(NOW + timedelta(seconds=1), warning_hours=0)
    assert compute_priority(task, NOW).priority == TaskPriority.ACTIVE
    assert compute_priority(task, NOW + timedelta(seconds=1)).priority == TaskPriority.OVERDUE


def test_progress_is_clamped_and_non_decreasing():
    created = NOW
    task = make_task(NOW + timedelta(hours=10), created=created)
    samples = [
        compute_priority(task, created + timedelta(hours=h)).progress_percent
        for h in (-2, 0, 2.5, 5, 9.99, 10, 20)
    ]
    assert samples == sorted(samples)
    assert samples[0] == 0
    assert samples[3] == pytest.approx(50)
    assert samples[-1] == 100


def test_degenerate_duration_counts_as_fully_elapsed():
    task = make_task(NOW + timedelta(hours=2), created=NOW + timedelta(hours=2))
    assert compute_priority(task, NOW).progress_percent == 100


@pytest.mark.parametrize(
    "ms, expected",
    [
        (2 * DAY_MS + 3 * HOUR_MS + 59_000, "2d 3h"),
        (5 * HOUR_MS + 12 * 60_000, "5h 12m"),
        (40 * 60_000 + 30_000, "40m"),
        (0, "Overdue"),
    ],
)
def test_format_time_remaining(ms, expected):
    assert format_time_remaining(ms) == expected


@pytest.mark.parametrize(
    "ms, expected",
    [
        (-(DAY_MS + 4 * HOUR_MS + 30 * 60_000), "1d 4h overdue"),
        (-(3 * HOUR_MS + 20 * 60_000), "3h overdue"),
        (-25 * 60_000, "25m overdue"),
    ],
)
def test_format_overdue_time(ms, expected):
    assert format_overdue_time(ms) == expected


def test_overview_counts_each_tier():
    tasks = [
        compute_priority(make_task(NOW + timedelta(days=2)), NOW),
        compute_priority(make_task(NOW + timedelta(minutes=10)), NOW),
        compute_priority(make_task(NOW - timedelta(minutes=10)), NOW),
        compute_priority(make_task(NOW - timedelta(minutes=10), completed=True), NOW),
    ]
    overview = task_overview(tasks)
    assert (overview.total, overview.attention, overview.overdue, overview.completed) == (3, 1, 1, 1)
    groups = group_by_priority(tasks)
    assert set(groups) == set(TaskPriority)
    assert [t.priority for t in groups[TaskPriority.ACTIVE]] == [TaskPriority.ACTIVE]


def test_huge_warning_boundary_is_attention_not_an_error():
    result = compute_priority(make_task(NOW + timedelta(days=400), warning_hours=1e12), NOW)
    assert result.priority == TaskPriority.ATTENTION
    assert result.remaining_ms == 400 * DAY_MS
