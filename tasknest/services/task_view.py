"""
Derived views over a user's task snapshot.

Everything here is a pure function of its inputs: a sequence of tasks in
snapshot order and a filter key. Nothing is mutated and nothing touches the
database, so the same code serves REST reads and live snapshot pushes.
"""
from typing import List, Sequence, Union

from ..models.category import TaskFilter
from ..schemas.task import TaskRead, TaskStats, TaskView


def _as_filter(filter_key: Union[TaskFilter, str]) -> TaskFilter:
    try:
        return TaskFilter(filter_key)
    except ValueError:
        raise ValueError(f"Unknown task filter: {filter_key!r}") from None


def filter_tasks(tasks: Sequence[TaskRead], filter_key: Union[TaskFilter, str]) -> List[TaskRead]:
    """
    Select the visible subset for a filter key, keeping input order.

    ``all`` and the category keys only show open tasks; a completed task is
    visible under ``completed`` and nowhere else.
    """
    key = _as_filter(filter_key)
    if key is TaskFilter.completed:
        return [t for t in tasks if t.completed]
    if key is TaskFilter.all:
        return [t for t in tasks if not t.completed]
    return [t for t in tasks if not t.completed and t.category == key.value]


def compute_stats(tasks: Sequence[TaskRead]) -> TaskStats:
    """Counters over the whole snapshot, independent of any filter."""
    total = len(tasks)
    completed = sum(1 for t in tasks if t.completed)
    rate = (completed / total) * 100 if total > 0 else 0.0
    return TaskStats(
        total=total,
        completed=completed,
        pending=total - completed,
        completion_rate=rate,
    )


def derive_view(tasks: Sequence[TaskRead], filter_key: Union[TaskFilter, str] = TaskFilter.all) -> TaskView:
    key = _as_filter(filter_key)
    return TaskView(filter=key, tasks=filter_tasks(tasks, key), stats=compute_stats(tasks))
