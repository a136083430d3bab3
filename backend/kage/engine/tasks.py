"""
Task list filtering and ordering.
"""
from typing import Literal

PRIORITY_RANK = {"high": 3, "medium": 2, "low": 1}
TaskFilter = Literal["all", "pending", "completed"]


def filter_tasks(tasks: list[dict], status: TaskFilter = "all") -> list[dict]:
    if status == "pending":
        return [t for t in tasks if not t.get("completed")]
    if status == "completed":
        return [t for t in tasks if t.get("completed")]
    return list(tasks)


def sort_tasks(tasks: list[dict]) -> list[dict]:
    """Open tasks first, then high > medium > low. Ties keep their input order."""
    return sorted(
        tasks,
        key=lambda t: (bool(t.get("completed")), -PRIORITY_RANK.get(t.get("priority"), 0)),
    )
