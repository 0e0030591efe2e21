"""
Summaries — Dashboard, Kanban Columns and Routine Progress
===========================================================
Read-only projections of the task list that the dashboard screens render.
"""

from __future__ import annotations

from typing import Iterable

from neurotech.models import Priority, Task, TaskStatus

# (label, status, chart color) for each kanban column, in board order
COLUMNS = (
    ("Pending", TaskStatus.PENDING, "#f59e0b"),
    ("Scheduled", TaskStatus.SCHEDULED, "#6366f1"),
    ("Completed", TaskStatus.COMPLETED, "#10b981"),
)


def dashboard_summary(tasks: Iterable[Task]) -> dict:
    """Counts per status, chart distribution, and open high-priority tasks."""
    tasks = list(tasks)
    counts = {status: 0 for _, status, _ in COLUMNS}
    for task in tasks:
        counts[task.status] += 1

    high_priority = [
        t for t in tasks
        if t.priority is Priority.HIGH and t.status is not TaskStatus.COMPLETED
    ]

    return {
        "total": len(tasks),
        "pending": counts[TaskStatus.PENDING],
        "scheduled": counts[TaskStatus.SCHEDULED],
        "completed": counts[TaskStatus.COMPLETED],
        "distribution": [
            {"name": label, "value": counts[status], "color": color}
            for label, status, color in COLUMNS
        ],
        "high_priority": [t.to_dict() for t in high_priority],
    }


def board_columns(tasks: Iterable[Task], project_id: str) -> list[dict]:
    """The three kanban columns for one project, tasks in insertion order."""
    project_tasks = [t for t in tasks if t.project_id == project_id]
    return [
        {
            "title": label,
            "status": status.value,
            "tasks": [t.to_dict() for t in project_tasks if t.status is status],
        }
        for label, status, _ in COLUMNS
    ]


def routine_progress(routines: Iterable[Task]) -> dict:
    routines = list(routines)
    completed = sum(1 for r in routines if r.status is TaskStatus.COMPLETED)
    total = len(routines)
    percent = (completed / total) * 100 if total else 0.0
    return {"completed": completed, "total": total, "percent": round(percent, 1)}
