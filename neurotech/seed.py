"""Demo data the dashboard starts with."""

from __future__ import annotations

from neurotech.chat_context import AI_SENDER
from neurotech.models import Message, Priority, Project, Task, TaskStatus
from neurotech.state import AppState

PROJECTS = (
    Project("1", "Website Redesign", "Overhaul the corporate site", "indigo"),
    Project("2", "Mobile App Launch", "Q3 Launch strategy", "emerald"),
    Project("3", "Marketing Campaign", "Social media blitz", "amber"),
)

TASKS = (
    Task.for_project("1", "Design Homepage Mockup", task_id="101",
                     status=TaskStatus.COMPLETED, priority=Priority.HIGH, due_date="2023-11-01"),
    Task.for_project("1", "Implement React Components", task_id="102",
                     status=TaskStatus.PENDING, priority=Priority.HIGH, due_date="2023-11-05"),
    Task.for_project("2", "App Store Submission", task_id="103",
                     status=TaskStatus.SCHEDULED, priority=Priority.MEDIUM, due_date="2023-12-01"),
    Task.routine("Morning Standup", task_id="201", status=TaskStatus.COMPLETED),
    Task.routine("Review PRs", task_id="202", priority=Priority.HIGH),
    Task.routine("Check Emails", task_id="203", status=TaskStatus.SCHEDULED, priority=Priority.LOW),
)


def opening_messages() -> tuple[Message, ...]:
    return (
        Message(
            id="1",
            sender=AI_SENDER,
            content="Hello team! I am here to assist with project coordination. "
                    "Mention @AI to ask me anything.",
            is_ai=True,
        ),
        Message(
            id="2",
            sender="Sarah Designer",
            content="Hey everyone, just uploaded the new mockups to the project drive.",
        ),
    )


def initial_state() -> AppState:
    return AppState(projects=PROJECTS, tasks=TASKS, messages=opening_messages())
