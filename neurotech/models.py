"""
Domain Model — Projects, Tasks, Routines and Chat Messages
===========================================================
Plain data records shared by every layer of the dashboard.

Records are frozen dataclasses. A change to a task is expressed as a new
record (``Task.with_status``), never as an in-place edit, so the state
reducer can replace whole collections safely.

Placement:
    A task lives either on a project board or in the routine tracker.
    Instead of a nullable project id plus a redundant ``isRoutine`` flag,
    each Task carries exactly one Placement:

        ProjectTask(project_id)   — a card on that project's kanban board
        Routine()                 — a daily habit, not tied to any project

    ``Task.project_id`` and ``Task.is_routine`` are derived from it, so the
    two signals can never disagree.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union


# ─────────────────────────────────────────────────────────────
#  Enumerations
# ─────────────────────────────────────────────────────────────

class TaskStatus(str, Enum):
    """Kanban column a task sits in. Any status may move to any other."""

    PENDING = "PENDING"
    SCHEDULED = "SCHEDULED"
    COMPLETED = "COMPLETED"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class View(str, Enum):
    """Top-level screens of the dashboard."""

    DASHBOARD = "DASHBOARD"
    PROJECTS = "PROJECTS"
    ROUTINES = "ROUTINES"
    CHAT = "CHAT"


def new_id() -> str:
    """Fresh random identifier for tasks, projects and messages."""
    return str(uuid.uuid4())


# ─────────────────────────────────────────────────────────────
#  Project
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Project:
    id: str
    name: str
    description: str = ""
    color: str = "indigo"     # Tailwind color tag used by the board header

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "color": self.color,
        }


# ─────────────────────────────────────────────────────────────
#  Placement — where a task lives
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ProjectTask:
    """Placement for a card on a project's kanban board."""

    project_id: str


@dataclass(frozen=True)
class Routine:
    """Placement for a daily routine (no owning project)."""


Placement = Union[ProjectTask, Routine]


# ─────────────────────────────────────────────────────────────
#  Task
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Task:
    """A kanban card or a daily routine.

    Serialized with the camelCase keys the dashboard front-end expects:
    ``id, projectId, title, description, status, dueDate, isRoutine,
    priority``.
    """

    id: str
    placement: Placement
    title: str
    status: TaskStatus = TaskStatus.PENDING
    priority: Priority = Priority.MEDIUM
    description: Optional[str] = None
    due_date: Optional[str] = None   # ISO date, e.g. "2024-01-01"

    @classmethod
    def for_project(
        cls,
        project_id: str,
        title: str,
        *,
        task_id: Optional[str] = None,
        status: TaskStatus = TaskStatus.PENDING,
        priority: Priority = Priority.MEDIUM,
        description: Optional[str] = None,
        due_date: Optional[str] = None,
    ) -> Task:
        return cls(
            id=task_id or new_id(),
            placement=ProjectTask(project_id),
            title=title,
            status=status,
            priority=priority,
            description=description,
            due_date=due_date,
        )

    @classmethod
    def routine(
        cls,
        title: str,
        *,
        task_id: Optional[str] = None,
        status: TaskStatus = TaskStatus.PENDING,
        priority: Priority = Priority.MEDIUM,
    ) -> Task:
        return cls(
            id=task_id or new_id(),
            placement=Routine(),
            title=title,
            status=status,
            priority=priority,
        )

    @property
    def project_id(self) -> Optional[str]:
        if isinstance(self.placement, ProjectTask):
            return self.placement.project_id
        return None

    @property
    def is_routine(self) -> bool:
        return isinstance(self.placement, Routine)

    def with_status(self, status: TaskStatus) -> Task:
        """Return a copy of this task in a different column."""
        return replace(self, status=status)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "projectId": self.project_id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "dueDate": self.due_date,
            "isRoutine": self.is_routine,
            "priority": self.priority.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Task:
        """Build a task from its camelCase dictionary form.

        Raises:
            ValueError: If ``isRoutine`` and ``projectId`` disagree, if a
                project task has no project, or an enum value is unknown.
        """
        project_id = data.get("projectId")
        is_routine = bool(data.get("isRoutine", project_id is None))

        if is_routine and project_id is not None:
            raise ValueError(
                f"Task {data.get('id')!r} is marked as a routine but belongs "
                f"to project {project_id!r}"
            )
        if not is_routine and project_id is None:
            raise ValueError(f"Task {data.get('id')!r} has no project")

        placement: Placement = Routine() if is_routine else ProjectTask(str(project_id))
        return cls(
            id=str(data.get("id") or new_id()),
            placement=placement,
            title=str(data["title"]),
            status=TaskStatus(data.get("status", TaskStatus.PENDING.value)),
            priority=Priority(data.get("priority", Priority.MEDIUM.value)),
            description=data.get("description"),
            due_date=data.get("dueDate"),
        )


# ─────────────────────────────────────────────────────────────
#  Chat
# ─────────────────────────────────────────────────────────────

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Message:
    """One entry in the team chat log. The log is append-only."""

    id: str
    sender: str
    content: str
    timestamp: datetime = field(default_factory=_utcnow)
    is_ai: bool = False
    avatar: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sender": self.sender,
            "avatar": self.avatar,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
            "isAi": self.is_ai,
        }


@dataclass(frozen=True)
class User:
    """The person at the keyboard; authors outgoing chat messages."""

    id: str
    name: str
    avatar: str = ""

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "avatar": self.avatar}


ROLE_USER = "user"
ROLE_MODEL = "model"


@dataclass(frozen=True)
class ChatTurn:
    """A role-tagged line of conversation handed to the chat model.

    Built fresh from the message log on every assistant call; never stored.
    """

    role: str     # ROLE_USER or ROLE_MODEL
    text: str

    def to_dict(self) -> dict:
        return {"role": self.role, "text": self.text}
