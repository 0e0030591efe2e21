"""
View State Controller — Reducer over an Immutable AppState
===========================================================
Owns the canonical in-memory collections of the dashboard and applies every
user- or AI-driven change as a pure function:

    reduce(state, action) -> new state

Components:
    AppState  — frozen snapshot: projects, tasks, messages, view, pending
    Actions   — one frozen dataclass per kind of change
    reduce()  — total, side-effect-free transition function
    Store     — holds the current AppState and dispatches actions to it

Rules:
    1. Collections are tuples and are replaced wholesale, never edited.
    2. A lookup miss (unknown task/project id) is a silent no-op: the same
       state object comes back.
    3. Status transitions are fully connected; nothing changes status
       automatically.
    4. Deleting a project cascades to its tasks. Routines are untouched.
       Suggestions that arrive for a project that is gone are dropped.
    5. Only one AI request per key may be outstanding (BeginRequest /
       EndRequest); a second launch raises RequestInFlight.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Optional, Sequence, Union

from neurotech.models import (
    Message, Priority, Project, Task, TaskStatus, View, new_id,
)

logger = logging.getLogger(__name__)


class RequestInFlight(RuntimeError):
    """An AI request with the same key has not completed yet."""

    def __init__(self, key: str):
        super().__init__(f"Request '{key}' is already in progress")
        self.key = key


# ─────────────────────────────────────────────────────────────
#  State
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class AppState:
    projects: tuple[Project, ...] = ()
    tasks: tuple[Task, ...] = ()
    messages: tuple[Message, ...] = ()
    current_view: View = View.DASHBOARD
    pending: frozenset[str] = frozenset()   # keys of AI requests in flight

    def find_task(self, task_id: str) -> Optional[Task]:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def find_project(self, project_id: str) -> Optional[Project]:
        for project in self.projects:
            if project.id == project_id:
                return project
        return None

    @property
    def routines(self) -> list[Task]:
        return [t for t in self.tasks if t.is_routine]

    @property
    def project_tasks(self) -> list[Task]:
        return [t for t in self.tasks if not t.is_routine]

    def tasks_for_project(self, project_id: str) -> list[Task]:
        return [t for t in self.tasks if t.project_id == project_id]

    def to_dict(self) -> dict:
        return {
            "currentView": self.current_view.value,
            "projects": [p.to_dict() for p in self.projects],
            "tasks": [t.to_dict() for t in self.tasks],
            "messages": [m.to_dict() for m in self.messages],
            "pending": sorted(self.pending),
        }


# ─────────────────────────────────────────────────────────────
#  Actions
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class AddTask:
    task: Task


@dataclass(frozen=True)
class UpdateTaskStatus:
    task_id: str
    status: TaskStatus


@dataclass(frozen=True)
class DeleteTask:
    task_id: str


@dataclass(frozen=True)
class AddRoutine:
    title: str
    task_id: Optional[str] = None


@dataclass(frozen=True)
class ToggleRoutine:
    task_id: str


@dataclass(frozen=True)
class AddProject:
    project: Project


@dataclass(frozen=True)
class DeleteProject:
    project_id: str


@dataclass(frozen=True)
class PostMessage:
    message: Message


@dataclass(frozen=True)
class ChangeView:
    view: View


@dataclass(frozen=True)
class AddSuggestedTasks:
    """Turn AI suggestions (anything with ``title``/``priority``) into cards."""

    project_id: str
    suggestions: tuple = ()
    due_date: Optional[str] = None   # defaults to today


@dataclass(frozen=True)
class AddSuggestedRoutines:
    suggestions: tuple = ()


@dataclass(frozen=True)
class BeginRequest:
    key: str


@dataclass(frozen=True)
class EndRequest:
    key: str


Action = Union[
    AddTask, UpdateTaskStatus, DeleteTask, AddRoutine, ToggleRoutine,
    AddProject, DeleteProject, PostMessage, ChangeView,
    AddSuggestedTasks, AddSuggestedRoutines, BeginRequest, EndRequest,
]


# ─────────────────────────────────────────────────────────────
#  Reducer
# ─────────────────────────────────────────────────────────────

def toggled_status(status: TaskStatus) -> TaskStatus:
    """Completed → Pending, anything else → Completed.

    Not an involution for Scheduled: Scheduled → Completed → Pending.
    """
    if status is TaskStatus.COMPLETED:
        return TaskStatus.PENDING
    return TaskStatus.COMPLETED


def _set_status(state: AppState, task_id: str, status: TaskStatus) -> AppState:
    if state.find_task(task_id) is None:
        return state
    tasks = tuple(t.with_status(status) if t.id == task_id else t for t in state.tasks)
    return replace(state, tasks=tasks)


def _append_tasks(state: AppState, new_tasks: Sequence[Task]) -> AppState:
    if not new_tasks:
        return state
    return replace(state, tasks=state.tasks + tuple(new_tasks))


def reduce(state: AppState, action: Action) -> AppState:
    """Apply one action and return the next state."""

    if isinstance(action, AddTask):
        return _append_tasks(state, [action.task])

    if isinstance(action, UpdateTaskStatus):
        return _set_status(state, action.task_id, action.status)

    if isinstance(action, DeleteTask):
        kept = tuple(t for t in state.tasks if t.id != action.task_id)
        if len(kept) == len(state.tasks):
            return state
        return replace(state, tasks=kept)

    if isinstance(action, AddRoutine):
        routine = Task.routine(action.title, task_id=action.task_id)
        return _append_tasks(state, [routine])

    if isinstance(action, ToggleRoutine):
        task = state.find_task(action.task_id)
        if task is None:
            return state
        return _set_status(state, task.id, toggled_status(task.status))

    if isinstance(action, AddProject):
        return replace(state, projects=state.projects + (action.project,))

    if isinstance(action, DeleteProject):
        if state.find_project(action.project_id) is None:
            return state
        return replace(
            state,
            projects=tuple(p for p in state.projects if p.id != action.project_id),
            tasks=tuple(t for t in state.tasks if t.project_id != action.project_id),
        )

    if isinstance(action, PostMessage):
        return replace(state, messages=state.messages + (action.message,))

    if isinstance(action, ChangeView):
        return replace(state, current_view=action.view)

    if isinstance(action, AddSuggestedTasks):
        if state.find_project(action.project_id) is None:
            return state
        due = action.due_date or date.today().isoformat()
        cards = [
            Task.for_project(
                action.project_id,
                s.title,
                priority=Priority(s.priority),
                due_date=due,
            )
            for s in action.suggestions
        ]
        return _append_tasks(state, cards)

    if isinstance(action, AddSuggestedRoutines):
        return _append_tasks(state, [Task.routine(s.title) for s in action.suggestions])

    if isinstance(action, BeginRequest):
        if action.key in state.pending:
            raise RequestInFlight(action.key)
        return replace(state, pending=state.pending | {action.key})

    if isinstance(action, EndRequest):
        if action.key not in state.pending:
            return state
        return replace(state, pending=state.pending - {action.key})

    raise TypeError(f"Unknown action: {type(action).__name__}")


# ─────────────────────────────────────────────────────────────
#  Store
# ─────────────────────────────────────────────────────────────

class Store:
    """Holds the current AppState; the only place state is swapped."""

    def __init__(self, state: Optional[AppState] = None):
        self._state = state or AppState()

    @property
    def state(self) -> AppState:
        return self._state

    def dispatch(self, action: Action) -> AppState:
        """Reduce ``action`` into the current state and return the result."""
        self._state = reduce(self._state, action)
        logger.debug("Dispatched %s", type(action).__name__)
        return self._state

    # ─── Convenience dispatchers ──────────────────────────

    def add_task(self, task: Task) -> AppState:
        return self.dispatch(AddTask(task))

    def update_task_status(self, task_id: str, status: TaskStatus) -> AppState:
        return self.dispatch(UpdateTaskStatus(task_id, status))

    def delete_task(self, task_id: str) -> AppState:
        return self.dispatch(DeleteTask(task_id))

    def add_routine(self, title: str) -> Task:
        """Add a routine and return the created record."""
        task_id = new_id()
        self.dispatch(AddRoutine(title, task_id=task_id))
        return self._state.find_task(task_id)

    def toggle_routine(self, task_id: str) -> AppState:
        return self.dispatch(ToggleRoutine(task_id))

    def begin_request(self, key: str) -> None:
        self.dispatch(BeginRequest(key))

    def end_request(self, key: str) -> None:
        self.dispatch(EndRequest(key))

    def is_pending(self, key: str) -> bool:
        return key in self._state.pending
