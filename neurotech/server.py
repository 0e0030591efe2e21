"""
Neurotech Dashboard Server — JSON API for the Single-Page Dashboard
====================================================================
FastAPI application that exposes the state reducer and the AI assistant
to the browser front-end.

Launch:
    python -m neurotech.server      # Direct
    python -m neurotech.cli start   # Via CLI

Endpoints:
    GET    /                               → Dashboard SPA
    GET    /api/state                      → Full application state
    PUT    /api/view                       → Switch the current view
    GET    /api/dashboard                  → Summary counts + high priority
    GET    /api/projects                   → Project list
    POST   /api/projects                   → Create a project
    DELETE /api/projects/{id}              → Delete a project and its tasks
    GET    /api/projects/{id}/board        → Kanban columns for a project
    POST   /api/projects/{id}/generate     → AI: break a prompt into tasks
    POST   /api/tasks                      → Add a task to a project
    PATCH  /api/tasks/{id}                 → Move a task to another column
    DELETE /api/tasks/{id}                 → Delete a task
    GET    /api/routines                   → Routines + progress
    POST   /api/routines                   → Add a routine
    POST   /api/routines/{id}/toggle       → Toggle a routine done/not done
    POST   /api/routines/suggest           → AI: suggest routines for a goal
    GET    /api/messages                   → Team chat log
    POST   /api/messages                   → Post a message (@AI invokes the assistant)
    GET    /api/providers                  → Available AI providers

AI endpoints answer 409 while a request with the same key is still running.
Chat is the exception: the message is always posted, and a mention made
while a reply is pending comes back with outcome "busy" and no reply.
"""

from __future__ import annotations

import asyncio
import logging
import os
import threading
import webbrowser
from contextlib import contextmanager
from typing import Annotated, Optional

from fastapi import FastAPI, HTTPException
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, ConfigDict, Field, StringConstraints

from neurotech.assistant import Assistant
from neurotech.chat_context import AI_SENDER, build_transcript, mentions_ai
from neurotech.config import Settings
from neurotech.models import Message, Priority, Project, Task, TaskStatus, View, new_id
from neurotech.providers.base import BaseProvider, ProviderResponse
from neurotech.providers.registry import get_provider, list_providers
from neurotech.seed import initial_state
from neurotech.state import (
    AddProject, AddSuggestedRoutines, AddSuggestedTasks, ChangeView, DeleteProject,
    PostMessage, RequestInFlight, Store,
)
from neurotech.summary import board_columns, dashboard_summary, routine_progress

logger = logging.getLogger(__name__)

CHAT_BUSY = "busy"


# ─────────────────────────────────────────────────────────────
#  App Setup
# ─────────────────────────────────────────────────────────────

app = FastAPI(title="Neurotech Dashboard", version="1.0.0")

STATIC_DIR = os.path.join(os.path.dirname(__file__), "static")

app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

# Process-wide state; configure() replaces it (tests, CLI)
_state = {
    "settings": None,
    "store": None,
    "assistant": None,
}


# ─────────────────────────────────────────────────────────────
#  Request Models
# ─────────────────────────────────────────────────────────────

Text = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class ViewRequest(BaseModel):
    view: View


class ProjectRequest(BaseModel):
    name: Text
    description: str = ""
    color: str = "indigo"


class TaskRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    project_id: str = Field(alias="projectId")
    title: Text
    description: Optional[str] = None
    due_date: Optional[str] = Field(default=None, alias="dueDate")
    priority: Priority = Priority.MEDIUM
    status: TaskStatus = TaskStatus.PENDING


class StatusRequest(BaseModel):
    status: TaskStatus


class RoutineRequest(BaseModel):
    title: Text


class GenerateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    prompt: Text
    due_date: Optional[str] = Field(default=None, alias="dueDate")


class SuggestRequest(BaseModel):
    goal: Text


class MessageRequest(BaseModel):
    content: Text
    sender: Optional[str] = None


# ─────────────────────────────────────────────────────────────
#  Helpers
# ─────────────────────────────────────────────────────────────

class _OfflineProvider(BaseProvider):
    """Stand-in when the configured provider is unknown; every call fails soft."""

    def generate(self, prompt: str, system_instruction: str = "", response_schema=None):
        return ProviderResponse(content="", provider="offline", error="No AI provider configured")

    def chat(self, history, message: str, system_instruction: str = ""):
        return ProviderResponse(content="", provider="offline", error="No AI provider configured")

    def is_available(self):
        return False


def configure(
    settings: Optional[Settings] = None,
    store: Optional[Store] = None,
    assistant: Optional[Assistant] = None,
):
    """(Re)initialize the server's settings, store and assistant."""
    settings = settings or Settings.from_env()
    if assistant is None:
        config = settings.provider_config()
        try:
            provider = get_provider(config)
        except (ValueError, ImportError) as e:
            logger.warning("AI provider unavailable (%s); assistant will fail soft", e)
            provider = _OfflineProvider(config)
        assistant = Assistant(provider)

    _state["settings"] = settings
    _state["store"] = store or Store(initial_state())
    _state["assistant"] = assistant


def _ensure_configured():
    if _state["store"] is None:
        configure()


def _store() -> Store:
    _ensure_configured()
    return _state["store"]


def _assistant() -> Assistant:
    _ensure_configured()
    return _state["assistant"]


def _settings() -> Settings:
    _ensure_configured()
    return _state["settings"]


@contextmanager
def _in_flight(key: str):
    """Hold the request key for the duration of one AI call (409 if taken)."""
    store = _store()
    try:
        store.begin_request(key)
    except RequestInFlight as e:
        raise HTTPException(status_code=409, detail=str(e))
    try:
        yield
    finally:
        store.end_request(key)


def _require_project(project_id: str) -> Project:
    project = _store().state.find_project(project_id)
    if project is None:
        raise HTTPException(status_code=404, detail=f"Project '{project_id}' not found")
    return project


# ─────────────────────────────────────────────────────────────
#  Routes — Pages
# ─────────────────────────────────────────────────────────────

@app.get("/")
async def index():
    """Serve the dashboard SPA."""
    return FileResponse(os.path.join(STATIC_DIR, "index.html"))


# ─────────────────────────────────────────────────────────────
#  Routes — State & Views
# ─────────────────────────────────────────────────────────────

@app.get("/api/state")
async def api_state():
    data = _store().state.to_dict()
    data["currentUser"] = _settings().current_user().to_dict()
    return JSONResponse(data)


@app.put("/api/view")
async def api_view(req: ViewRequest):
    state = _store().dispatch(ChangeView(req.view))
    return JSONResponse({"currentView": state.current_view.value})


@app.get("/api/dashboard")
async def api_dashboard():
    return JSONResponse(dashboard_summary(_store().state.tasks))


# ─────────────────────────────────────────────────────────────
#  Routes — Projects & Tasks
# ─────────────────────────────────────────────────────────────

@app.get("/api/projects")
async def api_projects():
    return JSONResponse([p.to_dict() for p in _store().state.projects])


@app.post("/api/projects", status_code=201)
async def api_create_project(req: ProjectRequest):
    project = Project(new_id(), req.name, req.description, req.color)
    _store().dispatch(AddProject(project))
    return JSONResponse(project.to_dict(), status_code=201)


@app.delete("/api/projects/{project_id}")
async def api_delete_project(project_id: str):
    _require_project(project_id)
    _store().dispatch(DeleteProject(project_id))
    return JSONResponse({"deleted": project_id})


@app.get("/api/projects/{project_id}/board")
async def api_board(project_id: str):
    project = _require_project(project_id)
    return JSONResponse({
        "project": project.to_dict(),
        "columns": board_columns(_store().state.tasks, project_id),
    })


@app.post("/api/projects/{project_id}/generate")
async def api_generate(project_id: str, req: GenerateRequest):
    """Ask the assistant to break a prompt into tasks for this project.

    The project may be deleted while the model is thinking; its suggestions
    are then dropped and the request answers 404.
    """
    _require_project(project_id)
    with _in_flight(f"subtasks:{project_id}"):
        result = await asyncio.to_thread(_assistant().subtasks_result, req.prompt)

    _require_project(project_id)
    store = _store()
    before = len(store.state.tasks)
    state = store.dispatch(AddSuggestedTasks(project_id, tuple(result.items), req.due_date))
    return JSONResponse({
        "outcome": result.outcome.value,
        "tasks": [t.to_dict() for t in state.tasks[before:]],
    })


@app.post("/api/tasks", status_code=201)
async def api_add_task(req: TaskRequest):
    _require_project(req.project_id)
    task = Task.for_project(
        req.project_id,
        req.title,
        status=req.status,
        priority=req.priority,
        description=req.description,
        due_date=req.due_date,
    )
    _store().add_task(task)
    return JSONResponse(task.to_dict(), status_code=201)


@app.patch("/api/tasks/{task_id}")
async def api_update_task(task_id: str, req: StatusRequest):
    state = _store().update_task_status(task_id, req.status)
    task = state.find_task(task_id)
    if task is None:
        raise HTTPException(status_code=404, detail=f"Task '{task_id}' not found")
    return JSONResponse(task.to_dict())


@app.delete("/api/tasks/{task_id}")
async def api_delete_task(task_id: str):
    _store().delete_task(task_id)
    return JSONResponse({"deleted": task_id})


# ─────────────────────────────────────────────────────────────
#  Routes — Routines
# ─────────────────────────────────────────────────────────────

@app.get("/api/routines")
async def api_routines():
    routines = _store().state.routines
    return JSONResponse({
        "routines": [r.to_dict() for r in routines],
        "progress": routine_progress(routines),
    })


@app.post("/api/routines", status_code=201)
async def api_add_routine(req: RoutineRequest):
    routine = _store().add_routine(req.title)
    return JSONResponse(routine.to_dict(), status_code=201)


@app.post("/api/routines/suggest")
async def api_suggest_routines(req: SuggestRequest):
    with _in_flight("routines"):
        result = await asyncio.to_thread(_assistant().routine_result, req.goal)

    store = _store()
    before = len(store.state.tasks)
    state = store.dispatch(AddSuggestedRoutines(tuple(result.items)))
    return JSONResponse({
        "outcome": result.outcome.value,
        "routines": [t.to_dict() for t in state.tasks[before:]],
    })


@app.post("/api/routines/{task_id}/toggle")
async def api_toggle_routine(task_id: str):
    state = _store().toggle_routine(task_id)
    task = state.find_task(task_id)
    if task is None:
        raise HTTPException(status_code=404, detail=f"Routine '{task_id}' not found")
    return JSONResponse(task.to_dict())


# ─────────────────────────────────────────────────────────────
#  Routes — Team Chat
# ─────────────────────────────────────────────────────────────

@app.get("/api/messages")
async def api_messages():
    return JSONResponse([m.to_dict() for m in _store().state.messages])


@app.post("/api/messages", status_code=201)
async def api_post_message(req: MessageRequest):
    """Append a message; an @AI mention also appends the assistant's reply.

    The user's message is always kept. The transcript is built from the log
    as it was before this message, plus the new message, on every send.
    While another reply is still pending the mention gets no reply and the
    outcome is ``"busy"``.
    """
    store = _store()
    user = _settings().current_user()
    sender = req.sender or user.name
    avatar = None if req.sender else user.avatar

    history = build_transcript(store.state.messages, req.content, sender)
    message = Message(new_id(), sender, req.content, avatar=avatar)
    store.dispatch(PostMessage(message))

    if not mentions_ai(req.content):
        return JSONResponse({"messages": [message.to_dict()], "outcome": None}, status_code=201)

    try:
        store.begin_request("chat")
    except RequestInFlight:
        logger.info("Chat reply already pending; skipping reply to %s", message.id)
        return JSONResponse({"messages": [message.to_dict()], "outcome": CHAT_BUSY}, status_code=201)

    try:
        result = await asyncio.to_thread(_assistant().chat_result, history, req.content)
        reply = Message(new_id(), AI_SENDER, result.text, is_ai=True)
        store.dispatch(PostMessage(reply))
    finally:
        store.end_request("chat")

    return JSONResponse(
        {"messages": [message.to_dict(), reply.to_dict()], "outcome": result.outcome.value},
        status_code=201,
    )


# ─────────────────────────────────────────────────────────────
#  Routes — Providers
# ─────────────────────────────────────────────────────────────

@app.get("/api/providers")
async def api_providers():
    """Return available AI providers and the one in use."""
    assistant = _assistant()
    return JSONResponse({
        "providers": list_providers(),
        "active": assistant.provider.name,
        "model": assistant.provider.model,
    })


# ─────────────────────────────────────────────────────────────
#  Startup
# ─────────────────────────────────────────────────────────────

def run_server(port: int = 3000, open_browser: bool = True, settings: Optional[Settings] = None):
    """Launch the Neurotech Dashboard server."""
    import uvicorn

    configure(settings)

    if open_browser:
        def _open():
            import time
            time.sleep(1.5)
            webbrowser.open(f"http://localhost:{port}")
        threading.Thread(target=_open, daemon=True).start()

    print(f"\n─── Neurotech Dashboard ───")
    print(f"  http://localhost:{port}")
    print(f"  Press Ctrl+C to stop\n")

    uvicorn.run(app, host="0.0.0.0", port=port, log_level="warning")


if __name__ == "__main__":
    run_server(port=Settings.from_env().port)
