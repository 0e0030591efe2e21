"""
Neurotech — Project & Routine Manager
======================================
Backend for a single-page productivity dashboard: project kanban boards,
a daily-routine habit tracker, a summary dashboard, and a team chat with an
AI assistant invoked by mentioning @AI.

Architecture:
    Domain Model     — Project, Task (project card or routine), Message
    State Reducer    — AppState + actions, applied by a Store
    Chat Context     — Message log → role-tagged transcript
    Assistant        — Fail-soft AI suggestions and chat replies
    Providers        — Gemini, OpenAI, Anthropic, Ollama
"""

__version__ = "0.1.0"

from neurotech.models import (
    Project, Task, Message, ChatTurn, TaskStatus, Priority, View,
    ProjectTask, Routine, new_id,
)
from neurotech.state import AppState, Store, reduce, RequestInFlight
from neurotech.chat_context import build_transcript, mentions_ai
from neurotech.assistant import Assistant, GenerationResult, Outcome, Suggestion

__all__ = [
    "Project", "Task", "Message", "ChatTurn", "TaskStatus", "Priority", "View",
    "ProjectTask", "Routine", "new_id",
    "AppState", "Store", "reduce", "RequestInFlight",
    "build_transcript", "mentions_ai",
    "Assistant", "GenerationResult", "Outcome", "Suggestion",
]
