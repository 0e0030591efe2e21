"""
AI Generation Adapter — Prompts In, Structured Suggestions Out
===============================================================
Three request/response operations over a generative-AI provider:

    generate_subtasks()  — project description → [{title, priority}]
    suggest_routine()    — personal goal       → [{title}]
    get_chat_response()  — chat transcript     → reply text

Fail-soft contract:
    The public operations never raise. Transport failures and malformed or
    schema-violating model output collapse into a usable default: an empty
    list for suggestions, a fixed fallback sentence for chat. The UI can
    treat "AI unavailable" as an ordinary state.

    Underneath, every call first produces a GenerationResult tagged with one
    of four outcomes, so callers and tests that care can tell "the model
    suggested nothing" apart from "the call failed":

        OK                 model answered and the answer validated
        EMPTY              model (or caller) supplied nothing to work with
        TRANSPORT_FAILURE  provider could not be reached / returned an error
        SCHEMA_FAILURE     answer was not JSON or did not match the schema
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, Literal, Optional, Sequence

from pydantic import BaseModel, ConfigDict, StringConstraints, TypeAdapter, ValidationError

from neurotech.models import ChatTurn, Priority
from neurotech.providers.base import BaseProvider, ProviderResponse, Schema

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = (
    "You are a helpful project management assistant named Neurotech AI. "
    "You help teams organize tasks, suggest workflows, and keep morale high. "
    "Keep responses concise."
)

CHAT_ERROR_REPLY = "Sorry, I couldn't process that request."
CHAT_EMPTY_REPLY = "I'm having trouble thinking right now."

SUBTASK_PROMPT = (
    "Break down the following project description into 3-5 actionable tasks. "
    "Return a JSON array.\n"
    "Project: {description}"
)
ROUTINE_PROMPT = (
    "Suggest 3 daily routine habits for someone who wants to: {goal}. Return JSON."
)

SUBTASK_SCHEMA: Schema = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "title": {"type": "string", "description": "A concise title for the task"},
            "priority": {
                "type": "string",
                "enum": [p.value for p in Priority],
                "description": "Suggested priority",
            },
        },
        "required": ["title", "priority"],
    },
}

ROUTINE_SCHEMA: Schema = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "title": {"type": "string"},
        },
        "required": ["title"],
    },
}


# ─────────────────────────────────────────────────────────────
#  Results
# ─────────────────────────────────────────────────────────────

class Outcome(str, Enum):
    OK = "ok"
    EMPTY = "empty"
    TRANSPORT_FAILURE = "transport_failure"
    SCHEMA_FAILURE = "schema_failure"


@dataclass(frozen=True)
class Suggestion:
    """One AI-suggested task or routine."""

    title: str
    priority: Priority = Priority.MEDIUM

    def to_dict(self) -> dict:
        return {"title": self.title, "priority": self.priority.value}


@dataclass
class GenerationResult:
    """Tagged outcome of a single assistant call."""

    outcome: Outcome
    items: list[Suggestion] = field(default_factory=list)
    text: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.OK

    @property
    def failed(self) -> bool:
        return self.outcome in (Outcome.TRANSPORT_FAILURE, Outcome.SCHEMA_FAILURE)


# ─────────────────────────────────────────────────────────────
#  Output validation
# ─────────────────────────────────────────────────────────────

Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class _SubtaskItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: Title
    priority: Literal["low", "medium", "high"]


class _RoutineItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: Title


_SUBTASKS = TypeAdapter(list[_SubtaskItem])
_ROUTINES = TypeAdapter(list[_RoutineItem])


def strip_code_fence(text: str) -> str:
    """Remove a surrounding ```json ... ``` fence some models add anyway."""
    stripped = text.strip()
    if not stripped.startswith("```"):
        return stripped
    lines = stripped.splitlines()
    lines = lines[1:]
    if lines and lines[-1].strip().startswith("```"):
        lines = lines[:-1]
    return "\n".join(lines).strip()


def parse_subtasks(text: str) -> list[Suggestion]:
    """Validate a subtask JSON array. Raises ValidationError on any mismatch."""
    items = _SUBTASKS.validate_json(strip_code_fence(text))
    return [Suggestion(title=i.title, priority=Priority(i.priority)) for i in items]


def parse_routines(text: str) -> list[Suggestion]:
    """Validate a routine JSON array. Raises ValidationError on any mismatch."""
    items = _ROUTINES.validate_json(strip_code_fence(text))
    return [Suggestion(title=i.title) for i in items]


# ─────────────────────────────────────────────────────────────
#  Assistant
# ─────────────────────────────────────────────────────────────

class Assistant:
    """Fail-soft facade over a BaseProvider."""

    def __init__(self, provider: BaseProvider):
        self.provider = provider

    # ─── Tagged results ───────────────────────────────────

    def subtasks_result(self, project_description: str) -> GenerationResult:
        if not project_description.strip():
            return GenerationResult(Outcome.EMPTY)
        prompt = SUBTASK_PROMPT.format(description=project_description)
        return self._structured(prompt, SUBTASK_SCHEMA, parse_subtasks, "subtasks")

    def routine_result(self, goal: str) -> GenerationResult:
        if not goal.strip():
            return GenerationResult(Outcome.EMPTY)
        prompt = ROUTINE_PROMPT.format(goal=goal)
        return self._structured(prompt, ROUTINE_SCHEMA, parse_routines, "routine")

    def chat_result(self, history: Sequence[ChatTurn], user_message: str) -> GenerationResult:
        if not user_message.strip():
            return GenerationResult(Outcome.EMPTY, text=CHAT_EMPTY_REPLY)

        response = self._call("chat", lambda: self.provider.chat(
            history, user_message, system_instruction=SYSTEM_INSTRUCTION,
        ))
        if response.error is not None:
            logger.warning("Chat error: %s", response.error)
            return GenerationResult(
                Outcome.TRANSPORT_FAILURE, text=CHAT_ERROR_REPLY, error=response.error,
            )
        if not response.content.strip():
            return GenerationResult(Outcome.EMPTY, text=CHAT_EMPTY_REPLY)
        return GenerationResult(Outcome.OK, text=response.content)

    # ─── Fail-soft operations ─────────────────────────────

    def generate_subtasks(self, project_description: str) -> list[Suggestion]:
        """Break a project description into suggested tasks ([] on failure)."""
        return self.subtasks_result(project_description).items

    def suggest_routine(self, goal: str) -> list[Suggestion]:
        """Suggest daily habits for a goal ([] on failure)."""
        return self.routine_result(goal).items

    def get_chat_response(self, history: Sequence[ChatTurn], user_message: str) -> str:
        """Reply to the newest chat message; always returns displayable text."""
        return self.chat_result(history, user_message).text

    # ─── Internals ────────────────────────────────────────

    def _structured(self, prompt: str, schema: Schema, parse, label: str) -> GenerationResult:
        response = self._call(label, lambda: self.provider.generate(prompt, response_schema=schema))
        if response.error is not None:
            logger.warning("Failed to generate %s: %s", label, response.error)
            return GenerationResult(Outcome.TRANSPORT_FAILURE, error=response.error)

        if not response.content.strip():
            return GenerationResult(Outcome.EMPTY)

        try:
            items = parse(response.content)
        except ValidationError as e:
            logger.warning("Model returned malformed %s: %s", label, e.errors(include_url=False))
            return GenerationResult(Outcome.SCHEMA_FAILURE, error=str(e))

        logger.info("Generated %d %s suggestion(s)", len(items), label)
        return GenerationResult(Outcome.OK, items=items)

    def _call(self, label: str, send) -> ProviderResponse:
        # Providers report failures in-band; a third-party provider that raises
        # is treated the same way.
        try:
            return send()
        except Exception as e:
            logger.exception("Provider %s raised during %s call", self.provider.name, label)
            return ProviderResponse(content="", provider=self.provider.name, error=str(e) or type(e).__name__)
