"""
AI Provider Base — Abstract Interface
=======================================
Provider-agnostic interface for the dashboard's generative-AI calls.
All providers (Gemini, OpenAI, Anthropic, Ollama) implement this.

Two call shapes are supported:
    generate() — one-shot prompt, optionally constrained to a JSON schema
    chat()     — conversational call seeded with a role-tagged transcript

Providers never raise from generate()/chat(). Transport problems come back
as a ProviderResponse with ``error`` set; deciding what to do about them is
the caller's job.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Any, Sequence

from neurotech.models import ChatTurn, ROLE_MODEL


@dataclass
class ProviderConfig:
    """Configuration for an AI provider.

    Only populate the fields that apply to your chosen backend.
    """

    provider_name: str          # "gemini", "openai", "anthropic", "ollama"
    model: str = ""             # Model name (e.g., "gemini-2.5-flash", "gpt-4o")
    api_key: str = ""           # API key (not needed for Ollama)
    base_url: str = ""          # Custom endpoint (for Ollama, proxies, etc.)
    temperature: float = 0.7
    max_tokens: int = 2048
    extra: dict[str, Any] = field(default_factory=dict)  # Provider-specific options


@dataclass
class ProviderResponse:
    """Standardized response from any AI provider."""

    content: str                # The generated text
    model: str = ""             # Which model was actually used
    provider: str = ""          # Which provider backend
    tokens_used: int = 0
    prompt_tokens: int = 0
    completion_tokens: int = 0
    finish_reason: str = ""     # "stop", "length", "error", etc.
    raw_response: Any = None    # The raw provider response object
    error: Optional[str] = None # Error message if failed

    @property
    def success(self) -> bool:
        return self.error is None and len(self.content) > 0


# JSON Schema subset understood by every provider:
#   {"type": "array", "items": {"type": "object",
#    "properties": {"title": {"type": "string", "description": "..."},
#                   "priority": {"type": "string", "enum": [...]}},
#    "required": ["title"]}}
Schema = dict[str, Any]


def schema_instruction(schema: Schema) -> str:
    """Plain-text rendering of a schema for providers without native support."""
    return (
        "Respond with JSON only, no prose and no code fences. "
        "The JSON must match this schema:\n" + json.dumps(schema, indent=2)
    )


def assistant_role(turn: ChatTurn) -> str:
    """Map a transcript role onto the OpenAI/Anthropic/Ollama vocabulary."""
    return "assistant" if turn.role == ROLE_MODEL else "user"


class BaseProvider(ABC):
    """Abstract base class for AI providers.

    All providers must implement:
        - generate(): Send a prompt, optionally with a JSON output schema
        - chat(): Continue a conversation given its transcript
        - is_available(): Check if the provider is configured and reachable
    """

    def __init__(self, config: ProviderConfig):
        self.config = config

    @abstractmethod
    def generate(
        self,
        prompt: str,
        system_instruction: str = "",
        response_schema: Optional[Schema] = None,
    ) -> ProviderResponse:
        """Generate a response from the AI model.

        Args:
            prompt: The user prompt.
            system_instruction: Optional system prompt.
            response_schema: When given, the model is asked to answer with
                JSON text matching this schema.

        Returns:
            ProviderResponse with the generated content.
        """
        ...

    @abstractmethod
    def chat(
        self,
        history: Sequence[ChatTurn],
        message: str,
        system_instruction: str = "",
    ) -> ProviderResponse:
        """Send ``message`` in a conversation seeded with ``history``."""
        ...

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the provider is configured and reachable."""
        ...

    @property
    def name(self) -> str:
        return self.config.provider_name

    @property
    def model(self) -> str:
        return self.config.model
