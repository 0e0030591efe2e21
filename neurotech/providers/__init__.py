"""
AI Provider Abstraction Layer
==============================
Provider-agnostic transport for the dashboard assistant.
Supports Gemini, OpenAI, Anthropic, and Ollama.
"""

from neurotech.providers.base import BaseProvider, ProviderConfig, ProviderResponse, Schema
from neurotech.providers.registry import get_provider, list_providers, register_provider

__all__ = [
    "BaseProvider", "ProviderConfig", "ProviderResponse", "Schema",
    "get_provider", "list_providers", "register_provider",
]
