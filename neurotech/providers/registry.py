"""
Provider Registry
=================
Maps a provider name from Settings ("gemini", "ollama", ...) to the class
that speaks to it.

Built-in backends are imported on first use only. A missing SDK therefore
hides that one backend instead of breaking ``import neurotech``. Extra
backends (tests, in-house gateways) are added with ``register_provider``.
"""

from __future__ import annotations

import importlib
import logging
from typing import Type

from neurotech.providers.base import BaseProvider, ProviderConfig

logger = logging.getLogger(__name__)

# name -> (module, class) for the backends shipped with neurotech
BUILTIN_PROVIDERS: dict[str, tuple[str, str]] = {
    "gemini": ("neurotech.providers.gemini_provider", "GeminiProvider"),
    "openai": ("neurotech.providers.openai_provider", "OpenAIProvider"),
    "anthropic": ("neurotech.providers.anthropic_provider", "AnthropicProvider"),
    "ollama": ("neurotech.providers.ollama_provider", "OllamaProvider"),
}

_providers: dict[str, Type[BaseProvider]] = {}


def register_provider(name: str, provider_class: Type[BaseProvider]):
    _providers[name.lower()] = provider_class


def _load_builtin(name: str) -> bool:
    """Import a shipped backend into the registry; False if unknown or unusable."""
    if name not in BUILTIN_PROVIDERS:
        return False
    module_name, class_name = BUILTIN_PROVIDERS[name]
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        logger.debug("Provider %s unavailable: %s", name, e)
        return False
    register_provider(name, getattr(module, class_name))
    return True


def get_provider(config: ProviderConfig) -> BaseProvider:
    """Build the provider named in ``config``.

    Raises:
        ValueError: No backend is registered or shipped under that name.
    """
    name = config.provider_name.lower()
    if name not in _providers:
        _load_builtin(name)

    provider_class = _providers.get(name)
    if provider_class is None:
        known = ", ".join(list_providers()) or "none"
        raise ValueError(f"Unknown provider '{name}' (known: {known})")
    return provider_class(config)


def list_providers() -> list[str]:
    """Names of every usable backend, shipped or registered."""
    for name in BUILTIN_PROVIDERS:
        if name not in _providers:
            _load_builtin(name)
    return sorted(_providers)
