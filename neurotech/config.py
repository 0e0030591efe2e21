"""
Settings — Environment-Driven Configuration
============================================
Everything the dashboard needs to know about its environment lives here:
which AI provider to talk to, the secret API key, the display name of the
current user, and server/logging knobs.

Environment variables:
    NEUROTECH_PROVIDER   AI provider name (default: gemini)
    NEUROTECH_MODEL      Model name (default: provider default)
    NEUROTECH_API_KEY    API key (falls back to API_KEY, GEMINI_API_KEY,
                         GOOGLE_API_KEY)
    NEUROTECH_BASE_URL   Custom endpoint (Ollama, proxies)
    NEUROTECH_USER       Display name of the current user
    NEUROTECH_LOG_LEVEL  Logging level (default: INFO)
    NEUROTECH_PORT       HTTP port (default: 3000)

A missing key is not an error here: every AI call simply fails soft.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from neurotech.models import User
from neurotech.providers.base import ProviderConfig

API_KEY_VARS = ("NEUROTECH_API_KEY", "API_KEY", "GEMINI_API_KEY", "GOOGLE_API_KEY")

DEFAULT_USER = "Alex Developer"
DEFAULT_PORT = 3000
DEFAULT_AVATAR = "https://picsum.photos/100/100"


def _first_set(env: Mapping[str, str], names) -> str:
    for name in names:
        value = env.get(name, "")
        if value:
            return value
    return ""


@dataclass
class Settings:
    provider: str = "gemini"
    model: str = ""
    api_key: str = ""
    base_url: str = ""
    user_name: str = DEFAULT_USER
    log_level: str = "INFO"
    port: int = DEFAULT_PORT

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> Settings:
        """Read settings from ``env`` (defaults to ``os.environ``)."""
        env = os.environ if env is None else env

        port_raw = env.get("NEUROTECH_PORT", "")
        try:
            port = int(port_raw) if port_raw else DEFAULT_PORT
        except ValueError:
            raise ValueError(f"NEUROTECH_PORT must be an integer, got {port_raw!r}")

        return cls(
            provider=env.get("NEUROTECH_PROVIDER", "") or "gemini",
            model=env.get("NEUROTECH_MODEL", ""),
            api_key=_first_set(env, API_KEY_VARS),
            base_url=env.get("NEUROTECH_BASE_URL", ""),
            user_name=env.get("NEUROTECH_USER", "") or DEFAULT_USER,
            log_level=(env.get("NEUROTECH_LOG_LEVEL", "") or "INFO").upper(),
            port=port,
        )

    def current_user(self) -> User:
        return User(id="me", name=self.user_name, avatar=DEFAULT_AVATAR)

    def provider_config(self) -> ProviderConfig:
        return ProviderConfig(
            provider_name=self.provider,
            model=self.model,
            api_key=self.api_key,
            base_url=self.base_url,
        )
