"""
Anthropic Provider — Claude models
===================================
Uses the anthropic SDK.
Install: pip install anthropic

The Messages API requires alternating roles starting with ``user``, so
transcripts are normalized before sending: consecutive turns from the same
side are merged and a leading assistant turn is dropped.
"""

from __future__ import annotations

from typing import Optional, Sequence

from neurotech.models import ChatTurn
from neurotech.providers.base import (
    BaseProvider, ProviderConfig, ProviderResponse, Schema,
    assistant_role, schema_instruction,
)


def alternate_roles(messages: list[dict]) -> list[dict]:
    """Merge same-role neighbours; drop assistant turns before the first user."""
    merged: list[dict] = []
    for msg in messages:
        if not merged and msg["role"] != "user":
            continue
        if merged and merged[-1]["role"] == msg["role"]:
            merged[-1] = {
                "role": msg["role"],
                "content": merged[-1]["content"] + "\n" + msg["content"],
            }
        else:
            merged.append(dict(msg))
    return merged


class AnthropicProvider(BaseProvider):
    """Anthropic AI provider (Claude models)."""

    DEFAULT_MODEL = "claude-sonnet-4-20250514"

    def __init__(self, config: ProviderConfig):
        super().__init__(config)
        if not config.model:
            config.model = self.DEFAULT_MODEL
        self._client = None

    def _get_client(self):
        if self._client is None:
            try:
                import anthropic
                kwargs = {"api_key": self.config.api_key}
                if self.config.base_url:
                    kwargs["base_url"] = self.config.base_url
                self._client = anthropic.Anthropic(**kwargs)
            except ImportError:
                raise ImportError(
                    "Anthropic provider requires 'anthropic'. "
                    "Install with: pip install anthropic"
                )
        return self._client

    def generate(
        self,
        prompt: str,
        system_instruction: str = "",
        response_schema: Optional[Schema] = None,
    ) -> ProviderResponse:
        system_parts = [s for s in (system_instruction,) if s]
        if response_schema:
            system_parts.append(schema_instruction(response_schema))
        return self._create(
            [{"role": "user", "content": prompt}],
            "\n\n".join(system_parts),
        )

    def chat(
        self,
        history: Sequence[ChatTurn],
        message: str,
        system_instruction: str = "",
    ) -> ProviderResponse:
        messages = [{"role": assistant_role(t), "content": t.text} for t in history]
        messages.append({"role": "user", "content": message})
        return self._create(alternate_roles(messages), system_instruction)

    def _create(self, messages: list[dict], system: str) -> ProviderResponse:
        try:
            client = self._get_client()

            kwargs = {
                "model": self.config.model,
                "max_tokens": self.config.max_tokens,
                "messages": messages,
            }
            if system:
                kwargs["system"] = system
            if self.config.temperature is not None:
                kwargs["temperature"] = self.config.temperature

            response = client.messages.create(**kwargs)

            content = ""
            if response.content:
                content = "".join(
                    block.text for block in response.content
                    if hasattr(block, "text")
                )

            return ProviderResponse(
                content=content,
                model=self.config.model,
                provider="anthropic",
                tokens_used=(response.usage.input_tokens + response.usage.output_tokens
                             if response.usage else 0),
                prompt_tokens=(response.usage.input_tokens if response.usage else 0),
                completion_tokens=(response.usage.output_tokens if response.usage else 0),
                finish_reason=response.stop_reason or "stop",
                raw_response=response,
            )
        except Exception as e:
            return ProviderResponse(
                content="",
                model=self.config.model,
                provider="anthropic",
                error=str(e) or type(e).__name__,
            )

    def is_available(self) -> bool:
        return bool(self.config.api_key)
