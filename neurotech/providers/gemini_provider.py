"""
Gemini Provider — Google AI
============================
Uses the google-genai SDK.
Install: pip install google-genai

Structured output is requested natively: the schema is translated into a
``types.Schema`` and sent with ``response_mime_type="application/json"``.
Conversations use ``client.chats.create(history=...)``.
"""

from __future__ import annotations

from typing import Optional, Sequence

from neurotech.models import ChatTurn
from neurotech.providers.base import BaseProvider, ProviderConfig, ProviderResponse, Schema


def to_gemini_schema(schema: Schema):
    """Translate a JSON-Schema dict into a google-genai ``types.Schema``."""
    from google.genai import types as genai_types

    kwargs = {"type": genai_types.Type(schema["type"].upper())}
    if "description" in schema:
        kwargs["description"] = schema["description"]
    if "enum" in schema:
        kwargs["enum"] = list(schema["enum"])
    if "items" in schema:
        kwargs["items"] = to_gemini_schema(schema["items"])
    if "properties" in schema:
        kwargs["properties"] = {
            name: to_gemini_schema(prop) for name, prop in schema["properties"].items()
        }
    if "required" in schema:
        kwargs["required"] = list(schema["required"])
    return genai_types.Schema(**kwargs)


def to_gemini_history(turns: Sequence[ChatTurn]) -> list[dict]:
    """Transcript in the ``[{role, parts: [{text}]}]`` shape Gemini expects."""
    return [{"role": t.role, "parts": [{"text": t.text}]} for t in turns]


class GeminiProvider(BaseProvider):
    """Google Gemini AI provider."""

    DEFAULT_MODEL = "gemini-2.5-flash"

    def __init__(self, config: ProviderConfig):
        super().__init__(config)
        if not config.model:
            config.model = self.DEFAULT_MODEL
        self._client = None

    def _get_client(self):
        if self._client is None:
            try:
                from google import genai
                self._client = genai.Client(api_key=self.config.api_key)
            except ImportError:
                raise ImportError(
                    "Gemini provider requires 'google-genai'. "
                    "Install with: pip install google-genai"
                )
        return self._client

    def generate(
        self,
        prompt: str,
        system_instruction: str = "",
        response_schema: Optional[Schema] = None,
    ) -> ProviderResponse:
        try:
            from google.genai import types as genai_types

            client = self._get_client()
            gen_config = genai_types.GenerateContentConfig(
                temperature=self.config.temperature,
                max_output_tokens=self.config.max_tokens,
            )
            if system_instruction:
                gen_config.system_instruction = system_instruction
            if response_schema:
                gen_config.response_mime_type = "application/json"
                gen_config.response_schema = to_gemini_schema(response_schema)

            response = client.models.generate_content(
                model=self.config.model,
                contents=prompt,
                config=gen_config,
            )
            return self._wrap(response)
        except Exception as e:
            return self._failure(e)

    def chat(
        self,
        history: Sequence[ChatTurn],
        message: str,
        system_instruction: str = "",
    ) -> ProviderResponse:
        try:
            from google.genai import types as genai_types

            client = self._get_client()
            gen_config = genai_types.GenerateContentConfig(
                temperature=self.config.temperature,
                max_output_tokens=self.config.max_tokens,
            )
            if system_instruction:
                gen_config.system_instruction = system_instruction

            session = client.chats.create(
                model=self.config.model,
                history=to_gemini_history(history),
                config=gen_config,
            )
            response = session.send_message(message)
            return self._wrap(response)
        except Exception as e:
            return self._failure(e)

    def _wrap(self, response) -> ProviderResponse:
        usage = getattr(response, "usage_metadata", None)
        prompt_tokens = getattr(usage, "prompt_token_count", 0) or 0
        completion_tokens = getattr(usage, "candidates_token_count", 0) or 0
        return ProviderResponse(
            content=response.text or "",
            model=self.config.model,
            provider="gemini",
            tokens_used=prompt_tokens + completion_tokens,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            raw_response=response,
            finish_reason="stop",
        )

    def _failure(self, error: Exception) -> ProviderResponse:
        return ProviderResponse(
            content="",
            model=self.config.model,
            provider="gemini",
            finish_reason="error",
            error=str(error) or type(error).__name__,
        )

    def is_available(self) -> bool:
        return bool(self.config.api_key)
