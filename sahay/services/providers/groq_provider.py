"""Groq LLM provider implementation."""

import json
import logging
from typing import Any, Optional

from groq import AsyncGroq

from ...models import ConversationTurn, ToolCall
from .base_provider import BaseLLMProvider, LLMResponse, ProviderType, StopReason
from ..tool_converter import anthropic_to_groq, convert_messages_to_groq

logger = logging.getLogger(__name__)

_STOP_REASONS = {
    "length": StopReason.MAX_TOKENS,
    "content_filter": StopReason.SAFETY,
    "tool_calls": StopReason.TOOL_USE,
}


def _parse_arguments(raw: Optional[str]) -> dict[str, Any]:
    # Unparseable arguments become an empty dict, which the tool executor
    # then rejects as missing fields.
    try:
        args = json.loads(raw or "{}")
    except json.JSONDecodeError:
        logger.warning(f"Groq returned non-JSON tool arguments: {raw!r}")
        return {}
    return args if isinstance(args, dict) else {}


class GroqProvider(BaseLLMProvider):
    """Groq LLM provider (OpenAI-compatible API)."""

    provider_type = ProviderType.GROQ

    def __init__(self, api_key: str, model: str = "llama-3.3-70b-versatile"):
        """
        Initialize Groq provider.

        Args:
            api_key: Groq API key
            model: Model name (default: llama-3.3-70b-versatile)
        """
        super().__init__(api_key, model)
        self.client = AsyncGroq(api_key=api_key, max_retries=0)

    async def _complete(
        self,
        messages: list[ConversationTurn],
        system_prompt: str,
        tools: Optional[list[dict[str, Any]]],
        max_tokens: int,
    ) -> LLMResponse:
        params: dict[str, Any] = {
            "model": self.model,
            "messages": convert_messages_to_groq(messages, system_prompt),
            "max_tokens": max_tokens,
            "temperature": 0.4,
        }
        if tools:
            params["tools"] = anthropic_to_groq(tools)
            params["tool_choice"] = "auto"

        response = await self.client.chat.completions.create(**params)
        return self._parse_response(response)

    def _parse_response(self, response: Any) -> LLMResponse:
        """Translate the first choice into an LLMResponse."""
        if not response.choices:
            return LLMResponse(provider=ProviderType.GROQ, raw_response=response)

        choice = response.choices[0]
        message = choice.message
        tool_calls = [
            ToolCall(
                id=tc.id,
                name=tc.function.name,
                arguments=_parse_arguments(tc.function.arguments),
            )
            for tc in (message.tool_calls if message and message.tool_calls else [])
        ]

        stop_reason = _STOP_REASONS.get(choice.finish_reason, StopReason.END_TURN)
        if tool_calls:
            stop_reason = StopReason.TOOL_USE

        return LLMResponse(
            content=message.content if message and message.content else None,
            tool_calls=tool_calls,
            stop_reason=stop_reason,
            provider=ProviderType.GROQ,
            raw_response=response,
        )

    async def health_check(self) -> bool:
        try:
            models = await self.client.models.list()
            return any(m.id == self.model for m in models.data)
        except Exception as e:
            logger.warning(f"Groq health check failed: {e}")
            return False
