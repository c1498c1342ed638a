"""Google Gemini LLM provider implementation."""

import logging
from typing import Any, Optional

from google import genai
from google.genai import types

from ...models import ConversationTurn, ToolCall
from .base_provider import BaseLLMProvider, LLMResponse, ProviderType, StopReason
from ..tool_converter import anthropic_to_gemini, convert_messages_to_gemini

logger = logging.getLogger(__name__)

_STOP_REASONS = {
    types.FinishReason.MAX_TOKENS: StopReason.MAX_TOKENS,
    types.FinishReason.SAFETY: StopReason.SAFETY,
}


class GeminiProvider(BaseLLMProvider):
    """Google Gemini LLM provider."""

    provider_type = ProviderType.GEMINI

    def __init__(self, api_key: str, model: str = "gemini-2.5-flash"):
        """
        Initialize Gemini provider.

        Args:
            api_key: Google AI API key
            model: Model name (default: gemini-2.5-flash)
        """
        super().__init__(api_key, model)
        self.client = genai.Client(api_key=api_key)
        self._tool_cache: dict[tuple, list[types.Tool]] = {}

    def _declare(self, tools: list[dict[str, Any]]) -> list[types.Tool]:
        key = tuple(t["name"] for t in tools)
        if key not in self._tool_cache:
            self._tool_cache[key] = [types.Tool(function_declarations=[
                types.FunctionDeclaration(
                    name=decl["name"],
                    description=decl["description"],
                    parameters=decl.get("parameters"),
                )
                for decl in anthropic_to_gemini(tools)
            ])]
        return self._tool_cache[key]

    async def _complete(
        self,
        messages: list[ConversationTurn],
        system_prompt: str,
        tools: Optional[list[dict[str, Any]]],
        max_tokens: int,
    ) -> LLMResponse:
        system_instruction, contents = convert_messages_to_gemini(messages, system_prompt)

        config = types.GenerateContentConfig(
            system_instruction=system_instruction,
            max_output_tokens=max_tokens,
            temperature=0.4,
        )
        if tools:
            config.tools = self._declare(tools)
            config.tool_config = types.ToolConfig(
                function_calling_config=types.FunctionCallingConfig(mode="AUTO")
            )
            # Tool calls are dispatched by the orchestrator, never by the SDK.
            config.automatic_function_calling = types.AutomaticFunctionCallingConfig(disable=True)

        response = await self.client.aio.models.generate_content(
            model=self.model,
            contents=contents,
            config=config,
        )
        return self._parse_response(response)

    def _parse_response(self, response: Any) -> LLMResponse:
        """Collect text parts and function calls from the first candidate."""
        if not response.candidates:
            return LLMResponse(provider=ProviderType.GEMINI, raw_response=response)

        candidate = response.candidates[0]
        stop_reason = _STOP_REASONS.get(candidate.finish_reason, StopReason.END_TURN)

        texts: list[str] = []
        tool_calls: list[ToolCall] = []
        parts = candidate.content.parts if candidate.content and candidate.content.parts else []
        for part in parts:
            if getattr(part, "text", None):
                texts.append(part.text)
            fc = getattr(part, "function_call", None)
            if fc:
                # Gemini often omits call ids; results are matched back by name.
                tool_calls.append(ToolCall(
                    id=fc.id or f"call_{fc.name}_{len(tool_calls)}",
                    name=fc.name,
                    arguments=dict(fc.args or {}),
                ))

        return LLMResponse(
            content="".join(texts) or None,
            tool_calls=tool_calls,
            stop_reason=StopReason.TOOL_USE if tool_calls else stop_reason,
            provider=ProviderType.GEMINI,
            raw_response=response,
        )

    async def health_check(self) -> bool:
        try:
            await self.client.aio.models.get(model=self.model)
            return True
        except Exception as e:
            logger.warning(f"Gemini health check failed: {e}")
            return False
