"""Base LLM provider abstract class."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from ...errors import UpstreamError
from ...models import ConversationTurn, ToolCall

logger = logging.getLogger(__name__)


class ProviderType(str, Enum):
    """Supported LLM provider types."""
    GEMINI = "gemini"
    GROQ = "groq"


class StopReason(str, Enum):
    """Why the model stopped generating."""
    END_TURN = "end_turn"
    TOOL_USE = "tool_use"
    MAX_TOKENS = "max_tokens"
    SAFETY = "safety"


@dataclass
class LLMResponse:
    """Provider-neutral model response."""
    content: Optional[str] = None
    tool_calls: list[ToolCall] = field(default_factory=list)
    stop_reason: StopReason = StopReason.END_TURN
    provider: ProviderType = ProviderType.GEMINI
    raw_response: Any = None

    @property
    def has_tool_calls(self) -> bool:
        return len(self.tool_calls) > 0

    @property
    def text(self) -> str:
        return self.content or ""


class BaseLLMProvider(ABC):
    """
    One language-model backend.

    Subclasses implement ``_complete`` against their SDK. SDK failures are
    logged here and surfaced as UpstreamError, so callers see one error type
    whichever provider is configured.
    """

    provider_type: ProviderType

    def __init__(self, api_key: str, model: str):
        self.api_key = api_key
        self.model = model

    @abstractmethod
    async def _complete(
        self,
        messages: list[ConversationTurn],
        system_prompt: str,
        tools: Optional[list[dict[str, Any]]],
        max_tokens: int,
    ) -> LLMResponse:
        """Call the SDK and translate its response."""

    async def generate_response(
        self,
        messages: list[ConversationTurn],
        system_prompt: str,
        tools: Optional[list[dict[str, Any]]] = None,
        max_tokens: int = 1024,
    ) -> LLMResponse:
        """
        Generate a response from the LLM.

        Args:
            messages: Conversation history
            system_prompt: System instructions
            tools: Optional tool declarations in Anthropic format
            max_tokens: Maximum tokens in response

        Raises:
            UpstreamError: If the provider call fails
        """
        try:
            response = await self._complete(messages, system_prompt, tools, max_tokens)
        except UpstreamError:
            raise
        except Exception as e:
            logger.error(f"{self.provider_type.value} API error ({self.model}): {e}")
            raise UpstreamError(f"{self.provider_type.value} request failed: {e}") from e

        if response.stop_reason in (StopReason.MAX_TOKENS, StopReason.SAFETY):
            logger.warning(f"{self.provider_type.value} stopped early: {response.stop_reason.value}")
        return response

    @abstractmethod
    async def health_check(self) -> bool:
        """True if the provider answers with the configured model."""
