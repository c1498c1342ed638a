"""LLM Provider implementations."""

from .base_provider import BaseLLMProvider, LLMResponse, ProviderType, StopReason
from .gemini_provider import GeminiProvider
from .groq_provider import GroqProvider

__all__ = [
    "BaseLLMProvider",
    "LLMResponse",
    "ProviderType",
    "StopReason",
    "GeminiProvider",
    "GroqProvider",
]
