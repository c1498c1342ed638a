"""LLM Service over the configured provider (Gemini or Groq)."""

import logging
from datetime import date
from typing import Optional

from ..errors import ConfigurationError
from ..models import ConversationTurn
from ..tools.definitions import APPOINTMENT_TOOLS
from .providers import BaseLLMProvider, GeminiProvider, GroqProvider, LLMResponse, ProviderType

logger = logging.getLogger(__name__)


def get_system_prompt(
    agent_name: str = "Sahay",
    hospital_name: str = "Prudence Hospitals",
    today: Optional[date] = None,
) -> str:
    """Generate the system prompt for the LLM."""
    current_date = (today or date.today()).strftime("%Y-%m-%d")
    weekday = (today or date.today()).strftime("%A")

    return f"""You are {agent_name}, a friendly and efficient AI medical appointment assistant for {hospital_name}. Your role is to help users find doctors, check availability, and book, cancel, or reschedule appointments using your tools.

## Context
- The current date is {current_date} ({weekday}).

## Conversation Guidelines
1. Be flexible with date and time formats. A user might say "next Friday" or "tomorrow at 5pm". Interpret this and convert it to YYYY-MM-DD and HH:MM (24-hour) for your tools.
2. Do not repeatedly ask for a specific format. If you are unsure, ask a clarifying question, e.g. "Which month for the 15th?".
3. Gather all necessary information (patient name, phone number, doctor or specialty, date and time) through conversation before calling a tool.
4. When showing availability, ask which part of the day suits the user first (get_availability with view='periods'), then offer a few times from that period.
5. If a tool reports that a slot is taken or a doctor or appointment cannot be found, explain it plainly and offer alternatives.
6. After a successful action, confirm the details with the user.

## Tool Usage
- Use list_specialties when the user does not know which specialist they need
- Use find_doctors to list doctors for a specialty
- Use get_availability to show free times for a doctor on a date
- Use book_appointment once the user confirms a specific slot
- Use cancel_appointment to cancel a booking
- Use reschedule_appointment to move a booking to a new date and time

## Important Rules
- NEVER book without confirming the doctor, date, time, patient name and phone number
- Request at most one batch of tool calls per reply
- Do not provide medical advice or diagnoses
- Keep responses concise"""


def build_provider(
    provider: ProviderType,
    gemini_api_key: Optional[str] = None,
    gemini_model: str = "gemini-2.5-flash",
    groq_api_key: Optional[str] = None,
    groq_model: str = "llama-3.3-70b-versatile",
) -> BaseLLMProvider:
    """
    Construct the configured provider.

    Raises:
        ConfigurationError: If the provider's API key is missing
    """
    if provider == ProviderType.GEMINI:
        if not gemini_api_key:
            raise ConfigurationError("GEMINI_API_KEY is required when LLM_PROVIDER=gemini")
        return GeminiProvider(gemini_api_key, gemini_model)
    if provider == ProviderType.GROQ:
        if not groq_api_key:
            raise ConfigurationError("GROQ_API_KEY is required when LLM_PROVIDER=groq")
        return GroqProvider(groq_api_key, groq_model)
    raise ConfigurationError(f"Unsupported LLM provider: {provider}")


class LLMService:
    """
    Single-provider LLM service.

    There is no fallback between providers: a failed call is reported to the
    orchestrator, which fails the turn.
    """

    def __init__(self, provider: BaseLLMProvider, max_tokens: int = 1024):
        """
        Initialize LLM service.

        Args:
            provider: The model provider to use
            max_tokens: Maximum tokens per response
        """
        self.provider = provider
        self.max_tokens = max_tokens
        self.tools = APPOINTMENT_TOOLS

        logger.info(f"LLM service initialized with {provider.provider_type.value}")

    def get_tools(self) -> list[dict]:
        """Get tool definitions."""
        return self.tools

    async def generate_response(
        self,
        messages: list[ConversationTurn],
        system_prompt: str,
    ) -> LLMResponse:
        """
        Generate a response for the conversation so far.

        Args:
            messages: Conversation history
            system_prompt: System prompt

        Returns:
            Standardized LLMResponse
        """
        response = await self.provider.generate_response(
            messages=messages,
            system_prompt=system_prompt,
            tools=self.tools,
            max_tokens=self.max_tokens,
        )
        logger.debug(
            f"{self.provider.provider_type.value} response: stop_reason={response.stop_reason}, "
            f"tool_calls={len(response.tool_calls)}"
        )
        return response

    async def health_check(self) -> dict[str, bool]:
        """Check health of the provider."""
        return {self.provider.provider_type.value: await self.provider.health_check()}
