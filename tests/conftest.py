"""Shared test fixtures for the Sahay test suite."""

import asyncio
from typing import Any, Optional

import pytest

from sahay.models import Doctor, ToolCall
from sahay.services.directory import DoctorDirectory
from sahay.services.llm_service import LLMService
from sahay.services.matching import MatchStrategy
from sahay.services.memory_store import MemoryDoctorStore, MemoryLedger
from sahay.services.orchestrator import DialogueOrchestrator
from sahay.services.providers import BaseLLMProvider, LLMResponse, ProviderType, StopReason
from sahay.services.scheduling import SchedulingEngine
from sahay.services.slot_generator import SlotGenerator
from sahay.tools.appointment_tools import AppointmentTools

TEST_DATE = "2025-03-10"


@pytest.fixture
def doctors() -> list[Doctor]:
    return [
        Doctor(id="1", name="Dr. Rao", specialty="Cardiology",
               working_hours_start="09:00", working_hours_end="17:00"),
        Doctor(id="2", name="Dr. Anil Kumar", specialty="Cardiology",
               working_hours_start="10:00", working_hours_end="14:00"),
        Doctor(id="3", name="Dr. Meera Iyer", specialty="Dermatology",
               working_hours_start="14:00", working_hours_end="20:00"),
        Doctor(id="4", name="Dr. Sunil Kumar", specialty="Orthopedics",
               working_hours_start="08:30", working_hours_end="12:30"),
    ]


@pytest.fixture
def ledger() -> MemoryLedger:
    return MemoryLedger()


@pytest.fixture
def directory(doctors) -> DoctorDirectory:
    return DoctorDirectory(MemoryDoctorStore(doctors), strategy=MatchStrategy.SUBSTRING)


@pytest.fixture
def slot_generator() -> SlotGenerator:
    return SlotGenerator(slot_duration_minutes=30)


@pytest.fixture
def engine(directory, ledger, slot_generator) -> SchedulingEngine:
    return SchedulingEngine(directory=directory, ledger=ledger, slot_generator=slot_generator)


@pytest.fixture
def tools(engine, directory) -> AppointmentTools:
    return AppointmentTools(engine, directory)


def tool_response(*calls: tuple[str, dict], text: Optional[str] = None) -> LLMResponse:
    """LLMResponse requesting the given (name, arguments) tool calls."""
    return LLMResponse(
        content=text,
        tool_calls=[
            ToolCall(id=f"call_{i}", name=name, arguments=args)
            for i, (name, args) in enumerate(calls)
        ],
        stop_reason=StopReason.TOOL_USE,
    )


def text_response(text: str) -> LLMResponse:
    return LLMResponse(content=text, stop_reason=StopReason.END_TURN)


class ScriptedProvider(BaseLLMProvider):
    """
    Provider that replays a fixed script of responses.

    An item may be an LLMResponse, an exception to raise, or a number of
    seconds to sleep (to simulate a slow model).
    """

    provider_type = ProviderType.GEMINI

    def __init__(self, script: list[Any]):
        super().__init__(api_key="test-key", model="scripted")
        self.script = script
        self.calls: list[list] = []

    async def _complete(self, messages, system_prompt, tools, max_tokens):
        self.calls.append(list(messages))
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, (int, float)):
            await asyncio.sleep(item)
            return text_response("too late")
        return item

    async def health_check(self) -> bool:
        return True


@pytest.fixture
def make_orchestrator(tools):
    """Factory fixture: orchestrator over a scripted provider."""

    def _make(script: list[Any], model_timeout: float = 5.0, tool_timeout: float = 5.0):
        provider = ScriptedProvider(script)
        orchestrator = DialogueOrchestrator(
            llm_service=LLMService(provider),
            tools=tools,
            model_timeout_seconds=model_timeout,
            tool_timeout_seconds=tool_timeout,
            system_prompt_factory=lambda: "You are a test assistant.",
        )
        return orchestrator, provider

    return _make
