"""
Dialogue orchestrator: drives one conversational turn.

A turn is one model round-trip plus at most one batch of tool dispatches:

    AWAITING_MODEL_RESPONSE -> DONE
    AWAITING_MODEL_RESPONSE -> TOOL_REQUESTED -> TOOL_EXECUTED
                            -> AWAITING_FINAL_RESPONSE -> DONE

Tool calls in a batch run one after another in the order the model listed
them. The augmented history is resubmitted exactly once; a second request for
tools is a protocol violation. Nothing is retried, and nothing is persisted
here: the caller supplies the full history on every turn.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable, List, Optional

from ..errors import UpstreamError
from ..models import ConversationTurn, ToolCall, ToolCallLog
from .llm_service import LLMService, get_system_prompt
from .providers import LLMResponse

if TYPE_CHECKING:
    from ..tools.appointment_tools import AppointmentTools, ToolResult

logger = logging.getLogger(__name__)


class TurnState(str, Enum):
    """States of a single turn."""
    AWAITING_MODEL_RESPONSE = "awaiting_model_response"
    TOOL_REQUESTED = "tool_requested"
    TOOL_EXECUTED = "tool_executed"
    AWAITING_FINAL_RESPONSE = "awaiting_final_response"
    DONE = "done"


@dataclass
class TurnResult:
    """Outcome of a completed turn."""
    reply: str
    history: List[ConversationTurn] = field(default_factory=list)
    tool_calls: List[ToolCallLog] = field(default_factory=list)
    state: TurnState = TurnState.DONE


class DialogueOrchestrator:
    """Runs turns against the model and the tool executor."""

    def __init__(
        self,
        llm_service: LLMService,
        tools: "AppointmentTools",
        model_timeout_seconds: float = 20.0,
        tool_timeout_seconds: float = 10.0,
        system_prompt_factory: Optional[Callable[[], str]] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            llm_service: Model access
            tools: Tool executor
            model_timeout_seconds: Bound on each model call
            tool_timeout_seconds: Bound on each tool dispatch
            system_prompt_factory: Builds the system prompt for each turn
        """
        self.llm = llm_service
        self.tools = tools
        self.model_timeout = model_timeout_seconds
        self.tool_timeout = tool_timeout_seconds
        self.system_prompt_factory = system_prompt_factory or get_system_prompt

    async def _call_model(self, history: List[ConversationTurn], system_prompt: str) -> LLMResponse:
        try:
            return await asyncio.wait_for(
                self.llm.generate_response(history, system_prompt),
                timeout=self.model_timeout,
            )
        except asyncio.TimeoutError as e:
            raise UpstreamError(
                f"Model did not respond within {self.model_timeout}s", timeout=True
            ) from e
        except UpstreamError:
            raise
        except Exception as e:
            raise UpstreamError(f"Model call failed: {e}") from e

    async def _dispatch(self, call: ToolCall) -> ToolCallLog:
        start_time = time.time()
        try:
            result: "ToolResult" = await asyncio.wait_for(
                self.tools.execute_tool(call.name, call.arguments),
                timeout=self.tool_timeout,
            )
        except asyncio.TimeoutError as e:
            raise UpstreamError(
                f"Tool {call.name} did not finish within {self.tool_timeout}s", timeout=True
            ) from e

        duration_ms = int((time.time() - start_time) * 1000)
        log = ToolCallLog(
            tool_name=call.name,
            parameters=call.arguments,
            result=result.to_payload(),
            success=result.success,
            error_message=result.error,
            duration_ms=duration_ms,
        )
        logger.info(f"Tool {call.name} executed: success={result.success}, duration={duration_ms}ms")
        return log

    async def run_turn(
        self,
        history: List[ConversationTurn],
        latest_user_message: str,
    ) -> TurnResult:
        """
        Run one turn of the conversation.

        Args:
            history: Prior turns, oldest first
            latest_user_message: The user's new message

        Returns:
            TurnResult with the reply and the augmented history

        Raises:
            UpstreamError: On model or dispatch failure, timeout, or a
                second round of tool calls
        """
        state = TurnState.AWAITING_MODEL_RESPONSE
        turns = list(history) + [ConversationTurn.user(latest_user_message)]
        system_prompt = self.system_prompt_factory()
        logs: List[ToolCallLog] = []

        try:
            response = await self._call_model(turns, system_prompt)

            if not response.has_tool_calls:
                _append_reply(turns, response.text)
                state = TurnState.DONE
                return TurnResult(reply=response.text, history=turns, state=state)

            state = TurnState.TOOL_REQUESTED
            logger.debug(f"Model requested {len(response.tool_calls)} tool call(s)")
            turns.append(ConversationTurn.assistant(
                text=response.content,
                tool_calls=response.tool_calls,
            ))

            for call in response.tool_calls:
                log = await self._dispatch(call)
                logs.append(log)
                turns.append(ConversationTurn.tool(call, log.result))
            state = TurnState.TOOL_EXECUTED
            logger.debug(f"Turn state: {state.value}, resubmitting {len(logs)} result(s)")

            state = TurnState.AWAITING_FINAL_RESPONSE
            final = await self._call_model(turns, system_prompt)
            if final.has_tool_calls:
                names = ", ".join(c.name for c in final.tool_calls)
                raise UpstreamError(
                    f"Model requested a second round of tool calls ({names}); "
                    "only one round per turn is supported"
                )

            _append_reply(turns, final.text)
            state = TurnState.DONE
            return TurnResult(reply=final.text, history=turns, tool_calls=logs, state=state)

        except UpstreamError as e:
            logger.error(f"Turn failed in state {state.value}: {e.message}")
            raise


def _append_reply(turns: List[ConversationTurn], text: str) -> None:
    # An empty reply is not recorded, so the returned history stays valid
    # input for the next turn.
    if text and text.strip():
        turns.append(ConversationTurn.assistant(text=text))
