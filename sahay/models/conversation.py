"""Conversation and tool-call data models."""

from datetime import datetime
from enum import Enum
from typing import Optional, List, Any
from pydantic import BaseModel, Field, model_validator


class TurnRole(str, Enum):
    """Who produced a conversation turn."""
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class ToolCall(BaseModel):
    """A structured request from the model to run one tool."""
    id: str = Field(..., description="Call identifier, echoed in the result")
    name: str = Field(..., description="Name of the tool to run")
    arguments: dict[str, Any] = Field(default_factory=dict)


class ToolResultPayload(BaseModel):
    """The outcome of one tool call, fed back to the model."""
    tool_call_id: str = Field(...)
    name: str = Field(...)
    content: dict[str, Any] = Field(default_factory=dict)


class ConversationTurn(BaseModel):
    """
    One entry of the conversation history.

    User turns carry text. Assistant turns carry text, tool calls, or both.
    Tool turns carry exactly one tool result.
    """
    role: TurnRole
    text: Optional[str] = None
    tool_calls: List[ToolCall] = Field(default_factory=list)
    tool_result: Optional[ToolResultPayload] = None

    @model_validator(mode="after")
    def _check_shape(self) -> "ConversationTurn":
        if self.role == TurnRole.USER:
            if not self.text or not self.text.strip():
                raise ValueError("user turns need text")
            if self.tool_calls or self.tool_result:
                raise ValueError("user turns cannot carry tool calls or results")
        elif self.role == TurnRole.ASSISTANT:
            if not self.text and not self.tool_calls:
                raise ValueError("assistant turns need text or tool calls")
            if self.tool_result:
                raise ValueError("assistant turns cannot carry tool results")
        elif self.role == TurnRole.TOOL:
            if self.tool_result is None:
                raise ValueError("tool turns need a tool_result")
            if self.tool_calls:
                raise ValueError("tool turns cannot carry tool calls")
        return self

    @classmethod
    def user(cls, text: str) -> "ConversationTurn":
        return cls(role=TurnRole.USER, text=text)

    @classmethod
    def assistant(
        cls,
        text: Optional[str] = None,
        tool_calls: Optional[List[ToolCall]] = None,
    ) -> "ConversationTurn":
        return cls(role=TurnRole.ASSISTANT, text=text, tool_calls=tool_calls or [])

    @classmethod
    def tool(cls, call: ToolCall, content: dict) -> "ConversationTurn":
        return cls(
            role=TurnRole.TOOL,
            tool_result=ToolResultPayload(
                tool_call_id=call.id,
                name=call.name,
                content=content,
            ),
        )


class ToolCallLog(BaseModel):
    """Log entry for a tool call."""
    tool_name: str = Field(..., description="Name of the tool called")
    parameters: dict = Field(default_factory=dict, description="Tool parameters")
    result: Optional[Any] = Field(default=None, description="Tool result")
    success: bool = Field(default=True)
    error_message: Optional[str] = Field(default=None)
    duration_ms: Optional[int] = Field(default=None, description="Execution time in ms")
    timestamp: datetime = Field(default_factory=datetime.utcnow)

    def to_display_dict(self, technical: bool = False) -> dict:
        """Convert to display format for UI."""
        if technical:
            return {
                "tool": self.tool_name,
                "params": self.parameters,
                "result": self.result,
                "success": self.success,
                "duration_ms": self.duration_ms,
                "timestamp": self.timestamp.isoformat(),
            }

        # User-friendly format
        friendly_names = {
            "list_specialties": "Listing specialties",
            "find_doctors": "Finding doctors",
            "get_availability": "Checking available slots",
            "book_appointment": "Booking appointment",
            "cancel_appointment": "Cancelling appointment",
            "reschedule_appointment": "Rescheduling appointment",
        }

        friendly_name = friendly_names.get(self.tool_name, self.tool_name)

        return {
            "action": friendly_name,
            "status": "completed" if self.success else "failed",
            "details": self._get_friendly_details(),
            "timestamp": self.timestamp.isoformat(),
        }

    def _get_friendly_details(self) -> str:
        """Get user-friendly details based on tool type."""
        if not self.success:
            return self.error_message or "Action failed"
        if self.tool_name == "book_appointment":
            date = self.parameters.get("date", "")
            time = self.parameters.get("time", "")
            return f"Booked for {date} at {time}"
        elif self.tool_name == "get_availability" and isinstance(self.result, dict):
            data = self.result.get("data") or {}
            if "available_periods" in data:
                return f"Found {len(data['available_periods'])} periods with free slots"
            return f"Found {len(data.get('available_slots', []))} available slots"
        elif self.tool_name == "cancel_appointment":
            return "Appointment cancelled"
        elif self.tool_name == "reschedule_appointment":
            date = self.parameters.get("new_date", "")
            time = self.parameters.get("new_time", "")
            return f"Moved to {date} at {time}"
        return ""
