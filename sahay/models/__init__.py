"""Data models package."""

from .appointment import Appointment, AppointmentStatus, DayPart, Slot
from .doctor import Doctor
from .conversation import (
    ConversationTurn,
    ToolCall,
    ToolCallLog,
    ToolResultPayload,
    TurnRole,
)

__all__ = [
    "Appointment",
    "AppointmentStatus",
    "DayPart",
    "Slot",
    "Doctor",
    "ConversationTurn",
    "ToolCall",
    "ToolCallLog",
    "ToolResultPayload",
    "TurnRole",
]
