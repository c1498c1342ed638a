"""Appointment data models."""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.helpers import normalize_date, normalize_time


class AppointmentStatus(str, Enum):
    """Possible appointment statuses."""
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class DayPart(str, Enum):
    """Coarse classification of a slot by its hour."""
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"


class Slot(BaseModel):
    """A bookable time point for a doctor on a given date. Never persisted."""
    time: str = Field(..., description="Time in HH:MM format (24-hour)")
    day_part: DayPart = Field(..., description="Morning, afternoon or evening")

    model_config = ConfigDict(frozen=True)


class Appointment(BaseModel):
    """Represents a booked appointment."""
    id: Optional[str] = Field(default=None, description="Unique appointment ID")
    doctor_id: str = Field(..., description="Identifier of the doctor")
    patient_name: str = Field(..., description="Patient's name")
    patient_phone: Optional[str] = Field(default=None, description="Patient's phone number")
    appointment_date: str = Field(..., description="Appointment date (YYYY-MM-DD)")
    appointment_time: str = Field(..., description="Appointment time (HH:MM)")
    status: AppointmentStatus = Field(default=AppointmentStatus.CONFIRMED)
    created_at: Optional[datetime] = Field(default=None)
    updated_at: Optional[datetime] = Field(default=None)

    @field_validator("id", "doctor_id", mode="before")
    @classmethod
    def _stringify_ids(cls, value):
        # Postgres hands back integer or uuid primary keys.
        return None if value is None else str(value)

    @field_validator("appointment_date", mode="before")
    @classmethod
    def _normalize_date(cls, value):
        return normalize_date(value)

    @field_validator("appointment_time", mode="before")
    @classmethod
    def _normalize_time(cls, value):
        return normalize_time(value)

    @property
    def datetime_str(self) -> str:
        """Get formatted datetime string."""
        return f"{self.appointment_date} at {self.appointment_time}"

    @property
    def is_confirmed(self) -> bool:
        return self.status == AppointmentStatus.CONFIRMED

    def to_summary(self, doctor_name: Optional[str] = None) -> dict:
        """JSON-safe view returned by tools and the API."""
        summary = {
            "id": self.id,
            "patient_name": self.patient_name,
            "date": self.appointment_date,
            "time": self.appointment_time,
            "status": self.status.value,
        }
        if doctor_name:
            summary["doctor_name"] = doctor_name
        return summary
