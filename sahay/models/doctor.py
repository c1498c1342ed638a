"""Doctor data model."""

from datetime import time
from pydantic import BaseModel, Field, field_validator, model_validator


class Doctor(BaseModel):
    """A doctor in the hospital directory. Read-only to the assistant."""
    id: str = Field(..., description="Unique doctor ID")
    name: str = Field(..., description="Display name, e.g. 'Dr. Rao'")
    specialty: str = Field(..., description="Medical specialty")
    working_hours_start: time = Field(..., description="Start of working hours")
    working_hours_end: time = Field(..., description="End of working hours (exclusive)")

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value):
        return str(value)

    @model_validator(mode="after")
    def _check_hours(self) -> "Doctor":
        if self.working_hours_end <= self.working_hours_start:
            raise ValueError(
                f"Working hours for {self.name} end before they start "
                f"({self.working_hours_start} - {self.working_hours_end})"
            )
        return self

    def to_listing(self) -> dict:
        """Public view used by find_doctors."""
        return {"name": self.name, "specialty": self.specialty}
