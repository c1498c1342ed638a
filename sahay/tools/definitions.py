"""Tool declarations offered to the language model, and their argument schemas."""

from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field


class ToolArguments(BaseModel):
    """Base for tool argument schemas: unknown fields are rejected."""
    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
        coerce_numbers_to_str=True,
    )


class ListSpecialtiesArgs(ToolArguments):
    pass


class FindDoctorsArgs(ToolArguments):
    specialty: Optional[str] = None
    doctor_name: Optional[str] = None


class GetAvailabilityArgs(ToolArguments):
    doctor_name: str = Field(..., min_length=1)
    date: str = Field(..., min_length=1)
    time_of_day: Optional[str] = None
    view: Literal["slots", "periods"] = "slots"


class BookAppointmentArgs(ToolArguments):
    doctor_name: str = Field(..., min_length=1)
    patient_name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    date: str = Field(..., min_length=1)
    time: str = Field(..., min_length=1)


class CancelAppointmentArgs(ToolArguments):
    doctor_name: str = Field(..., min_length=1)
    patient_name: str = Field(..., min_length=1)
    date: str = Field(..., min_length=1)
    time: Optional[str] = None


class RescheduleAppointmentArgs(ToolArguments):
    doctor_name: str = Field(..., min_length=1)
    patient_name: str = Field(..., min_length=1)
    old_date: str = Field(..., min_length=1)
    new_date: str = Field(..., min_length=1)
    new_time: str = Field(..., min_length=1)
    old_time: Optional[str] = None


# Tool definitions for appointment management
APPOINTMENT_TOOLS = [
    {
        "name": "list_specialties",
        "description": "List the medical specialties available at the hospital. Use this when the user is unsure which kind of doctor they need.",
        "input_schema": {
            "type": "object",
            "properties": {},
            "required": []
        }
    },
    {
        "name": "find_doctors",
        "description": "Find doctors by specialty and/or name. Use this to tell the user which doctors are available.",
        "input_schema": {
            "type": "object",
            "properties": {
                "specialty": {
                    "type": "string",
                    "description": "Specialty to filter by, e.g. Cardiology"
                },
                "doctor_name": {
                    "type": "string",
                    "description": "Full or partial doctor name"
                }
            },
            "required": []
        }
    },
    {
        "name": "get_availability",
        "description": "Check a doctor's free appointment slots on a date. Use view='periods' to first ask which part of the day suits the user, then view='slots' with time_of_day to list times.",
        "input_schema": {
            "type": "object",
            "properties": {
                "doctor_name": {
                    "type": "string",
                    "description": "The doctor's name"
                },
                "date": {
                    "type": "string",
                    "description": "Date in YYYY-MM-DD format"
                },
                "time_of_day": {
                    "type": "string",
                    "description": "Optional part of the day to filter slots by",
                    "enum": ["morning", "afternoon", "evening"]
                },
                "view": {
                    "type": "string",
                    "description": "'slots' for the list of free times (default), 'periods' for the parts of the day that still have free times",
                    "enum": ["slots", "periods"]
                }
            },
            "required": ["doctor_name", "date"]
        }
    },
    {
        "name": "book_appointment",
        "description": "Book an appointment with a doctor. Use this only after the user has confirmed the doctor, date and time.",
        "input_schema": {
            "type": "object",
            "properties": {
                "doctor_name": {
                    "type": "string",
                    "description": "The doctor's name"
                },
                "patient_name": {
                    "type": "string",
                    "description": "The patient's full name"
                },
                "phone": {
                    "type": "string",
                    "description": "The patient's phone number"
                },
                "date": {
                    "type": "string",
                    "description": "Appointment date in YYYY-MM-DD format"
                },
                "time": {
                    "type": "string",
                    "description": "Appointment time in HH:MM format (24-hour)"
                }
            },
            "required": ["doctor_name", "patient_name", "phone", "date", "time"]
        }
    },
    {
        "name": "cancel_appointment",
        "description": "Cancel an existing appointment. If the patient has more than one appointment that day, the time is needed.",
        "input_schema": {
            "type": "object",
            "properties": {
                "doctor_name": {
                    "type": "string",
                    "description": "The doctor's name"
                },
                "patient_name": {
                    "type": "string",
                    "description": "The patient's full name"
                },
                "date": {
                    "type": "string",
                    "description": "Date of the appointment (YYYY-MM-DD)"
                },
                "time": {
                    "type": "string",
                    "description": "Time of the appointment (HH:MM), if known"
                }
            },
            "required": ["doctor_name", "patient_name", "date"]
        }
    },
    {
        "name": "reschedule_appointment",
        "description": "Move an existing appointment to a new date and time.",
        "input_schema": {
            "type": "object",
            "properties": {
                "doctor_name": {
                    "type": "string",
                    "description": "The doctor's name"
                },
                "patient_name": {
                    "type": "string",
                    "description": "The patient's full name"
                },
                "old_date": {
                    "type": "string",
                    "description": "Current date of the appointment (YYYY-MM-DD)"
                },
                "old_time": {
                    "type": "string",
                    "description": "Current time of the appointment (HH:MM), if the patient has several that day"
                },
                "new_date": {
                    "type": "string",
                    "description": "New date for the appointment (YYYY-MM-DD)"
                },
                "new_time": {
                    "type": "string",
                    "description": "New time for the appointment (HH:MM)"
                }
            },
            "required": ["doctor_name", "patient_name", "old_date", "new_date", "new_time"]
        }
    }
]
