"""Tool executor: runs the model's tool calls against the scheduling engine."""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Type

from pydantic import ValidationError as ModelValidationError

from ..errors import ConfigurationError, SchedulingError, UpstreamError, ValidationError
from ..services.directory import DoctorDirectory
from ..services.scheduling import SchedulingEngine
from ..utils.helpers import format_date_for_speech, format_time_for_speech
from .definitions import (
    BookAppointmentArgs,
    CancelAppointmentArgs,
    FindDoctorsArgs,
    GetAvailabilityArgs,
    ListSpecialtiesArgs,
    RescheduleAppointmentArgs,
    ToolArguments,
)

logger = logging.getLogger(__name__)


@dataclass
class ToolResult:
    """Result from a tool execution."""
    success: bool
    data: Any = None
    message: str = ""
    error: Optional[str] = None
    error_code: Optional[str] = None

    @classmethod
    def from_error(cls, error: SchedulingError) -> "ToolResult":
        data = error.to_dict()
        data.pop("success", None)
        data.pop("error", None)
        data.pop("message", None)
        return cls(
            success=False,
            data=data or None,
            message=error.message,
            error=error.message,
            error_code=error.code,
        )

    def to_payload(self) -> dict:
        """JSON-safe dict folded back into the conversation."""
        payload = {"success": self.success, "message": self.message}
        if self.data is not None:
            payload["data"] = self.data
        if not self.success:
            payload["error"] = self.error_code
        return payload


def validate_arguments(model: Type[ToolArguments], arguments: Optional[dict]) -> ToolArguments:
    """
    Validate raw arguments against a tool's schema.

    Raises:
        ValidationError: On missing, blank, unknown or mistyped fields
    """
    try:
        return model.model_validate(arguments or {})
    except ModelValidationError as e:
        problems = []
        for err in e.errors():
            field = ".".join(str(part) for part in err["loc"]) or "arguments"
            if err["type"] == "missing":
                problems.append(f"missing required field '{field}'")
            elif err["type"] == "extra_forbidden":
                problems.append(f"unknown field '{field}'")
            else:
                problems.append(f"'{field}': {err['msg']}")
        raise ValidationError("Invalid arguments: " + "; ".join(problems)) from e


class AppointmentTools:
    """
    Fixed registry of tools the model may call.

    ``execute_tool`` validates arguments before the domain layer is reached
    and turns every domain error into a failed ToolResult, so the model can
    react to "that slot is taken" in conversation. Unknown tools and
    infrastructure failures are not the model's to handle: they raise
    UpstreamError and abort the turn.
    """

    def __init__(self, engine: SchedulingEngine, directory: DoctorDirectory):
        """
        Initialize appointment tools.

        Args:
            engine: Scheduling engine
            directory: Doctor directory
        """
        self.engine = engine
        self.directory = directory
        self._registry: Dict[str, Tuple[Type[ToolArguments], Callable[[Any], Awaitable[ToolResult]]]] = {
            "list_specialties": (ListSpecialtiesArgs, self.list_specialties),
            "find_doctors": (FindDoctorsArgs, self.find_doctors),
            "get_availability": (GetAvailabilityArgs, self.get_availability),
            "book_appointment": (BookAppointmentArgs, self.book_appointment),
            "cancel_appointment": (CancelAppointmentArgs, self.cancel_appointment),
            "reschedule_appointment": (RescheduleAppointmentArgs, self.reschedule_appointment),
        }

    @property
    def tool_names(self) -> list[str]:
        return list(self._registry)

    def schema_for(self, tool_name: str) -> Type[ToolArguments]:
        """Argument schema of a registered tool."""
        return self._registry[tool_name][0]

    async def list_specialties(self, args: ListSpecialtiesArgs) -> ToolResult:
        specialties = await self.directory.list_specialties()
        return ToolResult(
            success=True,
            data={"specialties": specialties},
            message=f"Available specialties: {', '.join(specialties)}" if specialties
            else "No specialties are listed.",
        )

    async def find_doctors(self, args: FindDoctorsArgs) -> ToolResult:
        doctors = await self.directory.find_doctors(
            specialty=args.specialty,
            doctor_name=args.doctor_name,
        )
        if not doctors:
            message = (
                f"I couldn't find any doctors with the specialty: {args.specialty}."
                if args.specialty else "I couldn't find any matching doctors."
            )
            return ToolResult(success=True, data={"doctors": []}, message=message)

        return ToolResult(
            success=True,
            data={"doctors": [d.to_listing() for d in doctors]},
            message=f"Found {len(doctors)} doctor{'s' if len(doctors) != 1 else ''}.",
        )

    async def get_availability(self, args: GetAvailabilityArgs) -> ToolResult:
        when = format_date_for_speech(args.date)

        if args.view == "periods" and not args.time_of_day:
            periods = await self.engine.available_periods(args.doctor_name, args.date)
            if not periods:
                message = f"{args.doctor_name} has no free slots on {when}."
            else:
                message = f"{args.doctor_name} has free slots in the {', '.join(p.value for p in periods)} on {when}."
            return ToolResult(
                success=True,
                data={"date": args.date, "available_periods": [p.value for p in periods]},
                message=message,
            )

        slots = await self.engine.availability(args.doctor_name, args.date, args.time_of_day)
        if not slots:
            period_text = f" in the {args.time_of_day}" if args.time_of_day else ""
            message = f"{args.doctor_name} has no free slots{period_text} on {when}."
        else:
            message = f"Free times on {when}: {self.engine.slots.format_slots_for_speech(slots)}."
        return ToolResult(
            success=True,
            data={
                "date": args.date,
                "available_slots": [s.time for s in slots],
                "slots": [s.model_dump(mode="json") for s in slots],
            },
            message=message,
        )

    async def book_appointment(self, args: BookAppointmentArgs) -> ToolResult:
        created = await self.engine.book_appointment(
            doctor_name=args.doctor_name,
            patient_name=args.patient_name,
            phone=args.phone,
            date=args.date,
            time=args.time,
        )
        return ToolResult(
            success=True,
            data={"appointment": created.to_summary(args.doctor_name)},
            message=(
                f"Appointment booked for {created.patient_name} with {args.doctor_name} on "
                f"{format_date_for_speech(created.appointment_date)} at "
                f"{format_time_for_speech(created.appointment_time)}."
            ),
        )

    async def cancel_appointment(self, args: CancelAppointmentArgs) -> ToolResult:
        cancelled = await self.engine.cancel_appointment(
            patient_name=args.patient_name,
            doctor_name=args.doctor_name,
            date=args.date,
            time=args.time,
        )
        return ToolResult(
            success=True,
            data={"appointment": cancelled.to_summary(args.doctor_name)},
            message="The appointment has been successfully cancelled.",
        )

    async def reschedule_appointment(self, args: RescheduleAppointmentArgs) -> ToolResult:
        moved = await self.engine.reschedule_appointment(
            patient_name=args.patient_name,
            doctor_name=args.doctor_name,
            old_date=args.old_date,
            new_date=args.new_date,
            new_time=args.new_time,
            old_time=args.old_time,
        )
        return ToolResult(
            success=True,
            data={"appointment": moved.to_summary(args.doctor_name)},
            message=(
                f"The appointment has been successfully rescheduled to "
                f"{format_date_for_speech(moved.appointment_date)} at "
                f"{format_time_for_speech(moved.appointment_time)}."
            ),
        )

    async def execute_tool(self, tool_name: str, tool_input: Optional[dict]) -> ToolResult:
        """
        Execute a tool by name.

        Args:
            tool_name: Name of the tool to execute
            tool_input: Tool parameters

        Returns:
            ToolResult from the tool execution

        Raises:
            UpstreamError: For unknown tools and infrastructure failures
        """
        entry = self._registry.get(tool_name)
        if not entry:
            raise UpstreamError(f"Model requested unknown tool: {tool_name}")
        schema, handler = entry

        try:
            args = validate_arguments(schema, tool_input)
            return await handler(args)
        except (UpstreamError, ConfigurationError):
            raise
        except SchedulingError as e:
            logger.info(f"Tool {tool_name} failed: {e.code}: {e.message}")
            return ToolResult.from_error(e)
        except Exception as e:
            logger.exception(f"Unexpected error in tool {tool_name}")
            raise UpstreamError(f"Tool {tool_name} failed unexpectedly: {e}") from e
