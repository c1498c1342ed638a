"""Storage interfaces for the doctor directory and the appointment ledger."""

from abc import ABC, abstractmethod
from typing import List, Optional, Set

from ..errors import ValidationError
from ..models import Appointment, AppointmentStatus, Doctor


def check_transition(from_status: AppointmentStatus, to_status: AppointmentStatus) -> None:
    """Reject status changes the ledger never allows."""
    if from_status == AppointmentStatus.CANCELLED and to_status == AppointmentStatus.CONFIRMED:
        raise ValidationError("A cancelled appointment cannot be confirmed again. Please book a new one.")
    if from_status == to_status:
        raise ValidationError(f"Appointment is already {to_status.value}.")


class DoctorStore(ABC):
    """Read-only source of doctor records."""

    @abstractmethod
    async def list_doctors(self) -> List[Doctor]:
        """Return every doctor in the directory."""
        pass


class AppointmentLedger(ABC):
    """
    Shared, mutable store of appointment records.

    Implementations must make the conflict check and the write of
    ``insert_confirmed`` and ``move_confirmed`` a single atomic step: at most
    one confirmed appointment may ever exist per (doctor, date, time).
    """

    @abstractmethod
    async def get(self, appointment_id: str) -> Optional[Appointment]:
        """Get a specific appointment by ID."""
        pass

    @abstractmethod
    async def confirmed_times(self, doctor_id: str, date: str) -> Set[str]:
        """Times (HH:MM) already confirmed for a doctor on a date."""
        pass

    @abstractmethod
    async def find_confirmed(
        self,
        doctor_id: str,
        patient_name: str,
        date: str,
        time: Optional[str] = None,
    ) -> List[Appointment]:
        """Confirmed appointments for a patient with a doctor on a date."""
        pass

    @abstractmethod
    async def insert_confirmed(self, appointment: Appointment) -> Appointment:
        """
        Insert a confirmed appointment.

        Raises:
            ConflictError: If the slot already holds a confirmed appointment
        """
        pass

    @abstractmethod
    async def transition_status(
        self,
        appointment_id: str,
        from_status: AppointmentStatus,
        to_status: AppointmentStatus,
    ) -> Optional[Appointment]:
        """
        Change an appointment's status only if it currently has ``from_status``.

        Returns:
            The updated appointment, or None if the guard did not hold

        Raises:
            ValidationError: For a cancelled -> confirmed transition
        """
        pass

    @abstractmethod
    async def move_confirmed(
        self,
        appointment_id: str,
        old_date: str,
        new_date: str,
        new_time: str,
    ) -> Optional[Appointment]:
        """
        Move a confirmed appointment to a new date/time in place.

        The update only applies while the record is still confirmed on
        ``old_date``.

        Returns:
            The updated appointment, or None if the guard did not hold

        Raises:
            ConflictError: If another confirmed appointment holds the target
        """
        pass
