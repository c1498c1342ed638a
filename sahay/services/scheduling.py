"""Scheduling engine: availability, booking, cancellation and rescheduling."""

import logging
from typing import List, Optional

from ..errors import AmbiguousError, NotFoundError, ValidationError
from ..models import Appointment, AppointmentStatus, DayPart, Doctor, Slot
from ..utils.helpers import normalize_date, normalize_time, sanitize_phone
from .directory import DoctorDirectory
from .ledger import AppointmentLedger
from .slot_generator import SlotGenerator

logger = logging.getLogger(__name__)


def _required(value: Optional[str], label: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"Missing required field: {label}.")
    return str(value).strip()


def _date(value: Optional[str], label: str = "date") -> str:
    try:
        return normalize_date(_required(value, label))
    except ValueError as e:
        raise ValidationError(str(e)) from e


def _time(value: Optional[str], label: str = "time") -> str:
    try:
        return normalize_time(_required(value, label))
    except ValueError as e:
        raise ValidationError(str(e)) from e


def _day_part(value: Optional[str]) -> Optional[DayPart]:
    if value is None or not value.strip():
        return None
    try:
        return DayPart(value.strip().lower())
    except ValueError:
        options = ", ".join(p.value for p in DayPart)
        raise ValidationError(f"Time of day must be one of: {options}.")


class SchedulingEngine:
    """
    Domain operations over the doctor directory and the appointment ledger.

    Every operation resolves the doctor through the directory first, so the
    same matching strategy applies everywhere. Writes go through the ledger's
    atomic operations; the engine never checks a slot and writes it in two
    separate steps.
    """

    def __init__(
        self,
        directory: DoctorDirectory,
        ledger: AppointmentLedger,
        slot_generator: SlotGenerator,
    ):
        self.directory = directory
        self.ledger = ledger
        self.slots = slot_generator

    def _check_bookable(self, doctor: Doctor, date: str, time: str) -> None:
        valid_times = {slot.time for slot in self.slots.generate_slots(doctor, date)}
        if time not in valid_times:
            raise ValidationError(
                f"{time} is not a bookable time for {doctor.name}. "
                f"Working hours are {doctor.working_hours_start:%H:%M} - "
                f"{doctor.working_hours_end:%H:%M} in {self.slots.slot_duration.seconds // 60}-minute slots."
            )

    async def _free_slots(self, doctor: Doctor, date: str) -> List[Slot]:
        booked = await self.ledger.confirmed_times(doctor.id, date)
        return [slot for slot in self.slots.generate_slots(doctor, date) if slot.time not in booked]

    async def availability(
        self,
        doctor_name: str,
        date: str,
        time_of_day: Optional[str] = None,
    ) -> List[Slot]:
        """
        Free slots for a doctor on a date.

        Args:
            doctor_name: Doctor reference, resolved with the directory strategy
            date: Date (YYYY-MM-DD)
            time_of_day: Optional morning/afternoon/evening filter

        Returns:
            Ascending list of free slots, a subset of the generated slots
        """
        day = _date(date)
        period = _day_part(time_of_day)
        doctor = await self.directory.resolve(_required(doctor_name, "doctor name"))

        free = await self._free_slots(doctor, day)
        if period:
            free = [slot for slot in free if slot.day_part == period]
        return free

    async def available_periods(self, doctor_name: str, date: str) -> List[DayPart]:
        """Day-parts that still have at least one free slot, in day order."""
        day = _date(date)
        doctor = await self.directory.resolve(_required(doctor_name, "doctor name"))

        free = await self._free_slots(doctor, day)
        present = {slot.day_part for slot in free}
        return [part for part in DayPart if part in present]

    async def book_appointment(
        self,
        doctor_name: str,
        patient_name: str,
        phone: str,
        date: str,
        time: str,
    ) -> Appointment:
        """
        Book a confirmed appointment.

        Raises:
            ValidationError: If a field is missing or the time is not a slot
            NotFoundError: If the doctor does not resolve to exactly one doctor
            ConflictError: If the slot is already confirmed
        """
        doctor_ref = _required(doctor_name, "doctor name")
        patient = _required(patient_name, "patient name")
        patient_phone = sanitize_phone(_required(phone, "phone"))
        if not patient_phone:
            raise ValidationError("Phone number must contain digits.")
        day = _date(date)
        slot_time = _time(time)

        doctor = await self.directory.resolve(doctor_ref)
        self._check_bookable(doctor, day, slot_time)

        appointment = Appointment(
            doctor_id=doctor.id,
            patient_name=patient,
            patient_phone=patient_phone,
            appointment_date=day,
            appointment_time=slot_time,
            status=AppointmentStatus.CONFIRMED,
        )
        created = await self.ledger.insert_confirmed(appointment)
        logger.info(f"Booked {patient} with {doctor.name} on {day} at {slot_time}")
        return created

    async def _locate(
        self,
        doctor: Doctor,
        patient_name: str,
        date: str,
        time: Optional[str],
    ) -> Appointment:
        matches = await self.ledger.find_confirmed(doctor.id, patient_name, date, time)
        when = f"{date} at {time}" if time else date
        if not matches:
            raise NotFoundError(
                f"Could not find a confirmed appointment for {patient_name} with {doctor.name} on {when}."
            )
        if len(matches) > 1:
            times = [apt.appointment_time for apt in matches]
            raise AmbiguousError(
                f"{patient_name} has {len(matches)} confirmed appointments with {doctor.name} "
                f"on {date} ({', '.join(times)}). Please say which time.",
                candidates=times,
            )
        return matches[0]

    async def cancel_appointment(
        self,
        patient_name: str,
        doctor_name: str,
        date: str,
        time: Optional[str] = None,
    ) -> Appointment:
        """
        Cancel a confirmed appointment. The record is kept with status cancelled.

        Without a time, the patient's single confirmed appointment on that
        date is cancelled; if there are several, AmbiguousError asks for the
        time.

        Raises:
            NotFoundError: If no such confirmed appointment exists
            AmbiguousError: If several match and no time was given
        """
        patient = _required(patient_name, "patient name")
        doctor_ref = _required(doctor_name, "doctor name")
        day = _date(date)
        slot_time = _time(time) if time else None

        doctor = await self.directory.resolve(doctor_ref)
        target = await self._locate(doctor, patient, day, slot_time)

        cancelled = await self.ledger.transition_status(
            target.id,
            AppointmentStatus.CONFIRMED,
            AppointmentStatus.CANCELLED,
        )
        if cancelled is None:
            # Cancelled or moved by a concurrent request since we looked it up.
            raise NotFoundError(
                f"The appointment for {patient} with {doctor.name} on {day} is no longer confirmed."
            )
        logger.info(f"Cancelled appointment {cancelled.id} for {patient}")
        return cancelled

    async def reschedule_appointment(
        self,
        patient_name: str,
        doctor_name: str,
        old_date: str,
        new_date: str,
        new_time: str,
        old_time: Optional[str] = None,
    ) -> Appointment:
        """
        Move a confirmed appointment to a new date and time.

        The same record is updated in place, so its identifier and patient
        details are preserved.

        Raises:
            NotFoundError: If no confirmed appointment exists on old_date
            AmbiguousError: If several match and no old_time was given
            ConflictError: If the new slot is already confirmed
        """
        patient = _required(patient_name, "patient name")
        doctor_ref = _required(doctor_name, "doctor name")
        from_day = _date(old_date, "old date")
        from_time = _time(old_time, "old time") if old_time else None
        to_day = _date(new_date, "new date")
        to_time = _time(new_time, "new time")

        doctor = await self.directory.resolve(doctor_ref)
        target = await self._locate(doctor, patient, from_day, from_time)
        self._check_bookable(doctor, to_day, to_time)

        moved = await self.ledger.move_confirmed(target.id, from_day, to_day, to_time)
        if moved is None:
            raise NotFoundError(
                f"The appointment for {patient} with {doctor.name} on {from_day} is no longer confirmed."
            )
        logger.info(f"Rescheduled appointment {moved.id} to {to_day} at {to_time}")
        return moved
