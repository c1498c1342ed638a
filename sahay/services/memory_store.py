"""In-process doctor store and appointment ledger for development and tests."""

import asyncio
import json
import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set

from ..errors import ConflictError
from ..models import Appointment, AppointmentStatus, Doctor
from .ledger import AppointmentLedger, DoctorStore, check_transition

logger = logging.getLogger(__name__)


class MemoryDoctorStore(DoctorStore):
    """Doctor directory held in memory."""

    def __init__(self, doctors: Iterable[Doctor]):
        self._doctors = list(doctors)

    @classmethod
    def from_json_file(cls, path: str) -> "MemoryDoctorStore":
        """Load doctors from a JSON array of doctor records."""
        records = json.loads(Path(path).read_text(encoding="utf-8"))
        doctors = [Doctor(**record) for record in records]
        logger.info(f"Loaded {len(doctors)} doctors from {path}")
        return cls(doctors)

    async def list_doctors(self) -> List[Doctor]:
        return list(self._doctors)


class MemoryLedger(AppointmentLedger):
    """
    Appointment ledger held in memory.

    Every read-check-write runs under one ``asyncio.Lock`` so concurrent
    bookings for the same slot are serialized: the first wins and the rest
    see the confirmed record and fail with ConflictError.
    """

    def __init__(self):
        self._appointments: Dict[str, Appointment] = {}
        self._lock = asyncio.Lock()

    def _slot_holder(
        self,
        doctor_id: str,
        date: str,
        time: str,
        exclude_id: Optional[str] = None,
    ) -> Optional[Appointment]:
        for apt in self._appointments.values():
            if (
                apt.is_confirmed
                and apt.id != exclude_id
                and apt.doctor_id == doctor_id
                and apt.appointment_date == date
                and apt.appointment_time == time
            ):
                return apt
        return None

    async def get(self, appointment_id: str) -> Optional[Appointment]:
        apt = self._appointments.get(appointment_id)
        return apt.model_copy() if apt else None

    async def all(self) -> List[Appointment]:
        """Every record, including cancelled ones."""
        return [apt.model_copy() for apt in self._appointments.values()]

    async def confirmed_times(self, doctor_id: str, date: str) -> Set[str]:
        return {
            apt.appointment_time
            for apt in self._appointments.values()
            if apt.is_confirmed and apt.doctor_id == doctor_id and apt.appointment_date == date
        }

    async def find_confirmed(
        self,
        doctor_id: str,
        patient_name: str,
        date: str,
        time: Optional[str] = None,
    ) -> List[Appointment]:
        patient_key = patient_name.strip().casefold()
        matches = [
            apt.model_copy()
            for apt in self._appointments.values()
            if apt.is_confirmed
            and apt.doctor_id == doctor_id
            and apt.appointment_date == date
            and apt.patient_name.strip().casefold() == patient_key
            and (time is None or apt.appointment_time == time)
        ]
        return sorted(matches, key=lambda a: a.appointment_time)

    async def insert_confirmed(self, appointment: Appointment) -> Appointment:
        async with self._lock:
            holder = self._slot_holder(
                appointment.doctor_id,
                appointment.appointment_date,
                appointment.appointment_time,
            )
            if holder:
                logger.info(
                    f"Rejected booking: {appointment.appointment_date} {appointment.appointment_time} "
                    f"already confirmed for doctor {appointment.doctor_id}"
                )
                raise ConflictError(
                    f"Slot {appointment.appointment_date} at {appointment.appointment_time} is already booked"
                )

            now = datetime.utcnow()
            created = appointment.model_copy(update={
                "id": str(uuid.uuid4()),
                "status": AppointmentStatus.CONFIRMED,
                "created_at": now,
                "updated_at": now,
            })
            self._appointments[created.id] = created
            logger.info(f"Created appointment {created.id} for {created.patient_name}")
            return created.model_copy()

    async def transition_status(
        self,
        appointment_id: str,
        from_status: AppointmentStatus,
        to_status: AppointmentStatus,
    ) -> Optional[Appointment]:
        check_transition(from_status, to_status)
        async with self._lock:
            current = self._appointments.get(appointment_id)
            if not current or current.status != from_status:
                return None
            updated = current.model_copy(update={
                "status": to_status,
                "updated_at": datetime.utcnow(),
            })
            self._appointments[appointment_id] = updated
            logger.info(f"Appointment {appointment_id}: {from_status.value} -> {to_status.value}")
            return updated.model_copy()

    async def move_confirmed(
        self,
        appointment_id: str,
        old_date: str,
        new_date: str,
        new_time: str,
    ) -> Optional[Appointment]:
        async with self._lock:
            current = self._appointments.get(appointment_id)
            if not current or not current.is_confirmed or current.appointment_date != old_date:
                return None

            holder = self._slot_holder(current.doctor_id, new_date, new_time, exclude_id=appointment_id)
            if holder:
                raise ConflictError(f"Slot {new_date} at {new_time} is not available")

            updated = current.model_copy(update={
                "appointment_date": new_date,
                "appointment_time": new_time,
                "updated_at": datetime.utcnow(),
            })
            self._appointments[appointment_id] = updated
            logger.info(f"Moved appointment {appointment_id} to {new_date} {new_time}")
            return updated.model_copy()
