"""Supabase-backed doctor directory store and appointment ledger."""

import logging
from datetime import datetime
from typing import List, NoReturn, Optional, Set

from postgrest.exceptions import APIError
from pydantic import ValidationError as ModelValidationError
from supabase import AsyncClient, create_async_client

from ..errors import ConflictError, UpstreamError
from ..models import Appointment, AppointmentStatus, Doctor
from .ledger import AppointmentLedger, DoctorStore, check_transition

logger = logging.getLogger(__name__)

# Postgres SQLSTATE for unique_violation.
UNIQUE_VIOLATION = "23505"

APPOINTMENT_COLUMNS = (
    "id, doctor_id, patient_name, patient_phone, appointment_date, "
    "appointment_time, status, created_at, updated_at"
)


async def create_supabase_client(url: str, key: str) -> AsyncClient:
    """Create the process-wide Supabase client."""
    client = await create_async_client(url, key)
    logger.info("Supabase client initialized")
    return client


def _escape_like(value: str) -> str:
    """Escape ilike wildcards so the value matches literally."""
    return value.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SupabaseDoctorStore(DoctorStore):
    """Doctor records from the ``doctors`` table."""

    def __init__(self, client: AsyncClient):
        self.client = client

    async def list_doctors(self) -> List[Doctor]:
        try:
            response = await (
                self.client.table("doctors")
                .select("id, name, specialty, working_hours_start, working_hours_end")
                .order("name", desc=False)
                .execute()
            )
        except APIError as e:
            logger.error(f"Error fetching doctors: {e}")
            raise UpstreamError(f"Could not load the doctor directory: {e.message}") from e

        doctors = []
        for row in response.data:
            try:
                doctors.append(Doctor(**row))
            except ModelValidationError as e:
                # A doctor without usable working hours cannot be scheduled.
                logger.warning(f"Skipping doctor record {row.get('id')}: {e}")
        return doctors


class SupabaseLedger(AppointmentLedger):
    """
    Appointment ledger on the ``appointments`` table.

    Double booking is prevented by the partial unique index
    ``(doctor_id, appointment_date, appointment_time) WHERE status = 'confirmed'``
    (see sql/schema.sql). Inserts and moves are single statements, so the
    database performs the conflict check and the write atomically and a
    unique violation is reported as ConflictError.
    """

    def __init__(self, client: AsyncClient):
        self.client = client

    def _raise_for(self, error: APIError, action: str, date: str = "", time: str = "") -> NoReturn:
        if error.code == UNIQUE_VIOLATION:
            logger.info(f"Slot conflict while trying to {action}: {date} {time}")
            raise ConflictError(f"Slot {date} at {time} is already booked") from error
        logger.error(f"Error trying to {action}: {error}")
        raise UpstreamError(f"Database error while trying to {action}: {error.message}") from error

    async def get(self, appointment_id: str) -> Optional[Appointment]:
        try:
            response = await (
                self.client.table("appointments")
                .select(APPOINTMENT_COLUMNS)
                .eq("id", appointment_id)
                .limit(1)
                .execute()
            )
        except APIError as e:
            self._raise_for(e, "fetch appointment")
        if response.data:
            return Appointment(**response.data[0])
        return None

    async def confirmed_times(self, doctor_id: str, date: str) -> Set[str]:
        try:
            response = await (
                self.client.table("appointments")
                .select("appointment_time")
                .eq("doctor_id", doctor_id)
                .eq("appointment_date", date)
                .eq("status", AppointmentStatus.CONFIRMED.value)
                .execute()
            )
        except APIError as e:
            self._raise_for(e, "check booked slots")
        return {row["appointment_time"][:5] for row in response.data}

    async def find_confirmed(
        self,
        doctor_id: str,
        patient_name: str,
        date: str,
        time: Optional[str] = None,
    ) -> List[Appointment]:
        query = (
            self.client.table("appointments")
            .select(APPOINTMENT_COLUMNS)
            .eq("doctor_id", doctor_id)
            .ilike("patient_name", _escape_like(patient_name))
            .eq("appointment_date", date)
            .eq("status", AppointmentStatus.CONFIRMED.value)
        )
        if time:
            query = query.eq("appointment_time", time)

        try:
            response = await query.order("appointment_time", desc=False).execute()
        except APIError as e:
            self._raise_for(e, "find appointment")
        return [Appointment(**row) for row in response.data]

    async def insert_confirmed(self, appointment: Appointment) -> Appointment:
        now = datetime.utcnow().isoformat()
        apt_data = {
            "doctor_id": appointment.doctor_id,
            "patient_name": appointment.patient_name,
            "patient_phone": appointment.patient_phone,
            "appointment_date": appointment.appointment_date,
            "appointment_time": appointment.appointment_time,
            "status": AppointmentStatus.CONFIRMED.value,
            "created_at": now,
            "updated_at": now,
        }
        try:
            response = await self.client.table("appointments").insert(apt_data).execute()
        except APIError as e:
            self._raise_for(e, "book appointment", appointment.appointment_date, appointment.appointment_time)

        created = Appointment(**response.data[0])
        logger.info(f"Created appointment {created.id} for {created.patient_name}")
        return created

    async def transition_status(
        self,
        appointment_id: str,
        from_status: AppointmentStatus,
        to_status: AppointmentStatus,
    ) -> Optional[Appointment]:
        check_transition(from_status, to_status)
        try:
            response = await (
                self.client.table("appointments")
                .update({
                    "status": to_status.value,
                    "updated_at": datetime.utcnow().isoformat(),
                })
                .eq("id", appointment_id)
                .eq("status", from_status.value)
                .execute()
            )
        except APIError as e:
            self._raise_for(e, f"mark appointment {to_status.value}")

        if not response.data:
            return None
        logger.info(f"Appointment {appointment_id}: {from_status.value} -> {to_status.value}")
        return Appointment(**response.data[0])

    async def move_confirmed(
        self,
        appointment_id: str,
        old_date: str,
        new_date: str,
        new_time: str,
    ) -> Optional[Appointment]:
        try:
            response = await (
                self.client.table("appointments")
                .update({
                    "appointment_date": new_date,
                    "appointment_time": new_time,
                    "updated_at": datetime.utcnow().isoformat(),
                })
                .eq("id", appointment_id)
                .eq("status", AppointmentStatus.CONFIRMED.value)
                .eq("appointment_date", old_date)
                .execute()
            )
        except APIError as e:
            self._raise_for(e, "reschedule appointment", new_date, new_time)

        if not response.data:
            return None
        logger.info(f"Moved appointment {appointment_id} to {new_date} {new_time}")
        return Appointment(**response.data[0])
