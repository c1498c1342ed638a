"""Tests for the scheduling engine over the in-memory ledger."""

import asyncio

import pytest

from sahay.errors import AmbiguousError, ConflictError, NotFoundError, ValidationError
from sahay.models import AppointmentStatus, DayPart

from conftest import TEST_DATE

NEXT_DAY = "2025-03-11"


async def book(engine, patient="Asha", time="10:00", date=TEST_DATE, doctor="Dr. Rao"):
    return await engine.book_appointment(
        doctor_name=doctor,
        patient_name=patient,
        phone="98765 43210",
        date=date,
        time=time,
    )


async def test_availability_is_subset_of_generated_slots(engine, slot_generator, directory):
    rao = await directory.resolve("Dr. Rao")
    await book(engine, time="10:00")

    free = await engine.availability("Dr. Rao", TEST_DATE)
    generated = slot_generator.generate_slots(rao, TEST_DATE)

    assert set(free) <= set(generated)
    assert len(free) == len(generated) - 1
    assert "10:00" not in [s.time for s in free]


async def test_availability_time_of_day_filter(engine):
    morning = await engine.availability("Dr. Rao", TEST_DATE, "morning")
    assert [s.time for s in morning] == ["09:00", "09:30", "10:00", "10:30", "11:00", "11:30"]

    evening = await engine.availability("Dr. Rao", TEST_DATE, "Evening")
    assert evening == []


async def test_availability_rejects_unknown_time_of_day(engine):
    with pytest.raises(ValidationError):
        await engine.availability("Dr. Rao", TEST_DATE, "night")


async def test_availability_rejects_bad_date(engine):
    with pytest.raises(ValidationError):
        await engine.availability("Dr. Rao", "someday")


async def test_available_periods(engine):
    assert await engine.available_periods("Dr. Rao", TEST_DATE) == [DayPart.MORNING, DayPart.AFTERNOON]

    for t in ["09:00", "09:30", "10:00", "10:30", "11:00", "11:30"]:
        await book(engine, patient=f"P{t}", time=t)
    assert await engine.available_periods("Dr. Rao", TEST_DATE) == [DayPart.AFTERNOON]


async def test_book_appointment(engine, ledger):
    created = await book(engine, time="10am")

    assert created.id
    assert created.doctor_id == "1"
    assert created.appointment_time == "10:00"
    assert created.patient_phone == "9876543210"
    assert created.status == AppointmentStatus.CONFIRMED
    assert await ledger.get(created.id) == created


async def test_double_booking_conflicts(engine):
    await book(engine, patient="Asha")
    with pytest.raises(ConflictError):
        await book(engine, patient="Ravi")


async def test_same_time_different_doctor_is_allowed(engine):
    await book(engine, patient="Asha", time="10:00")
    other = await book(engine, patient="Ravi", time="10:00", doctor="Dr. Anil Kumar")
    assert other.doctor_id == "2"


async def test_concurrent_bookings_only_one_wins(engine, ledger):
    attempts = 10
    results = await asyncio.gather(
        *[book(engine, patient=f"Patient {i}", time="11:00") for i in range(attempts)],
        return_exceptions=True,
    )

    successes = [r for r in results if not isinstance(r, Exception)]
    conflicts = [r for r in results if isinstance(r, ConflictError)]
    assert len(successes) == 1
    assert len(conflicts) == attempts - 1

    confirmed = [a for a in await ledger.all() if a.is_confirmed]
    assert len(confirmed) == 1


@pytest.mark.parametrize("time", ["17:00", "08:30", "10:15"])
async def test_book_outside_generated_slots(engine, time):
    with pytest.raises(ValidationError):
        await book(engine, time=time)


@pytest.mark.parametrize("field", ["doctor_name", "patient_name", "phone", "date", "time"])
async def test_book_missing_field(engine, field):
    args = {
        "doctor_name": "Dr. Rao",
        "patient_name": "Asha",
        "phone": "9876543210",
        "date": TEST_DATE,
        "time": "10:00",
    }
    args[field] = " "
    with pytest.raises(ValidationError):
        await engine.book_appointment(**args)


async def test_book_unknown_or_ambiguous_doctor(engine):
    with pytest.raises(NotFoundError):
        await book(engine, doctor="Dr. Who")
    with pytest.raises(AmbiguousError):
        await book(engine, doctor="Kumar")


async def test_cancel_then_rebook(engine, ledger):
    original = await book(engine, patient="Asha")
    cancelled = await engine.cancel_appointment("asha", "Dr. Rao", TEST_DATE)

    assert cancelled.id == original.id
    assert cancelled.status == AppointmentStatus.CANCELLED
    assert "10:00" in [s.time for s in await engine.availability("Dr. Rao", TEST_DATE)]

    rebooked = await book(engine, patient="Ravi")
    assert rebooked.id != original.id
    # The cancelled record is kept.
    assert (await ledger.get(original.id)).status == AppointmentStatus.CANCELLED


async def test_cancel_missing_appointment(engine):
    with pytest.raises(NotFoundError):
        await engine.cancel_appointment("Asha", "Dr. Rao", TEST_DATE)


async def test_cancel_twice_is_not_found(engine):
    await book(engine, patient="Asha")
    await engine.cancel_appointment("Asha", "Dr. Rao", TEST_DATE)
    with pytest.raises(NotFoundError):
        await engine.cancel_appointment("Asha", "Dr. Rao", TEST_DATE)


async def test_cancel_without_time_is_ambiguous_for_several(engine):
    await book(engine, patient="Asha", time="10:00")
    await book(engine, patient="Asha", time="15:00")

    with pytest.raises(AmbiguousError) as exc_info:
        await engine.cancel_appointment("Asha", "Dr. Rao", TEST_DATE)
    assert exc_info.value.candidates == ["10:00", "15:00"]

    cancelled = await engine.cancel_appointment("Asha", "Dr. Rao", TEST_DATE, time="3pm")
    assert cancelled.appointment_time == "15:00"


async def test_cancelled_never_returns_to_confirmed(engine, ledger):
    apt = await book(engine)
    await engine.cancel_appointment("Asha", "Dr. Rao", TEST_DATE)

    with pytest.raises(ValidationError):
        await ledger.transition_status(apt.id, AppointmentStatus.CANCELLED, AppointmentStatus.CONFIRMED)


async def test_reschedule_keeps_identifier(engine):
    original = await book(engine, patient="Asha", time="10:00")
    moved = await engine.reschedule_appointment(
        "Asha", "Dr. Rao", old_date=TEST_DATE, new_date=NEXT_DAY, new_time="11:00",
    )

    assert moved.id == original.id
    assert moved.patient_phone == original.patient_phone
    assert (moved.appointment_date, moved.appointment_time) == (NEXT_DAY, "11:00")
    assert "10:00" in [s.time for s in await engine.availability("Dr. Rao", TEST_DATE)]


async def test_reschedule_within_same_day(engine):
    original = await book(engine, patient="Asha", time="10:00")
    moved = await engine.reschedule_appointment(
        "Asha", "Dr. Rao", old_date=TEST_DATE, new_date=TEST_DATE, new_time="14:00",
    )
    assert moved.id == original.id
    assert moved.appointment_time == "14:00"


async def test_reschedule_nonexistent(engine):
    with pytest.raises(NotFoundError):
        await engine.reschedule_appointment(
            "Nobody", "Dr. Rao", old_date=TEST_DATE, new_date=NEXT_DAY, new_time="11:00",
        )


async def test_reschedule_onto_occupied_slot(engine, ledger):
    asha = await book(engine, patient="Asha", time="10:00")
    await book(engine, patient="Ravi", time="11:00", date=NEXT_DAY)

    with pytest.raises(ConflictError):
        await engine.reschedule_appointment(
            "Asha", "Dr. Rao", old_date=TEST_DATE, new_date=NEXT_DAY, new_time="11:00",
        )

    untouched = await ledger.get(asha.id)
    assert untouched.is_confirmed
    assert (untouched.appointment_date, untouched.appointment_time) == (TEST_DATE, "10:00")


async def test_reschedule_to_invalid_time(engine):
    await book(engine, patient="Asha")
    with pytest.raises(ValidationError):
        await engine.reschedule_appointment(
            "Asha", "Dr. Rao", old_date=TEST_DATE, new_date=NEXT_DAY, new_time="18:00",
        )


async def test_move_guard_fails_after_cancel(engine, ledger):
    apt = await book(engine, patient="Asha")
    await engine.cancel_appointment("Asha", "Dr. Rao", TEST_DATE)
    assert await ledger.move_confirmed(apt.id, TEST_DATE, NEXT_DAY, "11:00") is None


async def test_dr_rao_end_to_end(engine):
    slots = await engine.availability("Dr. Rao", TEST_DATE)
    assert "10:00" in [s.time for s in slots]

    booked = await book(engine, patient="Asha", time="10:00")
    assert booked.status == AppointmentStatus.CONFIRMED
    assert "10:00" not in [s.time for s in await engine.availability("Dr. Rao", TEST_DATE)]

    moved = await engine.reschedule_appointment(
        "Asha", "Dr. Rao", old_date=TEST_DATE, new_date=TEST_DATE, new_time="15:30",
    )
    assert moved.id == booked.id

    cancelled = await engine.cancel_appointment("Asha", "Dr. Rao", TEST_DATE)
    assert cancelled.status == AppointmentStatus.CANCELLED
    assert len(await engine.availability("Dr. Rao", TEST_DATE)) == 16
