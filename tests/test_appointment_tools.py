"""Tests for the tool executor."""

import pytest

from sahay.errors import UpstreamError, ValidationError
from sahay.tools.appointment_tools import validate_arguments
from sahay.tools.definitions import APPOINTMENT_TOOLS, BookAppointmentArgs

from conftest import TEST_DATE

BOOKING = {
    "doctor_name": "Dr. Rao",
    "patient_name": "Asha",
    "phone": "9876543210",
    "date": TEST_DATE,
    "time": "10:00",
}


def test_every_declared_tool_is_registered(tools):
    assert sorted(t["name"] for t in APPOINTMENT_TOOLS) == sorted(tools.tool_names)


def test_validate_arguments_reports_missing_and_unknown_fields():
    with pytest.raises(ValidationError) as exc_info:
        validate_arguments(BookAppointmentArgs, {"doctor_name": "Dr. Rao", "colour": "blue"})

    message = exc_info.value.message
    assert "missing required field 'patient_name'" in message
    assert "unknown field 'colour'" in message


def test_validate_arguments_coerces_and_strips():
    args = validate_arguments(BookAppointmentArgs, {**BOOKING, "phone": 9876543210, "patient_name": " Asha "})
    assert args.phone == "9876543210"
    assert args.patient_name == "Asha"


async def test_list_specialties(tools):
    result = await tools.execute_tool("list_specialties", {})
    assert result.success
    assert result.data["specialties"] == ["Cardiology", "Dermatology", "Orthopedics"]


async def test_find_doctors(tools):
    result = await tools.execute_tool("find_doctors", {"specialty": "Cardiology"})
    assert result.success
    assert result.data["doctors"] == [
        {"name": "Dr. Rao", "specialty": "Cardiology"},
        {"name": "Dr. Anil Kumar", "specialty": "Cardiology"},
    ]


async def test_find_doctors_with_no_match(tools):
    result = await tools.execute_tool("find_doctors", {"specialty": "Neurology"})
    assert result.success
    assert result.data["doctors"] == []
    assert "Neurology" in result.message


async def test_get_availability_slots_and_periods(tools):
    slots = await tools.execute_tool("get_availability", {"doctor_name": "Dr. Rao", "date": TEST_DATE})
    assert slots.success
    assert slots.data["available_slots"][:2] == ["09:00", "09:30"]
    assert len(slots.data["available_slots"]) == 16

    periods = await tools.execute_tool(
        "get_availability", {"doctor_name": "Dr. Rao", "date": TEST_DATE, "view": "periods"},
    )
    assert periods.data["available_periods"] == ["morning", "afternoon"]


async def test_book_then_conflict_becomes_failed_result(tools):
    first = await tools.execute_tool("book_appointment", BOOKING)
    assert first.success
    assert first.data["appointment"]["doctor_name"] == "Dr. Rao"
    assert first.data["appointment"]["status"] == "confirmed"

    second = await tools.execute_tool("book_appointment", {**BOOKING, "patient_name": "Ravi"})
    assert not second.success
    assert second.error_code == "conflict"
    assert second.to_payload()["error"] == "conflict"


async def test_invalid_arguments_become_failed_result(tools):
    result = await tools.execute_tool("book_appointment", {"doctor_name": "Dr. Rao"})
    assert not result.success
    assert result.error_code == "validation_error"


async def test_ambiguous_doctor_lists_candidates(tools):
    result = await tools.execute_tool("get_availability", {"doctor_name": "Kumar", "date": TEST_DATE})
    assert not result.success
    assert result.error_code == "ambiguous"
    assert sorted(result.data["candidates"]) == ["Dr. Anil Kumar", "Dr. Sunil Kumar"]


async def test_cancel_and_reschedule(tools):
    await tools.execute_tool("book_appointment", BOOKING)

    moved = await tools.execute_tool("reschedule_appointment", {
        "doctor_name": "Dr. Rao",
        "patient_name": "Asha",
        "old_date": TEST_DATE,
        "new_date": TEST_DATE,
        "new_time": "14:00",
    })
    assert moved.success
    assert moved.data["appointment"]["time"] == "14:00"

    cancelled = await tools.execute_tool("cancel_appointment", {
        "doctor_name": "Dr. Rao",
        "patient_name": "Asha",
        "date": TEST_DATE,
    })
    assert cancelled.success
    assert cancelled.data["appointment"]["status"] == "cancelled"


async def test_unknown_tool_raises(tools):
    with pytest.raises(UpstreamError):
        await tools.execute_tool("delete_everything", {})


async def test_infrastructure_failure_raises(tools, engine, monkeypatch):
    async def broken(*args, **kwargs):
        raise RuntimeError("connection reset")

    monkeypatch.setattr(engine.ledger, "confirmed_times", broken)
    with pytest.raises(UpstreamError):
        await tools.execute_tool("get_availability", {"doctor_name": "Dr. Rao", "date": TEST_DATE})
