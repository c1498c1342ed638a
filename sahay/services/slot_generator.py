"""Slot generator for a doctor's bookable appointment times."""

import logging
from datetime import datetime, time, timedelta
from typing import Iterable, List, Optional, Tuple

from ..models import DayPart, Doctor, Slot
from ..utils.helpers import format_time_for_speech, parse_clock

logger = logging.getLogger(__name__)


def parse_break(window: str) -> Tuple[time, time]:
    """
    Parse a break window written as 'HH:MM-HH:MM'.

    Raises:
        ValueError: If the window is malformed or empty
    """
    try:
        start_text, end_text = window.split("-")
    except ValueError:
        raise ValueError(f"Break '{window}' must look like HH:MM-HH:MM")
    start, end = parse_clock(start_text), parse_clock(end_text)
    if end <= start:
        raise ValueError(f"Break '{window}' ends before it starts")
    return start, end


class SlotGenerator:
    """Generates a doctor's slots for one date from their working hours."""

    def __init__(
        self,
        slot_duration_minutes: int = 30,
        breaks: Optional[Iterable[Tuple[time, time]]] = None,
        afternoon_start: time = time(12, 0),
        evening_start: time = time(17, 0),
    ):
        """
        Initialize slot generator.

        Args:
            slot_duration_minutes: Distance between consecutive slots
            breaks: (start, end) windows in which no slot may start, e.g. lunch
            afternoon_start: First time classified as afternoon
            evening_start: First time classified as evening
        """
        if slot_duration_minutes <= 0:
            raise ValueError("slot_duration_minutes must be positive")
        if evening_start <= afternoon_start:
            raise ValueError("evening_start must come after afternoon_start")

        self.slot_duration = timedelta(minutes=slot_duration_minutes)
        self.breaks = sorted(breaks or [])
        self.afternoon_start = afternoon_start
        self.evening_start = evening_start

    def classify(self, slot_time: time) -> DayPart:
        """Classify a time of day as morning, afternoon or evening."""
        if slot_time < self.afternoon_start:
            return DayPart.MORNING
        if slot_time < self.evening_start:
            return DayPart.AFTERNOON
        return DayPart.EVENING

    def _in_break(self, slot_time: time) -> bool:
        return any(start <= slot_time < end for start, end in self.breaks)

    def generate_slots(self, doctor: Doctor, date: str) -> List[Slot]:
        """
        Generate every slot for a doctor on a date.

        Slots run from the start of working hours up to (not including) the
        end, one per slot duration, skipping any configured break. The date
        only anchors the arithmetic; the result depends solely on the
        doctor's hours and this generator's configuration.

        Args:
            doctor: Doctor whose working hours apply
            date: Date in YYYY-MM-DD format

        Returns:
            Strictly ascending list of Slot objects
        """
        day = datetime.strptime(date, "%Y-%m-%d").date()
        current = datetime.combine(day, doctor.working_hours_start)
        end = datetime.combine(day, doctor.working_hours_end)

        slots = []
        while current < end:
            slot_time = current.time()
            if not self._in_break(slot_time):
                slots.append(Slot(
                    time=slot_time.strftime("%H:%M"),
                    day_part=self.classify(slot_time),
                ))
            current += self.slot_duration

        logger.debug(f"Generated {len(slots)} slots for {doctor.name} on {date}")
        return slots

    def format_slots_for_speech(
        self,
        slots: List[Slot],
        max_slots: int = 5,
    ) -> str:
        """
        Format slots for a short conversational reply.

        Args:
            slots: List of Slot objects
            max_slots: Maximum slots to mention

        Returns:
            Human-readable string
        """
        if not slots:
            return "There are no available slots."

        display = [format_time_for_speech(s.time) for s in slots[:max_slots]]
        total = len(slots)

        if len(display) == 1:
            result = display[0]
        else:
            result = ", ".join(display[:-1]) + f" or {display[-1]}"

        if total > max_slots:
            result += f" ({total - max_slots} more available)"

        return result
