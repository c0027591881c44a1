# backend/reservas/services/slots/calculator.py
"""
Candidate slot starts for one shift on one date.

start, start + interval, start + 2*interval, ...
while start + duration <= shift end (a slot may end exactly at shift end).
"""

from datetime import date, datetime

from .clock import LocalClock
from .config import Shift


def build_shift_slots(
    shift: Shift,
    target_date: date,
    reservation_duration_minutes: int,
    slot_interval_minutes: int,
    clock: LocalClock,
) -> list[datetime]:
    """
    Calculate slot start instants for a shift.

    Returns:
        Chronological list of aware datetimes. Empty list = duration
        does not fit in the shift.
    """
    if reservation_duration_minutes <= 0 or slot_interval_minutes <= 0:
        raise ValueError("reservation duration and slot interval must be positive")

    shift_start = clock.at(target_date, shift.start)
    shift_end = clock.at(target_date, shift.end)
    last_start_ts = clock.add_minutes(shift_end, -reservation_duration_minutes).timestamp()

    slots: list[datetime] = []
    cursor = shift_start
    while cursor.timestamp() <= last_start_ts:
        slots.append(cursor)
        cursor = clock.add_minutes(cursor, slot_interval_minutes)

    return slots
