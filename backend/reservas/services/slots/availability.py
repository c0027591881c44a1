# backend/reservas/services/slots/availability.py
"""
Availability calculation against the restaurant calendar.

One calendar fetch per date: the day's events are classified once and
reused for every shift and every slot of that date.

A slot [start, start + duration) is available when no overlapping event
is "closed" and the pax of overlapping blocked/reservation events plus
the requested party fits in the shift capacity.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

from ..google_calendar import GoogleCalendarClient, get_calendar_client
from .calculator import build_shift_slots
from .classifier import OccupancyRecord, classify_events
from .clock import LocalClock
from .config import EventType, Restaurant, Shift

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlotEvaluation:
    available: bool
    total_pax: int


def overlaps(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    """Half-open intervals; touching at a boundary is not an overlap."""
    return start_a.timestamp() < end_b.timestamp() and end_a.timestamp() > start_b.timestamp()


def evaluate_slot(
    slot_start: datetime,
    reservation_duration_minutes: int,
    party: int,
    capacity_max: int,
    events: list[OccupancyRecord],
) -> SlotEvaluation:
    """
    Decide whether a party fits in a slot.

    Returns:
        SlotEvaluation. total_pax counts blocked/reservation pax only,
        without the requested party.
    """
    slot_end = slot_start.astimezone(timezone.utc) + timedelta(minutes=reservation_duration_minutes)
    total_pax = 0
    closed = False

    for event in events:
        if not overlaps(event.start, event.end, slot_start, slot_end):
            continue
        if event.type == EventType.CLOSED:
            closed = True
            break
        if event.type in (EventType.BLOCKED, EventType.RESERVATION):
            total_pax += event.pax

    return SlotEvaluation(
        available=not closed and total_pax + party <= capacity_max,
        total_pax=total_pax,
    )


def fetch_day_events(
    restaurant: Restaurant,
    target_date: date,
    clock: LocalClock,
    calendar: GoogleCalendarClient | None = None,
) -> list[OccupancyRecord]:
    """Fetch and classify all events of a local day (one provider call)."""
    calendar = calendar or get_calendar_client()
    time_min, time_max = clock.day_window(target_date)

    raw_events = calendar.list_events(restaurant.calendar_id, time_min, time_max)
    events = classify_events(raw_events, clock, restaurant.event_rules)

    logger.debug(
        f"Fetched {len(raw_events)} events ({len(events)} usable) "
        f"for {restaurant.slug} on {target_date.isoformat()}"
    )
    return events


def compute_day_availability(
    restaurant: Restaurant,
    target_date: date,
    party: int,
    calendar: GoogleCalendarClient | None = None,
) -> dict:
    """
    Calculate the slot grid of a day for a party size.

    Returns:
        {
            "date": "YYYY-MM-DD",
            "shifts": [{"name": str, "slots": [{"time": "HH:MM", "available": bool}]}],
            "available_count": int,
        }
    """
    clock = LocalClock(restaurant.timezone)
    events = fetch_day_events(restaurant, target_date, clock, calendar)

    available_count = 0
    shifts = []

    for shift in restaurant.shifts:
        capacity_max = shift.effective_capacity(restaurant.capacity_max)
        slot_starts = build_shift_slots(
            shift,
            target_date,
            restaurant.reservation_duration_minutes,
            restaurant.slot_interval_minutes,
            clock,
        )

        slots = []
        for slot_start in slot_starts:
            result = evaluate_slot(
                slot_start,
                restaurant.reservation_duration_minutes,
                party,
                capacity_max,
                events,
            )
            if result.available:
                available_count += 1
            slots.append({
                "time": clock.format_time(slot_start),
                "available": result.available,
            })

        shifts.append({"name": shift.name, "slots": slots})

    return {
        "date": target_date.isoformat(),
        "shifts": shifts,
        "available_count": available_count,
    }


def find_next_available(
    restaurant: Restaurant,
    start_date: date,
    party: int,
    lookahead_days: int,
    calendar: GoogleCalendarClient | None = None,
) -> dict | None:
    """
    Find the first open slot after start_date.

    Dates start_date+1 .. start_date+lookahead_days are checked one by one,
    in order; the first shift with an available slot wins.

    Returns:
        {"date": "YYYY-MM-DD", "shift": str, "time": "HH:MM"} or None.
    """
    if lookahead_days <= 0:
        return None

    for offset in range(1, lookahead_days + 1):
        candidate = start_date + timedelta(days=offset)
        availability = compute_day_availability(restaurant, candidate, party, calendar)

        for shift in availability["shifts"]:
            slot = next((s for s in shift["slots"] if s["available"]), None)
            if slot:
                return {
                    "date": availability["date"],
                    "shift": shift["name"],
                    "time": slot["time"],
                }

    logger.info(
        f"No availability for {restaurant.slug} party={party} "
        f"within {lookahead_days} days after {start_date.isoformat()}"
    )
    return None


def find_containing_shift(
    restaurant: Restaurant,
    target_date: date,
    time_str: str,
    clock: LocalClock,
) -> Shift | None:
    """First shift whose window holds [time, time + duration]."""
    slot_start = clock.at(target_date, time_str)
    slot_end = clock.add_minutes(slot_start, restaurant.reservation_duration_minutes)

    for shift in restaurant.shifts:
        shift_start = clock.at(target_date, shift.start)
        shift_end = clock.at(target_date, shift.end)
        if (
            slot_start.timestamp() >= shift_start.timestamp()
            and slot_end.timestamp() <= shift_end.timestamp()
        ):
            return shift
    return None


def check_slot(
    restaurant: Restaurant,
    target_date: date,
    time_str: str,
    party: int,
    calendar: GoogleCalendarClient | None = None,
) -> dict:
    """
    Evaluate a single slot right now.

    A time outside every shift is simply unavailable (no fetch).

    Returns:
        {"available": bool, "total_pax": int, "capacity_max": int}
    """
    clock = LocalClock(restaurant.timezone)
    shift = find_containing_shift(restaurant, target_date, time_str, clock)

    if shift is None:
        return {
            "available": False,
            "total_pax": 0,
            "capacity_max": restaurant.capacity_max,
        }

    capacity_max = shift.effective_capacity(restaurant.capacity_max)
    events = fetch_day_events(restaurant, target_date, clock, calendar)
    result = evaluate_slot(
        clock.at(target_date, time_str),
        restaurant.reservation_duration_minutes,
        party,
        capacity_max,
        events,
    )

    return {
        "available": result.available,
        "total_pax": result.total_pax,
        "capacity_max": capacity_max,
    }
