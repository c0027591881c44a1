"""
backend/reservas/services/booking.py

Booking gate: re-check a slot against the calendar, then write the
reservation event.

Known gap: the check and the insert are two separate calendar calls.
Two bookings racing for the same slot can both pass the check before
either event exists. The calendar has no compare-and-set and other
writers are not coordinated by this process, so an in-process lock
would not close it.
"""

import logging
from datetime import date

from .google_calendar import GoogleCalendarClient, get_calendar_client
from .slots.availability import check_slot
from .slots.clock import LocalClock
from .slots.config import Restaurant

logger = logging.getLogger(__name__)


def build_reservation_event(
    restaurant: Restaurant,
    target_date: date,
    time_str: str,
    party: int,
    name: str,
    phone: str | None = None,
    email: str | None = None,
    notes: str | None = None,
) -> dict:
    """
    Build the calendar event body for a reservation.

    The summary carries "Reserva" and "PAX=N" so later availability
    passes read it back as a reservation of N people.
    """
    clock = LocalClock(restaurant.timezone)
    start = clock.at(target_date, time_str)
    end = clock.add_minutes(start, restaurant.reservation_duration_minutes)

    description_parts = []
    if phone:
        description_parts.append(f"Tel: {phone}")
    if email:
        description_parts.append(f"Email: {email}")
    if notes:
        description_parts.append(f"Notas: {notes}")

    return {
        "summary": f"Reserva - {name} - PAX={party}",
        "description": "\n".join(description_parts),
        "start": {
            "dateTime": start.isoformat(),
            "timeZone": restaurant.timezone,
        },
        "end": {
            "dateTime": end.isoformat(),
            "timeZone": restaurant.timezone,
        },
    }


def book_reservation(
    restaurant: Restaurant,
    target_date: date,
    time_str: str,
    party: int,
    name: str,
    phone: str | None = None,
    email: str | None = None,
    notes: str | None = None,
    calendar: GoogleCalendarClient | None = None,
) -> dict | None:
    """
    Book a reservation if the slot is still free.

    Returns:
        None if the slot is unavailable, otherwise:
        {
            "event_id": str,
            "html_link": str | None,
            "start": ISO str,
            "end": ISO str,
        }

    Raises:
        CalendarProviderError: If the check or the insert fails
    """
    calendar = calendar or get_calendar_client()

    slot = check_slot(restaurant, target_date, time_str, party, calendar)
    if not slot["available"]:
        logger.info(
            f"Slot rejected for {restaurant.slug} {target_date.isoformat()} {time_str}: "
            f"party={party} occupied={slot['total_pax']} capacity={slot['capacity_max']}"
        )
        return None

    body = build_reservation_event(
        restaurant, target_date, time_str, party, name, phone, email, notes
    )
    created_event = calendar.insert_event(restaurant.calendar_id, body)

    logger.info(
        f"Reservation booked for {restaurant.slug} {target_date.isoformat()} {time_str} "
        f"party={party}: event_id={created_event.get('id')}"
    )

    return {
        "event_id": created_event.get("id"),
        "html_link": created_event.get("htmlLink"),
        "start": body["start"]["dateTime"],
        "end": body["end"]["dateTime"],
    }
