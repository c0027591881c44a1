# backend/reservas/services/slots/classifier.py
"""
Calendar event → occupancy record.

Event text = "{summary} {description}".
Type comes from the restaurant rule table (first keyword found wins),
party size from the pax pattern (first match, 0 if absent).

Only closed / blocked / reservation records affect availability;
"other" events stay in the calendar for staff visibility.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime

from .clock import LocalClock
from .config import EventRules, EventType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OccupancyRecord:
    id: str | None
    start: datetime
    end: datetime
    type: EventType
    pax: int


def event_text(event: dict) -> str:
    return f"{event.get('summary') or ''} {event.get('description') or ''}"


def classify_text(text: str, rules: EventRules) -> EventType:
    upper = text.upper()
    for rule in rules.classification_rules:
        if rule.keyword.upper() in upper:
            return rule.event_type
    return EventType.OTHER


def parse_pax(text: str, rules: EventRules) -> int:
    match = rules.pax_regex.search(text)
    if not match:
        return 0
    try:
        return int(match.group(1))
    except (TypeError, ValueError):
        return 0


def resolve_event_time(value: dict | None, clock: LocalClock) -> datetime | None:
    """
    Resolve a Google Calendar start/end value to a local instant.

    {"dateTime": ISO} → instant converted to the restaurant timezone
    {"date": "YYYY-MM-DD"} → local midnight of that date
    """
    if not isinstance(value, dict):
        return None

    try:
        if value.get("dateTime"):
            raw = value["dateTime"].replace("Z", "+00:00")
            return clock.localize(datetime.fromisoformat(raw))
        if value.get("date"):
            return clock.start_of_day(date.fromisoformat(value["date"]))
    except (ValueError, TypeError, AttributeError):
        return None

    return None


def normalize_event(event: dict, clock: LocalClock, rules: EventRules) -> OccupancyRecord | None:
    """Build an OccupancyRecord, or None if start/end can't be resolved."""
    if not isinstance(event, dict):
        return None

    start = resolve_event_time(event.get("start"), clock)
    end = resolve_event_time(event.get("end"), clock)
    if start is None or end is None:
        return None

    text = event_text(event)
    return OccupancyRecord(
        id=event.get("id"),
        start=start,
        end=end,
        type=classify_text(text, rules),
        pax=parse_pax(text, rules),
    )


def classify_events(events: list, clock: LocalClock, rules: EventRules) -> list[OccupancyRecord]:
    """Normalize a day's events, dropping the ones that can't be read."""
    records = []
    for event in events:
        record = normalize_event(event, clock, rules)
        if record is None:
            event_id = event.get("id") if isinstance(event, dict) else None
            logger.warning(f"Skipping calendar event with unreadable start/end: {event_id}")
            continue
        records.append(record)
    return records
