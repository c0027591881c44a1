# backend/reservas/services/slots/config.py
"""
Restaurant configuration for slots calculation.

Restaurant and Shift are frozen and validated on construction, so an
invalid definition never reaches the availability code.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ...exceptions import ConfigurationError


TIME_RE = re.compile(r"^\d{2}:\d{2}$")

DEFAULT_PAX_PATTERN = r"PAX\s*=\s*(\d+)"


class EventType(str, Enum):
    CLOSED = "closed"
    BLOCKED = "blocked"
    RESERVATION = "reservation"
    OTHER = "other"


def time_str_to_minutes(value: str) -> int:
    """Convert "HH:MM" to minutes since midnight."""
    hour, minute = value.split(":")
    return int(hour) * 60 + int(minute)


def is_valid_time_str(value: str) -> bool:
    if not isinstance(value, str) or not TIME_RE.match(value):
        return False
    hour, minute = value.split(":")
    return int(hour) < 24 and int(minute) < 60


@dataclass(frozen=True)
class ClassificationRule:
    """Keyword found in event text → event type."""
    keyword: str
    event_type: EventType


DEFAULT_CLASSIFICATION_RULES = (
    ClassificationRule("CERRADO", EventType.CLOSED),
    ClassificationRule("BLOQUEO", EventType.BLOCKED),
    ClassificationRule("RESERVA", EventType.RESERVATION),
)


@dataclass(frozen=True)
class EventRules:
    """
    How calendar event text is read.

    Attributes:
        classification_rules: Ordered rule table, first match wins
        pax_pattern: Regex with one group capturing the party size
    """
    classification_rules: tuple[ClassificationRule, ...] = DEFAULT_CLASSIFICATION_RULES
    pax_pattern: str = DEFAULT_PAX_PATTERN

    def __post_init__(self):
        for rule in self.classification_rules:
            if not isinstance(rule.keyword, str):
                raise ConfigurationError(f"Classification keyword must be a string: {rule.keyword!r}")
            if not rule.keyword.strip():
                raise ConfigurationError("Classification keyword cannot be empty")
        try:
            compiled = re.compile(self.pax_pattern, re.IGNORECASE)
        except re.error as e:
            raise ConfigurationError(f"Invalid pax_pattern: {e}")
        if compiled.groups < 1:
            raise ConfigurationError("pax_pattern must capture the party size in a group")

    @property
    def pax_regex(self) -> re.Pattern:
        return re.compile(self.pax_pattern, re.IGNORECASE)


@dataclass(frozen=True)
class Shift:
    """
    Named service window (lunch, dinner) in restaurant local time.

    Attributes:
        name: Display name
        start: "HH:MM"
        end: "HH:MM", same day, after start
        capacity_max: Optional override of the restaurant capacity
    """
    name: str
    start: str
    end: str
    capacity_max: int | None = None

    def __post_init__(self):
        if not self.name or not self.start or not self.end:
            raise ConfigurationError("Each shift must include name, start, and end")
        if not is_valid_time_str(self.start) or not is_valid_time_str(self.end):
            raise ConfigurationError(f"Shift {self.name}: start/end must use HH:MM format")
        if time_str_to_minutes(self.start) >= time_str_to_minutes(self.end):
            raise ConfigurationError(f"Shift {self.name}: start must be before end")
        if self.capacity_max is not None and self.capacity_max <= 0:
            raise ConfigurationError(f"Shift {self.name}: invalid capacity_max")

    def effective_capacity(self, default: int) -> int:
        return self.capacity_max if self.capacity_max is not None else default


@dataclass(frozen=True)
class Restaurant:
    slug: str
    name: str
    timezone: str
    calendar_id: str
    capacity_max: int
    slot_interval_minutes: int
    reservation_duration_minutes: int
    shifts: tuple[Shift, ...]
    event_rules: EventRules = field(default_factory=EventRules)

    def __post_init__(self):
        if not self.slug:
            raise ConfigurationError("Restaurant slug is required")
        if not self.calendar_id:
            raise ConfigurationError(f"Missing calendar_id for restaurant {self.slug}")
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError, TypeError):
            raise ConfigurationError(f"Invalid timezone for restaurant {self.slug}: {self.timezone}")
        if self.capacity_max <= 0:
            raise ConfigurationError(f"Invalid capacity_max for restaurant {self.slug}")
        if self.slot_interval_minutes <= 0:
            raise ConfigurationError(f"Invalid slot_interval_minutes for restaurant {self.slug}")
        if self.reservation_duration_minutes <= 0:
            raise ConfigurationError(f"Invalid reservation_duration_minutes for restaurant {self.slug}")
        if not self.shifts:
            raise ConfigurationError(f"Shifts config is required for restaurant {self.slug}")
