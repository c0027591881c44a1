# backend/reservas/services/slots/__init__.py
"""
Slots calculation module.

Calendar events → occupancy records → per-shift slot grid.
Everything is recalculated per request; the calendar is the only state.
"""

from .config import (
    ClassificationRule,
    EventRules,
    EventType,
    Restaurant,
    Shift,
)
from .clock import LocalClock
from .classifier import OccupancyRecord, classify_events, normalize_event
from .calculator import build_shift_slots
from .availability import (
    SlotEvaluation,
    check_slot,
    compute_day_availability,
    evaluate_slot,
    find_next_available,
)

__all__ = [
    "ClassificationRule",
    "EventRules",
    "EventType",
    "Restaurant",
    "Shift",
    "LocalClock",
    "OccupancyRecord",
    "classify_events",
    "normalize_event",
    "build_shift_slots",
    "SlotEvaluation",
    "check_slot",
    "compute_day_availability",
    "evaluate_slot",
    "find_next_available",
]
