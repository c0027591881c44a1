"""
Tests for slot evaluation and the day planner.
"""
from datetime import datetime

import pytest

from reservas.services.slots.availability import (
    compute_day_availability,
    evaluate_slot,
    overlaps,
)
from reservas.services.slots.classifier import OccupancyRecord
from reservas.services.slots.config import EventType

from tests.factories import DAY, make_event


def _at(hhmm):
    return datetime.fromisoformat(f"2025-06-10T{hhmm}:00+02:00")


def _record(event_type, start, end, pax=0):
    return OccupancyRecord(id=None, start=_at(start), end=_at(end), type=event_type, pax=pax)


# ============ OVERLAP ============

def test_overlap_partial():
    assert overlaps(_at("12:00"), _at("13:30"), _at("13:00"), _at("14:00"))


def test_back_to_back_intervals_do_not_overlap():
    assert not overlaps(_at("12:00"), _at("13:30"), _at("13:30"), _at("15:00"))
    assert not overlaps(_at("13:30"), _at("15:00"), _at("12:00"), _at("13:30"))


def test_overlap_compares_instants_across_timezones():
    utc_start = datetime.fromisoformat("2025-06-10T11:00:00+00:00")  # 13:00 Madrid
    utc_end = datetime.fromisoformat("2025-06-10T11:30:00+00:00")
    assert overlaps(utc_start, utc_end, _at("12:30"), _at("14:00"))


# ============ EVALUATE SLOT ============

def test_party_fills_capacity_exactly():
    events = [_record(EventType.RESERVATION, "12:00", "13:30", pax=12)]

    fits = evaluate_slot(_at("12:30"), 90, 8, 20, events)
    assert fits.available is True
    assert fits.total_pax == 12

    too_big = evaluate_slot(_at("12:30"), 90, 9, 20, events)
    assert too_big.available is False
    assert too_big.total_pax == 12


def test_closed_blocks_regardless_of_capacity():
    events = [_record(EventType.CLOSED, "12:00", "16:00")]
    result = evaluate_slot(_at("13:00"), 90, 1, 1000, events)
    assert result.available is False
    assert result.total_pax == 0


def test_blocked_and_reservation_add_up():
    events = [
        _record(EventType.BLOCKED, "12:00", "15:00", pax=10),
        _record(EventType.RESERVATION, "13:00", "14:30", pax=6),
    ]
    result = evaluate_slot(_at("13:00"), 90, 4, 20, events)
    assert result.total_pax == 16
    assert result.available is True


def test_other_events_are_ignored():
    events = [_record(EventType.OTHER, "12:00", "15:00", pax=50)]
    result = evaluate_slot(_at("12:00"), 90, 20, 20, events)
    assert result.available is True
    assert result.total_pax == 0


def test_non_overlapping_events_are_ignored():
    events = [
        _record(EventType.CLOSED, "10:00", "12:00"),
        _record(EventType.RESERVATION, "13:30", "15:00", pax=20),
    ]
    result = evaluate_slot(_at("12:00"), 90, 20, 20, events)
    assert result.available is True
    assert result.total_pax == 0


@pytest.mark.parametrize("occupied", [0, 5, 12, 19, 25])
def test_availability_monotonic_in_party_and_capacity(occupied):
    events = [_record(EventType.RESERVATION, "12:00", "13:30", pax=occupied)]
    by_party = [evaluate_slot(_at("12:00"), 90, party, 20, events).available for party in range(1, 30)]
    by_capacity = [evaluate_slot(_at("12:00"), 90, 4, cap, events).available for cap in range(1, 40)]

    # once unavailable, a bigger party never becomes available
    assert by_party == sorted(by_party, reverse=True)
    # once available, more capacity never makes it unavailable
    assert by_capacity == sorted(by_capacity)


def test_evaluation_is_idempotent():
    events = [_record(EventType.RESERVATION, "12:00", "13:30", pax=7)]
    assert evaluate_slot(_at("12:30"), 90, 5, 20, events) == evaluate_slot(_at("12:30"), 90, 5, 20, events)


# ============ DAY PLANNER ============

def test_empty_day_all_available(restaurant, calendar):
    result = compute_day_availability(restaurant, DAY, 2, calendar)

    assert result["date"] == "2025-06-10"
    assert [s["name"] for s in result["shifts"]] == ["Lunch", "Dinner"]
    lunch_times = [slot["time"] for slot in result["shifts"][0]["slots"]]
    assert lunch_times == ["12:00", "12:30", "13:00", "13:30"]
    assert result["available_count"] == 8
    assert all(slot["available"] for shift in result["shifts"] for slot in shift["slots"])


def test_single_fetch_for_whole_day(restaurant, calendar):
    compute_day_availability(restaurant, DAY, 2, calendar)

    assert len(calendar.list_calls) == 1
    calendar_id, time_min, time_max = calendar.list_calls[0]
    assert calendar_id == restaurant.calendar_id
    assert time_min.isoformat() == "2025-06-10T00:00:00+02:00"
    assert time_max.isoformat() == "2025-06-11T00:00:00+02:00"


def test_shift_capacity_override(restaurant, calendar):
    """Dinner holds 10, Lunch uses the restaurant default of 20."""
    result = compute_day_availability(restaurant, DAY, 12, calendar)

    lunch, dinner = result["shifts"]
    assert all(slot["available"] for slot in lunch["slots"])
    assert not any(slot["available"] for slot in dinner["slots"])
    assert result["available_count"] == 4


def test_reservations_and_closures_from_calendar(restaurant, calendar):
    calendar.add(DAY, make_event("Reserva - Ana - PAX=15", "2025-06-10T12:00", "2025-06-10T13:30"))
    calendar.add(DAY, make_event("CERRADO cena", "2025-06-10T21:00", "2025-06-10T23:00"))
    calendar.add(DAY, make_event("Proveedor", "2025-06-10T12:00", "2025-06-10T15:00", description="PAX=99"))

    result = compute_day_availability(restaurant, DAY, 6, calendar)
    lunch, dinner = result["shifts"]

    # 12:00-13:00 overlap the 15-pax reservation; 13:30 starts at its end
    assert [(s["time"], s["available"]) for s in lunch["slots"]] == [
        ("12:00", False),
        ("12:30", False),
        ("13:00", False),
        ("13:30", True),
    ]
    # every dinner slot runs past 21:00, into the closure
    assert not any(slot["available"] for slot in dinner["slots"])
    assert result["available_count"] == 1


def test_all_day_closure(restaurant, calendar):
    calendar.add(DAY, make_event("CERRADO festivo", "2025-06-10", "2025-06-11", all_day=True))

    result = compute_day_availability(restaurant, DAY, 1, calendar)
    assert result["available_count"] == 0


def test_public_slots_hide_occupancy(restaurant, calendar):
    calendar.add(DAY, make_event("Reserva PAX=3", "2025-06-10T12:00", "2025-06-10T13:30"))
    result = compute_day_availability(restaurant, DAY, 2, calendar)
    assert set(result["shifts"][0]["slots"][0].keys()) == {"time", "available"}
