# backend/reservas/routers/reservations.py
"""
Reservations API endpoints.

GET  /api/health        - Liveness
GET  /api/availability  - Slot grid of a day (+ next open slot if the day is full)
POST /api/book          - Book a slot after re-checking the calendar
"""

import re
from datetime import date, datetime, timezone
from typing import Any, Callable

from fastapi import APIRouter, Body, Depends, Header, Query
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ..config import settings
from ..exceptions import RestaurantNotFoundError
from ..schemas.reservations import (
    AvailabilityResponse,
    BookingRequest,
    BookingResponse,
    HealthResponse,
    NextAvailable,
)
from ..services.booking import book_reservation
from ..services.google_calendar import GoogleCalendarClient, get_calendar_provider
from ..services.restaurants import RestaurantRegistry, get_registry
from ..services.slots import compute_day_availability, find_next_available
from ..services.slots.config import is_valid_time_str
from ..services.web_cache import ResponseCache, availability_key, get_response_cache

router = APIRouter(prefix="/api", tags=["reservations"])

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _error(status: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status, content={"ok": False, "error": error})


def _parse_date(value: str | None) -> date | None:
    if not value or not DATE_RE.match(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def _parse_party(value) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        if not value.strip().isdigit():
            return None
        value = int(value.strip())
    if not isinstance(value, int) or value <= 0:
        return None
    return value


def _resolve_slug(
    restaurant: str | None,
    slug: str | None,
    header_slug: str | None,
) -> str | None:
    return restaurant or slug or header_slug or None


@router.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(ok=True, time=datetime.now(timezone.utc).isoformat())


@router.get("/availability", response_model=AvailabilityResponse, response_model_exclude_none=True)
def get_availability(
    date_raw: str | None = Query(None, alias="date"),
    party_raw: str | None = Query(None, alias="party"),
    restaurant: str | None = None,
    slug: str | None = None,
    x_restaurant_slug: str | None = Header(None),
    registry: RestaurantRegistry = Depends(get_registry),
    calendar_provider: Callable[[], GoogleCalendarClient] = Depends(get_calendar_provider),
    cache: ResponseCache | None = Depends(get_response_cache),
):
    """Get the slot grid of a day for a party size."""
    if not date_raw:
        return _error(400, "Missing query param: date")
    target_date = _parse_date(date_raw)
    if target_date is None:
        return _error(400, "Invalid date format")

    if not party_raw:
        return _error(400, "Missing query param: party")
    party = _parse_party(party_raw)
    if party is None:
        return _error(400, "Invalid party size")

    try:
        rest = registry.get(_resolve_slug(restaurant, slug, x_restaurant_slug))
    except RestaurantNotFoundError as e:
        return _error(404, str(e))

    cache_key = availability_key(rest.slug, target_date.isoformat(), party)
    if cache is not None:
        cached = cache.get(cache_key)
        if cached is not None:
            return AvailabilityResponse(**cached)

    calendar = calendar_provider()
    availability = compute_day_availability(rest, target_date, party, calendar)

    response = AvailabilityResponse(
        date=availability["date"],
        party=party,
        timezone=rest.timezone,
        shifts=availability["shifts"],
        available_count=availability["available_count"],
    )

    lookahead_days = settings.next_available_lookahead_days
    if availability["available_count"] == 0 and lookahead_days > 0:
        next_available = find_next_available(rest, target_date, party, lookahead_days, calendar)
        if next_available:
            response.next_available = NextAvailable(**next_available)

    if cache is not None:
        cache.set(cache_key, response.model_dump(exclude_none=True))

    return response


@router.post("/book", response_model=BookingResponse)
def book(
    payload: Any = Body(None),
    x_restaurant_slug: str | None = Header(None),
    registry: RestaurantRegistry = Depends(get_registry),
    calendar_provider: Callable[[], GoogleCalendarClient] = Depends(get_calendar_provider),
    cache: ResponseCache | None = Depends(get_response_cache),
):
    """Book a reservation if the slot is still available (409 otherwise)."""
    try:
        data = BookingRequest.model_validate(payload if isinstance(payload, dict) else {})
    except ValidationError:
        return _error(400, "Missing or invalid reservation fields")

    try:
        rest = registry.get(data.restaurant or x_restaurant_slug)
    except RestaurantNotFoundError as e:
        return _error(404, str(e))

    target_date = _parse_date(data.date)
    time_ok = bool(data.time) and is_valid_time_str(data.time)
    party = _parse_party(data.party)
    name = (data.name or "").strip()

    if target_date is None or not time_ok or party is None or not name:
        return _error(400, "Missing or invalid reservation fields")

    if not data.phone and not data.email:
        return _error(400, "Provide at least phone or email")

    calendar = calendar_provider()
    booking = book_reservation(
        rest,
        target_date,
        data.time,
        party,
        name,
        phone=data.phone,
        email=data.email,
        notes=data.notes,
        calendar=calendar,
    )

    if booking is None:
        return JSONResponse(status_code=409, content={"ok": False, "reason": "NO_AVAILABILITY"})

    if cache is not None:
        cache.invalidate_restaurant(rest.slug)

    return BookingResponse(ok=True, event_id=booking["event_id"])
