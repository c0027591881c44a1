"""
Pytest fixtures for the reservations backend.

The Google Calendar is replaced by FakeCalendar (tests/factories.py);
the API client gets the test restaurant, the fake calendar and no cache
through dependency overrides.
"""

import pytest
from fastapi.testclient import TestClient

from reservas.main import app
from reservas.services.google_calendar import get_calendar_provider
from reservas.services.restaurants import RestaurantRegistry, get_registry
from reservas.services.slots.config import Restaurant, Shift
from reservas.services.web_cache import get_response_cache

from tests.factories import FakeCalendar


# ============ DOMAIN FIXTURES ============

@pytest.fixture
def lunch():
    return Shift(name="Lunch", start="12:00", end="15:00")


@pytest.fixture
def dinner():
    return Shift(name="Dinner", start="20:00", end="23:00", capacity_max=10)


@pytest.fixture
def restaurant(lunch, dinner):
    """Capacity 20, 90 min reservations every 30 min, Lunch + Dinner."""
    return Restaurant(
        slug="centro",
        name="Burger Centro",
        timezone="Europe/Madrid",
        calendar_id="centro@group.calendar.google.com",
        capacity_max=20,
        slot_interval_minutes=30,
        reservation_duration_minutes=90,
        shifts=(lunch, dinner),
    )


@pytest.fixture
def calendar():
    return FakeCalendar()


# ============ API FIXTURES ============

@pytest.fixture
def client(restaurant, calendar):
    """
    TestClient with registry, calendar and cache overridden.

    Used without the context manager, so the lifespan (which loads the
    real config) does not run.
    """
    registry = RestaurantRegistry([restaurant])

    app.dependency_overrides[get_registry] = lambda: registry
    app.dependency_overrides[get_calendar_provider] = lambda: lambda: calendar
    app.dependency_overrides[get_response_cache] = lambda: None

    yield TestClient(app, raise_server_exceptions=False)

    app.dependency_overrides.clear()
