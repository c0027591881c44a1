"""
backend/reservas/services/restaurants.py

Restaurant definitions.

Sources, in order:
1. JSON file at RESTAURANTS_CONFIG_PATH: {"restaurants": [...]}
2. One restaurant from env (RESTAURANT_SLUG + TURNOS + GOOGLE_CALENDAR_ID),
   replacing a file entry with the same slug

File entry format:
    {
        "slug": "centro",
        "name": "Burger Centro",
        "timezone": "Europe/Madrid",
        "calendar_id": "...@group.calendar.google.com",
        "capacity_max": 40,
        "slot_interval_minutes": 15,
        "reservation_duration_minutes": 90,
        "shifts": [{"name": "Comida", "start": "13:00", "end": "16:00", "capacity_max": 30}],
        "classification_rules": [{"keyword": "CERRADO", "type": "closed"}, ...],
        "pax_pattern": "PAX\\s*=\\s*(\\d+)"
    }

Missing numeric fields fall back to the env defaults.
"""

import json
import logging
from functools import lru_cache
from pathlib import Path

from ..config import Settings, settings as app_settings
from ..exceptions import ConfigurationError, RestaurantNotFoundError
from .slots.config import (
    DEFAULT_CLASSIFICATION_RULES,
    DEFAULT_PAX_PATTERN,
    ClassificationRule,
    EventRules,
    EventType,
    Restaurant,
    Shift,
)

logger = logging.getLogger(__name__)


class RestaurantRegistry:
    """Loaded restaurants, keyed by slug, in config order."""

    def __init__(self, restaurants: list[Restaurant], default_slug: str | None = None):
        if not restaurants:
            raise ConfigurationError("No restaurant configuration found")
        self.restaurants = {r.slug: r for r in restaurants}
        self.default_slug = default_slug or restaurants[0].slug

    def get(self, slug: str | None = None) -> Restaurant:
        target = slug or self.default_slug
        restaurant = self.restaurants.get(target)
        if restaurant is None:
            raise RestaurantNotFoundError(f"Restaurant config not found for slug: {target}")
        return restaurant

    def __len__(self) -> int:
        return len(self.restaurants)


def _load_json_file(path: Path) -> dict | None:
    if not path.exists():
        return None
    content = path.read_text(encoding="utf-8")
    if not content.strip():
        return None
    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid restaurants config {path}: {e}")


def _to_int(value, field_name: str, slug: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid {field_name} for restaurant {slug}")


def parse_shifts(raw_shifts) -> tuple[Shift, ...]:
    if isinstance(raw_shifts, str):
        try:
            raw_shifts = json.loads(raw_shifts)
        except json.JSONDecodeError:
            raise ConfigurationError("TURNOS env var must be valid JSON")

    if not isinstance(raw_shifts, list) or not raw_shifts:
        raise ConfigurationError("Shifts config is required")

    shifts = []
    for raw in raw_shifts:
        if not isinstance(raw, dict):
            raise ConfigurationError("Each shift must be an object")
        capacity = raw.get("capacity_max")
        if capacity is not None:
            capacity = _to_int(capacity, "capacity_max", raw.get("name") or "?")
        shifts.append(Shift(
            name=raw.get("name"),
            start=raw.get("start"),
            end=raw.get("end"),
            capacity_max=capacity,
        ))
    return tuple(shifts)


def parse_event_rules(raw: dict) -> EventRules:
    raw_rules = raw.get("classification_rules")
    if raw_rules is None:
        rules = DEFAULT_CLASSIFICATION_RULES
    else:
        rules = []
        for item in raw_rules:
            try:
                rules.append(ClassificationRule(item["keyword"], EventType(item["type"])))
            except (KeyError, TypeError, ValueError):
                raise ConfigurationError(f"Invalid classification rule: {item}")
        rules = tuple(rules)

    return EventRules(
        classification_rules=rules,
        pax_pattern=raw.get("pax_pattern") or DEFAULT_PAX_PATTERN,
    )


def parse_restaurant(raw: dict, settings: Settings) -> Restaurant:
    """
    Build a validated Restaurant from a config entry.

    Raises:
        ConfigurationError: On any missing or invalid field
    """
    slug = raw.get("slug")
    if not slug:
        raise ConfigurationError("Restaurant slug is required")

    capacity = raw.get("capacity_max", settings.capacity_max)
    interval = raw.get("slot_interval_minutes", settings.slot_interval_minutes)
    duration = raw.get("reservation_duration_minutes", settings.reservation_duration_minutes)

    return Restaurant(
        slug=slug,
        name=raw.get("name") or slug,
        timezone=raw.get("timezone") or settings.timezone,
        calendar_id=raw.get("calendar_id") or settings.google_calendar_id,
        capacity_max=_to_int(capacity, "capacity_max", slug),
        slot_interval_minutes=_to_int(interval, "slot_interval_minutes", slug),
        reservation_duration_minutes=_to_int(duration, "reservation_duration_minutes", slug),
        shifts=parse_shifts(raw.get("shifts")),
        event_rules=parse_event_rules(raw),
    )


def _build_env_restaurant(settings: Settings) -> Restaurant | None:
    slug = settings.restaurant_slug or settings.default_restaurant_slug
    if not slug or not settings.turnos or not settings.google_calendar_id:
        return None

    return parse_restaurant(
        {
            "slug": slug,
            "name": settings.restaurant_name or slug,
            "shifts": settings.turnos,
        },
        settings,
    )


def load_restaurants(settings: Settings) -> RestaurantRegistry:
    """
    Load and validate every configured restaurant.

    Raises:
        ConfigurationError: If nothing is configured or any entry is invalid
    """
    restaurants: list[Restaurant] = []

    path = settings.resolved_restaurants_config_path
    file_data = _load_json_file(path)
    if file_data and file_data.get("restaurants"):
        restaurants = [parse_restaurant(raw, settings) for raw in file_data["restaurants"]]
        logger.info(f"Loaded {len(restaurants)} restaurants from {path}")

    env_restaurant = _build_env_restaurant(settings)
    if env_restaurant:
        slugs = [r.slug for r in restaurants]
        if env_restaurant.slug in slugs:
            restaurants[slugs.index(env_restaurant.slug)] = env_restaurant
        else:
            restaurants.append(env_restaurant)
        logger.info(f"Loaded restaurant {env_restaurant.slug} from environment")

    default_slug = settings.default_restaurant_slug or settings.restaurant_slug
    return RestaurantRegistry(restaurants, default_slug)


@lru_cache
def get_registry() -> RestaurantRegistry:
    """Get the restaurant registry (loaded once per process)."""
    return load_restaurants(app_settings)
