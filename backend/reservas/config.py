# backend/reservas/config.py

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[1]  # /backend


class Settings(BaseSettings):
    # Restaurants file, relative to backend/ unless absolute
    restaurants_config_path: str = "config/restaurants.json"
    default_restaurant_slug: str | None = None

    # Single restaurant defined through env (overrides a file entry with the same slug)
    restaurant_slug: str | None = None
    restaurant_name: str | None = None
    timezone: str = "Europe/Madrid"
    google_calendar_id: str | None = None
    capacity_max: int | None = None
    slot_interval_minutes: int = 15
    reservation_duration_minutes: int = 90
    turnos: str | None = None  # JSON list of shifts

    # Google service account: inline JSON or path to key file
    google_service_account_json: str | None = None
    google_application_credentials: str | None = None

    redis_url: str | None = None
    cache_ttl_seconds: int = 0
    next_available_lookahead_days: int = 30

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",
    )

    @property
    def resolved_restaurants_config_path(self) -> Path:
        path = Path(self.restaurants_config_path)
        if not path.is_absolute():
            path = BASE_DIR / path
        return path


settings = Settings()
