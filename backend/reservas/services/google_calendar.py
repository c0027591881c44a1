"""
backend/reservas/services/google_calendar.py

Google Calendar client for restaurant calendars.

Handles:
- Service account credentials (inline JSON or key file)
- Process-wide client, built once on first use
- One API transport per thread (httplib2 is not thread-safe)
- Day-bounded event listing and event insertion
"""

import json
import logging
import threading
from datetime import datetime

import google_auth_httplib2
import httplib2
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from ..config import settings
from ..exceptions import CalendarProviderError, ConfigurationError

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/calendar"]

# One day of events must fit in a single page
MAX_RESULTS = 2500

_client = None
_client_lock = threading.Lock()


def _build_credentials(
    service_account_json: str | None = None,
    key_file: str | None = None,
) -> service_account.Credentials:
    """
    Build service account credentials.

    GOOGLE_SERVICE_ACCOUNT_JSON may hold the key itself ("{...}") or a
    path to it; GOOGLE_APPLICATION_CREDENTIALS is always a path.

    Raises:
        ConfigurationError: If no credentials are configured or they can't be read
    """
    try:
        if service_account_json:
            raw = service_account_json.strip()
            if raw.startswith("{"):
                return service_account.Credentials.from_service_account_info(
                    json.loads(raw), scopes=SCOPES
                )
            return service_account.Credentials.from_service_account_file(raw, scopes=SCOPES)

        if key_file:
            return service_account.Credentials.from_service_account_file(key_file, scopes=SCOPES)
    except (ValueError, OSError) as e:
        raise ConfigurationError(f"Invalid Google service account credentials: {e}")

    raise ConfigurationError("Missing Google service account credentials")


class GoogleCalendarClient:
    """
    Thin wrapper over the Calendar v3 events resource.

    Credentials are shared; each thread builds its own service on first
    use, so no two threads share an httplib2 connection. A service passed
    in explicitly is used as is.
    """

    def __init__(self, service=None, credentials=None):
        self._service = service
        self.credentials = credentials
        self._local = threading.local()

    @property
    def service(self):
        if self._service is not None:
            return self._service

        service = getattr(self._local, "service", None)
        if service is None:
            http = google_auth_httplib2.AuthorizedHttp(self.credentials, http=httplib2.Http())
            service = build("calendar", "v3", http=http, cache_discovery=False)
            self._local.service = service
        return service

    def list_events(self, calendar_id: str, time_min: datetime, time_max: datetime) -> list[dict]:
        """
        List single events in [time_min, time_max), ordered by start.

        Raises:
            CalendarProviderError: If the API call fails or returns garbage
        """
        try:
            response = self.service.events().list(
                calendarId=calendar_id,
                timeMin=time_min.isoformat(),
                timeMax=time_max.isoformat(),
                singleEvents=True,
                orderBy="startTime",
                showDeleted=False,
                maxResults=MAX_RESULTS,
            ).execute()
        except (HttpError, GoogleAuthError, OSError) as e:
            logger.error(f"Failed to list calendar events for {calendar_id}: {e}")
            raise CalendarProviderError(f"Failed to list calendar events: {e}") from e

        if not isinstance(response, dict):
            logger.error(f"Malformed events response for {calendar_id}")
            raise CalendarProviderError("Malformed events response")

        items = response.get("items") or []
        if not isinstance(items, list):
            logger.error(f"Malformed events list for {calendar_id}")
            raise CalendarProviderError("Malformed events list")
        return items

    def insert_event(self, calendar_id: str, body: dict) -> dict:
        """
        Create an event.

        Raises:
            CalendarProviderError: If the API call fails
        """
        try:
            created_event = self.service.events().insert(
                calendarId=calendar_id,
                body=body,
            ).execute()
        except (HttpError, GoogleAuthError, OSError) as e:
            logger.error(f"Failed to create calendar event in {calendar_id}: {e}")
            raise CalendarProviderError(f"Failed to create calendar event: {e}") from e

        logger.info(f"Created Google Calendar event: {created_event.get('id')}")
        return created_event


def get_calendar_client() -> GoogleCalendarClient:
    """
    Get the shared calendar client, building it on first use.

    Concurrent first calls build exactly one client.
    """
    global _client

    if _client is not None:
        return _client

    with _client_lock:
        if _client is None:
            credentials = _build_credentials(
                settings.google_service_account_json,
                settings.google_application_credentials,
            )
            _client = GoogleCalendarClient(credentials=credentials)
            logger.info("Google Calendar client initialized")

    return _client


def get_calendar_provider():
    """
    Dependency returning a callable that yields the calendar client.

    Handlers call it after input validation and the cache lookup.
    """
    return get_calendar_client
