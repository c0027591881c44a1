# backend/reservas/exceptions.py


class ConfigurationError(ValueError):
    """Invalid restaurant, shift or credentials configuration."""


class CalendarProviderError(RuntimeError):
    """Google Calendar call failed (network, auth or malformed response)."""


class RestaurantNotFoundError(LookupError):
    """No restaurant configured for the requested slug."""
