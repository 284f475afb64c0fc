"""Types and constants for the weatherapp core.

This module defines enumerations and fixed configuration constants used
throughout the package: the cache validity window, the storage keys of
the persisted preferences document, and the user-facing error strings
published by the view model.

Example:
    Checking cache freshness by hand::

        from weatherapp.types import CACHE_VALIDITY_MS

        is_fresh = now_millis - fetched_at_millis < CACHE_VALIDITY_MS
"""

from enum import Enum


class Permission(str, Enum):
    """Location permissions a host may grant.

    Either permission is sufficient for a location lookup; FINE allows
    precise positioning, COARSE only an approximate one.

    Example:
        >>> Permission.FINE.value
        'fine'
    """

    FINE = "fine"
    COARSE = "coarse"


class Priority(str, Enum):
    """Accuracy priority for a one-shot location request.

    Attributes:
        HIGH_ACCURACY: Most accurate fix available, may use GPS.
        BALANCED: City-block level accuracy.
        LOW_POWER: City level accuracy.
    """

    HIGH_ACCURACY = "high_accuracy"
    BALANCED = "balanced"
    LOW_POWER = "low_power"


CACHE_VALIDITY_MS = 10 * 60 * 1000
"""int: How long a cached weather snapshot stays fresh, in milliseconds.

A cache entry is valid while ``now - fetched_at < CACHE_VALIDITY_MS``;
at exactly ten minutes it is already stale.
"""

DEFAULT_BASE_URL = "https://api.openweathermap.org/data/2.5"
"""str: Base URL of the OpenWeatherMap current weather API."""

DEFAULT_LOCATION_URL = "https://ipapi.co/json/"
"""str: IP geolocation endpoint used by IpLocationService."""

DEFAULT_UNITS = "metric"
"""str: Units requested from the weather API (Celsius, metres/second)."""

PREFERENCES_FILE_NAME = "weather_prefs.json"

KEY_CACHED_WEATHER = "cached_weather"
KEY_CACHE_TIMESTAMP = "cache_timestamp"
KEY_LAST_LOCATION = "last_location"

FETCH_FAILED_REASON = "Failed to fetch weather data"
NO_LOCATION_MESSAGE = "Unable to get current location"
LOCATION_ERROR_PREFIX = "Location error: "
FETCH_ERROR_PREFIX = "Failed to fetch weather: "
