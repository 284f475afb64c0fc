"""Exceptions for the weatherapp package.

All exceptions inherit from WeatherAppError. They are raised inside the
client, storage and location layers; the view model converts anything
that reaches it into a single human-readable error message, so none of
these ever reach the presentation layer.

Example:
    Catching every package error::

        from weatherapp import WeatherAppError

        try:
            store.put_all({"cache_timestamp": 0})
        except WeatherAppError as e:
            print(f"weatherapp error: {e}")
"""

from typing import Optional


class WeatherAppError(Exception):
    """Base exception for all weatherapp errors."""

    pass


class WeatherAPIError(WeatherAppError):
    """Exception raised when the weather API answers with an error.

    Covers non-success HTTP statuses and empty response bodies.

    Args:
        reason: Human-readable description of the failure.
        status_code: HTTP status code, if one was received.

    Attributes:
        reason: Human-readable description of the failure.
        status_code: HTTP status code or None.

    Example:
        >>> raise WeatherAPIError("city not found", status_code=404)
        WeatherAPIError: API error: city not found
    """

    def __init__(self, reason: str, status_code: Optional[int] = None) -> None:
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"API error: {reason}")


class WeatherConnectionError(WeatherAppError):
    """Exception raised when the weather API cannot be reached.

    Wraps httpx transport errors: DNS failures, timeouts, connection
    resets.
    """

    pass


class WeatherValidationError(WeatherAppError):
    """Exception raised when a request or a response fails validation.

    Raised for out-of-range coordinates, blank city names, and response
    bodies that are not valid JSON or lack required fields.
    """

    pass


class WeatherStorageError(WeatherAppError):
    """Exception raised when the preferences file cannot be written."""

    pass


class LocationError(WeatherAppError):
    """Exception raised by a location service that cannot produce a fix."""

    pass
