"""Async client for the current weather API.

This module provides WeatherClient, which issues the two supported
current-conditions queries (by coordinates and by city name) and turns
every outcome into a RequestOutcome. Each call is a single attempt: no
retries and no timeout beyond the transport default.

Error normalization:
    - Non-success HTTP status or empty body:
      ``Failure("Failed to fetch weather data")``
    - Transport errors, invalid JSON, payloads missing required fields:
      ``Failure(<diagnostic message>)``

Example:
    Fetch by city name::

        import asyncio
        from weatherapp import WeatherClient

        async def main():
            async with WeatherClient(api_key="...") as client:
                outcome = await client.fetch_by_city_name("Tokyo")
                if outcome.ok:
                    print(f"{outcome.snapshot.temperature}°C")
                else:
                    print(outcome.reason)

        asyncio.run(main())
"""

import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from .exceptions import (
    WeatherAPIError,
    WeatherAppError,
    WeatherConnectionError,
    WeatherValidationError,
)
from .models import (
    Coordinate,
    ErrorResponse,
    Failure,
    RequestOutcome,
    Success,
    WeatherResponse,
)
from .types import DEFAULT_BASE_URL, DEFAULT_UNITS, FETCH_FAILED_REASON

logger = logging.getLogger(__name__)


class WeatherClient:
    """Async client for the current weather API.

    Args:
        api_key: API key sent with every request.
        base_url: API base URL. Defaults to OpenWeatherMap 2.5.
        units: Units system requested from the API. Defaults to "metric".
        timeout: HTTP request timeout in seconds. Defaults to 30.0.

    Attributes:
        _client: Lazy-initialized httpx.AsyncClient.

    Example:
        Using as async context manager (recommended)::

            async with WeatherClient(api_key="...") as client:
                outcome = await client.fetch_by_coordinates(
                    Coordinate(latitude=48.85, longitude=2.35)
                )

        Manual resource management::

            client = WeatherClient(api_key="...")
            try:
                outcome = await client.fetch_by_city_name("Paris")
            finally:
                await client.close()
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        units: str = DEFAULT_UNITS,
        timeout: float = 30.0,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._units = units
        self._timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "WeatherClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Create the httpx.AsyncClient on first use and return it."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client. Safe to call multiple times."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _validate_coordinate(self, coordinate: Coordinate) -> None:
        """Validate geographic coordinates.

        Raises:
            WeatherValidationError: If latitude not in [-90, 90] or
                longitude not in [-180, 180].
        """
        if not -90.0 <= coordinate.latitude <= 90.0:
            raise WeatherValidationError(
                f"Latitude must be in range [-90.0, 90.0], got {coordinate.latitude}"
            )
        if not -180.0 <= coordinate.longitude <= 180.0:
            raise WeatherValidationError(
                f"Longitude must be in range [-180.0, 180.0], got {coordinate.longitude}"
            )

    async def _fetch(self, params: dict[str, Any]) -> WeatherResponse:
        """Request current weather and parse the payload.

        Args:
            params: Query parameters identifying the location.

        Returns:
            Parsed WeatherResponse.

        Raises:
            WeatherConnectionError: If the HTTP request fails in transport.
            WeatherAPIError: If the API answers with a non-success status
                or an empty body.
            WeatherValidationError: If the body is not a valid payload.
        """
        client = await self._ensure_client()
        query = {**params, "appid": self._api_key, "units": self._units}

        try:
            response = await client.get(f"{self._base_url}/weather", params=query)
        except httpx.RequestError as e:
            raise WeatherConnectionError(f"Request error: {e}") from e

        if not response.is_success:
            try:
                detail = ErrorResponse.model_validate(response.json()).message
            except (ValueError, ValidationError):
                detail = ""
            logger.warning(
                f"Weather API returned HTTP {response.status_code}"
                + (f": {detail}" if detail else "")
            )
            raise WeatherAPIError(FETCH_FAILED_REASON, status_code=response.status_code)

        if not response.content or not response.content.strip():
            raise WeatherAPIError(FETCH_FAILED_REASON, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise WeatherValidationError(f"Malformed response body: {e}") from e
        if data is None:
            raise WeatherAPIError(FETCH_FAILED_REASON, status_code=response.status_code)

        try:
            return WeatherResponse.model_validate(data)
        except ValidationError as e:
            raise WeatherValidationError(
                f"Unexpected response payload: {e.error_count()} invalid field(s)"
            ) from e

    async def _outcome(self, params: dict[str, Any]) -> RequestOutcome:
        try:
            response = await self._fetch(params)
        except WeatherAPIError as e:
            return Failure(e.reason)
        except WeatherAppError as e:
            logger.warning(f"Weather request failed: {e}")
            return Failure(str(e))
        return Success(response.to_snapshot())

    async def fetch_by_coordinates(self, coordinate: Coordinate) -> RequestOutcome:
        """Get current weather for a coordinate pair.

        Args:
            coordinate: Position to query.

        Returns:
            Success with the normalized snapshot, or Failure with a reason.

        Example:
            >>> outcome = await client.fetch_by_coordinates(
            ...     Coordinate(latitude=35.68, longitude=139.69)
            ... )
        """
        try:
            self._validate_coordinate(coordinate)
        except WeatherValidationError as e:
            return Failure(str(e))

        logger.debug(
            f"Fetching weather for ({coordinate.latitude}, {coordinate.longitude})"
        )
        return await self._outcome(
            {"lat": coordinate.latitude, "lon": coordinate.longitude}
        )

    async def fetch_by_city_name(self, name: str) -> RequestOutcome:
        """Get current weather for a free-text city name.

        Args:
            name: City name, e.g. "Tokyo" or "Paris,FR".

        Returns:
            Success with the normalized snapshot, or Failure with a reason.
        """
        city = name.strip()
        if not city:
            return Failure("City name must not be empty")

        logger.debug(f"Fetching weather for city {city!r}")
        return await self._outcome({"q": city})
