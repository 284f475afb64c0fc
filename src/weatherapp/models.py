"""Data models for the weatherapp core.

This module defines the normalized domain values the rest of the package
passes around, the pydantic models used to parse the remote weather API
payload, and the single-attempt request outcome type.

Key model groups:
    1. **Domain values**: Coordinate, WeatherSnapshot, CacheEntry
    2. **API payload**: WeatherResponse and its nested sections
    3. **Outcomes**: Success, Failure (RequestOutcome)

Note:
    Domain values are frozen. A new fetch replaces the whole snapshot;
    nothing is ever mutated field by field.

Example:
    Normalizing an API payload::

        response = WeatherResponse.model_validate(payload)
        snapshot = response.to_snapshot()
        print(f"{snapshot.name}: {snapshot.temperature}°C")
"""

from dataclasses import dataclass
from typing import Union

from pydantic import BaseModel, ConfigDict

from .types import CACHE_VALIDITY_MS


class Coordinate(BaseModel):
    """A geographic position in decimal degrees.

    Attributes:
        latitude: Latitude, -90 to 90.
        longitude: Longitude, -180 to 180.

    Example:
        >>> Coordinate(latitude=35.68, longitude=139.69)
        Coordinate(latitude=35.68, longitude=139.69)
    """

    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float


class WeatherSnapshot(BaseModel):
    """One normalized reading of current conditions for a single place.

    Attributes:
        name: Location name as reported by the API.
        temperature: Air temperature in °C.
        feels_like: Apparent temperature in °C.
        humidity: Relative humidity in %.
        wind_speed: Wind speed as reported by the API.
        coord: The position the reading corresponds to.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    temperature: float
    feels_like: float
    humidity: int
    wind_speed: float
    coord: Coordinate


@dataclass(frozen=True)
class CacheEntry:
    """A cached snapshot together with the time it was fetched.

    Attributes:
        snapshot: The cached weather snapshot.
        fetched_at_epoch_millis: Wall-clock fetch time in epoch milliseconds.

    Example:
        >>> entry = CacheEntry(snapshot, fetched_at_epoch_millis=1_700_000_000_000)
        >>> entry.is_valid(1_700_000_300_000)
        True
    """

    snapshot: WeatherSnapshot
    fetched_at_epoch_millis: int

    def is_valid(self, now_epoch_millis: int) -> bool:
        """Check whether the entry is still inside the validity window.

        Args:
            now_epoch_millis: Current wall-clock time in epoch milliseconds.

        Returns:
            True if less than CACHE_VALIDITY_MS has elapsed since the fetch.
        """
        return now_epoch_millis - self.fetched_at_epoch_millis < CACHE_VALIDITY_MS


class CoordSection(BaseModel):
    """The ``coord`` section of an API payload."""

    model_config = ConfigDict(extra="ignore")

    lat: float
    lon: float


class MainSection(BaseModel):
    """The ``main`` section of an API payload.

    Attributes:
        temp: Temperature in °C.
        feels_like: Apparent temperature in °C.
        humidity: Relative humidity in %.
    """

    model_config = ConfigDict(extra="ignore")

    temp: float
    feels_like: float
    humidity: int


class WindSection(BaseModel):
    model_config = ConfigDict(extra="ignore")

    speed: float


class WeatherResponse(BaseModel):
    """Current weather payload returned by the remote API.

    Only the fields the app displays are required; everything else the
    API sends is ignored.

    Example:
        >>> response = WeatherResponse.model_validate({
        ...     "name": "Tokyo",
        ...     "coord": {"lat": 35.68, "lon": 139.69},
        ...     "main": {"temp": 22.4, "feels_like": 21.9, "humidity": 60},
        ...     "wind": {"speed": 11.2},
        ... })
        >>> response.to_snapshot().temperature
        22.4
    """

    model_config = ConfigDict(extra="ignore")

    name: str
    coord: CoordSection
    main: MainSection
    wind: WindSection

    def to_snapshot(self) -> WeatherSnapshot:
        """Normalize the payload into a WeatherSnapshot."""
        return WeatherSnapshot(
            name=self.name,
            temperature=self.main.temp,
            feels_like=self.main.feels_like,
            humidity=self.main.humidity,
            wind_speed=self.wind.speed,
            coord=Coordinate(latitude=self.coord.lat, longitude=self.coord.lon),
        )


class ErrorResponse(BaseModel):
    """Error body the API sends with non-success statuses.

    Attributes:
        cod: Status code, sent as a string or an int.
        message: Human-readable error, e.g. "city not found".
    """

    model_config = ConfigDict(extra="ignore")

    cod: Union[int, str, None] = None
    message: str = ""


@dataclass(frozen=True)
class Success:
    """A fetch that produced a snapshot."""

    snapshot: WeatherSnapshot

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """A fetch that failed; ``reason`` is a human-readable diagnostic."""

    reason: str

    @property
    def ok(self) -> bool:
        return False


RequestOutcome = Union[Success, Failure]
"""Result of one single-attempt weather request: Success or Failure."""
