"""Weather cache for weatherapp.

WeatherCache persists the most recent weather snapshot together with its
fetch time, and, independently, the last coordinate pair used for a
lookup. There is exactly one cached snapshot and one last location at any
time; every save overwrites the previous one.

Caching rules:
    - A snapshot is served only within CACHE_VALIDITY_MS (10 minutes) of
      its fetch, measured against wall-clock time at read time.
    - The last location has no expiry, so a cold start with a stale cache
      can still re-query the most recent position.
    - The cache is best effort. Corrupt or unreadable data reads as a
      miss, and failed writes are logged and dropped. No cache operation
      raises.

Example:
    >>> cache = WeatherCache(PreferencesStore(Path("/tmp/weatherapp")))
    >>> cache.save(snapshot)
    >>> entry = cache.load_if_valid()
    >>> entry.snapshot == snapshot
    True
"""

import logging
import time
from typing import Callable, Optional

from pydantic import ValidationError

from .exceptions import WeatherStorageError
from .models import CacheEntry, Coordinate, WeatherSnapshot
from .storage import PreferencesStore
from .types import (
    KEY_CACHE_TIMESTAMP,
    KEY_CACHED_WEATHER,
    KEY_LAST_LOCATION,
)

logger = logging.getLogger(__name__)


def _epoch_millis() -> int:
    return int(time.time() * 1000)


def _format_location(coordinate: Coordinate) -> str:
    """Serialize a coordinate as ``"<lat>,<lon>"``.

    Example:
        >>> _format_location(Coordinate(latitude=35.68, longitude=139.69))
        '35.68,139.69'
    """
    return f"{coordinate.latitude!r},{coordinate.longitude!r}"


def _parse_location(value: object) -> Optional[Coordinate]:
    """Parse a ``"<lat>,<lon>"`` string, returning None if it is malformed.

    Example:
        >>> _parse_location("35.68,139.69")
        Coordinate(latitude=35.68, longitude=139.69)
        >>> _parse_location("35.68") is None
        True
    """
    if not isinstance(value, str):
        return None
    parts = value.split(",")
    if len(parts) != 2:
        return None
    try:
        return Coordinate(latitude=float(parts[0]), longitude=float(parts[1]))
    except ValueError:
        return None


class WeatherCache:
    """Singleton weather cache and last-location record.

    Args:
        store: Preferences store the records live in.
        clock: Callable returning the current wall-clock time in epoch
            milliseconds. Defaults to ``time.time``-based milliseconds.

    Example:
        >>> cache = WeatherCache(store, clock=lambda: 1_700_000_000_000)
    """

    def __init__(
        self,
        store: PreferencesStore,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        self._store = store
        self._clock = clock or _epoch_millis

    def save(self, snapshot: WeatherSnapshot) -> None:
        """Store ``snapshot`` stamped with the current time.

        Overwrites any previous snapshot. The snapshot and its timestamp
        are written together.

        Args:
            snapshot: Snapshot from a successful fetch.
        """
        fetched_at = self._clock()
        try:
            self._store.put_all(
                {
                    KEY_CACHED_WEATHER: snapshot.model_dump_json(),
                    KEY_CACHE_TIMESTAMP: fetched_at,
                }
            )
        except WeatherStorageError as e:
            logger.warning(f"Dropping weather cache write: {e}")
            return
        logger.debug(f"Cached weather for {snapshot.name} at {fetched_at}")

    def load_if_valid(self) -> Optional[CacheEntry]:
        """Return the cached entry if present, readable and fresh.

        Returns:
            CacheEntry, or None when nothing is cached, the stored data
            cannot be parsed, or the entry is older than the validity
            window.
        """
        stored = self._store.get_many(KEY_CACHED_WEATHER, KEY_CACHE_TIMESTAMP)
        payload = stored.get(KEY_CACHED_WEATHER)
        fetched_at = stored.get(KEY_CACHE_TIMESTAMP)
        if payload is None or fetched_at is None:
            logger.debug("Weather cache miss: nothing stored")
            return None
        if isinstance(fetched_at, bool) or not isinstance(fetched_at, int):
            logger.warning(f"Ignoring weather cache with bad timestamp {fetched_at!r}")
            return None

        try:
            snapshot = WeatherSnapshot.model_validate_json(payload)
        except (ValidationError, ValueError, TypeError) as e:
            logger.warning(f"Ignoring unreadable weather cache: {e}")
            return None

        entry = CacheEntry(snapshot=snapshot, fetched_at_epoch_millis=fetched_at)
        if not entry.is_valid(self._clock()):
            logger.debug("Weather cache miss: entry expired")
            return None
        logger.debug(f"Weather cache hit for {snapshot.name}")
        return entry

    def save_last_location(self, coordinate: Coordinate) -> None:
        """Remember ``coordinate`` as the most recently used position."""
        try:
            self._store.put_all({KEY_LAST_LOCATION: _format_location(coordinate)})
        except WeatherStorageError as e:
            logger.warning(f"Dropping last location write: {e}")

    def load_last_location(self) -> Optional[Coordinate]:
        """Return the most recently used position, or None if unknown."""
        coordinate = _parse_location(self._store.get(KEY_LAST_LOCATION))
        if coordinate is None:
            logger.debug("No usable last location stored")
        return coordinate

    def clear(self) -> None:
        """Drop the cached snapshot and its timestamp. Keeps the last location."""
        try:
            self._store.remove(KEY_CACHED_WEATHER, KEY_CACHE_TIMESTAMP)
        except WeatherStorageError as e:
            logger.warning(f"Failed to clear weather cache: {e}")
