"""Current-location lookup for weatherapp.

This module wraps a platform location service into a single awaitable
call. LocationProvider checks permissions, issues one high-accuracy fix
request, and turns every provider failure into ``None``.

Components:
    - **CancellationTokenSource / CancellationToken**: cooperative
      cancellation handed to the location service, so an abandoned
      lookup actively stops the underlying request.
    - **LocationService**: protocol a platform implementation satisfies.
    - **LocationProvider**: the adapter the view model calls.
    - **IpLocationService**: an httpx-based LocationService that
      resolves the host's position from its public IP address.

Example:
    >>> service = IpLocationService(granted={Permission.COARSE})
    >>> provider = LocationProvider(service)
    >>> coordinate = await provider.get_current_location()
    >>> if coordinate is None:
    ...     print("No location available")
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import AbstractSet, Any, Callable, Optional, Protocol

import httpx

from .exceptions import LocationError
from .models import Coordinate
from .types import DEFAULT_LOCATION_URL, Permission, Priority

logger = logging.getLogger(__name__)


class CancellationToken:
    """Read-only view of a cancellation request.

    Location services poll ``is_cancelled`` or register a callback to
    stop work once the requester loses interest.
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._callbacks: list[Callable[[], None]] = []

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def add_callback(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` on cancellation, or immediately if already cancelled."""
        if self._cancelled:
            callback()
        else:
            self._callbacks.append(callback)

    def _cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()


class CancellationTokenSource:
    """Owner side of a CancellationToken.

    Example:
        >>> source = CancellationTokenSource()
        >>> source.token.is_cancelled
        False
        >>> source.cancel()
        >>> source.token.is_cancelled
        True
    """

    def __init__(self) -> None:
        self.token = CancellationToken()

    def cancel(self) -> None:
        """Cancel the token. Calling this more than once has no further effect."""
        self.token._cancel()


@dataclass(frozen=True)
class LocationFix:
    """A resolved position returned by a location service.

    Attributes:
        latitude: Latitude in decimal degrees.
        longitude: Longitude in decimal degrees.
        accuracy_m: Estimated horizontal accuracy in metres, if known.
    """

    latitude: float
    longitude: float
    accuracy_m: Optional[float] = None


class LocationService(Protocol):
    """Platform capability that answers one-shot position requests."""

    def has_permission(self, permission: Permission) -> bool:
        """Return True if ``permission`` is currently granted."""
        ...

    async def request_current_location(
        self, priority: Priority, token: CancellationToken
    ) -> LocationFix:
        """Resolve one position fix.

        Raises:
            LocationError: If no fix can be produced.
        """
        ...


class LocationProvider:
    """Awaitable, cancellation-aware current-location lookup.

    Every call resolves exactly once: with a Coordinate, with None, or by
    raising ``asyncio.CancelledError`` when the awaiting task is
    cancelled. In the last case the service's token is cancelled first.

    Args:
        service: Platform location service.
        priority: Accuracy priority for the fix request.

    Example:
        >>> provider = LocationProvider(service)
        >>> coordinate = await provider.get_current_location()
    """

    def __init__(
        self,
        service: LocationService,
        *,
        priority: Priority = Priority.HIGH_ACCURACY,
    ) -> None:
        self._service = service
        self._priority = priority

    def has_location_permission(self) -> bool:
        """Return True if fine or coarse location permission is granted."""
        return self._service.has_permission(
            Permission.FINE
        ) or self._service.has_permission(Permission.COARSE)

    async def get_current_location(self) -> Optional[Coordinate]:
        """Resolve the device's current position.

        Returns:
            The current Coordinate, or None when no permission is granted
            or the service could not produce a fix.

        Raises:
            asyncio.CancelledError: If the awaiting task is cancelled.
        """
        if not self.has_location_permission():
            logger.debug("No location permission granted")
            return None

        source = CancellationTokenSource()
        try:
            fix = await self._service.request_current_location(
                self._priority, source.token
            )
        except asyncio.CancelledError:
            logger.debug("Location request cancelled")
            source.cancel()
            raise
        except Exception as e:
            logger.warning(f"Location request failed: {e}")
            return None

        if fix is None:
            return None
        return Coordinate(latitude=fix.latitude, longitude=fix.longitude)


def _coerce_float(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class IpLocationService:
    """LocationService that geolocates the host by its public IP address.

    Permission is simulated by the ``granted`` set the host configures.
    IP geolocation is city-level at best, so the fix carries no
    accuracy estimate regardless of the requested priority.

    Args:
        granted: Permissions the host has granted.
        url: Geolocation endpoint returning ``latitude``/``longitude``.
        timeout: HTTP request timeout in seconds.
    """

    def __init__(
        self,
        *,
        granted: AbstractSet[Permission] = frozenset(),
        url: str = DEFAULT_LOCATION_URL,
        timeout: float = 10.0,
    ) -> None:
        self._granted = frozenset(granted)
        self._url = url
        self._timeout = timeout

    def has_permission(self, permission: Permission) -> bool:
        return permission in self._granted

    async def request_current_location(
        self, priority: Priority, token: CancellationToken
    ) -> LocationFix:
        """Look up the host position.

        The HTTP request runs in its own task so that cancelling
        ``token`` aborts it.

        Raises:
            LocationError: If the lookup fails or returns no coordinates.
        """
        request = asyncio.ensure_future(self._lookup())
        token.add_callback(request.cancel)
        try:
            payload = await request
        except asyncio.CancelledError:
            if token.is_cancelled:
                raise LocationError("Location request cancelled") from None
            raise

        latitude = _coerce_float(payload.get("latitude"))
        longitude = _coerce_float(payload.get("longitude"))
        if latitude is None or longitude is None:
            raise LocationError("Geolocation response did not include coordinates")
        return LocationFix(latitude=latitude, longitude=longitude)

    async def _lookup(self) -> dict[str, Any]:
        logger.debug(f"Requesting IP geolocation from {self._url}")
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(
                    self._url, headers={"User-Agent": "weatherapp/0.1"}
                )
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise LocationError(f"Geolocation request failed: {e}") from e

        if not isinstance(payload, dict):
            raise LocationError("Unexpected geolocation response shape")
        return payload
