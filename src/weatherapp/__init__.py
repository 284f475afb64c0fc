"""Current weather retrieval with local caching.

This package fetches current conditions for either the device's location
or a named city, caches the latest snapshot for ten minutes so repeated
launches avoid the network, and exposes the result to a presentation
layer as three observable values.

Key features:
    - Async weather client with uniform Success/Failure outcomes
    - Best-effort persistent cache with a fixed 10-minute TTL
    - Last known location remembered across launches
    - Cancellation-aware current-location lookup
    - View model publishing weather, loading flag and error message

Caching strategy:
    - **Weather snapshot**: one entry, overwritten by every successful
      fetch, served at startup only while fresh.
    - **Last location**: one coordinate pair, no expiry, used at startup
      when the snapshot is missing or stale.

Example:
    Fetch weather for a city::

        import asyncio
        from pathlib import Path
        from weatherapp import (
            IpLocationService,
            LocationProvider,
            PreferencesStore,
            WeatherCache,
            WeatherClient,
            WeatherViewModel,
        )

        async def main():
            cache = WeatherCache(PreferencesStore(Path.home() / ".cache" / "weatherapp"))
            provider = LocationProvider(IpLocationService())
            async with WeatherClient(api_key="...") as client:
                vm = WeatherViewModel(client, cache, provider)
                vm.current_weather.subscribe(print)
                await vm.fetch_weather_by_city("Tokyo")
                await vm.close()

        asyncio.run(main())
"""

from .cache import WeatherCache
from .client import WeatherClient
from .config import WeatherSettings, load_settings
from .exceptions import (
    LocationError,
    WeatherAPIError,
    WeatherAppError,
    WeatherConnectionError,
    WeatherStorageError,
    WeatherValidationError,
)
from .location import (
    CancellationToken,
    CancellationTokenSource,
    IpLocationService,
    LocationFix,
    LocationProvider,
    LocationService,
)
from .models import (
    CacheEntry,
    Coordinate,
    Failure,
    RequestOutcome,
    Success,
    WeatherResponse,
    WeatherSnapshot,
)
from .observable import Observable
from .storage import PreferencesStore
from .types import CACHE_VALIDITY_MS, DEFAULT_BASE_URL, Permission, Priority
from .viewmodel import ViewState, WeatherViewModel

__all__ = [
    "WeatherViewModel",
    "ViewState",
    "WeatherClient",
    "WeatherCache",
    "PreferencesStore",
    "LocationProvider",
    "LocationService",
    "LocationFix",
    "IpLocationService",
    "CancellationToken",
    "CancellationTokenSource",
    "Observable",
    "Coordinate",
    "WeatherSnapshot",
    "WeatherResponse",
    "CacheEntry",
    "Success",
    "Failure",
    "RequestOutcome",
    "WeatherSettings",
    "load_settings",
    "Permission",
    "Priority",
    "WeatherAppError",
    "WeatherAPIError",
    "WeatherConnectionError",
    "WeatherValidationError",
    "WeatherStorageError",
    "LocationError",
    "CACHE_VALIDITY_MS",
    "DEFAULT_BASE_URL",
]
