"""Weather view model: retrieval orchestration for the presentation layer.

WeatherViewModel ties the weather client, the cache and the location
provider together. It receives intents, decides between cache and
network, persists results and publishes three observable values:

    - ``current_weather``: the latest WeatherSnapshot, or None
    - ``is_loading``: True while an intent is in flight
    - ``error_message``: a human-readable error, or None

Intents:
    - **Startup** (``start``): serve a fresh cached snapshot without a
      network call; otherwise re-query the last known location, if any.
    - **Current location** (``fetch_current_location_weather``): look up
      the device position, remember it, then fetch by coordinates.
    - **Coordinates** (``fetch_weather_by_coordinates``): fetch by an
      explicit coordinate pair.
    - **City** (``fetch_weather_by_city``): fetch by name; the snapshot's
      own coordinates become the last known location.

Every intent runs as its own asyncio task on the event loop, which is the
only writer of the observable values. Storage work is pushed to a worker
thread. Overlapping intents are not ordered: whichever response arrives
last wins.

Example:
    >>> async with WeatherViewModel(client, cache, provider) as vm:
    ...     vm.current_weather.subscribe(render)
    ...     await vm.fetch_weather_by_city("Tokyo")
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Coroutine, Optional

from .cache import WeatherCache
from .client import WeatherClient
from .location import LocationProvider
from .models import Coordinate, Success, WeatherSnapshot
from .observable import Observable
from .types import FETCH_ERROR_PREFIX, LOCATION_ERROR_PREFIX, NO_LOCATION_MESSAGE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ViewState:
    """Point-in-time copy of the three observable values."""

    current_weather: Optional[WeatherSnapshot]
    is_loading: bool
    error_message: Optional[str]


class WeatherViewModel:
    """State machine behind the weather screen.

    Args:
        client: Weather API client.
        cache: Weather cache and last-location store.
        location_provider: Current-location lookup.

    Attributes:
        current_weather: Observable latest snapshot.
        is_loading: Observable loading flag.
        error_message: Observable error string.
    """

    def __init__(
        self,
        client: WeatherClient,
        cache: WeatherCache,
        location_provider: LocationProvider,
    ) -> None:
        self._client = client
        self._cache = cache
        self._location_provider = location_provider

        self.current_weather: Observable[Optional[WeatherSnapshot]] = Observable(None)
        self.is_loading: Observable[bool] = Observable(False)
        self.error_message: Observable[Optional[str]] = Observable(None)

        self._tasks: set[asyncio.Task] = set()
        self._closed = False

    async def __aenter__(self) -> "WeatherViewModel":
        self.start()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    @property
    def state(self) -> ViewState:
        return ViewState(
            current_weather=self.current_weather.value,
            is_loading=self.is_loading.value,
            error_message=self.error_message.value,
        )

    def _launch(
        self, coro: Coroutine[Any, Any, None], name: str, begin: bool = True
    ) -> asyncio.Task:
        if self._closed:
            coro.close()
            raise RuntimeError("WeatherViewModel is closed")
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            raise
        if begin:
            self._begin()
        task = loop.create_task(self._run_intent(coro, name), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run_intent(self, coro: Coroutine[Any, Any, None], name: str) -> None:
        try:
            await coro
        except Exception as e:
            logger.exception(f"Intent {name} failed unexpectedly")
            self._fail(f"Unexpected error: {e}")

    def _begin(self) -> None:
        self.is_loading.set(True)
        self.error_message.set(None)

    def _fail(self, message: str) -> None:
        self.is_loading.set(False)
        self.error_message.set(message)

    def start(self) -> asyncio.Task:
        """Run the startup intent: cached snapshot, else last location."""
        return self._launch(self._load_cached_weather(), "startup", begin=False)

    def fetch_current_location_weather(self) -> asyncio.Task:
        """Fetch weather for the device's current position."""
        return self._launch(self._current_location_weather(), "current_location")

    def fetch_weather_by_coordinates(self, latitude: float, longitude: float) -> asyncio.Task:
        """Fetch weather for an explicit coordinate pair."""
        coordinate = Coordinate(latitude=latitude, longitude=longitude)
        return self._launch(self._weather_by_coordinates(coordinate), "coordinates")

    def fetch_weather_by_city(self, city_name: str) -> asyncio.Task:
        """Fetch weather for a city.

        Callers must reject empty or whitespace-only names before calling.
        """
        return self._launch(self._weather_by_city(city_name), "city")

    def clear_error(self) -> None:
        """Drop the current error message. No-op if there is none."""
        self.error_message.set(None)

    async def close(self) -> None:
        """Cancel all outstanding intents. Safe to call multiple times."""
        self._closed = True
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.debug(f"Cancelled {len(tasks)} outstanding intent(s)")
        self.is_loading.set(False)

    async def _load_cached_weather(self) -> None:
        entry = await asyncio.to_thread(self._cache.load_if_valid)
        if entry is not None:
            logger.info(f"Serving cached weather for {entry.snapshot.name}")
            self.current_weather.set(entry.snapshot)
            return

        last_location = await asyncio.to_thread(self._cache.load_last_location)
        if last_location is None:
            logger.debug("No cached weather or last location, waiting for user")
            return

        self._begin()
        await self._weather_by_coordinates(last_location)

    async def _current_location_weather(self) -> None:
        try:
            location = await self._location_provider.get_current_location()
        except Exception as e:
            logger.warning(f"Location lookup raised: {e}")
            self._fail(f"{LOCATION_ERROR_PREFIX}{e}")
            return

        if location is None:
            self._fail(NO_LOCATION_MESSAGE)
            return

        await asyncio.to_thread(self._cache.save_last_location, location)
        await self._weather_by_coordinates(location)

    async def _weather_by_coordinates(self, coordinate: Coordinate) -> None:
        outcome = await self._client.fetch_by_coordinates(coordinate)
        if isinstance(outcome, Success):
            self.current_weather.set(outcome.snapshot)
            await asyncio.to_thread(self._cache.save, outcome.snapshot)
            self.is_loading.set(False)
        else:
            self._fail(f"{FETCH_ERROR_PREFIX}{outcome.reason}")

    async def _weather_by_city(self, city_name: str) -> None:
        outcome = await self._client.fetch_by_city_name(city_name)
        if isinstance(outcome, Success):
            snapshot = outcome.snapshot
            self.current_weather.set(snapshot)
            await asyncio.to_thread(self._cache.save, snapshot)
            await asyncio.to_thread(self._cache.save_last_location, snapshot.coord)
            self.is_loading.set(False)
        else:
            self._fail(f"{FETCH_ERROR_PREFIX}{outcome.reason}")
