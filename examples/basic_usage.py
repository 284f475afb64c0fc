"""Basic usage examples for weatherapp."""

import asyncio
import os
from pathlib import Path

from weatherapp import (
    Coordinate,
    IpLocationService,
    LocationProvider,
    Permission,
    PreferencesStore,
    WeatherCache,
    WeatherClient,
    WeatherViewModel,
)
from weatherapp.display import render_snapshot

API_KEY = os.environ.get("WEATHERAPP_API_KEY", "")
CACHE_DIR = Path.home() / ".cache" / "weatherapp-example"


async def client_example() -> None:
    """Call the weather client directly."""
    async with WeatherClient(API_KEY) as client:
        outcome = await client.fetch_by_city_name("Tokyo")
        print("=== City ===")
        if outcome.ok:
            print(render_snapshot(outcome.snapshot))
        else:
            print(f"Failed: {outcome.reason}")
        print()

        outcome = await client.fetch_by_coordinates(Coordinate(latitude=48.85, longitude=2.35))
        print("=== Coordinates ===")
        print(render_snapshot(outcome.snapshot) if outcome.ok else outcome.reason)
        print()


async def view_model_example() -> None:
    """Drive the view model the way a screen would."""
    cache = WeatherCache(PreferencesStore(CACHE_DIR))
    provider = LocationProvider(IpLocationService(granted={Permission.COARSE}))

    async with WeatherClient(API_KEY) as client:
        async with WeatherViewModel(client, cache, provider) as vm:
            vm.is_loading.subscribe(lambda loading: print(f"loading: {loading}"))
            vm.error_message.subscribe(lambda message: message and print(f"error: {message}"))

            await vm.fetch_current_location_weather()
            if vm.current_weather.value is not None:
                print(render_snapshot(vm.current_weather.value))

            await vm.fetch_weather_by_city("Paris")
            if vm.current_weather.value is not None:
                print(render_snapshot(vm.current_weather.value))


async def main() -> None:
    await client_example()
    await view_model_example()


if __name__ == "__main__":
    asyncio.run(main())
