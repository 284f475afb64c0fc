"""Command-line front end for weatherapp.

Usage::

    weatherapp                 # cached weather, else the last known place
    weatherapp --here          # weather for the current location
    weatherapp --city Tokyo    # weather for a city
    weatherapp --clear-cache   # forget the cached snapshot first

The API key is read from ``WEATHERAPP_API_KEY`` (see weatherapp.config).
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from .cache import WeatherCache
from .client import WeatherClient
from .config import WeatherSettings, load_settings
from .display import render_snapshot
from .location import IpLocationService, LocationProvider
from .storage import PreferencesStore
from .viewmodel import WeatherViewModel

logger = logging.getLogger(__name__)


def validate_city_name(value: str) -> str:
    """argparse type for ``--city``: reject empty and whitespace-only names."""
    city = value.strip()
    if not city:
        raise argparse.ArgumentTypeError("Please enter a city name")
    return city


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="weatherapp",
        description="Show current weather for your location or a city.",
    )
    target = parser.add_mutually_exclusive_group()
    target.add_argument("--city", type=validate_city_name, help="city name, e.g. 'Paris,FR'")
    target.add_argument("--here", action="store_true", help="use the current location")
    parser.add_argument(
        "--clear-cache", action="store_true", help="drop the cached snapshot before running"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return parser


def build_view_model(
    settings: WeatherSettings, client: WeatherClient, cache: WeatherCache
) -> WeatherViewModel:
    provider = LocationProvider(
        IpLocationService(
            granted=settings.granted_permissions,
            url=settings.location_url,
        )
    )
    return WeatherViewModel(client, cache, provider)


async def run(args: argparse.Namespace, settings: WeatherSettings) -> int:
    if not settings.api_key:
        logger.warning("WEATHERAPP_API_KEY is not set; network requests will fail")

    async with WeatherClient(
        settings.api_key, base_url=settings.base_url, timeout=settings.timeout
    ) as client:
        cache = WeatherCache(PreferencesStore(settings.cache_dir))
        if args.clear_cache:
            await asyncio.to_thread(cache.clear)
        vm = build_view_model(settings, client, cache)

        errors: list[str] = []

        def collect_error(message: Optional[str]) -> None:
            if message:
                errors.append(message)

        vm.error_message.subscribe(collect_error)

        try:
            if args.city:
                task = vm.fetch_weather_by_city(args.city)
            elif args.here:
                task = vm.fetch_current_location_weather()
            else:
                task = vm.start()
            await task
        finally:
            await vm.close()

        for message in errors:
            print(message, file=sys.stderr)
        vm.clear_error()

        snapshot = vm.current_weather.value
        if snapshot is None:
            if not errors:
                print("No weather yet. Try --here or --city NAME.", file=sys.stderr)
            return 1
        print(render_snapshot(snapshot))
        return 1 if errors else 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(run(args, load_settings()))
