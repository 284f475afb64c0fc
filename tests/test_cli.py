import argparse
import tempfile
from pathlib import Path

import pytest
from unittest.mock import AsyncMock, patch

from weatherapp import (
    Coordinate,
    Failure,
    PreferencesStore,
    Success,
    WeatherCache,
    WeatherSettings,
    WeatherSnapshot,
)
from weatherapp.cli import build_parser, main, run, validate_city_name

TOKYO = WeatherSnapshot(
    name="Tokyo",
    temperature=22.4,
    feels_like=21.9,
    humidity=60,
    wind_speed=11.2,
    coord=Coordinate(latitude=35.68, longitude=139.69),
)


def make_settings(tmpdir):
    return WeatherSettings(api_key="key", cache_dir=Path(tmpdir), granted_permissions=set())


class TestValidateCityName:
    def test_strips(self):
        assert validate_city_name("  Tokyo ") == "Tokyo"

    @pytest.mark.parametrize("value", ["", "   ", "\t\n"])
    def test_rejects_blank(self, value):
        with pytest.raises(argparse.ArgumentTypeError) as exc_info:
            validate_city_name(value)
        assert "Please enter a city name" in str(exc_info.value)


class TestParser:
    def test_city(self):
        args = build_parser().parse_args(["--city", "Paris"])
        assert args.city == "Paris"
        assert args.here is False

    def test_city_and_here_are_exclusive(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--city", "Paris", "--here"])

    def test_empty_city_never_reaches_view_model(self):
        with patch("weatherapp.cli.WeatherViewModel") as view_model:
            with pytest.raises(SystemExit):
                main(["--city", "   "])
        view_model.assert_not_called()


class TestRun:
    @pytest.mark.asyncio
    async def test_city_success(self, capsys):
        with tempfile.TemporaryDirectory() as tmpdir:
            args = build_parser().parse_args(["--city", "Tokyo"])
            with patch(
                "weatherapp.cli.WeatherClient.fetch_by_city_name",
                AsyncMock(return_value=Success(TOKYO)),
            ):
                code = await run(args, make_settings(tmpdir))

            assert code == 0
            out = capsys.readouterr().out
            assert "Tokyo" in out
            assert "22°C" in out
            cache = WeatherCache(PreferencesStore(Path(tmpdir)))
            assert cache.load_last_location() == Coordinate(latitude=35.68, longitude=139.69)

    @pytest.mark.asyncio
    async def test_city_failure(self, capsys):
        with tempfile.TemporaryDirectory() as tmpdir:
            args = build_parser().parse_args(["--city", "Atlantis"])
            with patch(
                "weatherapp.cli.WeatherClient.fetch_by_city_name",
                AsyncMock(return_value=Failure("Failed to fetch weather data")),
            ):
                code = await run(args, make_settings(tmpdir))

            assert code == 1
            err = capsys.readouterr().err
            assert "Failed to fetch weather: Failed to fetch weather data" in err

    @pytest.mark.asyncio
    async def test_here_without_permission(self, capsys):
        with tempfile.TemporaryDirectory() as tmpdir:
            args = build_parser().parse_args(["--here"])
            code = await run(args, make_settings(tmpdir))

            assert code == 1
            assert "Unable to get current location" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_startup_uses_cache(self, capsys):
        with tempfile.TemporaryDirectory() as tmpdir:
            WeatherCache(PreferencesStore(Path(tmpdir))).save(TOKYO)
            args = build_parser().parse_args([])
            fetch = AsyncMock()
            with patch("weatherapp.cli.WeatherClient.fetch_by_coordinates", fetch):
                code = await run(args, make_settings(tmpdir))

            assert code == 0
            assert "Tokyo" in capsys.readouterr().out
            fetch.assert_not_called()

    @pytest.mark.asyncio
    async def test_startup_with_cleared_cache_and_nothing_else(self, capsys):
        with tempfile.TemporaryDirectory() as tmpdir:
            WeatherCache(PreferencesStore(Path(tmpdir))).save(TOKYO)
            args = build_parser().parse_args(["--clear-cache"])
            code = await run(args, make_settings(tmpdir))

            assert code == 1
            assert "No weather yet" in capsys.readouterr().err
