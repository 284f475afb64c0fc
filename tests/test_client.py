import pytest
from unittest.mock import AsyncMock, patch

import httpx

from weatherapp import (
    Coordinate,
    Failure,
    Success,
    WeatherAPIError,
    WeatherClient,
    WeatherConnectionError,
    WeatherValidationError,
)
from weatherapp.models import WeatherResponse

TOKYO_PAYLOAD = {
    "coord": {"lon": 139.69, "lat": 35.68},
    "weather": [{"id": 801, "main": "Clouds", "description": "few clouds", "icon": "02d"}],
    "main": {"temp": 22.4, "feels_like": 21.9, "temp_min": 21.0, "temp_max": 23.5,
             "pressure": 1012, "humidity": 60},
    "wind": {"speed": 11.2, "deg": 180},
    "dt": 1700000000,
    "timezone": 32400,
    "name": "Tokyo",
    "cod": 200,
}


def mock_http(response=None, side_effect=None):
    http_client = AsyncMock()
    http_client.get = AsyncMock(return_value=response, side_effect=side_effect)
    return http_client


class TestValidation:
    def test_valid_coordinates(self):
        client = WeatherClient("key")
        client._validate_coordinate(Coordinate(latitude=0.0, longitude=0.0))
        client._validate_coordinate(Coordinate(latitude=-90.0, longitude=-180.0))
        client._validate_coordinate(Coordinate(latitude=90.0, longitude=180.0))

    def test_invalid_latitude(self):
        client = WeatherClient("key")
        with pytest.raises(WeatherValidationError) as exc_info:
            client._validate_coordinate(Coordinate(latitude=91.0, longitude=0.0))
        assert "Latitude must be in range [-90.0, 90.0]" in str(exc_info.value)

    def test_invalid_longitude(self):
        client = WeatherClient("key")
        with pytest.raises(WeatherValidationError) as exc_info:
            client._validate_coordinate(Coordinate(latitude=0.0, longitude=-181.0))
        assert "Longitude must be in range [-180.0, 180.0]" in str(exc_info.value)


class TestWeatherResponse:
    def test_to_snapshot(self):
        snapshot = WeatherResponse.model_validate(TOKYO_PAYLOAD).to_snapshot()

        assert snapshot.name == "Tokyo"
        assert snapshot.temperature == 22.4
        assert snapshot.feels_like == 21.9
        assert snapshot.humidity == 60
        assert snapshot.wind_speed == 11.2
        assert snapshot.coord == Coordinate(latitude=35.68, longitude=139.69)

    def test_extra_fields_ignored(self):
        response = WeatherResponse.model_validate(TOKYO_PAYLOAD)
        assert not hasattr(response, "weather")
        assert not hasattr(response.main, "pressure")

    def test_minimal_payload(self):
        response = WeatherResponse.model_validate(
            {
                "name": "Nowhere",
                "coord": {"lat": 0, "lon": 0},
                "main": {"temp": 1, "feels_like": 0, "humidity": 5},
                "wind": {"speed": 0},
            }
        )
        assert response.to_snapshot().temperature == 1.0


class TestExceptions:
    def test_api_error(self):
        error = WeatherAPIError("city not found", status_code=404)
        assert error.reason == "city not found"
        assert error.status_code == 404
        assert "city not found" in str(error)

    def test_connection_error(self):
        error = WeatherConnectionError("Network error")
        assert "Network error" in str(error)


class TestClientLifecycle:
    @pytest.mark.asyncio
    async def test_context_manager(self):
        async with WeatherClient("key") as client:
            assert client._client is not None
        assert client._client is None

    @pytest.mark.asyncio
    async def test_close_idempotent(self):
        client = WeatherClient("key")
        await client.close()
        await client.close()

    @pytest.mark.asyncio
    async def test_ensure_client_creates_once(self):
        client = WeatherClient("key")
        c1 = await client._ensure_client()
        c2 = await client._ensure_client()
        assert c1 is c2
        await client.close()


class TestFetchMethod:
    @pytest.mark.asyncio
    async def test_fetch_sends_key_and_units(self):
        client = WeatherClient("secret", base_url="https://example.com/data/2.5/")
        http_client = mock_http(httpx.Response(200, json=TOKYO_PAYLOAD))

        with patch.object(client, "_ensure_client", AsyncMock(return_value=http_client)):
            result = await client._fetch({"q": "Tokyo"})

        assert result.name == "Tokyo"
        http_client.get.assert_awaited_once_with(
            "https://example.com/data/2.5/weather",
            params={"q": "Tokyo", "appid": "secret", "units": "metric"},
        )

    @pytest.mark.asyncio
    async def test_fetch_http_error(self):
        client = WeatherClient("key")
        http_client = mock_http(
            httpx.Response(404, json={"cod": "404", "message": "city not found"})
        )

        with patch.object(client, "_ensure_client", AsyncMock(return_value=http_client)):
            with pytest.raises(WeatherAPIError) as exc_info:
                await client._fetch({"q": "Atlantis"})

        assert exc_info.value.reason == "Failed to fetch weather data"
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_fetch_empty_body(self):
        client = WeatherClient("key")
        http_client = mock_http(httpx.Response(200, content=b""))

        with patch.object(client, "_ensure_client", AsyncMock(return_value=http_client)):
            with pytest.raises(WeatherAPIError):
                await client._fetch({"q": "Tokyo"})

    @pytest.mark.asyncio
    async def test_fetch_null_body(self):
        client = WeatherClient("key")
        http_client = mock_http(httpx.Response(200, content=b"null"))

        with patch.object(client, "_ensure_client", AsyncMock(return_value=http_client)):
            with pytest.raises(WeatherAPIError):
                await client._fetch({"q": "Tokyo"})

    @pytest.mark.asyncio
    async def test_fetch_malformed_body(self):
        client = WeatherClient("key")
        http_client = mock_http(httpx.Response(200, content=b"<html>oops</html>"))

        with patch.object(client, "_ensure_client", AsyncMock(return_value=http_client)):
            with pytest.raises(WeatherValidationError):
                await client._fetch({"q": "Tokyo"})

    @pytest.mark.asyncio
    async def test_fetch_incomplete_payload(self):
        client = WeatherClient("key")
        http_client = mock_http(httpx.Response(200, json={"name": "Tokyo"}))

        with patch.object(client, "_ensure_client", AsyncMock(return_value=http_client)):
            with pytest.raises(WeatherValidationError):
                await client._fetch({"q": "Tokyo"})

    @pytest.mark.asyncio
    async def test_fetch_transport_error(self):
        client = WeatherClient("key")
        http_client = mock_http(side_effect=httpx.ConnectError("Name or service not known"))

        with patch.object(client, "_ensure_client", AsyncMock(return_value=http_client)):
            with pytest.raises(WeatherConnectionError) as exc_info:
                await client._fetch({"q": "Tokyo"})

        assert "Name or service not known" in str(exc_info.value)


class TestFetchByCityName:
    @pytest.mark.asyncio
    async def test_success(self):
        client = WeatherClient("key")
        http_client = mock_http(httpx.Response(200, json=TOKYO_PAYLOAD))

        with patch.object(client, "_ensure_client", AsyncMock(return_value=http_client)):
            outcome = await client.fetch_by_city_name("  Tokyo ")

        assert isinstance(outcome, Success)
        assert outcome.ok
        assert outcome.snapshot.name == "Tokyo"
        assert http_client.get.await_args.kwargs["params"]["q"] == "Tokyo"

    @pytest.mark.asyncio
    async def test_http_failure_is_normalized(self):
        client = WeatherClient("key")
        http_client = mock_http(httpx.Response(401, json={"cod": 401, "message": "Invalid API key"}))

        with patch.object(client, "_ensure_client", AsyncMock(return_value=http_client)):
            outcome = await client.fetch_by_city_name("Tokyo")

        assert outcome == Failure("Failed to fetch weather data")
        assert not outcome.ok

    @pytest.mark.asyncio
    async def test_transport_failure_keeps_diagnostic(self):
        client = WeatherClient("key")
        http_client = mock_http(side_effect=httpx.ReadTimeout("timed out"))

        with patch.object(client, "_ensure_client", AsyncMock(return_value=http_client)):
            outcome = await client.fetch_by_city_name("Tokyo")

        assert isinstance(outcome, Failure)
        assert "timed out" in outcome.reason

    @pytest.mark.asyncio
    async def test_blank_name_skips_network(self):
        client = WeatherClient("key")
        http_client = mock_http(httpx.Response(200, json=TOKYO_PAYLOAD))

        with patch.object(client, "_ensure_client", AsyncMock(return_value=http_client)):
            outcome = await client.fetch_by_city_name("   ")

        assert isinstance(outcome, Failure)
        http_client.get.assert_not_called()


class TestFetchByCoordinates:
    @pytest.mark.asyncio
    async def test_success(self):
        client = WeatherClient("key")
        http_client = mock_http(httpx.Response(200, json=TOKYO_PAYLOAD))

        with patch.object(client, "_ensure_client", AsyncMock(return_value=http_client)):
            outcome = await client.fetch_by_coordinates(
                Coordinate(latitude=35.68, longitude=139.69)
            )

        assert isinstance(outcome, Success)
        params = http_client.get.await_args.kwargs["params"]
        assert params["lat"] == 35.68
        assert params["lon"] == 139.69

    @pytest.mark.asyncio
    async def test_out_of_range_skips_network(self):
        client = WeatherClient("key")
        http_client = mock_http(httpx.Response(200, json=TOKYO_PAYLOAD))

        with patch.object(client, "_ensure_client", AsyncMock(return_value=http_client)):
            outcome = await client.fetch_by_coordinates(
                Coordinate(latitude=123.0, longitude=0.0)
            )

        assert isinstance(outcome, Failure)
        assert "Latitude" in outcome.reason
        http_client.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_server_error(self):
        client = WeatherClient("key")
        http_client = mock_http(httpx.Response(503, content=b"Service Unavailable"))

        with patch.object(client, "_ensure_client", AsyncMock(return_value=http_client)):
            outcome = await client.fetch_by_coordinates(
                Coordinate(latitude=35.68, longitude=139.69)
            )

        assert outcome == Failure("Failed to fetch weather data")
