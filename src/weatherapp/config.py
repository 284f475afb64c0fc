"""Configuration for weatherapp.

Settings come from environment variables prefixed with ``WEATHERAPP_``
or from a ``.env`` file in the working directory.

Example:
    .env file::

        WEATHERAPP_API_KEY=0123456789abcdef
        WEATHERAPP_CACHE_DIR=/var/cache/weatherapp
        WEATHERAPP_GRANTED_PERMISSIONS=["coarse"]
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .types import DEFAULT_BASE_URL, DEFAULT_LOCATION_URL, Permission


class WeatherSettings(BaseSettings):
    """Runtime settings.

    Attributes:
        api_key: Weather API key. Required for network calls.
        base_url: Weather API base URL.
        timeout: HTTP timeout in seconds for weather requests.
        cache_dir: Directory holding the preferences file.
        granted_permissions: Location permissions the host grants.
        location_url: IP geolocation endpoint.
    """

    model_config = SettingsConfigDict(
        env_prefix="WEATHERAPP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    timeout: float = Field(default=30.0, gt=0)
    cache_dir: Path = Path.home() / ".cache" / "weatherapp"
    granted_permissions: set[Permission] = Field(
        default_factory=lambda: {Permission.FINE, Permission.COARSE}
    )
    location_url: str = DEFAULT_LOCATION_URL

    @field_validator("api_key")
    @classmethod
    def strip_api_key(cls, value: str) -> str:
        return value.strip()

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, value: str) -> str:
        text = value.strip().rstrip("/")
        if not text.startswith(("http://", "https://")):
            raise ValueError("base_url must be an absolute http(s) URL")
        return text


@lru_cache(maxsize=1)
def load_settings() -> WeatherSettings:
    return WeatherSettings()
