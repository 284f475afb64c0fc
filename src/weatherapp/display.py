"""Display formatting for weather snapshots.

Values are rounded half up to whole numbers, so 22.4 shows as 22°C and
-0.5 as 0°C.
"""

import math
from datetime import datetime
from typing import Optional

from .models import WeatherSnapshot


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward positive infinity.

    Example:
        >>> round_half_up(22.5)
        23
        >>> round_half_up(-2.5)
        -2
    """
    return math.floor(value + 0.5)


def format_temperature(value: float) -> str:
    return f"{round_half_up(value)}°C"


def format_humidity(value: int) -> str:
    return f"{value}%"


def format_wind_speed(value: float) -> str:
    return f"{round_half_up(value)} km/h"


def is_day_time(now: Optional[datetime] = None) -> bool:
    """Return True between 06:00 and 18:59 local time."""
    hour = (now or datetime.now()).hour
    return 6 <= hour <= 18


def greeting_message(now: Optional[datetime] = None) -> str:
    return "Good Morning" if is_day_time(now) else "Good Night"


def current_date_label(now: Optional[datetime] = None) -> str:
    """Format a date like "Monday, Jan 05"."""
    return (now or datetime.now()).strftime("%A, %b %d")


def render_snapshot(snapshot: WeatherSnapshot, now: Optional[datetime] = None) -> str:
    """Render a snapshot as a short multi-line text block.

    Example:
        >>> print(render_snapshot(snapshot, now=datetime(2024, 1, 15, 9)))
        Tokyo
        Monday, Jan 15 - Good Morning
        22°C (feels like 22°C)
        Humidity 60%  Wind 11 km/h
    """
    return "\n".join(
        [
            snapshot.name,
            f"{current_date_label(now)} - {greeting_message(now)}",
            f"{format_temperature(snapshot.temperature)} "
            f"(feels like {format_temperature(snapshot.feels_like)})",
            f"Humidity {format_humidity(snapshot.humidity)}  "
            f"Wind {format_wind_speed(snapshot.wind_speed)}",
        ]
    )
