"""Current weather: a one-shot fetch, no submission state machine."""
from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Any, List, Mapping, Tuple

from .api_client import ApiClient
from .errors import FarmAssistantError, MalformedResponse

logger = logging.getLogger(__name__)

WEATHER_PATH = "/fetch-current-weather-data"
WEATHER_ERROR = "Failed to fetch weather data. Check network or CORS settings."


@dataclass(frozen=True)
class WeatherReport:
    timestamp: str
    fetch_time: float
    temp: float
    feels_like: float
    temp_min: float
    temp_max: float
    pressure: float
    humidity: float
    wind_speed: float
    wind_direction: float
    weather_main: str
    weather_description: str
    clouds: float
    city: str
    rain_chance: float

    @classmethod
    def from_dict(cls, data: Any) -> "WeatherReport":
        if not isinstance(data, Mapping):
            raise MalformedResponse("Weather response is not an object")
        names = [f.name for f in fields(cls)]
        missing = [name for name in names if name not in data]
        if missing:
            raise MalformedResponse(f"Weather response missing {', '.join(missing)}")
        return cls(**{name: data[name] for name in names})

    def headline(self) -> Tuple[str, str, str]:
        return self.city, f"{round(self.temp)}°C", self.weather_description

    def details(self) -> List[Tuple[str, str]]:
        return [
            ("Feels Like", f"{round(self.feels_like)}°C"),
            ("Humidity", f"{self.humidity}%"),
            ("Wind Speed", f"{self.wind_speed} m/s"),
            ("Rain Chance", f"{self.rain_chance}%"),
            ("Min Temp", f"{round(self.temp_min)}°C"),
            ("Max Temp", f"{round(self.temp_max)}°C"),
            ("Pressure", f"{self.pressure} hPa"),
            ("Wind Direction", f"{self.wind_direction}°"),
            ("Cloud Cover", f"{self.clouds}%"),
        ]


def fetch_current_weather(client: ApiClient) -> WeatherReport:
    """Fetch the service's cached weather record.

    Any failure is re-raised as a FarmAssistantError carrying the fixed
    user-facing message; the underlying cause is logged.
    """
    try:
        return WeatherReport.from_dict(client.get_json(WEATHER_PATH))
    except FarmAssistantError as e:
        logger.error("Fetch error: %s", e.message)
        raise FarmAssistantError(WEATHER_ERROR) from e
