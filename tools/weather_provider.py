"""Weather provider abstractions producing the scorer's weather context."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import date
from typing import List

import requests
from pydantic import BaseModel, ValidationError

from models.context import WeatherContext
from tools.observability import instrument_call

LOGGER = logging.getLogger(__name__)

FORECAST_URL = "https://api.openweathermap.org/data/2.5/forecast"
# OpenWeather metric units report wind in m/s.
MS_TO_KMH = 3.6

_CONDITION_KEYWORDS = (
    ("snow", "snowy"),
    ("sleet", "snowy"),
    ("rain", "rainy"),
    ("drizzle", "rainy"),
    ("thunder", "rainy"),
    ("shower", "rainy"),
    ("cloud", "cloudy"),
    ("overcast", "cloudy"),
    ("mist", "cloudy"),
    ("fog", "cloudy"),
    ("wind", "windy"),
    ("clear", "clear"),
    ("sun", "clear"),
)


class _WeatherCondition(BaseModel):
    description: str = "unknown"


class _Wind(BaseModel):
    speed: float = 0.0


class _Main(BaseModel):
    temp_min: float
    temp_max: float


class _ForecastEntry(BaseModel):
    dt_txt: str
    main: _Main
    pop: float = 0.0
    wind: _Wind
    weather: List[_WeatherCondition] = []


class _ForecastResponse(BaseModel):
    list: List[_ForecastEntry] = []


def condition_from_description(description: str) -> str:
    text = (description or "").lower()
    for keyword, condition in _CONDITION_KEYWORDS:
        if keyword in text:
            return condition
    return "unknown"


def clothing_guidance(weather: WeatherContext) -> str:
    needs_layers = weather.temperature < 15
    rain_risk = weather.precipitation > 0.3 or weather.condition in {"rainy", "snowy"}
    if rain_risk and needs_layers:
        return "Carry a rain jacket and warm layers"
    if rain_risk:
        return "Pack a light rain layer"
    if needs_layers:
        return "Light jacket recommended"
    return "T-shirt friendly weather"


FALLBACK_WEATHER = WeatherContext(temperature=15.0, condition="unknown", precipitation=0.1, wind_speed=18.0)


class WeatherProvider(ABC):
    """Abstract weather provider interface."""

    @abstractmethod
    def get_forecast(self, location: str, date: date) -> WeatherContext:
        """Return the weather context for a location and day."""


class OpenWeatherProvider(WeatherProvider):
    """OpenWeather provider with schema validation and graceful fallbacks."""

    def __init__(self, api_key: str | None = None, timeout_seconds: float = 5.0, units: str = "metric") -> None:
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self.units = units

    def _fallback(self, reason: str) -> WeatherContext:
        LOGGER.warning("Using fallback weather profile", extra={"reason": reason})
        return FALLBACK_WEATHER

    def _choose_entry(self, entries: List["_ForecastEntry"], target_date: date) -> "_ForecastEntry | None":
        target_day = target_date.isoformat()
        for entry in entries:
            if entry.dt_txt.startswith(target_day):
                return entry
        return entries[0] if entries else None

    @instrument_call("weather_forecast")
    def get_forecast(self, location: str, date: date) -> WeatherContext:
        if not location:
            raise ValueError("location is required for weather lookups")

        if not self.api_key:
            return self._fallback("missing_api_key")

        LOGGER.info("Fetching weather forecast", extra={"date": str(date)})
        params = {
            "q": location,
            "appid": self.api_key,
            "units": self.units,
        }

        try:
            response = requests.get(FORECAST_URL, params=params, timeout=self.timeout_seconds)
            response.raise_for_status()
            parsed = _ForecastResponse.model_validate(response.json())
        except requests.RequestException as exc:
            LOGGER.error("Weather API unreachable", exc_info=exc)
            return self._fallback("request_error")
        except ValidationError as exc:
            LOGGER.error("Weather payload schema validation failed", exc_info=exc)
            return self._fallback("schema_validation")

        entry = self._choose_entry(parsed.list, date)
        if not entry:
            return self._fallback("no_forecast_entries")

        description = entry.weather[0].description if entry.weather else "unknown"
        wind_speed = entry.wind.speed * MS_TO_KMH if self.units == "metric" else entry.wind.speed
        return WeatherContext(
            temperature=(entry.main.temp_min + entry.main.temp_max) / 2,
            condition=condition_from_description(description),
            precipitation=entry.pop,
            wind_speed=wind_speed,
        )


class MockWeatherProvider(WeatherProvider):
    """Offline deterministic weather provider for tests and demos."""

    def __init__(self, weather: WeatherContext | None = None) -> None:
        self.weather = weather or WeatherContext(temperature=21.0, condition="clear", precipitation=0.1, wind_speed=8.0)

    def get_forecast(self, location: str, date: date) -> WeatherContext:
        LOGGER.info("Returning mock forecast", extra={"date": str(date)})
        return self.weather


__all__ = [
    "WeatherProvider",
    "OpenWeatherProvider",
    "MockWeatherProvider",
    "FALLBACK_WEATHER",
    "condition_from_description",
    "clothing_guidance",
]
