"""Context objects that steer scoring: weather and style preference."""

from __future__ import annotations

from dataclasses import dataclass


WEATHER_CONDITIONS = ("clear", "cloudy", "rainy", "snowy", "windy", "unknown")


@dataclass(frozen=True)
class WeatherContext:
    """Weather snapshot used by the weather suitability axis.

    ``precipitation`` is a probability in [0, 1]; ``wind_speed`` is km/h.
    """

    temperature: float
    condition: str = "clear"
    precipitation: float = 0.0
    wind_speed: float = 0.0

    def __post_init__(self) -> None:
        condition = str(self.condition or "unknown").strip().lower()
        object.__setattr__(self, "condition", condition if condition in WEATHER_CONDITIONS else "unknown")
        object.__setattr__(self, "precipitation", max(0.0, min(1.0, float(self.precipitation))))
        object.__setattr__(self, "wind_speed", max(0.0, float(self.wind_speed)))

    def to_dict(self) -> dict:
        return {
            "temperature": self.temperature,
            "condition": self.condition,
            "precipitation": self.precipitation,
            "wind_speed": self.wind_speed,
        }


@dataclass(frozen=True)
class StylePreference:
    """Preferred look on two 0-1 scales (casual to formal, conservative to bold)."""

    formality: float = 0.5
    boldness: float = 0.5


__all__ = ["WeatherContext", "StylePreference", "WEATHER_CONDITIONS"]
