"""Weather provider parsing, unit conversion and fallbacks."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict

import pytest
import requests

from models.context import WeatherContext
from tools.weather_provider import (
    FALLBACK_WEATHER,
    MockWeatherProvider,
    OpenWeatherProvider,
    clothing_guidance,
    condition_from_description,
)


class _Response:
    def __init__(self, payload: Any, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code}")

    def json(self) -> Any:
        return self._payload


def _forecast() -> Dict[str, Any]:
    return {
        "list": [
            {
                "dt_txt": "2025-03-01 12:00:00",
                "main": {"temp_min": 4.0, "temp_max": 8.0},
                "pop": 0.2,
                "wind": {"speed": 2.0},
                "weather": [{"description": "few clouds"}],
            },
            {
                "dt_txt": "2025-03-02 12:00:00",
                "main": {"temp_min": 10.0, "temp_max": 14.0},
                "pop": 0.8,
                "wind": {"speed": 10.0},
                "weather": [{"description": "light rain"}],
            },
        ]
    }


def test_parses_matching_day_and_converts_wind(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list = []

    def fake_get(url, params=None, timeout=None):
        calls.append(params)
        return _Response(_forecast())

    monkeypatch.setattr("tools.weather_provider.requests.get", fake_get)
    weather = OpenWeatherProvider(api_key="key").get_forecast("Amsterdam", date(2025, 3, 2))

    assert weather.temperature == pytest.approx(12.0)
    assert weather.condition == "rainy"
    assert weather.precipitation == pytest.approx(0.8)
    assert weather.wind_speed == pytest.approx(36.0)
    assert calls[0]["q"] == "Amsterdam"
    assert calls[0]["units"] == "metric"


def test_unknown_day_uses_first_entry(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("tools.weather_provider.requests.get", lambda url, params=None, timeout=None: _Response(_forecast()))
    weather = OpenWeatherProvider(api_key="key").get_forecast("Amsterdam", date(2030, 1, 1))
    assert weather.condition == "cloudy"
    assert weather.temperature == pytest.approx(6.0)


def test_missing_key_falls_back_without_network(monkeypatch: pytest.MonkeyPatch) -> None:
    def fail(*args, **kwargs):
        raise AssertionError("network should not be used")

    monkeypatch.setattr("tools.weather_provider.requests.get", fail)
    assert OpenWeatherProvider(api_key=None).get_forecast("Amsterdam", date(2025, 3, 1)) == FALLBACK_WEATHER


@pytest.mark.parametrize(
    "behaviour",
    [
        requests.ConnectionError("down"),
        _Response({"list": [{"dt_txt": "2025-03-01", "main": {}}]}),
        _Response({"list": []}),
        _Response({}, status_code=401),
    ],
)
def test_failures_fall_back(monkeypatch: pytest.MonkeyPatch, behaviour) -> None:
    def fake_get(url, params=None, timeout=None):
        if isinstance(behaviour, Exception):
            raise behaviour
        return behaviour

    monkeypatch.setattr("tools.weather_provider.requests.get", fake_get)
    assert OpenWeatherProvider(api_key="key").get_forecast("Amsterdam", date(2025, 3, 1)) == FALLBACK_WEATHER


def test_location_is_required() -> None:
    with pytest.raises(ValueError):
        OpenWeatherProvider(api_key="key").get_forecast("", date(2025, 3, 1))


@pytest.mark.parametrize(
    "description, expected",
    [
        ("light snow", "snowy"),
        ("moderate rain", "rainy"),
        ("thunderstorm", "rainy"),
        ("overcast clouds", "cloudy"),
        ("clear sky", "clear"),
        ("volcanic ash", "unknown"),
    ],
)
def test_condition_mapping(description: str, expected: str) -> None:
    assert condition_from_description(description) == expected


def test_clothing_guidance() -> None:
    assert clothing_guidance(WeatherContext(temperature=8, condition="rainy")) == "Carry a rain jacket and warm layers"
    assert clothing_guidance(WeatherContext(temperature=22, precipitation=0.6)) == "Pack a light rain layer"
    assert clothing_guidance(WeatherContext(temperature=10)) == "Light jacket recommended"
    assert clothing_guidance(WeatherContext(temperature=25)) == "T-shirt friendly weather"


def test_mock_provider_is_deterministic() -> None:
    provider = MockWeatherProvider()
    assert provider.get_forecast("Anywhere", date(2025, 3, 1)) == provider.get_forecast("Elsewhere", date(2025, 9, 1))
    custom = WeatherContext(temperature=-2, condition="snowy")
    assert MockWeatherProvider(custom).get_forecast("Oslo", date(2025, 1, 1)) is custom
