"""Outfit scorer axes, weighting and presentation helpers."""

from __future__ import annotations

from datetime import date

import pytest

from logic.outfit_scoring import (
    SCORE_WEIGHTS,
    InvalidOutfitError,
    ScoringContext,
    analyze_outfit_completeness,
    calculate_occasion_suitability,
    calculate_season_suitability,
    calculate_style_matching,
    calculate_weather_suitability,
    score_color,
    score_display,
    score_outfit,
)
from models.clothing_item import ClothingItem
from models.context import StylePreference, WeatherContext


def _item(item_id: str, category: str, color: str = "#1F2A44", **kwargs) -> ClothingItem:
    return ClothingItem(id=item_id, name=item_id, category=category, color=color, **kwargs)


@pytest.fixture()
def outfit() -> list[ClothingItem]:
    return [
        _item("top", "tops", "#FFFFFF", occasion=["work"], tags=["classic"]),
        _item("bottom", "bottoms", "#1F2A44", occasion=["casual"], tags=["business"]),
        _item("shoes", "shoes", "#6B4226", occasion=["work"], tags=["classic"]),
    ]


def test_empty_outfit_raises() -> None:
    with pytest.raises(InvalidOutfitError):
        score_outfit([])
    assert issubclass(InvalidOutfitError, ValueError)


def test_total_is_renormalised_weighted_mean(outfit) -> None:
    """Total only combines the axes that were computed."""

    score = score_outfit(outfit, ScoringContext(occasion="work", season="fall"))
    axes = score.breakdown.computed_axes()
    assert set(axes) == {"color_harmony", "style_matching", "occasion_suitability", "season_suitability"}
    assert score.breakdown.weather_suitability is None
    assert score.breakdown.user_preference is None

    expected = sum(value * SCORE_WEIGHTS[name] for name, value in axes.items()) / sum(
        SCORE_WEIGHTS[name] for name in axes
    )
    assert score.total == pytest.approx(expected)
    assert 0.0 <= score.total <= 1.0


def test_weather_and_preferences_add_axes(outfit) -> None:
    context = ScoringContext(
        weather=WeatherContext(temperature=20, condition="clear"),
        preferred_colors=("#FFFFFF",),
    )
    score = score_outfit(outfit, context)
    assert score.breakdown.weather_suitability == pytest.approx(1.0)
    assert score.breakdown.user_preference == pytest.approx(1 / 3)
    assert set(score.breakdown.computed_axes()) == set(SCORE_WEIGHTS)
    assert "weather_suitability" in score.explanation


def test_scoring_is_deterministic(outfit) -> None:
    context = ScoringContext(occasion="work", target_date=date(2025, 7, 1))
    assert score_outfit(outfit, context) == score_outfit(list(outfit), context)


def test_occasion_suitability(outfit) -> None:
    assert calculate_occasion_suitability(outfit, None) == 1.0
    assert calculate_occasion_suitability(outfit, "work") == pytest.approx(2 / 3)
    assert calculate_occasion_suitability(outfit, "brunch") == 0.5


def test_season_suitability_uses_date_when_no_season() -> None:
    items = [_item("coat", "outerwear", season=["winter"]), _item("jeans", "bottoms")]
    assert calculate_season_suitability(items, None, date(2025, 7, 1)) == pytest.approx(0.5)
    assert calculate_season_suitability(items, "winter") == pytest.approx(1.0)
    assert calculate_season_suitability(items, "monsoon") == 0.5


def test_weather_suitability_bands() -> None:
    light = [_item("tee", "tops"), _item("shorts", "bottoms")]
    layered = light + [_item("coat", "outerwear")]

    cold = WeatherContext(temperature=5)
    assert calculate_weather_suitability(light, cold) == pytest.approx(0.58)
    assert calculate_weather_suitability(layered, cold) == pytest.approx(1.0)

    rainy = WeatherContext(temperature=20, condition="rainy")
    assert calculate_weather_suitability(light, rainy) == pytest.approx(0.85)
    waterproof = light + [_item("shell", "accessories", tags=["waterproof"])]
    assert calculate_weather_suitability(waterproof, rainy) == pytest.approx(1.0)

    windy = WeatherContext(temperature=20, wind_speed=35)
    assert calculate_weather_suitability(light, windy) == pytest.approx(0.97)


def test_style_matching_mean_and_strict() -> None:
    items = [
        _item("top", "tops", tags=["formal"]),
        _item("bottom", "bottoms", tags=["formal"]),
        _item("shoes", "shoes", tags=["sporty"]),
    ]
    assert calculate_style_matching(items) == pytest.approx(2.3 / 3)
    assert calculate_style_matching(items, strict=True) == pytest.approx(0.65)
    assert calculate_style_matching(items[:1]) == 1.0


def test_style_preference_rewards_matching_formality() -> None:
    items = [_item("top", "tops", occasion=["formal"]), _item("bottom", "bottoms", occasion=["formal"])]
    close = calculate_style_matching(items, StylePreference(formality=0.8, boldness=0.45))
    far = calculate_style_matching(items, StylePreference(formality=0.0, boldness=0.45))
    assert close > far
    assert 0.0 <= far <= close <= 1.0


def test_unknown_category_and_bad_color_do_not_raise() -> None:
    score = score_outfit([_item("cape", "cape", color="oops"), _item("hat", "hats", color="")])
    assert score.breakdown.color_harmony == 0.5
    assert 0.0 <= score.total <= 1.0


def test_completeness_treats_dress_as_top_and_bottom() -> None:
    assert analyze_outfit_completeness([_item("d", "dresses"), _item("s", "shoes")])["is_complete"]
    report = analyze_outfit_completeness([_item("t", "tops")])
    assert report["missing_categories"] == ["Bottom", "Shoes"]


def test_score_display_and_color() -> None:
    assert score_display(0.856) == "86%"
    assert score_color(0.9) == "#10B981"
    assert score_color(0.75) == "#F59E0B"
    assert score_color(0.55) == "#EF4444"
    assert score_color(0.3) == "#6B7280"
