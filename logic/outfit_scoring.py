"""Deterministic, explainable scoring for candidate outfits."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from itertools import combinations
from typing import Dict, List, Optional, Sequence, Tuple

from models.clothing_item import ClothingItem
from models.color_theory import classify_harmony, colors_close, harmony_score
from models.context import StylePreference, WeatherContext
from models.outfit import Score, ScoreBreakdown
from models.taxonomy import STYLE_TAGS, normalize_occasion, normalize_season, season_for_date

logger = logging.getLogger(__name__)

SCORE_WEIGHTS = {
    "color_harmony": 0.2,
    "style_matching": 0.2,
    "occasion_suitability": 0.2,
    "season_suitability": 0.15,
    "weather_suitability": 0.15,
    "user_preference": 0.1,
}

NEUTRAL_SUB_SCORE = 0.5

CATEGORY_FORMALITY = {
    "tops": 0.5,
    "bottoms": 0.5,
    "dresses": 0.7,
    "outerwear": 0.6,
    "shoes": 0.5,
    "accessories": 0.5,
}
CATEGORY_BOLDNESS = {
    "tops": 0.5,
    "bottoms": 0.4,
    "dresses": 0.6,
    "outerwear": 0.5,
    "shoes": 0.4,
    "accessories": 0.7,
}
OCCASION_FORMALITY_SHIFT = {"formal": 0.3, "work": 0.2, "casual": -0.2, "sport": -0.3}
BOLD_TAGS = ("bright", "pattern", "print", "colorful", "vibrant")
CONSERVATIVE_TAGS = ("plain", "simple", "basic", "classic")

COMPATIBLE_STYLES = {
    frozenset(pair)
    for pair in [
        ("casual", "sporty"),
        ("casual", "trendy"),
        ("casual", "vintage"),
        ("casual", "bohemian"),
        ("formal", "business"),
        ("formal", "classic"),
        ("business", "classic"),
        ("classic", "vintage"),
        ("trendy", "vintage"),
        ("bohemian", "vintage"),
    ]
}
CLASHING_STYLES = {
    frozenset(pair)
    for pair in [
        ("formal", "sporty"),
        ("business", "sporty"),
        ("formal", "bohemian"),
        ("formal", "casual"),
    ]
}

# Temperature band upper bounds in Celsius.
COLD_MAX = 10
COOL_MAX = 18
MILD_MAX = 24
WARM_MAX = 30
WINDY_SPEED_KMH = 20


class InvalidOutfitError(ValueError):
    """Raised when an outfit cannot be scored, e.g. it has no items."""


@dataclass(frozen=True)
class ScoringContext:
    """Optional inputs that switch scoring axes on or steer them."""

    occasion: Optional[str] = None
    season: Optional[str] = None
    target_date: Optional[date] = None
    weather: Optional[WeatherContext] = None
    preferred_colors: Sequence[str] = ()
    style_preference: Optional[StylePreference] = None
    strict_style: bool = False


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def _style_tags(item: ClothingItem) -> set:
    return {tag for tag in item.tags if tag in STYLE_TAGS}


def _has_tag(item: ClothingItem, needles: Sequence[str]) -> bool:
    return any(needle in tag for tag in item.tags for needle in needles)


def item_formality(item: ClothingItem) -> float:
    formality = CATEGORY_FORMALITY.get(item.category, 0.5)
    for occasion in item.occasion:
        formality += OCCASION_FORMALITY_SHIFT.get(occasion, 0.0)
    return _clamp(formality)


def item_boldness(item: ClothingItem) -> float:
    boldness = CATEGORY_BOLDNESS.get(item.category, 0.5)
    for tag in item.tags:
        if any(bold in tag for bold in BOLD_TAGS):
            boldness += 0.1
        if any(plain in tag for plain in CONSERVATIVE_TAGS):
            boldness -= 0.1
    return _clamp(boldness)


def _tag_compatibility(first: ClothingItem, second: ClothingItem) -> float:
    tags_a, tags_b = _style_tags(first), _style_tags(second)
    if not tags_a or not tags_b:
        return NEUTRAL_SUB_SCORE
    if tags_a & tags_b:
        return 1.0
    best = 0.0
    for tag_a in tags_a:
        for tag_b in tags_b:
            pair = frozenset((tag_a, tag_b))
            if pair in COMPATIBLE_STYLES:
                value = 0.8
            elif pair in CLASHING_STYLES:
                value = 0.3
            else:
                value = 0.6
            best = max(best, value)
    return best


def pair_compatibility(first: ClothingItem, second: ClothingItem) -> float:
    """Mean of formality closeness and style tag compatibility for two items."""

    closeness = 1 - abs(item_formality(first) - item_formality(second))
    return _clamp((closeness + _tag_compatibility(first, second)) / 2)


def calculate_style_matching(
    items: Sequence[ClothingItem],
    preference: StylePreference | None = None,
    strict: bool = False,
) -> float:
    """Aggregate pairwise compatibility: mean by default, min when strict."""

    pair_scores = [pair_compatibility(a, b) for a, b in combinations(items, 2)]
    if not pair_scores:
        compatibility = 1.0
    elif strict:
        compatibility = min(pair_scores)
    else:
        compatibility = sum(pair_scores) / len(pair_scores)

    if preference is None:
        return _clamp(compatibility)

    formality = sum(item_formality(item) for item in items) / len(items)
    boldness = sum(item_boldness(item) for item in items) / len(items)
    preference_match = (
        (1 - abs(formality - preference.formality)) + (1 - abs(boldness - preference.boldness))
    ) / 2
    return _clamp((compatibility + preference_match) / 2)


def calculate_occasion_suitability(items: Sequence[ClothingItem], occasion: str | None) -> float:
    if not occasion:
        return 1.0
    target = normalize_occasion(occasion)
    if target is None:
        logger.debug("Unknown occasion %r, using neutral sub score", occasion)
        return NEUTRAL_SUB_SCORE
    suitable = [item for item in items if target in item.occasion]
    return _clamp(len(suitable) / len(items))


def resolve_season(season: str | None, target_date: date | None = None) -> Optional[str]:
    """Pick the target season; ``None`` means an unrecognised explicit season."""

    if season:
        return normalize_season(season)
    return season_for_date(target_date or date.today())


def calculate_season_suitability(
    items: Sequence[ClothingItem], season: str | None, target_date: date | None = None
) -> float:
    target = resolve_season(season, target_date)
    if target is None:
        logger.debug("Unknown season %r, using neutral sub score", season)
        return NEUTRAL_SUB_SCORE
    suitable = [item for item in items if not item.season or target in item.season]
    return _clamp(len(suitable) / len(items))


def _temperature_score(items: Sequence[ClothingItem], temperature: float) -> float:
    has_outerwear = any(item.category == "outerwear" for item in items)
    has_long_sleeves = any(_has_tag(item, ("long sleeve", "long-sleeve")) for item in items)
    if temperature < COLD_MAX:
        return 1.0 if has_outerwear else 0.3
    if temperature < COOL_MAX:
        return 1.0 if has_outerwear or has_long_sleeves else 0.6
    if temperature < MILD_MAX:
        return 1.0
    if temperature < WARM_MAX:
        return 0.5 if has_outerwear else 1.0
    if has_outerwear:
        return 0.2
    return 0.6 if has_long_sleeves else 1.0


def calculate_weather_suitability(items: Sequence[ClothingItem], weather: WeatherContext) -> float:
    """Temperature, precipitation and wind fit, weighted 0.6/0.3/0.1."""

    temperature_score = _temperature_score(items, weather.temperature)

    precipitation_score = 1.0
    if weather.precipitation > 0.5 or weather.condition in {"rainy", "snowy"}:
        waterproof = any(_has_tag(item, ("waterproof", "water-resistant", "rain")) for item in items)
        precipitation_score = 1.0 if waterproof else 0.5

    wind_score = 1.0
    if weather.wind_speed > WINDY_SPEED_KMH or weather.condition == "windy":
        wind_resistant = any(
            item.category == "outerwear" or _has_tag(item, ("windproof", "wind-resistant")) for item in items
        )
        wind_score = 1.0 if wind_resistant else 0.7

    return _clamp(temperature_score * 0.6 + precipitation_score * 0.3 + wind_score * 0.1)


def calculate_user_preference(items: Sequence[ClothingItem], preferred_colors: Sequence[str]) -> float:
    matching = [
        item for item in items if any(colors_close(item.color, color) for color in preferred_colors)
    ]
    return _clamp(len(matching) / len(items))


def combine_axes(breakdown: ScoreBreakdown) -> float:
    """Weighted mean over the axes that were actually computed."""

    axes = breakdown.computed_axes()
    weight_sum = sum(SCORE_WEIGHTS[name] for name in axes)
    total = sum(value * SCORE_WEIGHTS[name] for name, value in axes.items()) / weight_sum
    return _clamp(total)


def score_outfit(items: Sequence[ClothingItem], context: ScoringContext | None = None) -> Score:
    """Calculate the composite score and breakdown for an outfit."""

    if not items:
        raise InvalidOutfitError("Cannot score an empty outfit")
    context = context or ScoringContext()

    harmony = classify_harmony(item.color for item in items)
    breakdown = ScoreBreakdown(
        color_harmony=_clamp(harmony_score(harmony)),
        style_matching=calculate_style_matching(items, context.style_preference, context.strict_style),
        occasion_suitability=calculate_occasion_suitability(items, context.occasion),
        season_suitability=calculate_season_suitability(items, context.season, context.target_date),
        weather_suitability=(
            calculate_weather_suitability(items, context.weather) if context.weather is not None else None
        ),
        user_preference=(
            calculate_user_preference(items, context.preferred_colors) if context.preferred_colors else None
        ),
    )
    total = combine_axes(breakdown)

    explanation = {
        "color_harmony": f"{harmony.harmony} palette" if harmony.known else "colors not recognised",
        "style_matching": "strict pairwise minimum" if context.strict_style else "pairwise mean",
        "occasion_suitability": f"requested {context.occasion}" if context.occasion else "no occasion requested",
        "season_suitability": f"target {resolve_season(context.season, context.target_date) or context.season}",
    }
    if context.weather is not None:
        explanation["weather_suitability"] = (
            f"{context.weather.temperature:.0f}C {context.weather.condition}"
        )
    if context.preferred_colors:
        explanation["user_preference"] = f"{len(context.preferred_colors)} preferred colors"

    logger.debug("Scored outfit %s -> %.3f", [item.id for item in items], total)
    return Score(
        total=total,
        breakdown=breakdown,
        color_harmony_type=harmony.harmony,
        explanation=explanation,
    )


def analyze_outfit_completeness(items: Sequence[ClothingItem]) -> Dict[str, object]:
    """Report which core pieces are missing; a dress covers top and bottom."""

    categories = {item.category for item in items}
    has_dress = "dresses" in categories
    missing: List[str] = []
    suggestions: List[str] = []
    if not has_dress and "tops" not in categories:
        missing.append("Top")
        suggestions.append("Add a shirt, blouse, or sweater")
    if not has_dress and "bottoms" not in categories:
        missing.append("Bottom")
        suggestions.append("Add pants, skirt, or shorts")
    if "shoes" not in categories:
        missing.append("Shoes")
        suggestions.append("Add appropriate footwear")
    return {"is_complete": not missing, "missing_categories": missing, "suggestions": suggestions}


def score_display(total: float) -> str:
    return f"{round(total * 100)}%"


_SCORE_COLORS: Tuple[Tuple[float, str], ...] = (
    (0.85, "#10B981"),
    (0.7, "#F59E0B"),
    (0.5, "#EF4444"),
)


def score_color(total: float) -> str:
    """Badge color for a match score."""

    for threshold, color in _SCORE_COLORS:
        if total >= threshold:
            return color
    return "#6B7280"


__all__ = [
    "SCORE_WEIGHTS",
    "InvalidOutfitError",
    "ScoringContext",
    "score_outfit",
    "combine_axes",
    "pair_compatibility",
    "calculate_style_matching",
    "calculate_occasion_suitability",
    "calculate_season_suitability",
    "calculate_weather_suitability",
    "calculate_user_preference",
    "resolve_season",
    "analyze_outfit_completeness",
    "score_display",
    "score_color",
]
