"""View model for a single outfit recommendation card."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Callable, List

from logic.outfit_scoring import score_color, score_display
from logic.swipe import SwipeGesture
from models.clothing_item import ClothingItem
from models.color_theory import classify_harmony
from models.context import WeatherContext
from models.outfit import GeneratedOutfit

logger = logging.getLogger(__name__)

PALETTE_PHRASES = {
    "monochromatic": "features a sophisticated monochromatic scheme",
    "analogous": "uses harmonious analogous colors",
    "complementary": "balances complementary colors for visual interest",
    "triadic": "incorporates a dynamic triadic color arrangement",
    "neutral": "relies on versatile neutral tones",
}
DEFAULT_PALETTE_PHRASE = "creates a balanced visual appeal"

BREAKDOWN_LABELS = (
    ("color_harmony", "Color Harmony"),
    ("style_matching", "Style Match"),
    ("occasion_suitability", "Occasion Fit"),
    ("season_suitability", "Season Fit"),
    ("weather_suitability", "Weather Fit"),
    ("user_preference", "Your Preferences"),
)


@dataclass(frozen=True)
class BreakdownRow:
    key: str
    label: str
    value: float
    display: str


class RecommendationCard:
    """Presentation contract for one generated outfit.

    Right swipes map to ``on_swipe_right`` (like) and left swipes to
    ``on_swipe_left`` (skip); see :class:`logic.swipe.SwipeGesture`.
    """

    def __init__(
        self,
        outfit: GeneratedOutfit,
        on_save: Callable[[], None],
        on_refresh: Callable[[], None],
        on_share: Callable[[], None],
        on_swipe_left: Callable[[], None] | None = None,
        on_swipe_right: Callable[[], None] | None = None,
        weather: WeatherContext | None = None,
        occasion: str | None = None,
    ) -> None:
        if not outfit.items:
            raise ValueError("A recommendation card needs at least one item")
        self.outfit = outfit
        self.on_save = on_save
        self.on_refresh = on_refresh
        self.on_share = on_share
        self.on_swipe_left = on_swipe_left
        self.on_swipe_right = on_swipe_right
        self.weather = weather
        self.occasion = occasion

    @property
    def match_score(self) -> int:
        return round(self.outfit.score.total * 100)

    @property
    def match_label(self) -> str:
        return score_display(self.outfit.score.total)

    @property
    def score_color(self) -> str:
        return score_color(self.outfit.score.total)

    @property
    def primary_item(self) -> ClothingItem:
        for item in self.outfit.items:
            if item.category in ("tops", "dresses"):
                return item
        return self.outfit.items[0]

    @property
    def secondary_items(self) -> List[ClothingItem]:
        primary = self.primary_item
        return [item for item in self.outfit.items if item.id != primary.id]

    def styling_description(self) -> str:
        categories = {item.category for item in self.outfit.items}
        if "tops" in categories and "bottoms" in categories:
            pieces = "a top with bottoms"
        elif "dresses" in categories:
            pieces = "a dress"
        else:
            pieces = "multiple pieces"
        if "outerwear" in categories:
            pieces += " and a layered outer piece"
        if "accessories" in categories:
            pieces += " with complementary accessories"

        harmony = classify_harmony(item.color for item in self.outfit.items)
        palette = PALETTE_PHRASES.get(harmony.harmony, DEFAULT_PALETTE_PHRASE)
        description = f"This outfit combines {pieces}. The color palette {palette}"
        if self.occasion:
            description += f", perfect for {self.occasion} occasions"
        if self.weather is not None:
            description += (
                f". Suitable for {self.weather.temperature:g}°C {self.weather.condition} weather"
            )
        return description + "."

    def breakdown_rows(self) -> List[BreakdownRow]:
        breakdown = self.outfit.score.breakdown.to_dict()
        rows: List[BreakdownRow] = []
        for key, label in BREAKDOWN_LABELS:
            value = breakdown.get(key)
            if value is None:
                continue
            rows.append(BreakdownRow(key=key, label=label, value=value, display=score_display(value)))
        return rows

    def save(self) -> None:
        self.on_save()

    def refresh(self) -> None:
        self.on_refresh()

    def share(self) -> None:
        self.on_share()

    def gesture(self, screen_width: float) -> SwipeGesture:
        """Swipe gesture bound to this card's like/skip callbacks."""

        return SwipeGesture(
            screen_width,
            on_like=self.on_swipe_right,
            on_skip=self.on_swipe_left,
        )

    def to_dict(self) -> dict:
        return {
            "match_score": self.match_score,
            "score_color": self.score_color,
            "primary_item": self.primary_item.to_dict(),
            "secondary_items": [item.to_dict() for item in self.secondary_items],
            "styling_description": self.styling_description(),
            "breakdown": [asdict(row) for row in self.breakdown_rows()],
        }


__all__ = ["RecommendationCard", "BreakdownRow", "PALETTE_PHRASES"]
