"""Canonical taxonomy definitions for wardrobe items.

This module centralises the canonical labels for categories, seasons,
occasions and the style tags the scorer understands. Helper functions keep
normalisation consistent across the models, the stores and the API layer.
Unknown values are never rejected here: the scorer treats them as neutral.
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Dict, Iterable, List, Optional


class ClothingCategory(str, Enum):
    TOPS = "tops"
    BOTTOMS = "bottoms"
    DRESSES = "dresses"
    OUTERWEAR = "outerwear"
    SHOES = "shoes"
    ACCESSORIES = "accessories"


class Season(str, Enum):
    SPRING = "spring"
    SUMMER = "summer"
    FALL = "fall"
    WINTER = "winter"


class Occasion(str, Enum):
    CASUAL = "casual"
    WORK = "work"
    FORMAL = "formal"
    PARTY = "party"
    SPORT = "sport"
    TRAVEL = "travel"
    DATE = "date"
    SPECIAL = "special"


CATEGORIES: List[str] = [category.value for category in ClothingCategory]
SEASONS: List[str] = [season.value for season in Season]
OCCASIONS: List[str] = [occasion.value for occasion in Occasion]

STYLE_TAGS = ["casual", "formal", "business", "sporty", "vintage", "trendy", "classic", "bohemian"]

CATEGORY_ALIASES: Dict[str, str] = {
    "top": "tops",
    "shirt": "tops",
    "tee": "tops",
    "sweater": "tops",
    "bottom": "bottoms",
    "pants": "bottoms",
    "trousers": "bottoms",
    "jeans": "bottoms",
    "skirt": "bottoms",
    "dress": "dresses",
    "jumpsuit": "dresses",
    "jacket": "outerwear",
    "coat": "outerwear",
    "shoe": "shoes",
    "footwear": "shoes",
    "accessory": "accessories",
    "jewelry": "accessories",
    "jewellery": "accessories",
    "bag": "accessories",
    "bags": "accessories",
    "belt": "accessories",
    "belts": "accessories",
    "hat": "accessories",
    "hats": "accessories",
    "scarf": "accessories",
    "scarves": "accessories",
}

SEASON_ALIASES: Dict[str, str] = {"autumn": "fall"}

_MONTH_TO_SEASON: Dict[int, str] = {
    12: "winter",
    1: "winter",
    2: "winter",
    3: "spring",
    4: "spring",
    5: "spring",
    6: "summer",
    7: "summer",
    8: "summer",
    9: "fall",
    10: "fall",
    11: "fall",
}


def _normalize_key(value: str) -> str:
    """Normalise a free-form string into a taxonomy key."""

    return str(value).strip().lower().replace(" ", "_")


def normalize_category(value: str) -> str:
    """Map a raw category to its canonical value.

    Unknown categories are returned lower-cased rather than rejected so that
    a single odd item cannot break scoring for the whole wardrobe.
    """

    key = _normalize_key(value)
    return CATEGORY_ALIASES.get(key, key)


def is_known_category(value: str) -> bool:
    return normalize_category(value) in CATEGORIES


def normalize_season(value: str) -> Optional[str]:
    """Return the canonical season or ``None`` when unknown."""

    key = _normalize_key(value)
    key = SEASON_ALIASES.get(key, key)
    return key if key in SEASONS else None


def normalize_occasion(value: str) -> Optional[str]:
    """Return the canonical occasion or ``None`` when unknown."""

    key = _normalize_key(value)
    return key if key in OCCASIONS else None


def season_for_date(target: date) -> str:
    """Northern hemisphere meteorological season for ``target``."""

    return _MONTH_TO_SEASON[target.month]


def normalise_tags(values: Iterable[str], allowed: List[str] | None = None) -> List[str]:
    """Normalise and deduplicate tags, optionally against an allowed set."""

    normalised = []
    seen = set()
    for value in values:
        key = str(value).strip().lower()
        if not key or key in seen:
            continue
        if allowed is not None and key not in allowed:
            continue
        normalised.append(key)
        seen.add(key)
    return normalised


__all__ = [
    "ClothingCategory",
    "Season",
    "Occasion",
    "CATEGORIES",
    "SEASONS",
    "OCCASIONS",
    "STYLE_TAGS",
    "normalize_category",
    "is_known_category",
    "normalize_season",
    "normalize_occasion",
    "season_for_date",
    "normalise_tags",
]
