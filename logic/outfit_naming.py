"""Deterministic, human-friendly names for saved outfits.

Names are derived from a hash of the outfit content, so the same items
always produce the same base name. Collisions with names the user already
has are resolved with Roman numeral and then numeric suffixes.
"""

from __future__ import annotations

import hashlib
from collections import Counter
from typing import Iterable, List, Optional, Sequence

from models.clothing_item import ClothingItem
from models.color_theory import hex_to_hsl, is_neutral

NAME_TEMPLATES = {
    "casual": ["Weekend Vibes", "Chill Mode", "Easy Breeze", "Laid Back", "Sunday Stroll", "Coffee Run",
               "Comfort Zone", "Casual Cool", "Everyday Style", "Simple Chic", "Effortless Look"],
    "work": ["Boss Mode", "Power Play", "Office Chic", "Meeting Ready", "Business Edge", "Sharp Focus",
             "Executive Style", "Boardroom Ready"],
    "formal": ["Elegance", "Refined", "Classic Grace", "Timeless", "Polished", "Evening Elegance",
               "Black Tie Ready", "Gala Glamour"],
    "party": ["Night Out", "Party Ready", "Dance Floor", "Show Stopper", "Statement", "Night Magic"],
    "sport": ["Active Mode", "Workout Ready", "Sporty Edge", "Fitness Focus", "Gym Ready", "Energy Boost"],
    "travel": ["Wanderlust", "Journey Ready", "Explorer", "On the Go", "Vacation Vibes", "Jet Set"],
    "date": ["Date Night", "Romance", "Sweet Spot", "Charming", "Dreamy", "Love Story"],
    "special": ["Special Moment", "Memorable", "Milestone", "Unforgettable", "Grand Occasion"],
}

SEASON_MODIFIERS = {
    "spring": ["Fresh", "Bloom", "Garden", "Breezy"],
    "summer": ["Sunny", "Tropical", "Radiant", "Golden"],
    "fall": ["Cozy", "Rustic", "Harvest", "Earthy"],
    "winter": ["Crisp", "Frost", "Arctic", "Frosty"],
}

COLOR_ADJECTIVES = {
    "black": ["Midnight", "Onyx", "Noir", "Raven"],
    "white": ["Pure", "Pearl", "Ivory", "Cloud"],
    "gray": ["Storm", "Steel", "Slate", "Silver"],
    "red": ["Cherry", "Crimson", "Ruby", "Scarlet"],
    "orange": ["Sunset", "Tangerine", "Copper", "Coral"],
    "yellow": ["Sunshine", "Gold", "Honey", "Amber"],
    "green": ["Forest", "Emerald", "Sage", "Jade"],
    "blue": ["Ocean", "Sapphire", "Navy", "Azure"],
    "purple": ["Lavender", "Plum", "Violet", "Orchid"],
    "pink": ["Blush", "Petal", "Rosy", "Blossom"],
}

STYLE_DESCRIPTORS = ["Chic", "Sleek", "Modern", "Classic", "Bold", "Minimal", "Polished", "Sharp"]

FALLBACK_NAME = "Mystery Look"
ROMAN_SUFFIXES = ["II", "III", "IV", "V", "VI", "VII", "VIII", "IX", "X"]


def _seed(text: str) -> int:
    return int(hashlib.sha256(text.encode("utf-8")).hexdigest()[:12], 16)


def _pick(options: Sequence[str], seed: int) -> str:
    return options[seed % len(options)]


def _chance(seed: int, probability: float) -> bool:
    return (seed % 1000) / 1000 < probability


def color_family(value: str) -> Optional[str]:
    """Coarse color name for a hex value, used for naming only."""

    hsl = hex_to_hsl(value)
    if hsl is None:
        return None
    if is_neutral(hsl):
        if hsl.l < 0.25:
            return "black"
        if hsl.l > 0.85:
            return "white"
        return "gray"
    hue = hsl.h
    if hue < 15 or hue >= 345:
        return "pink" if hsl.l > 0.7 else "red"
    if hue < 45:
        return "orange"
    if hue < 70:
        return "yellow"
    if hue < 170:
        return "green"
    if hue < 260:
        return "blue"
    if hue < 300:
        return "purple"
    return "pink"


def _most_common(values: Iterable[str]) -> Optional[str]:
    counts = Counter(value for value in values if value)
    if not counts:
        return None
    # Ties resolve alphabetically so the result is order independent.
    return sorted(counts.items(), key=lambda pair: (-pair[1], pair[0]))[0][0]


def ensure_unique_name(base_name: str, existing_names: Iterable[str] = ()) -> str:
    taken = set(existing_names)
    if base_name not in taken:
        return base_name
    for suffix in ROMAN_SUFFIXES:
        candidate = f"{base_name} {suffix}"
        if candidate not in taken:
            return candidate
    counter = 11
    while f"{base_name} {counter}" in taken:
        counter += 1
    return f"{base_name} {counter}"


def generate_outfit_name(items: Sequence[ClothingItem], existing_names: Iterable[str] = ()) -> str:
    if not items:
        return ensure_unique_name(FALLBACK_NAME, existing_names)

    signature = "|".join(sorted(f"{item.id}-{item.category}-{item.color.lower()}" for item in items))
    seed = _seed(signature)

    occasion = _most_common(o for item in items for o in item.occasion) or "casual"
    season = _most_common(s for item in items for s in item.season)
    color = _most_common(color_family(item.color) or "" for item in items)

    base_name = _pick(NAME_TEMPLATES.get(occasion, NAME_TEMPLATES["casual"]), seed)

    modifier = ""
    if season and _chance(seed >> 8, 0.4):
        modifier = _pick(SEASON_MODIFIERS[season], seed >> 16)
    elif color and _chance(seed >> 12, 0.3):
        modifier = _pick(COLOR_ADJECTIVES[color], seed >> 20)
    elif _chance(seed >> 24, 0.2):
        modifier = _pick(STYLE_DESCRIPTORS, seed >> 28)

    name = base_name
    if modifier:
        name = f"{modifier} {base_name}" if _chance(seed >> 32, 0.7) else f"{base_name} {modifier}"
    return ensure_unique_name(name, existing_names)


__all__: List[str] = ["generate_outfit_name", "ensure_unique_name", "color_family"]
