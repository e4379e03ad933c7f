"""Color harmony classification on the HSL wheel.

Item colors are hex strings. Each outfit's color multiset is classified into
one harmony category using hue distances, so the result is deterministic for
a given multiset regardless of item order:

1. Malformed colors are ignored. When nothing parseable remains the outfit
   has no known harmony and scores the neutral fallback.
2. When every color is neutral (low saturation, near black or near white)
   the outfit is ``neutral``.
3. Otherwise neutrals are dropped and the chromatic hues are checked in a
   fixed priority order: monochromatic, analogous, complementary, triadic.
   The first match wins; no match is ``none``.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

MONOCHROMATIC = "monochromatic"
ANALOGOUS = "analogous"
COMPLEMENTARY = "complementary"
TRIADIC = "triadic"
NEUTRAL = "neutral"
NONE = "none"

HARMONY_PRIORITY: Tuple[str, ...] = (MONOCHROMATIC, ANALOGOUS, COMPLEMENTARY, TRIADIC, NEUTRAL, NONE)

HARMONY_SCORES: Dict[str, float] = {
    MONOCHROMATIC: 0.95,
    ANALOGOUS: 0.9,
    COMPLEMENTARY: 0.85,
    TRIADIC: 0.8,
    NEUTRAL: 0.75,
}
UNKNOWN_COLOR_SCORE = 0.5

NEUTRAL_SATURATION = 0.15
NEUTRAL_DARK_LIGHTNESS = 0.08
NEUTRAL_LIGHT_LIGHTNESS = 0.95

MONOCHROMATIC_SPREAD = 15.0
ANALOGOUS_SPREAD = 60.0
CLUSTER_LINKAGE = 30.0
HUE_TOLERANCE = 30.0

_HEX_DIGITS = set("0123456789abcdef")


@dataclass(frozen=True)
class HSL:
    h: float
    s: float
    l: float  # noqa: E741


@dataclass(frozen=True)
class HarmonyResult:
    """Represents the outcome of a harmony classification."""

    harmony: str
    known: bool = True
    chromatic: List[HSL] = field(default_factory=list)
    ignored: List[str] = field(default_factory=list)


def hex_to_hsl(value: str | None) -> Optional[HSL]:
    """Convert ``#rrggbb`` (or ``#rgb``) into HSL, ``None`` when malformed."""

    if not value:
        return None
    raw = str(value).strip().lower().lstrip("#")
    if len(raw) == 3:
        raw = "".join(ch * 2 for ch in raw)
    if len(raw) != 6 or not set(raw) <= _HEX_DIGITS:
        return None

    r, g, b = (int(raw[i : i + 2], 16) / 255 for i in (0, 2, 4))
    high, low = max(r, g, b), min(r, g, b)
    lightness = (high + low) / 2
    if high == low:
        return HSL(0.0, 0.0, lightness)

    delta = high - low
    saturation = delta / (2 - high - low) if lightness > 0.5 else delta / (high + low)
    if high == r:
        hue = (g - b) / delta + (6 if g < b else 0)
    elif high == g:
        hue = (b - r) / delta + 2
    else:
        hue = (r - g) / delta + 4
    return HSL((hue * 60) % 360, saturation, lightness)


def is_neutral(color: HSL) -> bool:
    return (
        color.s < NEUTRAL_SATURATION
        or color.l < NEUTRAL_DARK_LIGHTNESS
        or color.l > NEUTRAL_LIGHT_LIGHTNESS
    )


def hue_distance(a: float, b: float) -> float:
    """Shortest angular distance between two hues."""

    diff = abs(a - b) % 360
    return min(diff, 360 - diff)


def circular_spread(hues: Sequence[float]) -> float:
    """Smallest arc of the wheel that contains every hue."""

    if len(hues) <= 1:
        return 0.0
    ordered = sorted(hues)
    gaps = [later - earlier for earlier, later in zip(ordered, ordered[1:])]
    gaps.append(ordered[0] + 360 - ordered[-1])
    return 360 - max(gaps)


def _circular_mean(hues: Sequence[float]) -> float:
    x = sum(math.cos(math.radians(h)) for h in hues)
    y = sum(math.sin(math.radians(h)) for h in hues)
    return math.degrees(math.atan2(y, x)) % 360


def hue_clusters(hues: Sequence[float], linkage: float = CLUSTER_LINKAGE) -> List[float]:
    """Single-linkage clustering around the wheel; returns sorted cluster centres."""

    if not hues:
        return []
    ordered = sorted(hues)
    groups: List[List[float]] = [[ordered[0]]]
    for hue in ordered[1:]:
        if hue - groups[-1][-1] <= linkage:
            groups[-1].append(hue)
        else:
            groups.append([hue])
    if len(groups) > 1 and ordered[0] + 360 - ordered[-1] <= linkage:
        groups[0] = groups.pop() + groups[0]
    return sorted(_circular_mean(group) for group in groups)


def _is_complementary(centres: Sequence[float]) -> bool:
    return len(centres) == 2 and hue_distance(centres[0], centres[1]) >= 180 - HUE_TOLERANCE


def _is_triadic(centres: Sequence[float]) -> bool:
    if len(centres) != 3:
        return False
    gaps = [centres[1] - centres[0], centres[2] - centres[1], centres[0] + 360 - centres[2]]
    return all(abs(gap - 120) <= HUE_TOLERANCE for gap in gaps)


def classify_harmony(colors: Iterable[str]) -> HarmonyResult:
    """Classify a color multiset into one harmony category."""

    parsed: List[HSL] = []
    ignored: List[str] = []
    for color in colors:
        hsl = hex_to_hsl(color)
        if hsl is None:
            ignored.append(str(color))
        else:
            parsed.append(hsl)

    if not parsed:
        logger.debug("No parseable colors in %s", ignored)
        return HarmonyResult(harmony=NONE, known=False, ignored=ignored)

    chromatic = [color for color in parsed if not is_neutral(color)]
    if not chromatic:
        return HarmonyResult(harmony=NEUTRAL, ignored=ignored)

    hues = [color.h for color in chromatic]
    spread = circular_spread(hues)
    centres = hue_clusters(hues)
    if spread <= MONOCHROMATIC_SPREAD:
        harmony = MONOCHROMATIC
    elif spread <= ANALOGOUS_SPREAD:
        harmony = ANALOGOUS
    elif _is_complementary(centres):
        harmony = COMPLEMENTARY
    elif _is_triadic(centres):
        harmony = TRIADIC
    else:
        harmony = NONE
    logger.debug("Harmony %s for hues=%s spread=%.1f clusters=%s", harmony, hues, spread, centres)
    return HarmonyResult(harmony=harmony, chromatic=chromatic, ignored=ignored)


def color_distance(a: HSL, b: HSL) -> float:
    """Weighted HSL distance, hue dominant."""

    return hue_distance(a.h, b.h) * 0.6 + abs(a.s - b.s) * 0.2 + abs(a.l - b.l) * 0.2


def color_distance_score(colors: Sequence[HSL]) -> float:
    """Score unclassified palettes: moderate contrast beats both sameness and clashing."""

    if len(colors) <= 1:
        return 1.0
    distances = [
        color_distance(colors[i], colors[j])
        for i in range(len(colors))
        for j in range(i + 1, len(colors))
    ]
    normalised = min(1.0, (sum(distances) / len(distances)) / 150)
    return max(0.0, min(1.0, 1 - abs(normalised - 0.5) * 2))


def harmony_score(result: HarmonyResult) -> float:
    if not result.known:
        return UNKNOWN_COLOR_SCORE
    if result.harmony in HARMONY_SCORES:
        return HARMONY_SCORES[result.harmony]
    return color_distance_score(result.chromatic)


def colors_close(color1: str, color2: str) -> bool:
    """Return True when two hex colors are visually close."""

    if not color1 or not color2:
        return False
    if color1.strip().lower() == color2.strip().lower():
        return True
    a, b = hex_to_hsl(color1), hex_to_hsl(color2)
    if a is None or b is None:
        return False
    return hue_distance(a.h, b.h) < 30 and abs(a.s - b.s) < 0.3 and abs(a.l - b.l) < 0.3


__all__ = [
    "HSL",
    "HarmonyResult",
    "HARMONY_PRIORITY",
    "HARMONY_SCORES",
    "UNKNOWN_COLOR_SCORE",
    "MONOCHROMATIC",
    "ANALOGOUS",
    "COMPLEMENTARY",
    "TRIADIC",
    "NEUTRAL",
    "NONE",
    "hex_to_hsl",
    "is_neutral",
    "hue_distance",
    "circular_spread",
    "hue_clusters",
    "classify_harmony",
    "color_distance_score",
    "harmony_score",
    "colors_close",
]
