"""Similarity between outfits, used to keep recommendation lists varied."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Set

from models.clothing_item import ClothingItem
from models.color_theory import colors_close
from models.taxonomy import STYLE_TAGS

VERY_SIMILAR_THRESHOLD = 0.6
SIMILARITY_WEIGHTS = {"items": 0.4, "colors": 0.25, "categories": 0.2, "styles": 0.15}
_IGNORED_COLORS = {"#000000", "#ffffff"}


@dataclass(frozen=True)
class SimilarityResult:
    similarity: float
    item_match: float
    color_match: float
    category_match: float
    style_match: float

    @property
    def is_very_similar(self) -> bool:
        return self.similarity > VERY_SIMILAR_THRESHOLD


def _jaccard(first: Set[str], second: Set[str]) -> float:
    union = first | second
    return len(first & second) / len(union) if union else 0.0


def _primary_colors(outfit: Iterable[ClothingItem]) -> List[str]:
    return [item.color for item in outfit if item.color and item.color.lower() not in _IGNORED_COLORS]


def _color_match(first: Sequence[ClothingItem], second: Sequence[ClothingItem]) -> float:
    colors_a, colors_b = _primary_colors(first), _primary_colors(second)
    if not colors_a or not colors_b:
        return 0.0
    close_pairs = sum(1 for a in colors_a for b in colors_b if colors_close(a, b))
    return close_pairs / (len(colors_a) * len(colors_b))


def _styles(outfit: Iterable[ClothingItem]) -> Set[str]:
    return {tag for item in outfit for tag in item.tags if tag in STYLE_TAGS}


def compare_outfits(first: Sequence[ClothingItem], second: Sequence[ClothingItem]) -> SimilarityResult:
    if not first or not second:
        return SimilarityResult(0.0, 0.0, 0.0, 0.0, 0.0)

    item_match = _jaccard({item.id for item in first}, {item.id for item in second})
    color_match = _color_match(first, second)
    category_match = _jaccard({item.category for item in first}, {item.category for item in second})
    styles_a, styles_b = _styles(first), _styles(second)
    style_match = _jaccard(styles_a, styles_b) if styles_a and styles_b else 0.0

    similarity = (
        item_match * SIMILARITY_WEIGHTS["items"]
        + color_match * SIMILARITY_WEIGHTS["colors"]
        + category_match * SIMILARITY_WEIGHTS["categories"]
        + style_match * SIMILARITY_WEIGHTS["styles"]
    )
    return SimilarityResult(similarity, item_match, color_match, category_match, style_match)


def outfit_fingerprint(outfit: Sequence[ClothingItem]) -> str:
    """Content fingerprint: categories, colors and tags, each sorted."""

    categories = sorted(item.category for item in outfit)
    colors = sorted(item.color for item in outfit if item.color)
    tags = sorted(tag for item in outfit for tag in item.tags)
    return f"{','.join(categories)}|{','.join(colors)}|{','.join(tags)}"


__all__ = [
    "VERY_SIMILAR_THRESHOLD",
    "SimilarityResult",
    "compare_outfits",
    "outfit_fingerprint",
]
