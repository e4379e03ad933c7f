"""Bounded outfit generation and ranking with transparent diagnostics."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from itertools import product
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from logic.outfit_scoring import ScoringContext, resolve_season, score_outfit
from logic.outfit_similarity import compare_outfits
from models.clothing_item import ClothingItem
from models.context import StylePreference, WeatherContext
from models.outfit import GeneratedOutfit
from models.taxonomy import normalize_occasion

logger = logging.getLogger(__name__)

BASE_TEMPLATES: Tuple[Tuple[str, ...], ...] = (
    ("tops", "bottoms", "shoes"),
    ("dresses", "shoes"),
)
OPTIONAL_CATEGORIES: Tuple[str, ...] = ("outerwear", "accessories")

# Items kept per category bucket after suitability ranking.
BUCKET_LIMIT = 6
# Base combinations scored per request, across all templates.
CANDIDATE_BUDGET = 400


@dataclass(frozen=True)
class GenerationOptions:
    occasion: Optional[str] = None
    season: Optional[str] = None
    target_date: Optional[date] = None
    weather: Optional[WeatherContext] = None
    preferred_colors: Sequence[str] = ()
    style_preference: Optional[StylePreference] = None
    excluded_items: Sequence[str] = ()
    force_include_items: Sequence[str] = ()
    max_results: int = 5
    min_score: float = 0.1
    slot_templates: Sequence[Sequence[str]] = BASE_TEMPLATES
    diverse: bool = False

    def scoring_context(self) -> ScoringContext:
        return ScoringContext(
            occasion=self.occasion,
            season=self.season,
            target_date=self.target_date,
            weather=self.weather,
            preferred_colors=tuple(self.preferred_colors),
            style_preference=self.style_preference,
        )


@dataclass(frozen=True)
class GenerationResult:
    outfits: List[GeneratedOutfit]
    diagnostics: Dict[str, object] = field(default_factory=dict)


def _suitability_key(item: ClothingItem, occasion: Optional[str], season: Optional[str]) -> tuple:
    occasion_miss = 1 if occasion and occasion not in item.occasion else 0
    season_miss = 1 if season and item.season and season not in item.season else 0
    return (occasion_miss, season_miss, item.times_worn, item.id)


def build_buckets(
    items: Iterable[ClothingItem],
    options: GenerationOptions,
    categories: Iterable[str],
) -> Dict[str, List[ClothingItem]]:
    """Group items by category, rank each bucket and keep the top ``BUCKET_LIMIT``.

    Force-included items always survive truncation.
    """

    wanted = set(categories)
    occasion = normalize_occasion(options.occasion) if options.occasion else None
    season = resolve_season(options.season, options.target_date)
    forced = set(options.force_include_items)

    grouped: Dict[str, List[ClothingItem]] = {category: [] for category in sorted(wanted)}
    for item in items:
        if item.category in grouped:
            grouped[item.category].append(item)

    buckets: Dict[str, List[ClothingItem]] = {}
    for category, members in grouped.items():
        ranked = sorted(members, key=lambda item: _suitability_key(item, occasion, season))
        kept = ranked[:BUCKET_LIMIT]
        kept.extend(item for item in ranked[BUCKET_LIMIT:] if item.id in forced)
        buckets[category] = kept
    return buckets


def _template_combinations(
    template: Sequence[str],
    buckets: Dict[str, List[ClothingItem]],
    forced: set,
) -> Iterator[Tuple[ClothingItem, ...]]:
    slots = [buckets.get(category, []) for category in template]
    if not all(slots):
        logger.debug("Template %s skipped: empty bucket", template)
        return
    template_categories = set(template)
    forced_here = {
        item.id
        for category in template
        for item in buckets.get(category, [])
        if item.id in forced
    }
    forced_elsewhere = {
        item_id
        for category, members in buckets.items()
        if category not in template_categories and category not in OPTIONAL_CATEGORIES
        for item_id in (member.id for member in members)
        if item_id in forced
    }
    if forced_elsewhere:
        return
    for combo in product(*slots):
        ids = {item.id for item in combo}
        if forced_here - ids:
            continue
        yield combo


def _base_combinations(
    buckets: Dict[str, List[ClothingItem]],
    templates: Sequence[Sequence[str]],
    forced: set,
    budget: int = CANDIDATE_BUDGET,
) -> Iterator[Tuple[ClothingItem, ...]]:
    """Yield at most ``budget`` combinations, taking from each template in turn.

    A template with many combinations cannot use up the budget before the
    others get a share; once a template runs dry the rest keep alternating.
    """

    active = [_template_combinations(template, buckets, forced) for template in templates]
    emitted = 0
    while active:
        for stream in list(active):
            if emitted >= budget:
                return
            combo = next(stream, None)
            if combo is None:
                active.remove(stream)
                continue
            emitted += 1
            yield combo


def _augment_optional(
    combo: Tuple[ClothingItem, ...],
    buckets: Dict[str, List[ClothingItem]],
    context: ScoringContext,
    forced: set,
) -> GeneratedOutfit:
    items = list(combo)
    best_score = score_outfit(items, context)
    for category in OPTIONAL_CATEGORIES:
        candidates = buckets.get(category, [])
        required = [item for item in candidates if item.id in forced]
        if required:
            items.extend(required)
            best_score = score_outfit(items, context)
            continue
        best_item = None
        for candidate in candidates:
            trial = score_outfit(items + [candidate], context)
            if trial.total > best_score.total:
                best_item, best_score = candidate, trial
        if best_item is not None:
            items.append(best_item)
    return GeneratedOutfit(items=tuple(items), score=best_score)


def rank_key(outfit: GeneratedOutfit) -> tuple:
    """Highest total first, then least-worn items, then a stable id order."""

    return (-outfit.score.total, outfit.times_worn_total, outfit.key)


def _apply_variety(outfits: List[GeneratedOutfit]) -> List[GeneratedOutfit]:
    accepted: List[GeneratedOutfit] = []
    for outfit in outfits:
        if any(compare_outfits(outfit.items, kept.items).is_very_similar for kept in accepted):
            continue
        accepted.append(outfit)
    return accepted


def build_recommendations(
    wardrobe: Sequence[ClothingItem], options: GenerationOptions | None = None
) -> GenerationResult:
    """Enumerate bounded candidates, score, deduplicate and rank them."""

    options = options or GenerationOptions()
    excluded = set(options.excluded_items)
    forced = set(options.force_include_items)
    available = [item for item in wardrobe if item.id not in excluded]
    context = options.scoring_context()

    diagnostics: Dict[str, object] = {
        "wardrobe_size": len(wardrobe),
        "available_count": len(available),
        "combinations_scored": 0,
        "duplicates_removed": 0,
        "below_min_score": 0,
    }
    if len(available) < 2:
        logger.info("Not enough items to generate outfits: %s", len(available))
        diagnostics["reason"] = "not_enough_items"
        return GenerationResult(outfits=[], diagnostics=diagnostics)

    categories = {category for template in options.slot_templates for category in template}
    categories.update(OPTIONAL_CATEGORIES)
    buckets = build_buckets(available, options, categories)
    diagnostics["bucket_sizes"] = {category: len(members) for category, members in buckets.items()}

    unique: Dict[Tuple[str, ...], GeneratedOutfit] = {}
    for combo in _base_combinations(buckets, options.slot_templates, forced):
        outfit = _augment_optional(combo, buckets, context, forced)
        diagnostics["combinations_scored"] = int(diagnostics["combinations_scored"]) + 1
        if outfit.key in unique:
            diagnostics["duplicates_removed"] = int(diagnostics["duplicates_removed"]) + 1
            continue
        unique[outfit.key] = outfit

    qualifying = [outfit for outfit in unique.values() if outfit.score.total >= options.min_score]
    diagnostics["below_min_score"] = len(unique) - len(qualifying)
    ranked = sorted(qualifying, key=rank_key)
    if options.diverse:
        ranked = _apply_variety(ranked)
    final = ranked[: max(0, options.max_results)]

    diagnostics["returned"] = len(final)
    logger.info(
        "Generated %s outfits from %s combinations", len(final), diagnostics["combinations_scored"]
    )
    return GenerationResult(outfits=final, diagnostics=diagnostics)


def generate_outfits(
    wardrobe: Sequence[ClothingItem], options: GenerationOptions | None = None
) -> List[GeneratedOutfit]:
    """Ranked, deduplicated outfits, highest score first."""

    return build_recommendations(wardrobe, options).outfits


__all__ = [
    "BASE_TEMPLATES",
    "OPTIONAL_CATEGORIES",
    "BUCKET_LIMIT",
    "CANDIDATE_BUDGET",
    "GenerationOptions",
    "GenerationResult",
    "build_buckets",
    "build_recommendations",
    "generate_outfits",
    "rank_key",
]
