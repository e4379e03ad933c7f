"""Bounded outfit generation, ranking and deduplication."""

from __future__ import annotations

from itertools import combinations
from typing import List

from logic.outfit_generator import (
    BUCKET_LIMIT,
    CANDIDATE_BUDGET,
    GenerationOptions,
    build_buckets,
    build_recommendations,
    generate_outfits,
    rank_key,
)
from logic.outfit_scoring import score_outfit
from logic.outfit_similarity import compare_outfits, outfit_fingerprint
from models.clothing_item import ClothingItem


def _item(item_id: str, category: str, color: str = "#1F2A44", **kwargs) -> ClothingItem:
    return ClothingItem(id=item_id, name=item_id, category=category, color=color, **kwargs)


def _wardrobe() -> List[ClothingItem]:
    return [
        _item("t1", "tops", "#FFFFFF", occasion=["work"], tags=["classic"]),
        _item("t2", "tops", "#C0392B", occasion=["casual"], tags=["casual"]),
        _item("b1", "bottoms", "#1F2A44", occasion=["work"], tags=["classic"]),
        _item("b2", "bottoms", "#3B5998", occasion=["casual"], tags=["casual"]),
        _item("s1", "shoes", "#6B4226", occasion=["work"]),
        _item("s2", "shoes", "#FFFFFF", occasion=["casual"], tags=["sporty"]),
    ]


def test_generates_unique_ranked_outfits() -> None:
    result = build_recommendations(_wardrobe(), GenerationOptions(max_results=20, min_score=0.0))

    keys = [outfit.key for outfit in result.outfits]
    assert len(keys) == 8
    assert len(set(keys)) == len(keys)
    assert result.diagnostics["combinations_scored"] == 8
    for first, second in zip(result.outfits, result.outfits[1:]):
        assert rank_key(first) <= rank_key(second)
        assert first.score.total >= second.score.total


def test_max_results_limits_output() -> None:
    outfits = generate_outfits(_wardrobe(), GenerationOptions(max_results=3, min_score=0.0))
    assert len(outfits) == 3


def test_generation_is_deterministic() -> None:
    options = GenerationOptions(occasion="work", max_results=5)
    first = [outfit.key for outfit in generate_outfits(_wardrobe(), options)]
    second = [outfit.key for outfit in generate_outfits(list(reversed(_wardrobe())), options)]
    assert first == second


def test_less_worn_items_win_ties() -> None:
    wardrobe = [
        _item("worn", "tops", "#FFFFFF", times_worn=5),
        _item("fresh", "tops", "#FFFFFF", times_worn=0),
        _item("jeans", "bottoms", "#1F2A44"),
        _item("boots", "shoes", "#000000"),
    ]
    outfits = generate_outfits(wardrobe, GenerationOptions(max_results=5, min_score=0.0))
    assert outfits[0].score.total == outfits[1].score.total
    assert "fresh" in outfits[0].key
    assert "worn" in outfits[1].key


def test_excluded_and_forced_items() -> None:
    options = GenerationOptions(excluded_items=("t1",), force_include_items=("b2",), max_results=20, min_score=0.0)
    outfits = generate_outfits(_wardrobe(), options)
    assert outfits
    for outfit in outfits:
        assert "t1" not in outfit.key
        assert "b2" in outfit.key


def test_forced_dress_selects_dress_template() -> None:
    wardrobe = _wardrobe() + [_item("d1", "dresses", "#8E44AD")]
    outfits = generate_outfits(wardrobe, GenerationOptions(force_include_items=("d1",), max_results=20, min_score=0.0))
    assert outfits
    for outfit in outfits:
        categories = {item.category for item in outfit.items}
        assert "d1" in outfit.key
        assert "tops" not in categories
        assert "bottoms" not in categories


def test_forced_accessory_is_always_added() -> None:
    wardrobe = _wardrobe() + [_item("a1", "accessories", "#F1C40F")]
    outfits = generate_outfits(wardrobe, GenerationOptions(force_include_items=("a1",), max_results=20, min_score=0.0))
    assert len(outfits) == 8
    assert all("a1" in outfit.key for outfit in outfits)


def test_optional_items_only_added_when_they_help() -> None:
    wardrobe = _wardrobe() + [_item("clash", "accessories", "oops", tags=["bohemian"])]
    for outfit in generate_outfits(wardrobe, GenerationOptions(max_results=20, min_score=0.0)):
        if "clash" in outfit.key:
            base = [item for item in outfit.items if item.id != "clash"]
            assert outfit.score.total > score_outfit(base).total


def test_not_enough_items() -> None:
    result = build_recommendations([_item("t1", "tops")])
    assert result.outfits == []
    assert result.diagnostics["reason"] == "not_enough_items"


def test_min_score_filters_everything() -> None:
    result = build_recommendations(_wardrobe(), GenerationOptions(min_score=1.01, max_results=20))
    assert result.outfits == []
    assert result.diagnostics["below_min_score"] == 8


def test_bucket_limit_keeps_forced_items() -> None:
    tops = [_item(f"top-{i}", "tops", times_worn=i) for i in range(10)]
    buckets = build_buckets(tops, GenerationOptions(force_include_items=("top-9",)), ["tops"])
    ids = [item.id for item in buckets["tops"]]
    assert len(ids) == BUCKET_LIMIT + 1
    assert ids[0] == "top-0"
    assert "top-9" in ids


def test_candidate_budget_is_shared_across_templates() -> None:
    wardrobe = [
        _item(f"{category}-{index}", category, times_worn=index)
        for category in ("tops", "bottoms", "shoes", "socks")
        for index in range(BUCKET_LIMIT)
    ]
    wardrobe.append(_item("dress", "dresses", "#8E44AD"))
    templates = (("tops", "bottoms", "shoes", "socks"), ("dresses", "shoes"))

    result = build_recommendations(
        wardrobe, GenerationOptions(slot_templates=templates, max_results=1000, min_score=0.0)
    )

    assert BUCKET_LIMIT ** 4 > CANDIDATE_BUDGET
    assert result.diagnostics["combinations_scored"] == CANDIDATE_BUDGET
    with_dress = [outfit for outfit in result.outfits if "dress" in outfit.key]
    assert len(with_dress) == BUCKET_LIMIT
    assert len(result.outfits) - len(with_dress) == CANDIDATE_BUDGET - BUCKET_LIMIT


def test_diverse_results_are_not_very_similar() -> None:
    plain = generate_outfits(_wardrobe(), GenerationOptions(max_results=20, min_score=0.0))
    diverse = generate_outfits(_wardrobe(), GenerationOptions(max_results=20, min_score=0.0, diverse=True))
    assert diverse
    assert len(diverse) <= len(plain)
    assert diverse[0].key == plain[0].key
    for first, second in combinations(diverse, 2):
        assert not compare_outfits(first.items, second.items).is_very_similar


def test_similarity_of_identical_outfits() -> None:
    items = _wardrobe()[:3]
    result = compare_outfits(items, list(reversed(items)))
    assert result.item_match == 1.0
    assert result.is_very_similar
    assert outfit_fingerprint(items) == outfit_fingerprint(list(reversed(items)))
