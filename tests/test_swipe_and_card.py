"""Swipe gesture state machine and recommendation card contract."""

from __future__ import annotations

from typing import List

import pytest

from logic.outfit_scoring import score_outfit
from logic.recommendation_card import RecommendationCard
from logic.swipe import COMMIT_DURATION_MS, SwipeDecision, SwipeGesture, SwipeState
from models.clothing_item import ClothingItem
from models.context import WeatherContext
from models.outfit import GeneratedOutfit

WIDTH = 400.0


class _Recorder:
    def __init__(self) -> None:
        self.calls: List[str] = []

    def __call__(self, name: str):
        def _callback() -> None:
            self.calls.append(name)

        return _callback


@pytest.fixture()
def recorder() -> _Recorder:
    return _Recorder()


@pytest.fixture()
def gesture(recorder: _Recorder) -> SwipeGesture:
    return SwipeGesture(WIDTH, on_like=recorder("like"), on_skip=recorder("skip"))


def test_right_swipe_past_threshold_likes_once(gesture: SwipeGesture, recorder: _Recorder) -> None:
    assert gesture.begin()
    gesture.update(100)
    assert gesture.rotation == pytest.approx(5.0)

    animation = gesture.end(WIDTH * 0.3 + 1)
    assert gesture.state == SwipeState.COMMITTING
    assert animation.kind == "timing"
    assert animation.target_x == WIDTH
    assert animation.duration_ms == COMMIT_DURATION_MS
    assert recorder.calls == []

    assert gesture.finish() == SwipeDecision.LIKE
    assert recorder.calls == ["like"]
    assert gesture.translate_x == WIDTH

    assert gesture.finish() is None
    assert recorder.calls == ["like"]


def test_left_swipe_skips(gesture: SwipeGesture, recorder: _Recorder) -> None:
    gesture.begin()
    animation = gesture.end(-200)
    assert animation.target_x == -WIDTH
    assert gesture.finish() == SwipeDecision.SKIP
    assert recorder.calls == ["skip"]


def test_short_drag_springs_back(gesture: SwipeGesture, recorder: _Recorder) -> None:
    gesture.begin()
    animation = gesture.end(WIDTH * 0.3)
    assert animation.kind == "spring"
    assert animation.target_x == 0.0
    assert gesture.state == SwipeState.RESETTING
    assert gesture.finish() is None
    assert gesture.translate_x == 0.0
    assert gesture.rotation == 0.0
    assert gesture.state == SwipeState.IDLE
    assert recorder.calls == []


def test_redrag_during_commit_cannot_double_fire(gesture: SwipeGesture, recorder: _Recorder) -> None:
    gesture.begin()
    gesture.end(300)
    assert gesture.begin() is False
    gesture.update(-300)
    gesture.end(-300)
    gesture.finish()
    gesture.finish()
    assert recorder.calls == ["like"]


def test_new_drag_starts_from_centre(gesture: SwipeGesture, recorder: _Recorder) -> None:
    gesture.begin()
    gesture.end(WIDTH)
    gesture.finish()
    assert gesture.translate_x == WIDTH

    assert gesture.begin()
    assert gesture.translate_x == 0.0
    assert gesture.rotation == 0.0
    animation = gesture.end()
    assert animation.kind == "spring"
    assert gesture.finish() is None
    assert recorder.calls == ["like"]


def test_missing_callback_springs_back(recorder: _Recorder) -> None:
    gesture = SwipeGesture(WIDTH, on_like=None, on_skip=recorder("skip"))
    gesture.begin()
    assert gesture.end(300).kind == "spring"
    assert gesture.finish() is None
    assert recorder.calls == []


def test_invalid_width() -> None:
    with pytest.raises(ValueError):
        SwipeGesture(0)


def _outfit(items: List[ClothingItem]) -> GeneratedOutfit:
    return GeneratedOutfit(items=tuple(items), score=score_outfit(items))


@pytest.fixture()
def card(recorder: _Recorder) -> RecommendationCard:
    items = [
        ClothingItem(id="jeans", name="Jeans", category="bottoms", color="#1F2A44"),
        ClothingItem(id="shirt", name="Shirt", category="tops", color="#FFFFFF"),
        ClothingItem(id="coat", name="Coat", category="outerwear", color="#2C3E70"),
    ]
    return RecommendationCard(
        _outfit(items),
        on_save=recorder("save"),
        on_refresh=recorder("refresh"),
        on_share=recorder("share"),
        on_swipe_left=recorder("skip"),
        on_swipe_right=recorder("like"),
        weather=WeatherContext(temperature=12, condition="cloudy"),
        occasion="work",
    )


def test_card_primary_and_secondary_items(card: RecommendationCard) -> None:
    assert card.primary_item.id == "shirt"
    assert [item.id for item in card.secondary_items] == ["jeans", "coat"]
    assert card.match_score == round(card.outfit.score.total * 100)
    assert card.score_color.startswith("#")


def test_card_primary_falls_back_to_first_item(recorder: _Recorder) -> None:
    items = [ClothingItem(id="boots", name="Boots", category="shoes"), ClothingItem(id="bag", name="Bag", category="bag")]
    card = RecommendationCard(_outfit(items), recorder("save"), recorder("refresh"), recorder("share"))
    assert card.primary_item.id == "boots"


def test_styling_description_uses_real_harmony(card: RecommendationCard) -> None:
    description = card.styling_description()
    assert description.startswith("This outfit combines a top with bottoms and a layered outer piece.")
    assert "monochromatic" in description
    assert "perfect for work occasions" in description
    assert description.endswith("Suitable for 12°C cloudy weather.")


def test_breakdown_rows_skip_missing_axes(card: RecommendationCard) -> None:
    keys = [row.key for row in card.breakdown_rows()]
    assert keys == ["color_harmony", "style_matching", "occasion_suitability", "season_suitability"]
    assert all(row.display.endswith("%") for row in card.breakdown_rows())


def test_card_actions_fire_once_per_call(card: RecommendationCard, recorder: _Recorder) -> None:
    card.save()
    card.refresh()
    card.share()
    assert recorder.calls == ["save", "refresh", "share"]


def test_card_gesture_maps_right_to_like(card: RecommendationCard, recorder: _Recorder) -> None:
    gesture = card.gesture(WIDTH)
    gesture.begin()
    gesture.end(WIDTH)
    gesture.finish()
    assert recorder.calls == ["like"]
    assert card.to_dict()["primary_item"]["id"] == "shirt"
