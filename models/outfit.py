"""Outfit, score and try-on result schemas."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from models.clothing_item import ClothingItem


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SourceType(str, Enum):
    AI_GENERATED = "ai_generated"
    MANUAL = "manual"


@dataclass(frozen=True)
class ScoreBreakdown:
    """Per-axis sub scores, each in [0, 1].

    ``weather_suitability`` and ``user_preference`` are ``None`` when the
    caller did not supply the context needed to compute them.
    """

    color_harmony: float
    style_matching: float
    occasion_suitability: float
    season_suitability: float
    weather_suitability: Optional[float] = None
    user_preference: Optional[float] = None

    def computed_axes(self) -> Dict[str, float]:
        axes = {
            "color_harmony": self.color_harmony,
            "style_matching": self.style_matching,
            "occasion_suitability": self.occasion_suitability,
            "season_suitability": self.season_suitability,
            "weather_suitability": self.weather_suitability,
            "user_preference": self.user_preference,
        }
        return {name: value for name, value in axes.items() if value is not None}

    def to_dict(self) -> Dict[str, Optional[float]]:
        return {
            "color_harmony": self.color_harmony,
            "style_matching": self.style_matching,
            "occasion_suitability": self.occasion_suitability,
            "season_suitability": self.season_suitability,
            "weather_suitability": self.weather_suitability,
            "user_preference": self.user_preference,
        }


@dataclass(frozen=True)
class Score:
    total: float
    breakdown: ScoreBreakdown
    color_harmony_type: str = "none"
    explanation: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "breakdown": self.breakdown.to_dict(),
            "color_harmony_type": self.color_harmony_type,
            "explanation": dict(self.explanation),
        }


@dataclass(frozen=True)
class GeneratedOutfit:
    """A transient, scored combination of wardrobe items."""

    items: Tuple[ClothingItem, ...]
    score: Score

    @property
    def key(self) -> Tuple[str, ...]:
        """Order-independent identity of the item set."""

        return tuple(sorted(item.id for item in self.items))

    @property
    def times_worn_total(self) -> int:
        return sum(item.times_worn for item in self.items)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": [item.to_dict() for item in self.items],
            "score": self.score.to_dict(),
        }


@dataclass
class SavedOutfit:
    """An outfit the user kept, persisted in ``saved_outfits``."""

    id: str
    user_id: str
    name: str
    item_ids: List[str]
    occasion: Optional[str] = None
    source_type: str = SourceType.AI_GENERATED.value
    is_favorite: bool = False
    score: Optional[Dict[str, Any]] = None
    created_at: datetime = field(default_factory=_utcnow)
    is_deleted: bool = False

    def __post_init__(self) -> None:
        self.source_type = SourceType(self.source_type).value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "item_ids": list(self.item_ids),
            "occasion": self.occasion,
            "source_type": self.source_type,
            "is_favorite": self.is_favorite,
            "score": self.score,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class VirtualTryOnResult:
    """A generated try-on image and the inputs that produced it."""

    id: str
    user_id: str
    outfit_id: str
    generated_image_url: str
    outfit_name: str = ""
    user_image_url: str = ""
    confidence_score: float = 0.0
    processing_time_ms: int = 0
    prompt_used: Optional[str] = None
    items_used: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "outfit_id": self.outfit_id,
            "outfit_name": self.outfit_name,
            "user_image_url": self.user_image_url,
            "generated_image_url": self.generated_image_url,
            "confidence_score": self.confidence_score,
            "processing_time_ms": self.processing_time_ms,
            "prompt_used": self.prompt_used,
            "items_used": list(self.items_used),
            "created_at": self.created_at.isoformat(),
        }


__all__ = [
    "SourceType",
    "ScoreBreakdown",
    "Score",
    "GeneratedOutfit",
    "SavedOutfit",
    "VirtualTryOnResult",
]
