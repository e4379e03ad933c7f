"""Model package exports."""

from models.taxonomy import *  # noqa: F401,F403
from models.clothing_item import ClothingItem, from_raw_metadata
from models.outfit import GeneratedOutfit, SavedOutfit, Score, ScoreBreakdown, SourceType, VirtualTryOnResult

__all__ = [
    "ClothingItem",
    "from_raw_metadata",
    "GeneratedOutfit",
    "SavedOutfit",
    "Score",
    "ScoreBreakdown",
    "SourceType",
    "VirtualTryOnResult",
]
