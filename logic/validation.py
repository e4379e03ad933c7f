"""Pydantic schemas and helpers for validating API and tool payloads."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Literal, Optional, Sequence

from pydantic import BaseModel, Field, field_validator

from models.taxonomy import normalize_occasion, normalize_season


class WeatherInput(BaseModel):
    """Weather snapshot supplied by a client instead of a forecast lookup."""

    temperature: float
    condition: str = "clear"
    precipitation: float = Field(default=0.0, ge=0.0, le=1.0)
    wind_speed: float = Field(default=0.0, ge=0.0)


class StylePreferenceInput(BaseModel):
    formality: float = Field(default=0.5, ge=0.0, le=1.0)
    boldness: float = Field(default=0.5, ge=0.0, le=1.0)


class ClothingItemInput(BaseModel):
    """Wardrobe item payload; unknown categories are kept as-is."""

    id: Optional[str] = None
    user_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    category: str = Field(min_length=1)
    subcategory: str = ""
    color: str = ""
    brand: Optional[str] = None
    size: Optional[str] = None
    season: List[str] = []
    occasion: List[str] = []
    image_url: str = ""
    tags: List[str] = []
    is_favorite: bool = False
    times_worn: int = Field(default=0, ge=0)
    price: Optional[float] = None
    notes: Optional[str] = None


class ScoringContextInput(BaseModel):
    occasion: Optional[str] = None
    season: Optional[str] = None
    target_date: Optional[date] = None
    weather: Optional[WeatherInput] = None
    preferred_colors: List[str] = []
    style_preference: Optional[StylePreferenceInput] = None
    strict_style: bool = False


class ScoreRequest(ScoringContextInput):
    """Score an ad-hoc outfit: either stored item ids or inline items."""

    user_id: Optional[str] = None
    item_ids: List[str] = []
    items: List[ClothingItemInput] = []


class RecommendationRequest(BaseModel):
    user_id: str = Field(min_length=1)
    occasion: Optional[str] = None
    season: Optional[str] = None
    target_date: Optional[date] = None
    location: Optional[str] = None
    weather: Optional[WeatherInput] = None
    preferred_colors: List[str] = []
    style_preference: Optional[StylePreferenceInput] = None
    excluded_items: List[str] = []
    force_include_items: List[str] = []
    max_results: Optional[int] = Field(default=None, ge=1, le=50)
    min_score: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    diverse: bool = False

    @field_validator("occasion")
    @classmethod
    def _known_occasion(cls, value: Optional[str]) -> Optional[str]:
        if value and normalize_occasion(value) is None:
            raise ValueError(f"unknown occasion: {value}")
        return value

    @field_validator("season")
    @classmethod
    def _known_season(cls, value: Optional[str]) -> Optional[str]:
        if value and normalize_season(value) is None:
            raise ValueError(f"unknown season: {value}")
        return value


class SaveOutfitRequest(BaseModel):
    user_id: str = Field(min_length=1)
    item_ids: List[str] = Field(min_length=1)
    name: Optional[str] = None
    occasion: Optional[str] = None
    source_type: Literal["ai_generated", "manual"] = "ai_generated"
    score: Optional[Dict[str, Any]] = None


class FavoriteRequest(BaseModel):
    user_id: str = Field(min_length=1)


class TryOnRequestInput(BaseModel):
    user_id: str = Field(min_length=1)
    outfit_id: str = Field(min_length=1)
    user_image_url: str = Field(min_length=1)
    prompt: Optional[str] = None
    mode: Literal["single", "multiple"] = "multiple"


class ValidationResult(BaseModel):
    """Payload returned to callers when validation fails."""

    status: Literal["needs_review"] = "needs_review"
    message: str
    details: List[Dict[str, Any]]


def validation_failure(message: str, errors: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    """Translate Pydantic error entries into a consistent review payload."""

    details = [{key: value for key, value in error.items() if key in {"type", "loc", "msg"}} for error in errors]
    return ValidationResult(message=message, details=details).model_dump()


__all__ = [
    "WeatherInput",
    "StylePreferenceInput",
    "ClothingItemInput",
    "ScoringContextInput",
    "ScoreRequest",
    "RecommendationRequest",
    "SaveOutfitRequest",
    "FavoriteRequest",
    "TryOnRequestInput",
    "ValidationResult",
    "validation_failure",
]
