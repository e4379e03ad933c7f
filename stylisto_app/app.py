"""Stylisto app bootstrap: wires stores, services and providers from config."""

from __future__ import annotations

import logging
import uuid
from datetime import date as dt_date
from typing import Any, Dict, List, Optional

from logic.outfit_generator import GenerationOptions, build_recommendations
from logic.outfit_naming import generate_outfit_name
from logic.outfit_scoring import ScoringContext, analyze_outfit_completeness, score_outfit
from logic.recommendation_card import RecommendationCard
from logic.validation import (
    ClothingItemInput,
    RecommendationRequest,
    SaveOutfitRequest,
    ScoreRequest,
    ScoringContextInput,
    TryOnRequestInput,
)
from models.clothing_item import ClothingItem, from_raw_metadata
from models.context import StylePreference, WeatherContext
from models.outfit import SavedOutfit, VirtualTryOnResult
from stylisto_app.config import StylistoConfig
from stylisto_app.logging_config import configure_logging, get_logger, log_event, operation_context
from tools.favorites import FavoriteService
from tools.outfit_store import SQLiteOutfitStore
from tools.tryon_store import SQLiteTryOnStore
from tools.virtual_tryon_client import VirtualTryOnClient
from tools.virtual_tryon_service import TryOnOutcome, VirtualTryOnService
from tools.wardrobe_store import SQLiteWardrobeStore
from tools.weather_provider import OpenWeatherProvider, WeatherProvider

LOGGER = get_logger(__name__)


class UnknownItemsError(LookupError):
    """Raised when an outfit references items the user does not own."""

    def __init__(self, item_ids: List[str]) -> None:
        super().__init__(f"Unknown item ids: {item_ids}")
        self.item_ids = item_ids


def item_from_input(payload: ClothingItemInput) -> ClothingItem:
    data = payload.model_dump()
    data["id"] = data.get("id") or uuid.uuid4().hex
    return from_raw_metadata(data)


def _weather_from_input(payload: ScoringContextInput | RecommendationRequest) -> Optional[WeatherContext]:
    if payload.weather is None:
        return None
    return WeatherContext(**payload.weather.model_dump())


def _style_from_input(payload: ScoringContextInput | RecommendationRequest) -> Optional[StylePreference]:
    if payload.style_preference is None:
        return None
    return StylePreference(**payload.style_preference.model_dump())


class StylistoApp:
    """Wires together the stores, providers and services behind the API."""

    def __init__(
        self,
        config: StylistoConfig | None = None,
        weather_provider: WeatherProvider | None = None,
        tryon_client: VirtualTryOnClient | None = None,
    ) -> None:
        self.config = config or StylistoConfig.from_env()
        configure_logging()

        self.wardrobe_store = SQLiteWardrobeStore(self.config.database_path)
        self.outfit_store = SQLiteOutfitStore(self.config.database_path)
        self.tryon_store = SQLiteTryOnStore(self.config.database_path)
        self.favorites = FavoriteService(self.outfit_store)
        self.weather_provider = weather_provider or OpenWeatherProvider(api_key=self.config.weather_api_key)
        self.tryon_client = tryon_client or VirtualTryOnClient(
            base_url=self.config.tryon_api_url,
            timeout_seconds=self.config.tryon_timeout_seconds,
        )
        self.tryon_service = VirtualTryOnService(
            client=self.tryon_client,
            outfit_store=self.outfit_store,
            wardrobe_store=self.wardrobe_store,
            result_store=self.tryon_store,
            mock_fallback=self.config.tryon_mock_fallback,
        )

    # Wardrobe

    def add_item(self, payload: ClothingItemInput) -> ClothingItem:
        item = self.wardrobe_store.create_item(item_from_input(payload))
        log_event(LOGGER, logging.INFO, "item_added", item_id=item.id, category=item.category)
        return item

    def list_items(self, user_id: str, filters: Dict[str, object] | None = None) -> List[ClothingItem]:
        if filters:
            return self.wardrobe_store.search_items(user_id, filters)
        return self.wardrobe_store.list_items_for_user(user_id)

    def _owned_items(self, user_id: str, item_ids: List[str]) -> List[ClothingItem]:
        items = self.wardrobe_store.get_items(user_id, item_ids)
        missing = [item_id for item_id in item_ids if item_id not in {item.id for item in items}]
        if missing:
            raise UnknownItemsError(missing)
        return items

    # Scoring and recommendations

    def score(self, request: ScoreRequest) -> Dict[str, Any]:
        """Score an ad-hoc outfit. Raises ``InvalidOutfitError`` when it has no items."""

        items: List[ClothingItem] = []
        if request.item_ids:
            if not request.user_id:
                raise ValueError("user_id is required when scoring stored items")
            items.extend(self._owned_items(request.user_id, request.item_ids))
        items.extend(item_from_input(payload) for payload in request.items)

        context = ScoringContext(
            occasion=request.occasion,
            season=request.season,
            target_date=request.target_date,
            weather=_weather_from_input(request),
            preferred_colors=tuple(request.preferred_colors),
            style_preference=_style_from_input(request),
            strict_style=request.strict_style,
        )
        score = score_outfit(items, context)
        return {
            "status": "ok",
            "score": score.to_dict(),
            "completeness": analyze_outfit_completeness(items),
        }

    def resolve_weather(self, request: RecommendationRequest) -> Optional[WeatherContext]:
        weather = _weather_from_input(request)
        if weather is not None:
            return weather
        location = request.location or self.config.default_location
        if not location:
            return None
        return self.weather_provider.get_forecast(location, request.target_date or dt_date.today())

    def recommend(self, request: RecommendationRequest) -> Dict[str, Any]:
        with operation_context("app:recommend") as correlation_id:
            wardrobe = self.wardrobe_store.list_items_for_user(request.user_id)
            weather = self.resolve_weather(request)
            options = GenerationOptions(
                occasion=request.occasion,
                season=request.season,
                target_date=request.target_date,
                weather=weather,
                preferred_colors=tuple(request.preferred_colors),
                style_preference=_style_from_input(request),
                excluded_items=tuple(request.excluded_items),
                force_include_items=tuple(request.force_include_items),
                max_results=request.max_results or self.config.max_results,
                min_score=request.min_score if request.min_score is not None else self.config.min_score,
                diverse=request.diverse,
            )
            result = build_recommendations(wardrobe, options)
            cards = []
            for outfit in result.outfits:
                card = RecommendationCard(
                    outfit,
                    on_save=lambda: None,
                    on_refresh=lambda: None,
                    on_share=lambda: None,
                    weather=weather,
                    occasion=request.occasion,
                )
                cards.append({**outfit.to_dict(), "card": card.to_dict()})

            log_event(
                LOGGER,
                logging.INFO,
                "recommendations_generated",
                correlation_id=correlation_id,
                outfit_count=len(cards),
                combinations_scored=result.diagnostics.get("combinations_scored"),
            )
            return {
                "status": "ok",
                "outfits": cards,
                "weather": weather.to_dict() if weather else None,
                "diagnostics": result.diagnostics,
            }

    # Saved outfits

    def save_outfit(self, request: SaveOutfitRequest) -> SavedOutfit:
        items = self._owned_items(request.user_id, request.item_ids)
        name = request.name or generate_outfit_name(items, self.outfit_store.list_names(request.user_id))
        outfit = SavedOutfit(
            id=uuid.uuid4().hex,
            user_id=request.user_id,
            name=name,
            item_ids=[item.id for item in items],
            occasion=request.occasion,
            source_type=request.source_type,
            score=request.score,
        )
        saved = self.outfit_store.save_outfit(outfit)
        log_event(LOGGER, logging.INFO, "outfit_saved", outfit_id=saved.id, source_type=saved.source_type)
        return saved

    def list_outfits(self, user_id: str, favorites_only: bool = False) -> List[SavedOutfit]:
        return self.outfit_store.list_outfits(user_id, favorites_only=favorites_only)

    def toggle_favorite(self, user_id: str, outfit_id: str) -> bool:
        return self.favorites.toggle(user_id, outfit_id)

    def delete_outfit(self, user_id: str, outfit_id: str) -> bool:
        return self.outfit_store.delete_outfit(user_id, outfit_id)

    # Virtual try-on

    def run_tryon(self, request: TryOnRequestInput) -> TryOnOutcome:
        return self.tryon_service.run(
            user_id=request.user_id,
            outfit_id=request.outfit_id,
            user_image_url=request.user_image_url,
            prompt=request.prompt,
            mode=request.mode,
        )

    def list_tryon_results(self, user_id: str, outfit_id: str | None = None) -> List[VirtualTryOnResult]:
        return self.tryon_store.list_results(user_id, outfit_id)

    def delete_tryon_result(self, user_id: str, result_id: str) -> bool:
        return self.tryon_store.delete_result(user_id, result_id)


__all__ = ["StylistoApp", "UnknownItemsError", "item_from_input"]
