"""Orchestrates one virtual try-on run and persists the outcome."""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from typing import Optional

from models.outfit import VirtualTryOnResult
from stylisto_app.logging_config import get_logger, log_event, operation_context
from tools.outfit_store import OutfitStore
from tools.tryon_store import SQLiteTryOnStore
from tools.virtual_tryon_client import TryOnRequest, TryOnResponse, VirtualTryOnClient
from tools.wardrobe_store import WardrobeStore

LOGGER = get_logger(__name__)

DEFAULT_CONFIDENCE = 0.85


@dataclass
class TryOnOutcome:
    success: bool
    result: Optional[VirtualTryOnResult] = None
    error: Optional[str] = None
    used_mock: bool = False

    def to_dict(self) -> dict:
        return {
            "status": "ok" if self.success else "error",
            "success": self.success,
            "result": self.result.to_dict() if self.result else None,
            "message": self.error,
            "used_mock": self.used_mock,
        }


def _as_image_url(result_image: str) -> str:
    if result_image.startswith(("data:", "http://", "https://")):
        return result_image
    return f"data:image/jpeg;base64,{result_image}"


class VirtualTryOnService:
    """Runs try-on for a saved outfit: prepare images, call the server, store the result.

    Failures come back as a :class:`TryOnOutcome` and are not retried.
    """

    def __init__(
        self,
        client: VirtualTryOnClient,
        outfit_store: OutfitStore,
        wardrobe_store: WardrobeStore,
        result_store: SQLiteTryOnStore,
        mock_fallback: bool = False,
    ) -> None:
        self.client = client
        self.outfit_store = outfit_store
        self.wardrobe_store = wardrobe_store
        self.result_store = result_store
        self.mock_fallback = mock_fallback

    def _call(self, request: TryOnRequest) -> tuple[TryOnResponse, bool]:
        if self.mock_fallback and not self.client.check_health():
            LOGGER.info("Try-on server unhealthy, using mock response")
            return self.client.create_mock_response(request), True
        return self.client.process_virtual_tryon(request), False

    def run(
        self,
        user_id: str,
        outfit_id: str,
        user_image_url: str,
        prompt: str | None = None,
        mode: str = "multiple",
    ) -> TryOnOutcome:
        with operation_context("virtual_tryon"):
            outfit = self.outfit_store.get_outfit(user_id, outfit_id)
            if outfit is None:
                return TryOnOutcome(success=False, error=f"Outfit {outfit_id} not found")

            items = self.wardrobe_store.get_items(user_id, outfit.item_ids)
            user_images = self.client.prepare_images([user_image_url])
            if not user_images:
                return TryOnOutcome(success=False, error="User image could not be prepared")
            clothing_images = self.client.prepare_images([item.image_url for item in items])
            if not clothing_images:
                return TryOnOutcome(success=False, error="No clothing images could be prepared")

            prompt_used = prompt or f"Virtual try-on for {outfit.name}"
            request = TryOnRequest(
                user_image=user_images[0],
                clothing_images=clothing_images,
                prompt=prompt_used,
                mode=mode,
            )
            started = time.perf_counter()
            response, used_mock = self._call(request)
            elapsed_ms = int((time.perf_counter() - started) * 1000)

            if not response.success or not response.result_image:
                error = response.error or "Try-on server returned no image"
                log_event(LOGGER, logging.WARNING, "tryon_run_failed", outfit_id=outfit_id, error=error)
                return TryOnOutcome(success=False, error=error, used_mock=used_mock)

            result = VirtualTryOnResult(
                id=uuid.uuid4().hex,
                user_id=user_id,
                outfit_id=outfit.id,
                outfit_name=outfit.name,
                user_image_url=user_image_url,
                generated_image_url=_as_image_url(response.result_image),
                confidence_score=DEFAULT_CONFIDENCE,
                processing_time_ms=int(response.processing_time or elapsed_ms),
                prompt_used=prompt_used,
                items_used=[item.id for item in items],
            )
            self.result_store.save_result(result)
            log_event(
                LOGGER,
                logging.INFO,
                "tryon_run_completed",
                outfit_id=outfit_id,
                result_id=result.id,
                used_mock=used_mock,
            )
            return TryOnOutcome(success=True, result=result, used_mock=used_mock)


__all__ = ["TryOnOutcome", "VirtualTryOnService"]
