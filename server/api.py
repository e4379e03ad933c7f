"""FastAPI server exposing Stylisto scoring, recommendation and try-on endpoints."""

from __future__ import annotations

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from logic.outfit_scoring import InvalidOutfitError
from logic.validation import (
    ClothingItemInput,
    FavoriteRequest,
    RecommendationRequest,
    SaveOutfitRequest,
    ScoreRequest,
    TryOnRequestInput,
    validation_failure,
)
from stylisto_app.app import StylistoApp, UnknownItemsError
from stylisto_app.logging_config import configure_logging, correlation_context, get_logger
from tools.favorites import FavoriteToggleInProgress, OutfitNotFound

configure_logging()
LOGGER = get_logger(__name__)


def create_app(stylisto: StylistoApp | None = None) -> FastAPI:
    """Build the API around a wired :class:`StylistoApp`."""

    stylisto_app = stylisto or StylistoApp()
    api = FastAPI(title="Stylisto", version="0.1.0")
    api.state.stylisto = stylisto_app

    @api.middleware("http")
    async def correlation_middleware(request: Request, call_next):
        with correlation_context(request.headers.get("x-correlation-id")) as correlation_id:
            response = await call_next(request)
            response.headers["x-correlation-id"] = correlation_id
            return response

    @api.exception_handler(RequestValidationError)
    async def validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content=validation_failure("Invalid request payload", exc.errors()))

    @api.exception_handler(InvalidOutfitError)
    async def invalid_outfit_handler(request: Request, exc: InvalidOutfitError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"status": "error", "message": str(exc)})

    @api.exception_handler(UnknownItemsError)
    async def unknown_items_handler(request: Request, exc: UnknownItemsError) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content={"status": "error", "message": str(exc), "item_ids": exc.item_ids},
        )

    @api.get("/healthz")
    def healthcheck() -> dict:
        """Lightweight readiness check."""

        return {
            "status": "ok",
            "service": "stylisto",
            "environment": stylisto_app.config.environment or "local",
        }

    @api.post("/items", status_code=201)
    def add_item(payload: ClothingItemInput) -> dict:
        return {"status": "ok", "item": stylisto_app.add_item(payload).to_dict()}

    @api.get("/items")
    def list_items(user_id: str, category: str | None = None, season: str | None = None) -> dict:
        filters = {key: value for key, value in {"category": category, "season": season}.items() if value}
        items = stylisto_app.list_items(user_id, filters)
        return {"status": "ok", "items": [item.to_dict() for item in items]}

    @api.post("/outfits/score")
    def score_outfit(payload: ScoreRequest) -> dict:
        try:
            return stylisto_app.score(payload)
        except ValueError as exc:
            if isinstance(exc, InvalidOutfitError):
                raise
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    @api.post("/recommendations")
    def recommend(payload: RecommendationRequest) -> dict:
        return stylisto_app.recommend(payload)

    @api.post("/outfits", status_code=201)
    def save_outfit(payload: SaveOutfitRequest) -> dict:
        return {"status": "ok", "outfit": stylisto_app.save_outfit(payload).to_dict()}

    @api.get("/outfits")
    def list_outfits(user_id: str, favorites_only: bool = False) -> dict:
        outfits = stylisto_app.list_outfits(user_id, favorites_only=favorites_only)
        return {"status": "ok", "outfits": [outfit.to_dict() for outfit in outfits]}

    @api.post("/outfits/{outfit_id}/favorite")
    def toggle_favorite(outfit_id: str, payload: FavoriteRequest) -> dict:
        try:
            value = stylisto_app.toggle_favorite(payload.user_id, outfit_id)
        except FavoriteToggleInProgress as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        except OutfitNotFound as exc:
            raise HTTPException(status_code=404, detail=f"Outfit {outfit_id} not found") from exc
        return {"status": "ok", "outfit_id": outfit_id, "is_favorite": value}

    @api.delete("/outfits/{outfit_id}")
    def delete_outfit(outfit_id: str, user_id: str) -> dict:
        if not stylisto_app.delete_outfit(user_id, outfit_id):
            raise HTTPException(status_code=404, detail=f"Outfit {outfit_id} not found")
        return {"status": "ok", "outfit_id": outfit_id}

    @api.post("/tryon")
    def run_tryon(payload: TryOnRequestInput) -> JSONResponse:
        outcome = stylisto_app.run_tryon(payload)
        return JSONResponse(status_code=200 if outcome.success else 502, content=outcome.to_dict())

    @api.get("/tryon")
    def list_tryon(user_id: str, outfit_id: str | None = None) -> dict:
        results = stylisto_app.list_tryon_results(user_id, outfit_id)
        return {"status": "ok", "results": [result.to_dict() for result in results]}

    @api.delete("/tryon/{result_id}")
    def delete_tryon(result_id: str, user_id: str) -> dict:
        if not stylisto_app.delete_tryon_result(user_id, result_id):
            raise HTTPException(status_code=404, detail=f"Try-on result {result_id} not found")
        return {"status": "ok", "result_id": result_id}

    return api


def get_app() -> FastAPI:
    """Expose a FastAPI instance for ASGI servers."""

    return create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server.api:get_app", factory=True, host="0.0.0.0", port=8080, reload=False)
