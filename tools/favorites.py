"""Favorite flag management for saved outfits.

The outfit store is the single source of truth. The service keeps a local
cache for fast reads and reconciles it from the store on ``refresh``.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Set

from stylisto_app.logging_config import get_logger, log_event
from tools.outfit_store import OutfitStore

LOGGER = get_logger(__name__)


class FavoriteToggleInProgress(RuntimeError):
    """Raised when the same outfit is already being toggled."""


class OutfitNotFound(LookupError):
    """Raised when toggling an outfit the user does not have."""


class FavoriteService:
    def __init__(self, store: OutfitStore) -> None:
        self.store = store
        self._cache: Dict[str, Dict[str, bool]] = {}
        self._in_flight: Set[tuple[str, str]] = set()
        self._lock = threading.Lock()

    def refresh(self, user_id: str) -> Dict[str, bool]:
        """Reload favorite flags for ``user_id`` from the store."""

        flags = {outfit.id: outfit.is_favorite for outfit in self.store.list_outfits(user_id)}
        with self._lock:
            self._cache[user_id] = flags
        return dict(flags)

    def is_favorite(self, user_id: str, outfit_id: str) -> bool:
        with self._lock:
            cached = self._cache.get(user_id)
        if cached is None:
            cached = self.refresh(user_id)
        return cached.get(outfit_id, False)

    def toggle(self, user_id: str, outfit_id: str) -> bool:
        """Flip the favorite flag and return the stored value."""

        key = (user_id, outfit_id)
        with self._lock:
            if key in self._in_flight:
                raise FavoriteToggleInProgress(f"Favorite toggle already running for {outfit_id}")
            self._in_flight.add(key)
        try:
            outfit = self.store.get_outfit(user_id, outfit_id)
            if outfit is None:
                raise OutfitNotFound(outfit_id)
            desired = not outfit.is_favorite
            self.store.set_favorite(user_id, outfit_id, desired)
            stored = self.store.get_outfit(user_id, outfit_id)
            value = bool(stored and stored.is_favorite)
            with self._lock:
                self._cache.setdefault(user_id, {})[outfit_id] = value
            log_event(LOGGER, logging.INFO, "favorite_toggled", outfit_id=outfit_id, is_favorite=value)
            return value
        finally:
            with self._lock:
                self._in_flight.discard(key)


__all__ = ["FavoriteService", "FavoriteToggleInProgress", "OutfitNotFound"]
