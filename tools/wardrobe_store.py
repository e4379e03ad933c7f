"""Wardrobe storage abstractions and SQLite implementation."""
from __future__ import annotations

import json
import sqlite3
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from models.clothing_item import ClothingItem
from models.taxonomy import normalize_category, normalize_occasion, normalize_season


class WardrobeStore:
    """Persistence interface for wardrobe items."""

    def create_item(self, item: ClothingItem) -> ClothingItem:
        raise NotImplementedError

    def get_item(self, user_id: str, item_id: str) -> Optional[ClothingItem]:
        raise NotImplementedError

    def get_items(self, user_id: str, item_ids: Sequence[str]) -> List[ClothingItem]:
        raise NotImplementedError

    def list_items_for_user(self, user_id: str) -> List[ClothingItem]:
        raise NotImplementedError

    def update_item(self, user_id: str, item_id: str, updated_fields: Dict[str, object]) -> Optional[ClothingItem]:
        raise NotImplementedError

    def delete_item(self, user_id: str, item_id: str) -> bool:
        raise NotImplementedError

    def search_items(self, user_id: str, filters: Dict[str, object]) -> List[ClothingItem]:
        raise NotImplementedError


class SQLiteWardrobeStore(WardrobeStore):
    """Local SQLite-backed store for the ``items`` collection."""

    def __init__(self, database_path: str | Path = "data/stylisto.db") -> None:
        self.database_path = Path(database_path)
        if self.database_path.parent and not self.database_path.parent.exists():
            self.database_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_tables()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.database_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_tables(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS items (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    category TEXT NOT NULL,
                    subcategory TEXT,
                    color TEXT,
                    brand TEXT,
                    size TEXT,
                    season TEXT,
                    occasion TEXT,
                    image_url TEXT,
                    tags TEXT,
                    is_favorite INTEGER NOT NULL DEFAULT 0,
                    times_worn INTEGER NOT NULL DEFAULT 0,
                    last_worn TEXT,
                    price REAL,
                    notes TEXT,
                    created_at TEXT NOT NULL,
                    is_deleted INTEGER NOT NULL DEFAULT 0
                );
                """
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_items_user ON items (user_id, is_deleted)")

    @staticmethod
    def _serialise_list(values: Optional[List[object]]) -> str:
        return json.dumps(values or [])

    @staticmethod
    def _deserialise_list(raw: str) -> List[object]:
        return json.loads(raw) if raw else []

    def create_item(self, item: ClothingItem) -> ClothingItem:
        if not item.user_id:
            raise ValueError("Wardrobe items must belong to a user")
        if not item.id:
            item = replace(item, id=uuid.uuid4().hex)
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO items (
                    id, user_id, name, category, subcategory, color, brand, size, season, occasion,
                    image_url, tags, is_favorite, times_worn, last_worn, price, notes, created_at, is_deleted
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 0)
                """,
                (
                    item.id,
                    item.user_id,
                    item.name,
                    item.category,
                    item.subcategory,
                    item.color,
                    item.brand,
                    item.size,
                    self._serialise_list(item.season),
                    self._serialise_list(item.occasion),
                    item.image_url,
                    self._serialise_list(item.tags),
                    int(item.is_favorite),
                    item.times_worn,
                    item.last_worn.isoformat() if item.last_worn else None,
                    item.price,
                    item.notes,
                    item.created_at.isoformat(),
                ),
            )
        return item

    def _row_to_item(self, row: sqlite3.Row) -> ClothingItem:
        return ClothingItem(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            category=row["category"],
            subcategory=row["subcategory"] or "",
            color=row["color"] or "",
            brand=row["brand"],
            size=row["size"],
            season=self._deserialise_list(row["season"]),
            occasion=self._deserialise_list(row["occasion"]),
            image_url=row["image_url"] or "",
            tags=self._deserialise_list(row["tags"]),
            is_favorite=bool(row["is_favorite"]),
            times_worn=row["times_worn"],
            last_worn=row["last_worn"],
            price=row["price"],
            notes=row["notes"],
            created_at=row["created_at"],
        )

    def get_item(self, user_id: str, item_id: str) -> Optional[ClothingItem]:
        with self._connect() as conn:
            cursor = conn.execute(
                "SELECT * FROM items WHERE user_id = ? AND id = ? AND is_deleted = 0",
                (user_id, item_id),
            )
            row = cursor.fetchone()
            return self._row_to_item(row) if row else None

    def get_items(self, user_id: str, item_ids: Sequence[str]) -> List[ClothingItem]:
        """Items in the order of ``item_ids``; unknown or deleted ids are skipped."""

        if not item_ids:
            return []
        placeholders = ", ".join("?" for _ in item_ids)
        with self._connect() as conn:
            cursor = conn.execute(
                f"SELECT * FROM items WHERE user_id = ? AND is_deleted = 0 AND id IN ({placeholders})",
                (user_id, *item_ids),
            )
            found = {row["id"]: self._row_to_item(row) for row in cursor.fetchall()}
        return [found[item_id] for item_id in item_ids if item_id in found]

    def list_items_for_user(self, user_id: str) -> List[ClothingItem]:
        with self._connect() as conn:
            cursor = conn.execute(
                "SELECT * FROM items WHERE user_id = ? AND is_deleted = 0 ORDER BY created_at DESC, id",
                (user_id,),
            )
            return [self._row_to_item(row) for row in cursor.fetchall()]

    def update_item(self, user_id: str, item_id: str, updated_fields: Dict[str, object]) -> Optional[ClothingItem]:
        current = self.get_item(user_id, item_id)
        if not current:
            return None

        changes = {
            key: value
            for key, value in updated_fields.items()
            if key not in {"id", "user_id", "created_at"} and hasattr(current, key)
        }
        return self.create_item(replace(current, **changes))

    def record_worn(self, user_id: str, item_ids: Sequence[str], worn_at: datetime | None = None) -> int:
        """Bump ``times_worn`` and ``last_worn`` for each item; returns rows touched."""

        if not item_ids:
            return 0
        worn_at = worn_at or datetime.now(timezone.utc)
        placeholders = ", ".join("?" for _ in item_ids)
        with self._connect() as conn:
            cursor = conn.execute(
                f"""
                UPDATE items SET times_worn = times_worn + 1, last_worn = ?
                WHERE user_id = ? AND is_deleted = 0 AND id IN ({placeholders})
                """,
                (worn_at.isoformat(), user_id, *item_ids),
            )
            return cursor.rowcount

    def delete_item(self, user_id: str, item_id: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE items SET is_deleted = 1 WHERE user_id = ? AND id = ? AND is_deleted = 0",
                (user_id, item_id),
            )
            return cursor.rowcount > 0

    def search_items(self, user_id: str, filters: Dict[str, object]) -> List[ClothingItem]:
        items = self.list_items_for_user(user_id)
        filters = filters or {}
        category = normalize_category(str(filters["category"])) if filters.get("category") else None
        season = normalize_season(str(filters["season"])) if filters.get("season") else None
        occasion = normalize_occasion(str(filters["occasion"])) if filters.get("occasion") else None
        tags = {str(tag).strip().lower() for tag in (filters.get("tags", []) or [])}
        favorites_only = bool(filters.get("is_favorite"))

        def matches(item: ClothingItem) -> bool:
            if category and item.category != category:
                return False
            if filters.get("season") and (season is None or (item.season and season not in item.season)):
                return False
            if filters.get("occasion") and occasion not in item.occasion:
                return False
            if tags and not tags.intersection(item.tags):
                return False
            if favorites_only and not item.is_favorite:
                return False
            return True

        return [item for item in items if matches(item)]


__all__ = ["WardrobeStore", "SQLiteWardrobeStore"]
