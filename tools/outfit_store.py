"""Saved outfit persistence backed by SQLite."""
from __future__ import annotations

import json
import sqlite3
import uuid
from pathlib import Path
from typing import List, Optional

from models.clothing_item import parse_datetime
from models.outfit import SavedOutfit


class OutfitStore:
    """Persistence interface for saved outfits and their item links."""

    def save_outfit(self, outfit: SavedOutfit) -> SavedOutfit:
        raise NotImplementedError

    def get_outfit(self, user_id: str, outfit_id: str) -> Optional[SavedOutfit]:
        raise NotImplementedError

    def list_outfits(self, user_id: str, favorites_only: bool = False) -> List[SavedOutfit]:
        raise NotImplementedError

    def set_favorite(self, user_id: str, outfit_id: str, is_favorite: bool) -> bool:
        raise NotImplementedError

    def delete_outfit(self, user_id: str, outfit_id: str) -> bool:
        raise NotImplementedError


class SQLiteOutfitStore(OutfitStore):
    """Stores ``saved_outfits`` rows with ordered ``outfit_items`` links."""

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
                CREATE TABLE IF NOT EXISTS saved_outfits (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    occasion TEXT,
                    source_type TEXT NOT NULL DEFAULT 'ai_generated',
                    is_favorite INTEGER NOT NULL DEFAULT 0,
                    score TEXT,
                    created_at TEXT NOT NULL,
                    is_deleted INTEGER NOT NULL DEFAULT 0
                );
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS outfit_items (
                    outfit_id TEXT NOT NULL,
                    item_id TEXT NOT NULL,
                    position INTEGER NOT NULL,
                    PRIMARY KEY (outfit_id, item_id)
                );
                """
            )

    def save_outfit(self, outfit: SavedOutfit) -> SavedOutfit:
        if not outfit.item_ids:
            raise ValueError("A saved outfit needs at least one item")
        if not outfit.id:
            outfit.id = uuid.uuid4().hex
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO saved_outfits (
                    id, user_id, name, occasion, source_type, is_favorite, score, created_at, is_deleted
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    outfit.id,
                    outfit.user_id,
                    outfit.name,
                    outfit.occasion,
                    outfit.source_type,
                    int(outfit.is_favorite),
                    json.dumps(outfit.score) if outfit.score is not None else None,
                    outfit.created_at.isoformat(),
                    int(outfit.is_deleted),
                ),
            )
            conn.execute("DELETE FROM outfit_items WHERE outfit_id = ?", (outfit.id,))
            conn.executemany(
                "INSERT OR IGNORE INTO outfit_items (outfit_id, item_id, position) VALUES (?, ?, ?)",
                [(outfit.id, item_id, position) for position, item_id in enumerate(outfit.item_ids)],
            )
        return outfit

    def _item_ids(self, conn: sqlite3.Connection, outfit_id: str) -> List[str]:
        cursor = conn.execute(
            "SELECT item_id FROM outfit_items WHERE outfit_id = ? ORDER BY position",
            (outfit_id,),
        )
        return [row["item_id"] for row in cursor.fetchall()]

    def _row_to_outfit(self, conn: sqlite3.Connection, row: sqlite3.Row) -> SavedOutfit:
        return SavedOutfit(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            item_ids=self._item_ids(conn, row["id"]),
            occasion=row["occasion"],
            source_type=row["source_type"],
            is_favorite=bool(row["is_favorite"]),
            score=json.loads(row["score"]) if row["score"] else None,
            created_at=parse_datetime(row["created_at"]),
            is_deleted=bool(row["is_deleted"]),
        )

    def get_outfit(self, user_id: str, outfit_id: str) -> Optional[SavedOutfit]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM saved_outfits WHERE user_id = ? AND id = ? AND is_deleted = 0",
                (user_id, outfit_id),
            ).fetchone()
            return self._row_to_outfit(conn, row) if row else None

    def list_outfits(self, user_id: str, favorites_only: bool = False) -> List[SavedOutfit]:
        query = "SELECT * FROM saved_outfits WHERE user_id = ? AND is_deleted = 0"
        if favorites_only:
            query += " AND is_favorite = 1"
        query += " ORDER BY created_at DESC, id"
        with self._connect() as conn:
            rows = conn.execute(query, (user_id,)).fetchall()
            return [self._row_to_outfit(conn, row) for row in rows]

    def list_names(self, user_id: str) -> List[str]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT name FROM saved_outfits WHERE user_id = ? AND is_deleted = 0",
                (user_id,),
            ).fetchall()
            return [row["name"] for row in rows]

    def set_favorite(self, user_id: str, outfit_id: str, is_favorite: bool) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE saved_outfits SET is_favorite = ? WHERE user_id = ? AND id = ? AND is_deleted = 0",
                (int(is_favorite), user_id, outfit_id),
            )
            return cursor.rowcount > 0

    def delete_outfit(self, user_id: str, outfit_id: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE saved_outfits SET is_deleted = 1 WHERE user_id = ? AND id = ? AND is_deleted = 0",
                (user_id, outfit_id),
            )
            return cursor.rowcount > 0


__all__ = ["OutfitStore", "SQLiteOutfitStore"]
