"""Virtual try-on result persistence backed by SQLite."""
from __future__ import annotations

import json
import sqlite3
import uuid
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from models.clothing_item import parse_datetime
from models.outfit import VirtualTryOnResult


class SQLiteTryOnStore:
    """Stores ``virtual_try_on_results`` rows, newest first per user."""

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
                CREATE TABLE IF NOT EXISTS virtual_try_on_results (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    outfit_id TEXT NOT NULL,
                    outfit_name TEXT,
                    user_image_url TEXT,
                    generated_image_url TEXT NOT NULL,
                    confidence_score REAL,
                    processing_time_ms INTEGER,
                    prompt_used TEXT,
                    items_used TEXT,
                    created_at TEXT NOT NULL,
                    is_deleted INTEGER NOT NULL DEFAULT 0
                );
                """
            )

    def save_result(self, result: VirtualTryOnResult) -> VirtualTryOnResult:
        if not result.id:
            result.id = uuid.uuid4().hex
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO virtual_try_on_results (
                    id, user_id, outfit_id, outfit_name, user_image_url, generated_image_url,
                    confidence_score, processing_time_ms, prompt_used, items_used, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    result.id,
                    result.user_id,
                    result.outfit_id,
                    result.outfit_name,
                    result.user_image_url,
                    result.generated_image_url,
                    result.confidence_score,
                    result.processing_time_ms,
                    result.prompt_used,
                    json.dumps(result.items_used),
                    result.created_at.isoformat(),
                ),
            )
        return result

    def _row_to_result(self, row: sqlite3.Row) -> VirtualTryOnResult:
        return VirtualTryOnResult(
            id=row["id"],
            user_id=row["user_id"],
            outfit_id=row["outfit_id"],
            outfit_name=row["outfit_name"] or "",
            user_image_url=row["user_image_url"] or "",
            generated_image_url=row["generated_image_url"],
            confidence_score=row["confidence_score"] or 0.0,
            processing_time_ms=row["processing_time_ms"] or 0,
            prompt_used=row["prompt_used"],
            items_used=json.loads(row["items_used"]) if row["items_used"] else [],
            created_at=parse_datetime(row["created_at"]),
        )

    def list_results(self, user_id: str, outfit_id: str | None = None) -> List[VirtualTryOnResult]:
        query = "SELECT * FROM virtual_try_on_results WHERE user_id = ? AND is_deleted = 0"
        params: list = [user_id]
        if outfit_id:
            query += " AND outfit_id = ?"
            params.append(outfit_id)
        query += " ORDER BY created_at DESC, id"
        with self._connect() as conn:
            return [self._row_to_result(row) for row in conn.execute(query, params).fetchall()]

    def latest_result(self, user_id: str, outfit_id: str) -> Optional[VirtualTryOnResult]:
        results = self.list_results(user_id, outfit_id)
        return results[0] if results else None

    def results_between(self, user_id: str, start: datetime, end: datetime) -> List[VirtualTryOnResult]:
        return [
            result
            for result in self.list_results(user_id)
            if start <= result.created_at <= end
        ]

    def delete_result(self, user_id: str, result_id: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE virtual_try_on_results SET is_deleted = 1 WHERE user_id = ? AND id = ? AND is_deleted = 0",
                (user_id, result_id),
            )
            return cursor.rowcount > 0


__all__ = ["SQLiteTryOnStore"]
