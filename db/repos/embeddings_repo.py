from __future__ import annotations

import json
import sqlite3
from typing import Iterable, List, Optional, Tuple


class EmbeddingsRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def get_hash(self, profile_id: str, model: str) -> Optional[str]:
        row = self.conn.execute(
            "SELECT text_hash FROM profile_embeddings WHERE profile_id = ? AND model = ?",
            (profile_id, model),
        ).fetchone()
        return row[0] if row else None

    def upsert(self, profile_id: str, model: str, text_hash: str, vector: List[float]) -> None:
        self.conn.execute(
            (
                "INSERT INTO profile_embeddings (profile_id, model, text_hash, vector_json) VALUES (?, ?, ?, ?) "
                "ON CONFLICT(profile_id) DO UPDATE SET model = excluded.model, text_hash = excluded.text_hash, "
                "vector_json = excluded.vector_json, updated_at = datetime('now')"
            ),
            (profile_id, model, text_hash, json.dumps(vector)),
        )
        self.conn.commit()

    def vectors(self, model: str, profile_ids: Optional[Iterable[str]] = None) -> List[Tuple[str, List[float]]]:
        """Stored vectors for ``model``, optionally restricted to ``profile_ids``."""
        if profile_ids is None:
            cur = self.conn.execute(
                "SELECT profile_id, vector_json FROM profile_embeddings WHERE model = ?", (model,)
            )
        else:
            ids = list(profile_ids)
            if not ids:
                return []
            marks = ",".join("?" for _ in ids)
            cur = self.conn.execute(
                f"SELECT profile_id, vector_json FROM profile_embeddings WHERE model = ? AND profile_id IN ({marks})",
                (model, *ids),
            )
        return [(r[0], json.loads(r[1])) for r in cur.fetchall()]
