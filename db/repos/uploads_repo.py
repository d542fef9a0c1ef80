from __future__ import annotations

import sqlite3
from typing import Any, Dict, List

from db.connection import fetch_all


class UploadsRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def add(self, profile_id: str, file_name: str, file_path: str) -> int:
        cur = self.conn.execute(
            "INSERT INTO uploads (profile_id, file_name, file_path) VALUES (?, ?, ?)",
            (profile_id, file_name, file_path),
        )
        self.conn.commit()
        return int(cur.lastrowid)

    def latest_for_profile(self, profile_id: str) -> List[Dict[str, Any]]:
        """Most recent upload per file name for one profile."""
        cur = self.conn.execute(
            (
                "SELECT u.id, u.file_name, u.file_path, u.created_at FROM uploads u "
                "WHERE u.profile_id = ? AND u.id = ("
                "  SELECT MAX(u2.id) FROM uploads u2 WHERE u2.profile_id = u.profile_id AND u2.file_name = u.file_name"
                ") ORDER BY u.file_name"
            ),
            (profile_id,),
        )
        return fetch_all(cur)
