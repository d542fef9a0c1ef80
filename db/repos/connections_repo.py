from __future__ import annotations

import sqlite3
from typing import Any, Dict, List, Optional, Tuple

from db.connection import fetch_all


def ordered_pair(a: str, b: str) -> Tuple[str, str]:
    """Canonical (smaller, larger) ordering of two distinct profile ids."""
    if a == b:
        raise ValueError("a profile cannot be connected to itself")
    return (a, b) if a < b else (b, a)


class ConnectionsRepo:
    def __init__(self, conn: sqlite3.Connection, autocommit: bool = True):
        self.conn = conn
        self.autocommit = autocommit

    def exists(self, a: str, b: str) -> bool:
        lo, hi = ordered_pair(a, b)
        row = self.conn.execute(
            "SELECT 1 FROM connections WHERE profile_id_a = ? AND profile_id_b = ?",
            (lo, hi),
        ).fetchone()
        return row is not None

    def add(self, a: str, b: str, connected_on: Optional[str] = None) -> bool:
        """Store the undirected edge a-b once; returns True only when newly inserted."""
        lo, hi = ordered_pair(a, b)
        if self.exists(lo, hi):
            return False
        cur = self.conn.execute(
            "INSERT OR IGNORE INTO connections (profile_id_a, profile_id_b, connected_on) VALUES (?, ?, ?)",
            (lo, hi, connected_on),
        )
        if self.autocommit:
            self.conn.commit()
        return cur.rowcount == 1

    def neighbour_ids(self, profile_id: str) -> List[str]:
        cur = self.conn.execute(
            "SELECT neighbour_id FROM v_profile_neighbours WHERE profile_id = ? ORDER BY neighbour_id",
            (profile_id,),
        )
        return [r[0] for r in cur.fetchall()]

    def neighbours(self, profile_id: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Neighbour profiles joined with the edge's connection date."""
        sql = (
            "SELECT p.id, p.first_name, p.last_name, p.headline, p.linkedin_slug, p.is_shadow, n.connected_on "
            "FROM v_profile_neighbours n JOIN profiles p ON p.id = n.neighbour_id "
            "WHERE n.profile_id = ? ORDER BY p.last_name, p.first_name"
        )
        params: List[Any] = [profile_id]
        if limit is not None:
            sql += " LIMIT ?"
            params.append(int(limit))
        return fetch_all(self.conn.execute(sql, params))

    def count_for(self, profile_id: str) -> int:
        row = self.conn.execute(
            "SELECT COUNT(*) FROM connections WHERE profile_id_a = ? OR profile_id_b = ?",
            (profile_id, profile_id),
        ).fetchone()
        return int(row[0])

    def count(self) -> int:
        return int(self.conn.execute("SELECT COUNT(*) FROM connections").fetchone()[0])

    def repoint(self, from_profile_id: str, to_profile_id: str) -> int:
        """Move every edge of ``from_profile_id`` onto ``to_profile_id``.

        Edges that would become self-loops or duplicates are dropped. Returns
        the number of edges carried over.
        """
        cur = self.conn.execute(
            "SELECT neighbour_id, connected_on FROM v_profile_neighbours WHERE profile_id = ?",
            (from_profile_id,),
        )
        moved = 0
        for neighbour_id, connected_on in cur.fetchall():
            if neighbour_id == to_profile_id:
                continue
            lo, hi = ordered_pair(to_profile_id, neighbour_id)
            ins = self.conn.execute(
                "INSERT OR IGNORE INTO connections (profile_id_a, profile_id_b, connected_on) VALUES (?, ?, ?)",
                (lo, hi, connected_on),
            )
            moved += ins.rowcount
        self.conn.execute(
            "DELETE FROM connections WHERE profile_id_a = ? OR profile_id_b = ?",
            (from_profile_id, from_profile_id),
        )
        if self.autocommit:
            self.conn.commit()
        return moved
