"""
Semantic profile search

Profiles are embedded from their name, headline and industry and the
vectors are kept in SQLite. Queries are ranked by cosine similarity,
either across the whole directory or within one profile's connections.
"""

import logging
import sqlite3
from typing import Iterable, List, Optional, Tuple

import numpy as np
from pydantic import BaseModel

from config.settings import get_settings
from db.repos.connections_repo import ConnectionsRepo
from db.repos.embeddings_repo import EmbeddingsRepo
from db.repos.profiles_repo import ProfilesRepo
from models.profile_record import ProfileRecord
from ports.search import EmbedderPort
from utils.llm_logger import sha256_text

logger = logging.getLogger(__name__)


class SearchHit(BaseModel):
    profile: ProfileRecord
    score: float


def profile_embedding_text(profile: ProfileRecord) -> str:
    parts = [profile.first_name, profile.last_name, profile.headline, profile.industry]
    return " ".join(p.strip() for p in parts if p and p.strip())


def cosine_scores(query: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """Cosine similarity of ``query`` against every row of ``matrix``; zero vectors score 0."""
    q_norm = np.linalg.norm(query)
    row_norms = np.linalg.norm(matrix, axis=1)
    denom = row_norms * q_norm
    dots = matrix @ query
    with np.errstate(divide="ignore", invalid="ignore"):
        scores = np.where(denom > 0, dots / denom, 0.0)
    return scores


class SqliteVectorIndex:
    """Vector index over the profile_embeddings table for one embedding model."""

    def __init__(self, conn: sqlite3.Connection, model: str):
        self.repo = EmbeddingsRepo(conn)
        self.model = model

    def is_current(self, profile_id: str, text_hash: str) -> bool:
        return self.repo.get_hash(profile_id, self.model) == text_hash

    def upsert(self, profile_id: str, text_hash: str, vector: List[float]) -> None:
        self.repo.upsert(profile_id, self.model, text_hash, vector)

    def query(
        self, vector: List[float], k: int, filter_ids: Optional[Iterable[str]] = None
    ) -> List[Tuple[str, float]]:
        rows = self.repo.vectors(self.model, filter_ids)
        if not rows or k <= 0:
            return []
        ids = [r[0] for r in rows]
        matrix = np.asarray([r[1] for r in rows], dtype=float)
        scores = cosine_scores(np.asarray(vector, dtype=float), matrix)
        order = np.argsort(-scores, kind="stable")[:k]
        return [(ids[i], float(scores[i])) for i in order]


class ProfileIndexer:
    def __init__(self, conn: sqlite3.Connection, embedder: EmbedderPort, batch_size: int = 64):
        self.conn = conn
        self.embedder = embedder
        self.index = SqliteVectorIndex(conn, embedder.model)
        self.batch_size = batch_size

    def index_profiles(self) -> int:
        """Embed every profile that has a headline and whose text changed; returns how many were embedded."""
        cur = self.conn.execute(
            "SELECT id FROM profiles WHERE headline IS NOT NULL AND TRIM(headline) <> '' ORDER BY id"
        )
        ids = [r[0] for r in cur.fetchall()]
        pending: List[Tuple[str, str, str]] = []
        for profile in ProfilesRepo(self.conn).get_many(ids):
            text = profile_embedding_text(profile)
            text_hash = sha256_text(text) or ""
            if not self.index.is_current(profile.id, text_hash):
                pending.append((profile.id, text, text_hash))

        for start in range(0, len(pending), self.batch_size):
            batch = pending[start:start + self.batch_size]
            vectors = self.embedder.embed([t for _, t, _ in batch], use_case="profile_embedding")
            for (profile_id, _, text_hash), vector in zip(batch, vectors):
                self.index.upsert(profile_id, text_hash, vector)

        logger.info(f"Embedded {len(pending)} of {len(ids)} profiles with headlines")
        return len(pending)


class SemanticSearch:
    def __init__(self, conn: sqlite3.Connection, embedder: EmbedderPort):
        self.embedder = embedder
        self.index = SqliteVectorIndex(conn, embedder.model)
        self.profiles = ProfilesRepo(conn)
        self.connections = ConnectionsRepo(conn)
        self.settings = get_settings()

    def _rank(
        self, query: str, k: int, min_score: float, filter_ids: Optional[List[str]] = None
    ) -> List[SearchHit]:
        query = (query or "").strip()
        if not query:
            return []
        vector = self.embedder.embed([query], use_case="query_embedding")[0]
        matches = [(pid, s) for pid, s in self.index.query(vector, k, filter_ids) if s >= min_score]
        by_id = {p.id: p for p in self.profiles.get_many([pid for pid, _ in matches])}
        return [SearchHit(profile=by_id[pid], score=s) for pid, s in matches if pid in by_id]

    def search(self, query: str, k: Optional[int] = None) -> List[SearchHit]:
        """Directory-wide search."""
        return self._rank(query, k or self.settings.search_top_k, self.settings.search_min_score)

    def search_connections(self, profile_id: str, query: str, k: int = 10) -> List[SearchHit]:
        """Search restricted to the neighbours of ``profile_id``."""
        neighbour_ids = self.connections.neighbour_ids(profile_id)
        if not neighbour_ids:
            return []
        return self._rank(query, k, self.settings.connection_search_min_score, neighbour_ids)
