from __future__ import annotations

from typing import List, Sequence

from db.repos.connections_repo import ConnectionsRepo
from db.repos.profiles_repo import ProfilesRepo
from services.semantic_search import ProfileIndexer, SemanticSearch, profile_embedding_text

_VOCAB = ("engineer", "design", "data")


class _KeywordEmbedder:
    """Deterministic stand-in: one dimension per vocabulary word."""

    model = "fake-embedding"

    def __init__(self) -> None:
        self.calls: List[List[str]] = []

    def embed(self, texts: Sequence[str], *, use_case: str = "profile_embedding") -> List[List[float]]:
        self.calls.append(list(texts))
        return [[float(t.lower().count(w)) for w in _VOCAB] for t in texts]


def _seed(conn):
    profiles = ProfilesRepo(conn)
    profiles.upsert_owner("p-alice", {"first_name": "Alice", "last_name": "Smith", "headline": "Data Engineer"})
    profiles.upsert_owner("p-bob", {"first_name": "Bob", "last_name": "Jones", "headline": "Product Designer"})
    profiles.upsert_owner("p-carol", {"first_name": "Carol", "last_name": "White", "headline": "Platform Engineer"})
    profiles.upsert_owner("p-dan", {"first_name": "Dan", "last_name": "Brown"})
    ConnectionsRepo(conn).add("p-bob", "p-carol")


def test_embedding_text_uses_name_headline_industry():
    from models.profile_record import ProfileRecord

    p = ProfileRecord(id="x", first_name="Ada", last_name="Lovelace", headline="Analyst", industry=None)
    assert profile_embedding_text(p) == "Ada Lovelace Analyst"


def test_indexer_embeds_profiles_with_headlines_once(conn):
    _seed(conn)
    embedder = _KeywordEmbedder()
    indexer = ProfileIndexer(conn, embedder)
    assert indexer.index_profiles() == 3
    assert indexer.index_profiles() == 0

    ProfilesRepo(conn).update_fields("p-bob", {"headline": "Design Engineer"})
    assert indexer.index_profiles() == 1


def test_search_ranks_by_cosine_with_min_score(conn):
    _seed(conn)
    embedder = _KeywordEmbedder()
    ProfileIndexer(conn, embedder).index_profiles()

    hits = SemanticSearch(conn, embedder).search("engineer")
    assert [h.profile.id for h in hits] == ["p-carol", "p-alice"]
    assert hits[0].score > hits[1].score
    assert SemanticSearch(conn, embedder).search("   ") == []


def test_connection_search_is_limited_to_neighbours(conn):
    _seed(conn)
    embedder = _KeywordEmbedder()
    ProfileIndexer(conn, embedder).index_profiles()
    search = SemanticSearch(conn, embedder)

    hits = search.search_connections("p-bob", "engineer")
    assert [h.profile.id for h in hits] == ["p-carol"]
    assert search.search_connections("p-dan", "engineer") == []
