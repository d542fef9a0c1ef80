from __future__ import annotations

from typing import Iterable, List, Optional, Protocol, Sequence, Tuple


class EmbedderPort(Protocol):
    model: str

    def embed(self, texts: Sequence[str], *, use_case: str = "profile_embedding") -> List[List[float]]:
        ...


class VectorIndexPort(Protocol):
    def upsert(self, profile_id: str, text_hash: str, vector: List[float]) -> None:
        ...

    def query(
        self, vector: List[float], k: int, filter_ids: Optional[Iterable[str]] = None
    ) -> List[Tuple[str, float]]:
        ...
