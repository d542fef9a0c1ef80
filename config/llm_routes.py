from __future__ import annotations

import os


# Central routing for embedding use-cases consumed by services/llm_client.py.
# Per-route models can be overridden via env vars for quick testing.
ROUTES: dict[str, dict] = {
    # Profile text -> vector for the directory index
    "profile_embedding": {
        "provider": os.getenv("LLM_EMBEDDING_PROVIDER", "openai"),
        "model": os.getenv("EMBEDDING_MODEL_PROFILE"),  # falls back to global EMBEDDING_MODEL
        "operation": "profile_embedding",
    },
    # Free-text search query -> vector
    "query_embedding": {
        "provider": os.getenv("LLM_EMBEDDING_PROVIDER", "openai"),
        "model": os.getenv("EMBEDDING_MODEL_QUERY"),
        "operation": "query_embedding",
    },
}
