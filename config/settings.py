from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv


def _load_env() -> None:
    # Centralized dotenv loading; safe if .env missing
    load_dotenv()


def _as_bool(value: str | None) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    # Core/runtime
    db_path: str
    run_env: str
    log_level: str

    # Blob storage for raw uploads
    blob_root: str
    blob_base_url: str | None
    blob_api_key: str | None

    # Timeouts/retries (whole-run retry at the orchestration boundary)
    request_timeout_seconds: int
    max_retries: int
    retry_backoff_ms: int

    # Semantic search
    openai_api_key: str | None
    embedding_model: str
    search_min_score: float
    connection_search_min_score: float
    search_top_k: int

    # Recognized LinkedIn export files
    required_files: tuple[str, ...] = ("Profile.csv", "Connections.csv")
    optional_files: tuple[str, ...] = ("Positions.csv", "Education.csv", "Skills.csv")

    # Logging/tracing
    llm_trace: bool = False
    llm_log_path: str = "logs/llm_calls.jsonl"

    @property
    def recognized_files(self) -> tuple[str, ...]:
        return self.required_files + self.optional_files


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    _load_env()
    return Settings(
        db_path=os.getenv("DB_PATH", "unlinked.db"),
        run_env=os.getenv("RUN_ENV", "local"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        blob_root=os.getenv("BLOB_ROOT", "uploads"),
        blob_base_url=os.getenv("BLOB_BASE_URL") or None,
        blob_api_key=os.getenv("BLOB_API_KEY") or None,
        request_timeout_seconds=int(os.getenv("REQUEST_TIMEOUT", "30")),
        max_retries=int(os.getenv("MAX_RETRIES", "3")),
        retry_backoff_ms=int(os.getenv("RETRY_BACKOFF_MS", "300")),
        openai_api_key=os.getenv("OPENAI_API_KEY"),
        embedding_model=os.getenv("EMBEDDING_MODEL", "text-embedding-3-large"),
        search_min_score=float(os.getenv("SEARCH_MIN_SCORE", "0.25")),
        connection_search_min_score=float(os.getenv("CONNECTION_SEARCH_MIN_SCORE", "0.1")),
        search_top_k=int(os.getenv("SEARCH_TOP_K", "50")),
        llm_trace=_as_bool(os.getenv("LLM_TRACE", "false")),
        llm_log_path=os.getenv("LLM_LOG_PATH", "logs/llm_calls.jsonl"),
    )
