from __future__ import annotations

import time as _time
from typing import Any, Dict, List, Optional, Sequence

from config.llm_routes import ROUTES
from config.settings import get_settings
from utils.llm_logger import log_call, sha256_text


class LLMClient:
    """Minimal wrapper to centralize per-use-case routing and logging of embedding calls."""

    def __init__(self) -> None:
        self.settings = get_settings()
        self._client: Any = None

    @property
    def model(self) -> str:
        return ROUTES.get("profile_embedding", {}).get("model") or self.settings.embedding_model

    def _openai(self) -> Any:
        if self._client is None:
            from openai import OpenAI
            self._client = OpenAI(
                api_key=self.settings.openai_api_key,
                timeout=self.settings.request_timeout_seconds,
            )
        return self._client

    def embed(self, texts: Sequence[str], *, use_case: str = "profile_embedding") -> List[List[float]]:
        route = ROUTES.get(use_case, {})
        provider = route.get("provider", "openai")
        # Query and document vectors must share one model to be comparable
        model = self.model
        op = route.get("operation", use_case)

        if provider != "openai":
            raise NotImplementedError(f"Provider not implemented: {provider}")
        if not texts:
            return []

        _t0 = _time.time()
        try:
            resp = self._openai().embeddings.create(model=model, input=list(texts))
        except Exception as e:
            log_call(
                caller=f"llm_client.embed:{use_case}",
                provider=provider,
                model=model,
                operation=op,
                input_count=len(texts),
                input_hash=sha256_text("\n".join(texts)),
                duration_ms=int((_time.time() - _t0) * 1000),
                status="error",
                error=str(e),
            )
            raise
        _dt_ms = int((_time.time() - _t0) * 1000)

        usage_obj: Optional[Dict[str, Any]] = None
        usage = getattr(resp, "usage", None)
        if usage:
            usage_obj = {
                "prompt_tokens": getattr(usage, "prompt_tokens", None),
                "total_tokens": getattr(usage, "total_tokens", None),
            }

        log_call(
            caller=f"llm_client.embed:{use_case}",
            provider=provider,
            model=model,
            operation=op,
            input_count=len(texts),
            input_hash=sha256_text("\n".join(texts)),
            duration_ms=_dt_ms,
            status="ok",
            usage=usage_obj,
        )
        return [list(item.embedding) for item in sorted(resp.data, key=lambda d: d.index)]
