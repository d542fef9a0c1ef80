from __future__ import annotations

import os
from collections import Counter

from config.settings import get_settings
from models.ingestion_result import IngestionResult
from utils.llm_logger import usage_by_provider


def print_llm_usage() -> None:
    settings = get_settings()
    run_id = os.getenv("RUN_ID")
    if not (run_id and settings.llm_trace):
        return
    usage = usage_by_provider(run_id)
    if usage:
        print("LLM Usage:")
        for provider, stats in usage.items():
            print(f"  {provider}: calls={stats.get('calls', 0)}, tokens={stats.get('tokens', 0)}")


def print_summary(result: IngestionResult) -> None:
    """Print summary of one ingestion run."""
    profile = result.profile
    print("\n" + "=" * 60)
    print("LINKEDIN EXPORT INGESTION - SUMMARY")
    print("=" * 60)
    print(f"Profile: {profile.display_name or '-'} ({profile.id})")
    print(f"LinkedIn slug: {profile.linkedin_slug or 'N/A'}")
    print(f"State: {result.state.value}")
    print()
    print("Written:")
    print(f"  Connections: {result.connections_written}")
    print(f"  Positions: {result.positions_written}")
    print(f"  Education: {result.education_written}")
    print(f"  Skills: {result.skills_written}")
    print(f"  Shadow profiles created: {result.shadow_profiles_created}")
    print(f"  Shadow profiles enriched: {result.shadow_profiles_enriched}")
    if result.warnings:
        print()
        print(f"Processed with {result.warning_count} warnings:")
        for kind, n in sorted(Counter(w.kind for w in result.warnings).items()):
            print(f"  {kind}: {n}")
    print("=" * 60)
