from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from models.profile_record import ProfileRecord
from services.errors import IngestionWarning


class IngestionState(str, Enum):
    AWAITING_FILES = "AwaitingFiles"
    VALIDATING = "Validating"
    NORMALIZING = "Normalizing"
    RESOLVING_IDENTITIES = "ResolvingIdentities"
    WRITING_GRAPH = "WritingGraph"
    DONE = "Done"
    FAILED = "Failed"


class IngestionResult(BaseModel):
    """Summary returned to the caller of a successful run."""

    profile: ProfileRecord
    positions_written: int = 0
    education_written: int = 0
    skills_written: int = 0
    connections_written: int = 0
    shadow_profiles_created: int = 0
    shadow_profiles_enriched: int = 0
    warnings: list[IngestionWarning] = Field(default_factory=list)
    state: IngestionState = IngestionState.DONE

    @property
    def warning_count(self) -> int:
        return len(self.warnings)
