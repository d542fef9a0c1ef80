from .export_records import (
    LinkedInConnection,
    LinkedInEducation,
    LinkedInPosition,
    LinkedInProfile,
    LinkedInSkill,
    ProcessedExport,
)
from .ingestion_result import IngestionResult, IngestionState
from .profile_edit import EditResult, ProfileEdit
from .profile_record import ProfileRecord
from .upload_file import UploadFile

__all__ = [
    "LinkedInConnection",
    "LinkedInEducation",
    "LinkedInPosition",
    "LinkedInProfile",
    "LinkedInSkill",
    "ProcessedExport",
    "IngestionResult",
    "IngestionState",
    "EditResult",
    "ProfileEdit",
    "ProfileRecord",
    "UploadFile",
]
