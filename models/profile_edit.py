from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from services.errors import IngestionWarning


class PositionEdit(BaseModel):
    id: int | None = None
    company: str | None = None
    title: str | None = None
    description: str | None = None
    location: str | None = None
    started_on: str | None = None
    finished_on: str | None = None

    model_config = ConfigDict(extra="ignore")


class EducationEdit(BaseModel):
    id: int | None = None
    school: str | None = None
    degree: str | None = None
    field_of_study: str | None = None
    activities: str | None = None
    notes: str | None = None
    started_on: str | None = None
    finished_on: str | None = None

    model_config = ConfigDict(extra="ignore")


class SkillEdit(BaseModel):
    id: int | None = None
    name: str


class ProfileEdit(BaseModel):
    """Full replacement of a profile's editable content.

    ``None`` for a section leaves that section untouched; a list (even empty)
    replaces it.
    """

    first_name: str | None = None
    last_name: str | None = None
    headline: str | None = None
    summary: str | None = None
    industry: str | None = None
    location: str | None = None
    positions: list[PositionEdit] | None = None
    education: list[EducationEdit] | None = None
    skills: list[SkillEdit] | None = None

    model_config = ConfigDict(extra="ignore")


class SectionChanges(BaseModel):
    inserted: int = 0
    updated: int = 0
    deleted: int = 0


class EditResult(BaseModel):
    positions: SectionChanges = Field(default_factory=SectionChanges)
    education: SectionChanges = Field(default_factory=SectionChanges)
    skills: SectionChanges = Field(default_factory=SectionChanges)
    warnings: list[IngestionWarning] = Field(default_factory=list)
