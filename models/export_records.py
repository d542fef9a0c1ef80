from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from services.errors import IngestionWarning


class LinkedInProfile(BaseModel):
    """Uploader's own profile, from the first row of Profile.csv."""

    first_name: str
    last_name: str
    headline: str | None = None
    summary: str | None = None
    industry: str | None = None
    location: str | None = None
    email: str | None = None
    linkedin_slug: str | None = None

    model_config = ConfigDict(extra="ignore")


class LinkedInConnection(BaseModel):
    first_name: str
    last_name: str
    linkedin_slug: str
    email: str | None = None
    company: str | None = None
    position: str | None = None
    connected_on: str | None = None

    model_config = ConfigDict(extra="ignore")

    @property
    def derived_headline(self) -> str | None:
        if self.position and self.company:
            return f"{self.position} at {self.company}"
        return None


class LinkedInPosition(BaseModel):
    company: str
    title: str | None = None
    description: str | None = None
    location: str | None = None
    started_on: str | None = None
    finished_on: str | None = None

    model_config = ConfigDict(extra="ignore")


class LinkedInEducation(BaseModel):
    school: str
    degree: str | None = None
    field_of_study: str | None = None
    activities: str | None = None
    notes: str | None = None
    started_on: str | None = None
    finished_on: str | None = None

    model_config = ConfigDict(extra="ignore")


class LinkedInSkill(BaseModel):
    name: str


class ProcessedExport(BaseModel):
    """Canonical form of one uploaded export.

    Optional lists stay ``None`` when the corresponding file was not supplied,
    and are empty when it was supplied but had no usable rows.
    """

    profile: LinkedInProfile
    connections: list[LinkedInConnection] = Field(default_factory=list)
    positions: list[LinkedInPosition] | None = None
    education: list[LinkedInEducation] | None = None
    skills: list[LinkedInSkill] | None = None

    warnings: list[IngestionWarning] = Field(default_factory=list)
