from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict


class ProfileRecord(BaseModel):
    """App/DB record shape for a row of the profiles table."""

    id: str
    account_id: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    headline: str | None = None
    summary: str | None = None
    industry: str | None = None
    location: str | None = None
    email: str | None = None
    linkedin_slug: str | None = None
    is_shadow: bool = False
    needs_reconciliation: bool = False

    model_config = ConfigDict(extra="ignore")

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ProfileRecord":
        return cls.model_validate(dict(row))

    @property
    def display_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)
