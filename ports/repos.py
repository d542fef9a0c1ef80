from __future__ import annotations

from typing import Dict, List, Optional, Protocol, Tuple

from models.profile_record import ProfileRecord


class ProfilesRepoPort(Protocol):
    def get(self, profile_id: str) -> Optional[ProfileRecord]:
        ...

    def get_by_slug(self, slug: str) -> Optional[ProfileRecord]:
        ...

    def create_shadow(
        self,
        slug: str,
        first_name: Optional[str],
        last_name: Optional[str],
        headline: Optional[str],
    ) -> Tuple[ProfileRecord, bool]:
        ...

    def fill_missing(self, profile_id: str, fields: Dict[str, Optional[str]]) -> bool:
        ...


class LookupRepoPort(Protocol):
    table: str

    def get_or_create(self, name: str) -> int:
        ...


class ConnectionsRepoPort(Protocol):
    def add(self, a: str, b: str, connected_on: Optional[str] = None) -> bool:
        ...

    def neighbour_ids(self, profile_id: str) -> List[str]:
        ...
