"""Profile table rows and sorting"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, List

from klaviyo_admin.models.profiles import ProfileRow


class SortKey(str, Enum):
    ID = "id"
    EMAIL = "email"
    FIRST_NAME = "first_name"
    LAST_NAME = "last_name"
    STATUS = "status"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class SortState:
    """Active sort column and direction"""
    key: SortKey = SortKey.ID
    direction: SortDirection = SortDirection.ASC

    @classmethod
    def parse(cls, key: str = None, direction: str = None) -> "SortState":
        """Read a sort state from query parameters, ignoring unknown values"""
        try:
            sort_key = SortKey(key) if key else SortKey.ID
        except ValueError:
            sort_key = SortKey.ID
        try:
            sort_dir = SortDirection(direction) if direction else SortDirection.ASC
        except ValueError:
            sort_dir = SortDirection.ASC
        return cls(sort_key, sort_dir)

    def toggle(self, key: SortKey) -> "SortState":
        """Flip the direction of the active column, or sort a new column ascending"""
        if key == self.key:
            flipped = SortDirection.DESC if self.direction == SortDirection.ASC else SortDirection.ASC
            return SortState(key, flipped)
        return SortState(key, SortDirection.ASC)

    def arrow(self, key: SortKey) -> str:
        if key != self.key:
            return "↕"
        return "▲" if self.direction == SortDirection.ASC else "▼"


def _sort_value(row: ProfileRow, key: SortKey) -> str:
    value = getattr(row, key.value)
    return str(value or "").lower()


def sort_profiles(rows: List[ProfileRow], state: SortState) -> List[ProfileRow]:
    """Return a sorted copy; ties keep their original relative order"""
    return sorted(
        rows,
        key=lambda row: _sort_value(row, state.key),
        reverse=state.direction == SortDirection.DESC,
    )


def to_rows(payload: Any) -> List[ProfileRow]:
    """Convert a profile collection document into table rows"""
    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(data, list):
        return []

    rows = []
    for item in data:
        if not isinstance(item, dict):
            continue
        attributes = item.get("attributes")
        if not isinstance(attributes, dict):
            attributes = {}

        def text(name: str):
            value = attributes.get(name)
            return None if value is None else str(value)

        rows.append(ProfileRow(
            id=str(item.get("id") or ""),
            email=text("email"),
            first_name=text("first_name"),
            last_name=text("last_name"),
            status=text("subscription_status"),
        ))
    return rows
