from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class User:
    """User row stored in the ``users`` table.

    ``uid`` is ``None`` until the store assigns a key.
    """

    uid: int | None = None
    first_name: str | None = None
    last_name: str | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> User:
        """Create a User from a sqlite3.Row or a plain mapping."""
        uid = row["uid"]
        return cls(
            uid=int(uid) if uid is not None else None,
            first_name=row["first_name"],
            last_name=row["last_name"],
        )

    @property
    def display_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    def to_dict(self) -> dict[str, Any]:
        return {
            "uid": self.uid,
            "first_name": self.first_name,
            "last_name": self.last_name,
        }

    def to_db_dict(self) -> dict[str, Any]:
        """Column mapping for INSERT statements; omits ``uid`` when unassigned."""
        data = self.to_dict()
        if self.uid is None:
            del data["uid"]
        return data

    def __str__(self) -> str:
        return self.display_name
