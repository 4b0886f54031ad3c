"""Domain models for albums, sharing and lifecycle state."""

from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum, StrEnum
from uuid import UUID


class LifecycleState(StrEnum):
    """Soft-delete state shared by albums and images."""

    ACTIVE = "active"
    TRASHED = "trashed"


class AccessLevel(IntEnum):
    """Ordered access levels resolved for a caller on an album."""

    NONE = 0
    VIEW = 1
    EDIT = 2

    @property
    def label(self) -> str:
        return self.name.lower()

    @classmethod
    def parse(cls, value: str) -> "AccessLevel":
        """Parse a storable level ("view" or "edit")."""
        normalized = value.strip().lower()
        if normalized == "view":
            return cls.VIEW
        if normalized == "edit":
            return cls.EDIT
        raise ValueError(f"Unsupported access level: {value}")


@dataclass(frozen=True)
class ShareEntry:
    """A collaborator email and the access level granted to it."""

    email: str
    access_level: AccessLevel = AccessLevel.VIEW


@dataclass(frozen=True)
class AlbumRecord:
    """Represents a persisted album."""

    id: UUID
    name: str
    description: str | None
    owner_id: UUID
    shared_with: tuple[ShareEntry, ...]
    state: LifecycleState
    deleted_at: datetime | None
    created_at: datetime
    updated_at: datetime | None = None

    @property
    def is_trashed(self) -> bool:
        return self.state is LifecycleState.TRASHED

    def share_for(self, email: str) -> ShareEntry | None:
        """Return the share entry for an email, if any."""
        target = email.strip().lower()
        for entry in self.shared_with:
            if entry.email == target:
                return entry
        return None
