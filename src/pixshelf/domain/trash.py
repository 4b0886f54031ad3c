"""Domain models for the trash view."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID


class TrashKind(StrEnum):
    """Kinds of entities that can sit in the trash."""

    IMAGE = "image"
    ALBUM = "album"


@dataclass(frozen=True)
class TrashItem:
    """A trashed image or album, tagged by kind."""

    id: UUID
    kind: TrashKind
    name: str
    deleted_at: datetime
    thumbnail_url: str | None = None
    size: int = 0
    original_album_id: UUID | None = None
    original_album_name: str | None = None
    tags: tuple[str, ...] = ()
    is_favorite: bool = False
    item_count: int = 0


@dataclass(frozen=True)
class PurgeSummary:
    """Counts of permanently removed entities."""

    images: int = 0
    albums: int = 0
    asset_failures: int = 0

    def __add__(self, other: "PurgeSummary") -> "PurgeSummary":
        return PurgeSummary(
            images=self.images + other.images,
            albums=self.albums + other.albums,
            asset_failures=self.asset_failures + other.asset_failures,
        )
