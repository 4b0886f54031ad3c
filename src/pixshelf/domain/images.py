"""Domain models for images stored in albums."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from pixshelf.domain.albums import LifecycleState


@dataclass(frozen=True)
class ImageComment:
    """A comment appended to an image."""

    id: UUID
    user_id: UUID
    user_email: str
    text: str
    created_at: datetime


@dataclass(frozen=True)
class ImageMetadata:
    """Object host metadata captured at upload time."""

    format: str | None
    width: int | None
    height: int | None
    public_id: str | None
    bytes: int | None


@dataclass(frozen=True)
class StoredObject:
    """Result of uploading bytes to the object host."""

    url: str
    public_id: str
    format: str | None
    width: int | None
    height: int | None
    bytes: int | None


@dataclass(frozen=True)
class ImageRecord:
    """Represents a persisted image."""

    id: UUID
    album_id: UUID
    name: str
    original_name: str
    url: str
    thumbnail_url: str | None
    tags: tuple[str, ...]
    people: tuple[str, ...]
    is_favorite: bool
    comments: tuple[ImageComment, ...]
    size: int
    uploaded_by: UUID
    uploaded_at: datetime
    metadata: ImageMetadata
    state: LifecycleState = LifecycleState.ACTIVE
    deleted_at: datetime | None = None
    original_album_id: UUID | None = None
    original_album_name: str | None = None

    @property
    def is_trashed(self) -> bool:
        return self.state is LifecycleState.TRASHED


@dataclass(frozen=True)
class NewImage:
    """Fields required to persist a freshly uploaded image."""

    album_id: UUID
    name: str
    url: str
    thumbnail_url: str | None
    tags: tuple[str, ...]
    people: tuple[str, ...]
    is_favorite: bool
    size: int
    uploaded_by: UUID
    metadata: ImageMetadata
