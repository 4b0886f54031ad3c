"""Image lifecycle: upload, favorites, comments, soft delete and restore."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID, uuid4

from pixshelf.domain.albums import AccessLevel
from pixshelf.domain.errors import (
    Conflict,
    Forbidden,
    InvalidInput,
    NotFound,
    UpstreamFailure,
)
from pixshelf.domain.images import (
    ImageComment,
    ImageMetadata,
    ImageRecord,
    NewImage,
    StoredObject,
)
from pixshelf.domain.users import Identity
from pixshelf.services.access import AccessControl

_logger = logging.getLogger(__name__)

THUMBNAIL_WIDTH = 400
THUMBNAIL_HEIGHT = 300
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024


class ObjectHost(Protocol):
    """Interface for the external binary-object host."""

    def upload(self, data: bytes, content_type: str, folder_hint: str) -> StoredObject:
        """Store image bytes and return the canonical URL and metadata."""

    def derived_url(self, public_id: str, width: int, height: int) -> str:
        """Return a transform-on-read URL for a stored object."""

    def delete(self, public_id: str) -> None:
        """Delete a stored object. Raises on failure."""


AssetRemovalPolicy = Callable[[ObjectHost, str], bool]


def log_and_continue(object_host: ObjectHost, public_id: str) -> bool:
    """Delete a hosted asset, logging failures instead of raising.

    Returns whether the object host confirmed the deletion.
    """
    try:
        object_host.delete(public_id)
    except Exception:
        _logger.warning(
            "Failed to delete hosted asset",
            extra={"public_id": public_id},
            exc_info=True,
        )
        return False
    _logger.info("Hosted asset deleted: public_id=%s", public_id)
    return True


class ImageRepository(Protocol):
    """Persistence interface for images."""

    def create_image(self, image: NewImage) -> ImageRecord:
        """Persist a new active image and return it."""

    def get_image(self, image_id: UUID) -> ImageRecord | None:
        """Return an image in any lifecycle state, if present."""

    def list_album_images(
        self, album_id: UUID, tags: tuple[str, ...], favorites_only: bool
    ) -> list[ImageRecord]:
        """Return active images of an album, newest upload first."""

    def set_favorite(self, image_id: UUID, value: bool) -> ImageRecord:
        """Set the favorite flag and return the image."""

    def append_comment(self, image_id: UUID, comment: ImageComment) -> ImageRecord:
        """Append a comment and return the image."""

    def trash_image(
        self,
        image_id: UUID,
        deleted_at: datetime,
        original_album_id: UUID,
        original_album_name: str,
    ) -> ImageRecord:
        """Mark a single image trashed with its backreference."""

    def restore_image(self, image_id: UUID, album_id: UUID) -> ImageRecord:
        """Mark a single image active in an album and clear its backreference."""

    def trash_album_images(
        self, album_id: UUID, album_name: str, deleted_at: datetime
    ) -> int:
        """Trash every active image of an album and return the count."""

    def restore_album_images(self, album_id: UUID) -> int:
        """Restore every image trashed out of an album and return the count."""

    def list_trashed_images(
        self, uploaded_by: UUID, album_ids: set[UUID]
    ) -> list[ImageRecord]:
        """Return trashed images uploaded by a user or trashed out of albums."""

    def list_trashed_album_images(self, album_id: UUID) -> list[ImageRecord]:
        """Return trashed images whose backreference names an album."""

    def delete_image(self, image_id: UUID) -> None:
        """Remove an image record permanently."""


def normalize_labels(value: object) -> tuple[str, ...]:
    """Normalize tag or person input into an ordered tuple of labels.

    Accepts a comma-delimited string or a list of strings. Blank entries are
    dropped, duplicates are kept.
    """
    if value is None:
        return ()
    if isinstance(value, str):
        parts: list[object] = list(value.split(","))
    elif isinstance(value, (list, tuple)):
        parts = []
        for item in value:
            if isinstance(item, str):
                parts.extend(item.split(","))
            else:
                parts.append(item)
    else:
        raise InvalidInput("Labels must be a string or a list of strings")
    labels = []
    for part in parts:
        if not isinstance(part, str):
            raise InvalidInput("Labels must be a string or a list of strings")
        cleaned = part.strip()
        if cleaned:
            labels.append(cleaned)
    return tuple(labels)


@dataclass
class ImageService:
    """Application service for image operations."""

    repository: ImageRepository
    access: AccessControl
    object_host: ObjectHost
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    remove_asset: AssetRemovalPolicy = log_and_continue

    def upload(  # noqa: PLR0913
        self,
        identity: Identity,
        album_id: UUID,
        data: bytes,
        filename: str,
        content_type: str,
        tags: object = None,
        people: object = None,
        favorite: bool = False,
    ) -> ImageRecord:
        """Upload bytes to the object host and persist a new image."""
        album = self.access.require_access(identity, album_id, AccessLevel.VIEW)
        if not data:
            raise InvalidInput("No image file provided")
        if len(data) > self.max_upload_bytes:
            limit_mb = self.max_upload_bytes // (1024 * 1024)
            raise InvalidInput(f"File size too large. Maximum size is {limit_mb}MB.")
        if not (content_type or "").startswith("image/"):
            raise InvalidInput(
                "Invalid image file format. Supported formats: JPEG, PNG, GIF, WebP."
            )
        tag_labels = normalize_labels(tags)
        person_labels = normalize_labels(people)

        try:
            stored = self.object_host.upload(data, content_type, str(album.id))
            thumbnail_url = self.object_host.derived_url(
                stored.public_id, THUMBNAIL_WIDTH, THUMBNAIL_HEIGHT
            )
        except Exception as exc:
            _logger.exception(
                "Object host upload failed", extra={"album_id": str(album.id)}
            )
            raise UpstreamFailure("Failed to upload image") from exc

        new_image = NewImage(
            album_id=album.id,
            name=filename or stored.public_id,
            url=stored.url,
            thumbnail_url=thumbnail_url,
            tags=tag_labels,
            people=person_labels,
            is_favorite=favorite,
            size=stored.bytes or len(data),
            uploaded_by=identity.user_id,
            metadata=ImageMetadata(
                format=stored.format,
                width=stored.width,
                height=stored.height,
                public_id=stored.public_id,
                bytes=stored.bytes,
            ),
        )
        try:
            image = self.repository.create_image(new_image)
        except Exception:
            # No record will reference the uploaded asset.
            _logger.exception(
                "Image record write failed", extra={"album_id": str(album.id)}
            )
            self.remove_asset(self.object_host, stored.public_id)
            raise
        _logger.info("Image uploaded: image_id=%s album_id=%s", image.id, album.id)
        return image

    def list_images(
        self,
        identity: Identity,
        album_id: UUID,
        tags: object = None,
        favorites_only: bool = False,
    ) -> list[ImageRecord]:
        """Return live images of an album, optionally filtered."""
        album = self.access.require_access(identity, album_id, AccessLevel.VIEW)
        images = self.repository.list_album_images(
            album.id, normalize_labels(tags), favorites_only
        )
        return sorted(images, key=lambda image: image.uploaded_at, reverse=True)

    def get(self, identity: Identity, album_id: UUID, image_id: UUID) -> ImageRecord:
        album = self.access.require_access(identity, album_id, AccessLevel.VIEW)
        return self._require_live_image(album.id, image_id)

    def toggle_favorite(
        self, identity: Identity, album_id: UUID, image_id: UUID, value: bool
    ) -> ImageRecord:
        album = self.access.require_access(identity, album_id, AccessLevel.VIEW)
        image = self._require_live_image(album.id, image_id)
        return self.repository.set_favorite(image.id, bool(value))

    def add_comment(
        self, identity: Identity, album_id: UUID, image_id: UUID, text: str
    ) -> ImageComment:
        """Append a comment by the caller to a live image."""
        cleaned = (text or "").strip()
        if not cleaned:
            raise InvalidInput("Comment is required")
        album = self.access.require_access(identity, album_id, AccessLevel.VIEW)
        image = self._require_live_image(album.id, image_id)
        comment = ImageComment(
            id=uuid4(),
            user_id=identity.user_id,
            user_email=identity.email,
            text=cleaned,
            created_at=datetime.now(tz=UTC),
        )
        self.repository.append_comment(image.id, comment)
        return comment

    def soft_delete(
        self, identity: Identity, album_id: UUID, image_id: UUID
    ) -> ImageRecord:
        """Move an image to the trash. Album owner only."""
        album = self.access.require_image_delete(identity, album_id)
        image = self._require_live_image(album.id, image_id)
        trashed = self.repository.trash_image(
            image.id,
            deleted_at=datetime.now(tz=UTC),
            original_album_id=album.id,
            original_album_name=album.name,
        )
        _logger.info("Image trashed: image_id=%s album_id=%s", image.id, album.id)
        return trashed

    def restore(self, identity: Identity, image_id: UUID) -> ImageRecord:
        """Put a trashed image back into the album it was trashed from."""
        image = self.repository.get_image(image_id)
        if image is None or not image.is_trashed:
            raise NotFound("Deleted image not found")
        if not self.access.can_recover_image(identity, image):
            raise Forbidden("Access denied")
        if image.original_album_id is None:
            raise Conflict("Image has no album to return to")
        album = self.access.albums.get_album(image.original_album_id)
        if album is None:
            raise Conflict("The original album no longer exists")
        if album.is_trashed:
            raise Conflict("The original album is in the trash; restore it instead")
        restored = self.repository.restore_image(image.id, album.id)
        _logger.info("Image restored: image_id=%s album_id=%s", image.id, album.id)
        return restored

    def _require_live_image(self, album_id: UUID, image_id: UUID) -> ImageRecord:
        image = self.repository.get_image(image_id)
        if image is None or image.is_trashed or image.album_id != album_id:
            raise NotFound("Image not found")
        return image
