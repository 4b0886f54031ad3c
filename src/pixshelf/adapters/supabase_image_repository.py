"""Supabase implementation for images."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from pixshelf.domain.albums import LifecycleState
from pixshelf.domain.images import ImageComment, ImageMetadata, ImageRecord, NewImage
from pixshelf.services.images import ImageRepository

_ACTIVE = LifecycleState.ACTIVE.value
_TRASHED = LifecycleState.TRASHED.value


@dataclass
class SupabaseImageRepository(ImageRepository):
    """Supabase-backed repository for image records."""

    client: Client

    def create_image(self, image: NewImage) -> ImageRecord:
        """Persist a new active image and return it."""
        response = (
            self.client.table("images")
            .insert(
                {
                    "album_id": str(image.album_id),
                    "name": image.name,
                    "original_name": image.name,
                    "url": image.url,
                    "thumbnail_url": image.thumbnail_url,
                    "tags": list(image.tags),
                    "people": list(image.people),
                    "is_favorite": image.is_favorite,
                    "comments": [],
                    "size": image.size,
                    "uploaded_by": str(image.uploaded_by),
                    "uploaded_at": datetime.now(tz=UTC).isoformat(),
                    "metadata": {
                        "format": image.metadata.format,
                        "width": image.metadata.width,
                        "height": image.metadata.height,
                        "public_id": image.metadata.public_id,
                        "bytes": image.metadata.bytes,
                    },
                    "state": _ACTIVE,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create image")
        return _parse_image(response.data[0])

    def get_image(self, image_id: UUID) -> ImageRecord | None:
        """Return an image in any lifecycle state, if present."""
        response = (
            self.client.table("images")
            .select("*")
            .eq("id", str(image_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_image(response.data[0])

    def list_album_images(
        self, album_id: UUID, tags: tuple[str, ...], favorites_only: bool
    ) -> list[ImageRecord]:
        """Return active images of an album, newest upload first."""
        query = (
            self.client.table("images")
            .select("*")
            .eq("album_id", str(album_id))
            .eq("state", _ACTIVE)
        )
        if favorites_only:
            query = query.eq("is_favorite", True)
        if tags:
            query = query.overlaps("tags", list(tags))
        response = query.order("uploaded_at", desc=True).execute()
        return [_parse_image(row) for row in response.data or []]

    def set_favorite(self, image_id: UUID, value: bool) -> ImageRecord:
        """Set the favorite flag and return the image."""
        return self._update(image_id, {"is_favorite": value})

    def append_comment(self, image_id: UUID, comment: ImageComment) -> ImageRecord:
        """Append a comment to the image's comment list."""
        response = (
            self.client.table("images")
            .select("comments")
            .eq("id", str(image_id))
            .limit(1)
            .execute()
        )
        current: list[object] = []
        if response.data:
            current = list(response.data[0].get("comments") or [])
        current.append(_serialize_comment(comment))
        return self._update(image_id, {"comments": current})

    def trash_image(
        self,
        image_id: UUID,
        deleted_at: datetime,
        original_album_id: UUID,
        original_album_name: str,
    ) -> ImageRecord:
        """Mark a single image trashed with its backreference."""
        return self._update(
            image_id,
            {
                "state": _TRASHED,
                "deleted_at": deleted_at.isoformat(),
                "original_album_id": str(original_album_id),
                "original_album_name": original_album_name,
            },
        )

    def restore_image(self, image_id: UUID, album_id: UUID) -> ImageRecord:
        """Mark a single image active in an album and clear its backreference."""
        return self._update(image_id, _restored_payload(album_id))

    def trash_album_images(
        self, album_id: UUID, album_name: str, deleted_at: datetime
    ) -> int:
        """Trash every active image of an album."""
        response = (
            self.client.table("images")
            .update(
                {
                    "state": _TRASHED,
                    "deleted_at": deleted_at.isoformat(),
                    "original_album_id": str(album_id),
                    "original_album_name": album_name,
                }
            )
            .eq("album_id", str(album_id))
            .eq("state", _ACTIVE)
            .execute()
        )
        return len(response.data or [])

    def restore_album_images(self, album_id: UUID) -> int:
        """Restore every image trashed out of an album."""
        response = (
            self.client.table("images")
            .update(_restored_payload(album_id))
            .eq("original_album_id", str(album_id))
            .eq("state", _TRASHED)
            .execute()
        )
        return len(response.data or [])

    def list_trashed_images(
        self, uploaded_by: UUID, album_ids: set[UUID]
    ) -> list[ImageRecord]:
        """Return trashed images uploaded by a user or trashed out of albums."""
        own_response = (
            self.client.table("images")
            .select("*")
            .eq("state", _TRASHED)
            .eq("uploaded_by", str(uploaded_by))
            .order("deleted_at", desc=True)
            .execute()
        )
        rows = list(own_response.data or [])
        if album_ids:
            album_response = (
                self.client.table("images")
                .select("*")
                .eq("state", _TRASHED)
                .in_("original_album_id", sorted(str(a) for a in album_ids))
                .order("deleted_at", desc=True)
                .execute()
            )
            rows.extend(album_response.data or [])

        images: dict[str, ImageRecord] = {}
        for row in rows:
            images.setdefault(str(row["id"]), _parse_image(row))
        return list(images.values())

    def list_trashed_album_images(self, album_id: UUID) -> list[ImageRecord]:
        """Return trashed images whose backreference names an album."""
        response = (
            self.client.table("images")
            .select("*")
            .eq("original_album_id", str(album_id))
            .eq("state", _TRASHED)
            .execute()
        )
        return [_parse_image(row) for row in response.data or []]

    def delete_image(self, image_id: UUID) -> None:
        """Remove an image row."""
        self.client.table("images").delete().eq("id", str(image_id)).execute()

    def _update(self, image_id: UUID, payload: dict[str, object]) -> ImageRecord:
        response = (
            self.client.table("images")
            .update(payload)
            .eq("id", str(image_id))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update image")
        return _parse_image(response.data[0])


def _restored_payload(album_id: UUID) -> dict[str, object]:
    return {
        "state": _ACTIVE,
        "album_id": str(album_id),
        "deleted_at": None,
        "original_album_id": None,
        "original_album_name": None,
    }


def _serialize_comment(comment: ImageComment) -> dict[str, str]:
    return {
        "id": str(comment.id),
        "user_id": str(comment.user_id),
        "user_email": comment.user_email,
        "text": comment.text,
        "created_at": comment.created_at.isoformat(),
    }


def _parse_timestamp(raw: object) -> datetime | None:
    if isinstance(raw, str) and raw:
        return datetime.fromisoformat(raw)
    return None


def _parse_comment(raw: dict[str, object]) -> ImageComment:
    return ImageComment(
        id=UUID(str(raw["id"])),
        user_id=UUID(str(raw["user_id"])),
        user_email=str(raw.get("user_email", "")),
        text=str(raw.get("text", "")),
        created_at=_parse_timestamp(raw.get("created_at")) or datetime.now(tz=UTC),
    )


def _optional_uuid(raw: object) -> UUID | None:
    return UUID(str(raw)) if raw else None


def _parse_image(row: dict[str, object]) -> ImageRecord:
    """Parse an images row into a domain model."""
    metadata = row.get("metadata") or {}
    return ImageRecord(
        id=UUID(str(row["id"])),
        album_id=UUID(str(row["album_id"])),
        name=str(row.get("name", "")),
        original_name=str(row.get("original_name") or row.get("name", "")),
        url=str(row.get("url", "")),
        thumbnail_url=row.get("thumbnail_url"),
        tags=tuple(row.get("tags") or ()),
        people=tuple(row.get("people") or ()),
        is_favorite=bool(row.get("is_favorite", False)),
        comments=tuple(
            _parse_comment(comment)
            for comment in row.get("comments") or []
            if isinstance(comment, dict)
        ),
        size=int(row.get("size") or 0),
        uploaded_by=UUID(str(row["uploaded_by"])),
        uploaded_at=_parse_timestamp(row.get("uploaded_at")) or datetime.now(tz=UTC),
        metadata=ImageMetadata(
            format=metadata.get("format"),
            width=metadata.get("width"),
            height=metadata.get("height"),
            public_id=metadata.get("public_id"),
            bytes=metadata.get("bytes"),
        ),
        state=LifecycleState(row.get("state") or _ACTIVE),
        deleted_at=_parse_timestamp(row.get("deleted_at")),
        original_album_id=_optional_uuid(row.get("original_album_id")),
        original_album_name=row.get("original_album_name"),
    )
