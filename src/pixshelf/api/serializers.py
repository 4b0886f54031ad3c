"""JSON payload builders for domain records."""

from datetime import datetime

from pixshelf.domain.albums import AlbumRecord, ShareEntry
from pixshelf.domain.images import ImageComment, ImageRecord
from pixshelf.domain.trash import PurgeSummary, TrashItem, TrashKind
from pixshelf.domain.users import UserRecord


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def user_payload(user: UserRecord) -> dict[str, object]:
    return {
        "userId": str(user.id),
        "email": user.email,
        "name": user.name,
        "avatar": user.avatar_url,
        "emailVerified": user.email_verified,
    }


def share_payload(entry: ShareEntry) -> dict[str, str]:
    return {"email": entry.email, "accessLevel": entry.access_level.label}


def album_payload(album: AlbumRecord) -> dict[str, object]:
    return {
        "albumId": str(album.id),
        "name": album.name,
        "description": album.description,
        "ownerId": str(album.owner_id),
        "sharedWith": [share_payload(entry) for entry in album.shared_with],
        "createdAt": _iso(album.created_at),
        "updatedAt": _iso(album.updated_at),
    }


def comment_payload(comment: ImageComment) -> dict[str, object]:
    return {
        "commentId": str(comment.id),
        "userId": str(comment.user_id),
        "userEmail": comment.user_email,
        "text": comment.text,
        "createdAt": _iso(comment.created_at),
    }


def image_payload(image: ImageRecord) -> dict[str, object]:
    """Serialize a live image the way album listings present it."""
    return {
        "imageId": str(image.id),
        "albumId": str(image.album_id),
        "name": image.name,
        "url": image.url,
        "thumbnailUrl": image.thumbnail_url,
        "tags": list(image.tags),
        "people": list(image.people),
        "isFavorite": image.is_favorite,
        "comments": [comment_payload(comment) for comment in image.comments],
        "size": image.size,
        "uploadedBy": str(image.uploaded_by),
        "uploadedAt": _iso(image.uploaded_at),
        "metadata": {
            "format": image.metadata.format,
            "width": image.metadata.width,
            "height": image.metadata.height,
            "publicId": image.metadata.public_id,
            "bytes": image.metadata.bytes,
        },
    }


def trash_item_payload(item: TrashItem) -> dict[str, object]:
    payload: dict[str, object] = {
        "id": str(item.id),
        "type": item.kind.value,
        "name": item.name,
        "deletedAt": _iso(item.deleted_at),
    }
    if item.kind is TrashKind.IMAGE:
        payload.update(
            {
                "thumbnailUrl": item.thumbnail_url,
                "size": item.size,
                "originalAlbumId": (
                    str(item.original_album_id) if item.original_album_id else None
                ),
                "originalAlbum": item.original_album_name,
                "tags": list(item.tags),
                "isFavorite": item.is_favorite,
            }
        )
    else:
        payload["itemCount"] = item.item_count
    return payload


def purge_payload(summary: PurgeSummary) -> dict[str, int]:
    return {
        "deletedImages": summary.images,
        "deletedAlbums": summary.albums,
        "assetFailures": summary.asset_failures,
    }
