"""Album endpoints: CRUD, sharing and soft delete."""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from pixshelf.api.deps import get_container, get_identity
from pixshelf.api.schemas import (
    AccessLevelRequest,
    AlbumCreateRequest,
    AlbumUpdateRequest,
    ShareRequest,
)
from pixshelf.api.serializers import album_payload, share_payload
from pixshelf.containers import AppContainer
from pixshelf.domain.albums import AccessLevel
from pixshelf.domain.errors import InvalidInput
from pixshelf.domain.users import Identity

router = APIRouter(prefix="/api/albums", tags=["albums"])


def parse_access_level(
    raw: str | None, default: AccessLevel | None = None
) -> AccessLevel:
    """Parse a requested share level, rejecting anything but view/edit."""
    if raw is None and default is not None:
        return default
    try:
        return AccessLevel.parse(raw or "")
    except ValueError as exc:
        raise InvalidInput("Access level must be view or edit") from exc


@router.post("", status_code=status.HTTP_201_CREATED)
def create_album(
    body: AlbumCreateRequest,
    identity: Identity = Depends(get_identity),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    album = container.album_service.create(
        identity, body.name or "", body.description
    )
    return {"success": True, "album": album_payload(album)}


@router.get("")
def list_albums(
    identity: Identity = Depends(get_identity),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Return live albums owned by or shared with the caller."""
    albums = container.album_service.list_albums(identity)
    return {"success": True, "albums": [album_payload(album) for album in albums]}


@router.get("/{album_id}")
def get_album(
    album_id: UUID,
    identity: Identity = Depends(get_identity),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    album = container.album_service.get(identity, album_id)
    return {"success": True, "album": album_payload(album)}


@router.put("/{album_id}")
def update_album(
    album_id: UUID,
    body: AlbumUpdateRequest,
    identity: Identity = Depends(get_identity),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    album = container.album_service.update(
        identity, album_id, name=body.name, description=body.description
    )
    return {
        "success": True,
        "message": "Album updated successfully",
        "album": album_payload(album),
    }


@router.post("/{album_id}/share")
def share_album(
    album_id: UUID,
    body: ShareRequest,
    identity: Identity = Depends(get_identity),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Share an album with registered users by email."""
    level = parse_access_level(body.access_level, default=AccessLevel.VIEW)
    album = container.album_service.share(identity, album_id, body.emails, level)
    return {
        "success": True,
        "message": "Album shared successfully",
        "sharedWith": [share_payload(entry) for entry in album.shared_with],
    }


@router.put("/{album_id}/share/{email}")
def change_access_level(
    album_id: UUID,
    email: str,
    body: AccessLevelRequest,
    identity: Identity = Depends(get_identity),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    level = parse_access_level(body.access_level)
    album = container.album_service.set_access_level(
        identity, album_id, email, level
    )
    return {
        "success": True,
        "message": "Access level updated",
        "sharedWith": [share_payload(entry) for entry in album.shared_with],
    }


@router.delete("/{album_id}/share/{email}")
def unshare_album(
    album_id: UUID,
    email: str,
    identity: Identity = Depends(get_identity),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    album = container.album_service.unshare(identity, album_id, email)
    return {
        "success": True,
        "message": "Album access removed",
        "sharedWith": [share_payload(entry) for entry in album.shared_with],
    }


@router.delete("/{album_id}")
def delete_album(
    album_id: UUID,
    identity: Identity = Depends(get_identity),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Move an album and its images to the trash."""
    trashed = container.album_service.soft_delete(identity, album_id)
    return {
        "success": True,
        "message": "Album and all associated images moved to trash",
        "trashedImages": trashed,
    }
