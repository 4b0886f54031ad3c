"""Trash endpoints: listing, restoring and permanent deletion."""

from uuid import UUID

from fastapi import APIRouter, Depends

from pixshelf.api.deps import get_container, get_identity
from pixshelf.api.serializers import image_payload, purge_payload, trash_item_payload
from pixshelf.containers import AppContainer
from pixshelf.domain.trash import TrashKind
from pixshelf.domain.users import Identity

router = APIRouter(prefix="/api/trash", tags=["trash"])


@router.get("")
def list_trash(
    identity: Identity = Depends(get_identity),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Return trashed images and albums, most recently deleted first."""
    items = container.trash_service.list_trash(identity)
    return {"success": True, "items": [trash_item_payload(item) for item in items]}


@router.post("/albums/{album_id}/restore")
def restore_album(
    album_id: UUID,
    identity: Identity = Depends(get_identity),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    restored = container.album_service.restore(identity, album_id)
    return {
        "success": True,
        "message": "Album and all images restored successfully",
        "restoredImages": restored,
    }


@router.post("/images/{image_id}/restore")
def restore_image(
    image_id: UUID,
    identity: Identity = Depends(get_identity),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    image = container.image_service.restore(identity, image_id)
    return {
        "success": True,
        "message": "Image restored successfully",
        "image": image_payload(image),
    }


@router.delete("/empty")
def empty_trash(
    identity: Identity = Depends(get_identity),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Permanently delete everything in the caller's trash."""
    summary = container.trash_service.empty(identity)
    return {
        "success": True,
        "message": "Trash emptied successfully",
        **purge_payload(summary),
    }


@router.delete("/albums/{album_id}")
def purge_album(
    album_id: UUID,
    identity: Identity = Depends(get_identity),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    summary = container.trash_service.purge(identity, album_id, TrashKind.ALBUM)
    return {
        "success": True,
        "message": "Album and all images permanently deleted",
        **purge_payload(summary),
    }


@router.delete("/images/{image_id}")
def purge_image(
    image_id: UUID,
    identity: Identity = Depends(get_identity),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    summary = container.trash_service.purge(identity, image_id, TrashKind.IMAGE)
    return {
        "success": True,
        "message": "Image permanently deleted",
        **purge_payload(summary),
    }
