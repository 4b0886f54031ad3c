"""Image endpoints nested under an album."""

from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from pixshelf.api.deps import get_container, get_identity
from pixshelf.api.schemas import CommentRequest, FavoriteRequest
from pixshelf.api.serializers import comment_payload, image_payload
from pixshelf.containers import AppContainer
from pixshelf.domain.errors import InvalidInput
from pixshelf.domain.users import Identity

router = APIRouter(prefix="/api/albums", tags=["images"])

_TRUTHY = {"true", "1", "yes", "on"}


@router.post("/{album_id}/images", status_code=status.HTTP_201_CREATED)
def upload_image(  # noqa: PLR0913
    album_id: UUID,
    file: UploadFile | None = File(default=None),
    tags: list[str] | None = Form(default=None),
    person: list[str] | None = Form(default=None),
    is_favorite: str | None = Form(default=None, alias="isFavorite"),
    identity: Identity = Depends(get_identity),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Upload an image file into an album."""
    # Read at most one byte past the limit.
    limit = container.image_service.max_upload_bytes + 1
    data = file.file.read(limit) if file is not None else b""
    image = container.image_service.upload(
        identity,
        album_id,
        data=data,
        filename=(file.filename if file is not None else None) or "",
        content_type=(file.content_type if file is not None else None) or "",
        tags=tags,
        people=person,
        favorite=(is_favorite or "").strip().lower() in _TRUTHY,
    )
    return {"success": True, "image": image_payload(image)}


@router.get("/{album_id}/images")
def list_images(
    album_id: UUID,
    tags: list[str] | None = Query(default=None),
    favorites: bool = False,
    identity: Identity = Depends(get_identity),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """List live images, optionally filtered by tag or favorite flag."""
    images = container.image_service.list_images(
        identity, album_id, tags=tags, favorites_only=favorites
    )
    return {"success": True, "images": [image_payload(image) for image in images]}


@router.get("/{album_id}/images/favorites")
def list_favorite_images(
    album_id: UUID,
    identity: Identity = Depends(get_identity),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    images = container.image_service.list_images(
        identity, album_id, favorites_only=True
    )
    return {"success": True, "images": [image_payload(image) for image in images]}


@router.get("/{album_id}/images/{image_id}")
def get_image(
    album_id: UUID,
    image_id: UUID,
    identity: Identity = Depends(get_identity),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    image = container.image_service.get(identity, album_id, image_id)
    return {"success": True, "image": image_payload(image)}


@router.put("/{album_id}/images/{image_id}/favorite")
def set_favorite(
    album_id: UUID,
    image_id: UUID,
    body: FavoriteRequest,
    identity: Identity = Depends(get_identity),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    if body.is_favorite is None:
        raise InvalidInput("isFavorite must be a boolean")
    image = container.image_service.toggle_favorite(
        identity, album_id, image_id, body.is_favorite
    )
    return {
        "success": True,
        "image": {"imageId": str(image.id), "isFavorite": image.is_favorite},
    }


@router.post(
    "/{album_id}/images/{image_id}/comments", status_code=status.HTTP_201_CREATED
)
def add_comment(
    album_id: UUID,
    image_id: UUID,
    body: CommentRequest,
    identity: Identity = Depends(get_identity),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    comment = container.image_service.add_comment(
        identity, album_id, image_id, body.text or ""
    )
    return {"success": True, "comment": comment_payload(comment)}


@router.delete("/{album_id}/images/{image_id}")
def delete_image(
    album_id: UUID,
    image_id: UUID,
    identity: Identity = Depends(get_identity),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Move an image to the trash. Album owner only."""
    container.image_service.soft_delete(identity, album_id, image_id)
    return {"success": True, "message": "Image moved to trash"}
