"""Trash aggregation and permanent purging."""

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from pixshelf.domain.albums import AlbumRecord
from pixshelf.domain.errors import Forbidden, InvalidInput, NotFound
from pixshelf.domain.images import ImageRecord
from pixshelf.domain.trash import PurgeSummary, TrashItem, TrashKind
from pixshelf.domain.users import Identity, normalize_email
from pixshelf.services.access import AccessControl
from pixshelf.services.albums import AlbumRepository
from pixshelf.services.images import (
    AssetRemovalPolicy,
    ImageRepository,
    ObjectHost,
    log_and_continue,
)

_logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=UTC)


@dataclass
class TrashService:
    """Lists trashed items across albums and images and purges them."""

    album_repository: AlbumRepository
    image_repository: ImageRepository
    access: AccessControl
    object_host: ObjectHost
    remove_asset: AssetRemovalPolicy = log_and_continue

    def list_trash(self, identity: Identity) -> list[TrashItem]:
        """Return trashed images and albums visible to the caller."""
        images = self._visible_trashed_images(identity)
        albums = self.album_repository.list_trashed_owned(identity.user_id)
        counts = Counter(image.original_album_id for image in images)

        items = [_image_item(image) for image in images]
        items.extend(_album_item(album, counts[album.id]) for album in albums)
        return sorted(items, key=lambda item: item.deleted_at or _EPOCH, reverse=True)

    def purge(self, identity: Identity, item_id: UUID, kind: TrashKind) -> PurgeSummary:
        """Permanently remove one trashed image or album."""
        if kind is TrashKind.IMAGE:
            return self.purge_image(identity, item_id)
        if kind is TrashKind.ALBUM:
            return self.purge_album(identity, item_id)
        raise InvalidInput(f"Unknown trash item kind: {kind}")

    def purge_image(self, identity: Identity, image_id: UUID) -> PurgeSummary:
        image = self.image_repository.get_image(image_id)
        if image is None or not image.is_trashed:
            raise NotFound("Deleted image not found")
        if not self.access.can_recover_image(identity, image):
            raise Forbidden("Access denied")
        return self._remove_image(image)

    def purge_album(self, identity: Identity, album_id: UUID) -> PurgeSummary:
        album = self.access.require_trashed_owner(identity, album_id)
        return self._remove_album(album)

    def empty(self, identity: Identity) -> PurgeSummary:
        """Purge everything in the caller's trash, one item at a time."""
        summary = PurgeSummary()
        for image in self._visible_trashed_images(identity):
            summary += self._remove_image(image)
        for album in self.album_repository.list_trashed_owned(identity.user_id):
            summary += self._remove_album(album)
        _logger.info(
            "Trash emptied: user_id=%s images=%s albums=%s asset_failures=%s",
            identity.user_id,
            summary.images,
            summary.albums,
            summary.asset_failures,
        )
        return summary

    def _visible_trashed_images(self, identity: Identity) -> list[ImageRecord]:
        owned = self.album_repository.list_owned(identity.user_id)
        shared = self.album_repository.list_shared_with(normalize_email(identity.email))
        album_ids = {album.id for album in [*owned, *shared]}
        return self.image_repository.list_trashed_images(identity.user_id, album_ids)

    def _remove_album(self, album: AlbumRecord) -> PurgeSummary:
        summary = PurgeSummary()
        for image in self.image_repository.list_trashed_album_images(album.id):
            summary += self._remove_image(image)
        self.album_repository.delete_album(album.id)
        _logger.info("Album purged: album_id=%s", album.id)
        return summary + PurgeSummary(albums=1)

    def _remove_image(self, image: ImageRecord) -> PurgeSummary:
        failures = 0
        public_id = image.metadata.public_id
        if public_id and not self.remove_asset(self.object_host, public_id):
            failures = 1
        self.image_repository.delete_image(image.id)
        _logger.info("Image purged: image_id=%s", image.id)
        return PurgeSummary(images=1, asset_failures=failures)


def _image_item(image: ImageRecord) -> TrashItem:
    return TrashItem(
        id=image.id,
        kind=TrashKind.IMAGE,
        name=image.name,
        deleted_at=image.deleted_at or _EPOCH,
        thumbnail_url=image.thumbnail_url,
        size=image.size,
        original_album_id=image.original_album_id,
        original_album_name=image.original_album_name,
        tags=image.tags,
        is_favorite=image.is_favorite,
    )


def _album_item(album: AlbumRecord, item_count: int) -> TrashItem:
    return TrashItem(
        id=album.id,
        kind=TrashKind.ALBUM,
        name=album.name,
        deleted_at=album.deleted_at or _EPOCH,
        item_count=item_count,
    )
