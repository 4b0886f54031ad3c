"""Album access control shared by every lifecycle operation.

Owners hold implicit ``EDIT`` access that is never stored in the share
list. Collaborators hold whatever level their share entry grants. Removing
content is stricter than adding it: only the owner may soft-delete images,
regardless of a collaborator's level.
"""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from pixshelf.domain.albums import AccessLevel, AlbumRecord
from pixshelf.domain.errors import Forbidden, NotFound
from pixshelf.domain.images import ImageRecord
from pixshelf.domain.users import Identity


class AlbumLookup(Protocol):
    """Minimal album lookup needed for authorization."""

    def get_album(self, album_id: UUID) -> AlbumRecord | None:
        """Return an album in any lifecycle state, if present."""


def can_access(identity: Identity, album: AlbumRecord) -> AccessLevel:
    """Resolve the caller's access level on an album."""
    if album.owner_id == identity.user_id:
        return AccessLevel.EDIT
    entry = album.share_for(identity.email)
    if entry is None:
        return AccessLevel.NONE
    return entry.access_level


@dataclass
class AccessControl:
    """Gatekeeper that loads albums and enforces minimum access levels."""

    albums: AlbumLookup

    def require_access(
        self, identity: Identity, album_id: UUID, min_level: AccessLevel
    ) -> AlbumRecord:
        """Return a live album the caller may act on at ``min_level``."""
        album = self.albums.get_album(album_id)
        if album is None or album.is_trashed:
            raise NotFound("Album not found")
        if can_access(identity, album) < min_level:
            raise Forbidden("Access denied to this album")
        return album

    def require_owner(self, identity: Identity, album_id: UUID) -> AlbumRecord:
        """Return a live album owned by the caller."""
        album = self.require_access(identity, album_id, AccessLevel.VIEW)
        if album.owner_id != identity.user_id:
            raise Forbidden("Only the album owner can do that")
        return album

    def require_image_delete(self, identity: Identity, album_id: UUID) -> AlbumRecord:
        """Return the album when the caller may remove images from it."""
        album = self.require_access(identity, album_id, AccessLevel.VIEW)
        if album.owner_id != identity.user_id:
            raise Forbidden("Access denied. Only album owner can delete images.")
        return album

    def require_trashed_owner(
        self, identity: Identity, album_id: UUID
    ) -> AlbumRecord:
        """Return a trashed album owned by the caller."""
        album = self.albums.get_album(album_id)
        if (
            album is None
            or not album.is_trashed
            or album.owner_id != identity.user_id
        ):
            raise NotFound("Deleted album not found")
        return album

    def can_recover_image(self, identity: Identity, image: ImageRecord) -> bool:
        """Return true when the caller may restore or purge a trashed image."""
        if image.uploaded_by == identity.user_id:
            return True
        if image.original_album_id is None:
            return False
        album = self.albums.get_album(image.original_album_id)
        if album is None:
            return False
        return can_access(identity, album) >= AccessLevel.VIEW
