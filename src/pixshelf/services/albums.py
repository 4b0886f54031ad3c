"""Album lifecycle: creation, sharing, soft delete and restore."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from pixshelf.domain.albums import AccessLevel, AlbumRecord, LifecycleState, ShareEntry
from pixshelf.domain.errors import (
    InvalidInput,
    NotFound,
    PartialFailure,
    UnknownRecipients,
)
from pixshelf.domain.users import Identity, normalize_email
from pixshelf.services.access import AccessControl
from pixshelf.services.images import ImageRepository
from pixshelf.services.users import UserService

_logger = logging.getLogger(__name__)


class AlbumRepository(Protocol):
    """Persistence interface for albums."""

    def get_album(self, album_id: UUID) -> AlbumRecord | None:
        """Return an album in any lifecycle state, if present."""

    def create_album(
        self, owner_id: UUID, name: str, description: str | None
    ) -> AlbumRecord:
        """Create an active album with an empty share list."""

    def update_album(self, album_id: UUID, payload: dict[str, object]) -> AlbumRecord:
        """Update name/description fields and return the album."""

    def set_shared_with(
        self, album_id: UUID, entries: tuple[ShareEntry, ...]
    ) -> AlbumRecord:
        """Replace the share list and return the album."""

    def set_state(
        self, album_id: UUID, state: LifecycleState, deleted_at: datetime | None
    ) -> AlbumRecord:
        """Move the album to a lifecycle state and return it."""

    def list_owned(self, owner_id: UUID) -> list[AlbumRecord]:
        """Return albums owned by a user, in any state."""

    def list_shared_with(self, email: str) -> list[AlbumRecord]:
        """Return albums whose share list contains an email, in any state."""

    def list_trashed_owned(self, owner_id: UUID) -> list[AlbumRecord]:
        """Return trashed albums owned by a user."""

    def delete_album(self, album_id: UUID) -> None:
        """Remove an album record permanently."""


@dataclass
class AlbumService:
    """Application service for album operations."""

    repository: AlbumRepository
    image_repository: ImageRepository
    access: AccessControl
    user_service: UserService

    def create(
        self, identity: Identity, name: str, description: str | None = None
    ) -> AlbumRecord:
        """Create a new album owned by the caller."""
        cleaned = (name or "").strip()
        if not cleaned:
            raise InvalidInput("Album name is required")
        album = self.repository.create_album(
            identity.user_id, cleaned, _clean_description(description)
        )
        _logger.info("Album created: album_id=%s owner=%s", album.id, identity.user_id)
        return album

    def get(self, identity: Identity, album_id: UUID) -> AlbumRecord:
        return self.access.require_access(identity, album_id, AccessLevel.VIEW)

    def update(
        self,
        identity: Identity,
        album_id: UUID,
        name: str | None = None,
        description: str | None = None,
    ) -> AlbumRecord:
        """Rename or re-describe an album. Owner only."""
        album = self.access.require_owner(identity, album_id)
        payload: dict[str, object] = {}
        if name is not None:
            cleaned = name.strip()
            if not cleaned:
                raise InvalidInput("Album name cannot be empty")
            payload["name"] = cleaned
        if description is not None:
            payload["description"] = _clean_description(description)
        if not payload:
            return album
        return self.repository.update_album(album.id, payload)

    def share(
        self,
        identity: Identity,
        album_id: UUID,
        emails: object,
        access_level: AccessLevel = AccessLevel.VIEW,
    ) -> AlbumRecord:
        """Share an album with registered users, all or nothing."""
        if not isinstance(emails, list) or not all(isinstance(e, str) for e in emails):
            raise InvalidInput("Emails array is required")
        if access_level is AccessLevel.NONE:
            raise InvalidInput("Access level must be view or edit")
        album = self.access.require_owner(identity, album_id)

        requested = list(dict.fromkeys(normalize_email(e) for e in emails if e.strip()))
        existing = self.user_service.find_existing_emails(requested)
        missing = [email for email in requested if email not in existing]
        if missing:
            raise UnknownRecipients(missing)

        owner_email = normalize_email(identity.email)
        entries = list(album.shared_with)
        for email in requested:
            if email == owner_email or album.share_for(email) is not None:
                continue
            entries.append(ShareEntry(email=email, access_level=access_level))
        if len(entries) == len(album.shared_with):
            return album
        _logger.info(
            "Album shared: album_id=%s added=%s",
            album.id,
            len(entries) - len(album.shared_with),
        )
        return self.repository.set_shared_with(album.id, tuple(entries))

    def set_access_level(
        self, identity: Identity, album_id: UUID, email: str, level: AccessLevel
    ) -> AlbumRecord:
        """Change the level granted to an existing collaborator."""
        if level is AccessLevel.NONE:
            raise InvalidInput("Access level must be view or edit")
        album = self.access.require_owner(identity, album_id)
        target = normalize_email(email)
        if album.share_for(target) is None:
            raise NotFound("Album is not shared with that email")
        entries = tuple(
            ShareEntry(email=entry.email, access_level=level)
            if entry.email == target
            else entry
            for entry in album.shared_with
        )
        return self.repository.set_shared_with(album.id, entries)

    def unshare(self, identity: Identity, album_id: UUID, email: str) -> AlbumRecord:
        """Remove a collaborator from the share list."""
        album = self.access.require_owner(identity, album_id)
        target = normalize_email(email)
        if album.share_for(target) is None:
            return album
        entries = tuple(e for e in album.shared_with if e.email != target)
        return self.repository.set_shared_with(album.id, entries)

    def soft_delete(self, identity: Identity, album_id: UUID) -> int:
        """Move an album and its active images to the trash.

        Images are trashed first and the album last, so a failed run leaves
        the album active and can be repeated. Returns the number of images
        moved to the trash.
        """
        album = self.access.require_owner(identity, album_id)
        deleted_at = datetime.now(tz=UTC)
        try:
            cascaded = self.image_repository.trash_album_images(
                album.id, album.name, deleted_at
            )
            self.repository.set_state(album.id, LifecycleState.TRASHED, deleted_at)
        except Exception as exc:
            _logger.exception(
                "Album soft delete cascade failed", extra={"album_id": str(album.id)}
            )
            raise PartialFailure("Soft delete", album.id, str(exc)) from exc
        _logger.info("Album trashed: album_id=%s images=%s", album.id, cascaded)
        return cascaded

    def restore(self, identity: Identity, album_id: UUID) -> int:
        """Restore a trashed album and every image trashed out of it.

        The album is reactivated first. If the image step then fails, the
        remaining images stay in the trash with their backreference and can be
        restored one by one into the live album. Returns the number of images
        restored.
        """
        album = self.access.require_trashed_owner(identity, album_id)
        try:
            self.repository.set_state(album.id, LifecycleState.ACTIVE, None)
        except Exception as exc:
            _logger.exception(
                "Album restore failed", extra={"album_id": str(album.id)}
            )
            raise PartialFailure("Restore", album.id, str(exc)) from exc
        try:
            restored = self.image_repository.restore_album_images(album.id)
        except Exception as exc:
            _logger.exception(
                "Album restore cascade failed", extra={"album_id": str(album.id)}
            )
            raise PartialFailure(
                "Restore", album.id, str(exc), retryable=False
            ) from exc
        _logger.info("Album restored: album_id=%s images=%s", album.id, restored)
        return restored

    def list_albums(self, identity: Identity) -> list[AlbumRecord]:
        """Return live albums the caller owns or was shared on."""
        albums: dict[UUID, AlbumRecord] = {}
        for album in self.repository.list_owned(identity.user_id):
            albums[album.id] = album
        for album in self.repository.list_shared_with(normalize_email(identity.email)):
            albums.setdefault(album.id, album)
        live = [album for album in albums.values() if not album.is_trashed]
        return sorted(live, key=lambda album: album.created_at, reverse=True)


def _clean_description(description: str | None) -> str | None:
    if description is None:
        return None
    cleaned = description.strip()
    return cleaned or None
