"""Supabase implementation for albums."""

import json
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from pixshelf.domain.albums import AccessLevel, AlbumRecord, LifecycleState, ShareEntry
from pixshelf.services.albums import AlbumRepository


@dataclass
class SupabaseAlbumRepository(AlbumRepository):
    """Supabase-backed repository for albums and their share lists."""

    client: Client

    def get_album(self, album_id: UUID) -> AlbumRecord | None:
        """Return an album in any lifecycle state, if present."""
        response = (
            self.client.table("albums")
            .select("*")
            .eq("id", str(album_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_album(response.data[0])

    def create_album(
        self, owner_id: UUID, name: str, description: str | None
    ) -> AlbumRecord:
        """Create an active album with an empty share list."""
        response = (
            self.client.table("albums")
            .insert(
                {
                    "owner_id": str(owner_id),
                    "name": name,
                    "description": description,
                    "shared_with": [],
                    "state": LifecycleState.ACTIVE.value,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create album")
        return _parse_album(response.data[0])

    def update_album(self, album_id: UUID, payload: dict[str, object]) -> AlbumRecord:
        """Update name/description fields and return the album."""
        return self._update(album_id, payload, "Failed to update album")

    def set_shared_with(
        self, album_id: UUID, entries: tuple[ShareEntry, ...]
    ) -> AlbumRecord:
        """Replace the share list and return the album."""
        return self._update(
            album_id,
            {"shared_with": [_serialize_share(entry) for entry in entries]},
            "Failed to update album sharing",
        )

    def set_state(
        self, album_id: UUID, state: LifecycleState, deleted_at: datetime | None
    ) -> AlbumRecord:
        """Move the album to a lifecycle state and return it."""
        return self._update(
            album_id,
            {
                "state": state.value,
                "deleted_at": deleted_at.isoformat() if deleted_at else None,
            },
            "Failed to update album state",
        )

    def list_owned(self, owner_id: UUID) -> list[AlbumRecord]:
        """Return albums owned by a user, newest first."""
        response = (
            self.client.table("albums")
            .select("*")
            .eq("owner_id", str(owner_id))
            .order("created_at", desc=True)
            .execute()
        )
        return [_parse_album(row) for row in response.data or []]

    def list_shared_with(self, email: str) -> list[AlbumRecord]:
        """Return albums whose share list contains the email, newest first."""
        response = (
            self.client.table("albums")
            .select("*")
            .contains("shared_with", json.dumps([{"email": email.strip().lower()}]))
            .order("created_at", desc=True)
            .execute()
        )
        return [_parse_album(row) for row in response.data or []]

    def list_trashed_owned(self, owner_id: UUID) -> list[AlbumRecord]:
        """Return trashed albums owned by a user, most recently deleted first."""
        response = (
            self.client.table("albums")
            .select("*")
            .eq("owner_id", str(owner_id))
            .eq("state", LifecycleState.TRASHED.value)
            .order("deleted_at", desc=True)
            .execute()
        )
        return [_parse_album(row) for row in response.data or []]

    def delete_album(self, album_id: UUID) -> None:
        """Remove an album row."""
        self.client.table("albums").delete().eq("id", str(album_id)).execute()

    def _update(
        self, album_id: UUID, payload: dict[str, object], error: str
    ) -> AlbumRecord:
        response = (
            self.client.table("albums")
            .update({**payload, "updated_at": datetime.now(tz=UTC).isoformat()})
            .eq("id", str(album_id))
            .execute()
        )
        if not response.data:
            raise RuntimeError(error)
        return _parse_album(response.data[0])


def _serialize_share(entry: ShareEntry) -> dict[str, str]:
    return {"email": entry.email, "access_level": entry.access_level.label}


def _parse_timestamp(raw: object) -> datetime | None:
    if isinstance(raw, str) and raw:
        return datetime.fromisoformat(raw)
    return None


def _parse_album(row: dict[str, object]) -> AlbumRecord:
    """Parse an albums row into a domain model."""
    shared_raw = row.get("shared_with") or []
    shared_with = tuple(
        ShareEntry(
            email=str(entry.get("email", "")).lower(),
            access_level=AccessLevel.parse(str(entry.get("access_level", "view"))),
        )
        for entry in shared_raw
        if isinstance(entry, dict)
    )
    return AlbumRecord(
        id=UUID(str(row["id"])),
        name=str(row.get("name", "")),
        description=row.get("description"),
        owner_id=UUID(str(row["owner_id"])),
        shared_with=shared_with,
        state=LifecycleState(row.get("state") or LifecycleState.ACTIVE.value),
        deleted_at=_parse_timestamp(row.get("deleted_at")),
        created_at=_parse_timestamp(row.get("created_at")) or datetime.now(tz=UTC),
        updated_at=_parse_timestamp(row.get("updated_at")),
    )
