"""Supabase-backed user repository."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from pixshelf.domain.users import UserRecord
from pixshelf.services.users import UserRepository

_COLUMNS = (
    "id, email, name, avatar_url, password_hash, google_id, email_verified, created_at"
)


@dataclass
class SupabaseUserRepository(UserRepository):
    """Supabase implementation for user persistence."""

    client: Client

    def get_by_id(self, user_id: UUID) -> UserRecord | None:
        """Return a user by id, if present."""
        return self._first("id", str(user_id))

    def get_by_email(self, email: str) -> UserRecord | None:
        """Return a user by email, if present."""
        return self._first("email", email.strip().lower())

    def get_by_google_id(self, google_id: str) -> UserRecord | None:
        """Return the user linked to a Google subject id, if present."""
        return self._first("google_id", google_id)

    def create_user(  # noqa: PLR0913
        self,
        email: str,
        name: str,
        password_hash: str | None,
        google_id: str | None,
        avatar_url: str | None,
        email_verified: bool,
    ) -> UserRecord:
        """Create a new user row and return it."""
        response = (
            self.client.table("users")
            .insert(
                {
                    "email": email.strip().lower(),
                    "name": name,
                    "password_hash": password_hash,
                    "google_id": google_id,
                    "avatar_url": avatar_url,
                    "email_verified": email_verified,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create user in Supabase")
        return _parse_user(response.data[0])

    def link_google_id(self, user_id: UUID, google_id: str) -> UserRecord:
        """Attach a Google subject id to an existing user."""
        response = (
            self.client.table("users")
            .update({"google_id": google_id, "email_verified": True})
            .eq("id", str(user_id))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to link Google account")
        return _parse_user(response.data[0])

    def list_existing_emails(self, emails: list[str]) -> set[str]:
        """Return the subset of emails that belong to registered users."""
        response = (
            self.client.table("users")
            .select("email")
            .in_("email", [email.strip().lower() for email in emails])
            .execute()
        )
        return {str(row["email"]).lower() for row in response.data or []}

    def _first(self, column: str, value: str) -> UserRecord | None:
        response = (
            self.client.table("users")
            .select(_COLUMNS)
            .eq(column, value)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_user(response.data[0])


def _parse_user(row: dict[str, object]) -> UserRecord:
    """Parse a users row into a domain model."""
    created_raw = row.get("created_at")
    return UserRecord(
        id=UUID(str(row["id"])),
        email=str(row.get("email", "")),
        name=str(row.get("name", "")),
        avatar_url=row.get("avatar_url"),
        password_hash=row.get("password_hash"),
        google_id=row.get("google_id"),
        email_verified=bool(row.get("email_verified", False)),
        created_at=(
            datetime.fromisoformat(created_raw)
            if isinstance(created_raw, str) and created_raw
            else None
        ),
    )
