"""Domain models for users and authenticated callers."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class UserRecord:
    """Represents a user stored in the database."""

    id: UUID
    email: str
    name: str
    avatar_url: str | None
    password_hash: str | None
    google_id: str | None
    email_verified: bool
    created_at: datetime | None = None


@dataclass(frozen=True)
class Identity:
    """The authenticated caller of a request."""

    user_id: UUID
    email: str
    name: str

    @classmethod
    def from_user(cls, user: UserRecord) -> "Identity":
        return cls(user_id=user.id, email=user.email, name=user.name)


@dataclass(frozen=True)
class OAuthProfile:
    """Verified profile returned by an external identity provider."""

    subject: str
    email: str
    name: str
    avatar_url: str | None = None

    @classmethod
    def from_userinfo(cls, payload: dict[str, object]) -> "OAuthProfile":
        """Build a profile from an OpenID Connect userinfo payload.

        The display name falls back to given + family name, then to the
        local part of the email address.
        """
        email = str(payload.get("email") or "").strip().lower()
        name = str(payload.get("name") or "").strip()
        if not name:
            given = str(payload.get("given_name") or "")
            family = str(payload.get("family_name") or "")
            name = f"{given} {family}".strip()
        if not name:
            name = email.split("@")[0]
        picture = payload.get("picture")
        return cls(
            subject=str(payload.get("sub") or ""),
            email=email,
            name=name,
            avatar_url=str(picture) if picture else None,
        )


@dataclass(frozen=True)
class AuthResult:
    """A freshly issued token and the user it was issued for."""

    token: str
    user: UserRecord


def normalize_email(email: str) -> str:
    """Return the canonical (trimmed, lower-cased) form of an email."""
    return email.strip().lower()
