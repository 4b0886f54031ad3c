"""Bearer token issuing and request identity resolution."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol
from uuid import UUID

import jwt

from pixshelf.domain.errors import Unauthenticated
from pixshelf.domain.users import Identity, UserRecord


class IdentityLookup(Protocol):
    """Minimal user lookup needed to resolve a token subject."""

    def get_by_id(self, user_id: UUID) -> UserRecord | None:
        """Return a user by id, if present."""


@dataclass
class TokenIssuer:
    """Issues and verifies signed, time-limited bearer tokens."""

    secret: str
    algorithm: str = "HS256"
    expire_minutes: int = 60 * 24 * 7

    def issue(self, user_id: UUID) -> str:
        """Return a fresh token whose only claim is the user id."""
        now = datetime.now(tz=UTC)
        payload = {
            "sub": str(user_id),
            "iat": now,
            "exp": now + timedelta(minutes=self.expire_minutes),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str | None) -> UUID:
        """Check signature and expiry and return the token subject."""
        if not token:
            raise Unauthenticated("Access denied. No token provided.")
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise Unauthenticated("Token expired.") from exc
        except jwt.PyJWTError as exc:
            raise Unauthenticated() from exc
        try:
            return UUID(str(payload["sub"]))
        except ValueError as exc:
            raise Unauthenticated() from exc


@dataclass
class IdentityService:
    """Resolves bearer tokens to the caller's identity."""

    tokens: TokenIssuer
    users: IdentityLookup

    def resolve(self, token: str | None) -> Identity:
        """Return the identity bound to a token whose subject still exists."""
        user_id = self.tokens.verify(token)
        user = self.users.get_by_id(user_id)
        if user is None:
            raise Unauthenticated()
        return Identity.from_user(user)

    def issue(self, user_id: UUID) -> str:
        return self.tokens.issue(user_id)
