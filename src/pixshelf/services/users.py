"""User registration, login and OAuth account linking."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

import bcrypt

from pixshelf.domain.errors import Conflict, InvalidInput, Unauthenticated
from pixshelf.domain.users import AuthResult, OAuthProfile, UserRecord, normalize_email
from pixshelf.services.identity import TokenIssuer

_logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
_BCRYPT_MAX_BYTES = 72


class UserRepository(Protocol):
    """Persistence interface for user data."""

    def get_by_id(self, user_id: UUID) -> UserRecord | None:
        """Return a user by id, if present."""

    def get_by_email(self, email: str) -> UserRecord | None:
        """Return a user by (normalized) email, if present."""

    def get_by_google_id(self, google_id: str) -> UserRecord | None:
        """Return the user linked to a Google subject id, if present."""

    def create_user(  # noqa: PLR0913
        self,
        email: str,
        name: str,
        password_hash: str | None,
        google_id: str | None,
        avatar_url: str | None,
        email_verified: bool,
    ) -> UserRecord:
        """Create and return a new user record."""

    def link_google_id(self, user_id: UUID, google_id: str) -> UserRecord:
        """Attach a Google subject id to an existing user and return it."""

    def list_existing_emails(self, emails: list[str]) -> set[str]:
        """Return the subset of emails that belong to registered users."""


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode(), hashed.encode())
    except ValueError:
        return False


@dataclass
class UserService:
    """Application service for account lifecycle actions."""

    repository: UserRepository
    tokens: TokenIssuer

    def register(
        self, name: str, email: str, password: str, confirm_password: str | None
    ) -> AuthResult:
        """Create a password account and return a session token for it."""
        name = (name or "").strip()
        email = normalize_email(email or "")
        if not name or not email or not password:
            raise InvalidInput("Please provide name, email, and password")
        if "@" not in email:
            raise InvalidInput("Please provide a valid email address")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise InvalidInput(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )
        if len(password.encode()) > _BCRYPT_MAX_BYTES:
            raise InvalidInput("Password is too long")
        if password != confirm_password:
            raise InvalidInput("Passwords do not match")
        if self.repository.get_by_email(email) is not None:
            raise Conflict("User already exists with this email")

        user = self.repository.create_user(
            email=email,
            name=name,
            password_hash=hash_password(password),
            google_id=None,
            avatar_url=None,
            email_verified=False,
        )
        _logger.info("Registered user: user_id=%s", user.id)
        return AuthResult(token=self.tokens.issue(user.id), user=user)

    def login(self, email: str, password: str) -> AuthResult:
        """Verify a password login and return a session token."""
        email = normalize_email(email or "")
        if not email or not password:
            raise InvalidInput("Please provide email and password")
        user = self.repository.get_by_email(email)
        if (
            user is None
            or not user.password_hash
            or not verify_password(password, user.password_hash)
        ):
            raise Unauthenticated("Invalid email or password")
        return AuthResult(token=self.tokens.issue(user.id), user=user)

    def complete_oauth(self, profile: OAuthProfile) -> AuthResult:
        """Sign in through a verified provider profile, creating or linking."""
        if not profile.email or not profile.subject:
            raise InvalidInput("Identity provider returned an incomplete profile")

        user = self.repository.get_by_google_id(profile.subject)
        if user is None:
            user = self.repository.get_by_email(profile.email)
            if user is not None and not user.google_id:
                user = self.repository.link_google_id(user.id, profile.subject)
                _logger.info("Linked Google account: user_id=%s", user.id)
        if user is None:
            user = self.repository.create_user(
                email=profile.email,
                name=profile.name,
                password_hash=None,
                google_id=profile.subject,
                avatar_url=profile.avatar_url,
                email_verified=True,
            )
            _logger.info("Created user from Google profile: user_id=%s", user.id)
        return AuthResult(token=self.tokens.issue(user.id), user=user)

    def get_user(self, user_id: UUID) -> UserRecord | None:
        return self.repository.get_by_id(user_id)

    def find_existing_emails(self, emails: list[str]) -> set[str]:
        """Return which of the normalized emails have an account."""
        if not emails:
            return set()
        return self.repository.list_existing_emails(emails)
