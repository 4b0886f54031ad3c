"""Pydantic models for JSON request bodies.

Fields are optional so that missing values reach the services, which own
the validation messages.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class RegisterRequest(_Request):
    """Password account registration payload."""

    name: str | None = None
    email: str | None = None
    password: str | None = None
    confirm_password: str | None = Field(default=None, alias="confirmPassword")


class LoginRequest(_Request):
    """Password login payload."""

    email: str | None = None
    password: str | None = None


class AlbumCreateRequest(_Request):
    """New album payload."""

    name: str | None = None
    description: str | None = None


class AlbumUpdateRequest(_Request):
    """Album rename/re-describe payload."""

    name: str | None = None
    description: str | None = None


class ShareRequest(_Request):
    """Share an album with a list of registered emails."""

    emails: Any = None
    access_level: str | None = Field(default=None, alias="accessLevel")


class AccessLevelRequest(_Request):
    """Change a collaborator's access level."""

    access_level: str | None = Field(default=None, alias="accessLevel")


class FavoriteRequest(_Request):
    """Set the favorite flag on an image."""

    is_favorite: bool | None = Field(default=None, alias="isFavorite")


class CommentRequest(_Request):
    """Append a comment to an image."""

    text: str | None = None
