"""Domain error kinds raised by the application services."""

from uuid import UUID


class PixshelfError(Exception):
    """Base class for errors that map onto an API response."""

    message = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)

    @property
    def detail(self) -> str:
        return str(self)


class Unauthenticated(PixshelfError):
    """Missing, invalid or expired credentials."""

    message = "Invalid token."


class Forbidden(PixshelfError):
    """The caller's access level is insufficient."""

    message = "Access denied"


class NotFound(PixshelfError):
    """The entity is absent or not visible to the caller."""

    message = "Not found"


class InvalidInput(PixshelfError):
    """Malformed or missing input."""

    message = "Invalid input"


class UnknownRecipients(InvalidInput):
    """Share recipients that do not belong to any registered user."""

    def __init__(self, emails: list[str]) -> None:
        self.emails = list(emails)
        super().__init__(f"Users not found: {', '.join(self.emails)}")


class Conflict(PixshelfError):
    """The request conflicts with the current state of a record."""

    message = "Conflict"


class UpstreamFailure(PixshelfError):
    """An external collaborator (object host, identity provider) failed."""

    message = "Upstream service failed"


class PartialFailure(PixshelfError):
    """A cascading lifecycle operation stopped partway.

    When ``retryable`` is set the request can be repeated as-is, since every
    step re-checks current state. Otherwise the album already reached its
    target state and the leftover images are handled one at a time.
    """

    def __init__(
        self, operation: str, album_id: UUID, detail: str, retryable: bool = True
    ) -> None:
        self.operation = operation
        self.album_id = album_id
        self.retryable = retryable
        hint = (
            "Retry the request to finish it."
            if retryable
            else "Remaining images are still in the trash."
        )
        super().__init__(
            f"{operation} of album {album_id} did not complete: {detail}. {hint}"
        )
