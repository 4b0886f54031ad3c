"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from itertools import count
from uuid import UUID, uuid4

import pytest

from pixshelf.adapters.google_identity_client import IdentityProviderClient
from pixshelf.config import Settings
from pixshelf.containers import AppContainer
from pixshelf.domain.albums import AlbumRecord, LifecycleState, ShareEntry
from pixshelf.domain.images import (
    ImageComment,
    ImageMetadata,
    ImageRecord,
    NewImage,
    StoredObject,
)
from pixshelf.domain.users import Identity, OAuthProfile, UserRecord
from pixshelf.services.access import AccessControl
from pixshelf.services.albums import AlbumRepository, AlbumService
from pixshelf.services.identity import IdentityService, TokenIssuer
from pixshelf.services.images import ImageRepository, ImageService, ObjectHost
from pixshelf.services.trash import TrashService
from pixshelf.services.users import UserRepository, UserService

_BASE_TIME = datetime(2024, 1, 1, tzinfo=UTC)
_ticks = count()


def tick() -> datetime:
    """Return a strictly increasing timestamp for ordering assertions."""
    return _BASE_TIME + timedelta(seconds=next(_ticks))


@dataclass
class InMemoryUserRepository(UserRepository):
    """In-memory user repository for tests."""

    users: dict[UUID, UserRecord] = field(default_factory=dict)

    def get_by_id(self, user_id: UUID) -> UserRecord | None:
        return self.users.get(user_id)

    def get_by_email(self, email: str) -> UserRecord | None:
        target = email.strip().lower()
        return next((u for u in self.users.values() if u.email == target), None)

    def get_by_google_id(self, google_id: str) -> UserRecord | None:
        return next(
            (u for u in self.users.values() if u.google_id == google_id), None
        )

    def create_user(  # noqa: PLR0913
        self,
        email: str,
        name: str,
        password_hash: str | None,
        google_id: str | None,
        avatar_url: str | None,
        email_verified: bool,
    ) -> UserRecord:
        user = UserRecord(
            id=uuid4(),
            email=email.strip().lower(),
            name=name,
            avatar_url=avatar_url,
            password_hash=password_hash,
            google_id=google_id,
            email_verified=email_verified,
            created_at=tick(),
        )
        self.users[user.id] = user
        return user

    def link_google_id(self, user_id: UUID, google_id: str) -> UserRecord:
        user = replace(self.users[user_id], google_id=google_id, email_verified=True)
        self.users[user_id] = user
        return user

    def list_existing_emails(self, emails: list[str]) -> set[str]:
        known = {user.email for user in self.users.values()}
        return {email.strip().lower() for email in emails} & known


@dataclass
class InMemoryAlbumRepository(AlbumRepository):
    """In-memory album repository for tests."""

    albums: dict[UUID, AlbumRecord] = field(default_factory=dict)
    fail_state_changes: bool = False

    def get_album(self, album_id: UUID) -> AlbumRecord | None:
        return self.albums.get(album_id)

    def create_album(
        self, owner_id: UUID, name: str, description: str | None
    ) -> AlbumRecord:
        album = AlbumRecord(
            id=uuid4(),
            name=name,
            description=description,
            owner_id=owner_id,
            shared_with=(),
            state=LifecycleState.ACTIVE,
            deleted_at=None,
            created_at=tick(),
        )
        self.albums[album.id] = album
        return album

    def update_album(self, album_id: UUID, payload: dict[str, object]) -> AlbumRecord:
        return self._store(replace(self.albums[album_id], **payload))

    def set_shared_with(
        self, album_id: UUID, entries: tuple[ShareEntry, ...]
    ) -> AlbumRecord:
        return self._store(replace(self.albums[album_id], shared_with=tuple(entries)))

    def set_state(
        self, album_id: UUID, state: LifecycleState, deleted_at: datetime | None
    ) -> AlbumRecord:
        if self.fail_state_changes:
            raise RuntimeError("album store unavailable")
        return self._store(
            replace(self.albums[album_id], state=state, deleted_at=deleted_at)
        )

    def list_owned(self, owner_id: UUID) -> list[AlbumRecord]:
        return [a for a in self.albums.values() if a.owner_id == owner_id]

    def list_shared_with(self, email: str) -> list[AlbumRecord]:
        return [a for a in self.albums.values() if a.share_for(email) is not None]

    def list_trashed_owned(self, owner_id: UUID) -> list[AlbumRecord]:
        return [a for a in self.list_owned(owner_id) if a.is_trashed]

    def delete_album(self, album_id: UUID) -> None:
        self.albums.pop(album_id, None)

    def _store(self, album: AlbumRecord) -> AlbumRecord:
        album = replace(album, updated_at=tick())
        self.albums[album.id] = album
        return album


@dataclass
class InMemoryImageRepository(ImageRepository):
    """In-memory image repository for tests."""

    images: dict[UUID, ImageRecord] = field(default_factory=dict)
    fail_creates: bool = False
    fail_album_restores: bool = False

    def create_image(self, image: NewImage) -> ImageRecord:
        if self.fail_creates:
            raise RuntimeError("image store unavailable")
        record = ImageRecord(
            id=uuid4(),
            album_id=image.album_id,
            name=image.name,
            original_name=image.name,
            url=image.url,
            thumbnail_url=image.thumbnail_url,
            tags=image.tags,
            people=image.people,
            is_favorite=image.is_favorite,
            comments=(),
            size=image.size,
            uploaded_by=image.uploaded_by,
            uploaded_at=tick(),
            metadata=image.metadata,
        )
        self.images[record.id] = record
        return record

    def get_image(self, image_id: UUID) -> ImageRecord | None:
        return self.images.get(image_id)

    def list_album_images(
        self, album_id: UUID, tags: tuple[str, ...], favorites_only: bool
    ) -> list[ImageRecord]:
        result = [
            image
            for image in self.images.values()
            if image.album_id == album_id and not image.is_trashed
        ]
        if favorites_only:
            result = [image for image in result if image.is_favorite]
        if tags:
            result = [image for image in result if set(image.tags) & set(tags)]
        return sorted(result, key=lambda image: image.uploaded_at, reverse=True)

    def set_favorite(self, image_id: UUID, value: bool) -> ImageRecord:
        return self._store(replace(self.images[image_id], is_favorite=value))

    def append_comment(self, image_id: UUID, comment: ImageComment) -> ImageRecord:
        image = self.images[image_id]
        return self._store(replace(image, comments=(*image.comments, comment)))

    def trash_image(
        self,
        image_id: UUID,
        deleted_at: datetime,
        original_album_id: UUID,
        original_album_name: str,
    ) -> ImageRecord:
        return self._store(
            replace(
                self.images[image_id],
                state=LifecycleState.TRASHED,
                deleted_at=deleted_at,
                original_album_id=original_album_id,
                original_album_name=original_album_name,
            )
        )

    def restore_image(self, image_id: UUID, album_id: UUID) -> ImageRecord:
        return self._store(
            replace(
                self.images[image_id],
                album_id=album_id,
                state=LifecycleState.ACTIVE,
                deleted_at=None,
                original_album_id=None,
                original_album_name=None,
            )
        )

    def trash_album_images(
        self, album_id: UUID, album_name: str, deleted_at: datetime
    ) -> int:
        targets = [
            image
            for image in self.images.values()
            if image.album_id == album_id and not image.is_trashed
        ]
        for image in targets:
            self.trash_image(image.id, deleted_at, album_id, album_name)
        return len(targets)

    def restore_album_images(self, album_id: UUID) -> int:
        if self.fail_album_restores:
            raise RuntimeError("image store unavailable")
        targets = self.list_trashed_album_images(album_id)
        for image in targets:
            self.restore_image(image.id, album_id)
        return len(targets)

    def list_trashed_images(
        self, uploaded_by: UUID, album_ids: set[UUID]
    ) -> list[ImageRecord]:
        return [
            image
            for image in self.images.values()
            if image.is_trashed
            and (
                image.uploaded_by == uploaded_by
                or image.original_album_id in album_ids
            )
        ]

    def list_trashed_album_images(self, album_id: UUID) -> list[ImageRecord]:
        return [
            image
            for image in self.images.values()
            if image.is_trashed and image.original_album_id == album_id
        ]

    def delete_image(self, image_id: UUID) -> None:
        self.images.pop(image_id, None)

    def _store(self, image: ImageRecord) -> ImageRecord:
        self.images[image.id] = image
        return image


@dataclass
class FakeObjectHost(ObjectHost):
    """Object host that keeps uploads in memory and records deletions."""

    uploads: list[tuple[str, str]] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    fail_uploads: bool = False
    failing_deletes: set[str] = field(default_factory=set)

    def upload(self, data: bytes, content_type: str, folder_hint: str) -> StoredObject:
        if self.fail_uploads:
            raise RuntimeError("object host unavailable")
        self.uploads.append((folder_hint, content_type))
        public_id = f"pixshelf/{folder_hint}/{len(self.uploads)}"
        return StoredObject(
            url=f"https://objects.test/{public_id}.jpg",
            public_id=public_id,
            format="jpg",
            width=1200,
            height=800,
            bytes=len(data),
        )

    def derived_url(self, public_id: str, width: int, height: int) -> str:
        return f"https://objects.test/w_{width},h_{height}/{public_id}.jpg"

    def delete(self, public_id: str) -> None:
        if public_id in self.failing_deletes:
            raise RuntimeError("object host refused deletion")
        self.deleted.append(public_id)


@dataclass
class FakeIdentityProvider(IdentityProviderClient):
    """Identity provider returning a fixed profile."""

    profile: OAuthProfile = field(
        default_factory=lambda: OAuthProfile(
            subject="google-sub-1",
            email="oauth.user@example.com",
            name="OAuth User",
        )
    )
    fail: bool = False
    codes: list[str] = field(default_factory=list)
    closed: bool = False

    def authorization_url(self, state: str | None = None) -> str:
        suffix = f"?state={state}" if state else ""
        return f"https://accounts.test/auth{suffix}"

    async def exchange_code(self, code: str) -> OAuthProfile:
        self.codes.append(code)
        if self.fail:
            raise RuntimeError("provider rejected the code")
        return self.profile

    async def close(self) -> None:
        self.closed = True


def add_user(
    repository: InMemoryUserRepository, email: str, name: str = "Test User"
) -> Identity:
    """Create a user directly in the repository and return its identity."""
    user = repository.create_user(
        email=email,
        name=name,
        password_hash=None,
        google_id=None,
        avatar_url=None,
        email_verified=True,
    )
    return Identity.from_user(user)


def seed_image(
    repository: InMemoryImageRepository,
    album_id: UUID,
    uploaded_by: UUID,
    name: str = "photo.jpg",
    tags: tuple[str, ...] = (),
    public_id: str | None = None,
) -> ImageRecord:
    """Insert an active image without going through the object host."""
    public_id = public_id or f"seed/{uuid4()}"
    return repository.create_image(
        NewImage(
            album_id=album_id,
            name=name,
            url=f"https://objects.test/{public_id}.jpg",
            thumbnail_url=f"https://objects.test/thumb/{public_id}.jpg",
            tags=tags,
            people=(),
            is_favorite=False,
            size=1024,
            uploaded_by=uploaded_by,
            metadata=ImageMetadata(
                format="jpg", width=10, height=10, public_id=public_id, bytes=1024
            ),
        )
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        jwt_secret="test-secret-key-that-is-at-least-32-bytes",
        cloudinary_cloud_name="demo",
        cloudinary_api_key="cloudinary-key",
        cloudinary_api_secret="cloudinary-secret",
        google_client_id="google-client-id",
        google_client_secret="google-client-secret",
        frontend_url="https://frontend.test",
    )


@pytest.fixture
def user_repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def album_repository() -> InMemoryAlbumRepository:
    return InMemoryAlbumRepository()


@pytest.fixture
def image_repository() -> InMemoryImageRepository:
    return InMemoryImageRepository()


@pytest.fixture
def object_host() -> FakeObjectHost:
    return FakeObjectHost()


@pytest.fixture
def identity_provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def tokens(settings: Settings) -> TokenIssuer:
    return TokenIssuer(secret=settings.jwt_secret)


@pytest.fixture
def user_service(
    user_repository: InMemoryUserRepository, tokens: TokenIssuer
) -> UserService:
    return UserService(user_repository, tokens)


@pytest.fixture
def access(album_repository: InMemoryAlbumRepository) -> AccessControl:
    return AccessControl(album_repository)


@pytest.fixture
def album_service(
    album_repository: InMemoryAlbumRepository,
    image_repository: InMemoryImageRepository,
    access: AccessControl,
    user_service: UserService,
) -> AlbumService:
    return AlbumService(
        repository=album_repository,
        image_repository=image_repository,
        access=access,
        user_service=user_service,
    )


@pytest.fixture
def image_service(
    image_repository: InMemoryImageRepository,
    access: AccessControl,
    object_host: FakeObjectHost,
) -> ImageService:
    return ImageService(
        repository=image_repository, access=access, object_host=object_host
    )


@pytest.fixture
def trash_service(
    album_repository: InMemoryAlbumRepository,
    image_repository: InMemoryImageRepository,
    access: AccessControl,
    object_host: FakeObjectHost,
) -> TrashService:
    return TrashService(
        album_repository=album_repository,
        image_repository=image_repository,
        access=access,
        object_host=object_host,
    )


@pytest.fixture
def alice(user_repository: InMemoryUserRepository) -> Identity:
    return add_user(user_repository, "alice@example.com", "Alice")


@pytest.fixture
def bob(user_repository: InMemoryUserRepository) -> Identity:
    return add_user(user_repository, "bob@example.com", "Bob")


@pytest.fixture
def carol(user_repository: InMemoryUserRepository) -> Identity:
    return add_user(user_repository, "carol@example.com", "Carol")


@pytest.fixture
def container(  # noqa: PLR0913
    settings: Settings,
    user_service: UserService,
    user_repository: InMemoryUserRepository,
    tokens: TokenIssuer,
    album_service: AlbumService,
    image_service: ImageService,
    trash_service: TrashService,
    identity_provider: FakeIdentityProvider,
) -> AppContainer:
    async def close_resources() -> None:
        await identity_provider.close()

    return AppContainer(
        settings=settings,
        identity_provider=identity_provider,
        user_service=user_service,
        identity_service=IdentityService(tokens, user_repository),
        album_service=album_service,
        image_service=image_service,
        trash_service=trash_service,
        close_resources=close_resources,
    )
