"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from pixshelf.adapters.cloudinary_object_host import CloudinaryObjectHost
from pixshelf.adapters.google_identity_client import (
    HttpxGoogleIdentityClient,
    IdentityProviderClient,
)
from pixshelf.adapters.supabase_album_repository import SupabaseAlbumRepository
from pixshelf.adapters.supabase_image_repository import SupabaseImageRepository
from pixshelf.adapters.supabase_user_repository import SupabaseUserRepository
from pixshelf.config import Settings
from pixshelf.services.access import AccessControl
from pixshelf.services.albums import AlbumService
from pixshelf.services.identity import IdentityService, TokenIssuer
from pixshelf.services.images import ImageService
from pixshelf.services.trash import TrashService
from pixshelf.services.users import UserService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    identity_provider: IdentityProviderClient
    user_service: UserService
    identity_service: IdentityService
    album_service: AlbumService
    image_service: ImageService
    trash_service: TrashService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    user_repository = SupabaseUserRepository(supabase_client)
    album_repository = SupabaseAlbumRepository(supabase_client)
    image_repository = SupabaseImageRepository(supabase_client)
    object_host = CloudinaryObjectHost.create(
        cloud_name=resolved_settings.cloudinary_cloud_name,
        api_key=resolved_settings.cloudinary_api_key,
        api_secret=resolved_settings.cloudinary_api_secret,
        root_folder=resolved_settings.cloudinary_root_folder,
    )
    identity_provider = HttpxGoogleIdentityClient.create(
        client_id=resolved_settings.google_client_id,
        client_secret=resolved_settings.google_client_secret,
        redirect_uri=resolved_settings.google_redirect_uri,
    )

    tokens = TokenIssuer(
        secret=resolved_settings.jwt_secret,
        algorithm=resolved_settings.jwt_algorithm,
        expire_minutes=resolved_settings.jwt_expire_minutes,
    )
    access = AccessControl(album_repository)
    user_service = UserService(user_repository, tokens)
    identity_service = IdentityService(tokens, user_repository)
    album_service = AlbumService(
        repository=album_repository,
        image_repository=image_repository,
        access=access,
        user_service=user_service,
    )
    image_service = ImageService(
        repository=image_repository,
        access=access,
        object_host=object_host,
        max_upload_bytes=resolved_settings.max_upload_bytes,
    )
    trash_service = TrashService(
        album_repository=album_repository,
        image_repository=image_repository,
        access=access,
        object_host=object_host,
    )

    async def close_resources() -> None:
        await identity_provider.close()

    return AppContainer(
        settings=resolved_settings,
        identity_provider=identity_provider,
        user_service=user_service,
        identity_service=identity_service,
        album_service=album_service,
        image_service=image_service,
        trash_service=trash_service,
        close_resources=close_resources,
    )
