"""Request dependencies shared by the API routers."""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from pixshelf.containers import AppContainer
from pixshelf.domain.users import Identity

bearer_scheme = HTTPBearer(auto_error=False)


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


def get_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    container: AppContainer = Depends(get_container),
) -> Identity:
    """Resolve the bearer token on the request to the caller's identity."""
    token = credentials.credentials if credentials else None
    return container.identity_service.resolve(token)
