"""Authentication endpoints: password accounts, Google sign-in, current user."""

import asyncio
import json
import logging
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse, RedirectResponse, Response

from pixshelf.api.deps import get_container, get_identity
from pixshelf.api.schemas import LoginRequest, RegisterRequest
from pixshelf.api.serializers import user_payload
from pixshelf.containers import AppContainer
from pixshelf.domain.errors import PixshelfError, Unauthenticated, UpstreamFailure
from pixshelf.domain.users import AuthResult, Identity

_logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _auth_payload(result: AuthResult) -> dict[str, object]:
    return {"success": True, "token": result.token, "user": user_payload(result.user)}


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest, container: AppContainer = Depends(get_container)
) -> dict[str, object]:
    """Create a password account and sign it in."""
    result = container.user_service.register(
        name=body.name or "",
        email=body.email or "",
        password=body.password or "",
        confirm_password=body.confirm_password,
    )
    return _auth_payload(result)


@router.post("/login")
def login(
    body: LoginRequest, container: AppContainer = Depends(get_container)
) -> dict[str, object]:
    """Sign in with email and password."""
    result = container.user_service.login(body.email or "", body.password or "")
    return _auth_payload(result)


@router.get("/google")
def google_login(
    state: str | None = None, container: AppContainer = Depends(get_container)
) -> RedirectResponse:
    """Redirect the browser to Google's consent screen."""
    return RedirectResponse(
        container.identity_provider.authorization_url(state),
        status_code=status.HTTP_302_FOUND,
    )


@router.get("/google/callback")
async def google_callback(
    request: Request,
    code: str | None = None,
    container: AppContainer = Depends(get_container),
) -> Response:
    """Finish Google sign-in.

    API clients asking for JSON get the token in the body; browsers are
    redirected to the frontend with the token and user in the query string.
    """
    wants_json = "application/json" in request.headers.get("accept", "")
    failure_url = f"{container.settings.frontend_url.rstrip('/')}/login?" + urlencode(
        {"error": "Authentication failed"}
    )
    if not code:
        if wants_json:
            raise Unauthenticated("Google authentication failed")
        return RedirectResponse(failure_url, status_code=status.HTTP_302_FOUND)

    try:
        profile = await container.identity_provider.exchange_code(code)
        result = await asyncio.to_thread(
            container.user_service.complete_oauth, profile
        )
    except Exception as exc:
        _logger.exception("Google authentication failed")
        if not wants_json:
            return RedirectResponse(failure_url, status_code=status.HTTP_302_FOUND)
        if isinstance(exc, PixshelfError):
            raise
        raise UpstreamFailure("Google authentication failed") from exc

    payload = _auth_payload(result)
    if wants_json:
        return JSONResponse(payload)
    query = urlencode({"token": result.token, "user": json.dumps(payload["user"])})
    return RedirectResponse(
        f"{container.settings.frontend_url.rstrip('/')}/?{query}",
        status_code=status.HTTP_302_FOUND,
    )


@router.get("/me")
def current_user(
    identity: Identity = Depends(get_identity),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Return the signed-in user's profile."""
    user = container.user_service.get_user(identity.user_id)
    if user is None:
        raise Unauthenticated()
    return {"success": True, "user": user_payload(user)}
