"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from pixshelf.api.albums import router as albums_router
from pixshelf.api.auth import router as auth_router
from pixshelf.api.images import router as images_router
from pixshelf.api.trash import router as trash_router
from pixshelf.app_logging import configure_logging
from pixshelf.containers import AppContainer
from pixshelf.domain.errors import (
    Conflict,
    Forbidden,
    InvalidInput,
    NotFound,
    PartialFailure,
    PixshelfError,
    Unauthenticated,
    UnknownRecipients,
    UpstreamFailure,
)

_STATUS_BY_ERROR: tuple[tuple[type[PixshelfError], int], ...] = (
    (InvalidInput, status.HTTP_400_BAD_REQUEST),
    (Unauthenticated, status.HTTP_401_UNAUTHORIZED),
    (Forbidden, status.HTTP_403_FORBIDDEN),
    (NotFound, status.HTTP_404_NOT_FOUND),
    (Conflict, status.HTTP_409_CONFLICT),
    (UpstreamFailure, status.HTTP_502_BAD_GATEWAY),
    (PartialFailure, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def status_for(exc: PixshelfError) -> int:
    """Return the HTTP status code for a domain error."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(title="PixShelf", lifespan=lifespan)
    app.state.container = container

    app.include_router(auth_router)
    app.include_router(albums_router)
    app.include_router(images_router)
    app.include_router(trash_router)

    @app.exception_handler(PixshelfError)
    async def domain_error_handler(
        request: Request, exc: PixshelfError
    ) -> JSONResponse:
        status_code = status_for(exc)
        content: dict[str, object] = {"success": False, "message": exc.detail}
        headers = None
        if isinstance(exc, PartialFailure):
            content.update(
                {
                    "operation": exc.operation,
                    "albumId": str(exc.album_id),
                    "retryable": exc.retryable,
                }
            )
        elif isinstance(exc, UnknownRecipients):
            content["emails"] = exc.emails
        elif isinstance(exc, Unauthenticated):
            headers = {"WWW-Authenticate": "Bearer"}
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.warning(
                "Request failed: %s", exc.detail, extra={"path": request.url.path}
            )
        return JSONResponse(status_code=status_code, content=content, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "message": _validation_message(exc.errors())},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.exception("Unhandled error", extra={"path": request.url.path})
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "message": "Internal server error"},
        )

    @app.get("/api/health")
    async def health() -> dict[str, object]:
        """Simple health check endpoint."""
        return {
            "success": True,
            "message": "PixShelf API is running",
            "timestamp": datetime.now(tz=UTC).isoformat(),
        }

    return app


def _validation_message(errors: list[dict[str, object]]) -> str:
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(
        str(part)
        for part in first.get("loc", ())
        if part not in {"body", "query", "path", "header"}
    )
    message = str(first.get("msg", "Invalid request"))
    return f"{location}: {message}" if location else message
