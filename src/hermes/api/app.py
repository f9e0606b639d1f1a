"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from hermes.container import ApplicationContainer, build_container
from hermes.config import get_settings

logger = logging.getLogger(__name__)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render errors as {"error": ...} bodies."""
    if isinstance(exc.detail, dict):
        content = exc.detail
    else:
        content = {"error": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed request bodies are client errors (400), not 422."""
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


def create_app(container: Optional[ApplicationContainer] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        container: Pre-built container (tests). Built from settings, without
            the listener, when omitted.
    """
    if container is None:
        container = build_container(get_settings(), with_listener=False)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        # Shutdown
        await container.close()

    app = FastAPI(
        title="Hermes API",
        description="Relay between the Zephyr custody contract and the main backend",
        version="0.1.0",
        lifespan=lifespan,
        debug=container.settings.debug,
    )
    app.state.container = container

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Register routes
    from hermes.api.routers import blessings, transactions
    from hermes.api.routes import health

    app.include_router(health.router, tags=["Health"])
    app.include_router(blessings.router)
    app.include_router(transactions.router)

    return app
