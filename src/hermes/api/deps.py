"""Shared request dependencies."""

import hmac
from typing import Optional

from fastapi import Header, HTTPException, Request, status

from hermes.container import ApplicationContainer

UNAUTHORIZED_MESSAGE = "Unauthorized: Invalid API key"


def get_container(request: Request) -> ApplicationContainer:
    """The container attached to the running app."""
    return request.app.state.container


async def require_api_key(
    request: Request,
    x_api_key: Optional[str] = Header(None),
) -> bool:
    """Verify the shared secret in the x-api-key header."""
    expected = get_container(request).settings.api_key
    if not x_api_key or not hmac.compare_digest(x_api_key.encode(), expected.encode()):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=UNAUTHORIZED_MESSAGE)
    return True
