"""Bearer-token guard between the tool registry and the media tool services.

``SERVICE_AUTH_TOKEN`` protects ``/manifest`` and ``/execute`` on the
youtube_download and audio_transcribe services, and ``RemoteTool`` sends the
same token when it discovers or calls them.  An empty token leaves the
services open, which is how they run on a developer machine.
"""

from __future__ import annotations

import secrets

import structlog
from fastapi import Depends, HTTPException, Request

from shared.config import Settings, get_settings

logger = structlog.get_logger()


def service_auth_headers(token: str) -> dict[str, str]:
    """Headers for a registry request into a tool service."""
    if not token:
        return {}
    return {"Authorization": f"Bearer {token}"}


async def require_service_auth(request: Request, settings: Settings = Depends(get_settings)) -> None:
    """FastAPI dependency rejecting tool calls that lack the service token."""
    expected = settings.service_auth_token
    if not expected:
        logger.debug("service_auth_disabled", path=request.url.path)
        return

    scheme, _, token = request.headers.get("authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(status_code=401, detail="Missing service auth token")

    # Bytes so a non-ASCII header is a mismatch rather than a TypeError
    if not secrets.compare_digest(token.encode(), expected.encode()):
        logger.warning(
            "service_auth_failed",
            path=request.url.path,
            remote=request.client.host if request.client else "unknown",
        )
        raise HTTPException(status_code=401, detail="Invalid service auth token")
