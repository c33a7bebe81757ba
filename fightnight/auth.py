"""API key authentication for write endpoints."""

from __future__ import annotations

import logging

from fastapi import HTTPException, Security
from fastapi.security import APIKeyHeader

from fightnight.config import settings

logger = logging.getLogger(__name__)

_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def require_api_key(key: str | None = Security(_header)) -> str:
    """Guard endpoints that rewrite guild settings or post to Discord.

    Fails closed: with no API_KEY configured the endpoints answer 503,
    unless API_OPEN explicitly opts out of authentication.
    """
    if not settings.api_key:
        if settings.api_open:
            return ""
        logger.warning("Rejected write request: API_KEY is not configured")
        raise HTTPException(503, "Write endpoints are disabled until API_KEY is configured")
    if not key or key != settings.api_key:
        raise HTTPException(401, "Invalid or missing API key")
    return key
