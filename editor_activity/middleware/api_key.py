"""Shared API key check applied to every request.

The editor extension sends the deployment's API key in ``X-API-Key``. When no
key is configured the check is disabled.
"""
import hmac
import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from editor_activity.config import get_settings

logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-api-key"
EXEMPT_PATHS = {"/health", "/"}


async def api_key_middleware(request: Request, call_next):
    """Reject requests that do not carry the configured API key."""
    settings = get_settings()

    if not settings.api_key or request.url.path in EXEMPT_PATHS or request.method == "OPTIONS":
        return await call_next(request)

    provided = request.headers.get(API_KEY_HEADER, "")
    if not hmac.compare_digest(provided.encode("utf-8"), settings.api_key.encode("utf-8")):
        logger.warning(f"Rejected request without valid API key: {request.method} {request.url.path}")
        return JSONResponse(
            status_code=401,
            content={"error": True, "kind": "unauthenticated", "message": "Unauthorized"},
        )

    return await call_next(request)
