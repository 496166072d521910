"""FastAPI dependencies."""
import logging

import jwt
from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from editor_activity.config import get_settings
from editor_activity.database import get_db
from editor_activity.services.activity_store import ActivityStore
from editor_activity.services.errors import UnauthenticatedError
from editor_activity.services.query_service import ActivityQueryService

logger = logging.getLogger(__name__)


def _mask_identifier(identifier: str) -> str:
    """Mask a sensitive identifier for logging (e.g., user_id, token)."""
    if not identifier:
        return "<missing>"
    if len(identifier) <= 8:
        return f"{identifier[:2]}...{identifier[-2:]}"
    return f"{identifier[:4]}...{identifier[-4:]}"


def decode_access_token(token: str) -> dict:
    """Verify a bearer token issued by the identity provider.

    Raises:
        jwt.InvalidTokenError: If the signature, expiry or format is invalid
    """
    settings = get_settings()
    return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])


async def get_current_user_id(
        authorization: str | None = Header(default=None, alias="Authorization"),
) -> str:
    """Resolve the authenticated user id from the Authorization header.

    The user id is taken from the ``sub`` claim, falling back to ``id``.

    Raises:
        UnauthenticatedError: If the header is missing or the token is rejected
    """
    if not authorization:
        raise UnauthenticatedError("Token required")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise UnauthenticatedError("Invalid authorization header")

    try:
        payload = decode_access_token(token)
    except jwt.ExpiredSignatureError as exc:
        raise UnauthenticatedError("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        logger.debug(f"Rejected bearer token {_mask_identifier(token)}: {exc}")
        raise UnauthenticatedError("Invalid token") from exc

    user_id = payload.get("sub") or payload.get("id")
    if user_id is None or str(user_id) == "":
        raise UnauthenticatedError("Invalid token")

    logger.debug(f"Authenticated user via JWT: {_mask_identifier(str(user_id))}")
    return str(user_id)


def get_activity_store(db: AsyncSession = Depends(get_db)) -> ActivityStore:
    return ActivityStore(db)


def get_query_service(db: AsyncSession = Depends(get_db)) -> ActivityQueryService:
    return ActivityQueryService(db)
