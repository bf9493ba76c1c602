"""Token verification for user-scoped endpoints."""

from __future__ import annotations

import logging

from fastapi import Header, HTTPException
from jose import JWTError, jwt

from app.config import settings

logger = logging.getLogger(__name__)


def create_access_token(user_id: str) -> str:
    return jwt.encode({"_id": user_id}, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> str | None:
    """Return the user id carried by *token*, or None if it does not verify."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        logger.info("Rejected auth token: %s", exc)
        return None
    user_id = payload.get("_id") or payload.get("sub")
    if not isinstance(user_id, str) or not user_id:
        return None
    return user_id


async def get_current_user_id(
    x_auth_token: str | None = Header(default=None, alias="x-auth-token"),
    authorization: str | None = Header(default=None),
) -> str:
    """Resolve the caller via x-auth-token or Authorization: Bearer.

    Raises 401 when no token is supplied or it fails verification.
    """
    token = x_auth_token
    if token is None and authorization and authorization.startswith("Bearer "):
        token = authorization[7:].strip()

    if not token:
        raise HTTPException(status_code=401, detail="Access denied. No token provided.")

    user_id = decode_access_token(token)
    if user_id is None:
        raise HTTPException(status_code=401, detail="Invalid token.")

    return user_id
