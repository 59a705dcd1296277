"""Bearer token authentication for the submission API."""
from __future__ import annotations

from typing import Any, Dict
from uuid import UUID

import jwt
from fastapi import Header, HTTPException, status

from launchit.core.config import settings


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def decode_token(token: str) -> UUID:
    """Return the ``user_id`` claim of a signed token."""

    try:
        claims = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG])
    except jwt.InvalidTokenError as exc:
        raise _unauthorized("Invalid token") from exc

    raw_user = claims.get("user_id")
    if not raw_user:
        raise _unauthorized("User missing in token")
    try:
        return UUID(str(raw_user))
    except ValueError as exc:
        raise _unauthorized("Invalid user identifier") from exc


def require_auth(authorization: str = Header(...)) -> Dict[str, Any]:
    """FastAPI dependency resolving the caller from the Authorization header."""

    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise _unauthorized("Missing bearer token")
    return {"user_id": decode_token(token.strip())}
