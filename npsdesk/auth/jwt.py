"""Simple JWT authentication helpers."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict
from uuid import UUID

import jwt
from fastapi import Header, HTTPException, status

from npsdesk.core.config import settings


def create_access_token(account_id: UUID, expires_in: timedelta | None = None) -> str:
    """Issue a bearer token carrying the ``account_id`` claim.

    Tokens expire after ``settings.JWT_EXPIRES_MINUTES`` unless ``expires_in``
    is given.
    """
    if expires_in is None:
        expires_in = timedelta(minutes=settings.JWT_EXPIRES_MINUTES)
    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "account_id": str(account_id),
        "iat": now,
        "exp": now + expires_in,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALG)


def require_auth(authorization: str = Header(...)) -> Dict[str, Any]:
    """Validate a bearer token and return decoded claims."""

    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token",
        )

    token = authorization.split(" ", 1)[1].strip()
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALG],
        )
    except jwt.InvalidTokenError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        ) from exc

    if "account_id" not in payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account missing in token",
        )

    try:
        account_uuid = UUID(str(payload["account_id"]))
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid account identifier",
        ) from exc

    payload["account_id"] = str(account_uuid)
    return {"account_id": account_uuid, "claims": payload}
