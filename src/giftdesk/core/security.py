"""Password hashing and access token helpers."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import jwt
from werkzeug.security import check_password_hash, generate_password_hash

from .config import Settings, get_settings
from .errors import Unauthorized
from ..utils.datetime import expires_after


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    return check_password_hash(password_hash, password)


def issue_access_token(
    *,
    user_id: int,
    role: str,
    settings: Settings | None = None,
    now: datetime | None = None,
) -> tuple[str, datetime]:
    """Sign a bearer token bound to the user id and role.

    Returns the encoded token together with its expiry.
    """

    settings = settings or get_settings()
    issued_at = now.astimezone(timezone.utc) if now else datetime.now(timezone.utc)
    expires_at = expires_after(settings.token_ttl_hours, issued_at)
    payload = {
        "sub": str(user_id),
        "role": role,
        "iat": issued_at,
        "exp": expires_at,
    }
    token = jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    return token, expires_at


def decode_access_token(token: str | None, *, settings: Settings | None = None) -> dict[str, Any]:
    """Verify signature and expiry; any failure raises ``Unauthorized``."""

    if not token:
        raise Unauthorized("Please authenticate")
    settings = settings or get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
        payload["sub"] = int(payload["sub"])
    except (jwt.PyJWTError, ValueError, TypeError) as exc:
        raise Unauthorized("Please authenticate") from exc
    return payload
