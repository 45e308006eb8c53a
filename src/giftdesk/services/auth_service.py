"""Login, token authentication and role checks."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from ..core.errors import Forbidden, Unauthorized
from ..core.security import decode_access_token, issue_access_token, verify_password
from ..models import User, UserRole
from .user_service import get_by_username, get_user

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


def login(session: Session, *, username: str, password: str) -> tuple[User, str, datetime]:
    """Check credentials and issue a signed token.

    Unknown usernames and wrong passwords raise the same ``Unauthorized``.
    """

    user = get_by_username(session, (username or "").strip())
    if user is None or not verify_password(user.password_hash, password or ""):
        logger.info("failed login for username %r", username)
        raise Unauthorized(INVALID_CREDENTIALS)

    token, expires_at = issue_access_token(user_id=user.user_id, role=user.role.value)
    return user, token, expires_at


def authenticate(session: Session, token: str | None) -> User:
    """Resolve a bearer token to a live user or raise ``Unauthorized``."""

    payload = decode_access_token(token)
    user = get_user(session, payload["sub"])
    if user is None:
        raise Unauthorized("Please authenticate")
    return user


def require_role(user: User, role: UserRole | str) -> User:
    if user.role != UserRole(role):
        raise Forbidden("Access denied")
    return user
