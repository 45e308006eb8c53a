"""User account management."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.errors import Conflict, InvalidInput
from ..core.security import hash_password
from ..models import User, UserRole

logger = logging.getLogger(__name__)


def get_user(session: Session, user_id: int) -> Optional[User]:
    return session.get(User, user_id)


def get_by_username(session: Session, username: str) -> Optional[User]:
    stmt = select(User).where(User.username == username)
    return session.execute(stmt).scalar_one_or_none()


def create_user(
    session: Session,
    *,
    username: str,
    password: str,
    role: UserRole | str | None = None,
    token_number: Optional[int] = None,
) -> User:
    """Create an account storing only a salted password hash."""

    username = (username or "").strip()
    if not username or not password:
        raise InvalidInput("Username and password are required")
    try:
        role = UserRole(role) if role else UserRole.USER
    except ValueError as exc:
        raise InvalidInput(f"Unknown role {role!r}") from exc

    if get_by_username(session, username) is not None:
        raise Conflict("Username already exists")

    user = User(
        username=username,
        password_hash=hash_password(password),
        role=role,
        gifted_count=0,
        token_number=token_number,
    )
    session.add(user)
    try:
        session.flush()
    except IntegrityError as exc:
        # Lost a race with a concurrent insert of the same username.
        session.rollback()
        raise Conflict("Username already exists") from exc
    logger.info("created %s account %s", role.value, username)
    return user
