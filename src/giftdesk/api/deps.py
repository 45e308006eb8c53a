"""Shared request dependencies: caller identity, role gate, object store."""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from ..core.config import get_settings
from ..core.database import get_db
from ..core.errors import ServiceError
from ..core.storage import ObjectStore, object_store_from_settings
from ..models import User, UserRole
from ..services import auth_service

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Authenticate the bearer token on the request."""

    token = credentials.credentials if credentials else None
    try:
        return auth_service.authenticate(db, token)
    except ServiceError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=exc.detail,
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    try:
        return auth_service.require_role(current_user, UserRole.ADMIN)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@lru_cache(maxsize=1)
def get_object_store() -> ObjectStore:
    return object_store_from_settings(get_settings())
