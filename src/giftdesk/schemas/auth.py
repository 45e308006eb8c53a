"""Pydantic schemas for authentication endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ..models.user import UserRole


class UserSummary(BaseModel):
    """Lightweight projection of an account."""

    user_id: int
    username: str
    role: UserRole
    gifted_count: int
    token_number: Optional[int] = None

    class Config:
        from_attributes = True


class LoginRequest(BaseModel):
    """Credentials submitted at login."""

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    """Bearer token returned after a successful login."""

    token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: UserSummary
