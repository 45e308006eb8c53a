"""Pydantic schemas for admin user management."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from .auth import UserSummary


class UserCreate(BaseModel):
    """Request body for creating an account."""

    username: str = Field(..., min_length=1, max_length=150)
    password: str = Field(..., min_length=1)
    role: Literal["admin", "user"] = "user"
    token_number: Optional[int] = Field(None, description="Token number assigned to the operator.")


class GiftedEnrollmentSummary(BaseModel):
    """An enrollment gifted by a given operator."""

    enrollment_number: str
    name: str
    card_image: Optional[str]
    gifted_at: Optional[datetime]
    token_number: Optional[str]

    class Config:
        from_attributes = True


class UserWithGifts(UserSummary):
    """Operator with cached and verified gift statistics."""

    verified_gift_count: int = Field(..., ge=0, description="Gifts counted from enrollment records.")
    gifted_enrollments: List[GiftedEnrollmentSummary]
