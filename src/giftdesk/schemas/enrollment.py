"""Pydantic schemas for enrollment endpoints."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class GifterSummary(BaseModel):
    user_id: int
    username: str

    class Config:
        from_attributes = True


class EnrollmentRead(BaseModel):
    """Full enrollment record with the gifter's username resolved."""

    enrollment_number: str
    sequence_number: int
    registration_number: str
    name: str
    address: str
    phone_1: Optional[str] = None
    phone_2: Optional[str] = None
    phone_3: Optional[str] = None
    phone_4: Optional[str] = None
    is_gifted: bool
    gifted_by: Optional[GifterSummary] = None
    gifted_at: Optional[datetime] = None
    card_image: Optional[str] = None
    token_number: Optional[str] = None

    class Config:
        from_attributes = True


class EnrollmentPage(BaseModel):
    """One page of enrollments plus paging metadata."""

    enrollments: List[EnrollmentRead]
    current_page: int = Field(..., ge=1)
    page_size: int = Field(..., ge=1)
    total_pages: int = Field(..., ge=0)
    total_enrollments: int = Field(..., ge=0)


class GiftReceipt(BaseModel):
    """Public fields returned after a successful distribution."""

    enrollment_number: str
    name: str
    is_gifted: bool
    token_number: Optional[str]
    gifted_at: datetime
    card_image: str

    class Config:
        from_attributes = True
