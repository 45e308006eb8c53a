"""Dashboard and reconciliation response schemas."""

from typing import List

from pydantic import BaseModel, Field


class GiftDistributionEntry(BaseModel):
    """Gifts attributed to one operator."""

    user_id: int
    username: str
    count: int = Field(..., ge=0)


class DashboardStats(BaseModel):
    total_users: int = Field(..., ge=0)
    total_enrollments: int = Field(..., ge=0)
    total_gifted: int = Field(..., ge=0)
    remaining_to_gift: int = Field(..., ge=0)
    gift_distribution: List[GiftDistributionEntry]


class CountDrift(BaseModel):
    user_id: int
    username: str
    cached_count: int
    verified_count: int


class ReconcileSummary(BaseModel):
    """Outcome of a gifted-count reconciliation run."""

    users_checked: int = Field(..., ge=0)
    users_corrected: int = Field(..., ge=0)
    drift: List[CountDrift]
