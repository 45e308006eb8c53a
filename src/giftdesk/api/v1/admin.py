"""Admin-only endpoints: accounts, dashboard, counter reconciliation."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...core.errors import ServiceError
from ...schemas import (
    DashboardStats,
    GiftedEnrollmentSummary,
    ReconcileSummary,
    UserCreate,
    UserSummary,
    UserWithGifts,
)
from ...services import reconciliation_service, reporting_service, user_service
from ..deps import require_admin

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.post(
    "/users",
    response_model=UserSummary,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account",
    responses={
        201: {
            "description": "Account created",
            "content": {
                "application/json": {
                    "example": {
                        "user_id": 5,
                        "username": "counter-4",
                        "role": "user",
                        "gifted_count": 0,
                        "token_number": 4,
                    }
                }
            },
        },
        400: {"description": "Username already exists"},
        403: {"description": "Caller is not an admin"},
    },
)
def create_user(payload: UserCreate, db: Session = Depends(get_db)) -> UserSummary:
    """Create an operator or admin account.

    Example request body::

        {
            "username": "counter-4",
            "password": "s3cret",
            "role": "user",
            "token_number": 4
        }
    """

    try:
        user = user_service.create_user(
            db,
            username=payload.username,
            password=payload.password,
            role=payload.role,
            token_number=payload.token_number,
        )
        db.commit()
        db.refresh(user)
        return user
    except ServiceError as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.get(
    "/users",
    response_model=List[UserWithGifts],
    summary="List operators with gift statistics",
)
def list_users(db: Session = Depends(get_db)) -> List[UserWithGifts]:
    """Return every ``user`` account with cached and verified gift counts."""

    response: List[UserWithGifts] = []
    for user, verified_count, gifted in reporting_service.list_users_with_stats(db):
        response.append(
            UserWithGifts(
                user_id=user.user_id,
                username=user.username,
                role=user.role,
                gifted_count=user.gifted_count,
                token_number=user.token_number,
                verified_gift_count=verified_count,
                gifted_enrollments=[GiftedEnrollmentSummary.model_validate(e) for e in gifted],
            )
        )
    return response


@router.get(
    "/dashboard",
    response_model=DashboardStats,
    summary="Aggregate distribution counts",
    responses={
        200: {
            "description": "Dashboard statistics",
            "content": {
                "application/json": {
                    "example": {
                        "total_users": 4,
                        "total_enrollments": 1200,
                        "total_gifted": 310,
                        "remaining_to_gift": 890,
                        "gift_distribution": [
                            {"user_id": 2, "username": "counter-1", "count": 120},
                            {"user_id": 3, "username": "counter-2", "count": 95},
                        ],
                    }
                }
            },
        }
    },
)
def dashboard(db: Session = Depends(get_db)) -> DashboardStats:
    return DashboardStats(**reporting_service.dashboard_stats(db))


@router.post(
    "/reconcile",
    response_model=ReconcileSummary,
    summary="Recompute cached gift counters",
)
def reconcile(db: Session = Depends(get_db)) -> ReconcileSummary:
    """Reset every ``gifted_count`` to the number of enrollments the user gifted."""

    summary = reconciliation_service.reconcile_gift_counts(db)
    db.commit()
    return ReconcileSummary(**summary)
