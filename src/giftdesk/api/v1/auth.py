"""Authentication endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...core.errors import ServiceError
from ...models import User
from ...schemas import LoginRequest, TokenResponse, UserSummary
from ...services import auth_service
from ..deps import get_current_user

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Exchange credentials for a bearer token",
    responses={
        200: {
            "description": "Credentials accepted",
            "content": {
                "application/json": {
                    "example": {
                        "token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                        "token_type": "bearer",
                        "expires_at": "2025-11-13T10:15:30+00:00",
                        "user": {
                            "user_id": 2,
                            "username": "counter-3",
                            "role": "user",
                            "gifted_count": 41,
                            "token_number": 3,
                        },
                    }
                }
            },
        },
        401: {"description": "Invalid credentials"},
    },
)
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> TokenResponse:
    """Authenticate with username and password.

    The token is valid for 24 hours and must be sent as
    ``Authorization: Bearer <token>``.
    """

    try:
        user, token, expires_at = auth_service.login(db, username=payload.username, password=payload.password)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
    return TokenResponse(token=token, expires_at=expires_at, user=UserSummary.model_validate(user))


@router.get(
    "/validate-token",
    response_model=UserSummary,
    summary="Check a bearer token",
    responses={401: {"description": "Missing, invalid or expired token"}},
)
def validate_token(current_user: User = Depends(get_current_user)) -> User:
    """Return the account the token belongs to."""

    return current_user
