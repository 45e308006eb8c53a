"""Enrollment search, listing and gift distribution endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from sqlalchemy.orm import Session

from ...core.config import get_settings
from ...core.database import get_db
from ...core.errors import ServiceError
from ...core.storage import ObjectStore
from ...models import User
from ...schemas import EnrollmentPage, EnrollmentRead, GiftReceipt
from ...services import distribution_service, enrollment_service
from ...services.distribution_service import ProofImage
from ..deps import get_current_user, get_object_store

router = APIRouter(prefix="/enrollments", tags=["enrollments"], dependencies=[Depends(get_current_user)])


def _optional_int(value: Optional[str]) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except ValueError:
        return None


@router.get(
    "/search",
    response_model=EnrollmentRead,
    summary="Find an enrollment by number",
    responses={
        200: {
            "description": "Matching enrollment",
            "content": {
                "application/json": {
                    "example": {
                        "enrollment_number": "E100",
                        "sequence_number": 100,
                        "registration_number": "PM-2231",
                        "name": "Asha Verma",
                        "address": "12 Station Road",
                        "phone_1": "9876500000",
                        "phone_2": None,
                        "phone_3": None,
                        "phone_4": None,
                        "is_gifted": True,
                        "gifted_by": {"user_id": 2, "username": "counter-1"},
                        "gifted_at": "2025-11-12T10:15:30",
                        "card_image": "https://cdn.example.org/media/1731406530000-3f2a-card.jpg",
                        "token_number": "T5",
                    }
                }
            },
        },
        404: {"description": "Enrollment not found"},
    },
)
def search_enrollment(
    enrollment_number: str = Query(..., min_length=1, description="Exact enrollment number"),
    db: Session = Depends(get_db),
) -> EnrollmentRead:
    try:
        return enrollment_service.find_by_enrollment_number(db, enrollment_number.strip())
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.get(
    "",
    response_model=EnrollmentPage,
    summary="List enrollments",
)
def list_enrollments(
    page: Optional[str] = Query(None, description="1-based page number, defaults to 1"),
    page_size: Optional[str] = Query(None, description="Items per page, defaults to 10"),
    db: Session = Depends(get_db),
) -> EnrollmentPage:
    """Return enrollments ordered by sequence number.

    Unparseable paging values are treated as absent.
    Pages past the end return an empty list with the real ``total_pages``.
    """

    result = enrollment_service.list_enrollments(
        db, page=_optional_int(page), page_size=_optional_int(page_size)
    )
    return EnrollmentPage(
        enrollments=[EnrollmentRead.model_validate(e) for e in result.items],
        current_page=result.current_page,
        page_size=result.page_size,
        total_pages=result.total_pages,
        total_enrollments=result.total_enrollments,
    )


@router.post(
    "/gift",
    response_model=GiftReceipt,
    summary="Mark an enrollment as gifted",
    responses={
        200: {
            "description": "Distribution recorded",
            "content": {
                "application/json": {
                    "example": {
                        "enrollment_number": "E100",
                        "name": "Asha Verma",
                        "is_gifted": True,
                        "token_number": "T5",
                        "gifted_at": "2025-11-12T10:15:30",
                        "card_image": "https://cdn.example.org/media/1731406530000-3f2a-card.jpg",
                    }
                }
            },
        },
        400: {
            "description": "Missing or invalid image, or gift already distributed",
            "content": {
                "application/json": {
                    "example": {
                        "detail": {
                            "message": "Gift already distributed",
                            "enrollment_number": "E100",
                            "gifted_by": {"user_id": 2, "username": "counter-1", "token_number": 1},
                            "gifted_at": "2025-11-12T10:15:30",
                        }
                    }
                }
            },
        },
        404: {"description": "Enrollment not found"},
        503: {"description": "Image storage unavailable; safe to retry"},
    },
)
def distribute_gift(
    enrollment_number: str = Form(..., min_length=1),
    token_number: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    store: ObjectStore = Depends(get_object_store),
    db: Session = Depends(get_db),
) -> GiftReceipt:
    """Record a gift hand-over with a photo of the signed card.

    Send as ``multipart/form-data`` with fields ``enrollment_number``,
    ``token_number`` and file ``image``.
    """

    settings = get_settings()
    proof_image = None
    if image is not None:
        proof_image = ProofImage(
            # One byte over the limit is enough to reject oversized files.
            data=image.file.read(settings.max_upload_bytes + 1),
            media_type=image.content_type,
            filename=image.filename,
        )

    try:
        return distribution_service.distribute_gift(
            db,
            enrollment_number=enrollment_number.strip(),
            token_number=token_number,
            proof_image=proof_image,
            acting_user=current_user,
            store=store,
            max_bytes=settings.max_upload_bytes,
        )
    except ServiceError as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
