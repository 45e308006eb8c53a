"""Enrollment lookup and listing."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from ..core.errors import NotFound
from ..models import Enrollment

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class EnrollmentPage:
    items: Sequence[Enrollment]
    current_page: int
    page_size: int
    total_pages: int
    total_enrollments: int


def find_by_enrollment_number(session: Session, enrollment_number: str) -> Enrollment:
    """Exact-match lookup with the gifting user loaded."""

    stmt = (
        select(Enrollment)
        .options(joinedload(Enrollment.gifted_by))
        .where(Enrollment.enrollment_number == enrollment_number)
    )
    enrollment = session.execute(stmt).scalar_one_or_none()
    if enrollment is None:
        raise NotFound("Enrollment not found")
    return enrollment


def list_enrollments(
    session: Session,
    *,
    page: Optional[int] = None,
    page_size: Optional[int] = None,
) -> EnrollmentPage:
    """Return one page ordered by sequence number.

    Absent or non-positive arguments fall back to page 1 of 10. Pages past the
    end come back empty rather than failing.
    """

    page = page if page and page > 0 else DEFAULT_PAGE
    page_size = page_size if page_size and page_size > 0 else DEFAULT_PAGE_SIZE
    page_size = min(page_size, MAX_PAGE_SIZE)

    total = session.execute(select(func.count(Enrollment.enrollment_id))).scalar_one()

    offset = (page - 1) * page_size
    items: Sequence[Enrollment] = []
    # Offsets past the end may not fit the database's integer type.
    if offset < total:
        stmt = (
            select(Enrollment)
            .options(joinedload(Enrollment.gifted_by))
            .order_by(Enrollment.sequence_number.asc(), Enrollment.enrollment_id.asc())
            .offset(offset)
            .limit(page_size)
        )
        items = session.execute(stmt).scalars().all()

    return EnrollmentPage(
        items=items,
        current_page=page,
        page_size=page_size,
        total_pages=math.ceil(total / page_size),
        total_enrollments=total,
    )
