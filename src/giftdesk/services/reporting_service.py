"""Read-only aggregations for the admin dashboard.

Counts here come from enrollment rows, never from ``User.gifted_count``.
"""

from __future__ import annotations

from typing import Any, Sequence

from sqlalchemy import func, select, true
from sqlalchemy.orm import Session, selectinload

from ..models import Enrollment, User, UserRole


def gift_counts_by_user(session: Session) -> dict[int, int]:
    """Return ``{user_id: gifted enrollments}`` for users with at least one gift."""

    stmt = (
        select(Enrollment.gifted_by_id, func.count(Enrollment.enrollment_id))
        .where(Enrollment.is_gifted == true(), Enrollment.gifted_by_id.is_not(None))
        .group_by(Enrollment.gifted_by_id)
    )
    return {user_id: count for user_id, count in session.execute(stmt).all()}


def gift_distribution(session: Session) -> Sequence[tuple]:
    """Return ``(user_id, username, count)`` rows ordered by count."""

    gift_count = func.count(Enrollment.enrollment_id).label("count")
    stmt = (
        select(User.user_id, User.username, gift_count)
        .join(Enrollment, Enrollment.gifted_by_id == User.user_id)
        .where(Enrollment.is_gifted == true())
        .group_by(User.user_id, User.username)
        .order_by(gift_count.desc(), User.user_id.asc())
    )
    return session.execute(stmt).all()


def dashboard_stats(session: Session) -> dict[str, Any]:
    total_users = session.execute(
        select(func.count(User.user_id)).where(User.role == UserRole.USER)
    ).scalar_one()
    total_enrollments = session.execute(select(func.count(Enrollment.enrollment_id))).scalar_one()
    total_gifted = session.execute(
        select(func.count(Enrollment.enrollment_id)).where(Enrollment.is_gifted == true())
    ).scalar_one()

    return {
        "total_users": total_users,
        "total_enrollments": total_enrollments,
        "total_gifted": total_gifted,
        "remaining_to_gift": total_enrollments - total_gifted,
        "gift_distribution": [
            {"user_id": user_id, "username": username, "count": count}
            for user_id, username, count in gift_distribution(session)
        ],
    }


def list_users_with_stats(session: Session) -> list[tuple[User, int, list[Enrollment]]]:
    """Return every operator with their verified count and gifted enrollments."""

    verified = gift_counts_by_user(session)
    stmt = (
        select(User)
        .options(selectinload(User.gifted_enrollments))
        .where(User.role == UserRole.USER)
        .order_by(User.user_id.asc())
    )
    users = session.execute(stmt).scalars().all()

    rows = []
    for user in users:
        gifted = sorted(
            (e for e in user.gifted_enrollments if e.is_gifted),
            key=lambda e: e.gifted_at,
        )
        rows.append((user, verified.get(user.user_id, 0), gifted))
    return rows
