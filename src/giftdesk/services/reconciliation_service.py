"""Repair drift between cached gift counters and enrollment rows."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import func, select, true, update
from sqlalchemy.orm import Session

from ..models import Enrollment, User
from .reporting_service import gift_counts_by_user

logger = logging.getLogger(__name__)


def find_count_drift(session: Session) -> list[dict[str, int | str]]:
    """List users whose cached ``gifted_count`` disagrees with their enrollments."""

    verified = gift_counts_by_user(session)
    users = session.execute(select(User).order_by(User.user_id.asc())).scalars().all()
    return [
        {
            "user_id": user.user_id,
            "username": user.username,
            "cached_count": user.gifted_count,
            "verified_count": verified.get(user.user_id, 0),
        }
        for user in users
        if user.gifted_count != verified.get(user.user_id, 0)
    ]


def reconcile_gift_counts(session: Session) -> dict[str, Any]:
    """Overwrite drifting counters with the count derived from enrollments.

    Runs as a single correlated UPDATE so increments committed concurrently are
    never lost. The caller commits.
    """

    drift = find_count_drift(session)
    for entry in drift:
        logger.warning(
            "gifted_count drift for user %s (%s): cached=%s verified=%s",
            entry["user_id"],
            entry["username"],
            entry["cached_count"],
            entry["verified_count"],
        )

    verified = (
        select(func.count(Enrollment.enrollment_id))
        .where(Enrollment.gifted_by_id == User.user_id, Enrollment.is_gifted == true())
        .scalar_subquery()
    )
    result = session.execute(
        update(User)
        .where(User.gifted_count != verified)
        .values(gifted_count=verified)
        .execution_options(synchronize_session=False)
    )
    users_checked = session.execute(select(func.count(User.user_id))).scalar_one()

    return {
        "users_checked": users_checked,
        "users_corrected": result.rowcount,
        "drift": drift,
    }
