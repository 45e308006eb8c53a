"""Gift distribution: the single not-gifted to gifted transition.

The transition runs in two steps:

1. upload the proof image (no enrollment row is touched before this returns),
2. one transaction holding a conditional ``UPDATE ... WHERE is_gifted = false``
   that writes every gift field at once (zero affected rows means another
   request won), plus a best-effort increment of the gifter's cached
   ``gifted_count`` inside a savepoint.

A failed increment only rolls back its savepoint; the gift itself still
commits. A lost increment is repaired by
:mod:`giftdesk.services.reconciliation_service`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import false, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.errors import AlreadyDistributed, InvalidInput
from ..core.storage import ObjectStore
from ..models import Enrollment, User
from ..utils.datetime import utcnow
from .enrollment_service import find_by_enrollment_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProofImage:
    """Uploaded evidence of delivery."""

    data: bytes
    media_type: Optional[str]
    filename: Optional[str] = None


def _already_distributed(enrollment: Enrollment) -> AlreadyDistributed:
    gifter = enrollment.gifted_by
    gifted_by = None
    if gifter is not None:
        gifted_by = {
            "user_id": gifter.user_id,
            "username": gifter.username,
            "token_number": gifter.token_number,
        }
    return AlreadyDistributed(
        enrollment_number=enrollment.enrollment_number,
        gifted_by=gifted_by,
        gifted_at=enrollment.gifted_at,
    )


def _validate_proof_image(proof_image: Optional[ProofImage], max_bytes: Optional[int]) -> ProofImage:
    if proof_image is None or not proof_image.data:
        raise InvalidInput("Image is required")
    media_type = (proof_image.media_type or "").split(";", 1)[0].strip().lower()
    if not media_type.startswith("image/"):
        raise InvalidInput("Only images are allowed")
    if max_bytes is not None and len(proof_image.data) > max_bytes:
        raise InvalidInput(f"Image exceeds the {max_bytes} byte upload limit")
    return ProofImage(data=proof_image.data, media_type=media_type, filename=proof_image.filename)


def _increment_gifted_count(session: Session, user_id: int) -> bool:
    try:
        with session.begin_nested():
            session.execute(
                update(User)
                .where(User.user_id == user_id)
                .values(gifted_count=User.gifted_count + 1)
                .execution_options(synchronize_session=False)
            )
    except SQLAlchemyError:
        logger.exception("gifted_count increment failed for user %s; left for reconciliation", user_id)
        return False
    return True


def distribute_gift(
    session: Session,
    *,
    enrollment_number: str,
    token_number: Optional[str],
    proof_image: Optional[ProofImage],
    acting_user: User,
    store: ObjectStore,
    max_bytes: Optional[int] = None,
) -> Enrollment:
    """Mark an enrollment as gifted by ``acting_user``.

    Commits on the supplied session. Raises ``NotFound``, ``AlreadyDistributed``,
    ``InvalidInput`` or ``StorageUnavailable``; in each case the enrollment row
    is left as it was.
    """

    user_id = acting_user.user_id

    enrollment = find_by_enrollment_number(session, enrollment_number)
    if enrollment.is_gifted:
        raise _already_distributed(enrollment)
    image = _validate_proof_image(proof_image, max_bytes)

    # Close the read transaction; nothing is held open across the upload.
    session.commit()

    image_url = store.put(image.data, image.media_type, filename=image.filename)

    stmt = (
        update(Enrollment)
        .where(
            Enrollment.enrollment_number == enrollment_number,
            Enrollment.is_gifted == false(),
        )
        .values(
            is_gifted=True,
            gifted_by_id=user_id,
            gifted_at=utcnow(),
            card_image=image_url,
            token_number=token_number,
        )
        .execution_options(synchronize_session=False)
    )
    result = session.execute(stmt)
    if result.rowcount != 1:
        session.rollback()
        logger.info(
            "distribution of %s lost the race; orphaned object %s",
            enrollment_number,
            image_url,
        )
        raise _already_distributed(find_by_enrollment_number(session, enrollment_number))

    # Same transaction, so a reconciliation can never observe the gift
    # without its increment.
    _increment_gifted_count(session, user_id)
    session.commit()
    logger.info("enrollment %s gifted by user %s", enrollment_number, user_id)

    session.expire_all()
    return find_by_enrollment_number(session, enrollment_number)
