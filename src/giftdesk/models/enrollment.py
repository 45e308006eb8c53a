"""Enrollment model holding gift eligibility and distribution state."""

from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from ..core.database import Base


class Enrollment(Base):
    """A registered person eligible to receive exactly one gift."""

    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("enrollment_number", name="enrollments_enrollment_number_unique"),
        CheckConstraint(
            "(is_gifted AND gifted_by_id IS NOT NULL AND gifted_at IS NOT NULL AND card_image IS NOT NULL) "
            "OR (NOT is_gifted AND gifted_by_id IS NULL AND gifted_at IS NULL AND card_image IS NULL)",
            name="enrollments_gift_state_complete",
        ),
    )

    enrollment_id = Column(Integer, primary_key=True, autoincrement=True)
    enrollment_number = Column(String, nullable=False, index=True)
    sequence_number = Column(Integer, nullable=False, index=True)
    registration_number = Column(String, nullable=False)
    name = Column(String, nullable=False)
    address = Column(String, nullable=False)
    phone_1 = Column(String)
    phone_2 = Column(String)
    phone_3 = Column(String)
    phone_4 = Column(String)

    # Written together by a single conditional UPDATE.
    is_gifted = Column(Boolean, nullable=False, default=False)
    gifted_by_id = Column(Integer, ForeignKey("users.user_id", ondelete="RESTRICT"))
    gifted_at = Column(DateTime)
    card_image = Column(String)
    token_number = Column(String)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    gifted_by = relationship("User", back_populates="gifted_enrollments")
