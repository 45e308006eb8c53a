"""Operator and administrator accounts."""

import enum
from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, Enum as SAEnum, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from ..core.database import Base


class UserRole(str, enum.Enum):
    """Access levels."""

    ADMIN = "admin"
    USER = "user"


class User(Base):
    """Represents an operator who hands out gifts, or an administrator."""

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("username", name="users_username_unique"),
        CheckConstraint("gifted_count >= 0", name="users_gifted_count_positive"),
    )

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String, nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(
        SAEnum(UserRole, name="user_role", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=UserRole.USER,
    )
    gifted_count = Column(Integer, nullable=False, default=0)
    token_number = Column(Integer)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    gifted_enrollments = relationship("Enrollment", back_populates="gifted_by")
