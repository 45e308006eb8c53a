"""SQLAlchemy models for GiftDesk."""

from .enrollment import Enrollment
from .user import User, UserRole

__all__ = [
    "Enrollment",
    "User",
    "UserRole",
]
