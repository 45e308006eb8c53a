"""Create tables and seed the first admin account.

Idempotent: an existing admin keeps its password.

    GIFTDESK_ADMIN_USERNAME=admin GIFTDESK_ADMIN_PASSWORD=... python scripts/init_db.py
"""

from __future__ import annotations

import logging
import os

from giftdesk.core.database import Base, SessionLocal, engine
from giftdesk.models import UserRole
from giftdesk.services import user_service

logger = logging.getLogger("giftdesk.init_db")


def seed(*, username: str, password: str) -> None:
    Base.metadata.create_all(bind=engine)

    session = SessionLocal()
    try:
        if user_service.get_by_username(session, username) is None:
            user_service.create_user(session, username=username, password=password, role=UserRole.ADMIN)
            logger.info("admin account %s created", username)
        else:
            logger.info("admin account %s already exists", username)
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    seed(
        username=(os.environ.get("GIFTDESK_ADMIN_USERNAME") or "admin").strip(),
        password=os.environ.get("GIFTDESK_ADMIN_PASSWORD") or "change-me",
    )
