"""Background scheduler that repairs cached gift counters."""

from __future__ import annotations

import logging
from typing import Any

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI

from ..core.config import get_settings
from ..core.database import SessionLocal
from ..services.reconciliation_service import reconcile_gift_counts

logger = logging.getLogger(__name__)

_scheduler = AsyncIOScheduler(timezone="UTC")


async def _execute_reconcile() -> None:
    session = SessionLocal()
    try:
        summary = reconcile_gift_counts(session)
        session.commit()
        logger.info(
            "gift count reconciliation completed: checked=%s corrected=%s",
            summary["users_checked"],
            summary["users_corrected"],
        )
    except Exception:  # pragma: no cover - safeguard for background job
        session.rollback()
        logger.exception("gift count reconciliation job failed")
        raise
    finally:
        session.close()


def register_scheduler(app: FastAPI) -> None:
    """Attach APScheduler lifecycle hooks to the FastAPI app."""

    settings = get_settings()

    @app.on_event("startup")
    async def start_scheduler() -> None:
        if not _scheduler.running:
            _scheduler.add_job(
                _execute_reconcile,
                "interval",
                minutes=settings.reconcile_interval_minutes,
                id="reconcile_gift_counts",
                replace_existing=True,
                coalesce=True,
                max_instances=1,
            )
            _scheduler.start()
            logger.info(
                "gift count reconciliation scheduled every %s minutes",
                settings.reconcile_interval_minutes,
            )

    @app.on_event("shutdown")
    async def shutdown_scheduler() -> None:
        if _scheduler.running:
            _scheduler.shutdown(wait=False)
            logger.info("gift count reconciliation scheduler stopped")


def run_reconcile_once() -> dict[str, Any]:
    """Convenience helper to run the reconciliation synchronously."""

    session = SessionLocal()
    try:
        summary = reconcile_gift_counts(session)
        session.commit()
        return summary
    finally:
        session.close()
