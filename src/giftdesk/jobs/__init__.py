"""Scheduled background jobs."""

from .reconcile_counts import register_scheduler, run_reconcile_once

__all__ = ["register_scheduler", "run_reconcile_once"]
