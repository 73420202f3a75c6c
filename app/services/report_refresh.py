from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.orm import Session

from app.core.db import SessionLocal
from app.services.annual_report import generate_annual_report


logger = logging.getLogger(__name__)

REFRESH_JOB_ID = "annual_sales_report_refresh"

_TRUTHY = ("1", "true", "yes", "on")


def refresh_current_year_report(
    session_factory: Callable[[], Session] = SessionLocal,
    now: Optional[datetime] = None,
) -> bool:
    """Regenerate the stored sales report for the current UTC year.

    Runs inside the scheduler thread, so failures are logged and reported
    through the return value. Several instances may run this job at once;
    the unique (year, month, report_type) key makes them converge on one row.
    """
    year = (now or datetime.now(timezone.utc)).year
    db = session_factory()
    try:
        report = generate_annual_report(db=db, year=year)
    except Exception:
        logger.exception("Annual sales report refresh failed (year=%s)", year)
        return False
    finally:
        db.close()

    logger.info("Annual sales report refreshed (year=%s, id=%s)", year, report.id)
    return True


def build_report_scheduler(enabled: str, interval_minutes: int) -> Optional[BackgroundScheduler]:
    """Create the background scheduler for report refreshes, not yet started.

    Returns None when the feature flag is off.
    """
    if enabled.strip().lower() not in _TRUTHY:
        logger.info("Annual sales report refresh disabled (ANALYTICS_SCHEDULER_ENABLED=%s)", enabled)
        return None
    if interval_minutes < 1:
        raise ValueError("ANALYTICS_SCHEDULER_INTERVAL_MINUTES must be at least 1")

    scheduler = BackgroundScheduler(timezone="UTC")
    scheduler.add_job(
        refresh_current_year_report,
        trigger=IntervalTrigger(minutes=interval_minutes),
        id=REFRESH_JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        next_run_time=datetime.now(timezone.utc),
    )
    logger.info("Annual sales report refresh scheduled every %s minutes", interval_minutes)
    return scheduler
