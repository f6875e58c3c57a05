"""Background scheduler — APScheduler engine behind debounced dashboard recomputation."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.date import DateTrigger

log = logging.getLogger(__name__)

_scheduler: BackgroundScheduler | None = None


def get_scheduler() -> BackgroundScheduler:
    global _scheduler
    if _scheduler is None:
        _scheduler = BackgroundScheduler(
            job_defaults={
                "coalesce": True,
                "max_instances": 1,
                "misfire_grace_time": 30,
            },
        )
    return _scheduler


def init_scheduler() -> None:
    """Start the shared scheduler if it is not running yet."""
    scheduler = get_scheduler()
    if scheduler.running:
        return
    scheduler.start()
    log.info("Background scheduler started.")


def shutdown_scheduler() -> None:
    global _scheduler
    if _scheduler and _scheduler.running:
        _scheduler.shutdown(wait=False)
        log.info("Background scheduler stopped.")
    _scheduler = None


class Debouncer:
    """Coalesce bursts of calls per key into one call after a quiet period.

    Each call (re)places a one-shot job named after the key, so only the last
    request in a burst runs. A delay of zero runs the callable immediately.
    """

    def __init__(self, delay_ms: int, scheduler: BackgroundScheduler | None = None) -> None:
        self.delay_ms = delay_ms
        self._scheduler = scheduler

    @property
    def scheduler(self) -> BackgroundScheduler:
        return self._scheduler or get_scheduler()

    @staticmethod
    def job_id(key: str) -> str:
        return f"debounce_{key}"

    def call(self, key: str, fn: Callable[[], object]) -> None:
        if self.delay_ms <= 0:
            fn()
            return
        run_at = datetime.now() + timedelta(milliseconds=self.delay_ms)
        self.scheduler.add_job(
            fn,
            trigger=DateTrigger(run_date=run_at),
            id=self.job_id(key),
            name=f"recompute {key}",
            replace_existing=True,
        )

    def cancel(self, key: str) -> None:
        job_id = self.job_id(key)
        try:
            self.scheduler.remove_job(job_id)
        except JobLookupError:
            log.debug("No pending job %s to cancel", job_id)
