"""Scheduled freshness sweep that reports products needing attention."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable

from .db import Product, ProductDB
from .freshness import FreshnessEngine, FreshnessStatus

logger = logging.getLogger(__name__)

Notifier = Callable[[list[tuple[Product, FreshnessStatus]]], None]


def log_notifier(items: list[tuple[Product, FreshnessStatus]]) -> None:
    for product, status in items:
        logger.warning(
            "%s [%s]: %d%% left, %d days remaining",
            product.name,
            status.urgency_tier.value,
            status.percent_remaining,
            status.days_remaining,
        )


class ExpirySweepScheduler:
    """Runs a cron-scheduled sweep over active products.

    Uses APScheduler for cron-based scheduling.
    """

    def __init__(self, config, notify: Notifier | None = None) -> None:
        """Initialize scheduler with a SomomiConfig.

        Args:
            config: SomomiConfig instance.
            notify: Called with the urgent products found by each sweep.

        Raises:
            ImportError: If apscheduler is not installed.
        """
        try:
            from apscheduler.schedulers.asyncio import AsyncIOScheduler
            from apscheduler.triggers.cron import CronTrigger
        except ImportError:
            raise ImportError(
                "apscheduler is required: pip install 'somomi[scheduler]'"
            )

        self._config = config
        self._notify = notify or log_notifier
        self._engine = FreshnessEngine(
            warning_pct=config.freshness.warning_pct,
            urgent_pct=config.freshness.urgent_pct,
        )
        self._scheduler = AsyncIOScheduler()
        self._CronTrigger = CronTrigger

    def setup_jobs(self) -> None:
        """Register the sweep job when enabled in config."""
        if not self._config.scheduler.enabled:
            logger.info("Freshness sweep disabled")
            return

        expr = self._config.scheduler.sweep_schedule
        try:
            trigger = self._CronTrigger.from_crontab(expr)
        except ValueError as e:
            raise ValueError(f"invalid cron expression: {expr}") from e
        self._scheduler.add_job(
            self._job_sweep, trigger=trigger, id="freshness_sweep", replace_existing=True
        )
        logger.info("Registered freshness sweep: %s", expr)

    def start(self) -> None:
        self.setup_jobs()
        self._scheduler.start()

    def stop(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def job_ids(self) -> list[str]:
        return [job.id for job in self._scheduler.get_jobs()]

    def run_sweep(self, now: date | datetime | None = None) -> list[tuple[Product, FreshnessStatus]]:
        """Find urgent products and pass them to the notifier."""
        now = now or date.today()
        db = ProductDB(self._config.database.path)
        try:
            items = db.get_expiring(self._engine, now)
        finally:
            db.close()

        if items:
            logger.info("Found %d product(s) needing attention", len(items))
            self._notify(items)
        return items

    async def _job_sweep(self) -> None:
        logger.info("Running freshness sweep...")
        try:
            self.run_sweep()
        except Exception:
            logger.exception("Freshness sweep failed")
