"""Tests for ExpirySweepScheduler."""

from datetime import date

import pytest

from somomi.config import load_config
from somomi.db import Product, ProductDB
from somomi.freshness import ProductTimeline, UrgencyTier

pytest.importorskip("apscheduler")

from somomi.scheduler import ExpirySweepScheduler  # noqa: E402


@pytest.fixture
def config(tmp_path):
    config = load_config()
    config.database.path = str(tmp_path / "test.db")
    config.scheduler.enabled = True
    return config


def test_scheduler_initial_state(config):
    scheduler = ExpirySweepScheduler(config)
    assert scheduler.running is False


def test_scheduler_setup_jobs(config):
    """The sweep job is registered with the configured schedule."""
    config.scheduler.sweep_schedule = "0 7 * * *"
    scheduler = ExpirySweepScheduler(config)
    scheduler.setup_jobs()

    assert scheduler.job_ids() == ["freshness_sweep"]


def test_scheduler_disabled_registers_nothing(config):
    """No sweep job is registered when the scheduler is disabled."""
    config.scheduler.enabled = False
    scheduler = ExpirySweepScheduler(config)
    scheduler.setup_jobs()

    assert scheduler.job_ids() == []


def test_scheduler_invalid_cron(config):
    config.scheduler.sweep_schedule = "every day"
    scheduler = ExpirySweepScheduler(config)
    with pytest.raises(ValueError, match="invalid cron"):
        scheduler.setup_jobs()


def test_run_sweep_notifies_urgent(config):
    db = ProductDB(config.database.path)
    try:
        db.add_product(
            Product(
                name="선크림",
                timeline=ProductTimeline(
                    estimated_life_days=30, opened_at=date(2024, 1, 1)
                ),
            )
        )
        db.add_product(
            Product(
                name="바디워시",
                timeline=ProductTimeline(
                    estimated_life_days=365, opened_at=date(2024, 1, 1)
                ),
            )
        )
    finally:
        db.close()

    notified = []
    scheduler = ExpirySweepScheduler(config, notify=notified.extend)
    items = scheduler.run_sweep(date(2024, 2, 5))

    assert [p.name for p, _ in items] == ["선크림"]
    assert items[0][1].urgency_tier is UrgencyTier.EXPIRED
    assert notified == items


def test_run_sweep_nothing_to_report(config):
    notified = []
    scheduler = ExpirySweepScheduler(config, notify=notified.extend)
    assert scheduler.run_sweep(date(2024, 2, 5)) == []
    assert notified == []
