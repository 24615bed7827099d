"""Freshness and consumption lifecycle computation for tracked products."""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta

DEFAULT_WARNING_PCT = 30
DEFAULT_URGENT_PCT = 10


class UrgencyTier(str, enum.Enum):
    NORMAL = "normal"
    WARNING = "warning"
    URGENT = "urgent"
    EXPIRED = "expired"


class LifecycleState(str, enum.Enum):
    UNOPENED = "unopened"
    ACTIVE = "active"
    CONSUMED = "consumed"


class FreshnessError(ValueError):
    """Base class for freshness validation failures."""

    kind = "FreshnessError"


class InvalidTimelineError(FreshnessError):
    kind = "InvalidTimeline"


class ConsumptionError(FreshnessError):
    """A consume (or open) request was rejected."""

    kind = "ConsumptionError"


class AlreadyConsumedError(ConsumptionError):
    kind = "AlreadyConsumed"


class NotYetOpenedError(ConsumptionError):
    kind = "NotYetOpened"


class DateBeforeOpenError(ConsumptionError):
    kind = "DateBeforeOpen"


class DateInFutureError(ConsumptionError):
    kind = "DateInFuture"


class AlreadyOpenedError(ConsumptionError):
    kind = "AlreadyOpened"


@dataclass(frozen=True)
class ProductTimeline:
    """Dates that drive a product's freshness."""

    estimated_life_days: int
    opened_at: date | None = None
    explicit_expiry_at: date | None = None
    consumed_at: date | None = None

    @property
    def state(self) -> LifecycleState:
        if self.consumed_at is not None:
            return LifecycleState.CONSUMED
        if self.opened_at is None:
            return LifecycleState.UNOPENED
        return LifecycleState.ACTIVE


@dataclass(frozen=True)
class FreshnessStatus:
    percent_remaining: int
    days_remaining: int
    urgency_tier: UrgencyTier
    consumed: bool = False


def _as_date(value: date | datetime) -> date:
    # datetime is a subclass of date, so check it first
    if isinstance(value, datetime):
        return value.date()
    return value


def effective_expiry(timeline: ProductTimeline) -> date | None:
    """Return the date past which the product counts as expired.

    An explicit expiry always wins over ``opened_at + estimated_life_days``.
    Unopened products without an explicit expiry have none.
    """
    if timeline.explicit_expiry_at is not None:
        return timeline.explicit_expiry_at
    if timeline.opened_at is None:
        return None
    return timeline.opened_at + timedelta(days=timeline.estimated_life_days)


class FreshnessEngine:
    """Stateless status computation with configurable tier thresholds.

    ``now`` is always passed in; the engine never reads the clock.
    """

    def __init__(
        self,
        warning_pct: int = DEFAULT_WARNING_PCT,
        urgent_pct: int = DEFAULT_URGENT_PCT,
    ) -> None:
        if not 0 <= urgent_pct <= warning_pct <= 100:
            raise ValueError(
                f"invalid thresholds: urgent_pct={urgent_pct}, "
                f"warning_pct={warning_pct} (need 0 <= urgent <= warning <= 100)"
            )
        self.warning_pct = warning_pct
        self.urgent_pct = urgent_pct

    def compute_status(
        self, timeline: ProductTimeline, now: date | datetime
    ) -> FreshnessStatus:
        if timeline.estimated_life_days <= 0:
            raise InvalidTimelineError(
                f"estimated_life_days must be positive, got {timeline.estimated_life_days}"
            )

        if timeline.consumed_at is not None:
            return FreshnessStatus(
                percent_remaining=0,
                days_remaining=0,
                urgency_tier=UrgencyTier.NORMAL,
                consumed=True,
            )

        if timeline.opened_at is None:
            return FreshnessStatus(
                percent_remaining=100,
                days_remaining=timeline.estimated_life_days,
                urgency_tier=UrgencyTier.NORMAL,
            )

        expiry = effective_expiry(timeline)
        total_span = max((expiry - timeline.opened_at).days, 1)
        elapsed = (_as_date(now) - timeline.opened_at).days

        clamped = min(max(elapsed, 0), total_span)
        # Nearest integer, halves rounded up, in exact integer arithmetic
        percent = (200 * (total_span - clamped) + total_span) // (2 * total_span)
        percent = min(max(percent, 0), 100)
        days_remaining = total_span - elapsed

        return FreshnessStatus(
            percent_remaining=percent,
            days_remaining=days_remaining,
            urgency_tier=self.classify(percent, days_remaining),
        )

    def classify(self, percent_remaining: int, days_remaining: int) -> UrgencyTier:
        if days_remaining < 0:
            return UrgencyTier.EXPIRED
        if percent_remaining <= self.urgent_pct:
            return UrgencyTier.URGENT
        if percent_remaining <= self.warning_pct:
            return UrgencyTier.WARNING
        return UrgencyTier.NORMAL


_default_engine = FreshnessEngine()


def compute_status(timeline: ProductTimeline, now: date | datetime) -> FreshnessStatus:
    """Compute freshness with the default 30% / 10% thresholds."""
    return _default_engine.compute_status(timeline, now)


def is_urgent(status: FreshnessStatus) -> bool:
    """True when the product should be surfaced for immediate use."""
    return status.urgency_tier in (UrgencyTier.URGENT, UrgencyTier.EXPIRED)


def apply_consumption(
    timeline: ProductTimeline,
    requested_date: date | None,
    now: date | datetime,
) -> ProductTimeline:
    """Return a copy of *timeline* marked consumed.

    Raises:
        AlreadyConsumedError: The product is already consumed.
        NotYetOpenedError: The product was never opened.
        DateBeforeOpenError: ``requested_date`` precedes ``opened_at``.
        DateInFutureError: ``requested_date`` is after ``now``.
    """
    today = _as_date(now)

    if timeline.consumed_at is not None:
        raise AlreadyConsumedError(
            f"product was already consumed on {timeline.consumed_at.isoformat()}"
        )
    if timeline.opened_at is None:
        raise NotYetOpenedError("cannot consume a product that was never opened")

    if requested_date is not None:
        requested_date = _as_date(requested_date)
        if requested_date < timeline.opened_at:
            raise DateBeforeOpenError(
                f"consumption date {requested_date.isoformat()} is before "
                f"open date {timeline.opened_at.isoformat()}"
            )
        if requested_date > today:
            raise DateInFutureError(
                f"consumption date {requested_date.isoformat()} is in the future"
            )

    return replace(timeline, consumed_at=requested_date or today)


def validate_timeline(timeline: ProductTimeline, now: date | datetime) -> ProductTimeline:
    """Check that a stored timeline is reachable through the lifecycle.

    Raises:
        InvalidTimelineError: ``estimated_life_days`` is not positive.
        NotYetOpenedError: Consumed without ever being opened.
        DateBeforeOpenError: Consumed before it was opened.
        DateInFutureError: Opened or consumed after ``now``.
    """
    today = _as_date(now)

    if timeline.estimated_life_days <= 0:
        raise InvalidTimelineError(
            f"estimated_life_days must be positive, got {timeline.estimated_life_days}"
        )
    if timeline.opened_at is not None and timeline.opened_at > today:
        raise DateInFutureError(
            f"open date {timeline.opened_at.isoformat()} is in the future"
        )
    if timeline.consumed_at is not None:
        if timeline.opened_at is None:
            raise NotYetOpenedError("a consumed product must have an open date")
        if timeline.consumed_at < timeline.opened_at:
            raise DateBeforeOpenError(
                f"consumption date {timeline.consumed_at.isoformat()} is before "
                f"open date {timeline.opened_at.isoformat()}"
            )
        if timeline.consumed_at > today:
            raise DateInFutureError(
                f"consumption date {timeline.consumed_at.isoformat()} is in the future"
            )
    return timeline


def open_product(
    timeline: ProductTimeline,
    opened_at: date | None,
    now: date | datetime,
) -> ProductTimeline:
    """Move an unopened product into active use."""
    today = _as_date(now)

    if timeline.consumed_at is not None:
        raise AlreadyConsumedError(
            f"product was already consumed on {timeline.consumed_at.isoformat()}"
        )
    if timeline.opened_at is not None:
        raise AlreadyOpenedError(
            f"product was already opened on {timeline.opened_at.isoformat()}"
        )
    if opened_at is not None:
        opened_at = _as_date(opened_at)
        if opened_at > today:
            raise DateInFutureError(
                f"open date {opened_at.isoformat()} is in the future"
            )

    return replace(timeline, opened_at=opened_at or today)
