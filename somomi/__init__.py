"""Freshness and consumption tracking for household products."""

from .config import (
    AdsConfig,
    DatabaseConfig,
    FreshnessConfig,
    SchedulerConfig,
    SomomiConfig,
    load_config,
)
from .freshness import (
    AlreadyConsumedError,
    AlreadyOpenedError,
    ConsumptionError,
    DateBeforeOpenError,
    DateInFutureError,
    FreshnessEngine,
    FreshnessError,
    FreshnessStatus,
    InvalidTimelineError,
    LifecycleState,
    NotYetOpenedError,
    ProductTimeline,
    UrgencyTier,
    apply_consumption,
    compute_status,
    effective_expiry,
    is_urgent,
    open_product,
    validate_timeline,
)

__all__ = [
    "FreshnessEngine",
    "ProductTimeline",
    "FreshnessStatus",
    "UrgencyTier",
    "LifecycleState",
    "compute_status",
    "apply_consumption",
    "open_product",
    "validate_timeline",
    "effective_expiry",
    "is_urgent",
    "FreshnessError",
    "InvalidTimelineError",
    "ConsumptionError",
    "AlreadyConsumedError",
    "AlreadyOpenedError",
    "NotYetOpenedError",
    "DateBeforeOpenError",
    "DateInFutureError",
    "SomomiConfig",
    "DatabaseConfig",
    "FreshnessConfig",
    "AdsConfig",
    "SchedulerConfig",
    "load_config",
]
