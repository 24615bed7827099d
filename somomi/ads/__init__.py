"""Rewarded-ad service contract, errors, and factory."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Awaitable, Callable

if TYPE_CHECKING:
    from ..config import SomomiConfig

# Google's public test unit for rewarded ads
TEST_REWARDED_UNIT_ID = "ca-app-pub-3940256099942544/5224354917"


@dataclass
class Reward:
    type: str
    amount: int


class AdError(RuntimeError):
    """Showing a rewarded ad failed."""


class AdUnsupportedError(AdError):
    """Rewarded ads are not available on this platform."""


# bridge(unit_id, custom_data, non_personalized) -> {"type": ..., "amount": ...} | None
AdBridge = Callable[[str, "str | None", bool], Awaitable["dict | None"]]


class RewardedAdService(ABC):
    """Abstract base for showing a rewarded ad to the user."""

    @abstractmethod
    async def show(
        self, unit_id: str, custom_data: str | None = None
    ) -> Reward | None:
        """Show an ad and wait for it to close.

        Returns the earned reward, or ``None`` when the user dismissed the
        ad before earning one.

        Raises:
            AdError: The ad failed to load or show.
        """
        ...


def validate_unit_id(unit_id: str) -> str:
    """Reject application IDs passed where an ad unit ID is expected.

    App IDs look like ``ca-app-pub-XXX~YYY``; unit IDs use ``/``.
    """
    if "~" in unit_id:
        raise ValueError(
            f"{unit_id!r} looks like an application ID, not an ad unit ID"
        )
    return unit_id


def create_ad_service(
    config: SomomiConfig, bridge: AdBridge | None = None
) -> RewardedAdService:
    """Create an ad service for the configured platform."""
    platform = config.ads.platform

    match platform:
        case "web":
            from .unsupported import UnsupportedAdService

            return UnsupportedAdService(platform)
        case "native":
            if bridge is None:
                raise ValueError("native ad platform requires a bridge")

            from .bridge import BridgeAdService

            return BridgeAdService(
                bridge,
                default_unit_id=config.ads.unit_id,
                non_personalized_only=config.ads.non_personalized_only,
            )
        case _:
            raise ValueError(
                f"unknown ad platform: {platform!r} (choose web / native)"
            )


__all__ = [
    "AdBridge",
    "AdError",
    "AdUnsupportedError",
    "Reward",
    "RewardedAdService",
    "TEST_REWARDED_UNIT_ID",
    "create_ad_service",
    "validate_unit_id",
]
