"""Adapter from a native rewarded-ad bridge to RewardedAdService."""

from __future__ import annotations

import logging

from . import (
    TEST_REWARDED_UNIT_ID,
    AdBridge,
    AdError,
    Reward,
    RewardedAdService,
    validate_unit_id,
)

logger = logging.getLogger(__name__)


class BridgeAdService(RewardedAdService):
    """Show rewarded ads through an injected native bridge coroutine.

    The bridge resolves to a ``{"type", "amount"}`` mapping when a reward
    was earned and to ``None`` when the ad closed without one.
    """

    def __init__(
        self,
        bridge: AdBridge,
        default_unit_id: str = "",
        non_personalized_only: bool = True,
    ) -> None:
        self._bridge = bridge
        self._default_unit_id = default_unit_id or TEST_REWARDED_UNIT_ID
        self._non_personalized_only = non_personalized_only

    async def show(
        self, unit_id: str, custom_data: str | None = None
    ) -> Reward | None:
        unit_id = validate_unit_id(unit_id or self._default_unit_id)
        logger.debug("Showing rewarded ad %s", unit_id)

        try:
            raw = await self._bridge(
                unit_id, custom_data, self._non_personalized_only
            )
        except AdError:
            raise
        except Exception as e:
            raise AdError(f"Rewarded ad failed: {e}") from e

        if raw is None:
            logger.info("Rewarded ad %s dismissed without reward", unit_id)
            return None
        return Reward(type=str(raw.get("type", "")), amount=int(raw.get("amount", 0)))
