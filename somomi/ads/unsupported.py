"""Ad service for platforms without rewarded ads."""

from __future__ import annotations

from . import AdUnsupportedError, Reward, RewardedAdService


class UnsupportedAdService(RewardedAdService):
    def __init__(self, platform: str = "web") -> None:
        self._platform = platform

    async def show(
        self, unit_id: str, custom_data: str | None = None
    ) -> Reward | None:
        raise AdUnsupportedError(
            f"Rewarded ads are not supported on {self._platform}"
        )
