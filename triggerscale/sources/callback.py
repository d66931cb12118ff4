import asyncio
from typing import Any, Callable, Mapping

from .base import activation_threshold


class CallbackMetricSource:
    """Reads metric values from a user supplied callable, sync or async."""

    def __init__(self, func: Callable[[Mapping[str, str]], Any]):
        self.func = func

    async def get_metric_value(self, metadata: Mapping[str, str]) -> float:
        value = self.func(metadata)
        if asyncio.iscoroutine(value):
            value = await value
        return float(value)

    async def is_active(self, metadata: Mapping[str, str]) -> bool:
        return await self.get_metric_value(metadata) > activation_threshold(metadata)
