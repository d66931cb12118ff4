import asyncio
import math
from typing import Callable, List, Tuple

import async_timeout

from triggerscale.errors import AdapterUnavailable
from triggerscale.models import MetricSample, ScalableObject, TriggerResult, TriggerSpec
from triggerscale.sources.registry import MetricSourceRegistry
from triggerscale.utils.time import monotonic


def suggest_replicas(value: float, trigger: TriggerSpec, max_replicas: int) -> int:
    """Replicas needed to drain `value`, clamped to `[0, max_replicas]`."""

    if trigger.lag_threshold > 0:
        suggested = math.ceil(value / trigger.lag_threshold)
    else:
        # A zero threshold means any backlog at all calls for full scale.
        suggested = max_replicas if value > 0 else 0
    return max(0, min(suggested, max_replicas))


class TriggerEvaluator:
    """Reads one metric per trigger and turns it into an activation signal and a replica suggestion."""

    def __init__(self, registry: MetricSourceRegistry, clock: Callable[[], float] = monotonic):
        self.registry = registry
        self.clock = clock

    async def _read(self, trigger: TriggerSpec, timeout: float) -> float:
        source = self.registry.get(trigger.type)
        async with async_timeout.timeout(timeout):
            value = await source.get_metric_value(trigger.metadata)

        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"metric source returned {type(value).__name__}, expected a number")
        if math.isnan(value) or math.isinf(value) or value < 0:
            raise ValueError(f"metric source returned malformed value {value!r}")
        return float(value)

    async def evaluate(self, trigger: TriggerSpec, obj: ScalableObject, timeout: float) -> TriggerResult:
        """
        Evaluates a single trigger. Any failure, including a timeout, is captured in the
        result as `AdapterUnavailable` instead of being raised, so one broken trigger
        never blocks the others. Cancellation still propagates.
        """

        try:
            value = await self._read(trigger, timeout)
        except Exception as e:
            return TriggerResult(trigger=trigger, error=AdapterUnavailable(trigger, e))

        return TriggerResult(
            trigger=trigger,
            active=value > trigger.activation_lag_threshold,
            suggested=suggest_replicas(value, trigger, obj.max_replica_count),
            sample=MetricSample(trigger=trigger, value=value, collected_at=self.clock()),
        )

    async def evaluate_all(self, obj: ScalableObject, timeout: float) -> Tuple[TriggerResult, ...]:
        """Evaluates every trigger of `obj` concurrently, preserving trigger order."""

        results: List[TriggerResult] = await asyncio.gather(
            *(self.evaluate(trigger, obj, timeout) for trigger in obj.triggers)
        )
        return tuple(results)
