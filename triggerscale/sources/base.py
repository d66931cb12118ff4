from typing import Mapping, Protocol, runtime_checkable

from triggerscale.constants import ACTIVATION_LAG_THRESHOLD_KEY


@runtime_checkable
class MetricSource(Protocol):
    """Capability every trigger type provides: read a scalar metric for a trigger."""

    async def get_metric_value(self, metadata: Mapping[str, str]) -> float:
        """Returns the current metric value, raising on any failure."""
        ...

    async def is_active(self, metadata: Mapping[str, str]) -> bool:
        """Returns whether the metric is above the trigger's activation threshold."""
        ...


def activation_threshold(metadata: Mapping[str, str]) -> float:
    """Reads the activation threshold from raw trigger metadata, defaulting to zero."""

    return float(metadata.get(ACTIVATION_LAG_THRESHOLD_KEY, 0) or 0)
