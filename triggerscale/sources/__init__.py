from .base import MetricSource
from .callback import CallbackMetricSource
from .registry import MetricSourceRegistry
from .replay import ReplayMetricSource

__all__ = ["MetricSource", "CallbackMetricSource", "MetricSourceRegistry", "ReplayMetricSource"]
