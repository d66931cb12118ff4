from typing import Dict, Iterator, Optional

from .base import MetricSource


class MetricSourceRegistry:
    """Maps trigger types to the metric source shared by every trigger of that type."""

    def __init__(self, sources: Optional[Dict[str, MetricSource]] = None):
        self._sources: Dict[str, MetricSource] = {}
        for trigger_type, source in (sources or {}).items():
            self.register(trigger_type, source)

    def register(self, trigger_type: str, source: MetricSource) -> None:
        if not isinstance(source, MetricSource):
            raise TypeError(f"{type(source).__name__} does not implement get_metric_value/is_active.")
        self._sources[trigger_type] = source

    def unregister(self, trigger_type: str) -> None:
        self._sources.pop(trigger_type, None)

    def get(self, trigger_type: str) -> MetricSource:
        return self._sources[trigger_type]

    def __contains__(self, trigger_type: str) -> bool:
        return trigger_type in self._sources

    def __iter__(self) -> Iterator[str]:
        return iter(self._sources)
