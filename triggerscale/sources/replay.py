from typing import Iterable, Mapping, Optional, Union

from .base import activation_threshold

Sample = Union[float, int, BaseException]


class ReplayMetricSource:
    """
    Replays a fixed sequence of samples, one per call, for simulations and dry runs.

    Exceptions in the sequence are raised instead of returned, which models an
    outage of the metric endpoint. Once the sequence is exhausted the last sample
    repeats, unless `cycle` is set.
    """

    def __init__(self, samples: Iterable[Sample], cycle: bool = False, key: Optional[str] = None):
        self.samples = list(samples)
        if not self.samples:
            raise ValueError("ReplayMetricSource needs at least one sample.")

        self.cycle = cycle
        self.key = key
        self._positions = {}

    def _next(self, metadata: Mapping[str, str]) -> Sample:
        # Each stream key keeps its own cursor so several triggers can share a source.
        stream = metadata.get(self.key) if self.key else None
        pos = self._positions.get(stream, 0)

        if self.cycle:
            sample = self.samples[pos % len(self.samples)]
        else:
            sample = self.samples[min(pos, len(self.samples) - 1)]

        self._positions[stream] = pos + 1
        return sample

    async def get_metric_value(self, metadata: Mapping[str, str]) -> float:
        sample = self._next(metadata)
        if isinstance(sample, BaseException):
            raise sample
        return float(sample)

    async def is_active(self, metadata: Mapping[str, str]) -> bool:
        return await self.get_metric_value(metadata) > activation_threshold(metadata)
