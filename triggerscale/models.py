"""Data structures shared by the decision engine."""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple


class CooldownState(str, Enum):
    """States of the per-object cooldown state machine."""

    ACTIVE = "active"
    COOLING_DOWN = "cooling_down"
    IDLE = "idle"


@dataclass(frozen=True)
class TriggerSpec:
    type: str
    lag_threshold: float
    activation_lag_threshold: float = 0.0
    metadata: Mapping[str, str] = field(default_factory=dict, hash=False)
    name: Optional[str] = None

    def __post_init__(self):
        # Freeze the metadata so a running tick can never see it change.
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))
        if self.name is None:
            object.__setattr__(self, "name", self.type)

    def __str__(self):
        return self.name


@dataclass(frozen=True)
class ScalableObject:
    name: str
    namespace: str
    min_replica_count: int
    max_replica_count: int
    polling_interval: int
    cooldown_period: int
    triggers: Tuple[TriggerSpec, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "triggers", tuple(self.triggers))

    @property
    def identity(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass(frozen=True)
class MetricSample:
    trigger: TriggerSpec
    value: float
    collected_at: float


@dataclass(frozen=True)
class TriggerResult:
    """Outcome of evaluating one trigger for one tick."""

    trigger: TriggerSpec
    active: bool = False
    suggested: int = 0
    sample: Optional[MetricSample] = None
    error: Optional[Exception] = None

    @property
    def available(self) -> bool:
        return self.error is None

    @property
    def value(self) -> Optional[float]:
        return self.sample.value if self.sample else None


@dataclass(frozen=True)
class Aggregate:
    """Combined activation and replica suggestion over all available triggers."""

    active: bool
    suggested: int


@dataclass(frozen=True)
class ScaleDecision:
    desired_replicas: int
    is_active: bool
    decided_at: float
    state: CooldownState


@dataclass
class TickRecord:
    """Structured per-tick output handed to reporters."""

    identity: str
    timestamp: float
    results: Tuple[TriggerResult, ...] = ()
    aggregate: Optional[Aggregate] = None
    decision: Optional[ScaleDecision] = None
    applied_replicas: Optional[int] = None
    errors: Tuple[str, ...] = ()

    @property
    def degraded(self) -> bool:
        return self.aggregate is None

    def to_dict(self):
        return {
            "identity": self.identity,
            "timestamp": self.timestamp,
            "triggers": [
                {
                    "name": r.trigger.name,
                    "type": r.trigger.type,
                    "metadata": r.trigger.metadata,
                    "value": r.value,
                    "active": r.active,
                    "suggested": r.suggested,
                    "error": str(r.error) if r.error else None,
                }
                for r in self.results
            ],
            "aggregate": None if self.aggregate is None else {
                "active": self.aggregate.active,
                "suggested": self.aggregate.suggested,
            },
            "state": self.decision.state if self.decision else None,
            "desired_replicas": self.decision.desired_replicas if self.decision else None,
            "applied_replicas": self.applied_replicas,
            "errors": list(self.errors),
        }
