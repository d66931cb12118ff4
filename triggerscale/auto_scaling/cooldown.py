from typing import Optional

from triggerscale.models import Aggregate, CooldownState, ScalableObject, ScaleDecision


def clamp(value: int, lower: int, upper: int) -> int:
    return max(lower, min(value, upper))


class CooldownController:
    """
    Per-object hysteresis for scale-down.

    Scale-up is applied on the tick it is observed. Scale-down to the minimum only
    happens once the object has been inactive for `cooldown_period` seconds,
    counted from the last tick on which it was active.
    """

    def __init__(self, obj: ScalableObject):
        self.state = CooldownState.IDLE
        self.target = obj.min_replica_count
        self.last_active_at: Optional[float] = None

    def _active(self, obj: ScalableObject, aggregate: Aggregate, now: float):
        # An active workload is never left at zero, even when the minimum is zero.
        floor = max(obj.min_replica_count, 1)
        self.target = clamp(aggregate.suggested, floor, obj.max_replica_count)
        self.state = CooldownState.ACTIVE
        self.last_active_at = now

    def _inactive(self, obj: ScalableObject, now: float):
        if self.state is CooldownState.ACTIVE:
            self.state = CooldownState.COOLING_DOWN

        if self.state is CooldownState.COOLING_DOWN:
            elapsed = now - self.last_active_at if self.last_active_at is not None else obj.cooldown_period
            if elapsed >= obj.cooldown_period:
                self.state = CooldownState.IDLE

        if self.state is CooldownState.IDLE:
            self.target = obj.min_replica_count

    def decide(self, obj: ScalableObject, aggregate: Optional[Aggregate], now: float) -> ScaleDecision:
        """Advances the state machine by one tick and returns the resulting decision."""

        if aggregate is not None:
            if aggregate.active:
                self._active(obj, aggregate, now)
            else:
                self._inactive(obj, now)

        # Keep a held target inside the bounds of the current configuration.
        self.target = clamp(self.target, obj.min_replica_count, obj.max_replica_count)

        return ScaleDecision(
            desired_replicas=self.target,
            is_active=self.state is CooldownState.ACTIVE,
            decided_at=now,
            state=self.state,
        )
