import dataclasses

import pytest

from triggerscale.auto_scaling.cooldown import CooldownController
from triggerscale.models import Aggregate, CooldownState

pytestmark = [pytest.mark.unit]

ACTIVE = Aggregate(active=True, suggested=3)
INACTIVE = Aggregate(active=False, suggested=0)


class TestCooldownController:
    def test_starts_idle_at_min(self, stan_object):
        controller = CooldownController(dataclasses.replace(stan_object, min_replica_count=2))
        assert controller.state is CooldownState.IDLE
        assert controller.target == 2

    def test_activation_scales_up_immediately(self, stan_object):
        controller = CooldownController(stan_object)
        decision = controller.decide(stan_object, ACTIVE, now=0)

        assert decision.state is CooldownState.ACTIVE
        assert decision.is_active
        assert decision.desired_replicas == 3
        assert controller.last_active_at == 0

    def test_active_floor_is_one_when_min_is_zero(self, stan_object):
        controller = CooldownController(stan_object)
        decision = controller.decide(stan_object, Aggregate(active=True, suggested=0), now=0)
        assert decision.desired_replicas == 1

    def test_active_floor_honours_larger_min(self, stan_object):
        obj = dataclasses.replace(stan_object, min_replica_count=2)
        decision = CooldownController(obj).decide(obj, Aggregate(active=True, suggested=1), now=0)
        assert decision.desired_replicas == 2

    def test_active_target_is_capped_at_max(self, stan_object):
        decision = CooldownController(stan_object).decide(stan_object, Aggregate(active=True, suggested=50), now=0)
        assert decision.desired_replicas == 5

    def test_deactivation_holds_target_until_cooldown_elapses(self, stan_object):
        controller = CooldownController(stan_object)
        controller.decide(stan_object, ACTIVE, now=0)

        for now in (1, 5, 9.9):
            decision = controller.decide(stan_object, INACTIVE, now=now)
            assert decision.state is CooldownState.COOLING_DOWN
            assert decision.desired_replicas == 3

        decision = controller.decide(stan_object, INACTIVE, now=10)
        assert decision.state is CooldownState.IDLE
        assert decision.desired_replicas == 0

    def test_cooldown_counts_from_last_active_tick(self, stan_object):
        controller = CooldownController(stan_object)
        controller.decide(stan_object, ACTIVE, now=0)
        controller.decide(stan_object, INACTIVE, now=3)
        controller.decide(stan_object, ACTIVE, now=6)

        assert controller.decide(stan_object, INACTIVE, now=12).state is CooldownState.COOLING_DOWN
        assert controller.decide(stan_object, INACTIVE, now=16).state is CooldownState.IDLE

    def test_zero_cooldown_idles_on_first_inactive_tick(self, stan_object):
        obj = dataclasses.replace(stan_object, cooldown_period=0)
        controller = CooldownController(obj)
        controller.decide(obj, ACTIVE, now=0)

        decision = controller.decide(obj, INACTIVE, now=3)
        assert decision.state is CooldownState.IDLE
        assert decision.desired_replicas == 0

    def test_reactivation_during_cooldown_is_immediate(self, stan_object):
        controller = CooldownController(stan_object)
        controller.decide(stan_object, Aggregate(active=True, suggested=2), now=0)
        controller.decide(stan_object, INACTIVE, now=3)

        decision = controller.decide(stan_object, Aggregate(active=True, suggested=4), now=6)
        assert decision.state is CooldownState.ACTIVE
        assert decision.desired_replicas == 4

    def test_idle_stays_at_min(self, stan_object):
        controller = CooldownController(stan_object)
        for now in range(0, 30, 3):
            assert controller.decide(stan_object, INACTIVE, now=now).desired_replicas == 0

    def test_no_decision_holds_state_and_target(self, stan_object):
        controller = CooldownController(stan_object)
        controller.decide(stan_object, ACTIVE, now=0)
        controller.decide(stan_object, INACTIVE, now=3)

        # Even long after the cooldown, a tick without data changes nothing.
        decision = controller.decide(stan_object, None, now=100)
        assert decision.state is CooldownState.COOLING_DOWN
        assert decision.desired_replicas == 3

    def test_held_target_is_clamped_after_reconfiguration(self, stan_object):
        controller = CooldownController(stan_object)
        controller.decide(stan_object, Aggregate(active=True, suggested=5), now=0)

        smaller = dataclasses.replace(stan_object, max_replica_count=2)
        decision = controller.decide(smaller, INACTIVE, now=1)
        assert decision.state is CooldownState.COOLING_DOWN
        assert decision.desired_replicas == 2

    def test_repeated_ticks_with_same_input_are_idempotent(self, stan_object):
        controller = CooldownController(stan_object)
        first = controller.decide(stan_object, ACTIVE, now=0)
        second = controller.decide(stan_object, ACTIVE, now=3)
        assert (first.desired_replicas, first.state) == (second.desired_replicas, second.state)
