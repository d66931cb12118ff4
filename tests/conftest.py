import pytest

from triggerscale.config import parse_scalable_object
from triggerscale.sources import MetricSourceRegistry


class FakeClock:
    """Manually advanced clock for deterministic cooldown tests."""

    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def stan_record(**overrides):
    """A ScaledObject record shaped like the NATS Streaming end-to-end setup."""

    record = {
        "name": "stan-test-so",
        "namespace": "stan-test-ns",
        "minReplicaCount": 0,
        "maxReplicaCount": 5,
        "pollingInterval": 3,
        "cooldownPeriod": 10,
        "triggers": [
            {
                "type": "stan",
                "metadata": {
                    "natsServerMonitoringEndpoint": "stan-nats.stan-test-ns:8222",
                    "queueGroup": "grp1",
                    "durableName": "ImDurable",
                    "subject": "Test",
                    "lagThreshold": "10",
                    "activationLagThreshold": "15",
                },
            }
        ],
    }
    record.update(overrides)
    return record


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def stan_object():
    return parse_scalable_object(stan_record())


@pytest.fixture
def registry():
    return MetricSourceRegistry()
