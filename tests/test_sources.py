import pytest

from triggerscale.executor import CallbackExecutor, InMemoryExecutor, ScalingExecutor
from triggerscale.sources import CallbackMetricSource, MetricSource, MetricSourceRegistry, ReplayMetricSource

pytestmark = [pytest.mark.unit]

METADATA = {"lagThreshold": "10", "activationLagThreshold": "15", "subject": "Test"}


class TestCallbackMetricSource:
    @pytest.mark.asyncio
    async def test_sync_callable(self):
        source = CallbackMetricSource(lambda metadata: 20 if metadata["subject"] == "Test" else 0)
        assert await source.get_metric_value(METADATA) == 20.0
        assert await source.is_active(METADATA)

    @pytest.mark.asyncio
    async def test_async_callable(self):
        async def lag(metadata):
            return "12"

        source = CallbackMetricSource(lag)
        assert await source.get_metric_value(METADATA) == 12.0
        assert not await source.is_active(METADATA)

    @pytest.mark.asyncio
    async def test_is_active_defaults_to_any_backlog(self):
        source = CallbackMetricSource(lambda metadata: 1)
        assert await source.is_active({"lagThreshold": "10"})


class TestReplayMetricSource:
    @pytest.mark.asyncio
    async def test_repeats_last_sample(self):
        source = ReplayMetricSource([1, 2])
        values = [await source.get_metric_value(METADATA) for _ in range(4)]
        assert values == [1.0, 2.0, 2.0, 2.0]

    @pytest.mark.asyncio
    async def test_cycle(self):
        source = ReplayMetricSource([1, 2], cycle=True)
        values = [await source.get_metric_value(METADATA) for _ in range(4)]
        assert values == [1.0, 2.0, 1.0, 2.0]

    @pytest.mark.asyncio
    async def test_raises_exception_samples(self):
        source = ReplayMetricSource([ConnectionError("down"), 5])
        with pytest.raises(ConnectionError):
            await source.get_metric_value(METADATA)
        assert await source.get_metric_value(METADATA) == 5.0

    @pytest.mark.asyncio
    async def test_streams_are_keyed_by_metadata(self):
        source = ReplayMetricSource([1, 2, 3], key="subject")
        await source.get_metric_value({"subject": "a"})
        await source.get_metric_value({"subject": "a"})
        assert await source.get_metric_value({"subject": "b"}) == 1.0

    def test_requires_samples(self):
        with pytest.raises(ValueError):
            ReplayMetricSource([])


class TestMetricSourceRegistry:
    def test_variants_implement_the_capability(self):
        assert isinstance(ReplayMetricSource([0]), MetricSource)
        assert isinstance(CallbackMetricSource(lambda m: 0), MetricSource)

    def test_register_and_lookup(self):
        source = ReplayMetricSource([0])
        registry = MetricSourceRegistry({"stan": source})
        assert "stan" in registry
        assert registry.get("stan") is source
        assert list(registry) == ["stan"]

        registry.unregister("stan")
        assert "stan" not in registry

    def test_rejects_objects_without_the_capability(self):
        with pytest.raises(TypeError):
            MetricSourceRegistry().register("stan", object())


class TestExecutors:
    def test_variants_implement_the_capability(self):
        assert isinstance(InMemoryExecutor(), ScalingExecutor)
        assert isinstance(CallbackExecutor(lambda i, r: None), ScalingExecutor)

    @pytest.mark.asyncio
    async def test_in_memory_history(self):
        executor = InMemoryExecutor({"ns/a": 1})
        await executor.set_replicas("ns/a", 3)
        await executor.set_replicas("ns/b", 0)

        assert executor.get_replicas("ns/a") == 3
        assert executor.history_for("ns/a") == [3]
        assert executor.history == [("ns/a", 3), ("ns/b", 0)]

    @pytest.mark.asyncio
    async def test_callback_executor_awaits_coroutines(self):
        seen = []

        async def apply(identity, replicas):
            seen.append((identity, replicas))

        await CallbackExecutor(apply).set_replicas("ns/a", 2)
        assert seen == [("ns/a", 2)]
