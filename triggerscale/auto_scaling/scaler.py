import asyncio
import traceback
from typing import Callable, Optional

from triggerscale.auto_scaling.aggregator import Aggregator
from triggerscale.auto_scaling.cooldown import CooldownController
from triggerscale.auto_scaling.evaluator import TriggerEvaluator
from triggerscale.config import trigger_timeout, validate_scalable_object, validate_timeout_ratio
from triggerscale.constants import DEFAULT_TRIGGER_TIMEOUT_RATIO
from triggerscale.errors import AllTriggersUnavailable, ExecutorFailure, InvalidConfiguration
from triggerscale.executor import ScalingExecutor
from triggerscale.logger import ScaleLogger
from triggerscale.models import ScalableObject, TickRecord
from triggerscale.reporting import TickReporter
from triggerscale.utils.time import monotonic


class ScaleLoop:
    """
    Periodic scaling task for a single ScalableObject.

    Each tick evaluates all triggers concurrently, aggregates the results, runs
    them through the cooldown state machine and hands the decision to the
    executor. Ticks never overlap: the next one is scheduled only after the
    previous one has applied its decision.
    """

    def __init__(
        self,
        obj: ScalableObject,
        evaluator: TriggerEvaluator,
        executor: ScalingExecutor,
        reporter: Optional[TickReporter] = None,
        clock: Callable[[], float] = monotonic,
        timeout_ratio: float = DEFAULT_TRIGGER_TIMEOUT_RATIO,
        initial_replicas: Optional[int] = None,
        logger: Optional[ScaleLogger] = None,
    ):
        self._object = validate_scalable_object(obj)
        self.identity = obj.identity

        self.evaluator = evaluator
        self.aggregator = Aggregator()
        self.cooldown = CooldownController(obj)
        self.executor = executor

        self.logger = logger or ScaleLogger(f"loop_{obj.namespace}_{obj.name}")
        self.reporter = reporter or TickReporter(self.logger)

        self.clock = clock
        self.timeout_ratio = validate_timeout_ratio(timeout_ratio)

        # Last replica count the executor accepted; None until the first successful apply.
        self.applied: Optional[int] = initial_replicas
        self.last_record: Optional[TickRecord] = None
        self.ticks = 0

        self._stopping = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    @property
    def object(self) -> ScalableObject:
        return self._object

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def reconfigure(self, obj: ScalableObject) -> None:
        """Swaps in a new configuration; the next tick sees all of it or none of it."""

        if obj.identity != self.identity:
            raise InvalidConfiguration(f"cannot reconfigure {self.identity} as {obj.identity}", "name")
        self._object = validate_scalable_object(obj)
        self.logger.std_log("[%s] reconfigured: min=%s max=%s triggers=%s", self.identity,
                            obj.min_replica_count, obj.max_replica_count, [t.name for t in obj.triggers])

    async def _apply(self, replicas: int) -> Optional[ExecutorFailure]:
        try:
            await self.executor.set_replicas(self.identity, replicas)
        except Exception as e:
            return ExecutorFailure(self.identity, replicas, e)

        if replicas != self.applied:
            self.logger.std_log("[%s] scaled %s -> %s replicas", self.identity, self.applied, replicas)
        self.applied = replicas
        return None

    async def tick(self) -> Optional[TickRecord]:
        """Runs one evaluation cycle. Returns None if the loop was stopped mid-tick."""

        # Take a single snapshot so a concurrent reconfigure cannot split the tick.
        obj = self._object

        results = await self.evaluator.evaluate_all(obj, trigger_timeout(obj, self.timeout_ratio))
        if self._stopping.is_set():
            return None

        aggregate = self.aggregator.aggregate(results)
        errors = [str(r.error) for r in results if r.error is not None]
        if aggregate is None:
            errors.append(str(AllTriggersUnavailable(self.identity)))

        decision = self.cooldown.decide(obj, aggregate, self.clock())

        # A tick without any available trigger keeps the workload as it is.
        if aggregate is not None:
            failure = await self._apply(decision.desired_replicas)
            if failure is not None:
                errors.append(str(failure))
                self.logger.error_log("%s", failure)

        record = TickRecord(
            identity=self.identity,
            timestamp=decision.decided_at,
            results=results,
            aggregate=aggregate,
            decision=decision,
            applied_replicas=self.applied,
            errors=tuple(errors),
        )
        self.ticks += 1
        self.last_record = record

        await self.reporter.report(record, decision.state.value)
        return record

    async def run(self):
        """Ticks every `polling_interval` seconds until stopped."""

        loop = asyncio.get_running_loop()
        self.logger.std_log("[%s] scale loop started.", self.identity)

        try:
            while not self._stopping.is_set():
                started = loop.time()

                try:
                    await self.tick()
                except Exception:
                    # A failing tick is reported and retried on the next interval.
                    self.logger.error_log("[%s] tick failed:\n%s", self.identity, traceback.format_exc())

                delay = max(0.0, self._object.polling_interval - (loop.time() - started))
                try:
                    await asyncio.wait_for(self._stopping.wait(), timeout=delay)
                except asyncio.TimeoutError:
                    pass
        finally:
            self.logger.std_log("[%s] scale loop stopped.", self.identity)

    def start(self) -> asyncio.Task:
        if self.running:
            return self._task

        self._stopping.clear()
        self._task = asyncio.ensure_future(self.run())
        return self._task

    async def stop(self):
        """Stops the loop, cancelling any in-flight trigger calls of the current tick."""

        self._stopping.set()
        if self._task is None:
            return

        task, self._task = self._task, None
        task.cancel()

        # Only the loop task's own cancellation is absorbed; a cancelled caller still raises.
        await asyncio.wait([task])
        if not task.cancelled():
            task.result()

