import asyncio
import logging
import traceback
import uuid
from typing import Callable, Dict, Iterable, Optional

from triggerscale.auto_scaling.evaluator import TriggerEvaluator
from triggerscale.auto_scaling.scaler import ScaleLoop
from triggerscale.config import EngineConfig, validate_scalable_object, validate_timeout_ratio
from triggerscale.constants import DEFAULT_TRIGGER_TIMEOUT_RATIO, TICK_CSV_HEADER, TSCALE_STDOUT
from triggerscale.errors import InvalidConfiguration, UnknownScalableObject
from triggerscale.executor import ScalingExecutor
from triggerscale.logger import ScaleLogger
from triggerscale.models import ScalableObject
from triggerscale.reporting import KafkaRecordSink, RecordSink, TickReporter
from triggerscale.sources.registry import MetricSourceRegistry
from triggerscale.utils.time import monotonic


def _level(name):
    level = logging.getLevelName(name) if isinstance(name, str) else name
    return level if isinstance(level, int) else TSCALE_STDOUT


class ScaleManager:
    """Owns one scale loop per registered ScalableObject and their shared collaborators."""

    def __init__(
        self,
        registry: MetricSourceRegistry,
        executor: ScalingExecutor,
        log_dir: Optional[str] = None,
        log_level=TSCALE_STDOUT,
        sinks: Iterable[RecordSink] = (),
        clock: Callable[[], float] = monotonic,
        timeout_ratio: float = DEFAULT_TRIGGER_TIMEOUT_RATIO,
    ):
        self.manager_id = f"ScaleManager_{uuid.uuid4().hex[:8]}"

        self.registry = registry
        self.executor = executor
        self.clock = clock
        self.timeout_ratio = validate_timeout_ratio(timeout_ratio)

        # Handles structured logging and the per-tick CSV report.
        self.logger = ScaleLogger(self.manager_id, dirname=log_dir, csv_header=TICK_CSV_HEADER, level=_level(log_level))

        self.sinks = list(sinks)
        self.reporter = TickReporter(self.logger, self.sinks)

        # Trigger metric sources are shared between all loops.
        self.evaluator = TriggerEvaluator(registry, clock=clock)

        self.loops: Dict[str, ScaleLoop] = {}
        self._pending = []
        self._stopped = asyncio.Event()

    @classmethod
    def from_config(cls, config: EngineConfig, registry: MetricSourceRegistry, executor: ScalingExecutor, **kwargs):
        """Builds a manager from loaded settings; declared objects are registered by `run()`."""

        sinks = list(kwargs.pop("sinks", ()))
        if config.report_servers:
            sinks.append(KafkaRecordSink(config.report_topic, config.report_servers))

        manager = cls(
            registry, executor,
            log_dir=config.log_dir,
            log_level=config.log_level,
            sinks=sinks,
            timeout_ratio=config.trigger_timeout_ratio,
            **kwargs,
        )
        manager._pending = list(config.objects)
        return manager

    def _check_triggers(self, obj: ScalableObject):
        unknown = sorted({t.type for t in obj.triggers if t.type not in self.registry})
        if unknown:
            raise InvalidConfiguration(f"no metric source registered for trigger types {unknown}", "triggers")

    async def register(self, obj: ScalableObject, initial_replicas: Optional[int] = None, start: bool = True) -> ScaleLoop:
        """Validates `obj` and starts its scale loop."""

        validate_scalable_object(obj)
        self._check_triggers(obj)
        if obj.identity in self.loops:
            raise InvalidConfiguration(f"{obj.identity} is already registered", "name")

        loop = ScaleLoop(
            obj, self.evaluator, self.executor,
            reporter=self.reporter,
            clock=self.clock,
            timeout_ratio=self.timeout_ratio,
            initial_replicas=initial_replicas,
            logger=self.logger,
        )
        self.loops[obj.identity] = loop
        self.logger.std_log("Registered %s with %d trigger(s).", obj.identity, len(obj.triggers))

        if start:
            loop.start()
        return loop

    def reconfigure(self, obj: ScalableObject) -> None:
        """Replaces the configuration of a registered object, keeping its cooldown state."""

        loop = self.loops.get(obj.identity)
        if loop is None:
            raise UnknownScalableObject(obj.identity)

        validate_scalable_object(obj)
        self._check_triggers(obj)
        loop.reconfigure(obj)

    async def deregister(self, namespace: str, name: str) -> None:
        """Stops and forgets the loop of an object."""

        identity = f"{namespace}/{name}"
        loop = self.loops.pop(identity, None)
        if loop is None:
            raise UnknownScalableObject(identity)

        await loop.stop()
        self.logger.std_log("Deregistered %s.", identity)

    def status(self) -> Dict[str, dict]:
        """Snapshot of the decision state of every registered object."""

        return {
            identity: {
                "state": loop.cooldown.state.value,
                "target": loop.cooldown.target,
                "applied": loop.applied,
                "last_active_at": loop.cooldown.last_active_at,
                "ticks": loop.ticks,
                "last_tick_at": loop.last_record.timestamp if loop.last_record else None,
                "running": loop.running,
                "degraded": loop.last_record.degraded if loop.last_record else None,
            }
            for identity, loop in self.loops.items()
        }

    async def start(self):
        for sink in self.sinks:
            if hasattr(sink, "start"):
                await sink.start()

    async def stop(self):
        """Stops every loop and any reporting sink."""

        loops = list(self.loops.values())
        self.loops.clear()
        await asyncio.gather(*(loop.stop() for loop in loops))

        for sink in self.sinks:
            if hasattr(sink, "stop"):
                await sink.stop()

        self._stopped.set()
        self.logger.std_log("Manager %s has stopped.", self.manager_id)

    async def run(self):
        """Registers any objects from configuration and runs until `stop()` is called."""

        await self.start()

        try:
            for obj in self._pending:
                await self.register(obj)
            self._pending = []

            self.logger.std_log("Manager %s is running %d loop(s).", self.manager_id, len(self.loops))
            await self._stopped.wait()

        except Exception:
            self.logger.error_log("Exception found while running Manager %s.\n%s", self.manager_id, traceback.format_exc())
            raise

        finally:
            if not self._stopped.is_set():
                await self.stop()
            self.logger.close()
