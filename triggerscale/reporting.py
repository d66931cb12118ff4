import os
import socket
from typing import Iterable, List, Optional, Protocol

from aiokafka import AIOKafkaProducer

from triggerscale.logger import ScaleLogger
from triggerscale.models import TickRecord
from triggerscale.utils.serialization import serialize
from triggerscale.utils.time import format_timestamp


class RecordSink(Protocol):
    """Receives every tick record, e.g. to forward it to a metrics pipeline."""

    async def send(self, record: TickRecord) -> None:
        ...


class KafkaRecordSink:
    """Publishes tick records as JSON to a Kafka topic."""

    def __init__(self, topic=None, bootstrap_servers=None, producer=None, **producer_conf):
        self.topic = topic or os.getenv("TRIGGERSCALE_REPORT_TOPIC", "triggerscale-ticks")
        self.bootstrap_servers = bootstrap_servers or os.getenv("TRIGGERSCALE_REPORT_SERVERS")

        if producer is None and not self.bootstrap_servers:
            raise ValueError("Kafka reporting requires a server. Set TRIGGERSCALE_REPORT_SERVERS.")

        self.producer = producer or AIOKafkaProducer(
            bootstrap_servers=self.bootstrap_servers,
            client_id=f"triggerscale_{socket.gethostname()}",
            **producer_conf,
        )
        self._started = False

    async def start(self):
        if not self._started:
            await self.producer.start()
            self._started = True

    async def stop(self):
        if self._started:
            await self.producer.stop()
            self._started = False

    async def send(self, record: TickRecord) -> None:
        await self.producer.send(self.topic, value=serialize(record.to_dict()), key=record.identity.encode())


class TickReporter:
    """Emits one structured record per tick to the log, the CSV report and any extra sinks."""

    def __init__(self, logger: Optional[ScaleLogger] = None, sinks: Iterable[RecordSink] = ()):
        self.logger = logger or ScaleLogger("reporter")
        self.sinks: List[RecordSink] = list(sinks)

    def row(self, record: TickRecord, state: str) -> list:
        namespace, _, name = record.identity.partition("/")
        available = sum(1 for r in record.results if r.available)
        return [
            format_timestamp(),
            namespace,
            name,
            state,
            record.aggregate.active if record.aggregate else None,
            record.aggregate.suggested if record.aggregate else None,
            record.applied_replicas,
            available,
            len(record.results) - available,
            " | ".join(record.errors),
        ]

    async def report(self, record: TickRecord, state: str = "") -> None:
        if record.degraded:
            self.logger.std_log("[%s] degraded tick, holding %s replicas: %s",
                                record.identity, record.applied_replicas, "; ".join(record.errors))
        else:
            self.logger.std_log(
                "[%s] %s active=%s suggested=%s applied=%s",
                record.identity, state, record.aggregate.active, record.aggregate.suggested, record.applied_replicas,
            )
        for error in record.errors:
            self.logger.file_log("[%s] %s", record.identity, error)

        self.logger.csv_log(self.row(record, state))

        for sink in self.sinks:
            try:
                await sink.send(record)
            except Exception as e:
                # A broken sink must not stall the scale loop.
                self.logger.error_log("[%s] failed to publish tick record: %s", record.identity, e)
