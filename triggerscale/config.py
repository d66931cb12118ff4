"""
Parses and validates ScalableObject records and engine settings.

Records follow the KEDA ScaledObject layout, for example:

    name: stan-consumer
    namespace: default
    minReplicaCount: 0
    maxReplicaCount: 5
    pollingInterval: 3
    cooldownPeriod: 10
    triggers:
      - type: stan
        metadata:
          lagThreshold: "10"
          activationLagThreshold: "15"

Every validation failure raises `InvalidConfiguration` so a bad record is
rejected before any scale loop sees it.
"""

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Optional

import yaml

from triggerscale.constants import (
    ACTIVATION_LAG_THRESHOLD_KEY,
    DEFAULT_COOLDOWN_PERIOD,
    DEFAULT_MAX_REPLICA_COUNT,
    DEFAULT_MIN_REPLICA_COUNT,
    DEFAULT_NAMESPACE,
    DEFAULT_POLLING_INTERVAL,
    DEFAULT_TRIGGER_TIMEOUT_RATIO,
    LAG_THRESHOLD_KEY,
)
from triggerscale.errors import InvalidConfiguration
from triggerscale.models import ScalableObject, TriggerSpec
from triggerscale.utils.data import get_config, load_env, resolve_env_variables


@dataclass
class EngineConfig:
    """Engine-wide settings plus the scalable objects declared alongside them."""

    log_dir: Optional[str] = None
    log_level: str = "TSCALE_STDOUT"
    trigger_timeout_ratio: float = DEFAULT_TRIGGER_TIMEOUT_RATIO
    report_topic: Optional[str] = None
    report_servers: Optional[str] = None
    objects: List[ScalableObject] = field(default_factory=list)


def trigger_timeout(obj: ScalableObject, ratio: float = DEFAULT_TRIGGER_TIMEOUT_RATIO) -> float:
    """Per-call deadline for one trigger, always strictly below the polling interval."""

    return obj.polling_interval * ratio


def _parse_number(value: Any, field_name: str) -> float:
    if isinstance(value, bool):
        raise InvalidConfiguration(f"expected a number, got {value!r}", field_name)
    try:
        number = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        raise InvalidConfiguration(f"expected a number, got {value!r}", field_name) from None

    if math.isnan(number) or math.isinf(number):
        raise InvalidConfiguration(f"must be finite, got {value!r}", field_name)
    if number < 0:
        raise InvalidConfiguration(f"must not be negative, got {value!r}", field_name)
    return number


def _parse_int(value: Any, field_name: str, positive: bool = False) -> int:
    if isinstance(value, bool):
        raise InvalidConfiguration(f"expected an integer, got {value!r}", field_name)
    try:
        number = int(str(value).strip()) if isinstance(value, str) else value
    except ValueError:
        raise InvalidConfiguration(f"expected an integer, got {value!r}", field_name) from None

    if isinstance(number, float) and number.is_integer():
        number = int(number)
    if not isinstance(number, int):
        raise InvalidConfiguration(f"expected an integer, got {value!r}", field_name)
    if number < 0:
        raise InvalidConfiguration(f"must not be negative, got {value!r}", field_name)
    if positive and number == 0:
        raise InvalidConfiguration("must be positive", field_name)
    return number


def parse_trigger(record: Mapping[str, Any], index: int = 0) -> TriggerSpec:
    """Builds a TriggerSpec from a `{type, metadata, name}` mapping."""

    prefix = f"triggers[{index}]"
    if not isinstance(record, Mapping):
        raise InvalidConfiguration("trigger must be a mapping", prefix)

    trigger_type = record.get("type")
    if not trigger_type or not isinstance(trigger_type, str):
        raise InvalidConfiguration("trigger type is required", f"{prefix}.type")

    metadata = record.get("metadata") or {}
    if not isinstance(metadata, Mapping):
        raise InvalidConfiguration("metadata must be a mapping", f"{prefix}.metadata")
    # An empty YAML value means the key was left unset.
    metadata = {str(k): str(v) for k, v in metadata.items() if v is not None}

    if LAG_THRESHOLD_KEY not in metadata:
        raise InvalidConfiguration("is required", f"{prefix}.metadata.{LAG_THRESHOLD_KEY}")
    lag_threshold = _parse_number(metadata[LAG_THRESHOLD_KEY], f"{prefix}.metadata.{LAG_THRESHOLD_KEY}")

    activation = 0.0
    if metadata.get(ACTIVATION_LAG_THRESHOLD_KEY, "") != "":
        activation = _parse_number(
            metadata[ACTIVATION_LAG_THRESHOLD_KEY], f"{prefix}.metadata.{ACTIVATION_LAG_THRESHOLD_KEY}"
        )

    return TriggerSpec(
        type=trigger_type,
        lag_threshold=lag_threshold,
        activation_lag_threshold=activation,
        metadata=metadata,
        name=record.get("name") or f"{trigger_type}-{index}",
    )


def parse_scalable_object(record: Mapping[str, Any]) -> ScalableObject:
    """Builds and validates a ScalableObject from a KEDA-shaped mapping."""

    if not isinstance(record, Mapping):
        raise InvalidConfiguration("scalable object must be a mapping")

    name = record.get("name")
    if not name or not isinstance(name, str):
        raise InvalidConfiguration("is required", "name")
    namespace = record.get("namespace") or DEFAULT_NAMESPACE

    min_count = _parse_int(record.get("minReplicaCount", DEFAULT_MIN_REPLICA_COUNT), "minReplicaCount")
    max_count = _parse_int(record.get("maxReplicaCount", DEFAULT_MAX_REPLICA_COUNT), "maxReplicaCount")
    if min_count > max_count:
        raise InvalidConfiguration(
            f"minReplicaCount ({min_count}) must not exceed maxReplicaCount ({max_count})", "minReplicaCount"
        )

    polling = _parse_int(record.get("pollingInterval", DEFAULT_POLLING_INTERVAL), "pollingInterval", positive=True)
    cooldown = _parse_int(record.get("cooldownPeriod", DEFAULT_COOLDOWN_PERIOD), "cooldownPeriod")

    raw_triggers = record.get("triggers") or []
    if not isinstance(raw_triggers, list) or not raw_triggers:
        raise InvalidConfiguration("at least one trigger is required", "triggers")

    triggers = tuple(parse_trigger(t, i) for i, t in enumerate(raw_triggers))
    names = [t.name for t in triggers]
    if len(set(names)) != len(names):
        raise InvalidConfiguration(f"trigger names must be unique, got {names}", "triggers")

    return ScalableObject(
        name=name,
        namespace=namespace,
        min_replica_count=min_count,
        max_replica_count=max_count,
        polling_interval=polling,
        cooldown_period=cooldown,
        triggers=triggers,
    )


def validate_scalable_object(obj: ScalableObject) -> ScalableObject:
    """Re-checks the invariants of an already constructed ScalableObject."""

    if obj.min_replica_count < 0 or obj.max_replica_count < 0:
        raise InvalidConfiguration("replica counts must not be negative", "minReplicaCount")
    if obj.min_replica_count > obj.max_replica_count:
        raise InvalidConfiguration("must not exceed maxReplicaCount", "minReplicaCount")
    if obj.polling_interval <= 0:
        raise InvalidConfiguration("must be positive", "pollingInterval")
    if obj.cooldown_period < 0:
        raise InvalidConfiguration("must not be negative", "cooldownPeriod")
    if not obj.triggers:
        raise InvalidConfiguration("at least one trigger is required", "triggers")

    for trigger in obj.triggers:
        if trigger.lag_threshold < 0 or not math.isfinite(trigger.lag_threshold):
            raise InvalidConfiguration("must be a finite non-negative number", f"{trigger.name}.{LAG_THRESHOLD_KEY}")
        if trigger.activation_lag_threshold < 0 or not math.isfinite(trigger.activation_lag_threshold):
            raise InvalidConfiguration(
                "must be a finite non-negative number", f"{trigger.name}.{ACTIVATION_LAG_THRESHOLD_KEY}"
            )
    return obj


def validate_timeout_ratio(value: Any) -> float:
    """Checks the share of the polling interval a single trigger call may take."""

    ratio = _parse_number(value, "triggerTimeoutRatio")
    # The per-call deadline must stay strictly below the polling interval.
    if not 0 < ratio < 1:
        raise InvalidConfiguration(f"must be between 0 and 1 (exclusive), got {value!r}", "triggerTimeoutRatio")
    return ratio


def load_config(filepath, env_file=".env") -> EngineConfig:
    """
    Reads engine settings and scalable objects from a YAML file,
    substituting environment variables on the fly.
    Settings may be overridden through `TRIGGERSCALE_*` environment variables.
    """

    if env_file:
        load_env(env_file)

    path = Path(filepath)
    try:
        with path.open() as f:
            document = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise InvalidConfiguration(f"invalid YAML in {path}: {e}") from e

    if not isinstance(document, Mapping):
        raise InvalidConfiguration(f"{path} must contain a mapping")

    document = resolve_env_variables(dict(document))
    settings = document.get("engine") or {}

    config = EngineConfig()
    config.log_dir = get_config("log_dir", default=settings.get("logDir", config.log_dir))
    config.log_level = get_config("log_level", default=settings.get("logLevel", config.log_level))
    config.trigger_timeout_ratio = validate_timeout_ratio(
        get_config("trigger_timeout_ratio", default=settings.get("triggerTimeoutRatio", config.trigger_timeout_ratio))
    )
    config.report_topic = get_config("report_topic", default=settings.get("reportTopic", config.report_topic))
    config.report_servers = get_config("report_servers", default=settings.get("reportServers", config.report_servers))

    config.objects = [parse_scalable_object(record) for record in document.get("scalableObjects") or []]

    identities = [obj.identity for obj in config.objects]
    duplicates = sorted({i for i in identities if identities.count(i) > 1})
    if duplicates:
        raise InvalidConfiguration(f"duplicate scalable objects: {duplicates}", "scalableObjects")

    return config
