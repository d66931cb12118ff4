import logging

# Custom log levels, registered with `logging` by the logger package.
TSCALE_STDOUT = logging.INFO + 2
TSCALE_CSV = logging.INFO + 4
TSCALE_FILE = logging.INFO + 8

DEFAULT_FMT = "[%(asctime)s][%(levelname)s][%(name)s] %(message)s"

# Defaults for ScalableObject fields that are omitted from a record.
DEFAULT_MIN_REPLICA_COUNT = 0
DEFAULT_MAX_REPLICA_COUNT = 100
DEFAULT_POLLING_INTERVAL = 30
DEFAULT_COOLDOWN_PERIOD = 300
DEFAULT_NAMESPACE = "default"

# Metadata keys understood by lag-style triggers.
LAG_THRESHOLD_KEY = "lagThreshold"
ACTIVATION_LAG_THRESHOLD_KEY = "activationLagThreshold"

# A trigger call may use at most this fraction of the polling interval.
DEFAULT_TRIGGER_TIMEOUT_RATIO = 0.8

# Prefix for environment variables that override engine settings.
ENV_PREFIX = "TRIGGERSCALE_"

# Columns of the per-tick CSV report.
TICK_CSV_HEADER = [
    "timestamp", "namespace", "name", "state", "active", "suggested",
    "applied", "available", "unavailable", "errors",
]
