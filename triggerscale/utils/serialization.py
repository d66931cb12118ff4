import json
from enum import Enum
from typing import Any, Mapping

def _encode(value: Any) -> Any:
    """Fallback for values found in tick records that json cannot encode natively."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        # Frozen trigger metadata is a mappingproxy.
        return dict(value)
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    if isinstance(value, BaseException):
        return f"{type(value).__name__}: {value}"
    raise TypeError(f"cannot serialize {type(value).__name__}")

def serialize(data: Any) -> bytes:
    """Serialize data to compact UTF-8 JSON; NaN and infinity are rejected."""
    return json.dumps(data, default=_encode, separators=(",", ":"), allow_nan=False).encode("utf-8")
