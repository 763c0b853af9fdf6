"""Tagged-union metadata values and their canonical serialization."""

from __future__ import annotations

import json
import math
from datetime import date, datetime, time
from enum import Enum
from fractions import Fraction
from numbers import Integral, Rational
from typing import Any, Dict, Mapping, Union

MetadataValue = Union[str, int, float, bool, None, Dict[str, "MetadataValue"]]


class ValueKind(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"
    MAP = "map"


def _decode_bytes(raw: bytes) -> str:
    stripped = raw.rstrip(b"\x00")
    try:
        text = stripped.decode("utf-8")
    except UnicodeDecodeError:
        return "hex:" + raw.hex()
    if any(ord(ch) < 0x20 and ch not in "\t\r\n" for ch in text):
        return "hex:" + raw.hex()
    return text


def normalize_value(raw: Any) -> MetadataValue:
    """Coerce whatever an extractor produced into the metadata value union."""
    if raw is None or isinstance(raw, (bool, str)):
        return raw
    if isinstance(raw, Integral):
        return int(raw)
    if isinstance(raw, float):
        return raw if math.isfinite(raw) else None
    # Pillow's IFDRational registers itself as a numbers.Rational
    if isinstance(raw, (Fraction, Rational)):
        try:
            value = float(raw)
        except ZeroDivisionError:
            return None
        return value if math.isfinite(value) else None
    if isinstance(raw, (bytes, bytearray, memoryview)):
        return _decode_bytes(bytes(raw))
    if isinstance(raw, (datetime, date, time)):
        return raw.isoformat()
    if isinstance(raw, Enum):
        return normalize_value(raw.value)
    if isinstance(raw, Mapping):
        return {str(key): normalize_value(value) for key, value in raw.items()}
    if isinstance(raw, (list, tuple, set, frozenset)):
        items = sorted(raw, key=repr) if isinstance(raw, (set, frozenset)) else raw
        return ", ".join(str(normalize_value(item)) for item in items)
    if hasattr(raw, "item"):
        # numpy scalars
        return normalize_value(raw.item())
    return str(raw)


def normalize_fields(raw: Mapping[Any, Any]) -> Dict[str, MetadataValue]:
    return {str(name): normalize_value(value) for name, value in raw.items()}


def serialize_value(value: MetadataValue) -> str:
    """Canonical JSON text; the equality key used when reconciling sources."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def value_kind(value: MetadataValue) -> ValueKind:
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, dict):
        return ValueKind.MAP
    raise TypeError(f"Not a metadata value: {type(value).__name__}")
