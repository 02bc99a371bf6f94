"""JSON rendering and JSON round-trip copying."""

from __future__ import annotations

import base64
import dataclasses
import json
from datetime import date, datetime
from enum import Enum
from typing import Any


def _default(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, (bytes, bytearray)):
        return base64.b64encode(bytes(obj)).decode("ascii")
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def to_json(value: Any) -> str:
    """Render ``value`` as JSON indented by two spaces."""
    return json.dumps(value, indent=2, ensure_ascii=False, default=_default)


def deep_copy(value: Any) -> Any:
    """Return a deep copy made by a JSON round trip."""
    return json.loads(json.dumps(value, default=_default))