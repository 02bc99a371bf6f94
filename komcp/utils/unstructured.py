"""Helpers for schemaless resource objects held as nested dictionaries."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Mapping, MutableMapping

import yaml

from komcp.utils.textutil import parse_time

_EPOCH_START = datetime.min.replace(tzinfo=timezone.utc)


def nested_get(obj: Mapping[str, Any], *args: str) -> Any:
    """Return the value found by following the keys ``args`` into ``obj``.

    Raises ``KeyError`` if a key is missing and ``TypeError`` if a value on
    the way is not a mapping.
    """
    current: Any = obj
    walked: list[str] = []
    for key in args:
        if not isinstance(current, Mapping):
            raise TypeError(f"{'.'.join(walked) or '<root>'} is not a mapping")
        if key not in current:
            raise KeyError(".".join([*walked, key]))
        current = current[key]
        walked.append(key)
    return current


def _creation_time(item: Mapping[str, Any]) -> datetime:
    try:
        stamp = nested_get(item, "metadata", "creationTimestamp")
    except (KeyError, TypeError):
        return _EPOCH_START
    if not isinstance(stamp, str):
        return _EPOCH_START
    try:
        return parse_time(stamp)
    except ValueError:
        return _EPOCH_START


def sort_by_creation_time(items: list[MutableMapping[str, Any]]) -> list[MutableMapping[str, Any]]:
    """Sort ``items`` in place, newest creation timestamp first, and return them."""
    items.sort(key=_creation_time, reverse=True)
    return items


def remove_managed_fields(obj: MutableMapping[str, Any]) -> None:
    """Drop ``metadata.managedFields`` from ``obj`` if present."""
    metadata = obj.get("metadata")
    if isinstance(metadata, MutableMapping):
        metadata.pop("managedFields", None)


def to_yaml(obj: Mapping[str, Any]) -> str:
    """Render a resource object as YAML with sorted keys."""
    try:
        plain = json.loads(json.dumps(obj))
    except (TypeError, ValueError) as exc:
        raise ValueError(f"failed to serialize object to JSON: {exc}") from exc
    return yaml.safe_dump(plain, default_flow_style=False, sort_keys=True, allow_unicode=True)


def add_or_update_annotations(obj: MutableMapping[str, Any], annotations: Mapping[str, str]) -> None:
    """Merge ``annotations`` into ``metadata.annotations``, overriding existing keys."""
    metadata = obj.get("metadata")
    if not isinstance(metadata, MutableMapping):
        metadata = {}
        obj["metadata"] = metadata
    current = metadata.get("annotations")
    merged = dict(current) if isinstance(current, Mapping) else {}
    merged.update(annotations)
    metadata["annotations"] = merged