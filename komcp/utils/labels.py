"""Label helpers and node-selector matching."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, MutableMapping

from komcp.utils.textutil import to_int


def _labels_of(meta: MutableMapping[str, Any]) -> dict[str, str]:
    labels = meta.get("labels")
    if labels is None:
        labels = {}
        meta["labels"] = labels
    return labels


@dataclass
class LabelsManager:
    """Holds a set of shared labels to stamp onto object metadata."""

    labels: dict[str, str] = field(default_factory=dict)

    def add_labels(self, meta: MutableMapping[str, Any]) -> None:
        """Merge the shared labels into ``meta['labels']``."""
        _labels_of(meta).update(self.labels)

    def add_custom_label(self, meta: MutableMapping[str, Any], key: str, value: str) -> None:
        """Set a single label on ``meta``."""
        _labels_of(meta)[key] = value


@dataclass
class NodeSelectorRequirement:
    """A node selector term: key, operator and values."""

    key: str
    operator: str
    values: list[str] = field(default_factory=list)


def map_contains(small: Mapping[str, Any], big: Mapping[str, Any]) -> bool:
    """True if every key/value pair of ``small`` is present in ``big``."""
    return all(key in big and big[key] == value for key, value in small.items())


def match_node_selector_requirement(
    node_labels: Mapping[str, str], requirement: NodeSelectorRequirement
) -> bool:
    """Check whether node labels satisfy a node selector requirement."""
    exists = requirement.key in node_labels
    value = node_labels.get(requirement.key)
    operator = requirement.operator

    if operator == "In":
        return exists and value in requirement.values
    if operator == "NotIn":
        return not exists or value not in requirement.values
    if operator == "Exists":
        return exists
    if operator == "DoesNotExist":
        return not exists
    if operator in ("Gt", "Lt"):
        if not exists or len(requirement.values) != 1:
            return False
        threshold = to_int(requirement.values[0], None)
        node_value = to_int(value, None)
        if threshold is None or node_value is None:
            return False
        return node_value > threshold if operator == "Gt" else node_value < threshold
    return False