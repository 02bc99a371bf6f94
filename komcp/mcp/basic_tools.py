"""Tools for clusters, events, YAML documents, ingress classes and storage classes.

Handlers take ``(client, arguments)``. The client is any object offering the
cluster operations a handler needs:

* ``cluster_names()`` – names of the registered clusters
* ``list_events(query)`` – events matching an :class:`EventQuery`
* ``apply_yaml(cluster, yaml)`` / ``delete_yaml(cluster, yaml)`` – per-document results
* ``set_default_ingress_class(cluster, name)``
* ``set_default_storage_class(cluster, name)``
* ``storage_class_pvc_count(cluster, name)`` / ``storage_class_pv_count(cluster, name)``
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

from komcp.mcp.metadata import ResourceMetadata, parse_from_arguments
from komcp.mcp.toolkit import CallToolResult, ToolParam, ToolRegistry, ToolSpec, text_result

logger = logging.getLogger(__name__)

EVENT_GROUP = "events.k8s.io"
EVENT_VERSION = "v1"
EVENT_KIND = "Event"


@dataclass(frozen=True)
class EventQuery:
    """Which events to list: a cluster, a namespace and an optional object name."""

    meta: ResourceMetadata
    involved_object_name: str = ""

    @property
    def group(self) -> str:
        return EVENT_GROUP

    @property
    def version(self) -> str:
        return EVENT_VERSION

    @property
    def kind(self) -> str:
        return EVENT_KIND

    @property
    def all_namespaces(self) -> bool:
        """Events of every namespace are listed when no namespace is given."""
        return self.meta.namespace == ""

    @property
    def field_selector(self) -> Optional[str]:
        if not self.involved_object_name:
            return None
        return "regarding.name=" + self.involved_object_name


def list_clusters_result(cluster_names: Iterable[str]) -> CallToolResult:
    """Result listing each cluster as ``{"name": ...}``; ``null`` when there are none."""
    entries = [{"name": name} for name in cluster_names]
    return text_result(entries or None, None)


def parse_event_query(arguments: Optional[Mapping[str, Any]]) -> EventQuery:
    """Read the event-listing arguments."""
    arguments = arguments or {}
    name = arguments.get("involvedObjectName")
    return EventQuery(
        meta=parse_from_arguments(arguments),
        involved_object_name=name if isinstance(name, str) else "",
    )


def parse_yaml_content(arguments: Optional[Mapping[str, Any]]) -> str:
    """Return the ``yaml`` argument; raise ``ValueError`` if it is not a string."""
    content = (arguments or {}).get("yaml")
    if not isinstance(content, str):
        raise ValueError("invalid yaml content")
    return content


def _list_clusters(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
    return list_clusters_result(client.cluster_names())


def _list_events(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
    query = parse_event_query(arguments)
    try:
        events = client.list_events(query)
    except Exception as exc:
        raise RuntimeError(f"failed to list events: {exc}") from exc
    return text_result(events, query.meta)


def _apply_yaml(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
    meta = parse_from_arguments(arguments)
    content = parse_yaml_content(arguments)
    return text_result(client.apply_yaml(meta.cluster, content), meta)


def _delete_yaml(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
    meta = parse_from_arguments(arguments)
    content = parse_yaml_content(arguments)
    return text_result(client.delete_yaml(meta.cluster, content), meta)


def _set_default_ingress_class(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
    meta = parse_from_arguments(arguments)
    client.set_default_ingress_class(meta.cluster, meta.name)
    return text_result("Successfully set IngressClass as default", meta)


def _set_default_storage_class(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
    meta = parse_from_arguments(arguments)
    client.set_default_storage_class(meta.cluster, meta.name)
    return text_result("Successfully set StorageClass as default", meta)


def _storage_class_pvc_count(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
    meta = parse_from_arguments(arguments)
    return text_result(client.storage_class_pvc_count(meta.cluster, meta.name), meta)


def _storage_class_pv_count(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
    meta = parse_from_arguments(arguments)
    return text_result(client.storage_class_pv_count(meta.cluster, meta.name), meta)


def _ingress_class_params() -> tuple[ToolParam, ...]:
    return (
        ToolParam("cluster", "string", "The cluster of the IngressClass"),
        ToolParam("name", "string", "The name of the IngressClass"),
    )


def _storage_class_params() -> tuple[ToolParam, ...]:
    return (
        ToolParam("cluster", "string", "The cluster of the StorageClass"),
        ToolParam("name", "string", "The name of the StorageClass"),
    )


def _yaml_params(action: str) -> tuple[ToolParam, ...]:
    return (
        ToolParam("yaml", "string", f"YAML content containing resources to {action}"),
        ToolParam("cluster", "string", "Target cluster (empty for default)"),
    )


def register_tools(registry: ToolRegistry) -> None:
    """Add the cluster, event, storage class, ingress class and YAML tools."""
    specs = [
        ToolSpec("list_clusters", "List all registered Kubernetes clusters", (), _list_clusters),
        ToolSpec(
            "list_k8s_event",
            "List Kubernetes events by cluster and namespace",
            (
                ToolParam(
                    "cluster", "string",
                    "Cluster where the events are running (use empty string for default cluster)",
                ),
                ToolParam("namespace", "string", "Namespace of the events (optional)"),
                ToolParam("involvedObjectName", "string", "Filter events by involved object name"),
            ),
            _list_events,
        ),
        ToolSpec(
            "set_default_storageclass", "Set StorageClass as default",
            _storage_class_params(), _set_default_storage_class,
        ),
        ToolSpec(
            "get_storageclass_pvc_count", "Get PVC count of StorageClass",
            _storage_class_params(), _storage_class_pvc_count,
        ),
        ToolSpec(
            "get_storageclass_pv_count", "Get PV count of StorageClass",
            _storage_class_params(), _storage_class_pv_count,
        ),
        ToolSpec(
            "set_default_ingressclass", "Set IngressClass as default",
            _ingress_class_params(), _set_default_ingress_class,
        ),
        ToolSpec("apply_yaml", "Apply Kubernetes resources from YAML", _yaml_params("apply"), _apply_yaml),
        ToolSpec("delete_yaml", "Delete Kubernetes resources from YAML", _yaml_params("delete"), _delete_yaml),
    ]
    for spec in specs:
        registry.add(spec)