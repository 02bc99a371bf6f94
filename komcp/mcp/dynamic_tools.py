"""Generic tools that get, describe, delete, list, annotate, label and patch any resource.

Handlers take ``(client, arguments)``. The client is any object offering:

* ``get_resource(meta, all_namespaces)``: the resource object as a mapping
* ``describe_resource(meta)``: describe output as bytes or text
* ``delete_resource(meta, force, all_namespaces)``
* ``list_resources(query)``: resource objects matching a :class:`ListQuery`
* ``annotate_resource(meta, annotation, all_namespaces)``
* ``label_resource(meta, label, all_namespaces)``
* ``patch_resource(meta, patch_data, patch_type, all_namespaces)``

Client errors are re-raised as ``RuntimeError`` with a message naming the resource.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, MutableMapping, Optional

from komcp.mcp.metadata import ResourceMetadata, parse_from_arguments
from komcp.mcp.toolkit import CallToolResult, ToolParam, ToolRegistry, ToolSpec, text_result
from komcp.utils.unstructured import remove_managed_fields

STRATEGIC_MERGE_PATCH = "application/strategic-merge-patch+json"


@dataclass(frozen=True)
class ListQuery:
    """Which resources to list, with optional label and field selectors."""

    meta: ResourceMetadata
    label_selector: str = ""
    field_selector: str = ""

    @property
    def all_namespaces(self) -> bool:
        """Every namespace is searched when no namespace is given."""
        return self.meta.namespace == ""


def _string(arguments: Optional[Mapping[str, Any]], key: str) -> str:
    value = (arguments or {}).get(key)
    return value if isinstance(value, str) else ""


def _required(arguments: Optional[Mapping[str, Any]], key: str, message: str) -> str:
    value = _string(arguments, key)
    if not value:
        raise ValueError(message)
    return value


def parse_list_query(arguments: Optional[Mapping[str, Any]]) -> ListQuery:
    """Read the list arguments: resource metadata plus ``label`` and ``field`` selectors."""
    return ListQuery(
        meta=parse_from_arguments(arguments),
        label_selector=_string(arguments, "label"),
        field_selector=_string(arguments, "field"),
    )


def parse_force(arguments: Optional[Mapping[str, Any]]) -> bool:
    """True only when ``force`` is the boolean true."""
    return (arguments or {}).get("force") is True


def parse_annotation(arguments: Optional[Mapping[str, Any]]) -> str:
    """Return the ``annotation`` argument; raise ``ValueError`` if missing or empty."""
    return _required(arguments, "annotation", "annotation parameter is required")


def parse_label(arguments: Optional[Mapping[str, Any]]) -> str:
    """Return the ``label`` argument; raise ``ValueError`` if missing or empty."""
    return _required(arguments, "label", "label parameter is required")


def parse_patch_data(arguments: Optional[Mapping[str, Any]]) -> str:
    """Return the ``patch_data`` argument; raise ``ValueError`` if missing or empty."""
    return _required(arguments, "patch_data", "patch data is required")


def summarize_list(items: Iterable[Mapping[str, Any]]) -> list[dict[str, str]]:
    """Reduce resource objects to their name and, when set, their namespace."""
    summary = []
    for item in items:
        metadata = item.get("metadata")
        if not isinstance(metadata, Mapping):
            metadata = {}
        name = metadata.get("name")
        namespace = metadata.get("namespace")
        entry = {"name": name if isinstance(name, str) else ""}
        if isinstance(namespace, str) and namespace:
            entry["namespace"] = namespace
        summary.append(entry)
    return summary


def _where(meta: ResourceMetadata) -> str:
    return f"[{meta.namespace}/{meta.name}]"


def _type(meta: ResourceMetadata) -> str:
    return f"[{meta.group}{meta.version}{meta.kind}]"


def success_message(action: str, meta: ResourceMetadata) -> str:
    """Message such as ``Successfully deleted resource [ns/name] of type [gvk]``."""
    return f"Successfully {action} resource {_where(meta)} of type {_type(meta)}"


def _get(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
    meta = parse_from_arguments(arguments)
    try:
        item = client.get_resource(meta, meta.namespace == "")
    except Exception as exc:
        raise RuntimeError(f"failed to get item {_where(meta)} type of  {_type(meta)}: {exc}") from exc
    if isinstance(item, MutableMapping):
        remove_managed_fields(item)
    return text_result(item, meta)


def _describe(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
    meta = parse_from_arguments(arguments)
    try:
        output = client.describe_resource(meta)
    except Exception as exc:
        raise RuntimeError(f"failed to get item {_where(meta)} type of  {_type(meta)}: {exc}") from exc
    if isinstance(output, str):
        output = output.encode("utf-8")
    return text_result(output, meta)


def _delete(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
    meta = parse_from_arguments(arguments)
    try:
        client.delete_resource(meta, parse_force(arguments), meta.namespace == "")
    except Exception as exc:
        raise RuntimeError(f"failed to delete item {_where(meta)} type of {_type(meta)}: {exc}") from exc
    return text_result(success_message("deleted", meta), meta)


def _list(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
    query = parse_list_query(arguments)
    try:
        items = client.list_resources(query)
    except Exception as exc:
        raise RuntimeError(f"failed to list items type of {_type(query.meta)}: {exc}") from exc
    return text_result(summarize_list(items) or None, query.meta)


def _annotate(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
    meta = parse_from_arguments(arguments)
    annotation = parse_annotation(arguments)
    try:
        client.annotate_resource(meta, annotation, meta.namespace == "")
    except Exception as exc:
        raise RuntimeError(
            f"failed to update annotation for {_where(meta)} type of {_type(meta)}: {exc}"
        ) from exc
    return text_result(success_message("updated annotation for", meta), meta)


def _label(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
    meta = parse_from_arguments(arguments)
    label = parse_label(arguments)
    try:
        client.label_resource(meta, label, meta.namespace == "")
    except Exception as exc:
        raise RuntimeError(f"failed to update label for {_where(meta)} type of {_type(meta)}: {exc}") from exc
    return text_result(success_message("updated label for", meta), meta)


def _patch(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
    meta = parse_from_arguments(arguments)
    patch_data = parse_patch_data(arguments)
    try:
        client.patch_resource(meta, patch_data, STRATEGIC_MERGE_PATCH, meta.namespace == "")
    except Exception as exc:
        raise RuntimeError(f"failed to patch item {_where(meta)} type of {_type(meta)}: {exc}") from exc
    return text_result(success_message("patched", meta), meta)


def _resource_params(with_name: bool = True) -> tuple[ToolParam, ...]:
    params = [
        ToolParam(
            "cluster", "string",
            "Cluster where the resources are running (use empty string for default cluster)",
        ),
        ToolParam("namespace", "string", "Namespace of the resource (optional for cluster-scoped resources)"),
    ]
    if with_name:
        params.append(ToolParam("name", "string", "Name of the resource"))
    params += [
        ToolParam("group", "string", "API group of the resource"),
        ToolParam("version", "string", "API version of the resource"),
        ToolParam("kind", "string", "Kind of the resource"),
    ]
    return tuple(params)


def register_tools(registry: ToolRegistry) -> None:
    """Add the generic resource tools."""
    specs = [
        ToolSpec(
            "get_k8s_resource",
            "Retrieve Kubernetes resource details by cluster, namespace, and name",
            _resource_params(), _get,
        ),
        ToolSpec(
            "describe_k8s_resource",
            "Retrieve Kubernetes resource details by cluster, namespace, and name",
            _resource_params(), _describe,
        ),
        ToolSpec(
            "delete_k8s_resource",
            "Delete Kubernetes resource by cluster, namespace, and name",
            _resource_params() + (ToolParam("force", "boolean", "Force delete the resource"),),
            _delete,
        ),
        ToolSpec(
            "list_k8s_resource",
            "List Kubernetes resources by cluster and resource type",
            _resource_params(with_name=False)
            + (
                ToolParam("label", "string", "Label selector to filter resources (e.g. app=k8m)"),
                ToolParam("field", "string", "Field selector to filter resources (e.g. metadata.name=test-deploy)"),
            ),
            _list,
        ),
        ToolSpec(
            "annotate_k8s_resource",
            "Add or remove annotations for Kubernetes resource",
            _resource_params()
            + (
                ToolParam(
                    "annotation", "string",
                    "Annotation to add or remove (use key=value to add, key- to remove)",
                ),
            ),
            _annotate,
        ),
        ToolSpec(
            "label_k8s_resource",
            "Add or remove labels for Kubernetes resource",
            _resource_params()
            + (ToolParam("label", "string", "Label to add or remove (use key=value to add, key- to remove)"),),
            _label,
        ),
        ToolSpec(
            "patch_k8s_resource",
            "Patch Kubernetes resource by cluster, namespace, and name",
            _resource_params() + (ToolParam("patch_data", "string", "JSON patch data"),),
            _patch,
        ),
    ]
    for spec in specs:
        registry.add(spec)