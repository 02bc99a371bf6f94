"""Resource coordinates taken from tool-call arguments, and the built-in resource table."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class ResourceInfo:
    """Group, version, kind and scope of a well-known resource type."""

    group: str
    version: str
    kind: str
    namespaced: bool


@dataclass(frozen=True)
class ResourceMetadata:
    """Which resource a tool call addresses."""

    cluster: str = ""
    namespace: str = ""
    name: str = ""
    group: str = ""
    version: str = ""
    kind: str = ""


_KNOWN_RESOURCES: tuple[ResourceInfo, ...] = (
    # Namespaced resources
    ResourceInfo("", "v1", "Pod", True),
    ResourceInfo("apps", "v1", "Deployment", True),
    ResourceInfo("apps", "v1", "StatefulSet", True),
    ResourceInfo("apps", "v1", "DaemonSet", True),
    ResourceInfo("apps", "v1", "ReplicaSet", True),
    ResourceInfo("", "v1", "Service", True),
    ResourceInfo("", "v1", "ConfigMap", True),
    ResourceInfo("", "v1", "Secret", True),
    ResourceInfo("networking.k8s.io", "v1", "Ingress", True),
    ResourceInfo("networking.k8s.io", "v1", "NetworkPolicy", True),
    ResourceInfo("rbac.authorization.k8s.io", "v1", "Role", True),
    ResourceInfo("rbac.authorization.k8s.io", "v1", "RoleBinding", True),
    ResourceInfo("", "v1", "ServiceAccount", True),
    ResourceInfo("", "v1", "PersistentVolumeClaim", True),
    ResourceInfo("autoscaling", "v2", "HorizontalPodAutoscaler", True),
    ResourceInfo("batch", "v1", "CronJob", True),
    ResourceInfo("batch", "v1", "Job", True),
    # Cluster-scoped resources
    ResourceInfo("", "v1", "Node", False),
    ResourceInfo("", "v1", "Namespace", False),
    ResourceInfo("", "v1", "PersistentVolume", False),
    ResourceInfo("rbac.authorization.k8s.io", "v1", "ClusterRole", False),
    ResourceInfo("rbac.authorization.k8s.io", "v1", "ClusterRoleBinding", False),
    ResourceInfo("storage.k8s.io", "v1", "StorageClass", False),
    ResourceInfo("apiextensions.k8s.io", "v1", "CustomResourceDefinition", False),
    ResourceInfo("admissionregistration.k8s.io", "v1", "MutatingWebhookConfiguration", False),
    ResourceInfo("admissionregistration.k8s.io", "v1", "ValidatingWebhookConfiguration", False),
)

# Each resource type is looked up by its kind in lower case.
_RESOURCES: dict[str, ResourceInfo] = {info.kind.lower(): info for info in _KNOWN_RESOURCES}


def get_resource_info(resource_type: str) -> Optional[ResourceInfo]:
    """Look up a well-known resource type, case-insensitively; None if unknown."""
    return _RESOURCES.get(resource_type.lower())


def is_namespaced(resource_type: str) -> bool:
    """True if the well-known resource type is namespace-scoped."""
    info = get_resource_info(resource_type)
    return info.namespaced if info is not None else False


def _string_arg(arguments: Mapping[str, Any], key: str, default: str = "") -> str:
    value = arguments.get(key)
    if isinstance(value, str) and value:
        return value
    return default


def parse_from_arguments(arguments: Optional[Mapping[str, Any]]) -> ResourceMetadata:
    """Build resource metadata from tool-call arguments.

    Missing or non-string values become empty strings. When ``kind`` names a
    well-known resource type its group and version fill in what was not given.
    """
    arguments = arguments or {}
    cluster = arguments.get("cluster")
    name = arguments.get("name")
    namespace = arguments.get("namespace")

    group = version = kind = ""
    resource_type = arguments.get("kind")
    if isinstance(resource_type, str) and resource_type:
        info = get_resource_info(resource_type)
        if info is not None:
            group = _string_arg(arguments, "group", info.group)
            version = _string_arg(arguments, "version", info.version)
            kind = _string_arg(arguments, "kind", info.kind)

    return ResourceMetadata(
        cluster=cluster if isinstance(cluster, str) else "",
        namespace=namespace if isinstance(namespace, str) else "",
        name=name if isinstance(name, str) else "",
        group=group or _string_arg(arguments, "group"),
        version=version or _string_arg(arguments, "version"),
        kind=kind or _string_arg(arguments, "kind"),
    )