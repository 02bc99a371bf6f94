"""Tools that scale, restart, stop, restore, retag and roll out deployments.

Handlers take ``(client, arguments)``. The client is any object offering:

* ``deployment_managed_pods(meta)``: pod objects managed by the deployment
* ``scale_deployment(meta, replicas)``
* ``restart_deployment(meta)``
* ``stop_deployment(meta)``: set replicas to 0, remembering the old count
* ``restore_deployment(meta)``: restore the remembered replica count
* ``replace_deployment_image_tag(meta, container, tag)``
* ``rollout_history(meta)`` / ``rollout_status(meta)``: text
* ``rollout_undo(meta, revision)``: text; revision 0 means the previous one
* ``rollout_pause(meta)`` / ``rollout_resume(meta)``
* ``deployment_hpa_list(meta)``: HPA objects targeting the deployment

Client errors propagate unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

from komcp.mcp.metadata import parse_from_arguments
from komcp.mcp.toolkit import CallToolResult, ToolParam, ToolRegistry, ToolSpec, text_result

logger = logging.getLogger(__name__)

DEFAULT_REPLICAS = 1
DEFAULT_REVISION = 0


@dataclass(frozen=True)
class ImageTagUpdate:
    """The container whose image gets a new tag, and that tag."""

    container: str
    tag: str


def _number(arguments: Optional[Mapping[str, Any]], key: str) -> Optional[int]:
    value = (arguments or {}).get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and value != value:
        return None
    return int(value)


def parse_replicas(arguments: Optional[Mapping[str, Any]]) -> int:
    """Target replica count from ``replicas``; 1 when absent or not a number."""
    replicas = _number(arguments, "replicas")
    return DEFAULT_REPLICAS if replicas is None else replicas


def parse_revision(arguments: Optional[Mapping[str, Any]]) -> int:
    """Rollback revision from ``revision``; 0 (the previous one) when absent."""
    revision = _number(arguments, "revision")
    return DEFAULT_REVISION if revision is None else revision


def parse_image_tag_update(arguments: Optional[Mapping[str, Any]]) -> ImageTagUpdate:
    """Read ``container`` and ``tag``; raise ``ValueError`` if either is not a string."""
    arguments = arguments or {}
    container = arguments.get("container")
    tag = arguments.get("tag")
    if not isinstance(container, str):
        raise ValueError("container parameter must be a string")
    if not isinstance(tag, str):
        raise ValueError("tag parameter must be a string")
    return ImageTagUpdate(container=container, tag=tag)


def format_hpa_list(names: Iterable[str]) -> str:
    """One ``HPA <name>`` line per autoscaler."""
    return "".join(f"HPA {name}\n" for name in names)


def _object_name(obj: Any) -> str:
    if isinstance(obj, str):
        return obj
    if isinstance(obj, Mapping):
        metadata = obj.get("metadata")
        if isinstance(metadata, Mapping):
            name = metadata.get("name")
            if isinstance(name, str):
                return name
    return ""


def _managed_pods(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
    meta = parse_from_arguments(arguments)
    names = [_object_name(pod) for pod in client.deployment_managed_pods(meta)]
    return text_result(names or None, meta)


def _scale(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
    meta = parse_from_arguments(arguments)
    replicas = parse_replicas(arguments)
    logger.info(
        "Scaling deployment %s/%s in cluster %s to %d replicas", meta.namespace, meta.name, meta.cluster, replicas
    )
    client.scale_deployment(meta, replicas)
    return text_result("Successfully scaled deployment", meta)


def _restart(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
    meta = parse_from_arguments(arguments)
    client.restart_deployment(meta)
    return text_result("Successfully restarted deployment", meta)


def _stop(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
    meta = parse_from_arguments(arguments)
    logger.info("Stopping deployment %s/%s in cluster %s", meta.namespace, meta.name, meta.cluster)
    client.stop_deployment(meta)
    return text_result("Successfully stopped deployment", meta)


def _restore(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
    meta = parse_from_arguments(arguments)
    logger.info("Restoring deployment %s/%s in cluster %s", meta.namespace, meta.name, meta.cluster)
    client.restore_deployment(meta)
    return text_result("Successfully restored deployment", meta)


def _update_tag(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
    meta = parse_from_arguments(arguments)
    update = parse_image_tag_update(arguments)
    logger.info(
        "Updating deployment %s/%s container %s image tag to %s in cluster %s",
        meta.namespace, meta.name, update.container, update.tag, meta.cluster,
    )
    client.replace_deployment_image_tag(meta, update.container, update.tag)
    return text_result("Successfully updated deployment image tag", meta)


def _rollout_history(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
    meta = parse_from_arguments(arguments)
    logger.info("Getting rollout history for deployment %s/%s in cluster %s", meta.namespace, meta.name, meta.cluster)
    return text_result(client.rollout_history(meta), meta)


def _rollout_undo(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
    meta = parse_from_arguments(arguments)
    revision = parse_revision(arguments)
    logger.info(
        "Rolling back deployment %s/%s in cluster %s to revision %d", meta.namespace, meta.name, meta.cluster, revision
    )
    return text_result(client.rollout_undo(meta, revision), meta)


def _rollout_pause(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
    meta = parse_from_arguments(arguments)
    logger.info("Pausing rollout for deployment %s/%s in cluster %s", meta.namespace, meta.name, meta.cluster)
    client.rollout_pause(meta)
    return text_result("Successfully paused deployment rollout", meta)


def _rollout_resume(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
    meta = parse_from_arguments(arguments)
    logger.info("Resuming rollout for deployment %s/%s in cluster %s", meta.namespace, meta.name, meta.cluster)
    client.rollout_resume(meta)
    return text_result("Successfully resumed deployment rollout", meta)


def _rollout_status(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
    meta = parse_from_arguments(arguments)
    logger.info("Getting rollout status for deployment %s/%s in cluster %s", meta.namespace, meta.name, meta.cluster)
    return text_result(client.rollout_status(meta), meta)


def _hpa_list(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
    meta = parse_from_arguments(arguments)
    logger.info("Getting HPA list for deployment %s/%s in cluster %s", meta.namespace, meta.name, meta.cluster)
    names = [_object_name(hpa) for hpa in client.deployment_hpa_list(meta)]
    return text_result(format_hpa_list(names), meta)


def _deployment_params(*extra: ToolParam) -> tuple[ToolParam, ...]:
    return (
        ToolParam("cluster", "string", "The cluster runs the deployment"),
        ToolParam("namespace", "string", "The namespace of the deployment"),
        ToolParam("name", "string", "The name of the deployment"),
    ) + extra


def register_tools(registry: ToolRegistry) -> None:
    """Add the deployment tools."""
    specs = [
        ToolSpec(
            "list_deployment_pods",
            "Get managed pods of deployment by cluster, namespace and name",
            _deployment_params(), _managed_pods,
        ),
        ToolSpec(
            "scale_deployment",
            "Scale deployment by cluster, namespace, name and replicas",
            _deployment_params(ToolParam("replicas", "number", "Target number of replicas")),
            _scale,
        ),
        ToolSpec(
            "restart_deployment",
            "Restart deployment by cluster, namespace and name",
            _deployment_params(), _restart,
        ),
        ToolSpec(
            "stop_deployment",
            "Stop deployment by setting replicas to 0 and save original replicas to annotation",
            _deployment_params(), _stop,
        ),
        ToolSpec(
            "restore_deployment",
            "Restore deployment replicas from annotation, default to 1 if not found",
            _deployment_params(), _restore,
        ),
        ToolSpec(
            "update_deployment_image_tag",
            "Update container image tag in deployment",
            _deployment_params(
                ToolParam("container", "string", "Container name"),
                ToolParam("tag", "string", "New image tag"),
            ),
            _update_tag,
        ),
        ToolSpec(
            "get_deployment_rollout_history",
            "Query deployment rollout history",
            _deployment_params(), _rollout_history,
        ),
        ToolSpec(
            "undo_deployment_rollout",
            "Rollback deployment to specific revision, or previous revision if not specified",
            _deployment_params(ToolParam("revision", "number", "Target revision number, optional")),
            _rollout_undo,
        ),
        ToolSpec(
            "pause_deployment_rollout",
            "Pause deployment rollout",
            _deployment_params(), _rollout_pause,
        ),
        ToolSpec(
            "resume_deployment_rollout",
            "Resume deployment rollout",
            _deployment_params(), _rollout_resume,
        ),
        ToolSpec(
            "get_deployment_rollout_status",
            "Query deployment rollout status",
            _deployment_params(), _rollout_status,
        ),
        ToolSpec(
            "get_deployment_hpa_list",
            "Query deployment HPA list",
            _deployment_params(), _hpa_list,
        ),
    ]
    for spec in specs:
        registry.add(spec)