"""Tools that taint, cordon, drain and inspect nodes and manage their system services.

Handlers take ``(client, arguments)``. The client is any object offering:

* ``taint_node(meta, taint)`` / ``untaint_node(meta, taint)``
* ``cordon_node(meta)`` / ``uncordon_node(meta)`` / ``drain_node(meta)``
* ``node_resource_usage(meta, cache_seconds)``: a usage summary
* ``node_ip_usage(meta, cache_seconds)``: ``(total, used, available)``
* ``node_pod_count(meta, cache_seconds)``: ``(total, used, available)``
* ``systemd_service_status(meta, service)``: status text
* ``restart_systemd_service(meta, service)``
* ``journal_logs(meta, service, lines)``: log text

Client errors propagate unchanged, except journal reads, which are re-raised
as ``RuntimeError``.
"""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Any, Mapping, Optional

from komcp.mcp.metadata import parse_from_arguments
from komcp.mcp.toolkit import CallToolResult, ToolParam, ToolRegistry, ToolSpec, text_result

logger = logging.getLogger(__name__)

DEFAULT_JOURNAL_LINES = 100
MAX_JOURNAL_LINES = 1000
DEFAULT_CACHE_SECONDS = 20


class ServiceAction(str, Enum):
    """What to do with a node's system service."""

    STATUS = "status"
    RESTART = "restart"


def _number(arguments: Optional[Mapping[str, Any]], key: str) -> Optional[int]:
    value = (arguments or {}).get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return int(value)


def _required_string(arguments: Optional[Mapping[str, Any]], key: str) -> str:
    value = (arguments or {}).get(key)
    if not isinstance(value, str):
        raise ValueError(f"{key} parameter must be a string")
    return value


def parse_service_action(arguments: Optional[Mapping[str, Any]]) -> ServiceAction:
    """Read ``action``; raise ``ValueError`` unless it is ``status`` or ``restart``."""
    action = _required_string(arguments, "action")
    try:
        return ServiceAction(action)
    except ValueError:
        raise ValueError(f"invalid action: {action}. Must be either 'status' or 'restart'") from None


def parse_journal_lines(arguments: Optional[Mapping[str, Any]]) -> int:
    """Number of journal lines from ``lines``; 100 when absent or outside 1..1000."""
    lines = _number(arguments, "lines")
    if lines is None or lines <= 0 or lines > MAX_JOURNAL_LINES:
        return DEFAULT_JOURNAL_LINES
    return lines


def parse_cache_seconds(arguments: Optional[Mapping[str, Any]]) -> int:
    """Cache duration from the ``cacheSeconds`` argument; 20 when absent."""
    seconds = _number(arguments, "cacheSeconds")
    return DEFAULT_CACHE_SECONDS if seconds is None else seconds


def parse_taint(arguments: Optional[Mapping[str, Any]]) -> str:
    """Return the ``taint`` expression; raise ``ValueError`` if it is not a string."""
    return _required_string(arguments, "taint")


def parse_service_name(arguments: Optional[Mapping[str, Any]]) -> str:
    """Return the ``service`` name; raise ``ValueError`` if it is not a string."""
    return _required_string(arguments, "service")


def usage_counts(total: Any, used: Any, available: Any) -> dict[str, Any]:
    """The usage triple as a mapping."""
    return {"total": total, "used": used, "available": available}


def restart_message(service: str) -> str:
    """Success message after restarting ``service``."""
    return f"Successfully restarted {service} service"


def _taint(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
    meta = parse_from_arguments(arguments)
    taint = parse_taint(arguments)
    logger.info("Adding taint %s to node %s in cluster %s", taint, meta.name, meta.cluster)
    client.taint_node(meta, taint)
    return text_result("Successfully added taint to node", meta)


def _untaint(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
    meta = parse_from_arguments(arguments)
    taint = parse_taint(arguments)
    logger.info("Removing taint %s from node %s in cluster %s", taint, meta.name, meta.cluster)
    client.untaint_node(meta, taint)
    return text_result("Successfully removed taint from node", meta)


def _cordon(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
    meta = parse_from_arguments(arguments)
    logger.info("Cordoning node %s in cluster %s", meta.name, meta.cluster)
    client.cordon_node(meta)
    return text_result("Successfully cordoned node", meta)


def _uncordon(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
    meta = parse_from_arguments(arguments)
    logger.info("UnCordoning node %s in cluster %s", meta.name, meta.cluster)
    client.uncordon_node(meta)
    return text_result("Successfully uncordoned node", meta)


def _drain(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
    meta = parse_from_arguments(arguments)
    logger.info("Draining node %s in cluster %s", meta.name, meta.cluster)
    client.drain_node(meta)
    return text_result("Successfully drained node", meta)


def _resource_usage(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
    meta = parse_from_arguments(arguments)
    seconds = parse_cache_seconds(arguments)
    logger.info(
        "Querying resource usage for node %s in cluster %s with cache duration %d seconds",
        meta.name, meta.cluster, seconds,
    )
    return text_result(client.node_resource_usage(meta, seconds), meta)


def _ip_usage(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
    meta = parse_from_arguments(arguments)
    seconds = parse_cache_seconds(arguments)
    logger.info(
        "Querying IP usage for node %s in cluster %s with cache duration %d seconds",
        meta.name, meta.cluster, seconds,
    )
    total, used, available = client.node_ip_usage(meta, seconds)
    return text_result(usage_counts(total, used, available), meta)


def _pod_count(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
    meta = parse_from_arguments(arguments)
    seconds = parse_cache_seconds(arguments)
    logger.info(
        "Querying Pod count for node %s in cluster %s with cache duration %d seconds",
        meta.name, meta.cluster, seconds,
    )
    total, used, available = client.node_pod_count(meta, seconds)
    return text_result(usage_counts(total, used, available), meta)


def _systemd_status(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
    meta = parse_from_arguments(arguments)
    service = parse_service_name(arguments)
    logger.info("Querying systemd service %s status on node %s in cluster %s", service, meta.name, meta.cluster)
    return text_result(client.systemd_service_status(meta, service), meta)


def _systemd_restart(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
    meta = parse_from_arguments(arguments)
    service = parse_service_name(arguments)
    logger.info("Restarting systemd service %s on node %s in cluster %s", service, meta.name, meta.cluster)
    client.restart_systemd_service(meta, service)
    return text_result(restart_message("systemd"), meta)


def _service_handler(service: str):
    def handler(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
        meta = parse_from_arguments(arguments)
        action = parse_service_action(arguments)
        logger.info(
            "Managing %s service on node %s in cluster %s: action=%s",
            service, meta.name, meta.cluster, action.value,
        )
        if action is ServiceAction.STATUS:
            result = client.systemd_service_status(meta, service)
        else:
            client.restart_systemd_service(meta, service)
            result = restart_message(service)
        return text_result(result, meta)

    return handler


def _journal_handler(service: str):
    def handler(client: Any, arguments: Mapping[str, Any]) -> CallToolResult:
        meta = parse_from_arguments(arguments)
        lines = parse_journal_lines(arguments)
        logger.info(
            "Reading %s journal logs on node %s in cluster %s: lines=%d", service, meta.name, meta.cluster, lines
        )
        try:
            logs = client.journal_logs(meta, service, lines)
        except Exception as exc:
            raise RuntimeError(f"failed to get journal logs: {exc}") from exc
        return text_result(logs, meta)

    return handler


def _node_params(*extra: ToolParam) -> tuple[ToolParam, ...]:
    return (
        ToolParam("cluster", "string", "The cluster of the node"),
        ToolParam("name", "string", "The name of the node"),
    ) + extra


_TAINT = ToolParam("taint", "string", "Taint expression in format key=value:effect")
_CACHE = ToolParam("cache_seconds", "number", "Cache duration in seconds,default 20 seconds")
_SERVICE = ToolParam("service", "string", "The name of the systemd service")
_ACTION = ToolParam("action", "string", "Action type: status or restart")
_LINES = ToolParam("lines", "number", "Number of log lines to read (max 1000)")


def register_tools(registry: ToolRegistry) -> None:
    """Add the node tools."""
    specs = [
        ToolSpec("taint_node", "Add taint to node", _node_params(_TAINT), _taint),
        ToolSpec("untaint_node", "Remove taint from node", _node_params(_TAINT), _untaint),
        ToolSpec("cordon_node", "Mark node as unschedulable", _node_params(), _cordon),
        ToolSpec("uncordon_node", "Mark node as schedulable", _node_params(), _uncordon),
        ToolSpec(
            "drain_node", "Drain all pods from node and prevent new scheduling", _node_params(), _drain
        ),
        ToolSpec(
            "get_node_resource_usage", "Query node resource usage statistics",
            _node_params(_CACHE), _resource_usage,
        ),
        ToolSpec("get_node_ip_usage", "Query node IP resource usage", _node_params(_CACHE), _ip_usage),
        ToolSpec("get_node_pod_count", "Query node Pod count statistics", _node_params(_CACHE), _pod_count),
        ToolSpec(
            "get_systemd_service_status", "Query systemd service status",
            _node_params(_SERVICE), _systemd_status,
        ),
        ToolSpec(
            "restart_systemd_service", "Restart systemd service", _node_params(_SERVICE), _systemd_restart
        ),
        ToolSpec(
            "manage_kubelet_service", "Manage kubelet service", _node_params(_ACTION), _service_handler("kubelet")
        ),
        ToolSpec(
            "read_kubelet_journal", "Read kubelet journal logs", _node_params(_LINES), _journal_handler("kubelet")
        ),
        ToolSpec(
            "manage_containerd_service", "Manage containerd service",
            _node_params(_ACTION), _service_handler("containerd"),
        ),
        ToolSpec(
            "read_containerd_journal", "Read containerd journal logs",
            _node_params(_LINES), _journal_handler("containerd"),
        ),
    ]
    for spec in specs:
        registry.add(spec)