"""Tool descriptions, call results and a registry of tools."""

from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from komcp.mcp.metadata import ResourceMetadata


@dataclass(frozen=True)
class ToolParam:
    """One input parameter of a tool: name, JSON type and description."""

    name: str
    type: str = "string"
    description: str = ""


@dataclass(frozen=True)
class TextContent:
    """A piece of text returned by a tool."""

    text: str
    type: str = "text"


@dataclass
class CallToolResult:
    """What a tool call returns."""

    content: list[TextContent] = field(default_factory=list)
    is_error: bool = False


Handler = Callable[[Any, Mapping[str, Any]], CallToolResult]


@dataclass(frozen=True)
class ToolSpec:
    """A tool: its name, description, parameters and handler.

    The handler is called as ``handler(client, arguments)`` where ``client``
    performs the cluster operations and ``arguments`` are the call arguments.
    """

    name: str
    description: str
    params: tuple[ToolParam, ...] = ()
    handler: Optional[Handler] = None


class ToolRegistry:
    """Tools by name, in registration order."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolSpec] = {}

    def add(self, spec: ToolSpec) -> None:
        """Register ``spec``, replacing a tool of the same name."""
        self._tools[spec.name] = spec

    def get(self, name: str) -> ToolSpec:
        """Return the tool called ``name``; raise ``KeyError`` if unknown."""
        return self._tools[name]

    def names(self) -> list[str]:
        return list(self._tools)

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools


def _default(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, Enum):
        return obj.value
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


_HTML_ESCAPES = {"<": "\\u003c", ">": "\\u003e", "&": "\\u0026", "\u2028": "\\u2028", "\u2029": "\\u2029"}


def _marshal(item: Any) -> str:
    text = json.dumps(
        item, ensure_ascii=False, separators=(",", ":"), sort_keys=True, allow_nan=False, default=_default
    )
    for char, escape in _HTML_ESCAPES.items():
        text = text.replace(char, escape)
    return text


def _text(text: str) -> CallToolResult:
    return CallToolResult(content=[TextContent(text=text)])


def text_result(item: Any, meta: Optional[ResourceMetadata] = None) -> CallToolResult:
    """Wrap ``item`` as a text result.

    Bytes become their text, a non-empty list of strings becomes one content
    entry each, anything else is rendered as compact JSON.
    """
    if isinstance(item, (bytes, bytearray)):
        return _text(bytes(item).decode("utf-8", errors="replace"))
    if isinstance(item, list) and item and all(isinstance(s, str) for s in item):
        return CallToolResult(content=[TextContent(text=s) for s in item])
    try:
        return _text(_marshal(item))
    except (TypeError, ValueError) as exc:
        meta = meta or ResourceMetadata()
        raise ValueError(
            f"failed to json marshal item [{meta.namespace}/{meta.name}] type of "
            f"[{meta.group}{meta.version}{meta.kind}]: {exc}"
        ) from exc


def error_result(error: BaseException) -> CallToolResult:
    """A result flagged as an error, carrying the error's message."""
    return CallToolResult(content=[TextContent(text=str(error))], is_error=True)