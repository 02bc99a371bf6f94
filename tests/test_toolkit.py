import json
from dataclasses import dataclass

import pytest

from komcp.mcp.metadata import ResourceMetadata
from komcp.mcp.toolkit import (
    CallToolResult,
    TextContent,
    ToolParam,
    ToolRegistry,
    ToolSpec,
    error_result,
    text_result,
)


def test_bytes_become_text():
    result = text_result(b"line one\nline two")
    assert result.content == [TextContent(text="line one\nline two")]
    assert result.is_error is False


def test_string_list_becomes_several_contents():
    result = text_result(["a", "b", "c"])
    assert [c.text for c in result.content] == ["a", "b", "c"]
    assert all(c.type == "text" for c in result.content)


def test_plain_string_is_json_encoded():
    result = text_result("Successfully restarted")
    assert result.content[0].text == '"Successfully restarted"'


def test_mapping_keys_are_sorted_and_compact():
    result = text_result({"b": 1, "a": 2})
    assert result.content[0].text == '{"a":2,"b":1}'


def test_html_characters_are_escaped_and_round_trip():
    text = text_result("<a & b>").content[0].text
    assert "<" not in text and ">" not in text and "&" not in text
    assert json.loads(text) == "<a & b>"


def test_none_and_empty_list():
    assert text_result(None).content[0].text == "null"
    assert text_result([]).content[0].text == "[]"


def test_dataclass_round_trip():
    @dataclass
    class Point:
        x: int
        y: int

    assert json.loads(text_result([Point(1, 2)]).content[0].text) == [{"x": 1, "y": 2}]


def test_unserializable_item_raises_with_metadata():
    meta = ResourceMetadata(namespace="ns", name="n", kind="Pod")
    with pytest.raises(ValueError, match=r"failed to json marshal item \[ns/n\] type of \[Pod\]"):
        text_result({"x": object()}, meta)


def test_nan_is_rejected():
    with pytest.raises(ValueError, match="failed to json marshal item"):
        text_result(float("nan"))


def test_error_result():
    result = error_result(RuntimeError("boom"))
    assert result.is_error is True
    assert result.content == [TextContent(text="boom")]


def test_registry_order_get_and_replace():
    registry = ToolRegistry()
    first = ToolSpec("one", "first", (ToolParam("cluster"),))
    registry.add(first)
    registry.add(ToolSpec("two", "second"))
    assert registry.names() == ["one", "two"]
    assert registry.get("one") is first
    replacement = ToolSpec("one", "again")
    registry.add(replacement)
    assert registry.get("one") is replacement
    assert len(registry) == 2
    assert "two" in registry


def test_registry_missing_tool():
    with pytest.raises(KeyError):
        ToolRegistry().get("nope")


def test_handler_is_called_with_client_and_arguments():
    seen = []

    def handler(client, arguments):
        seen.append((client, dict(arguments)))
        return CallToolResult([TextContent("ok")])

    registry = ToolRegistry()
    registry.add(ToolSpec("t", "d", handler=handler))
    result = registry.get("t").handler("client", {"k": "v"})
    assert seen == [("client", {"k": "v"})]
    assert result.content[0].text == "ok"