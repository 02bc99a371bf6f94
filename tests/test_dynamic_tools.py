import json

import pytest

from komcp.mcp.dynamic_tools import (
    STRATEGIC_MERGE_PATCH,
    ListQuery,
    parse_annotation,
    parse_force,
    parse_label,
    parse_list_query,
    parse_patch_data,
    register_tools,
    success_message,
    summarize_list,
)
from komcp.mcp.metadata import ResourceMetadata
from komcp.mcp.toolkit import ToolRegistry


class FakeClient:
    def __init__(self, fail=False):
        self.calls = []
        self.fail = fail
        self.items = []

    def _record(self, *args):
        self.calls.append(args)
        if self.fail:
            raise OSError("boom")

    def get_resource(self, meta, all_namespaces):
        self._record("get", meta, all_namespaces)
        return {"metadata": {"name": meta.name, "managedFields": [{"manager": "x"}]}}

    def describe_resource(self, meta):
        self._record("describe", meta)
        return b"Name: web"

    def delete_resource(self, meta, force, all_namespaces):
        self._record("delete", meta, force, all_namespaces)

    def list_resources(self, query):
        self._record("list", query)
        return self.items

    def annotate_resource(self, meta, annotation, all_namespaces):
        self._record("annotate", meta, annotation, all_namespaces)

    def label_resource(self, meta, label, all_namespaces):
        self._record("label", meta, label, all_namespaces)

    def patch_resource(self, meta, patch_data, patch_type, all_namespaces):
        self._record("patch", meta, patch_data, patch_type, all_namespaces)


@pytest.fixture
def registry():
    reg = ToolRegistry()
    register_tools(reg)
    return reg


def call(registry, name, client, arguments):
    return registry.get(name).handler(client, arguments)


def test_register_tools_names(registry):
    assert registry.names() == [
        "get_k8s_resource",
        "describe_k8s_resource",
        "delete_k8s_resource",
        "list_k8s_resource",
        "annotate_k8s_resource",
        "label_k8s_resource",
        "patch_k8s_resource",
    ]


def test_parse_list_query():
    query = parse_list_query({"kind": "pod", "label": "app=k8m", "field": "metadata.name=x"})
    assert query.label_selector == "app=k8m"
    assert query.field_selector == "metadata.name=x"
    assert query.meta.kind == "Pod"
    assert query.all_namespaces is True


def test_list_query_with_namespace_is_not_all_namespaces():
    query = ListQuery(meta=ResourceMetadata(namespace="default"))
    assert query.all_namespaces is False


@pytest.mark.parametrize(
    "arguments, expected",
    [({"force": True}, True), ({"force": False}, False), ({"force": "true"}, False), ({}, False), (None, False)],
)
def test_parse_force(arguments, expected):
    assert parse_force(arguments) is expected


def test_required_parsers_return_values():
    args = {"annotation": "a=b", "label": "c=d", "patch_data": "{}"}
    assert parse_annotation(args) == "a=b"
    assert parse_label(args) == "c=d"
    assert parse_patch_data(args) == "{}"


@pytest.mark.parametrize(
    "parser, message",
    [
        (parse_annotation, "annotation parameter is required"),
        (parse_label, "label parameter is required"),
        (parse_patch_data, "patch data is required"),
    ],
)
@pytest.mark.parametrize("arguments", [{}, None, {"annotation": "", "label": "", "patch_data": ""}])
def test_required_parsers_raise(parser, message, arguments):
    with pytest.raises(ValueError, match=message):
        parser(arguments)


def test_summarize_list():
    items = [
        {"metadata": {"name": "a", "namespace": "ns"}},
        {"metadata": {"name": "b", "namespace": ""}},
        {},
    ]
    assert summarize_list(items) == [{"name": "a", "namespace": "ns"}, {"name": "b"}, {"name": ""}]


def test_success_message():
    meta = ResourceMetadata(namespace="ns", name="web", group="apps", version="v1", kind="Deployment")
    assert success_message("deleted", meta) == "Successfully deleted resource [ns/web] of type [appsv1Deployment]"


def test_get_removes_managed_fields(registry):
    client = FakeClient()
    result = call(registry, "get_k8s_resource", client, {"kind": "pod", "name": "web"})
    assert json.loads(result.content[0].text) == {"metadata": {"name": "web"}}
    assert client.calls[0][2] is True


def test_get_error_message(registry):
    client = FakeClient(fail=True)
    with pytest.raises(RuntimeError, match=r"failed to get item \[ns/web\] type of  \[v1Pod\]: boom"):
        call(registry, "get_k8s_resource", client, {"kind": "pod", "name": "web", "namespace": "ns"})


def test_describe_returns_text(registry):
    result = call(registry, "describe_k8s_resource", FakeClient(), {"kind": "pod", "name": "web"})
    assert result.content[0].text == "Name: web"


def test_delete_passes_force(registry):
    client = FakeClient()
    result = call(
        registry, "delete_k8s_resource", client,
        {"kind": "deployment", "name": "web", "namespace": "ns", "force": True},
    )
    assert client.calls[0][2] is True
    assert client.calls[0][3] is False
    assert json.loads(result.content[0].text) == success_message("deleted", client.calls[0][1])


def test_delete_error(registry):
    with pytest.raises(RuntimeError, match="failed to delete item"):
        call(registry, "delete_k8s_resource", FakeClient(fail=True), {"kind": "pod", "name": "x"})


def test_list_summarizes(registry):
    client = FakeClient()
    client.items = [{"metadata": {"name": "a", "namespace": "ns"}}]
    result = call(registry, "list_k8s_resource", client, {"kind": "pod", "label": "app=x"})
    assert json.loads(result.content[0].text) == [{"name": "a", "namespace": "ns"}]
    assert client.calls[0][1].label_selector == "app=x"


def test_list_empty_gives_null(registry):
    result = call(registry, "list_k8s_resource", FakeClient(), {"kind": "pod"})
    assert result.content[0].text == "null"


def test_list_error(registry):
    with pytest.raises(RuntimeError, match=r"failed to list items type of \[v1Pod\]"):
        call(registry, "list_k8s_resource", FakeClient(fail=True), {"kind": "pod"})


def test_annotate_and_label(registry):
    client = FakeClient()
    args = {"kind": "pod", "name": "web", "annotation": "a=b", "label": "c=d"}
    annotated = call(registry, "annotate_k8s_resource", client, args)
    labelled = call(registry, "label_k8s_resource", client, args)
    assert client.calls[0][2] == "a=b"
    assert client.calls[1][2] == "c=d"
    assert json.loads(annotated.content[0].text).startswith("Successfully updated annotation for resource")
    assert json.loads(labelled.content[0].text).startswith("Successfully updated label for resource")


def test_annotate_requires_argument(registry):
    client = FakeClient()
    with pytest.raises(ValueError, match="annotation parameter is required"):
        call(registry, "annotate_k8s_resource", client, {"kind": "pod", "name": "web"})
    assert client.calls == []


def test_patch_uses_strategic_merge(registry):
    client = FakeClient()
    call(registry, "patch_k8s_resource", client, {"kind": "pod", "name": "web", "patch_data": '{"a":1}'})
    assert client.calls[0][2] == '{"a":1}'
    assert client.calls[0][3] == STRATEGIC_MERGE_PATCH


def test_patch_error(registry):
    with pytest.raises(RuntimeError, match="failed to patch item"):
        call(
            registry, "patch_k8s_resource", FakeClient(fail=True),
            {"kind": "pod", "name": "web", "patch_data": "{}"},
        )