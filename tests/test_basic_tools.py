import json

import pytest

from komcp.mcp.basic_tools import (
    EventQuery,
    list_clusters_result,
    parse_event_query,
    parse_yaml_content,
    register_tools,
)
from komcp.mcp.toolkit import ToolRegistry


class FakeClient:
    def __init__(self, fail_events=False):
        self.calls = []
        self.fail_events = fail_events

    def cluster_names(self):
        return ["dev", "prod"]

    def list_events(self, query):
        self.calls.append(("list_events", query))
        if self.fail_events:
            raise ConnectionError("unreachable")
        return [{"reason": "Started"}]

    def apply_yaml(self, cluster, content):
        self.calls.append(("apply_yaml", cluster, content))
        return ["applied"]

    def delete_yaml(self, cluster, content):
        self.calls.append(("delete_yaml", cluster, content))
        return ["deleted"]

    def set_default_ingress_class(self, cluster, name):
        self.calls.append(("ingress", cluster, name))

    def set_default_storage_class(self, cluster, name):
        self.calls.append(("storage", cluster, name))

    def storage_class_pvc_count(self, cluster, name):
        return 4

    def storage_class_pv_count(self, cluster, name):
        return 7


@pytest.fixture
def registry():
    reg = ToolRegistry()
    register_tools(reg)
    return reg


def test_list_clusters_result():
    text = list_clusters_result(["a", "b"]).content[0].text
    assert json.loads(text) == [{"name": "a"}, {"name": "b"}]


def test_list_clusters_result_empty_is_null():
    assert list_clusters_result([]).content[0].text == "null"


def test_parse_event_query_without_filters():
    query = parse_event_query({"cluster": "dev"})
    assert query.all_namespaces is True
    assert query.field_selector is None
    assert (query.group, query.version, query.kind) == ("events.k8s.io", "v1", "Event")
    assert query.meta.cluster == "dev"


def test_parse_event_query_with_object_name():
    query = parse_event_query({"namespace": "default", "involvedObjectName": "web-1"})
    assert query.all_namespaces is False
    assert query.field_selector == "regarding.name=web-1"


@pytest.mark.parametrize("arguments", [{}, {"yaml": 3}, None])
def test_parse_yaml_content_invalid(arguments):
    with pytest.raises(ValueError, match="invalid yaml content"):
        parse_yaml_content(arguments)


def test_parse_yaml_content_accepts_empty_string():
    assert parse_yaml_content({"yaml": ""}) == ""


def test_register_tools_names(registry):
    assert set(registry.names()) == {
        "list_clusters",
        "list_k8s_event",
        "set_default_storageclass",
        "get_storageclass_pvc_count",
        "get_storageclass_pv_count",
        "set_default_ingressclass",
        "apply_yaml",
        "delete_yaml",
    }


def test_list_clusters_handler(registry):
    result = registry.get("list_clusters").handler(FakeClient(), {})
    assert json.loads(result.content[0].text) == [{"name": "dev"}, {"name": "prod"}]


def test_list_events_handler(registry):
    client = FakeClient()
    result = registry.get("list_k8s_event").handler(client, {"involvedObjectName": "x"})
    assert json.loads(result.content[0].text) == [{"reason": "Started"}]
    query = client.calls[0][1]
    assert isinstance(query, EventQuery)
    assert query.field_selector == "regarding.name=x"


def test_list_events_handler_wraps_errors(registry):
    with pytest.raises(RuntimeError, match="failed to list events: unreachable"):
        registry.get("list_k8s_event").handler(FakeClient(fail_events=True), {})


def test_apply_and_delete_yaml_handlers(registry):
    client = FakeClient()
    applied = registry.get("apply_yaml").handler(client, {"yaml": "kind: Pod", "cluster": "dev"})
    deleted = registry.get("delete_yaml").handler(client, {"yaml": "kind: Pod"})
    assert applied.content[0].text == "applied"
    assert deleted.content[0].text == "deleted"
    assert client.calls == [("apply_yaml", "dev", "kind: Pod"), ("delete_yaml", "", "kind: Pod")]


def test_apply_yaml_handler_requires_yaml(registry):
    with pytest.raises(ValueError):
        registry.get("apply_yaml").handler(FakeClient(), {"cluster": "dev"})


def test_set_default_handlers(registry):
    client = FakeClient()
    storage = registry.get("set_default_storageclass").handler(client, {"name": "fast"})
    ingress = registry.get("set_default_ingressclass").handler(client, {"cluster": "c", "name": "nginx"})
    assert json.loads(storage.content[0].text) == "Successfully set StorageClass as default"
    assert json.loads(ingress.content[0].text) == "Successfully set IngressClass as default"
    assert client.calls == [("storage", "", "fast"), ("ingress", "c", "nginx")]


def test_count_handlers(registry):
    client = FakeClient()
    pvc = registry.get("get_storageclass_pvc_count").handler(client, {"name": "fast"})
    pv = registry.get("get_storageclass_pv_count").handler(client, {"name": "fast"})
    assert json.loads(pvc.content[0].text) == client.storage_class_pvc_count("", "fast")
    assert json.loads(pv.content[0].text) == client.storage_class_pv_count("", "fast")