import copy

import pytest
import yaml

from komcp.utils.unstructured import (
    add_or_update_annotations,
    nested_get,
    remove_managed_fields,
    sort_by_creation_time,
    to_yaml,
)


def _item(name, stamp=None):
    metadata = {"name": name}
    if stamp is not None:
        metadata["creationTimestamp"] = stamp
    return {"metadata": metadata}


def test_nested_get_returns_value():
    obj = {"spec": {"names": {"kind": "Widget"}}}
    assert nested_get(obj, "spec", "names", "kind") == "Widget"


def test_nested_get_missing_key_raises():
    with pytest.raises(KeyError):
        nested_get({"spec": {}}, "spec", "group")


def test_nested_get_non_mapping_raises():
    with pytest.raises(TypeError):
        nested_get({"spec": "text"}, "spec", "group")


def test_sort_by_creation_time_newest_first():
    items = [
        _item("old", "2024-01-01T00:00:00Z"),
        _item("new", "2024-12-05T14:11:44Z"),
        _item("none"),
        _item("mid", "2024-06-01T00:00:00Z"),
    ]
    result = sort_by_creation_time(items)
    assert [i["metadata"]["name"] for i in result] == ["new", "mid", "old", "none"]
    assert result is items


def test_remove_managed_fields():
    obj = {"metadata": {"name": "a", "managedFields": [{"manager": "x"}]}}
    remove_managed_fields(obj)
    assert obj == {"metadata": {"name": "a"}}


def test_remove_managed_fields_without_metadata_is_noop():
    obj = {"kind": "Pod"}
    before = copy.deepcopy(obj)
    remove_managed_fields(obj)
    assert obj == before


def test_to_yaml_round_trip():
    obj = {"apiVersion": "v1", "kind": "Pod", "metadata": {"name": "p", "labels": {"a": "b"}}, "spec": {"n": [1, 2]}}
    assert yaml.safe_load(to_yaml(obj)) == obj


def test_to_yaml_rejects_unserializable():
    with pytest.raises(ValueError):
        to_yaml({"bad": object()})


def test_add_or_update_annotations_merges():
    obj = {"metadata": {"annotations": {"keep": "1", "change": "old"}}}
    add_or_update_annotations(obj, {"change": "new", "extra": "x"})
    assert obj["metadata"]["annotations"] == {"keep": "1", "change": "new", "extra": "x"}


def test_add_or_update_annotations_creates_map():
    obj = {"metadata": {"name": "a"}}
    add_or_update_annotations(obj, {"k": "v"})
    assert obj["metadata"]["annotations"] == {"k": "v"}
    assert obj["metadata"]["name"] == "a"