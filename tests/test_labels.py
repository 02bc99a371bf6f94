import pytest

from komcp.utils.labels import (
    LabelsManager,
    NodeSelectorRequirement,
    map_contains,
    match_node_selector_requirement,
)


def test_add_labels_creates_and_merges():
    manager = LabelsManager({"team": "ops", "env": "prod"})
    meta = {"name": "x"}
    manager.add_labels(meta)
    assert meta["labels"] == {"team": "ops", "env": "prod"}

    meta = {"labels": {"env": "dev", "app": "web"}}
    manager.add_labels(meta)
    assert meta["labels"] == {"env": "prod", "app": "web", "team": "ops"}


def test_add_custom_label_handles_none():
    meta = {"labels": None}
    LabelsManager().add_custom_label(meta, "k", "v")
    assert meta["labels"] == {"k": "v"}


def test_map_contains():
    big = {"a": "1", "b": "2"}
    assert map_contains({"a": "1"}, big) is True
    assert map_contains({}, big) is True
    assert map_contains({"a": "2"}, big) is False
    assert map_contains({"c": "1"}, big) is False


LABELS = {"zone": "a", "cpu": "8"}


@pytest.mark.parametrize(
    "req, expected",
    [
        (NodeSelectorRequirement("zone", "In", ["a", "b"]), True),
        (NodeSelectorRequirement("zone", "In", ["b"]), False),
        (NodeSelectorRequirement("missing", "In", ["a"]), False),
        (NodeSelectorRequirement("zone", "NotIn", ["b"]), True),
        (NodeSelectorRequirement("zone", "NotIn", ["a"]), False),
        (NodeSelectorRequirement("missing", "NotIn", ["a"]), True),
        (NodeSelectorRequirement("zone", "Exists"), True),
        (NodeSelectorRequirement("missing", "Exists"), False),
        (NodeSelectorRequirement("missing", "DoesNotExist"), True),
        (NodeSelectorRequirement("zone", "DoesNotExist"), False),
        (NodeSelectorRequirement("cpu", "Gt", ["4"]), True),
        (NodeSelectorRequirement("cpu", "Gt", ["8"]), False),
        (NodeSelectorRequirement("cpu", "Lt", ["16"]), True),
        (NodeSelectorRequirement("cpu", "Lt", ["4", "5"]), False),
        (NodeSelectorRequirement("zone", "Gt", ["1"]), False),
        (NodeSelectorRequirement("cpu", "Gt", ["x"]), False),
        (NodeSelectorRequirement("zone", "Bogus", ["a"]), False),
    ],
)
def test_match_node_selector_requirement(req, expected):
    assert match_node_selector_requirement(LABELS, req) is expected