from types import SimpleNamespace

import pytest

from tagform.utils.hierarchy_utils import (
    build_path,
    build_tree,
    compute_paths,
    flatten_in_order,
    is_same_or_descendant,
)


def node(id, parent_id=None, order=1):
    return SimpleNamespace(id=id, parent_id=parent_id, order=order)


def test_build_path():
    assert build_path(None, "a") == "a"
    assert build_path("a.b", "c") == "a.b.c"


def test_compute_paths_follows_parents():
    paths = compute_paths({"a": None, "b": "a", "c": "b", "d": None})
    assert paths == {"a": "a", "b": "a.b", "c": "a.b.c", "d": "d"}


def test_compute_paths_rejects_cycles():
    with pytest.raises(ValueError):
        compute_paths({"a": "b", "b": "a"})


def test_is_same_or_descendant():
    parents = {"a": None, "b": "a", "c": "b"}
    assert is_same_or_descendant(parents, "c", "a")
    assert is_same_or_descendant(parents, "a", "a")
    assert not is_same_or_descendant(parents, "a", "c")


def test_flatten_lists_parents_before_children():
    items = [
        node("b", order=2),
        node("a", order=1),
        node("a2", parent_id="a", order=2),
        node("a1", parent_id="a", order=1),
    ]
    assert [n.id for n in flatten_in_order(items)] == ["a", "a1", "a2", "b"]


def test_build_tree_nests_and_orders():
    nodes = [
        {"id": "b", "parent_id": None, "order": 2},
        {"id": "a", "parent_id": None, "order": 1},
        {"id": "c", "parent_id": "a", "order": 1},
    ]
    tree = build_tree(nodes)
    assert [n["id"] for n in tree] == ["a", "b"]
    assert [n["id"] for n in tree[0]["children"]] == ["c"]
    assert tree[1]["children"] == []


def test_deep_chains_do_not_exhaust_the_stack():
    depth = 5000
    parents = {f"q{i}": (f"q{i - 1}" if i else None) for i in range(depth)}

    paths = compute_paths(parents)
    assert paths[f"q{depth - 1}"].count(".") == depth - 1

    items = [node(qid, parent_id=parent) for qid, parent in parents.items()]
    assert [n.id for n in flatten_in_order(reversed(items))] == list(parents)

    tree = build_tree([{"id": qid, "parent_id": parent, "order": 1} for qid, parent in parents.items()])
    assert [n["id"] for n in tree] == ["q0"]
