# tests/test_category_graph.py
import logging

import pytest

from storefront.domain.category_graph import CategoryGraphResolver
from storefront.domain.errors import IntegrityGuardError


def cat(id, parent=None, name=None):
    return {
        "id": id,
        "parent_id": parent,
        "name": name or f"Cat {id}",
        "slug": f"cat-{id}",
        "type": "General",
        "is_active": True,
    }


def chain(length):
    return [cat(1)] + [cat(i, parent=i - 1) for i in range(2, length + 1)]


def tree_depth(nodes):
    if not nodes:
        return 0
    return 1 + max(tree_depth(n.get("children", [])) for n in nodes)


def test_build_tree_nests_children_under_roots():
    resolver = CategoryGraphResolver([cat(1), cat(2, 1), cat(3, 1), cat(4, 2), cat(5)])

    tree = resolver.build_tree()

    assert [n["id"] for n in tree] == [1, 5]
    men = tree[0]
    assert [n["id"] for n in men["children"]] == [2, 3]
    assert men["children"][0]["children"][0]["id"] == 4


def test_leaf_nodes_have_no_children_key():
    tree = CategoryGraphResolver([cat(1), cat(2, 1)]).build_tree()

    assert "children" in tree[0]
    assert "children" not in tree[0]["children"][0]
    assert "children" not in CategoryGraphResolver([cat(7)]).build_tree()[0]


def test_tree_nodes_copy_display_fields():
    node = CategoryGraphResolver([cat(1, name="Men")]).build_tree()[0]

    assert node["name"] == "Men"
    assert node["slug"] == "cat-1"
    assert node["parent_id"] is None
    # brakujace pola rekordu -> None, nie KeyError
    assert node["description"] is None


def test_depth_truncation_stops_at_max_depth_without_error(caplog):
    resolver = CategoryGraphResolver(chain(15))

    with caplog.at_level(logging.WARNING):
        tree = resolver.build_tree(max_depth=10)

    assert tree_depth(tree) == 10
    assert any("truncated" in r.message for r in caplog.records)


def test_default_tree_depth_is_ten():
    assert tree_depth(CategoryGraphResolver(chain(12)).build_tree()) == 10


def test_cyclic_records_are_left_out_of_tree(caplog):
    # A -> B -> A, zaden nie jest korzeniem
    resolver = CategoryGraphResolver([cat(1), cat(10, parent=11), cat(11, parent=10)])

    with caplog.at_level(logging.WARNING):
        tree = resolver.build_tree()

    assert [n["id"] for n in tree] == [1]
    assert any("not reachable" in r.message for r in caplog.records)


def test_descendants_of_collects_all_levels():
    resolver = CategoryGraphResolver([cat(1), cat(2, 1), cat(3, 2), cat(4, 3), cat(5)])

    assert resolver.descendants_of(1) == {2, 3, 4}
    assert resolver.descendants_of(3) == {4}
    assert resolver.descendants_of(4) == set()


def test_descendants_of_unknown_id_is_empty():
    assert CategoryGraphResolver([cat(1), cat(2, 1)]).descendants_of(999) == set()


def test_descendants_cycle_terminates_with_partial_result(caplog):
    resolver = CategoryGraphResolver([cat(1, parent=2), cat(2, parent=1)])

    with caplog.at_level(logging.WARNING):
        result = resolver.descendants_of(1)

    assert result == {2}
    assert any("cycle" in r.message for r in caplog.records)


def test_self_parent_is_detected_as_cycle():
    resolver = CategoryGraphResolver([cat(1, parent=1)])

    assert resolver.descendants_of(1) == set()
    with pytest.raises(IntegrityGuardError):
        resolver.descendants_of(1, strict=True)


def test_strict_descendants_raise_on_cycle():
    resolver = CategoryGraphResolver([cat(1, parent=3), cat(2, parent=1), cat(3, parent=2)])

    with pytest.raises(IntegrityGuardError) as exc:
        resolver.descendants_of(1, strict=True)

    assert exc.value.category_id == 1
    assert "cycle" in exc.value.reason


def test_descendants_depth_limit_returns_what_was_found():
    resolver = CategoryGraphResolver(chain(30))

    result = resolver.descendants_of(1, max_depth=5)

    assert result == {2, 3, 4, 5, 6}


def test_descendants_default_depth_limit_is_twenty():
    resolver = CategoryGraphResolver(chain(30))

    assert len(resolver.descendants_of(1)) == 20
    with pytest.raises(IntegrityGuardError):
        resolver.descendants_of(1, strict=True)


def test_strict_mode_is_silent_on_healthy_graph():
    resolver = CategoryGraphResolver(chain(5))

    assert resolver.descendants_of(2, strict=True) == {3, 4, 5}
