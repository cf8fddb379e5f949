import math

import pytest

import navkit
from navpack.core.models import NavNode, TreeInvariantError
from navpack.core.traversal import iter_preorder
from navpack.diff import (
    ChangedAction,
    ChangedActiveChildAction,
    PopAction,
    PushAction,
    compute_actions,
    diff_trees,
)


def _kinds(actions) -> list[str]:
    return [action.kind for action in actions]


def _dicts(actions) -> list[dict]:
    return [action.to_dict() for action in actions]


def _tabs(active: str) -> NavNode:
    return NavNode(
        "tabs",
        [NavNode("Tab1"), NavNode("Tab2"), NavNode("Tab3")],
        active=active,
    )


def _deep_snapshot(root: NavNode | None) -> list[tuple]:
    return [
        (
            node.key,
            node.active_key,
            tuple(child.key for child in node.children),
            node.parent.key if node.parent is not None else None,
            dict(node.metadata),
        )
        for node in iter_preorder(root)
    ]


def test_diff_of_tree_with_itself_is_empty() -> None:
    tree = NavNode("root", [NavNode("A", [NavNode("A1")], active="A1"), NavNode("B")], active="A")

    assert compute_actions(tree, tree) == []


def test_diff_of_structurally_identical_trees_is_empty() -> None:
    last = NavNode("root", [NavNode("A"), NavNode("B")], active="A")
    current = NavNode("root", [NavNode("A"), NavNode("B")], active="A")

    assert compute_actions(last, current) == []


def test_identical_structure_reports_only_active_marker_changes() -> None:
    last = NavNode("root", [NavNode("A"), NavNode("B")], active="A")
    current = NavNode("root", [NavNode("A"), NavNode("B")], active="B")

    actions = compute_actions(last, current)

    assert actions == [ChangedActiveChildAction(parent=current, node=current.child("B"))]


def test_single_push_under_parent() -> None:
    last = NavNode("root", [NavNode("A")], active="A")
    current = NavNode("root", [NavNode("A"), NavNode("B")], active="A")

    actions = compute_actions(last, current)

    assert actions == [PushAction(node=current.child("B"))]
    assert actions[0].node.parent is current


def test_single_pop_under_parent() -> None:
    last = NavNode("root", [NavNode("A"), NavNode("B")], active="A")
    current = NavNode("root", [NavNode("A")], active="A")

    actions = compute_actions(last, current)

    assert actions == [PopAction(node=last.child("B"))]
    assert actions[0].node.parent is last


def test_push_and_pop_under_same_parent_become_one_changed_action() -> None:
    last = NavNode("root", [NavNode("A"), NavNode("B")], active="B")
    current = NavNode("root", [NavNode("A"), NavNode("C")], active="C")

    actions = compute_actions(last, current)

    assert _dicts(actions) == [
        {"kind": "changed", "parent": "root", "popped": ["B"], "pushed": ["A", "C"]},
        {"kind": "changed_active_child", "parent": "root", "node": "C"},
    ]
    changed = actions[0]
    assert isinstance(changed, ChangedAction)
    assert changed.parent is current
    assert changed.pushed_nodes == current.children
    assert changed.popped_nodes[0] is last.child("B")


def test_active_tab_switch_without_structural_change() -> None:
    actions = compute_actions(_tabs("Tab1"), _tabs("Tab2"))

    assert _dicts(actions) == [
        {"kind": "changed_active_child", "parent": "tabs", "node": "Tab2"},
    ]


def test_multiple_pushes_under_one_parent_are_batched() -> None:
    last = NavNode("root", [NavNode("A")])
    current = NavNode("root", [NavNode("A"), NavNode("B"), NavNode("C")])

    actions = compute_actions(last, current)

    assert _dicts(actions) == [
        {"kind": "changed", "parent": "root", "popped": [], "pushed": ["A", "B", "C"]},
    ]


def test_non_contiguous_pushes_report_full_current_child_order() -> None:
    last = NavNode("root", [NavNode("A"), NavNode("M"), NavNode("Z")])
    current = NavNode(
        "root",
        [NavNode("N1"), NavNode("A"), NavNode("M"), NavNode("N2"), NavNode("Z")],
    )

    actions = compute_actions(last, current)

    assert _dicts(actions) == [
        {
            "kind": "changed",
            "parent": "root",
            "popped": [],
            "pushed": ["N1", "A", "M", "N2", "Z"],
        },
    ]


def test_multiple_pops_without_pushes_stay_individual() -> None:
    last = NavNode("root", [NavNode("A"), NavNode("B"), NavNode("C")])
    current = NavNode("root", [NavNode("B")])

    actions = compute_actions(last, current)

    assert _dicts(actions) == [
        {"kind": "pop", "node": "A"},
        {"kind": "pop", "node": "C"},
    ]


def test_changed_action_keeps_post_order_of_pops_under_parent() -> None:
    last = NavNode("root", [NavNode("A"), NavNode("B"), NavNode("C")])
    current = NavNode("root", [NavNode("D")])

    actions = compute_actions(last, current)

    assert _dicts(actions) == [
        {"kind": "changed", "parent": "root", "popped": ["A", "B", "C"], "pushed": ["D"]},
    ]


def test_sibling_reordering_is_not_a_change() -> None:
    last = NavNode("root", [NavNode("A"), NavNode("B"), NavNode("C")], active="A")
    current = NavNode("root", [NavNode("C"), NavNode("A"), NavNode("B")], active="A")

    assert compute_actions(last, current) == []


def test_both_trees_absent() -> None:
    assert compute_actions(None, None) == []


def test_from_empty_tree_pushes_in_pre_order() -> None:
    current = NavNode("root", [NavNode("A", [NavNode("A1")])])

    actions = compute_actions(None, current)

    assert _dicts(actions) == [
        {"kind": "push", "node": "root"},
        {"kind": "push", "node": "A"},
        {"kind": "push", "node": "A1"},
    ]


def test_to_empty_tree_pops_in_post_order() -> None:
    last = NavNode("root", [NavNode("A", [NavNode("A1")]), NavNode("B")])

    actions = compute_actions(last, None)

    assert _dicts(actions) == [
        {"kind": "pop", "node": "A1"},
        {"kind": "pop", "node": "A"},
        {"kind": "pop", "node": "B"},
        {"kind": "pop", "node": "root"},
    ]


def test_nested_removal_reports_children_before_parents() -> None:
    last = NavNode("root", [NavNode("A", [NavNode("A1", [NavNode("A11")])])])
    current = NavNode("root")

    actions = compute_actions(last, current)

    assert _dicts(actions) == [
        {"kind": "pop", "node": "A11"},
        {"kind": "pop", "node": "A1"},
        {"kind": "pop", "node": "A"},
    ]


def test_root_replacement_groups_at_root_position() -> None:
    last = NavNode("X", [NavNode("A")])
    current = NavNode("Y", [NavNode("B")])

    actions = compute_actions(last, current)

    assert _dicts(actions) == [
        {"kind": "pop", "node": "A"},
        {"kind": "changed", "parent": None, "popped": ["X"], "pushed": ["Y"]},
        {"kind": "push", "node": "B"},
    ]


def test_ancestor_removal_does_not_suppress_descendant_changes() -> None:
    # "P" moves out from under the removed "Q"; its own child swap is still reported.
    last = NavNode("root", [NavNode("Q", [NavNode("P", [NavNode("a")])])])
    current = NavNode("root", [NavNode("P", [NavNode("b")])])

    actions = compute_actions(last, current)

    assert _dicts(actions) == [
        {"kind": "pop", "node": "Q"},
        {"kind": "changed", "parent": "P", "popped": ["a"], "pushed": ["b"]},
    ]


def test_ordering_pops_then_structural_then_active_changes() -> None:
    last = NavNode(
        "root",
        [
            NavNode("stack1", [NavNode("X"), NavNode("Y")], active="Y"),
            NavNode("stack2", [NavNode("P")], active="P"),
        ],
        active="stack1",
    )
    current = NavNode(
        "root",
        [
            NavNode("stack1", [NavNode("X")], active="X"),
            NavNode("stack2", [NavNode("P"), NavNode("Q")], active="Q"),
        ],
        active="stack2",
    )

    actions = compute_actions(last, current)

    assert _dicts(actions) == [
        {"kind": "pop", "node": "Y"},
        {"kind": "push", "node": "Q"},
        {"kind": "changed_active_child", "parent": "root", "node": "stack2"},
        {"kind": "changed_active_child", "parent": "stack1", "node": "X"},
        {"kind": "changed_active_child", "parent": "stack2", "node": "Q"},
    ]

    kinds = _kinds(actions)
    last_pop = max(idx for idx, kind in enumerate(kinds) if kind == "pop")
    first_structural = min(idx for idx, kind in enumerate(kinds) if kind in {"push", "changed"})
    last_structural = max(idx for idx, kind in enumerate(kinds) if kind in {"push", "changed"})
    first_active = min(idx for idx, kind in enumerate(kinds) if kind == "changed_active_child")
    assert last_pop < first_structural
    assert last_structural < first_active


def test_pushes_follow_unique_parent_order() -> None:
    last = NavNode("root", [NavNode("left"), NavNode("right")])
    current = NavNode(
        "root",
        [
            NavNode("left", [NavNode("L1"), NavNode("L2")]),
            NavNode("right", [NavNode("R1")]),
        ],
    )

    actions = compute_actions(last, current)

    assert _dicts(actions) == [
        {"kind": "changed", "parent": "left", "popped": [], "pushed": ["L1", "L2"]},
        {"kind": "push", "node": "R1"},
    ]


def test_cleared_active_marker_reports_none() -> None:
    last = NavNode("root", [NavNode("A")], active="A")
    current = NavNode("root", [NavNode("A")])

    actions = compute_actions(last, current)

    assert _dicts(actions) == [
        {"kind": "changed_active_child", "parent": "root", "node": None},
    ]


def test_diff_does_not_mutate_inputs_and_is_repeatable() -> None:
    last = NavNode(
        "root",
        [NavNode("A", [NavNode("A1")], active="A1", metadata={"title": "A"}), NavNode("B")],
        active="A",
    )
    current = NavNode(
        "root",
        [NavNode("A", [NavNode("A2")], active="A2"), NavNode("C", label="C screen")],
        active="C",
    )
    before_last = _deep_snapshot(last)
    before_current = _deep_snapshot(current)
    before_dicts = (last.to_dict(), current.to_dict())

    first = compute_actions(last, current)
    second = compute_actions(last, current)

    assert _dicts(first) == _dicts(second)
    assert _deep_snapshot(last) == before_last
    assert _deep_snapshot(current) == before_current
    assert (last.to_dict(), current.to_dict()) == before_dicts


def test_diff_trees_wraps_actions_with_fingerprints_and_summary() -> None:
    last = NavNode("root", [NavNode("A"), NavNode("B")], active="B")
    current = NavNode("root", [NavNode("A"), NavNode("C")], active="C")

    result = diff_trees(last, current)

    assert result.is_empty is False
    assert result.total_last_nodes == 3
    assert result.total_current_nodes == 3
    assert result.last_hash.startswith("sha256:")
    assert result.last_hash != result.current_hash
    assert result.summary() == {
        "pop": 0,
        "push": 0,
        "changed": 1,
        "changed_active_child": 1,
    }
    assert result.pops == []
    assert len(result.structural) == 1
    assert len(result.active_changes) == 1

    payload = result.to_dict()
    assert payload["empty"] is False
    assert payload["actions"][0]["kind"] == "changed"


def test_diff_trees_of_identical_snapshots_shares_hash() -> None:
    result = diff_trees(_tabs("Tab1"), _tabs("Tab1"))

    assert result.is_empty is True
    assert result.last_hash == result.current_hash


def test_public_diff_accepts_any_tree_that_can_be_built() -> None:
    last = NavNode("root", [NavNode("A", metadata={"score": 1e308, "opened": "not a date"})])
    current = NavNode(
        "root",
        [
            NavNode("A", metadata={"score": -0.0, "created_at": "2026-02-21T09:00:00-05:00"}),
            NavNode("B", label="Line\r\nbreak", metadata={"rows": [[1, 2.5], {"k": None}]}),
        ],
    )

    result = navkit.diff(last, current)

    assert _kinds(result.actions) == ["push"]
    assert result.last_hash != result.current_hash


def test_non_json_metadata_is_rejected_before_any_diff() -> None:
    with pytest.raises(TreeInvariantError, match="non-finite"):
        NavNode("A", metadata={"score": math.nan})
    with pytest.raises(TreeInvariantError, match="not a JSON value"):
        NavNode("A", metadata={"opened": object()})
