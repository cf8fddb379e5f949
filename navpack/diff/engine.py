"""Navigation tree differ.

``compute_actions`` turns a "last" and a "current" snapshot into the ordered
edit actions a UI layer applies to move from one to the other:

1. nodes to pop: post-order over ``last``, keys missing from ``current``;
2. nodes to push: pre-order over ``current``, keys missing from ``last``;
3. pushes are grouped by parent. A lone push under a parent with no pops stays
   a ``PushAction``; anything else becomes one ``ChangedAction`` carrying the
   pops under that parent and the parent's full current child list;
4. pops not absorbed by a ``ChangedAction`` become ``PopAction``;
5. every node present in both trees whose active child differs yields a
   ``ChangedActiveChildAction``.

Result order is pops, then pushes/changes in parent order, then active-child
changes. Neither input tree is mutated.
"""

from __future__ import annotations

from navpack.core.hashing import compute_tree_hash
from navpack.core.models import NavNode
from navpack.core.traversal import count_nodes, index_by_key, iter_postorder, iter_preorder
from navpack.diff.models import (
    ChangedAction,
    ChangedActiveChildAction,
    DiffAction,
    NavDiffResult,
    PopAction,
    PushAction,
)
from navpack.plugins import DiffEndEvent, DiffStartEvent, active_plugins

# Group key for nodes without a parent (the root position).
_ROOT_GROUP: str | None = None


def compute_actions(last: NavNode | None, current: NavNode | None) -> list[DiffAction]:
    """Return the ordered actions transforming ``last`` into ``current``."""
    last_index = index_by_key(last)
    current_index = index_by_key(current)

    nodes_to_pop = [node for node in iter_postorder(last) if node.key not in current_index]
    nodes_to_push = [node for node in iter_preorder(current) if node.key not in last_index]

    pushes_by_parent: dict[str | None, list[NavNode]] = {}
    for node in nodes_to_push:
        pushes_by_parent.setdefault(_parent_key(node, current), []).append(node)

    absorbed_pops: set[str] = set()
    structural: list[DiffAction] = []
    for parent_key, pushes_with_same_parent in pushes_by_parent.items():
        pops_with_same_parent = [
            node for node in nodes_to_pop if _parent_key(node, last) == parent_key
        ]
        if len(pushes_with_same_parent) == 1 and not pops_with_same_parent:
            structural.append(PushAction(node=pushes_with_same_parent[0]))
            continue

        if parent_key is _ROOT_GROUP:
            parent = None
            pushed_nodes: tuple[NavNode, ...] = (current,) if current is not None else ()
        else:
            parent = current_index[parent_key]
            pushed_nodes = parent.children
        structural.append(
            ChangedAction(
                parent=parent,
                popped_nodes=tuple(pops_with_same_parent),
                pushed_nodes=pushed_nodes,
            )
        )
        absorbed_pops.update(node.key for node in pops_with_same_parent)

    pops: list[DiffAction] = [
        PopAction(node=node) for node in nodes_to_pop if node.key not in absorbed_pops
    ]

    active_changes: list[DiffAction] = []
    for node in iter_preorder(current):
        previous = last_index.get(node.key)
        if previous is None or previous.active_key == node.active_key:
            continue
        active_changes.append(ChangedActiveChildAction(parent=node, node=node.active_child))

    return pops + structural + active_changes


def compute_diff(last: NavNode | None, current: NavNode | None) -> NavDiffResult:
    """Diff two snapshots without notifying plugins."""
    return NavDiffResult(
        last_hash=compute_tree_hash(last),
        current_hash=compute_tree_hash(current),
        total_last_nodes=count_nodes(last),
        total_current_nodes=count_nodes(current),
        actions=compute_actions(last, current),
    )


def diff_trees(last: NavNode | None, current: NavNode | None) -> NavDiffResult:
    """Like ``compute_diff``, bracketed by ``on_diff_start`` / ``on_diff_end`` events.

    Events go to the active plugins (see ``navpack.plugins.active_plugins``).
    """
    last_hash = compute_tree_hash(last)
    current_hash = compute_tree_hash(current)
    plugins = active_plugins()
    plugins.emit(
        DiffStartEvent(
            last_hash=last_hash,
            current_hash=current_hash,
            total_last_nodes=count_nodes(last),
            total_current_nodes=count_nodes(current),
        )
    )

    try:
        result = compute_diff(last, current)
    except Exception as error:
        plugins.emit(
            DiffEndEvent(
                last_hash=last_hash,
                current_hash=current_hash,
                status="error",
                error_type=type(error).__name__,
                error_message=str(error),
            )
        )
        raise

    plugins.emit(
        DiffEndEvent(
            last_hash=last_hash,
            current_hash=current_hash,
            status="ok",
            action_count=len(result.actions),
            summary=result.summary(),
        )
    )
    return result


def _parent_key(node: NavNode, root: NavNode | None) -> str | None:
    # A snapshot may be a subtree; its root still groups at the root position.
    if node is root:
        return _ROOT_GROUP
    parent = node.parent
    return parent.key if parent is not None else _ROOT_GROUP
