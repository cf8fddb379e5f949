"""Traversal helpers over navigation tree snapshots.

All helpers are iterative so deep stacks never hit the recursion limit, and all
of them accept ``None`` as the empty tree.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterator

if TYPE_CHECKING:
    from navpack.core.models import NavNode


def iter_preorder(root: NavNode | None) -> Iterator[NavNode]:
    """Yield nodes parent-first, children left to right."""
    if root is None:
        return
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def iter_postorder(root: NavNode | None) -> Iterator[NavNode]:
    """Yield nodes children-first (left to right), each parent after its subtree."""
    if root is None:
        return
    stack: list[tuple[NavNode, bool]] = [(root, False)]
    while stack:
        node, expanded = stack.pop()
        if expanded:
            yield node
            continue
        stack.append((node, True))
        for child in reversed(node.children):
            stack.append((child, False))


def index_by_key(root: NavNode | None) -> dict[str, NavNode]:
    """Map every key in the tree to its node (first occurrence in pre-order)."""
    index: dict[str, NavNode] = {}
    for node in iter_preorder(root):
        index.setdefault(node.key, node)
    return index


def count_nodes(root: NavNode | None) -> int:
    return sum(1 for _ in iter_preorder(root))


def find_node(root: NavNode | None, key: str) -> NavNode | None:
    for node in iter_preorder(root):
        if node.key == key:
            return node
    return None


def active_path(root: NavNode | None) -> list[NavNode]:
    """Return the visible navigation stack: root, then active children down to a leaf."""
    path: list[NavNode] = []
    node = root
    while node is not None:
        path.append(node)
        node = node.active_child
    return path
