"""Core models and deterministic primitives for NavKit."""

from navpack.core.canonical import canonical_json, canonicalize
from navpack.core.hashing import compute_tree_hash
from navpack.core.models import NavNode, TreeInvariantError, validate_tree
from navpack.core.traversal import (
    active_path,
    count_nodes,
    find_node,
    index_by_key,
    iter_postorder,
    iter_preorder,
)
from navpack.core.types import ACTION_KINDS, ActionKind

__all__ = [
    "NavNode",
    "TreeInvariantError",
    "validate_tree",
    "ACTION_KINDS",
    "ActionKind",
    "canonicalize",
    "canonical_json",
    "compute_tree_hash",
    "iter_preorder",
    "iter_postorder",
    "index_by_key",
    "count_nodes",
    "find_node",
    "active_path",
]
