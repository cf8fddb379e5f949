"""Core data model for navigation tree snapshots."""

from __future__ import annotations

import math
from types import MappingProxyType
from typing import Any, Iterable, Mapping
import weakref

from navpack.core.traversal import iter_preorder


class TreeInvariantError(ValueError):
    """Raised when a navigation tree violates a structural invariant."""


class NavNode:
    """One destination in an immutable navigation tree snapshot.

    Nodes compare equal when their ``key`` matches: the key names the logical
    destination, so the same screen in two independent snapshots is "the same
    node". ``label`` and ``metadata`` are display data and never take part in
    identity.

    The parent owns its children. Each child keeps only a weak reference back
    to the parent that adopted it, and can be adopted once.
    """

    __slots__ = (
        "_key",
        "_label",
        "_metadata",
        "_children",
        "_active",
        "_parent_ref",
        "__weakref__",
    )

    def __init__(
        self,
        key: str,
        children: Iterable[NavNode] = (),
        *,
        active: str | None = None,
        label: str | None = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> None:
        if not isinstance(key, str) or not key:
            raise TreeInvariantError(f"Node key must be a non-empty string, got {key!r}.")

        child_nodes = tuple(children)
        child_keys: set[str] = set()
        for child in child_nodes:
            if not isinstance(child, NavNode):
                raise TreeInvariantError(f"Child of {key!r} is not a NavNode: {child!r}")
            if child.key in child_keys:
                raise TreeInvariantError(f"Duplicate child key {child.key!r} under {key!r}.")
            child_keys.add(child.key)
            owner = child.parent
            if owner is not None:
                raise TreeInvariantError(
                    f"Node {child.key!r} already belongs to {owner.key!r}; "
                    f"it cannot also be a child of {key!r}."
                )

        if active is not None and active not in child_keys:
            raise TreeInvariantError(
                f"Active child {active!r} of {key!r} is not one of its children."
            )
        if label is not None and not isinstance(label, str):
            raise TreeInvariantError(f"Label of {key!r} must be a string, got {label!r}.")
        metadata = dict(metadata or {})
        _check_json_value(metadata, where=f"metadata of {key!r}")

        self._key = key
        self._label = label
        self._metadata = MappingProxyType(metadata)
        self._children = child_nodes
        self._active = active
        self._parent_ref: weakref.ref[NavNode] | None = None

        parent_ref = weakref.ref(self)
        for child in child_nodes:
            child._parent_ref = parent_ref

    @property
    def key(self) -> str:
        return self._key

    @property
    def label(self) -> str | None:
        return self._label

    @property
    def metadata(self) -> Mapping[str, Any]:
        return self._metadata

    @property
    def children(self) -> tuple[NavNode, ...]:
        return self._children

    @property
    def active_key(self) -> str | None:
        return self._active

    @property
    def active_child(self) -> NavNode | None:
        if self._active is None:
            return None
        for child in self._children:
            if child.key == self._active:
                return child
        return None

    @property
    def parent(self) -> NavNode | None:
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    def child(self, key: str) -> NavNode | None:
        for child in self._children:
            if child.key == key:
                return child
        return None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NavNode):
            return NotImplemented
        return self._key == other._key

    def __hash__(self) -> int:
        return hash(self._key)

    def __repr__(self) -> str:
        parts = [repr(self._key)]
        if self._children:
            parts.append(f"children={[child.key for child in self._children]!r}")
        if self._active is not None:
            parts.append(f"active={self._active!r}")
        return f"NavNode({', '.join(parts)})"

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "key": self._key,
            "active": self._active,
            "children": [child.to_dict() for child in self._children],
        }
        if self._label is not None:
            payload["label"] = self._label
        if self._metadata:
            payload["metadata"] = dict(self._metadata)
        return payload

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "NavNode":
        """Build and validate a tree from its dict form."""
        root = _node_from_dict(raw, path="$")
        validate_tree(root)
        return root


def _node_from_dict(raw: Any, *, path: str) -> NavNode:
    if not isinstance(raw, Mapping):
        raise TreeInvariantError(f"Tree node at {path} must be an object.")
    if "key" not in raw:
        raise TreeInvariantError(f"Tree node at {path} is missing 'key'.")

    raw_children = raw.get("children", [])
    if not isinstance(raw_children, list):
        raise TreeInvariantError(f"Tree node at {path} has non-list 'children'.")

    metadata = raw.get("metadata")
    if metadata is not None and not isinstance(metadata, Mapping):
        raise TreeInvariantError(f"Tree node at {path} has non-object 'metadata'.")

    return NavNode(
        raw["key"],
        [
            _node_from_dict(child, path=f"{path}.children[{idx}]")
            for idx, child in enumerate(raw_children)
        ],
        active=raw.get("active"),
        label=raw.get("label"),
        metadata=metadata,
    )


def _check_json_value(value: Any, *, where: str) -> None:
    # Metadata is hashed and written to snapshot files, so it must be plain finite JSON.
    if value is None or isinstance(value, (str, bool, int)):
        return
    if isinstance(value, float):
        if not math.isfinite(value):
            raise TreeInvariantError(f"{where} contains a non-finite number: {value!r}")
        return
    if isinstance(value, (list, tuple)):
        for idx, item in enumerate(value):
            _check_json_value(item, where=f"{where}[{idx}]")
        return
    if isinstance(value, Mapping):
        for item_key, item in value.items():
            if not isinstance(item_key, str):
                raise TreeInvariantError(f"{where} has a non-string key: {item_key!r}")
            _check_json_value(item, where=f"{where}.{item_key}")
        return
    raise TreeInvariantError(
        f"{where} holds a {type(value).__name__}, which is not a JSON value."
    )


def validate_tree(root: NavNode | None) -> None:
    """Check tree-wide invariants that single-node construction cannot see.

    Keys must be unique across the whole tree, since destinations are matched
    by key between snapshots.
    """
    seen: dict[str, NavNode] = {}
    for node in iter_preorder(root):
        previous = seen.get(node.key)
        if previous is not None:
            first_parent = previous.parent.key if previous.parent is not None else "<root>"
            second_parent = node.parent.key if node.parent is not None else "<root>"
            raise TreeInvariantError(
                f"Key {node.key!r} appears more than once "
                f"(under {first_parent!r} and {second_parent!r})."
            )
        seen[node.key] = node
