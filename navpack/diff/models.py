"""Diff actions and result model for navigation tree transitions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Union

from navpack.core.models import NavNode
from navpack.core.types import ACTION_KINDS, ActionKind


@dataclass(frozen=True, slots=True)
class PopAction:
    """A single destination removed from its parent."""

    kind: ClassVar[ActionKind] = "pop"

    node: NavNode

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "node": self.node.key}


@dataclass(frozen=True, slots=True)
class PushAction:
    """A single destination added under its parent."""

    kind: ClassVar[ActionKind] = "push"

    node: NavNode

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "node": self.node.key}


@dataclass(frozen=True, slots=True)
class ChangedAction:
    """Batched push/pop report for one parent.

    ``pushed_nodes`` is the parent's complete child list in the current tree,
    in on-screen order, not only the newly added nodes. ``parent`` is ``None``
    when the change happens at the root position.
    """

    kind: ClassVar[ActionKind] = "changed"

    parent: NavNode | None
    popped_nodes: tuple[NavNode, ...]
    pushed_nodes: tuple[NavNode, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "parent": self.parent.key if self.parent is not None else None,
            "popped": [node.key for node in self.popped_nodes],
            "pushed": [node.key for node in self.pushed_nodes],
        }


@dataclass(frozen=True, slots=True)
class ChangedActiveChildAction:
    """The active child of ``parent`` is now ``node`` (``None`` when cleared)."""

    kind: ClassVar[ActionKind] = "changed_active_child"

    parent: NavNode
    node: NavNode | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "parent": self.parent.key,
            "node": self.node.key if self.node is not None else None,
        }


DiffAction = Union[PopAction, PushAction, ChangedAction, ChangedActiveChildAction]


@dataclass(slots=True)
class NavDiffResult:
    """Ordered action list plus the fingerprints of the compared snapshots."""

    last_hash: str
    current_hash: str
    total_last_nodes: int
    total_current_nodes: int
    actions: list[DiffAction] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.actions

    @property
    def pops(self) -> list[PopAction]:
        return [action for action in self.actions if isinstance(action, PopAction)]

    @property
    def structural(self) -> list[PushAction | ChangedAction]:
        return [
            action
            for action in self.actions
            if isinstance(action, (PushAction, ChangedAction))
        ]

    @property
    def active_changes(self) -> list[ChangedActiveChildAction]:
        return [
            action for action in self.actions if isinstance(action, ChangedActiveChildAction)
        ]

    def summary(self) -> dict[str, int]:
        counts = {kind: 0 for kind in ACTION_KINDS}
        for action in self.actions:
            counts[action.kind] += 1
        return counts

    def to_dict(self) -> dict[str, Any]:
        return {
            "last_hash": self.last_hash,
            "current_hash": self.current_hash,
            "total_last_nodes": self.total_last_nodes,
            "total_current_nodes": self.total_current_nodes,
            "empty": self.is_empty,
            "summary": self.summary(),
            "actions": [action.to_dict() for action in self.actions],
        }
