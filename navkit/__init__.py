"""Stable public API surface for NavKit.

This module is the supported import path for library users.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Sequence

from navpack import __version__
from navpack.artifact import read_snapshot, write_snapshot
from navpack.core.models import NavNode, TreeInvariantError, validate_tree
from navpack.diff import (
    ChangedAction,
    ChangedActiveChildAction,
    DiffAction,
    NavDiffResult,
    PopAction,
    PushAction,
    TransitionAssertionResult,
    assert_transition,
    compute_actions,
    compute_diff,
)
from navpack.session import NavigationSession

__all__ = [
    "__version__",
    "NavNode",
    "TreeInvariantError",
    "DiffAction",
    "PopAction",
    "PushAction",
    "ChangedAction",
    "ChangedActiveChildAction",
    "NavDiffResult",
    "TransitionAssertionResult",
    "NavigationSession",
    "validate_tree",
    "compute_actions",
    "diff",
    "assert_transition",
    "read_snapshot",
    "write_snapshot",
    "diff_files",
]


def diff(last: NavNode | None, current: NavNode | None) -> NavDiffResult:
    """Diff two in-memory snapshots.

    Returns a ``NavDiffResult`` whose ``actions`` are ordered pops, then
    pushes/changes, then active-child changes. This call is pure: it reads no
    environment and notifies no plugins. ``NavigationSession.advance`` and
    ``assert_transition`` are the entry points that fire plugin hooks.
    """
    return compute_diff(last, current)


def diff_files(
    last: str | Path,
    current: str | Path,
    *,
    expected: Sequence[dict[str, Any]] | None = None,
) -> NavDiffResult | TransitionAssertionResult:
    """Diff two `.navtree` files, or assert them against ``expected`` actions."""
    last_tree = read_snapshot(last)
    current_tree = read_snapshot(current)
    if expected is not None:
        return assert_transition(last_tree, current_tree, expected)
    return compute_diff(last_tree, current_tree)
