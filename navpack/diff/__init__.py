"""Diff subsystem for NavKit."""

from navpack.diff.assertion import (
    ActionMismatch,
    ExpectationError,
    TransitionAssertionResult,
    assert_transition,
    load_expected_actions,
)
from navpack.diff.engine import compute_actions, compute_diff, diff_trees
from navpack.diff.formatting import describe_action, render_actions, render_diff_summary
from navpack.diff.models import (
    ChangedAction,
    ChangedActiveChildAction,
    DiffAction,
    NavDiffResult,
    PopAction,
    PushAction,
)

__all__ = [
    "DiffAction",
    "PopAction",
    "PushAction",
    "ChangedAction",
    "ChangedActiveChildAction",
    "NavDiffResult",
    "compute_actions",
    "compute_diff",
    "diff_trees",
    "ActionMismatch",
    "ExpectationError",
    "TransitionAssertionResult",
    "assert_transition",
    "load_expected_actions",
    "describe_action",
    "render_actions",
    "render_diff_summary",
]
