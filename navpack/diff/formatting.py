"""CLI-friendly rendering for navigation diffs."""

from __future__ import annotations

from navpack.diff.models import (
    ChangedAction,
    ChangedActiveChildAction,
    DiffAction,
    NavDiffResult,
    PopAction,
    PushAction,
)


def render_diff_summary(diff: NavDiffResult) -> str:
    summary = diff.summary()
    return (
        f"last={_short_hash(diff.last_hash)} current={_short_hash(diff.current_hash)} "
        f"pop={summary['pop']} push={summary['push']} changed={summary['changed']} "
        f"changed_active_child={summary['changed_active_child']}"
    )


def render_actions(diff: NavDiffResult, *, max_actions: int = 50) -> str:
    if diff.is_empty:
        return "no navigation changes"

    lines = [f"actions: {len(diff.actions)}"]
    for position, action in enumerate(diff.actions[:max_actions], start=1):
        lines.append(f"  {position}. {describe_action(action)}")
    remaining = len(diff.actions) - max_actions
    if remaining > 0:
        lines.append(f"  ... {remaining} additional action(s) omitted")
    return "\n".join(lines)


def describe_action(action: DiffAction) -> str:
    if isinstance(action, PopAction):
        return f"pop {action.node.key}"
    if isinstance(action, PushAction):
        parent = action.node.parent
        where = parent.key if parent is not None else "<root>"
        return f"push {action.node.key} under {where}"
    if isinstance(action, ChangedAction):
        where = action.parent.key if action.parent is not None else "<root>"
        popped = ", ".join(node.key for node in action.popped_nodes) or "-"
        children = ", ".join(node.key for node in action.pushed_nodes) or "-"
        return f"changed {where}: popped [{popped}] children [{children}]"
    if isinstance(action, ChangedActiveChildAction):
        target = action.node.key if action.node is not None else "<none>"
        return f"active {action.parent.key} -> {target}"
    raise TypeError(f"Unknown diff action: {action!r}")


def _short_hash(value: str) -> str:
    _, _, digest = value.partition(":")
    return (digest or value)[:12]
