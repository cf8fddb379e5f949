"""Assertion helpers for UI navigation regression checks.

Expected actions use the same dict shape as ``DiffAction.to_dict()``. Keys
left out of an expected entry are not compared, so ``{"kind": "push",
"node": "B"}`` matches a push of ``B`` under any parent.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import json
from pathlib import Path
from typing import Any, Sequence

from navpack.core.models import NavNode
from navpack.core.types import ACTION_KINDS
from navpack.diff.engine import diff_trees
from navpack.diff.models import NavDiffResult

_MISSING = object()


class ExpectationError(ValueError):
    """Raised when an expected-actions document is malformed."""


@dataclass(slots=True)
class ActionMismatch:
    """One position where the computed actions disagree with the expectation."""

    index: int
    expected: dict[str, Any] | None
    actual: dict[str, Any] | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "expected": self.expected,
            "actual": self.actual,
        }


@dataclass(slots=True)
class TransitionAssertionResult:
    """Outcome of comparing a computed diff with an expected action list."""

    diff: NavDiffResult
    expected: list[dict[str, Any]]
    mismatches: list[ActionMismatch] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.mismatches

    @property
    def exit_code(self) -> int:
        return 0 if self.passed else 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": "pass" if self.passed else "fail",
            "exit_code": self.exit_code,
            "expected_count": len(self.expected),
            "actual_count": len(self.diff.actions),
            "mismatch_count": len(self.mismatches),
            "mismatches": [mismatch.to_dict() for mismatch in self.mismatches],
            "diff": self.diff.to_dict(),
        }


def assert_transition(
    last: NavNode | None,
    current: NavNode | None,
    expected: Sequence[dict[str, Any]],
) -> TransitionAssertionResult:
    """Diff ``last`` -> ``current`` and compare the actions position by position."""
    expected_actions = normalize_expected_actions(expected)
    diff = diff_trees(last, current)
    actual_actions = [action.to_dict() for action in diff.actions]

    mismatches: list[ActionMismatch] = []
    for idx in range(max(len(expected_actions), len(actual_actions))):
        want = expected_actions[idx] if idx < len(expected_actions) else None
        got = actual_actions[idx] if idx < len(actual_actions) else None
        if want is None or got is None or not _matches(want, got):
            mismatches.append(ActionMismatch(index=idx + 1, expected=want, actual=got))

    return TransitionAssertionResult(
        diff=diff,
        expected=expected_actions,
        mismatches=mismatches,
    )


def normalize_expected_actions(raw: Any) -> list[dict[str, Any]]:
    if not isinstance(raw, (list, tuple)):
        raise ExpectationError("Expected actions must be a JSON array.")

    normalized: list[dict[str, Any]] = []
    for idx, entry in enumerate(raw, start=1):
        if not isinstance(entry, dict):
            raise ExpectationError(f"Expected action #{idx} must be an object.")
        kind = entry.get("kind")
        if kind not in ACTION_KINDS:
            raise ExpectationError(
                f"Expected action #{idx} has unknown kind {kind!r}; "
                f"expected one of {', '.join(ACTION_KINDS)}."
            )
        normalized.append(dict(entry))
    return normalized


def load_expected_actions(path: str | Path) -> list[dict[str, Any]]:
    """Read an expected-actions JSON file (an array, or ``{"actions": [...]}``)."""
    target = Path(path)
    try:
        raw = json.loads(target.read_text(encoding="utf-8"))
    except json.JSONDecodeError as error:
        raise ExpectationError(
            f"Expected actions file is not valid JSON: {target} ({error})"
        ) from error

    if isinstance(raw, dict):
        raw = raw.get("actions")
    return normalize_expected_actions(raw)


def _matches(expected: dict[str, Any], actual: dict[str, Any]) -> bool:
    return all(actual.get(key, _MISSING) == value for key, value in expected.items())

