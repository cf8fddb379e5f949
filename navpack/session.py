"""Serialized navigation transitions for one application.

The differ only compares two snapshots. ``NavigationSession`` is the owner
that pairs them: each ``advance`` diffs the previous snapshot against the new
one and then makes the new one "last", one transition at a time.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
import threading
from typing import Any
import uuid

from navpack.core.models import NavNode
from navpack.diff.engine import diff_trees
from navpack.diff.models import NavDiffResult
from navpack.plugins import TransitionEvent, active_plugins

DEFAULT_HISTORY_LIMIT = 32


@dataclass(frozen=True, slots=True)
class Transition:
    """One applied transition: its position in the session and the diff."""

    sequence: int
    diff: NavDiffResult

    def to_dict(self) -> dict[str, Any]:
        return {"sequence": self.sequence, **self.diff.to_dict()}


class NavigationSession:
    """Tracks the last snapshot and turns each new snapshot into actions.

    ``advance`` calls are serialized. Plugin hooks run while a transition is in
    flight and may read ``last``, ``sequence`` and ``history`` (they see the
    state before the transition), but must not call ``advance`` or ``reset``.
    """

    def __init__(
        self,
        initial: NavNode | None = None,
        *,
        session_id: str | None = None,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> None:
        if history_limit < 1:
            raise ValueError(f"history_limit must be at least 1, got {history_limit}")
        self.session_id = session_id or f"nav-{uuid.uuid4().hex[:12]}"
        self._transition_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._last = initial
        self._sequence = 0
        self._history: deque[Transition] = deque(maxlen=history_limit)

    @property
    def last(self) -> NavNode | None:
        with self._state_lock:
            return self._last

    @property
    def sequence(self) -> int:
        with self._state_lock:
            return self._sequence

    @property
    def history(self) -> list[Transition]:
        """Most recent transitions, oldest first."""
        with self._state_lock:
            return list(self._history)

    def advance(self, current: NavNode | None) -> NavDiffResult:
        """Diff the last snapshot against ``current`` and make ``current`` the last."""
        with self._transition_lock:
            diff = diff_trees(self.last, current)
            with self._state_lock:
                self._sequence += 1
                sequence = self._sequence
                self._history.append(Transition(sequence=sequence, diff=diff))
                self._last = current

        active_plugins().emit(
            TransitionEvent(
                session_id=self.session_id,
                sequence=sequence,
                last_hash=diff.last_hash,
                current_hash=diff.current_hash,
                action_count=len(diff.actions),
            )
        )
        return diff

    def reset(self, snapshot: NavNode | None = None) -> None:
        """Replace the last snapshot without producing actions, and clear history."""
        with self._transition_lock, self._state_lock:
            self._last = snapshot
            self._sequence = 0
            self._history.clear()
