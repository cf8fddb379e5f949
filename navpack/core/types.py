"""Type definitions for NavKit core models."""

from typing import Literal

ActionKind = Literal[
    "pop",
    "push",
    "changed",
    "changed_active_child",
]

ACTION_KINDS: tuple[str, ...] = (
    "pop",
    "push",
    "changed",
    "changed_active_child",
)
