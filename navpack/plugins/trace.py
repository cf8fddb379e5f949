"""Ready-made plugin that records every hook event as one NDJSON line."""

from __future__ import annotations

import json
from pathlib import Path

from navpack.plugins.hooks import DiffEndEvent, DiffStartEvent, HookEvent, TransitionEvent


class NdjsonTracePlugin:
    name = "ndjson-trace"

    def __init__(self, path: str = "navkit-trace.ndjson") -> None:
        self.path = Path(path)

    def on_diff_start(self, event: DiffStartEvent) -> None:
        self._record(event)

    def on_diff_end(self, event: DiffEndEvent) -> None:
        self._record(event)

    def on_transition(self, event: TransitionEvent) -> None:
        self._record(event)

    def _record(self, event: HookEvent) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps({"hook": event.hook, **event.to_dict()}, sort_keys=True) + "\n")
