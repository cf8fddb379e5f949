"""Hook events and the dispatcher that delivers them to plugins.

A plugin is any object with one or more of the hook methods ``on_diff_start``,
``on_diff_end`` and ``on_transition``. Each event names the hook it is
delivered to, so dispatch is a single ``emit`` call.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, ClassVar, Literal, Union
import warnings

DiffStatus = Literal["ok", "error"]


@dataclass(frozen=True, slots=True)
class DiffStartEvent:
    hook: ClassVar[str] = "on_diff_start"

    last_hash: str
    current_hash: str
    total_last_nodes: int
    total_current_nodes: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class DiffEndEvent:
    hook: ClassVar[str] = "on_diff_end"

    last_hash: str
    current_hash: str
    status: DiffStatus
    action_count: int | None = None
    summary: dict[str, int] | None = None
    error_type: str | None = None
    error_message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class TransitionEvent:
    hook: ClassVar[str] = "on_transition"

    session_id: str
    sequence: int
    last_hash: str
    current_hash: str
    action_count: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


HookEvent = Union[DiffStartEvent, DiffEndEvent, TransitionEvent]


@dataclass(frozen=True, slots=True)
class PluginDiagnostic:
    """A plugin (or plugin config) failure that was reported instead of raised."""

    plugin_name: str
    hook: str
    error_type: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


def report_failure(
    diagnostics: list[PluginDiagnostic], *, plugin_name: str, hook: str, error: Exception
) -> PluginDiagnostic:
    diagnostic = PluginDiagnostic(
        plugin_name=plugin_name,
        hook=hook,
        error_type=type(error).__name__,
        message=str(error),
    )
    diagnostics.append(diagnostic)
    warnings.warn(
        f"NavKit plugin failure: plugin={plugin_name} hook={hook} "
        f"error={diagnostic.error_type}: {diagnostic.message}",
        RuntimeWarning,
        stacklevel=4,
    )
    return diagnostic


@dataclass(slots=True)
class PluginManager:
    """Delivers events to plugins; an exception in one plugin never reaches the caller."""

    plugins: tuple[object, ...] = ()
    diagnostics: list[PluginDiagnostic] = field(default_factory=list)

    def emit(self, event: HookEvent) -> None:
        for plugin in self.plugins:
            handler = getattr(plugin, event.hook, None)
            if handler is None:
                continue
            try:
                handler(event)
            except Exception as error:
                name = getattr(plugin, "name", None) or type(plugin).__name__
                report_failure(
                    self.diagnostics, plugin_name=str(name), hook=event.hook, error=error
                )
