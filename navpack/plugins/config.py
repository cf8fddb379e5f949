"""Plugin configuration files and selection of the active plugin set.

A config file looks like::

    {"config_version": 1,
     "plugins": ["pkg.module:Plugin",
                 {"entrypoint": "pkg.trace:NdjsonTracePlugin",
                  "options": {"path": "trace.ndjson"},
                  "enabled": true}]}

The active plugins are, in order of precedence: the manager bound with
``activate`` in the current context, the file named by ``NAVKIT_PLUGIN_CONFIG``,
or no plugins at all.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
import importlib
import json
import os
from pathlib import Path
from typing import Any, Iterator, Mapping

from navpack.plugins.exceptions import PluginConfigError, PluginLoadError
from navpack.plugins.hooks import PluginManager, report_failure

PLUGIN_CONFIG_VERSION = 1
PLUGIN_CONFIG_ENV_VAR = "NAVKIT_PLUGIN_CONFIG"

_ACTIVE: ContextVar[PluginManager | None] = ContextVar("navkit_active_plugins", default=None)
_NO_PLUGINS = PluginManager()
_env_plugins: tuple[str, PluginManager] | None = None


def load_plugins(config: Mapping[str, Any]) -> PluginManager:
    """Instantiate every enabled plugin listed in a parsed config."""
    if config.get("config_version") != PLUGIN_CONFIG_VERSION:
        raise PluginConfigError(
            f"Unsupported plugin config version {config.get('config_version')!r}; "
            f"expected {PLUGIN_CONFIG_VERSION}."
        )
    entries = config.get("plugins")
    if not isinstance(entries, list):
        raise PluginConfigError("Plugin config key 'plugins' must be a JSON array.")

    plugins: list[object] = []
    for number, entry in enumerate(entries, start=1):
        if isinstance(entry, str):
            entry = {"entrypoint": entry}
        elif not isinstance(entry, dict):
            raise PluginConfigError(f"Plugin #{number} must be a string or a JSON object.")
        extra = set(entry) - {"entrypoint", "options", "enabled"}
        if extra:
            raise PluginConfigError(
                f"Plugin #{number} has unsupported keys: {', '.join(sorted(extra))}"
            )
        if entry.get("enabled", True) is False:
            continue
        plugins.append(_instantiate(entry, number=number))
    return PluginManager(plugins=tuple(plugins))


def load_plugins_from_file(path: str | Path) -> PluginManager:
    config_path = Path(path)
    try:
        config = json.loads(config_path.read_text(encoding="utf-8"))
    except OSError as error:
        raise PluginConfigError(f"Cannot read plugin config {config_path}: {error}") from error
    except json.JSONDecodeError as error:
        raise PluginConfigError(f"Invalid plugin config JSON ({config_path}): {error}") from error
    if not isinstance(config, dict):
        raise PluginConfigError(f"Plugin config must be a JSON object ({config_path}).")
    return load_plugins(config)


def plugins_from_env(*, strict: bool = False) -> PluginManager:
    """Plugins named by ``NAVKIT_PLUGIN_CONFIG``.

    A broken config raises when ``strict``; otherwise it is reported as a
    diagnostic with a ``RuntimeWarning`` and no plugins run. Either way the
    outcome is cached per config path.
    """
    global _env_plugins

    config_path = os.getenv(PLUGIN_CONFIG_ENV_VAR, "").strip()
    if not config_path:
        return _NO_PLUGINS
    cached = _env_plugins
    if cached is not None and cached[0] == config_path:
        # A config that failed leniently is retried when the caller wants the error.
        if not (strict and cached[1].diagnostics):
            return cached[1]

    try:
        manager = load_plugins_from_file(config_path)
    except (PluginConfigError, PluginLoadError) as error:
        if strict:
            raise
        manager = PluginManager()
        report_failure(manager.diagnostics, plugin_name=config_path, hook="config", error=error)
    _env_plugins = (config_path, manager)
    return manager


def forget_env_plugins() -> None:
    global _env_plugins
    _env_plugins = None


def active_plugins() -> PluginManager:
    return _ACTIVE.get() or plugins_from_env()


@contextmanager
def activate(manager: PluginManager) -> Iterator[PluginManager]:
    """Route hook events in the current context to ``manager``."""
    token = _ACTIVE.set(manager)
    try:
        yield manager
    finally:
        _ACTIVE.reset(token)


def _instantiate(entry: dict[str, Any], *, number: int) -> object:
    entrypoint = entry.get("entrypoint")
    options = entry.get("options", {})
    if not isinstance(entrypoint, str) or ":" not in entrypoint:
        raise PluginConfigError(f"Plugin #{number} entrypoint must be 'module:attribute'.")
    if not isinstance(options, dict):
        raise PluginConfigError(f"Plugin #{number} options must be a JSON object.")

    module_name, _, attribute = entrypoint.partition(":")
    try:
        factory = getattr(importlib.import_module(module_name), attribute)
    except ImportError as error:
        raise PluginLoadError(
            f"Plugin #{number}: cannot import {module_name!r}: {error}"
        ) from error
    except AttributeError as error:
        raise PluginLoadError(
            f"Plugin #{number}: {module_name!r} has no attribute {attribute!r}."
        ) from error

    if not callable(factory):
        if options:
            raise PluginLoadError(
                f"Plugin #{number}: {entrypoint} is not callable; drop its options."
            )
        return factory
    try:
        return factory(**options)
    except Exception as error:
        raise PluginLoadError(
            f"Plugin #{number}: {entrypoint}(**options) failed: {error}"
        ) from error
