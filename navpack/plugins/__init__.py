"""Optional plugins notified around diffs and session transitions."""

from navpack.plugins.config import (
    PLUGIN_CONFIG_ENV_VAR,
    PLUGIN_CONFIG_VERSION,
    activate,
    active_plugins,
    forget_env_plugins,
    load_plugins,
    load_plugins_from_file,
    plugins_from_env,
)
from navpack.plugins.exceptions import PluginConfigError, PluginError, PluginLoadError
from navpack.plugins.hooks import (
    DiffEndEvent,
    DiffStartEvent,
    PluginDiagnostic,
    PluginManager,
    TransitionEvent,
)
from navpack.plugins.trace import NdjsonTracePlugin

__all__ = [
    "PLUGIN_CONFIG_ENV_VAR",
    "PLUGIN_CONFIG_VERSION",
    "DiffEndEvent",
    "DiffStartEvent",
    "NdjsonTracePlugin",
    "PluginConfigError",
    "PluginDiagnostic",
    "PluginError",
    "PluginLoadError",
    "PluginManager",
    "TransitionEvent",
    "activate",
    "active_plugins",
    "forget_env_plugins",
    "load_plugins",
    "load_plugins_from_file",
    "plugins_from_env",
]
