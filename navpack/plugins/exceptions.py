"""Errors raised while loading plugins. Hook failures are never raised."""


class PluginError(Exception):
    pass


class PluginConfigError(PluginError):
    """The plugin config cannot be read or does not have the expected shape."""


class PluginLoadError(PluginError):
    """A configured entrypoint could not be imported or instantiated."""
