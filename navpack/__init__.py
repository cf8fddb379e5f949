"""NavKit implementation package: tree snapshots, differ, snapshot files, plugins, CLI."""

__version__ = "0.1.0"
