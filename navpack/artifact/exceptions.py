"""Snapshot file exceptions."""


class SnapshotError(Exception):
    """Base class for snapshot file errors."""


class SnapshotValidationError(SnapshotError):
    """Snapshot failed schema, version, or tree invariant validation."""


class SnapshotChecksumError(SnapshotError):
    """Snapshot checksum mismatch."""
