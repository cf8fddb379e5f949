"""Snapshot file subsystem for NavKit."""

from navpack.artifact.exceptions import (
    SnapshotChecksumError,
    SnapshotError,
    SnapshotValidationError,
)
from navpack.artifact.io import (
    SNAPSHOT_SUFFIX,
    build_snapshot_envelope,
    compute_snapshot_checksum,
    read_snapshot,
    read_snapshot_envelope,
    tree_from_envelope,
    write_snapshot,
)
from navpack.artifact.schema import (
    DEFAULT_SNAPSHOT_VERSION,
    SNAPSHOT_SCHEMA,
    SUPPORTED_MAJOR_VERSION,
    is_version_compatible,
    parse_snapshot_version,
    validate_snapshot,
)

__all__ = [
    "SnapshotError",
    "SnapshotValidationError",
    "SnapshotChecksumError",
    "SNAPSHOT_SUFFIX",
    "build_snapshot_envelope",
    "compute_snapshot_checksum",
    "read_snapshot",
    "read_snapshot_envelope",
    "tree_from_envelope",
    "write_snapshot",
    "DEFAULT_SNAPSHOT_VERSION",
    "SNAPSHOT_SCHEMA",
    "SUPPORTED_MAJOR_VERSION",
    "is_version_compatible",
    "parse_snapshot_version",
    "validate_snapshot",
]
