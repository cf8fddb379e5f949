"""JSON schema and validation for `.navtree` snapshot files."""

from __future__ import annotations

import re
from typing import Any

from jsonschema import Draft202012Validator

from navpack.artifact.exceptions import SnapshotValidationError

SUPPORTED_MAJOR_VERSION = 1
DEFAULT_SNAPSHOT_VERSION = "1.0"

_VERSION_PATTERN = re.compile(r"^(?P<major>\d+)\.(?P<minor>\d+)$")
_DIGEST_PATTERN = r"^sha256:[0-9a-f]{64}$"

SNAPSHOT_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "NavKit Snapshot",
    "type": "object",
    "required": ["version", "metadata", "payload", "checksum"],
    "additionalProperties": True,
    "properties": {
        "version": {
            "type": "string",
            "pattern": r"^\d+\.\d+$",
            "description": "Major.minor snapshot schema version",
        },
        "metadata": {
            "type": "object",
            "required": ["snapshot_id", "created_at"],
            "additionalProperties": True,
            "properties": {
                "snapshot_id": {"type": "string"},
                "created_at": {"type": "string"},
            },
        },
        "payload": {
            "type": "object",
            "required": ["tree", "tree_hash"],
            "additionalProperties": True,
            "properties": {
                "tree": {
                    "oneOf": [
                        {"type": "null"},
                        {"$ref": "#/$defs/node"},
                    ]
                },
                "tree_hash": {"type": "string", "pattern": _DIGEST_PATTERN},
            },
        },
        "checksum": {"type": "string", "pattern": _DIGEST_PATTERN},
    },
    "$defs": {
        "node": {
            "type": "object",
            "required": ["key", "children"],
            "additionalProperties": False,
            "properties": {
                "key": {"type": "string", "minLength": 1},
                "label": {"type": "string"},
                "active": {"type": ["string", "null"]},
                "metadata": {"type": "object"},
                "children": {
                    "type": "array",
                    "items": {"$ref": "#/$defs/node"},
                },
            },
        }
    },
}

_VALIDATOR = Draft202012Validator(SNAPSHOT_SCHEMA)


def parse_snapshot_version(version: str) -> tuple[int, int]:
    """Parse major/minor snapshot version."""
    match = _VERSION_PATTERN.fullmatch(version.strip())
    if match is None:
        raise SnapshotValidationError(f"Invalid snapshot version: {version}")
    return int(match.group("major")), int(match.group("minor"))


def is_version_compatible(version: str) -> bool:
    try:
        major, _ = parse_snapshot_version(version)
    except SnapshotValidationError:
        return False
    return major == SUPPORTED_MAJOR_VERSION


def validate_snapshot(envelope: dict[str, Any]) -> None:
    """Validate envelope shape and the supported version contract."""
    version = str(envelope.get("version", "")).strip()
    major, _minor = parse_snapshot_version(version)
    if major != SUPPORTED_MAJOR_VERSION:
        raise SnapshotValidationError(
            "Unsupported snapshot major version: "
            f"{version}. Supported major: {SUPPORTED_MAJOR_VERSION}.x"
        )

    errors = sorted(_VALIDATOR.iter_errors(envelope), key=lambda err: [str(part) for part in err.path])
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.path) or "$"
        raise SnapshotValidationError(f"Invalid snapshot at {location}: {first.message}")
