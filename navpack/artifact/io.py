"""Read/write utilities for `.navtree` snapshot files."""

from __future__ import annotations

from datetime import datetime, timezone
from hashlib import sha256
import json
from pathlib import Path
from typing import Any

from navpack.artifact.exceptions import SnapshotChecksumError, SnapshotValidationError
from navpack.artifact.schema import DEFAULT_SNAPSHOT_VERSION, validate_snapshot
from navpack.core.canonical import canonical_json, canonicalize
from navpack.core.hashing import compute_tree_hash
from navpack.core.models import NavNode, TreeInvariantError

SNAPSHOT_SUFFIX = ".navtree"


def compute_snapshot_checksum(envelope_without_checksum: dict[str, Any]) -> str:
    payload = canonical_json(envelope_without_checksum)
    digest = sha256(payload.encode("utf-8")).hexdigest()
    return f"sha256:{digest}"


def build_snapshot_envelope(
    root: NavNode | None,
    *,
    snapshot_id: str,
    created_at: str | None = None,
    version: str = DEFAULT_SNAPSHOT_VERSION,
    metadata: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Envelope metadata is canonicalized; the tree is stored exactly as given.

    Canonical JSON is only the checksum input, so labels, floats and
    timestamp-like metadata inside the tree survive a write/read unchanged.
    """
    envelope: dict[str, Any] = {
        "version": version,
        "metadata": canonicalize(
            {
                "snapshot_id": snapshot_id,
                "created_at": created_at or _utc_now(),
                **(metadata or {}),
            }
        ),
        "payload": {
            "tree": root.to_dict() if root is not None else None,
            "tree_hash": compute_tree_hash(root),
        },
    }
    envelope["checksum"] = compute_snapshot_checksum(envelope)
    validate_snapshot(envelope)
    return envelope


def write_snapshot(
    root: NavNode | None,
    path: str | Path,
    *,
    snapshot_id: str | None = None,
    created_at: str | None = None,
    version: str = DEFAULT_SNAPSHOT_VERSION,
    metadata: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Write one tree snapshot; the id defaults to the file stem."""
    target = Path(path)
    envelope = build_snapshot_envelope(
        root,
        snapshot_id=snapshot_id or target.stem,
        created_at=created_at,
        version=version,
        metadata=metadata,
    )
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(
        json.dumps(envelope, indent=2, ensure_ascii=True, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return envelope


def read_snapshot_envelope(path: str | Path) -> dict[str, Any]:
    """Read and validate a snapshot envelope, including checksum and tree hash."""
    target = Path(path)
    try:
        raw_text = target.read_text(encoding="utf-8")
    except UnicodeDecodeError as error:
        raise SnapshotValidationError(f"Snapshot is not valid UTF-8 text: {target}") from error

    try:
        envelope = json.loads(raw_text)
    except json.JSONDecodeError as error:
        raise SnapshotValidationError(f"Snapshot is not valid JSON: {target} ({error})") from error

    if not isinstance(envelope, dict):
        raise SnapshotValidationError(f"Snapshot must be a JSON object: {target}")
    validate_snapshot(envelope)

    checksum_expected = compute_snapshot_checksum(
        {
            "version": envelope["version"],
            "metadata": envelope["metadata"],
            "payload": envelope["payload"],
        }
    )
    if envelope["checksum"] != checksum_expected:
        raise SnapshotChecksumError(
            "Snapshot checksum mismatch: "
            f"expected {checksum_expected}, got {envelope['checksum']}"
        )
    return envelope


def read_snapshot(path: str | Path) -> NavNode | None:
    """Read a snapshot file and rebuild its tree (``None`` for an empty tree)."""
    envelope = read_snapshot_envelope(path)
    return tree_from_envelope(envelope)


def tree_from_envelope(envelope: dict[str, Any]) -> NavNode | None:
    payload = envelope["payload"]
    raw_tree = payload["tree"]
    try:
        root = NavNode.from_dict(raw_tree) if raw_tree is not None else None
    except TreeInvariantError as error:
        raise SnapshotValidationError(f"Snapshot tree is invalid: {error}") from error

    tree_hash = compute_tree_hash(root)
    if tree_hash != payload["tree_hash"]:
        raise SnapshotChecksumError(
            f"Snapshot tree hash mismatch: expected {payload['tree_hash']}, got {tree_hash}"
        )
    return root


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")
