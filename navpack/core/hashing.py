"""Stable fingerprints for navigation tree snapshots."""

from __future__ import annotations

import hashlib

from navpack.core.canonical import canonical_json
from navpack.core.models import NavNode


def compute_tree_hash(root: NavNode | None) -> str:
    """Compute a deterministic hash of a whole snapshot.

    Child order, active markers, labels and metadata all contribute, so two
    snapshots hash equal only when they would serialize identically.
    """
    payload = canonical_json(root.to_dict() if root is not None else None)
    digest = hashlib.sha256(payload.encode("utf-8")).hexdigest()
    return f"sha256:{digest}"
