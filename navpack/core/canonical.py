"""Deterministic canonicalization helpers for NavKit snapshots."""

from __future__ import annotations

from datetime import datetime, timezone
import json
import math
from typing import Any

TIMESTAMP_FIELD_NAMES = frozenset(
    {
        "timestamp",
        "created_at",
        "updated_at",
        "captured_at",
    }
)


def canonicalize(value: Any) -> Any:
    """Normalize a JSON-like value to a deterministic representation."""
    return _canonicalize(value, key=None)


def canonical_json(value: Any) -> str:
    """Serialize a value to stable canonical JSON."""
    return json.dumps(
        canonicalize(value),
        ensure_ascii=True,
        separators=(",", ":"),
        sort_keys=True,
    )


def _canonicalize(value: Any, *, key: str | None) -> Any:
    if isinstance(value, dict):
        return {
            str(raw_key): _canonicalize(value[raw_key], key=str(raw_key))
            for raw_key in sorted(value.keys(), key=lambda raw: str(raw))
        }

    # Child order is meaningful in navigation trees, so lists keep their order.
    if isinstance(value, (list, tuple)):
        return [_canonicalize(item, key=None) for item in value]

    if isinstance(value, str):
        text = value.replace("\r\n", "\n").replace("\r", "\n")
        if key is not None and key.lower() in TIMESTAMP_FIELD_NAMES:
            return _normalize_timestamp(text)
        return text

    if isinstance(value, bool) or value is None or isinstance(value, int):
        return value

    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            raise ValueError("NaN and infinity are not supported in canonical JSON")
        return float(f"{value:.12g}")

    return value


def _normalize_timestamp(timestamp_value: str) -> str:
    raw = timestamp_value.strip()
    if not raw:
        return raw

    parse_target = raw[:-1] + "+00:00" if raw.endswith("Z") else raw

    try:
        parsed = datetime.fromisoformat(parse_target)
    except ValueError:
        return raw

    if parsed.tzinfo is None:
        return raw

    as_utc = parsed.astimezone(timezone.utc)
    return as_utc.isoformat(timespec="microseconds").replace("+00:00", "Z")
