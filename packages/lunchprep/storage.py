"""Local key-value storage for user preferences.

Values are JSON documents stored one file per key under the data directory:

- Default: ``./.lunchprep`` under the current working directory.
- Override: ``LUNCHPREP_DATA_DIR`` environment variable.

Writes target ``<key>.json.tmp`` first and are then moved into place with
``os.replace``.

The anonymisation whitelist lives here. Reading it never raises: a missing,
unreadable or malformed file is an empty whitelist, so a storage fault can
never block anonymisation.
"""

from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any

from .logging_setup import get_logger

WHITELIST_KEY = "pii_whitelist"

_KEY_RE = re.compile(r"^[a-z0-9_]+$")

_logger = get_logger("lunchprep.storage")


def get_data_root() -> Path:
    """Return the data directory (not created until the first write)."""

    root = os.getenv("LUNCHPREP_DATA_DIR")
    if root and root.strip():
        return Path(root).expanduser().resolve()
    return (Path.cwd() / ".lunchprep").resolve()


def _path_for(key: str) -> Path:
    if not _KEY_RE.fullmatch(key):
        raise ValueError(f"Invalid storage key: {key!r}")
    return get_data_root() / f"{key}.json"


def read_json(key: str) -> Any | None:
    """Return the decoded value stored under ``key``, or ``None`` when absent.

    Decode and I/O errors propagate; callers decide how to degrade.
    """

    path = _path_for(key)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    return json.loads(text)


def write_json(key: str, value: Any) -> None:
    path = _path_for(key)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(json.dumps(value, ensure_ascii=False, indent=2), encoding="utf-8")
    os.replace(tmp, path)


# ---------------------------------------------------------------------------
# Anonymisation whitelist
# ---------------------------------------------------------------------------


def load_whitelist() -> frozenset[str]:
    """Return the user's "never anonymise" names, uppercased.

    Any failure is logged and treated as an empty whitelist.
    """

    try:
        raw = read_json(WHITELIST_KEY)
    except (OSError, ValueError) as e:
        _logger.warning("whitelist:read_failed error=%s", e.__class__.__name__)
        return frozenset()
    if raw is None:
        return frozenset()
    if not isinstance(raw, list) or not all(isinstance(x, str) for x in raw):
        _logger.warning("whitelist:invalid_shape type=%s", type(raw).__name__)
        return frozenset()
    return frozenset(name.strip().upper() for name in raw if name.strip())


def add_to_whitelist(name: str) -> frozenset[str]:
    """Add ``name`` (case-insensitive) and return the updated whitelist."""

    cleaned = name.strip().upper()
    if not cleaned:
        raise ValueError("whitelist name must be non-empty")
    updated = load_whitelist() | {cleaned}
    write_json(WHITELIST_KEY, sorted(updated))
    return updated


def remove_from_whitelist(name: str) -> frozenset[str]:
    """Remove ``name`` if present and return the updated whitelist."""

    updated = load_whitelist() - {name.strip().upper()}
    write_json(WHITELIST_KEY, sorted(updated))
    return updated


__all__ = [
    "WHITELIST_KEY",
    "add_to_whitelist",
    "get_data_root",
    "load_whitelist",
    "read_json",
    "remove_from_whitelist",
    "write_json",
]
