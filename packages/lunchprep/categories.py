"""Category list used to constrain the classifier and the export.

The active list is persisted through :mod:`lunchprep.storage`; when nothing
valid is stored, :data:`DEFAULT_CATEGORIES` applies. Order is preserved.
"""

from __future__ import annotations

from collections.abc import Iterable

from .logging_setup import get_logger
from .storage import read_json, write_json

CATEGORIES_KEY = "categories"

DEFAULT_CATEGORIES: tuple[str, ...] = (
    "Dining",
    "Groceries",
    "Transport",
    "Shopping",
    "Entertainment",
    "Utilities",
    "Healthcare",
    "Education",
    "Personal",
    "Transfers",
    "Income",
    "Other",
)

_logger = get_logger("lunchprep.categories")


def normalize_name(name: str) -> str:
    """Trim and collapse internal whitespace; case is kept as entered."""

    return " ".join(name.strip().split())


def normalize_categories(categories: Iterable[str]) -> tuple[str, ...]:
    """Normalize names, drop blanks and case-insensitive duplicates."""

    seen: set[str] = set()
    out: list[str] = []
    for raw in categories:
        name = normalize_name(raw)
        if not name or name.casefold() in seen:
            continue
        seen.add(name.casefold())
        out.append(name)
    return tuple(out)


def load_categories() -> tuple[str, ...]:
    """Return the stored category list, or the defaults when none is usable."""

    try:
        stored = read_json(CATEGORIES_KEY)
    except (OSError, ValueError) as e:
        _logger.warning("categories:read_failed error=%s", e.__class__.__name__)
        return DEFAULT_CATEGORIES
    if isinstance(stored, list) and stored and all(isinstance(c, str) for c in stored):
        normalized = normalize_categories(stored)
        if normalized:
            return normalized
    return DEFAULT_CATEGORIES


def save_categories(categories: Iterable[str]) -> tuple[str, ...]:
    normalized = normalize_categories(categories)
    if not normalized:
        raise ValueError("category list must contain at least one non-blank name")
    write_json(CATEGORIES_KEY, list(normalized))
    return normalized


def reset_categories() -> tuple[str, ...]:
    write_json(CATEGORIES_KEY, list(DEFAULT_CATEGORIES))
    return DEFAULT_CATEGORIES


__all__ = [
    "DEFAULT_CATEGORIES",
    "load_categories",
    "normalize_categories",
    "normalize_name",
    "reset_categories",
    "save_categories",
]
