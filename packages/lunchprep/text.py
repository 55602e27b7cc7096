"""Pure string helpers shared by the statement parsers.

Bank exports carry merchant and payee names in upper case with irregular
spacing, and occasionally embed card numbers or long opaque reference tokens.
These helpers turn such fragments into readable, PII-free text.
"""

from __future__ import annotations

import re

# Single tokens at least this long are treated as opaque reference IDs rather
# than human-entered memos. Tuned against DBS exports; other banks may differ.
REFERENCE_TOKEN_MIN_LENGTH: int = 15

_WS_RE = re.compile(r"\s+")
_CARD_NUMBER_RE = re.compile(r"\d{4}-\d{4}-\d{4}-\d{4}")
_LONG_REF_RE = re.compile(rf"\b[A-Za-z0-9]{{{REFERENCE_TOKEN_MIN_LENGTH},}}\b")
_REFERENCE_TOKEN_RE = re.compile(r"^[A-Za-z0-9-]+$")


def collapse_whitespace(value: str) -> str:
    """Collapse runs of whitespace to a single space and trim."""

    return _WS_RE.sub(" ", value).strip()


def strip_prefix(value: str, marker: str) -> str:
    """Remove a leading ``marker`` (case-insensitive) and the whitespace after it."""

    return re.sub(rf"^{re.escape(marker)}\s*", "", value, flags=re.IGNORECASE)


def _title_case_part(part: str) -> str:
    if not part:
        return part
    if part.startswith("("):
        return "(" + part[1:2].upper() + part[2:].lower()
    return part[0].upper() + part[1:].lower()


def _title_case_word(word: str) -> str:
    return "/".join(
        "-".join(_title_case_part(part) for part in segment.split("-"))
        for segment in word.split("/")
    )


def title_case(value: str) -> str:
    """Title-case ``value`` word by word.

    Segments separated by ``/`` or ``-`` are cased independently and a leading
    ``(`` is skipped, so ``"BUS/MRT"`` becomes ``"Bus/Mrt"`` and
    ``"BURGER KING (XYZ)"`` becomes ``"Burger King (Xyz)"``.
    """

    collapsed = collapse_whitespace(value)
    if not collapsed:
        return ""
    return " ".join(_title_case_word(word) for word in collapsed.split(" "))


def strip_card_numbers(value: str) -> str:
    """Remove ``XXXX-XXXX-XXXX-XXXX`` card numbers, then trim."""

    return _CARD_NUMBER_RE.sub("", value).strip()


def strip_pii(value: str, *, strip_long_refs: bool = False) -> str:
    """Remove card numbers (and optionally long reference tokens) from ``value``.

    Whitespace left behind by the removals is collapsed.
    """

    result = strip_card_numbers(value)
    if strip_long_refs:
        result = _LONG_REF_RE.sub("", result)
    return collapse_whitespace(result)


def is_reference_token(value: str) -> bool:
    """Return True when ``value`` is a single opaque reference token.

    A reference is one whitespace-free token of letters, digits and hyphens
    at least :data:`REFERENCE_TOKEN_MIN_LENGTH` characters long, e.g.
    ``"M008488410010949564"`` or ``"qsb-sqr-sg-38231108740123"``.
    """

    trimmed = value.strip()
    if not trimmed or any(ch.isspace() for ch in trimmed):
        return False
    return len(trimmed) >= REFERENCE_TOKEN_MIN_LENGTH and bool(
        _REFERENCE_TOKEN_RE.fullmatch(trimmed)
    )


__all__ = [
    "REFERENCE_TOKEN_MIN_LENGTH",
    "collapse_whitespace",
    "is_reference_token",
    "strip_card_numbers",
    "strip_pii",
    "strip_prefix",
    "title_case",
]
