"""Bank parser registry.

Detects which bank produced a CSV export and dispatches to its parser.
Supporting a new bank means implementing
:class:`~lunchprep.parsers.base.StatementParser` and appending the instance to
:data:`PARSERS`; nothing else changes.
"""

from __future__ import annotations

from collections.abc import Sequence
from os import PathLike
from pathlib import Path

from ..logging_setup import get_logger
from ..models import Transaction
from .base import StatementParser, UnsupportedFormatError
from .dbs import dbs_parser

# Checked in order; the first parser whose ``detect`` accepts the file wins.
PARSERS: tuple[StatementParser, ...] = (dbs_parser,)

_logger = get_logger("lunchprep.parsers.registry")


def detect_parser(
    text: str, *, parsers: Sequence[StatementParser] = PARSERS
) -> StatementParser | None:
    """Return the first parser that recognises ``text``, or ``None``."""

    for parser in parsers:
        if parser.detect(text):
            return parser
    return None


def detect_and_parse(
    text: str, *, parsers: Sequence[StatementParser] = PARSERS
) -> list[Transaction]:
    """Detect the bank from ``text`` and parse it into transactions.

    Raises :class:`UnsupportedFormatError` (listing every registered bank)
    when no parser matches; parse errors from the matching parser propagate.
    """

    parser = detect_parser(text, parsers=parsers)
    if parser is None:
        raise UnsupportedFormatError([p.bank_name for p in parsers])
    _logger.info("detect:matched bank=%s", parser.bank_name)
    return parser.parse(text)


def load_statement(
    path: str | PathLike[str], *, parsers: Sequence[StatementParser] = PARSERS
) -> list[Transaction]:
    """Read a statement file from disk and run :func:`detect_and_parse` on it.

    ``utf-8-sig`` tolerates the byte-order mark some exports start with.
    """

    text = Path(path).read_text(encoding="utf-8-sig")
    return detect_and_parse(text, parsers=parsers)


__all__ = ["PARSERS", "detect_and_parse", "detect_parser", "load_statement"]
