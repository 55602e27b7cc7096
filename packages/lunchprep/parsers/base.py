"""Contract shared by bank statement parsers, plus the parse error taxonomy.

Adding a bank means writing one module that implements
:class:`StatementParser` and appending its instance to
:data:`lunchprep.parsers.registry.PARSERS`.

Failure modes
-------------
All parse failures derive from :class:`StatementParseError` (a ``ValueError``)
so callers can surface any of them as "this file could not be read" while
tests and logs keep the precise class:

- :class:`EmptyStatementError`: the input is blank.
- :class:`MissingColumnsError`: the header row lacks required columns.
- :class:`NoTransactionRowsError`: the header is followed by no data rows.
- :class:`MalformedRowError`: one row cannot be parsed (date or amount).
- :class:`UnsupportedFormatError`: no registered parser recognised the file.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from ..models import Transaction


class StatementParseError(ValueError):
    """Base class for statement parsing failures."""


class EmptyStatementError(StatementParseError):
    def __init__(self) -> None:
        super().__init__("CSV content is empty")


class NoTransactionRowsError(StatementParseError):
    def __init__(self) -> None:
        super().__init__("No transaction rows found in CSV")


class MissingColumnsError(StatementParseError):
    def __init__(self, bank_name: str, missing: Sequence[str]) -> None:
        self.missing = tuple(missing)
        super().__init__(
            f"{bank_name}: CSV header mismatch. Missing columns: " + ", ".join(self.missing)
        )


class MalformedRowError(StatementParseError):
    """A single data row could not be parsed.

    ``row_number`` is 1-based and counts data rows after the header.
    """

    def __init__(self, message: str, *, row_number: int | None = None) -> None:
        self.row_number = row_number
        if row_number is not None:
            message = f"{message} (data row {row_number})"
        super().__init__(message)


class UnsupportedFormatError(StatementParseError):
    def __init__(self, bank_names: Sequence[str]) -> None:
        self.bank_names = tuple(bank_names)
        super().__init__(
            "Unsupported bank CSV format. No registered parser could detect the file "
            "format. Currently supported banks: " + ", ".join(self.bank_names)
        )


@runtime_checkable
class StatementParser(Protocol):
    """A parser for one bank's CSV statement export."""

    bank_name: str

    def detect(self, text: str) -> bool:
        """Return True when ``text`` looks like this bank's export.

        Only the structural signature (header tokens) is inspected. Must never
        raise, including for empty input.
        """
        ...

    def parse(self, text: str) -> list[Transaction]:
        """Parse the full file content into cleaned transactions.

        Raises a :class:`StatementParseError` subclass on structural problems.
        """
        ...


__all__ = [
    "EmptyStatementError",
    "MalformedRowError",
    "MissingColumnsError",
    "NoTransactionRowsError",
    "StatementParseError",
    "StatementParser",
    "UnsupportedFormatError",
]
