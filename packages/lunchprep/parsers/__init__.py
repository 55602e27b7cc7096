"""Bank statement parsers and the format registry."""

from .base import (
    EmptyStatementError,
    MalformedRowError,
    MissingColumnsError,
    NoTransactionRowsError,
    StatementParseError,
    StatementParser,
    UnsupportedFormatError,
)
from .dbs import DbsParser, dbs_parser
from .registry import PARSERS, detect_and_parse, detect_parser, load_statement

__all__ = [
    "PARSERS",
    "DbsParser",
    "EmptyStatementError",
    "MalformedRowError",
    "MissingColumnsError",
    "NoTransactionRowsError",
    "StatementParseError",
    "StatementParser",
    "UnsupportedFormatError",
    "dbs_parser",
    "detect_and_parse",
    "detect_parser",
    "load_statement",
]
