"""Public interface for the ``lunchprep`` package.

Bank statement CSV cleaning, reversible PII masking, and AI categorisation
for Lunch Money imports. This module only re-exports the stable surface.
"""

from .anonymiser import anonymise, is_business_name, is_transfer_transaction, restore
from .api import prepare_statement
from .categories import DEFAULT_CATEGORIES, load_categories, save_categories
from .categorize import CategorisationError, apply_categories, categorise
from .exporter import generate_lunch_money_csv
from .models import CategorizedTransaction, ClassifierItem, ClassifierResult, Transaction
from .parsers import (
    EmptyStatementError,
    MalformedRowError,
    MissingColumnsError,
    NoTransactionRowsError,
    StatementParseError,
    StatementParser,
    UnsupportedFormatError,
    detect_and_parse,
    load_statement,
)
from .storage import add_to_whitelist, load_whitelist

__all__ = [
    # API
    "prepare_statement",
    "detect_and_parse",
    "load_statement",
    "anonymise",
    "restore",
    "is_business_name",
    "is_transfer_transaction",
    "categorise",
    "apply_categories",
    "generate_lunch_money_csv",
    "load_whitelist",
    "add_to_whitelist",
    "load_categories",
    "save_categories",
    "DEFAULT_CATEGORIES",
    # Models / types
    "Transaction",
    "CategorizedTransaction",
    "ClassifierItem",
    "ClassifierResult",
    "StatementParser",
    # Errors
    "StatementParseError",
    "EmptyStatementError",
    "NoTransactionRowsError",
    "MissingColumnsError",
    "MalformedRowError",
    "UnsupportedFormatError",
    "CategorisationError",
]
