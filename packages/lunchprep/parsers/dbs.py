"""Parser for DBS/POSB account statement CSV exports.

File layout
-----------
- Lines 1-6: account metadata (account name/number, balances, date range).
  Discarded.
- Line 7: the column header::

    Transaction Date,Transaction Code,Description,Transaction Ref1,
    Transaction Ref2,Transaction Ref3,Status,Debit Amount,Credit Amount

- Remaining lines: one transaction per row; exactly one of ``Debit Amount`` /
  ``Credit Amount`` is populated.

Cleaning
--------
``Description`` is a concatenation of the three ``Transaction Ref`` columns
that DBS sometimes truncates or rewrites, so it is kept only as the audit
trail (``original_description``). Payee and notes are always extracted from
the segmented ``Ref1``/``Ref2``/``Ref3`` columns by one cleaner per
transaction kind:

- ``POS`` (NETS QR): payee from ``Ref2`` (``TO: <MERCHANT>``).
- ``MST``/``UPI``/``UMC``/``UMC-S`` (card): merchant from ``Ref1`` minus the
  acquirer/country/date suffix and a trailing numeric reference.
- ``ICT`` (FAST/PayNow): PayNow out/in, external bank out
  (``<BANK>:<ACCOUNT>:I-BANK``), external bank in.
- ``ITR`` (DBS-to-DBS): PayLah! withdrawal/top-up, outgoing ``DBS:I-BANK``,
  incoming.
- anything else: title-cased ``Description``.
"""

from __future__ import annotations

import csv
import datetime as dt
import io
import re
from collections.abc import Callable, Iterable, Mapping
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import NamedTuple

from ..logging_setup import get_logger
from ..models import Transaction, quantize_amount
from ..text import (
    is_reference_token,
    strip_pii,
    strip_prefix,
    title_case,
)
from .base import (
    EmptyStatementError,
    MalformedRowError,
    MissingColumnsError,
    NoTransactionRowsError,
)
from .dbs_codes import lookup_transaction_code

BANK_NAME = "DBS"

# Number of metadata lines preceding the column header.
DBS_METADATA_ROWS: int = 6

# Detection only looks at this many leading lines.
_DETECT_LINES: int = 10

COLUMNS: tuple[str, ...] = (
    "Transaction Date",
    "Transaction Code",
    "Description",
    "Transaction Ref1",
    "Transaction Ref2",
    "Transaction Ref3",
    "Status",
    "Debit Amount",
    "Credit Amount",
)

REQUIRED_COLUMNS: frozenset[str] = frozenset(COLUMNS) - {"Status"}

MONTHS: Mapping[str, int] = {
    "Jan": 1,
    "Feb": 2,
    "Mar": 3,
    "Apr": 4,
    "May": 5,
    "Jun": 6,
    "Jul": 7,
    "Aug": 8,
    "Sep": 9,
    "Oct": 10,
    "Nov": 11,
    "Dec": 12,
}

# Fixed payee/notes labels for sub-types whose reference fields carry no name.
EXTERNAL_TRANSFER_PAYEE = "External Transfer"
DBS_PAYEE = "Dbs"
PAYLAH_PAYEE = "PayLah!"
PAYLAH_WITHDRAWAL_NOTE = "Received"
PAYLAH_TOPUP_NOTE = "Top-Up"

# DBS fills Ref3 with this when the sender typed no memo.
PAYNOW_DEFAULT_NOTE = "paynow transfer"

# "<acquirer> <country> <DDMON>" at the end of a card Ref1, e.g. "SI SGP 14FEB".
_CARD_SUFFIX_RE = re.compile(r"\s+[A-Za-z]{2,3}\s+[A-Z]{2,3}\s+\d{2}[A-Z]{3}$", re.IGNORECASE)
_TRAILING_NUMBER_RE = re.compile(r"\s+\d+$")
_EXTERNAL_BANK_RE = re.compile(r"^[^:]+:[^:]+:I-BANK$", re.IGNORECASE)

_logger = get_logger("lunchprep.parsers.dbs")


class DbsRow(NamedTuple):
    """One data row of a DBS export, with every column as raw text."""

    date: str
    code: str
    description: str
    ref1: str
    ref2: str
    ref3: str
    status: str
    debit: str
    credit: str

    @classmethod
    def from_mapping(cls, row: Mapping[str, str | None]) -> DbsRow:
        values = [row.get(col) or "" for col in COLUMNS]
        return cls(*values)


class CleanedFields(NamedTuple):
    payee: str
    notes: str


class TransactionKind(Enum):
    POINT_OF_SALE = "point_of_sale"
    CARD_PAYMENT = "card_payment"
    INTERBANK_TRANSFER = "interbank_transfer"
    INTRABANK_TRANSFER = "intrabank_transfer"
    GENERIC = "generic"


_CODE_KINDS: Mapping[str, TransactionKind] = {
    "POS": TransactionKind.POINT_OF_SALE,
    "MST": TransactionKind.CARD_PAYMENT,
    "UPI": TransactionKind.CARD_PAYMENT,
    "UMC": TransactionKind.CARD_PAYMENT,
    "UMC-S": TransactionKind.CARD_PAYMENT,
    "ICT": TransactionKind.INTERBANK_TRANSFER,
    "ITR": TransactionKind.INTRABANK_TRANSFER,
}


def classify_code(code: str) -> TransactionKind:
    """Map a short transaction code to the cleaner family that handles it."""

    return _CODE_KINDS.get(code.strip().upper(), TransactionKind.GENERIC)


# ---------------------------------------------------------------------------
# Field parsers
# ---------------------------------------------------------------------------


def parse_date(value: str) -> dt.date:
    """Parse a DBS ``"DD Mon YYYY"`` date (e.g. ``"23 Feb 2026"``)."""

    parts = value.split()
    if len(parts) != 3:
        raise MalformedRowError(f'Invalid DBS date format: "{value}"')
    day_str, month_str, year_str = parts
    month = MONTHS.get(month_str)
    if month is None:
        raise MalformedRowError(f'Unknown month abbreviation: "{month_str}"')
    try:
        return dt.date(int(year_str), month, int(day_str))
    except ValueError as exc:
        raise MalformedRowError(f'Invalid DBS date format: "{value}"') from exc


def _to_decimal(raw: str) -> Decimal:
    try:
        value = Decimal(raw.replace(",", ""))
    except InvalidOperation as exc:
        raise MalformedRowError(f"Invalid amount: {raw!r}") from exc
    # NaN and Infinity parse but are not amounts.
    if not value.is_finite():
        raise MalformedRowError(f"Invalid amount: {raw!r}")
    return value


def _to_cents(raw: str, value: Decimal) -> Decimal:
    try:
        return quantize_amount(value)
    except InvalidOperation as exc:
        # Exponent too large to hold at cent precision, e.g. "1e40".
        raise MalformedRowError(f"Invalid amount: {raw!r}") from exc


def parse_amount(debit: str, credit: str) -> Decimal:
    """Return ``-debit`` or ``+credit`` rounded to cents.

    Raises :class:`MalformedRowError` when both columns are blank or the
    populated one is not a finite number.
    """

    debit = debit.strip()
    credit = credit.strip()
    if debit:
        return _to_cents(debit, -_to_decimal(debit))
    if credit:
        return _to_cents(credit, _to_decimal(credit))
    raise MalformedRowError("Transaction has neither debit nor credit amount")


# ---------------------------------------------------------------------------
# Per-kind cleaners
# ---------------------------------------------------------------------------


def clean_paynow_notes(raw: str) -> str:
    """Drop DBS's default PayNow memo and opaque reference IDs; keep real memos."""

    notes = raw.strip()
    if notes.lower() == PAYNOW_DEFAULT_NOTE:
        return ""
    if is_reference_token(notes):
        return ""
    return notes


def _othr_notes(ref3: str) -> str:
    return strip_prefix(ref3.strip(), "OTHR").strip()


def clean_point_of_sale(row: DbsRow) -> CleanedFields:
    return CleanedFields(title_case(strip_prefix(row.ref2.strip(), "TO:")), "")


def clean_card_payment(row: DbsRow) -> CleanedFields:
    """Merchant name from Ref1, e.g. ``"BUS/MRT 799701767  SI SGP 14FEB"`` -> ``"Bus/Mrt"``.

    The numeric reference is only removed once the suffix is gone and only as
    the last token, so names like ``"ABC1234"`` survive.
    """

    merchant = _CARD_SUFFIX_RE.sub("", row.ref1.strip())
    merchant = _TRAILING_NUMBER_RE.sub("", merchant)
    return CleanedFields(title_case(merchant), "")


def clean_interbank_transfer(row: DbsRow) -> CleanedFields:
    ref1 = row.ref1.strip()

    # PayNow outgoing: Ref1 "PayNow Transfer <ref>", Ref2 "To: <NAME>"
    if ref1.startswith("PayNow Transfer"):
        payee = title_case(strip_prefix(row.ref2.strip(), "To:"))
        return CleanedFields(payee, clean_paynow_notes(_othr_notes(row.ref3)))

    # PayNow incoming: Ref1 "Incoming PayNow Ref <ref>", Ref2 "From: <NAME>"
    if ref1.startswith("Incoming PayNow"):
        payee = title_case(strip_prefix(row.ref2.strip(), "From:"))
        return CleanedFields(payee, clean_paynow_notes(_othr_notes(row.ref3)))

    # External bank outgoing: Ref1 "<BANK>:<ACCOUNT>:I-BANK", Ref2 is the
    # user's memo, Ref3 "OTHR <number>" is discarded.
    if _EXTERNAL_BANK_RE.fullmatch(ref1):
        return CleanedFields(title_case(ref1.split(":")[0]), row.ref2.strip())

    return CleanedFields(EXTERNAL_TRANSFER_PAYEE, "")


def clean_intrabank_transfer(row: DbsRow) -> CleanedFields:
    ref1 = row.ref1.strip()

    # Ref2 on PayLah! rows is the wallet's phone number; never read it.
    if ref1.startswith("SEND BACK FROM PAYLAH!"):
        return CleanedFields(PAYLAH_PAYEE, PAYLAH_WITHDRAWAL_NOTE)
    if ref1.startswith("TOP UP TO PAYLAH!"):
        return CleanedFields(PAYLAH_PAYEE, PAYLAH_TOPUP_NOTE)

    # Outgoing: Ref3 "OTHR <memo> <trailing ref number>"
    if ref1.upper() == "DBS:I-BANK":
        notes = _TRAILING_NUMBER_RE.sub("", _othr_notes(row.ref3)).strip()
        return CleanedFields(DBS_PAYEE, notes)

    return CleanedFields(DBS_PAYEE, "")


def clean_generic(row: DbsRow) -> CleanedFields:
    return CleanedFields(title_case(row.description), "")


CLEANERS: Mapping[TransactionKind, Callable[[DbsRow], CleanedFields]] = {
    TransactionKind.POINT_OF_SALE: clean_point_of_sale,
    TransactionKind.CARD_PAYMENT: clean_card_payment,
    TransactionKind.INTERBANK_TRANSFER: clean_interbank_transfer,
    TransactionKind.INTRABANK_TRANSFER: clean_intrabank_transfer,
    TransactionKind.GENERIC: clean_generic,
}


# ---------------------------------------------------------------------------
# CSV loading
# ---------------------------------------------------------------------------


def _read_rows(text: str) -> list[DbsRow]:
    """Skip the metadata block, validate the header and return typed rows."""

    lines = text.splitlines(keepends=True)
    stream = io.StringIO("".join(lines[DBS_METADATA_ROWS:]))
    reader = csv.DictReader(stream, restval="")
    if reader.fieldnames is None:
        raise NoTransactionRowsError()
    reader.fieldnames = [name.strip() for name in reader.fieldnames]

    missing = sorted(REQUIRED_COLUMNS.difference(reader.fieldnames))
    if missing:
        raise MissingColumnsError(BANK_NAME, missing)

    return [DbsRow.from_mapping(row) for row in reader]


def _to_transactions(rows: Iterable[DbsRow]) -> list[Transaction]:
    transactions: list[Transaction] = []
    skipped = 0
    for row_number, row in enumerate(rows, start=1):
        # Trailing blank rows carry no date.
        if not row.date.strip():
            skipped += 1
            continue

        try:
            date = parse_date(row.date)
            amount = parse_amount(row.debit, row.credit)
        except MalformedRowError as exc:
            raise MalformedRowError(str(exc), row_number=row_number) from exc

        code = row.code.strip().upper()
        kind = classify_code(code)
        if kind is TransactionKind.GENERIC:
            _logger.debug("parse:unknown_code code=%r row=%d", code, row_number)
        cleaned = CLEANERS[kind](row)

        transactions.append(
            Transaction(
                date=date,
                description=strip_pii(cleaned.payee),
                original_description=row.description,
                amount=amount,
                transaction_code=lookup_transaction_code(code),
                notes=strip_pii(cleaned.notes, strip_long_refs=True),
            )
        )

    _logger.info(
        "parse:done bank=%s transactions=%d skipped=%d",
        BANK_NAME,
        len(transactions),
        skipped,
    )
    return transactions


class DbsParser:
    """:class:`~lunchprep.parsers.base.StatementParser` for DBS/POSB exports."""

    bank_name: str = BANK_NAME

    def detect(self, text: str) -> bool:
        # "Transaction Ref1" is specific to DBS among supported exports.
        if not isinstance(text, str) or not text:
            return False
        head = "\n".join(text.splitlines()[:_DETECT_LINES])
        return "Transaction Date" in head and "Transaction Ref1" in head

    def parse(self, text: str) -> list[Transaction]:
        if not isinstance(text, str) or not text.strip():
            raise EmptyStatementError()

        rows = _read_rows(text)
        if not rows:
            raise NoTransactionRowsError()
        return _to_transactions(rows)


dbs_parser = DbsParser()


__all__ = [
    "BANK_NAME",
    "CLEANERS",
    "COLUMNS",
    "DBS_METADATA_ROWS",
    "DbsParser",
    "DbsRow",
    "TransactionKind",
    "classify_code",
    "clean_paynow_notes",
    "dbs_parser",
    "parse_amount",
    "parse_date",
]
