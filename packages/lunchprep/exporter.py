"""Lunch Money CSV export.

Output columns (exact order): ``date,payee,amount,category,notes``.

- ``date``: ``YYYY-MM-DD``
- ``payee``: the (restored) description
- ``amount``: two decimals, leading minus for money out
- ``category``: classifier category, empty when none was assigned
- ``notes``: scrubbed notes

Fields are quoted only when they contain a comma, quote or line break
(RFC 4180 minimal quoting). Lines end with ``\\n``, including the last.
"""

from __future__ import annotations

import csv
import datetime as dt
import io
from collections.abc import Iterable

from .models import CategorizedTransaction, Transaction

CSV_HEADERS: tuple[str, ...] = ("date", "payee", "amount", "category", "notes")


def _row(item: CategorizedTransaction | Transaction) -> list[str]:
    if isinstance(item, CategorizedTransaction):
        tx, category = item.transaction, item.category
    else:
        tx, category = item, ""
    return [
        tx.date.isoformat(),
        tx.description,
        f"{tx.amount:.2f}",
        category,
        tx.notes,
    ]


def generate_lunch_money_csv(items: Iterable[CategorizedTransaction | Transaction]) -> str:
    """Render transactions as a Lunch Money import CSV string."""

    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerow(CSV_HEADERS)
    for item in items:
        writer.writerow(_row(item))
    return buf.getvalue()


def default_export_filename(today: dt.date | None = None) -> str:
    day = today or dt.date.today()
    return f"lunchprep-export-{day.isoformat()}.csv"


__all__ = ["CSV_HEADERS", "default_export_filename", "generate_lunch_money_csv"]
