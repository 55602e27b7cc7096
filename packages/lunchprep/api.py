"""Public orchestration API.

:func:`prepare_statement` runs the full pipeline over one exported statement::

    raw CSV text
      -> detect_and_parse        (bank detection + cleaning)
      -> anonymise               (mask personal names on transfers)
      -> categorise              (external classifier, masked batch only)
      -> restore                 (real names back)
      -> apply_categories        (pair each transaction with its category)

Storage-backed defaults (whitelist, category list) are resolved here so the
core functions stay free of I/O.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from .anonymiser import anonymise, restore
from .categories import load_categories
from .categorize import apply_categories, categorise
from .logging_setup import get_logger
from .models import CategorizedTransaction
from .parsers import detect_and_parse
from .storage import load_whitelist

_logger = get_logger("lunchprep.api")


def prepare_statement(
    csv_text: str,
    *,
    categories: Sequence[str] | None = None,
    whitelist: Iterable[str] | None = None,
    client: Any | None = None,
    classify: bool = True,
) -> list[CategorizedTransaction]:
    """Parse, anonymise, categorise and restore one statement.

    Parameters
    ----------
    csv_text:
        Full content of one bank export.
    categories:
        Allowed categories; the stored list (or defaults) when ``None``.
    whitelist:
        Names never to anonymise; the stored whitelist when ``None``.
    client:
        Optional ``openai.OpenAI``-shaped client for the classifier.
    classify:
        When False, skip the classifier: no network call, empty categories.

    Parse errors (:class:`~lunchprep.parsers.StatementParseError`) and
    classifier errors propagate unchanged.
    """

    transactions = detect_and_parse(csv_text)
    if not classify:
        return apply_categories(transactions, [])

    wl = load_whitelist() if whitelist is None else whitelist
    allowed = tuple(categories) if categories is not None else load_categories()

    masked = anonymise(transactions, wl)
    results = categorise(masked, allowed, client=client)
    restored = restore(masked)
    _logger.info(
        "prepare:done transactions=%d categorised=%d",
        len(restored),
        len(results),
    )
    return apply_categories(restored, results)


__all__ = ["prepare_statement"]
