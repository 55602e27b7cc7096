"""Data models for ``lunchprep``.

``Transaction`` is the canonical record produced by the statement parsers and
consumed by the anonymiser, the classifier client and the exporter. It is a
frozen dataclass: every transformation builds a new instance with
:func:`dataclasses.replace` (see :meth:`Transaction.evolve`).

The classifier DTOs are pydantic models so the request/response contract of
the external categorisation service is validated at the boundary.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from decimal import ROUND_HALF_UP, Decimal
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

_CENT = Decimal("0.01")


def quantize_amount(value: Decimal) -> Decimal:
    """Round ``value`` to cents (half-up) and normalize ``-0.00`` to ``0.00``."""

    q = value.quantize(_CENT, rounding=ROUND_HALF_UP)
    return q if q != 0 else Decimal("0.00")


@dataclass(frozen=True, slots=True)
class Transaction:
    """A single cleaned bank transaction ready for categorisation and export.

    Attributes
    ----------
    date:
        Effective transaction date (no time component).
    description:
        Cleaned payee/merchant name. Replaced by the anonymiser while masked.
    original_description:
        Raw ``Description`` column from the bank CSV. Never changed after parse.
    amount:
        Signed amount, negative for money leaving the account. Always held to
        exactly two decimal places.
    transaction_code:
        Resolved, human-readable transaction type (e.g. ``"Funds Transfer"``),
        not the bank's short code.
    notes:
        User memo or contextual note, PII-scrubbed; ``""`` when absent.
    original_pii:
        Placeholder name -> real name, populated only while masked. Read-only;
        must never leave the process.
    """

    date: dt.date
    description: str
    original_description: str
    amount: Decimal
    transaction_code: str
    notes: str = ""
    original_pii: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        amount = self.amount if isinstance(self.amount, Decimal) else Decimal(str(self.amount))
        object.__setattr__(self, "amount", quantize_amount(amount))
        object.__setattr__(self, "original_pii", MappingProxyType(dict(self.original_pii)))

    def evolve(self, **changes: Any) -> Transaction:
        """Return a new record with ``changes`` applied (a plain copy when empty)."""

        return replace(self, **changes)


@dataclass(frozen=True, slots=True)
class CategorizedTransaction:
    """A transaction paired with the category assigned by the classifier.

    ``category`` is ``""`` when the classifier returned no decision for the
    transaction (the service may answer for a subset of the batch).
    """

    transaction: Transaction
    category: str = ""


# ---------------------------------------------------------------------------
# Classifier boundary DTOs
# ---------------------------------------------------------------------------


class ClassifierItem(BaseModel):
    """One outbound item of a categorisation request.

    Field names follow the wire contract of the categorisation service. There
    is no field for identity data: only the masked payee, the
    scrubbed notes and the resolved transaction type are sent.
    """

    model_config = ConfigDict(strict=True, extra="forbid", frozen=True)

    index: int
    payee: str
    notes: str
    transactionType: str  # noqa: N815 - wire name


class ClassifierResult(BaseModel):
    """One category assignment returned by the categorisation service."""

    model_config = ConfigDict(strict=True, extra="ignore", str_strip_whitespace=True)

    index: int
    category: str

    @field_validator("index")
    @classmethod
    def _index_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("index must be >= 0")
        return v


__all__ = [
    "CategorizedTransaction",
    "ClassifierItem",
    "ClassifierResult",
    "Transaction",
    "quantize_amount",
]
