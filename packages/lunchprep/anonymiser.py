"""PII anonymiser for transaction payees.

Masks personal names on person-to-person transfers (FAST/PayNow and DBS
funds transfers) before transactions are sent to the external classifier,
and restores them afterwards. Card and NETS purchases are never touched:
their merchant names are what the classifier needs.

Masking is reversible. Each masked transaction carries
``original_pii = {placeholder: real name}``; :func:`restore` swaps the real
name back in. Neither function mutates its input; both always return new
:class:`~lunchprep.models.Transaction` instances.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .logging_setup import get_logger
from .models import Transaction

# Resolved transaction-code descriptions (never the short codes) that may
# carry a personal name.
TRANSFER_TRANSACTION_CODES: frozenset[str] = frozenset(
    {
        "FAST or PayNow Payment / Receipt",  # ICT
        "Funds Transfer",  # ITR
    }
)

# Case-insensitive substrings marking a payee as a business.
BUSINESS_KEYWORDS: tuple[str, ...] = (
    "PTE LTD",
    "PTE. LTD.",
    "SDN BHD",
    " LTD",
    " LLC",
    " INC",
    " CORP",
    "COMPANY",
    "ENTERPRISE",
    "ENTERPRISES",
    "SERVICES",
    "SOLUTIONS",
    "HOLDINGS",
    "GROUP",
    "CAFE",
    "COFFEE",
    "RESTAURANT",
    "BAKERY",
    "KITCHEN",
    "CLINIC",
    "HOSPITAL",
    "PHARMACY",
    "SCHOOL",
    "ACADEMY",
    "SHOP",
    "STORE",
    "MARKET",
)

# Realistic placeholders keep the "this is a person" signal for the
# classifier. Assigned in order and reused cyclically.
MOCK_NAMES: tuple[str, ...] = (
    "Alex Tan",
    "Sam Lim",
    "Jordan Wong",
    "Casey Ng",
    "Morgan Lee",
    "Taylor Chen",
    "Riley Goh",
    "Jamie Ong",
    "Drew Koh",
    "Quinn Ho",
    "Avery Toh",
    "Blake Yeo",
    "Cameron Sim",
    "Dana Wee",
    "Elliot Chua",
)

_logger = get_logger("lunchprep.anonymiser")


def is_transfer_transaction(transaction_code: str) -> bool:
    """Return True for the two transfer descriptions eligible for masking."""

    return transaction_code in TRANSFER_TRANSACTION_CODES


def is_business_name(name: str) -> bool:
    upper = name.upper()
    return any(keyword in upper for keyword in BUSINESS_KEYWORDS)


def _maskable_key(tx: Transaction, whitelist: frozenset[str]) -> str | None:
    """Return the case-normalized name to mask, or ``None`` when exempt."""

    if not is_transfer_transaction(tx.transaction_code):
        return None
    if not tx.description or not tx.description.strip():
        return None
    if is_business_name(tx.description):
        return None
    key = tx.description.upper()
    if key in whitelist:
        return None
    return key


def anonymise(
    transactions: Sequence[Transaction],
    whitelist: Iterable[str] | None = None,
    *,
    mock_names: Sequence[str] = MOCK_NAMES,
) -> list[Transaction]:
    """Replace personal names on transfer transactions with placeholders.

    Algorithm:

    1. Gate on the resolved transaction code: only transfers are eligible.
    2. Skip blank descriptions, business names and whitelisted names.
    3. Give each unique name (case-insensitive), in order of first
       appearance, the next placeholder from ``mock_names``, wrapping around
       when the pool runs out.
    4. Return new transactions whose ``description`` is the placeholder and
       whose ``original_pii`` gains ``{placeholder: original description}``.
       Existing ``original_pii`` entries are kept.

    ``whitelist`` holds names to leave alone; comparison is case-insensitive.
    ``None`` means no whitelist (the orchestration layer loads the stored
    one, see :func:`lunchprep.api.prepare_statement`).
    """

    if not mock_names:
        raise ValueError("mock_names must not be empty")
    wl = frozenset(name.upper() for name in whitelist) if whitelist is not None else frozenset()

    name_to_mock: dict[str, str] = {}
    for tx in transactions:
        key = _maskable_key(tx, wl)
        if key is None or key in name_to_mock:
            continue
        name_to_mock[key] = mock_names[len(name_to_mock) % len(mock_names)]

    out: list[Transaction] = []
    masked = 0
    for tx in transactions:
        key = _maskable_key(tx, wl)
        if key is None:
            out.append(tx.evolve())
            continue
        mock = name_to_mock[key]
        out.append(
            tx.evolve(
                description=mock,
                original_pii={**tx.original_pii, mock: tx.description},
            )
        )
        masked += 1

    _logger.info(
        "anonymise:done transactions=%d masked=%d unique_names=%d",
        len(out),
        masked,
        len(name_to_mock),
    )
    return out


def restore(transactions: Sequence[Transaction]) -> list[Transaction]:
    """Swap placeholders back to the real names recorded in ``original_pii``.

    A description that is not a key of ``original_pii`` (edited by the user
    after masking, or already restored) is left as is.
    """

    out: list[Transaction] = []
    for tx in transactions:
        original = tx.original_pii.get(tx.description) if tx.original_pii else None
        if original:
            out.append(tx.evolve(description=original))
        else:
            out.append(tx.evolve())
    return out


__all__ = [
    "BUSINESS_KEYWORDS",
    "MOCK_NAMES",
    "TRANSFER_TRANSACTION_CODES",
    "anonymise",
    "is_business_name",
    "is_transfer_transaction",
    "restore",
]
