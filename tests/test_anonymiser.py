import datetime as dt
from decimal import Decimal

import pytest

from lunchprep.anonymiser import (
    MOCK_NAMES,
    anonymise,
    is_business_name,
    is_transfer_transaction,
    restore,
)
from lunchprep.models import Transaction
from lunchprep.parsers import dbs_parser

PAYNOW = "FAST or PayNow Payment / Receipt"
FUNDS = "Funds Transfer"
POS = "Point-of-Sale Transaction or Proceeds"


def _tx(description: str, code: str = PAYNOW, **kw) -> Transaction:
    return Transaction(
        date=kw.pop("date", dt.date(2026, 2, 1)),
        description=description,
        original_description=kw.pop("original_description", description.upper()),
        amount=kw.pop("amount", Decimal("-10")),
        transaction_code=code,
        **kw,
    )


def test_transfer_gate_uses_resolved_descriptions():
    assert is_transfer_transaction(PAYNOW)
    assert is_transfer_transaction(FUNDS)
    assert not is_transfer_transaction("ICT")
    assert not is_transfer_transaction(POS)


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("Ocean Catch Seafood Pte. Ltd.", True),
        ("ACME PTE LTD", True),
        ("Kopi Cafe", True),
        ("Pos-System-Retailstore", True),
        ("Alice Wong", False),
        ("Ltdname", False),
    ],
)
def test_is_business_name(name: str, expected: bool):
    assert is_business_name(name) is expected


def test_masks_only_transfers():
    txs = [_tx("Alice Wong"), _tx("Noodle House Stall", POS), _tx("Bob Tan", FUNDS)]
    out = anonymise(txs)
    assert [t.description for t in out] == [MOCK_NAMES[0], "Noodle House Stall", MOCK_NAMES[1]]
    assert out[0].original_pii == {MOCK_NAMES[0]: "Alice Wong"}
    assert out[1].original_pii == {}


def test_business_and_blank_descriptions_untouched():
    txs = [_tx("Ocean Catch Seafood Pte. Ltd."), _tx(""), _tx("   ")]
    out = anonymise(txs)
    assert [t.description for t in out] == ["Ocean Catch Seafood Pte. Ltd.", "", "   "]
    assert all(t.original_pii == {} for t in out)


def test_whitelist_is_case_insensitive():
    out = anonymise([_tx("Alice Wong"), _tx("Bob Tan")], whitelist=["alice wong"])
    assert out[0].description == "Alice Wong"
    assert out[0].original_pii == {}
    # Whitelisted names do not consume a placeholder.
    assert out[1].description == MOCK_NAMES[0]


def test_same_name_gets_same_placeholder_regardless_of_case():
    txs = [_tx("Alice Wong"), _tx("Bob Tan"), _tx("ALICE WONG", FUNDS)]
    out = anonymise(txs)
    assert out[0].description == out[2].description == MOCK_NAMES[0]
    assert out[2].original_pii == {MOCK_NAMES[0]: "ALICE WONG"}
    assert out[1].description == MOCK_NAMES[1]


def test_placeholders_cycle_when_pool_exhausted():
    names = [f"Person {i}" for i in range(len(MOCK_NAMES) + 1)]
    out = anonymise([_tx(n) for n in names])
    assert out[-1].description == MOCK_NAMES[0]
    assert out[0].description == MOCK_NAMES[0]
    # Both resolve back to their own real names.
    assert restore(out)[-1].description == names[-1]
    assert restore(out)[0].description == names[0]


def test_custom_pool_and_empty_pool():
    out = anonymise([_tx("A"), _tx("B"), _tx("C")], mock_names=["X", "Y"])
    assert [t.description for t in out] == ["X", "Y", "X"]
    with pytest.raises(ValueError):
        anonymise([_tx("A")], mock_names=[])


def test_inputs_never_mutated_and_outputs_are_new():
    txs = [_tx("Alice Wong"), _tx("Shop", POS)]
    out = anonymise(txs)
    assert txs[0].description == "Alice Wong"
    assert txs[0].original_pii == {}
    assert all(a is not b for a, b in zip(txs, out, strict=True))

    restored = restore(out)
    assert all(a is not b for a, b in zip(out, restored, strict=True))
    assert out[0].description == MOCK_NAMES[0]


def test_existing_original_pii_is_kept():
    tx = _tx("Bob Tan", original_pii={"Previous": "Someone"})
    (out,) = anonymise([tx])
    assert out.original_pii == {"Previous": "Someone", MOCK_NAMES[0]: "Bob Tan"}


def test_restore_leaves_edited_description_alone():
    (masked,) = anonymise([_tx("Alice Wong")])
    edited = masked.evolve(description="Landlord")
    (out,) = restore([edited])
    assert out.description == "Landlord"


def test_round_trip_over_sample(sample_csv: str):
    parsed = dbs_parser.parse(sample_csv)
    masked = anonymise(parsed, whitelist=["david chew"])

    by_original = {t.original_description: t for t in masked}
    alice = next(t for k, t in by_original.items() if "ALICE WONG" in k)
    assert alice.description in MOCK_NAMES
    ocean = next(t for k, t in by_original.items() if "OCEAN CATCH" in k)
    assert ocean.description == "Ocean Catch Seafood Pte. Ltd."
    noodle = next(t for k, t in by_original.items() if "NOODLE HOUSE" in k)
    assert noodle.description == "Noodle House Stall"
    david = next(t for k, t in by_original.items() if "DAVID CHEW" in k)
    assert david.description == "David Chew"

    restored = restore(masked)
    assert [t.description for t in restored] == [t.description for t in parsed]
    assert [t.amount for t in restored] == [t.amount for t in parsed]
    assert [t.notes for t in restored] == [t.notes for t in parsed]


def test_original_pii_is_read_only():
    source = {"Previous": "Someone"}
    tx = _tx("Bob Tan", original_pii=source)
    source["Leak"] = "Other"
    assert tx.original_pii == {"Previous": "Someone"}

    (masked,) = anonymise([tx])
    with pytest.raises(TypeError):
        masked.original_pii["Extra"] = "x"  # type: ignore[index]
    assert dict(restore([masked])[0].original_pii) == dict(masked.original_pii)
