import json

import pytest

from lunchprep.anonymiser import MOCK_NAMES
from lunchprep.api import prepare_statement
from lunchprep.categorize import CategorisationError
from lunchprep.exporter import generate_lunch_money_csv
from lunchprep.parsers import NoTransactionRowsError, UnsupportedFormatError
from lunchprep.storage import add_to_whitelist
from tests.helpers.openai_stub import FailingResponses, OpenAIStub, StatusError


def _decide(item: dict) -> str | None:
    if item["transactionType"] == "Point-of-Sale Transaction or Proceeds":
        return "Dining"
    if item["payee"] in MOCK_NAMES:
        return "Transfers"
    return None


def test_pipeline_restores_names_and_masks_outbound(sample_csv: str):
    stub = OpenAIStub(_decide)
    items = prepare_statement(sample_csv, client=stub)

    assert len(items) == 23
    assert len(stub.calls) == 1
    sent = json.dumps(stub.sent_items())
    for real in ("Alice Wong", "Charlie Lim", "David Chew"):
        assert real not in sent
    assert "Ocean Catch Seafood Pte. Ltd." in sent

    by_payee = {i.transaction.description: i for i in items}
    assert by_payee["Alice Wong"].category == "Transfers"
    assert by_payee["Noodle House Stall"].category == "Dining"
    assert by_payee["Burger King (Xyz)"].category == ""
    assert all(i.transaction.original_pii for i in items if i.category == "Transfers")


def test_stored_whitelist_is_applied(sample_csv: str):
    add_to_whitelist("alice wong")
    stub = OpenAIStub(lambda item: None)
    prepare_statement(sample_csv, client=stub)
    payees = [i["payee"] for i in stub.sent_items()]
    assert "Alice Wong" in payees
    assert "Charlie Lim" not in payees


def test_explicit_arguments_override_storage(sample_csv: str):
    add_to_whitelist("alice wong")
    stub = OpenAIStub(lambda item: "Misc")
    items = prepare_statement(sample_csv, categories=["Misc"], whitelist=[], client=stub)
    assert "Alice Wong" not in [i["payee"] for i in stub.sent_items()]
    assert json.loads(stub.calls[0]["input"])["valid_categories"] == ["Misc"]
    assert {i.category for i in items} == {"Misc"}


def test_classify_false_skips_the_network(sample_csv: str):
    client = FailingResponses(RuntimeError("network"), fail_times=1)
    items = prepare_statement(sample_csv, classify=False, client=client)
    assert client.calls == 0
    assert len(items) == 23
    assert all(i.category == "" for i in items)
    assert all(i.transaction.original_pii == {} for i in items)


def test_parse_errors_propagate():
    with pytest.raises(UnsupportedFormatError):
        prepare_statement("a,b,c\n1,2,3\n")
    header = (
        "Transaction Date,Transaction Code,Description,Transaction Ref1,"
        "Transaction Ref2,Transaction Ref3,Status,Debit Amount,Credit Amount\n"
    )
    with pytest.raises(NoTransactionRowsError):
        prepare_statement("\n" * 6 + header)


def test_classifier_failure_propagates(sample_csv: str):
    class _Client:
        responses = FailingResponses(StatusError(400), fail_times=5)

    with pytest.raises(CategorisationError):
        prepare_statement(sample_csv, client=_Client())


def test_export_of_prepared_statement(sample_csv: str):
    items = prepare_statement(sample_csv, classify=False)
    lines = generate_lunch_money_csv(items).splitlines()
    assert lines[0] == "date,payee,amount,category,notes"
    assert lines[1] == "2026-02-23,Noodle House Stall,-9.30,,"
    assert "2026-02-17,Charlie Lim,255.00,,Gong Xi Fa Cai" in lines
