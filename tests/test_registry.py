from pathlib import Path

import pytest

from lunchprep.models import Transaction
from lunchprep.parsers import (
    PARSERS,
    StatementParser,
    UnsupportedFormatError,
    dbs_parser,
    detect_and_parse,
    detect_parser,
    load_statement,
)


class _FakeParser:
    bank_name = "FAKE"

    def __init__(self, marker: str) -> None:
        self.marker = marker
        self.parsed: list[str] = []

    def detect(self, text: str) -> bool:
        return self.marker in text

    def parse(self, text: str) -> list[Transaction]:
        self.parsed.append(text)
        return []


def test_dbs_is_registered():
    assert dbs_parser in PARSERS
    assert isinstance(dbs_parser, StatementParser)


def test_detect_parser_picks_dbs(sample_csv: str):
    assert detect_parser(sample_csv) is dbs_parser


def test_detect_and_parse_dispatches(sample_csv: str):
    assert len(detect_and_parse(sample_csv)) == 23


@pytest.mark.parametrize("text", ["", "Date,Amount\n2026-01-01,5.00\n"])
def test_unknown_format_lists_supported_banks(text: str):
    with pytest.raises(UnsupportedFormatError) as exc_info:
        detect_and_parse(text)
    message = str(exc_info.value)
    assert message.startswith("Unsupported bank CSV format")
    assert message.endswith("Currently supported banks: DBS")


def test_first_matching_parser_wins():
    first = _FakeParser("hello")
    second = _FakeParser("hello")
    detect_and_parse("hello world", parsers=[first, second])
    assert first.parsed == ["hello world"]
    assert second.parsed == []


def test_error_names_every_registered_bank():
    with pytest.raises(UnsupportedFormatError) as exc_info:
        detect_and_parse("nothing", parsers=[_FakeParser("x"), dbs_parser])
    assert exc_info.value.bank_names == ("FAKE", "DBS")


def test_load_statement_tolerates_bom(sample_csv: str, tmp_path: Path):
    path = tmp_path / "statement.csv"
    path.write_text("\ufeff" + sample_csv, encoding="utf-8")
    assert len(load_statement(path)) == 23
