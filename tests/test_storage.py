import json
from pathlib import Path

import pytest

from lunchprep import storage
from lunchprep.categories import (
    DEFAULT_CATEGORIES,
    load_categories,
    normalize_categories,
    reset_categories,
    save_categories,
)


def test_data_root_follows_env(_isolate_data_dir: Path):
    assert storage.get_data_root() == _isolate_data_dir.resolve()


def test_data_root_defaults_to_cwd(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    monkeypatch.delenv("LUNCHPREP_DATA_DIR")
    monkeypatch.chdir(tmp_path)
    assert storage.get_data_root() == (tmp_path / ".lunchprep").resolve()


def test_read_missing_key_is_none():
    assert storage.read_json("nothing_here") is None


def test_write_then_read(_isolate_data_dir: Path):
    storage.write_json("prefs", {"a": [1, 2]})
    assert storage.read_json("prefs") == {"a": [1, 2]}
    assert not (_isolate_data_dir / "prefs.json.tmp").exists()


@pytest.mark.parametrize("key", ["../escape", "Upper", "with space", ""])
def test_invalid_keys_rejected(key: str):
    with pytest.raises(ValueError, match="Invalid storage key"):
        storage.read_json(key)


# ---- Whitelist ---------------------------------------------------------------


def test_whitelist_add_remove():
    assert storage.load_whitelist() == frozenset()
    assert storage.add_to_whitelist("  alice wong ") == {"ALICE WONG"}
    storage.add_to_whitelist("Bob Tan")
    assert storage.load_whitelist() == {"ALICE WONG", "BOB TAN"}
    assert storage.remove_from_whitelist("alice WONG") == {"BOB TAN"}
    assert storage.remove_from_whitelist("not there") == {"BOB TAN"}


def test_whitelist_rejects_blank():
    with pytest.raises(ValueError):
        storage.add_to_whitelist("   ")


def test_whitelist_corrupt_file_is_empty(_isolate_data_dir: Path, caplog):
    (_isolate_data_dir / "pii_whitelist.json").write_text("{not json", encoding="utf-8")
    with caplog.at_level("WARNING", logger="lunchprep.storage"):
        assert storage.load_whitelist() == frozenset()
    assert "whitelist:read_failed" in caplog.text


def test_whitelist_wrong_shape_is_empty(_isolate_data_dir: Path):
    (_isolate_data_dir / "pii_whitelist.json").write_text(
        json.dumps({"names": ["A"]}), encoding="utf-8"
    )
    assert storage.load_whitelist() == frozenset()


def test_whitelist_unreadable_is_empty(_isolate_data_dir: Path):
    # A directory where the file should be makes read_text raise OSError.
    (_isolate_data_dir / "pii_whitelist.json").mkdir()
    assert storage.load_whitelist() == frozenset()


# ---- Categories --------------------------------------------------------------


def test_categories_default_when_unset():
    assert load_categories() == DEFAULT_CATEGORIES


def test_normalize_categories_dedupes_case_insensitively():
    assert normalize_categories([" Food ", "food", "", "Pet   Care", "FOOD"]) == (
        "Food",
        "Pet Care",
    )


def test_save_and_reset_categories():
    assert save_categories(["Rent", "Food"]) == ("Rent", "Food")
    assert load_categories() == ("Rent", "Food")
    assert reset_categories() == DEFAULT_CATEGORIES
    assert load_categories() == DEFAULT_CATEGORIES


def test_save_rejects_empty_list():
    with pytest.raises(ValueError):
        save_categories(["  ", ""])


def test_corrupt_categories_fall_back(_isolate_data_dir: Path):
    (_isolate_data_dir / "categories.json").write_text("[1, 2]", encoding="utf-8")
    assert load_categories() == DEFAULT_CATEGORIES
    (_isolate_data_dir / "categories.json").write_text("oops", encoding="utf-8")
    assert load_categories() == DEFAULT_CATEGORIES
