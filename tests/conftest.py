"""Pytest configuration for test isolation.

The whitelist and category list persist as JSON files under a data directory
(default ``./.lunchprep``). Tests redirect that root to a per-test temporary
directory via an autouse fixture so stored state never leaks between tests or
into the working tree.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

DATA_DIR = Path(__file__).resolve().parent / "data"


@pytest.fixture(autouse=True)
def _isolate_data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Force a per-test data root (``LUNCHPREP_DATA_DIR``)."""

    data_root = tmp_path / "lunchprep-data"
    data_root.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("LUNCHPREP_DATA_DIR", os.fspath(data_root))
    return data_root


@pytest.fixture(scope="session")
def sample_csv() -> str:
    """Content of a DBS export covering every cleaner sub-type."""

    return (DATA_DIR / "dbs_sample.csv").read_text(encoding="utf-8")


@pytest.fixture(scope="session")
def sample_csv_path() -> Path:
    return DATA_DIR / "dbs_sample.csv"
