# Shared pytest fixtures
from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pandas as pd
import pytest

from titleholders.logging.init import reset_logging

HEADER_ROW = [
    "", "No.", "Birthplace", "Name", "Born", "Died", "Age", "", "Race", "Sex",
    "Deathplace", "Title held", "", "Reign length", "", "Accession age", "", "Date added",
]
SUBHEADER_ROW = [
    "", "", "", "", "", "", "Years", "Days", "", "", "",
    "Years", "Age", "Years", "Days", "Years", "Days", "",
]


def make_row(
    seq: int,
    birthplace: str,
    reign_years: str,
    *,
    name: str | None = None,
    age_years: str = "115",
    age_days: str = "200",
    sex: str = "F",
    title_years: str = "2010–2012",
    reign_days: str = "100",
) -> list[str]:
    """One 18-field titleholder row as it appears in the spreadsheet."""
    return [
        str(seq - 1), str(seq), birthplace, name or f"Person {seq}", "1897-01-01", "2012-07-20",
        age_years, age_days, "White", sex, birthplace, title_years, "113–115",
        reign_years, reign_days, "113", "40", "2023-01-10",
    ]


def in_progress_row(seq: int, birthplace: str = "Brazil") -> list[str]:
    return [
        str(seq - 1), str(seq), birthplace, "Still Living", "1908-06-08", "",
        "***", "***", "Mixed", "F", "", "2024–", "116–",
        "***", "***", "116", "85", "2025-01-01",
    ]


@pytest.fixture()
def temp_workdir(monkeypatch, tmp_path: Path) -> Path:
    (tmp_path / "config").mkdir()
    (tmp_path / "data").mkdir()
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("TITLEHOLDERS_CONFIG", raising=False)
    reset_logging()
    yield tmp_path
    reset_logging()


@pytest.fixture()
def reference_rows() -> list[list[str]]:
    """Two header rows, three historical titleholders, one living titleholder."""
    return [
        HEADER_ROW,
        SUBHEADER_ROW,
        make_row(1, "USA (Ohio) [2]", "2.0"),
        make_row(2, "  USA ", "4.0", sex="M"),
        make_row(3, "Japan", "1.0", title_years="2001–2002"),
        in_progress_row(4),
    ]


@pytest.fixture()
def write_xlsx() -> Callable[..., Path]:
    def _write(path: Path, rows: list[list[object]], sheet_name: str = "Sheet1") -> Path:
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
        return path
    return _write


@pytest.fixture()
def write_csv() -> Callable[..., Path]:
    def _write(path: Path, rows: list[list[object]]) -> Path:
        pd.DataFrame(rows).to_csv(path, header=False, index=False)
        return path
    return _write


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_file: ./data/titleholders.xlsx
columns: [row_id, number, birthplace, name, birth_date, death_date, age_years, age_days,
          race, sex, deathplace, title_years, title_ages, reign_years, reign_days,
          accession_age_years, accession_age_days, date_added]
artifact_row_index: 1
placeholder_markers: ["*"]
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "normalizer.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def header_rows() -> list[list[str]]:
    return [list(HEADER_ROW), list(SUBHEADER_ROW)]


@pytest.fixture()
def build_row() -> Callable[..., list[str]]:
    return make_row


@pytest.fixture()
def build_living_row() -> Callable[..., list[str]]:
    return in_progress_row
