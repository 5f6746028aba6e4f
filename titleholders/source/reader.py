from __future__ import annotations

import zipfile
from pathlib import Path

import pandas as pd

from titleholders.models.config_models import EXPECTED_ARITY

"""Raw table reader.

The source spreadsheet has a header split over two stacked rows, so it is
read with no header at all: both header rows come back as ordinary data
rows (index 0 and 1) and are dealt with later by the normalizer.
Every cell is read as text; empty cells become "".
"""

__all__ = [
    "SchemaMismatchError",
    "TableImportError",
    "load_raw",
]

EXCEL_SUFFIXES = {".xlsx", ".xlsm", ".xls"}
CSV_SUFFIXES = {".csv"}


class TableImportError(Exception):
    """Raised when the source file is absent, unsupported or unreadable."""


class SchemaMismatchError(Exception):
    """Raised when a table does not have the expected number of columns."""

    def __init__(self, expected: int, actual: int, where: str = "table") -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"{where}: expected {expected} columns, got {actual}")


def load_raw(
    path: Path, expected_arity: int = EXPECTED_ARITY, sheet_name: str | None = None
) -> pd.DataFrame:
    """Read the source file into a text-only DataFrame, preserving row order.

    Parameters
    ----------
    path: .xlsx / .xls / .csv のパス
    expected_arity: 期待する列数 (スキーマ推論はしない)
    sheet_name: Excel のシート名 (None なら先頭シート)

    Raises
    ------
    TableImportError: file missing, unsupported suffix or reader failure
    SchemaMismatchError: column count differs from ``expected_arity``
    """
    path = Path(path)
    if not path.is_file():
        raise TableImportError(f"source file not found: {path}")

    suffix = path.suffix.lower()
    try:
        if suffix in EXCEL_SUFFIXES:
            df = pd.read_excel(
                path,
                sheet_name=sheet_name if sheet_name is not None else 0,
                header=None,
                dtype=str,
                keep_default_na=False,
            )
        elif suffix in CSV_SUFFIXES:
            df = pd.read_csv(path, header=None, dtype=str, keep_default_na=False)
        else:
            raise TableImportError(f"unsupported source format '{suffix}': {path}")
    except TableImportError:
        raise
    except (OSError, ValueError, zipfile.BadZipFile, pd.errors.ParserError) as e:
        # ValueError: 壊れた xlsx / 存在しないシート名 / 空ファイル (EmptyDataError)
        raise TableImportError(f"failed to read {path}: {e}") from e

    if df.shape[1] != expected_arity:
        raise SchemaMismatchError(expected_arity, df.shape[1], where=f"source {path.name}")

    # openpyxl は空セルを NaN で返すことがあるため文字列に揃える
    df = df.fillna("").astype(str)
    return df.reset_index(drop=True)
