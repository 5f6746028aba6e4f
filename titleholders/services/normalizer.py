from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

import numpy as np
import pandas as pd

from ..models.config_models import NormalizerConfig
from ..models.miss_record import FieldMissRecord
from ..models.record import Sex
from ..source.reader import SchemaMismatchError

"""TableNormalizer stages.

Each stage takes one DataFrame and returns a new one; no stage mutates its
input, so the chain

    rename -> drop artifact row -> clean strings -> exclude -> coerce -> derive

can be re-run on the same raw table with identical results.

Structural problems (wrong column count, bad row index) raise. Content
problems (one field of one row does not parse) become absent values.
"""

__all__ = [
    "IndexOutOfRangeError",
    "Normalization",
    "SchemaMismatchError",
    "clean_birthplace",
    "clean_strings",
    "coerce_numeric",
    "coerce_numeric_columns",
    "derive_age_total",
    "derive_death_year",
    "derive_fields",
    "drop_artifact_row",
    "exclude_rows",
    "header_artifact_predicate",
    "in_progress_predicate",
    "normalize_table",
    "rename_columns",
]

# 括弧内が英数字/空白のみの注記だけ除去する。句読点を含む注記は残る。
PAREN_ANNOTATION_RE = re.compile(r"\([\w\s]+\)")
FOOTNOTE_RE = re.compile(r"\[\d+\]")
NUMBER_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")

DAYS_PER_YEAR = 365.25

MISS_NUMERIC = "NUMERIC_PARSE_MISS"

RowPredicate = Callable[[pd.Series], bool]
StageHook = Callable[[str, pd.DataFrame], None]


class IndexOutOfRangeError(IndexError):
    """Raised when a row index is outside the current table bounds."""

    def __init__(self, index: int, length: int) -> None:
        self.index = index
        self.length = length
        super().__init__(f"row index {index} out of range for table of {length} rows")


def rename_columns(table: pd.DataFrame, names: Sequence[str]) -> pd.DataFrame:
    """Replace column labels positionally. Rows are untouched."""
    names = list(names)
    if len(names) != table.shape[1]:
        raise SchemaMismatchError(len(names), table.shape[1], where="rename")
    renamed = table.copy()
    renamed.columns = names
    return renamed


def drop_artifact_row(table: pd.DataFrame, row_index: int) -> pd.DataFrame:
    """Remove the row at 0-based ``row_index``; later rows shift up by one."""
    if not 0 <= row_index < len(table):
        raise IndexOutOfRangeError(row_index, len(table))
    return table.drop(index=table.index[row_index]).reset_index(drop=True)


def clean_birthplace(text: Any) -> str:
    """Strip '(Region)' annotations and '[1]' footnote markers, then trim."""
    if not isinstance(text, str):
        return ""
    cleaned = PAREN_ANNOTATION_RE.sub("", text)
    cleaned = FOOTNOTE_RE.sub("", cleaned)
    return cleaned.strip()


def clean_strings(table: pd.DataFrame, birthplace_column: str) -> pd.DataFrame:
    """Trim every text cell and clean the birthplace column."""
    cleaned = table.copy()
    for col in cleaned.columns:
        cleaned[col] = cleaned[col].map(lambda v: v.strip() if isinstance(v, str) else v)
    cleaned[birthplace_column] = table[birthplace_column].map(clean_birthplace)
    return cleaned


def coerce_numeric(text: Any) -> float | None:
    """Parse a number out of ``text``; None when empty or not numeric.

    >>> coerce_numeric(" 7 ")
    7.0
    >>> coerce_numeric("**") is None
    True
    """
    if text is None:
        return None
    if isinstance(text, (int, float, np.integer, np.floating)) and not isinstance(text, bool):
        value = float(text)
        return None if np.isnan(value) else value
    if not isinstance(text, str):
        return None
    stripped = text.strip()
    if not stripped or NUMBER_RE.fullmatch(stripped) is None:
        return None
    return float(stripped)


def has_placeholder(text: Any, markers: Iterable[str]) -> bool:
    return isinstance(text, str) and any(m in text for m in markers)


def header_artifact_predicate(sequence_column: str) -> RowPredicate:
    """Row is the leaked header-label row: its sequence number is not a number."""
    def _is_header_artifact(row: pd.Series) -> bool:
        return coerce_numeric(row[sequence_column]) is None
    return _is_header_artifact


def in_progress_predicate(numeric_columns: Sequence[str], markers: Sequence[str]) -> RowPredicate:
    """Row belongs to a living titleholder: a numeric field carries a placeholder marker."""
    columns = list(numeric_columns)
    marks = tuple(markers)

    def _is_in_progress(row: pd.Series) -> bool:
        return any(has_placeholder(row[c], marks) for c in columns)
    return _is_in_progress


def exclude_rows(
    table: pd.DataFrame, predicates: Sequence[RowPredicate]
) -> tuple[pd.DataFrame, list[int]]:
    """Drop every row matching any predicate.

    Returns the new table (order preserved, index reset) and the 0-based
    positions that were removed.
    """
    if not predicates or table.empty:
        return table.reset_index(drop=True), []
    mask = table.apply(lambda row: any(p(row) for p in predicates), axis=1).astype(bool)
    excluded = [int(i) for i in np.flatnonzero(mask.to_numpy())]
    kept = table.loc[~mask.to_numpy()].reset_index(drop=True)
    return kept, excluded


def coerce_numeric_columns(
    table: pd.DataFrame, columns: Sequence[str], file_name: str = ""
) -> tuple[pd.DataFrame, list[FieldMissRecord]]:
    """Convert ``columns`` to float, absent -> NaN.

    Non-empty text that does not parse is reported as a FieldMissRecord;
    empty cells are simply absent.
    """
    coerced = table.copy()
    misses: list[FieldMissRecord] = []
    for col in columns:
        values: list[float] = []
        for pos, raw in enumerate(table[col].tolist()):
            value = coerce_numeric(raw)
            if value is None:
                if isinstance(raw, str) and raw.strip():
                    misses.append(FieldMissRecord.create(file_name, pos, col, MISS_NUMERIC, raw))
                values.append(np.nan)
            else:
                values.append(value)
        coerced[col] = pd.Series(values, index=table.index, dtype="float64")
    return coerced, misses


def derive_death_year(year_range: Any) -> int | None:
    """Last four characters of the title-held range as a year.

    >>> derive_death_year("1998–2002")
    2002
    """
    if not isinstance(year_range, str):
        return None
    tail = year_range.strip()[-4:]
    if len(tail) < 4 or not (tail.isascii() and tail.isdigit()):
        return None
    return int(tail)


def derive_age_total(age_years: float | None, age_days: float | None) -> float | None:
    if age_years is None or age_days is None:
        return None
    if pd.isna(age_years) or pd.isna(age_days):
        return None
    return float(age_years) + float(age_days) / DAYS_PER_YEAR


def derive_fields(table: pd.DataFrame, config: NormalizerConfig) -> pd.DataFrame:
    """Build the analysis-ready columns from a cleaned, coerced table."""
    roles = config.fields
    years = table[roles.age_years]
    days = table[roles.age_days]
    death_years = pd.array([derive_death_year(v) for v in table[roles.title_years]], dtype="Int64")
    sexes = [Sex.parse(v) for v in table[roles.sex]]
    return pd.DataFrame(
        {
            "name": table[roles.name].astype(str),
            "birthplace": table[roles.birthplace].astype(str),
            "sex": pd.Series(sexes, index=table.index, dtype=object),
            "reign_years": table[roles.reign_years].astype("float64"),
            "death_year": pd.Series(death_years, index=table.index),
            "age_years": years.astype("float64"),
            "age_days": days.astype("float64"),
            # NaN がどちらかにあれば NaN のまま (= absent)
            "age_total": years.astype("float64") + days.astype("float64") / DAYS_PER_YEAR,
        },
        index=table.index,
    )


@dataclass(frozen=True)
class Normalization:
    """Outcome of running the full stage chain on one raw table."""
    table: pd.DataFrame
    dropped_rows: int
    excluded_positions: list[int] = field(default_factory=list)
    misses: list[FieldMissRecord] = field(default_factory=list)


def normalize_table(
    raw: pd.DataFrame,
    config: NormalizerConfig,
    file_name: str = "",
    on_stage: StageHook | None = None,
) -> Normalization:
    """Run rename -> drop -> clean -> exclude -> coerce -> derive.

    ``on_stage`` is called with the stage name and the table it produced.
    """
    def _emit(stage: str, table: pd.DataFrame) -> None:
        if on_stage is not None:
            on_stage(stage, table)

    table = rename_columns(raw, config.columns)
    _emit("rename", table)

    dropped = 0
    if config.artifact_row_index is not None:
        table = drop_artifact_row(table, config.artifact_row_index)
        dropped = 1
    _emit("drop_artifact_row", table)

    table = clean_strings(table, config.fields.birthplace)
    _emit("clean_strings", table)

    predicates = [
        header_artifact_predicate(config.fields.sequence),
        in_progress_predicate(config.numeric_columns, config.placeholder_markers),
    ]
    table, excluded = exclude_rows(table, predicates)
    _emit("exclude_rows", table)

    roles = config.fields
    numeric = list(
        dict.fromkeys(
            [*config.numeric_columns, roles.sequence, roles.reign_years, roles.age_years, roles.age_days]
        )
    )
    table, misses = coerce_numeric_columns(table, numeric, file_name)
    _emit("coerce_numeric", table)

    normalized = derive_fields(table, config)
    _emit("derive", normalized)

    return Normalization(
        table=normalized,
        dropped_rows=dropped,
        excluded_positions=excluded,
        misses=misses,
    )
