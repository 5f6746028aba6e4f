from __future__ import annotations

import pandas as pd

"""Aggregate views over the normalized table.

Both views are sorted descending with a stable sort, so ties keep the
order in which the birthplace was first encountered.
"""

__all__ = [
    "frequency_table",
    "mean_reign_table",
]


def _birthplace_keys(table: pd.DataFrame, column: str) -> pd.Series:
    # 欠損は "" で数えて件数合計 = 対象行数を保つ
    return table[column].fillna("").astype(str).rename(column)


def frequency_table(table: pd.DataFrame, column: str = "birthplace") -> pd.DataFrame:
    """birthplace -> number of titleholders.

    Returns a DataFrame with columns [column, "count"].
    """
    keys = _birthplace_keys(table, column)
    counts = keys.groupby(keys, sort=False).size()
    counts = counts.sort_values(ascending=False, kind="stable")
    return counts.rename_axis(column).reset_index(name="count")


def mean_reign_table(
    table: pd.DataFrame, column: str = "birthplace", reign_column: str = "reign_years"
) -> pd.DataFrame:
    """birthplace -> mean reign length in years.

    Absent reign values are skipped, not counted as zero; a birthplace whose
    rows all lack a reign value does not appear.
    """
    keys = _birthplace_keys(table, column)
    reigns = pd.to_numeric(table[reign_column], errors="coerce")
    means = reigns.groupby(keys, sort=False).mean()
    means = means.dropna().sort_values(ascending=False, kind="stable")
    return means.rename_axis(column).reset_index(name="mean_reign_years")
