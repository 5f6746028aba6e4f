from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

import pandas as pd

"""NormalizedRecord model.

One row of the analysis-ready table. Absent values are None here even
though the DataFrame form carries NaN / <NA>.
"""

__all__ = [
    "NormalizedRecord",
    "Sex",
]


class Sex(Enum):
    FEMALE = "Female"
    MALE = "Male"

    @classmethod
    def parse(cls, value: Any) -> Sex | None:
        """Map 'F' / 'M' / 'Female' / 'Male' (any case) to a member, else None."""
        if isinstance(value, Sex):
            return value
        if not isinstance(value, str):
            return None
        text = value.strip().upper()
        if text in ("F", "FEMALE"):
            return cls.FEMALE
        if text in ("M", "MALE"):
            return cls.MALE
        return None


def _absent_to_none(value: Any) -> Any:
    # pandas は欠損を NaN / pd.NA で表すので None に揃える
    if value is None or pd.isna(value):
        return None
    return value


@dataclass(frozen=True)
class NormalizedRecord:
    name: str
    birthplace: str
    sex: Sex | None
    reign_years: float | None
    death_year: int | None
    age_years: float | None
    age_days: float | None
    age_total: float | None

    @staticmethod
    def from_row(row: dict[str, Any]) -> NormalizedRecord:
        death_year = _absent_to_none(row.get("death_year"))
        return NormalizedRecord(
            name=str(_absent_to_none(row.get("name")) or ""),
            birthplace=str(_absent_to_none(row.get("birthplace")) or ""),
            sex=Sex.parse(_absent_to_none(row.get("sex"))),
            reign_years=_absent_to_none(row.get("reign_years")),
            death_year=int(death_year) if death_year is not None else None,
            age_years=_absent_to_none(row.get("age_years")),
            age_days=_absent_to_none(row.get("age_days")),
            age_total=_absent_to_none(row.get("age_total")),
        )
