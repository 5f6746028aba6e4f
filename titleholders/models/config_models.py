from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the titleholder table normalizer.

These are the typed form of config/normalizer.yml after the loader in
titleholders/config/loader.py has validated it.
"""

# 先頭列はスプレッドシート書き出し時に漏れた無名インデックス列
DEFAULT_COLUMNS: tuple[str, ...] = (
    "row_id",
    "number",
    "birthplace",
    "name",
    "birth_date",
    "death_date",
    "age_years",
    "age_days",
    "race",
    "sex",
    "deathplace",
    "title_years",
    "title_ages",
    "reign_years",
    "reign_days",
    "accession_age_years",
    "accession_age_days",
    "date_added",
)

EXPECTED_ARITY = len(DEFAULT_COLUMNS)

DEFAULT_NUMERIC_COLUMNS: tuple[str, ...] = (
    "age_years",
    "age_days",
    "reign_years",
    "reign_days",
    "accession_age_years",
    "accession_age_days",
)


@dataclass(frozen=True)
class FieldRoles:
    """Which column plays which part in cleaning and derivation.

    Every value must name one of the configured columns.
    """
    sequence: str = "number"
    name: str = "name"
    birthplace: str = "birthplace"
    sex: str = "sex"
    title_years: str = "title_years"
    reign_years: str = "reign_years"
    age_years: str = "age_years"
    age_days: str = "age_days"

    def as_dict(self) -> dict[str, str]:
        return {
            "sequence": self.sequence,
            "name": self.name,
            "birthplace": self.birthplace,
            "sex": self.sex,
            "title_years": self.title_years,
            "reign_years": self.reign_years,
            "age_years": self.age_years,
            "age_days": self.age_days,
        }


@dataclass(frozen=True)
class NormalizerConfig:
    """Root configuration object for one normalizer run."""
    source_file: str  # .xlsx / .xls / .csv
    columns: tuple[str, ...] = DEFAULT_COLUMNS  # positional, exactly 18
    sheet_name: str | None = None  # None -> first sheet
    artifact_row_index: int | None = 1  # None -> no drop
    placeholder_markers: tuple[str, ...] = ("*",)
    numeric_columns: tuple[str, ...] = DEFAULT_NUMERIC_COLUMNS
    fields: FieldRoles = field(default_factory=FieldRoles)
    miss_log_dir: str | None = None  # None -> misses are only logged
