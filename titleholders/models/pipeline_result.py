from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

import pandas as pd

from .record import NormalizedRecord

"""Pipeline result models.

PipelineResult carries the normalized table, the two aggregate views and
the counters needed for the SUMMARY output line.
"""


@dataclass(frozen=True)
class StageStat:
    """Row count after one pipeline stage."""
    stage: str
    rows: int
    elapsed_seconds: float


@dataclass(frozen=True)
class PipelineResult:
    source_file: str
    raw_rows: int  # 読込直後の行数 (ヘッダ 2 行を含む)
    dropped_rows: int  # artifact row drop
    excluded_rows: int  # predicate exclusion
    included_rows: int
    normalized: pd.DataFrame
    frequency: pd.DataFrame  # birthplace, count
    mean_reign: pd.DataFrame  # birthplace, mean_reign_years
    field_misses: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    stage_stats: list[StageStat] = field(default_factory=list)

    def to_records(self) -> list[NormalizedRecord]:
        return [NormalizedRecord.from_row(r) for r in self.normalized.to_dict(orient="records")]
