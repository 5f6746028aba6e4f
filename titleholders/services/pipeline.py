from __future__ import annotations

import logging
import time
from datetime import UTC, datetime
from pathlib import Path

import pandas as pd

from ..logging.miss_log import MissLogBuffer
from ..models.config_models import NormalizerConfig
from ..models.pipeline_result import PipelineResult, StageStat
from ..source.reader import SchemaMismatchError, TableImportError, load_raw
from .aggregates import frequency_table, mean_reign_table
from .normalizer import IndexOutOfRangeError, normalize_table
from .progress import StageProgress

logger = logging.getLogger("titleholders.pipeline")

"""Pipeline orchestration.

load -> normalize (rename, drop, clean, exclude, coerce, derive) -> aggregate.
Structural failures are re-raised as PipelineError; content misses are
counted, logged at DEBUG and optionally written to the miss log.
"""

STAGES = [
    "load",
    "rename",
    "drop_artifact_row",
    "clean_strings",
    "exclude_rows",
    "coerce_numeric",
    "derive",
    "aggregate",
]


class PipelineError(Exception):
    """Structural failure that aborts the run."""


def run_pipeline(config: NormalizerConfig) -> PipelineResult:
    """Load the configured source file and produce the normalized table and views.

    Raises:
        PipelineError: unreadable source, column count mismatch or an
            artifact row index outside the table
    """
    start_time = datetime.now(UTC)
    source = Path(config.source_file)
    miss_log = MissLogBuffer(Path(config.miss_log_dir) if config.miss_log_dir else None)
    stage_stats: list[StageStat] = []

    with StageProgress(STAGES) as progress:
        last_tick = time.perf_counter()

        def _on_stage(stage: str, table: pd.DataFrame) -> None:
            nonlocal last_tick
            now = time.perf_counter()
            stage_stats.append(StageStat(stage=stage, rows=len(table), elapsed_seconds=now - last_tick))
            last_tick = now
            progress.advance(stage, len(table))
            logger.debug(f"stage={stage} rows={len(table)}")

        try:
            raw = load_raw(source, expected_arity=len(config.columns), sheet_name=config.sheet_name)
        except (TableImportError, SchemaMismatchError) as e:
            raise PipelineError(f"load: {e}") from e
        _on_stage("load", raw)
        logger.info(f"Loaded {len(raw)} rows from: {source}")

        try:
            result = normalize_table(raw, config, file_name=source.name, on_stage=_on_stage)
        except (SchemaMismatchError, IndexOutOfRangeError) as e:
            raise PipelineError(f"normalize: {e}") from e

        for miss in result.misses:
            logger.debug(f"miss row={miss.row} column={miss.column} value={miss.value!r}")
        miss_log.extend(result.misses)

        normalized = result.table
        frequency = frequency_table(normalized)
        mean_reign = mean_reign_table(normalized)
        _on_stage("aggregate", normalized)

    if result.excluded_positions:
        logger.info(f"Excluded rows at positions {result.excluded_positions}")
    if miss_log.total:
        logger.info(f"{miss_log.total} field(s) did not parse and were treated as absent")
    try:
        written = miss_log.flush()
    except OSError as e:
        # 欠損ログの書き出し失敗で結果を捨てない
        logger.warning(f"miss log flush failed: {e}")
        written = None
    if written is not None:
        logger.info(f"Miss log written: {written}")

    end_time = datetime.now(UTC)
    return PipelineResult(
        source_file=str(source),
        raw_rows=len(raw),
        dropped_rows=result.dropped_rows,
        excluded_rows=len(result.excluded_positions),
        included_rows=len(normalized),
        normalized=normalized,
        frequency=frequency,
        mean_reign=mean_reign,
        field_misses=miss_log.total,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        stage_stats=stage_stats,
    )
