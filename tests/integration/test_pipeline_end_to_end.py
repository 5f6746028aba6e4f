from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path

import pytest

from titleholders.models.config_models import NormalizerConfig
from titleholders.models.record import Sex
from titleholders.services.pipeline import PipelineError, run_pipeline

"""End-to-end: spreadsheet on disk -> normalized table -> aggregate views."""


@pytest.fixture()
def reference_xlsx(temp_workdir: Path, write_xlsx, reference_rows) -> Path:
    return write_xlsx(temp_workdir / "data" / "titleholders.xlsx", reference_rows)


def test_pipeline_reference_dataset(reference_xlsx: Path):
    result = run_pipeline(NormalizerConfig(source_file=str(reference_xlsx)))

    assert result.raw_rows == 6
    assert result.dropped_rows == 1
    assert result.excluded_rows == 2
    assert result.included_rows == 3
    assert result.field_misses == 0

    freq = dict(zip(result.frequency["birthplace"], result.frequency["count"]))
    assert freq == {"USA": 2, "Japan": 1}
    assert result.frequency["birthplace"].tolist() == ["USA", "Japan"]

    means = dict(zip(result.mean_reign["birthplace"], result.mean_reign["mean_reign_years"]))
    assert means == {"USA": 3.0, "Japan": 1.0}

    records = result.to_records()
    assert [r.birthplace for r in records] == ["USA", "USA", "Japan"]
    assert records[1].sex is Sex.MALE
    assert records[2].death_year == 2002
    assert records[0].age_total == pytest.approx(115 + 200 / 365.25)

    assert [s.stage for s in result.stage_stats] == [
        "load", "rename", "drop_artifact_row", "clean_strings",
        "exclude_rows", "coerce_numeric", "derive", "aggregate",
    ]


def test_pipeline_csv_source_matches_xlsx(temp_workdir: Path, write_csv, write_xlsx, reference_rows):
    xlsx = write_xlsx(temp_workdir / "data" / "t.xlsx", reference_rows)
    csv = write_csv(temp_workdir / "data" / "t.csv", reference_rows)
    a = run_pipeline(NormalizerConfig(source_file=str(xlsx)))
    b = run_pipeline(NormalizerConfig(source_file=str(csv)))
    assert a.frequency.equals(b.frequency)
    assert a.mean_reign.equals(b.mean_reign)


def test_pipeline_growing_dataset_still_excludes_by_content(
    temp_workdir: Path, write_xlsx, header_rows, build_row, build_living_row
):
    # 存命中の行が途中にあり、その後ろに新しい行が追加されたケース
    rows = header_rows + [
        build_row(1, "France", "9.4"),
        build_living_row(2),
        build_row(3, "Spain", "1.6"),
        build_row(4, "France", "0.6"),
    ]
    path = write_xlsx(temp_workdir / "data" / "grown.xlsx", rows)
    result = run_pipeline(NormalizerConfig(source_file=str(path)))
    assert result.included_rows == 3
    assert result.frequency["birthplace"].tolist() == ["France", "Spain"]
    means = dict(zip(result.mean_reign["birthplace"], result.mean_reign["mean_reign_years"]))
    assert means["France"] == pytest.approx(5.0)


def test_pipeline_writes_miss_log(temp_workdir: Path, write_xlsx, header_rows, build_row):
    rows = header_rows + [
        build_row(1, "Italy", "n/a"),
        build_row(2, "Italy", "2.5"),
    ]
    path = write_xlsx(temp_workdir / "data" / "misses.xlsx", rows)
    cfg = NormalizerConfig(source_file=str(path), miss_log_dir=str(temp_workdir / "logs"))
    result = run_pipeline(cfg)

    assert result.field_misses == 1
    # 欠損は 0 扱いしない
    assert result.mean_reign["mean_reign_years"].tolist() == [2.5]
    logs = list((temp_workdir / "logs").glob("misses-*.log"))
    assert len(logs) == 1
    entry = json.loads(logs[0].read_text(encoding="utf-8").splitlines()[0])
    assert entry["column"] == "reign_years"
    assert entry["value"] == "n/a"
    assert entry["file"] == "misses.xlsx"


def test_pipeline_missing_source(temp_workdir: Path):
    with pytest.raises(PipelineError) as e:
        run_pipeline(NormalizerConfig(source_file="./data/absent.xlsx"))
    assert "source file not found" in str(e.value)


def test_pipeline_artifact_index_out_of_range(reference_xlsx: Path):
    cfg = replace(NormalizerConfig(source_file=str(reference_xlsx)), artifact_row_index=40)
    with pytest.raises(PipelineError) as e:
        run_pipeline(cfg)
    assert "row index 40 out of range for table of 6 rows" in str(e.value)


def test_pipeline_wrong_arity(temp_workdir: Path, write_xlsx, reference_rows):
    path = write_xlsx(temp_workdir / "data" / "wide.xlsx", [r + ["extra"] for r in reference_rows])
    with pytest.raises(PipelineError) as e:
        run_pipeline(NormalizerConfig(source_file=str(path)))
    assert "expected 18 columns, got 19" in str(e.value)
