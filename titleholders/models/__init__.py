"""Domain models for the titleholder table normalizer.

This package contains the frozen dataclasses passed between the reader,
the normalizer stages, the aggregate views and the CLI.
"""

from .config_models import DEFAULT_COLUMNS, DEFAULT_NUMERIC_COLUMNS, FieldRoles, NormalizerConfig
from .miss_record import FieldMissRecord
from .pipeline_result import PipelineResult, StageStat
from .record import NormalizedRecord, Sex

__all__ = [
    # Configuration models
    "DEFAULT_COLUMNS",
    "DEFAULT_NUMERIC_COLUMNS",
    "FieldRoles",
    "NormalizerConfig",
    # Processing models
    "FieldMissRecord",
    "NormalizedRecord",
    "PipelineResult",
    "Sex",
    "StageStat",
]
