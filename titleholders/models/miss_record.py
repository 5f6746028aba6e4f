from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""FieldMissRecord model for the parse-miss log.

A miss is a content-level failure: one field of one included row did not
parse. It never aborts the run; it is buffered and optionally written out
as JSON Lines by titleholders/logging/miss_log.py.
"""

__all__ = [
    "FieldMissRecord",
]


@dataclass(frozen=True)
class FieldMissRecord:
    """Structured record for one unparseable field.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: Source file name
        row: 0-based position in the table the miss was found in
        column: Column name after renaming
        error_type: Miss classification in UPPER_SNAKE_CASE format
        value: The raw text that failed to parse
    """
    timestamp: str  # ISO8601 UTC
    file: str
    row: int
    column: str
    error_type: str  # UPPER_SNAKE
    value: str

    @staticmethod
    def create(file: str, row: int, column: str, error_type: str, value: str) -> FieldMissRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return FieldMissRecord(
            timestamp=ts,
            file=file,
            row=row,
            column=column,
            error_type=error_type,
            value=value,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
