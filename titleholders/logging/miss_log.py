from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from titleholders.models.miss_record import FieldMissRecord

"""Parse-miss log buffering.

Misses are collected in memory for the whole run and written once at the
end as JSON Lines (`misses-YYYYMMDD-HHMMSS.log`, UTC). When no directory is
configured the buffer only counts.
"""

__all__ = [
    "FieldMissRecord",
    "MissLogBuffer",
]

TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class MissLogBuffer:
    """In-memory buffer of FieldMissRecord. Single-threaded use only."""

    def __init__(self, log_dir: Path | None = None) -> None:
        self._records: list[FieldMissRecord] = []
        self._log_dir = log_dir
        self._file_path: Path | None = None
        self._total = 0

    @property
    def file_path(self) -> Path | None:
        if self._log_dir is None:
            return None
        if self._file_path is None:
            self._log_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._log_dir / f"misses-{stamp}.log"
        return self._file_path

    @property
    def total(self) -> int:
        """Number of records appended since creation, flushed or not."""
        return self._total

    def append(self, record: FieldMissRecord) -> None:
        self._records.append(record)
        self._total += 1

    def extend(self, records: list[FieldMissRecord]) -> None:
        for r in records:
            self.append(r)

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path | None:
        """Write pending records and clear the buffer.

        Returns the log file path, or None when nothing was written.
        """
        if not self._records:
            return None
        fp = self.file_path
        if fp is None:
            self._records.clear()
            return None
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
