from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Stage progress display with tqdm (TTY only).

In non-TTY environments (CI, pipes) no bar is created so the labelled
log lines stay clean.
"""

__all__ = [
    "StageProgress",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class StageProgress:
    """One tick per pipeline stage."""

    def __init__(self, stages: list[str], *, description: str = "Normalizing") -> None:
        self.stages = stages
        self.description = description
        self.completed = 0

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=len(stages),
                desc=description,
                unit="stage",
                leave=False,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def advance(self, stage: str, rows: int) -> None:
        """Mark ``stage`` done with ``rows`` rows remaining."""
        self.completed += 1
        if self.pbar is not None:
            self.pbar.set_postfix(stage=stage, rows=rows)
            self.pbar.update(1)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> StageProgress:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
