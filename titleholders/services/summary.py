from __future__ import annotations

from ..models.pipeline_result import PipelineResult

"""SUMMARY line rendering.

Format:
SUMMARY rows={raw} dropped={n} excluded={n} included={n}
birthplaces={n} misses={n} elapsed_sec={x}
"""


def _format_seconds(seconds: float) -> str:
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        # 指数表記を避ける
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: PipelineResult) -> str:
    """Render the SUMMARY line for one pipeline run.

    e.g. 'SUMMARY rows=67 dropped=1 excluded=2 included=64 birthplaces=12 misses=0 elapsed_sec=0.042'
    """
    return (
        f"SUMMARY rows={result.raw_rows} "
        f"dropped={result.dropped_rows} "
        f"excluded={result.excluded_rows} "
        f"included={result.included_rows} "
        f"birthplaces={len(result.frequency)} "
        f"misses={result.field_misses} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )
