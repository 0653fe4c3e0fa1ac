from __future__ import annotations

from ..models.processing_result import BatchResult

"""SUMMARY line rendering for an import run."""


def _format_number(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # 指数表記を避ける
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.2f}".rstrip("0").rstrip(".")


def render_summary_line(result: BatchResult) -> str:
    """Render the SUMMARY line for a BatchResult.

    Format:
    SUMMARY total={total} success={succeeded} failed={failed} elapsed_sec={elapsed} throughput_rps={throughput}

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = BatchResult(
        ...     total=3, succeeded=2, failed=1, start_time=start, end_time=end,
        ...     elapsed_seconds=2.0, throughput_rows_per_sec=1.0,
        ... )
        >>> render_summary_line(result)
        'SUMMARY total=3 success=2 failed=1 elapsed_sec=2 throughput_rps=1'
    """
    return (
        f"SUMMARY total={result.total} "
        f"success={result.succeeded} "
        f"failed={result.failed} "
        f"elapsed_sec={_format_number(result.elapsed_seconds)} "
        f"throughput_rps={_format_number(result.throughput_rows_per_sec)}"
    )
