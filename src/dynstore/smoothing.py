"""Trailing moving average over hourly discharge."""

import polars as pl


def smooth_discharge(hourly: pl.DataFrame, window: int = 72) -> pl.DataFrame:
    """Add a trailing simple moving average of q_mm as q_smooth.

    The first ``window - 1`` rows are left null; they are not backfilled.
    Recession detection and all derivative work use q_smooth, the raw q_mm
    column is kept for display only.
    """
    if "q_mm" not in hourly.columns:
        raise ValueError("Hourly series is missing column 'q_mm'")
    return hourly.with_columns(pl.col("q_mm").rolling_mean(window_size=window).alias("q_smooth"))
