"""Aggregation of irregular raw readings into regular hourly and daily series.

Discharge is converted from a volume rate (m^3/s) to a depth over the
catchment for each interval:

    depth_mm = Q * seconds_in_interval / catchment_area_m2 * 1000

Precipitation is summed per interval (missing readings count as zero),
discharge and temperature are averaged.
"""

import logging

import polars as pl

from .exceptions import DataGapError

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("timestamp", "precip_mm", "discharge_m3s", "temp_c")

SECONDS_PER_INTERVAL = {"1h": 3600, "1d": 86400}


def discharge_to_depth(discharge_m3s: pl.Expr, seconds: int, catchment_area_m2: float) -> pl.Expr:
    """Convert a discharge rate expression into depth (mm) per interval."""
    return discharge_m3s * seconds / catchment_area_m2 * 1000


def _validate_readings(readings: pl.DataFrame, catchment_area_m2: float) -> None:
    missing = [c for c in REQUIRED_COLUMNS if c not in readings.columns]
    if missing:
        raise ValueError(f"Readings are missing required columns: {missing}")
    if readings.is_empty():
        raise ValueError("Readings are empty")
    if catchment_area_m2 <= 0:
        raise ValueError(f"Catchment area must be positive, got {catchment_area_m2}")


def _resample(readings: pl.DataFrame, every: str, catchment_area_m2: float) -> pl.DataFrame:
    """Bin readings on a regular grid and raise on intervals without discharge."""
    _validate_readings(readings, catchment_area_m2)
    seconds = SECONDS_PER_INTERVAL[every]

    binned = (
        readings.with_columns(pl.col("timestamp").dt.truncate(every))
        .group_by("timestamp")
        .agg(
            pl.col("precip_mm").sum(),
            pl.col("discharge_m3s").mean(),
            pl.col("discharge_m3s").count().alias("n_q"),
            pl.col("temp_c").mean(),
        )
        .sort("timestamp")
        # Insert rows for intervals that received no readings at all
        .upsample(time_column="timestamp", every=every)
    )

    gaps = binned.filter(pl.col("n_q").fill_null(0) == 0)
    if len(gaps) > 0:
        raise DataGapError(
            f"{len(gaps)} interval(s) of {every} have no discharge observations, "
            f"first at {gaps['timestamp'][0]}"
        )

    return binned.select(
        "timestamp",
        pl.col("precip_mm").fill_null(0.0),
        discharge_to_depth(pl.col("discharge_m3s"), seconds, catchment_area_m2).alias("q_mm"),
        "temp_c",
    )


def resample_hourly(readings: pl.DataFrame, catchment_area_m2: float) -> pl.DataFrame:
    """Resample raw readings to a regular hourly series.

    Args:
        readings: Raw readings with timestamp, precip_mm, discharge_m3s, temp_c
        catchment_area_m2: Catchment area in square metres

    Returns:
        DataFrame with columns row, timestamp, precip_mm, q_mm (mm/h), temp_c

    Raises:
        DataGapError: If any hour has no discharge observation
        ValueError: If required columns are missing or the area is not positive
    """
    hourly = _resample(readings, "1h", catchment_area_m2).with_row_index("row")
    logger.info(f"Resampled {len(readings):,} readings to {len(hourly):,} hourly rows")
    return hourly


def resample_daily(readings: pl.DataFrame, catchment_area_m2: float) -> pl.DataFrame:
    """Resample raw readings to a regular daily series.

    Args:
        readings: Raw readings with timestamp, precip_mm, discharge_m3s, temp_c
        catchment_area_m2: Catchment area in square metres

    Returns:
        DataFrame with columns date, precip_mm, q_mm (mm/day), temp_c

    Raises:
        DataGapError: If any day has no discharge observation
        ValueError: If required columns are missing or the area is not positive
    """
    daily = _resample(readings, "1d", catchment_area_m2).select(
        pl.col("timestamp").dt.date().alias("date"),
        "precip_mm",
        "q_mm",
        "temp_c",
    )
    logger.info(f"Resampled {len(readings):,} readings to {len(daily):,} daily rows")
    return daily
