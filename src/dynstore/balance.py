"""Water balance closing direct storage into indirect and total storage.

    cum_q = running sum of daily discharge, minus the first day's value
    cum_p = running sum of daily precipitation
    i_s   = cum_p - cum_q - E_p - d_s

On days where i_s <= 0, E_p is set to 0 and i_s recomputed. Both i_s and
total = cum_p - cum_q - E_p are clamped at 0. Because E_p is zeroed before
total is computed, total and i_s can diverge on those days.
"""

import logging

import numpy as np
import polars as pl

logger = logging.getLogger(__name__)


def compute_water_balance(
    daily: pl.DataFrame,
    direct_storage: np.ndarray,
    evapotranspiration: pl.DataFrame,
) -> pl.DataFrame:
    """Build the daily storage table.

    Args:
        daily: Daily frame with date, precip_mm and q_mm
        direct_storage: Direct storage per day (mm), aligned with daily
        evapotranspiration: Frame with date and e_p (mm/day)

    Returns:
        DataFrame with columns date, mean_daily_q, cum_p, cum_q, d_s, e_p, i_s, total

    Raises:
        ValueError: If direct_storage is not aligned with daily
    """
    if len(direct_storage) != len(daily):
        raise ValueError(
            f"Direct storage has {len(direct_storage)} values for {len(daily)} days"
        )

    table = daily.join(evapotranspiration.select("date", "e_p"), on="date", how="left").sort("date")

    n_missing = table["e_p"].null_count()
    if n_missing:
        logger.warning(f"{n_missing} day(s) have no temperature; their evapotranspiration is taken as 0")

    table = table.with_columns(
        pl.Series("d_s", np.asarray(direct_storage, dtype=float)),
        pl.col("e_p").fill_null(0.0),
        pl.col("precip_mm").cum_sum().alias("cum_p"),
        (pl.col("q_mm").cum_sum() - pl.col("q_mm").first()).alias("cum_q"),
    )

    residual = pl.col("cum_p") - pl.col("cum_q")
    table = table.with_columns(
        pl.when(residual - pl.col("e_p") - pl.col("d_s") <= 0)
        .then(0.0)
        .otherwise(pl.col("e_p"))
        .alias("e_p")
    ).with_columns(
        (residual - pl.col("e_p") - pl.col("d_s")).clip(lower_bound=0.0).alias("i_s"),
        (residual - pl.col("e_p")).clip(lower_bound=0.0).alias("total"),
    )

    n_zeroed = int((table["i_s"] == 0).sum())
    logger.info(f"Water balance over {len(table)} day(s); indirect storage is zero on {n_zeroed}")

    return table.select(
        "date",
        pl.col("q_mm").alias("mean_daily_q"),
        "cum_p",
        "cum_q",
        "d_s",
        "e_p",
        "i_s",
        "total",
    )
