"""Daily potential evapotranspiration from the Hargreaves equation.

    E_p = 0.0023 * (T_mean + 17.8) * (T_max - T_min)^0.5 * 0.408 * R_a

where T_mean, T_max and T_min are the within-day mean and extrema of the
hourly temperature (°C) and R_a is the extraterrestrial radiation
(MJ m-2 day-1); 0.408 converts R_a to equivalent evaporation (mm/day).

Reference:
Allen, R.G., Pereira, L.S., Raes, D., Smith, M. (1998). "Crop
evapotranspiration: Guidelines for computing crop water requirements."
FAO Irrigation and Drainage Paper 56.
"""

import logging
from collections.abc import Sequence

import numpy as np
import polars as pl

logger = logging.getLogger(__name__)

SOLAR_CONSTANT = 0.0820  # MJ m-2 min-1


def extraterrestrial_radiation(day_of_year: Sequence[int] | int, latitude_deg: float) -> np.ndarray:
    """Extraterrestrial radiation for daily periods (FAO-56 eq. 21).

    Args:
        day_of_year: Julian day (1-365/366)
        latitude_deg: Latitude in decimal degrees (positive north)

    Returns:
        R_a in MJ m-2 day-1
    """
    phi = np.deg2rad(latitude_deg)
    doy = np.asarray(day_of_year, dtype=float)
    dr = 1.0 + 0.033 * np.cos(2.0 * np.pi * doy / 365.0)
    delta = 0.409 * np.sin(2.0 * np.pi * doy / 365.0 - 1.39)
    omega_s = np.arccos(np.clip(-np.tan(phi) * np.tan(delta), -1.0, 1.0))
    return (
        (24.0 * 60.0 / np.pi)
        * SOLAR_CONSTANT
        * dr
        * (omega_s * np.sin(phi) * np.sin(delta) + np.cos(phi) * np.cos(delta) * np.sin(omega_s))
    )


def hargreaves(t_mean: np.ndarray, t_max: np.ndarray, t_min: np.ndarray, ra: np.ndarray) -> np.ndarray:
    """Hargreaves potential evapotranspiration in mm/day."""
    return 0.0023 * (t_mean + 17.8) * np.sqrt(t_max - t_min) * 0.408 * ra


def daily_evapotranspiration(hourly: pl.DataFrame, latitude_deg: float) -> pl.DataFrame:
    """Potential evapotranspiration per day from hourly temperature.

    Args:
        hourly: Hourly frame with timestamp and temp_c columns
        latitude_deg: Site latitude in decimal degrees

    Returns:
        DataFrame with columns date, t_mean, t_max, t_min, ra, e_p
    """
    days = (
        hourly.group_by(pl.col("timestamp").dt.date().alias("date"))
        .agg(
            pl.col("temp_c").mean().alias("t_mean"),
            pl.col("temp_c").max().alias("t_max"),
            pl.col("temp_c").min().alias("t_min"),
        )
        .sort("date")
    )

    ra = extraterrestrial_radiation(days["date"].dt.ordinal_day().to_numpy(), latitude_deg)
    e_p = hargreaves(
        days["t_mean"].to_numpy(),
        days["t_max"].to_numpy(),
        days["t_min"].to_numpy(),
        ra,
    )
    logger.info(f"Computed potential ET for {len(days)} day(s) at latitude {latitude_deg}")
    return days.with_columns(pl.Series("ra", ra), pl.Series("e_p", e_p))
