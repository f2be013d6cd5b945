"""Shared synthetic series for the storage pipeline tests."""

from datetime import datetime, timedelta

import numpy as np
import polars as pl
import pytest

# q_mm per hour equals discharge_m3s for this area (Q * 3600 / A * 1000)
UNIT_AREA_M2 = 3.6e6

START = datetime(2024, 6, 1)


def hourly_timestamps(n_hours: int) -> pl.Series:
    return pl.datetime_range(
        START, START + timedelta(hours=n_hours - 1), interval="1h", eager=True
    ).alias("timestamp")


def make_readings(discharge: np.ndarray, precip: np.ndarray, temp: np.ndarray) -> pl.DataFrame:
    """Hourly readings on the hour, one per row."""
    return pl.DataFrame(
        {
            "timestamp": hourly_timestamps(len(discharge)),
            "precip_mm": np.asarray(precip, dtype=float),
            "discharge_m3s": np.asarray(discharge, dtype=float),
            "temp_c": np.asarray(temp, dtype=float),
        }
    )


@pytest.fixture
def recession_readings() -> pl.DataFrame:
    """30 days of hourly readings with one 10-day rain-free exponential recession.

    - hours 0-479: Q = 10 * exp(-0.05 * t_days)
    - hours 480-719: Q held at its hour-479 value
    - 0.5 mm/h of rain on hours 0-215 and 480-719, dry on hours 216-479
    """
    hours = np.arange(720)
    k = 0.05 / 24
    discharge = 10.0 * np.exp(-k * np.minimum(hours, 479))
    precip = np.where((hours <= 215) | (hours >= 480), 0.5, 0.0)
    temp = 12.0 + 6.0 * np.sin(2 * np.pi * (hours % 24) / 24)
    return make_readings(discharge, precip, temp)


@pytest.fixture
def exponential_pool() -> pl.DataFrame:
    """238 derivative points on an exact power law dq = -0.01 * q."""
    q = 10.0 * np.exp(-0.002 * np.arange(238))
    dq = -0.01 * q
    return pl.DataFrame(
        {
            "group_id": np.zeros(q.size, dtype=np.int64),
            "dt": np.ones(q.size, dtype=np.int64),
            "q": q,
            "dq": dq,
            "log_q": np.log(q),
            "log_dq": np.log(np.abs(dq)),
        }
    )
