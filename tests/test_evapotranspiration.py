"""Unit tests for Hargreaves evapotranspiration."""

from datetime import datetime

import numpy as np
import polars as pl
import pytest

from dynstore.evapotranspiration import daily_evapotranspiration, extraterrestrial_radiation, hargreaves


class TestExtraterrestrialRadiation:
    """Tests against FAO-56 reference values."""

    def test_fao56_example_8(self) -> None:
        """3 September at 20°S gives 32.2 MJ m-2 day-1 (FAO-56 example 8)."""
        ra = extraterrestrial_radiation(246, -20.0)
        assert float(ra) == pytest.approx(32.2, rel=0.01)

    def test_polar_night(self) -> None:
        """No radiation reaches 80°N at the winter solstice."""
        assert float(extraterrestrial_radiation(355, 80.0)) == pytest.approx(0.0, abs=1e-9)

    def test_vectorised(self) -> None:
        """Summer radiation exceeds winter radiation in the northern hemisphere."""
        ra = extraterrestrial_radiation([15, 172], 45.0)
        assert ra.shape == (2,)
        assert ra[1] > ra[0] > 0


class TestHargreaves:
    """Tests for the Hargreaves formula."""

    def test_known_value(self) -> None:
        """0.0023 * 37.8 * sqrt(10) * 0.408 * 30."""
        e_p = hargreaves(np.array([20.0]), np.array([25.0]), np.array([15.0]), np.array([30.0]))
        assert e_p[0] == pytest.approx(3.36513, rel=1e-4)

    def test_no_temperature_range(self) -> None:
        """A day with constant temperature has no evapotranspiration."""
        e_p = hargreaves(np.array([20.0]), np.array([20.0]), np.array([20.0]), np.array([30.0]))
        assert e_p[0] == 0.0


class TestDailyEvapotranspiration:
    """Tests for daily_evapotranspiration."""

    def test_daily_extremes_from_hourly(self) -> None:
        """Daily mean, max and min are taken from hourly temperature."""
        timestamps = pl.datetime_range(
            datetime(2024, 7, 1), datetime(2024, 7, 2, 23), interval="1h", eager=True
        )
        temp = np.concatenate([np.linspace(10, 20, 24), np.linspace(5, 25, 24)])
        hourly = pl.DataFrame({"timestamp": timestamps, "temp_c": temp})

        days = daily_evapotranspiration(hourly, latitude_deg=46.5)

        assert days.columns == ["date", "t_mean", "t_max", "t_min", "ra", "e_p"]
        assert days["t_max"].to_list() == pytest.approx([20.0, 25.0])
        assert days["t_min"].to_list() == pytest.approx([10.0, 5.0])
        assert days["t_mean"].to_list() == pytest.approx([15.0, 15.0])

        ra = extraterrestrial_radiation([183, 184], 46.5)
        expected = hargreaves(np.array([15.0, 15.0]), np.array([20.0, 25.0]), np.array([10.0, 5.0]), ra)
        assert days["e_p"].to_numpy() == pytest.approx(expected)
