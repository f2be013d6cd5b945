"""Unit tests for the trailing moving average."""

import numpy as np
import polars as pl
import pytest

from dynstore.smoothing import smooth_discharge


class TestSmoothDischarge:
    """Tests for smooth_discharge."""

    def test_undefined_before_window(self) -> None:
        """The first window - 1 rows are null and not backfilled."""
        hourly = pl.DataFrame({"q_mm": np.arange(100, dtype=float)})
        smoothed = smooth_discharge(hourly, window=72)

        assert smoothed["q_smooth"][:71].null_count() == 71
        assert smoothed["q_smooth"][71] == pytest.approx(np.arange(72).mean())

    def test_trailing_window(self) -> None:
        """Each value is the mean of the current and preceding rows."""
        q = np.array([4.0, 2.0, 6.0, 8.0, 1.0])
        smoothed = smooth_discharge(pl.DataFrame({"q_mm": q}), window=3)

        assert smoothed["q_smooth"].to_list()[2:] == pytest.approx([4.0, 16 / 3, 5.0])

    def test_raw_column_kept(self) -> None:
        """Raw discharge is left untouched for display."""
        q = np.linspace(5, 1, 80)
        smoothed = smooth_discharge(pl.DataFrame({"q_mm": q}))
        assert smoothed["q_mm"].to_numpy() == pytest.approx(q)

    def test_missing_column_raises(self) -> None:
        """A frame without q_mm is rejected."""
        with pytest.raises(ValueError, match="q_mm"):
            smooth_discharge(pl.DataFrame({"q": [1.0]}))
