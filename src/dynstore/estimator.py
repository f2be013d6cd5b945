"""StorageEstimator class for computing dynamic catchment storage from raw readings."""

import logging
from collections import Counter
from pathlib import Path

import polars as pl

from .balance import compute_water_balance
from .binning import bin_points
from .config import PipelineConfig
from .derivative import pool_derivatives
from .evapotranspiration import daily_evapotranspiration
from .recession import RecessionGroup, extract_recessions
from .regression import SensitivityModel, fit_sensitivity
from .resample import resample_daily, resample_hourly
from .smoothing import smooth_discharge
from .storage import integrate_direct_storage
from .timestep import select_timesteps

logger = logging.getLogger(__name__)


class StorageEstimator:
    """Estimate direct, indirect and total storage for a single catchment.

    This class resamples raw readings, extracts recession limbs, fits the
    discharge sensitivity function g(Q), integrates direct storage and
    closes the water balance.

    Attributes:
        readings: Raw readings (timestamp, precip_mm, discharge_m3s, temp_c)
        catchment_area_m2: Catchment area used for unit conversion
        latitude_deg: Site latitude used for extraterrestrial radiation
        start_row: First hourly row scanned for recessions
        config: Pipeline constants
        results: Daily storage table (None until compute_storage() is called)
        model: Fitted sensitivity model (None until compute_storage() is called)

    Example:
        >>> estimator = StorageEstimator.from_file(
        ...     "readings.parquet", catchment_area_m2=2.5e7, latitude_deg=46.5
        ... )
        >>> results = estimator.compute_storage()
        >>> estimator.to_parquet("storage.parquet")
    """

    def __init__(
        self,
        readings: pl.DataFrame,
        catchment_area_m2: float,
        latitude_deg: float,
        start_row: int | None = None,
        config: PipelineConfig | None = None,
    ) -> None:
        """Initialize StorageEstimator.

        Args:
            readings: Raw irregular readings
            catchment_area_m2: Catchment area in square metres
            latitude_deg: Site latitude in decimal degrees (positive north)
            start_row: First hourly row to scan (default: the later of the smoothing
                window and the antecedent window)
            config: Pipeline constants (default: PipelineConfig())

        Raises:
            ValueError: If the area is not positive or the latitude is out of range
        """
        if catchment_area_m2 <= 0:
            raise ValueError(f"Catchment area must be positive, got {catchment_area_m2}")
        if not -90.0 <= latitude_deg <= 90.0:
            raise ValueError(f"Latitude must be within [-90, 90], got {latitude_deg}")

        self.readings = readings
        self.catchment_area_m2 = catchment_area_m2
        self.latitude_deg = latitude_deg
        self.config = config or PipelineConfig()
        if start_row is None:
            start_row = max(self.config.smoothing_window, self.config.antecedent_hours)
        self.start_row = start_row

        self.hourly: pl.DataFrame | None = None
        self.daily: pl.DataFrame | None = None
        self.groups: list[RecessionGroup] = []
        self.pool: pl.DataFrame | None = None
        self.bins: pl.DataFrame | None = None
        self.model: SensitivityModel | None = None
        self.results: pl.DataFrame | None = None

    @classmethod
    def from_file(cls, path: str, **kwargs) -> "StorageEstimator":
        """Load raw readings from a CSV or Parquet file.

        Raises:
            FileNotFoundError: If path does not exist
            ValueError: If the file extension is not supported
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Readings file not found: {path}")

        if path.suffix == ".parquet":
            readings = pl.read_parquet(path)
        elif path.suffix == ".csv":
            readings = pl.read_csv(path, try_parse_dates=True)
        else:
            raise ValueError(f"Unsupported readings format: {path.suffix}")

        logger.info(f"Loaded {len(readings):,} readings from {path}")
        return cls(readings, **kwargs)

    def compute_storage(self) -> pl.DataFrame:
        """Run the full pipeline and return the daily storage table.

        Returns:
            DataFrame with columns:
                - date: Calendar day
                - mean_daily_q: Mean discharge (mm/day)
                - cum_p: Cumulative precipitation (mm)
                - cum_q: Cumulative discharge, zeroed on the first day (mm)
                - d_s: Direct storage (mm)
                - e_p: Potential evapotranspiration (mm/day)
                - i_s: Indirect storage (mm)
                - total: Total storage (mm)

        Intermediate artifacts are stored on the estimator only once every
        stage has succeeded; a failing run leaves the previous state in place.
        """
        cfg = self.config

        hourly = smooth_discharge(resample_hourly(self.readings, self.catchment_area_m2), cfg.smoothing_window)
        daily = resample_daily(self.readings, self.catchment_area_m2)
        q_smooth = hourly["q_smooth"].to_numpy().astype(float)

        groups = extract_recessions(hourly, self.start_row, cfg)
        groups = select_timesteps(q_smooth, groups, cfg.strides, cfg.noise_factor)
        pool = pool_derivatives(q_smooth, groups)

        _, bins = bin_points(pool, cfg.min_bin_points, cfg.min_span_fraction)
        model = fit_sensitivity(bins)

        d_s = integrate_direct_storage(daily["q_mm"].to_numpy(), model)
        et = daily_evapotranspiration(hourly, self.latitude_deg)
        results = compute_water_balance(daily, d_s, et)

        self.hourly, self.daily = hourly, daily
        self.groups, self.pool, self.bins = groups, pool, bins
        self.model, self.results = model, results

        logger.info(f"Computed storage for {len(results)} day(s)")
        return results

    def summary(self) -> dict:
        """Sensitivity coefficients with R², group count, dt distribution and bin count.

        Raises:
            RuntimeError: If compute_storage() has not been called yet
        """
        if self.model is None:
            raise RuntimeError("No model fitted. Call compute_storage() first.")

        return {
            **self.model.to_dict(),
            "n_groups": len(self.groups),
            "dt_counts": dict(sorted(Counter(g.dt for g in self.groups).items())),
            "n_bins": len(self.bins),
        }

    def to_parquet(self, path: str) -> None:
        """Save the storage table to a parquet file.

        Args:
            path: Output path for parquet file

        Raises:
            RuntimeError: If compute_storage() has not been called yet
        """
        if self.results is None:
            raise RuntimeError(
                "No results to save. Call compute_storage() first."
            )

        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        logger.info(f"Saving {len(self.results)} rows to {output_path}")
        self.results.write_parquet(output_path)
        logger.info("Save complete")
