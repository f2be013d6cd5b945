"""Extraction of rain-free, declining-discharge segments from the hourly record.

A row i is selected when both hold:
1. the mean hourly precipitation over rows [i - 24, i] is below 0.002 mm
2. smoothed discharge is strictly falling, q_smooth[i] < q_smooth[i - 1]

Selected rows are then grouped into maximal runs of consecutive hours and
runs shorter than 24 samples are discarded.
"""

import logging
from dataclasses import dataclass

import numpy as np
import polars as pl

from .config import PipelineConfig
from .exceptions import InsufficientDataError, PreconditionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecessionGroup:
    """A contiguous run of selected hourly rows.

    Attributes:
        group_id: Sequential identifier in time order
        rows: Hourly row positions, consecutive and ascending
        dt: Sampling interval in hours, None until a timestep is assigned
    """

    group_id: int
    rows: tuple[int, ...]
    dt: int | None = None

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def start(self) -> int:
        return self.rows[0]

    @property
    def end(self) -> int:
        return self.rows[-1]


def antecedent_rainfall(precip: np.ndarray, rows: np.ndarray, hours: int = 24) -> np.ndarray:
    """Mean precipitation over the inclusive window [row - hours, row] for each row."""
    csum = np.concatenate([[0.0], np.cumsum(precip, dtype=float)])
    return (csum[rows + 1] - csum[rows - hours]) / (hours + 1)


def select_recession_rows(
    precip: np.ndarray,
    q_smooth: np.ndarray,
    start_row: int,
    antecedent_hours: int = 24,
    rain_threshold_mm: float = 0.002,
) -> np.ndarray:
    """Return the hourly rows that satisfy the no-rain and falling-discharge predicates.

    Rows are scanned from start_row to len(q_smooth) - 2 inclusive.

    Args:
        precip: Hourly precipitation (mm)
        q_smooth: Smoothed hourly discharge (mm/h), NaN where undefined
        start_row: First row to test
        antecedent_hours: Lookback of the antecedent rainfall window
        rain_threshold_mm: Antecedent mean must be strictly below this

    Returns:
        Ascending array of selected row positions

    Raises:
        PreconditionError: If the antecedent window or the previous smoothed
            value is undefined at start_row
    """
    if start_row - antecedent_hours < 0:
        raise PreconditionError(
            f"start_row {start_row} leaves the {antecedent_hours} h antecedent window before the first row"
        )
    if start_row < 1 or start_row > len(q_smooth) or np.isnan(q_smooth[start_row - 1]):
        raise PreconditionError(f"Smoothed discharge is not defined before start_row {start_row}")

    rows = np.arange(start_row, len(q_smooth) - 1)
    if rows.size == 0:
        return rows

    dry = antecedent_rainfall(precip, rows, antecedent_hours) < rain_threshold_mm
    falling = q_smooth[rows] < q_smooth[rows - 1]
    return rows[dry & falling]


def group_recession_rows(rows: np.ndarray, min_length: int = 24) -> list[RecessionGroup]:
    """Split selected rows into runs of consecutive hours and drop short runs."""
    if rows.size == 0:
        return []

    breaks = np.flatnonzero(np.diff(rows) != 1) + 1
    runs = [run for run in np.split(rows, breaks) if len(run) >= min_length]
    return [RecessionGroup(group_id=i, rows=tuple(int(r) for r in run)) for i, run in enumerate(runs)]


def extract_recessions(
    hourly: pl.DataFrame,
    start_row: int,
    config: PipelineConfig = PipelineConfig(),
) -> list[RecessionGroup]:
    """Find recession groups in a smoothed hourly series.

    Args:
        hourly: Hourly frame with row, precip_mm and q_smooth columns
        start_row: First row to scan
        config: Pipeline constants

    Returns:
        Time-ordered, non-overlapping groups of at least min_group_length rows

    Raises:
        PreconditionError: If start_row is too early for the lookback windows or
            the row column is not a contiguous 0-based index
        InsufficientDataError: If no group survives the length filter
    """
    row = hourly["row"].to_numpy().astype(np.int64)
    if not np.array_equal(row, np.arange(len(hourly))):
        raise PreconditionError("Hourly frame must be sorted with a contiguous 0-based row index")

    precip = hourly["precip_mm"].to_numpy().astype(float)
    q_smooth = hourly["q_smooth"].to_numpy().astype(float)

    selected = select_recession_rows(
        precip,
        q_smooth,
        start_row,
        antecedent_hours=config.antecedent_hours,
        rain_threshold_mm=config.rain_threshold_mm,
    )
    groups = group_recession_rows(row[selected], config.min_group_length)

    logger.info(f"Selected {len(selected):,} recession rows forming {len(groups)} group(s)")
    if not groups:
        raise InsufficientDataError(
            f"No recession group of at least {config.min_group_length} hours found after row {start_row}"
        )
    return groups
