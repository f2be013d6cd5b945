"""Greedy variable-width binning of pooled (log q, log |dq/dt|) points.

Points are sorted by descending log_q and scanned once. The current bin
starts at the last boundary; at each candidate row r the bin [start, r] is
closed, and r + 1 becomes the next boundary, only when all three hold:

1. span: |log_q[start] - log_q[r + 1]| exceeds 1% of the total log_q range
2. count: the bin holds at least 45 points
3. homogeneity: the standard error of {-dq[start], -dq[r]} is at most half
   of their mean

Rows after the last boundary that never form a complete bin are merged into
the last closed bin, so every point belongs to exactly one bin.
"""

import logging
import math

import numpy as np
import polars as pl

from .exceptions import InsufficientDataError

logger = logging.getLogger(__name__)


def span_ok(log_q: np.ndarray, start: int, r: int, min_span: float) -> bool:
    return abs(log_q[start] - log_q[r + 1]) > min_span


def count_ok(start: int, r: int, min_points: int) -> bool:
    return r - start + 1 >= min_points


def homogeneous(dq: np.ndarray, start: int, r: int) -> bool:
    """Standard error of the two edge rates is within half their mean."""
    edges = np.array([-dq[start], -dq[r]])
    se = edges.std(ddof=1) / math.sqrt(r - start + 1)
    return se <= edges.mean() / 2


def find_bin_boundaries(
    log_q: np.ndarray,
    dq: np.ndarray,
    min_points: int = 45,
    min_span_fraction: float = 0.01,
) -> list[int]:
    """Start rows of each bin over points sorted by descending log_q.

    Args:
        log_q: Log discharge, sorted descending
        dq: Recession rates in the same order
        min_points: Minimum points per bin
        min_span_fraction: Minimum log_q span per bin as a fraction of the range

    Returns:
        Strictly increasing start rows, the first always 0. The final start
        row closes a complete bin only if it is followed by another start.
    """
    n = len(log_q)
    if n == 0:
        return []

    min_span = min_span_fraction * abs(log_q.min() - log_q.max())
    boundaries = [0]
    for r in range(n - 1):
        start = boundaries[-1]
        if r < start:
            continue
        if span_ok(log_q, start, r, min_span) and count_ok(start, r, min_points) and homogeneous(dq, start, r):
            boundaries.append(r + 1)
    return boundaries


def assign_categories(pool: pl.DataFrame, min_points: int = 45, min_span_fraction: float = 0.01) -> pl.DataFrame:
    """Sort the pool by descending log_q and label each row with its bin.

    Raises:
        InsufficientDataError: If no complete bin can be formed
    """
    ordered = pool.sort("log_q", descending=True, maintain_order=True)
    boundaries = find_bin_boundaries(
        ordered["log_q"].to_numpy(),
        ordered["dq"].to_numpy(),
        min_points=min_points,
        min_span_fraction=min_span_fraction,
    )
    if len(boundaries) < 2:
        raise InsufficientDataError(
            f"No bin of at least {min_points} points could be formed from {len(ordered)} derivative points"
        )

    # Trailing rows after the last closed bin join that bin
    starts = np.asarray(boundaries[:-1])
    category = np.searchsorted(starts, np.arange(len(ordered)), side="right") - 1
    return ordered.with_columns(pl.Series("category", category, dtype=pl.Int64))


def bin_points(
    pool: pl.DataFrame,
    min_points: int = 45,
    min_span_fraction: float = 0.01,
) -> tuple[pl.DataFrame, pl.DataFrame]:
    """Bin the derivative pool and summarise each bin.

    The standard error of log |dq| and the weight 1 / sqrt(se) are computed
    twice: per row over each category, and again from the bin aggregate.
    The per-row values are kept on the rows, the bin keeps both the
    recomputed se and the maximum of the per-row fields. Both use the same
    category grouping and log_dq is log |dq|, so se_row_max always equals
    se_log_dq and weight equals 1 / sqrt(se_log_dq).

    Args:
        pool: Derivative points with q, dq, log_q, log_dq
        min_points: Minimum points per bin
        min_span_fraction: Minimum log_q span per bin as a fraction of the range

    Returns:
        Tuple of (rows with category, se_row, weight_row; one row per bin)

    Raises:
        InsufficientDataError: If no bin forms or a bin has zero spread in log_dq
    """
    rows = (
        assign_categories(pool, min_points, min_span_fraction)
        .with_columns(
            (pl.col("dq").abs().log().std().over("category") / pl.len().over("category").sqrt()).alias("se_row")
        )
        .with_columns((1 / pl.col("se_row").sqrt()).alias("weight_row"))
    )

    bins = (
        rows.group_by("category")
        .agg(
            pl.len().alias("n_points"),
            (-pl.col("dq")).mean().alias("mean_neg_dq"),
            pl.col("q").mean().alias("mean_q"),
            pl.col("log_q").mean().alias("mean_log_q"),
            pl.col("log_dq").mean().alias("mean_log_dq"),
            (pl.col("log_dq").std() / pl.len().sqrt()).alias("se_log_dq"),
            pl.col("se_row").max().alias("se_row_max"),
            pl.col("weight_row").max().alias("weight"),
        )
        .sort("category")
    )

    se = bins["se_log_dq"].to_numpy()
    if np.any(~np.isfinite(se)) or np.any(se <= 0):
        raise InsufficientDataError("A bin has no spread in log_dq; its weight is undefined")

    logger.info(f"Built {len(bins)} bin(s) from {len(rows):,} points")
    return rows, bins
