"""Per-group choice of the sampling interval used for differentiation.

At hourly resolution, successive differences of a slow recession are often
smaller than the noise floor of the record. Each group is tested at strides
of 1, 2, 3 and 4 hours in turn: a group whose smallest drop between
successive subsampled values reaches the threshold

    tau = 0.001 * mean(q_smooth over the full record)

is accepted at that stride. Groups falling short are passed on to the next,
coarser stride; groups that still fall short at the last stride are dropped.
"""

import logging
from collections import Counter
from dataclasses import dataclass, replace

import numpy as np

from .exceptions import InsufficientDataError
from .recession import RecessionGroup

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Accepted:
    """Group accepted at sampling interval dt (hours)."""

    dt: int


@dataclass(frozen=True)
class Rejected:
    """Group too noisy at the tested stride; the smallest drop is kept for logging."""

    min_drop: float


def noise_threshold(q_smooth: np.ndarray, factor: float = 0.001) -> float:
    """Global noise threshold from the mean of the defined smoothed discharge."""
    return float(factor * np.nanmean(q_smooth))


def subsample(group: RecessionGroup, stride: int) -> np.ndarray:
    """Every stride-th row of the group, starting from its first row."""
    return np.asarray(group.rows[::stride])


def classify_group(q_smooth: np.ndarray, group: RecessionGroup, stride: int, tau: float) -> Accepted | Rejected:
    """Test one group at one stride.

    The backward drop at each subsampled row is q[prev] - q[row]. The group
    is accepted when its smallest drop is at least tau.
    """
    rows = subsample(group, stride)
    if rows.size < 2:
        return Rejected(min_drop=float("nan"))

    drops = -np.diff(q_smooth[rows])
    min_drop = float(drops.min())
    if min_drop >= tau:
        return Accepted(dt=stride)
    return Rejected(min_drop=min_drop)


def partition_by_stride(
    q_smooth: np.ndarray,
    groups: list[RecessionGroup],
    stride: int,
    tau: float,
) -> tuple[list[RecessionGroup], list[RecessionGroup]]:
    """Split candidates into (accepted with dt stamped, rejected) at one stride."""
    accepted = []
    rejected = []
    for group in groups:
        verdict = classify_group(q_smooth, group, stride, tau)
        if isinstance(verdict, Accepted):
            accepted.append(replace(group, dt=verdict.dt))
        else:
            logger.debug(
                f"Group {group.group_id} rejected at stride {stride}: min drop {verdict.min_drop:.3g} < {tau:.3g}"
            )
            rejected.append(group)
    return accepted, rejected


def select_timesteps(
    q_smooth: np.ndarray,
    groups: list[RecessionGroup],
    strides: tuple[int, ...] = (1, 2, 3, 4),
    noise_factor: float = 0.001,
) -> list[RecessionGroup]:
    """Assign each group the first stride at which it passes the noise test.

    Strides are evaluated in ascending order and only groups rejected at
    every finer stride are tested at a coarser one.

    Args:
        q_smooth: Smoothed hourly discharge for the full record
        groups: Recession groups from extract_recessions
        strides: Candidate sampling intervals (hours), ascending
        noise_factor: Multiplier of the mean smoothed discharge giving tau

    Returns:
        Time-ordered groups, each with dt set

    Raises:
        InsufficientDataError: If every group is rejected at every stride
    """
    tau = noise_threshold(q_smooth, noise_factor)
    logger.info(f"Noise threshold tau = {tau:.4g} mm/h")

    pending = list(groups)
    pooled: list[RecessionGroup] = []
    for stride in strides:
        if not pending:
            break
        accepted, pending = partition_by_stride(q_smooth, pending, stride, tau)
        pooled.extend(accepted)

    if pending:
        logger.info(f"Dropped {len(pending)} group(s) still too noisy at stride {strides[-1]}")
    if not pooled:
        raise InsufficientDataError(f"All {len(groups)} recession group(s) were rejected at every stride")

    counts = Counter(g.dt for g in pooled)
    summary = ", ".join(f"dt={k}: {counts[k]}" for k in sorted(counts))
    logger.info(f"Timesteps assigned to {len(pooled)} group(s): {summary}")
    return sorted(pooled, key=lambda g: g.start)
