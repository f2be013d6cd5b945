"""Central-difference recession rates at each group's assigned timestep."""

import logging

import numpy as np
import polars as pl

from .exceptions import DomainError, InsufficientDataError
from .recession import RecessionGroup
from .timestep import subsample

logger = logging.getLogger(__name__)

POOL_SCHEMA = {
    "group_id": pl.Int64,
    "dt": pl.Int64,
    "q": pl.Float64,
    "dq": pl.Float64,
    "log_q": pl.Float64,
    "log_dq": pl.Float64,
}


def central_differences(q: np.ndarray, dt: int) -> tuple[np.ndarray, np.ndarray]:
    """Rate and representative discharge at the interior points of a subsampled series.

    With lag = q[j - dt] and lead = q[j + dt]:
        dq = (lead - lag) / (2 * dt)
        q  = (lead + lag) / 2

    Args:
        q: Discharge values already subsampled at stride dt
        dt: Sampling interval in hours

    Returns:
        Tuple of (representative q, dq/dt), each of length len(q) - 2
    """
    lag = q[:-2]
    lead = q[2:]
    return (lead + lag) / 2, (lead - lag) / (2 * dt)


def group_derivatives(q_smooth: np.ndarray, group: RecessionGroup) -> pl.DataFrame:
    """Derivative points for one group at its assigned dt.

    Raises:
        ValueError: If the group has no dt assigned
        DomainError: If a representative discharge is non-positive or a rate is zero
    """
    if group.dt is None:
        raise ValueError(f"Group {group.group_id} has no timestep assigned")

    q, dq = central_differences(q_smooth[subsample(group, group.dt)], group.dt)
    if np.any(q <= 0):
        raise DomainError(f"Non-positive discharge in group {group.group_id}; log is undefined")
    if np.any(dq == 0):
        raise DomainError(f"Zero recession rate in group {group.group_id}; log is undefined")

    return pl.DataFrame(
        {
            "group_id": np.full(q.size, group.group_id),
            "dt": np.full(q.size, group.dt),
            "q": q,
            "dq": dq,
            "log_q": np.log(q),
            "log_dq": np.log(np.abs(dq)),
        },
        schema=POOL_SCHEMA,
    )


def pool_derivatives(q_smooth: np.ndarray, groups: list[RecessionGroup]) -> pl.DataFrame:
    """Stack derivative points from all groups into one pool.

    Raises:
        InsufficientDataError: If the groups yield no interior points
    """
    frames = [group_derivatives(q_smooth, group) for group in groups]
    pool = pl.concat(frames) if frames else pl.DataFrame(schema=POOL_SCHEMA)
    if pool.is_empty():
        raise InsufficientDataError("Recession groups produced no derivative points")

    logger.info(f"Pooled {len(pool):,} derivative points from {len(groups)} group(s)")
    return pool
