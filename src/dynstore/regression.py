"""Weighted quadratic fit of the discharge sensitivity function.

The binned recession rates are fitted as

    log_dq = p0 + p1 * log_q + p2 * log_q^2

with one observation per bin weighted by the bin weight. The sensitivity
function is then

    g(Q) = p0 + (p1 - 1) * ln(Q) + p2 * ln(Q)^2
"""

import logging
from dataclasses import dataclass

import numpy as np
import polars as pl
from sklearn.linear_model import LinearRegression

from .exceptions import DomainError, InsufficientDataError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SensitivityModel:
    """Fitted coefficients of g(Q) and the weighted R^2 of the fit."""

    p0: float
    p1: float
    p2: float
    r_squared: float

    def g(self, q: np.ndarray | float) -> np.ndarray:
        """Evaluate g at discharge q (mm per interval).

        Raises:
            DomainError: If any q is not strictly positive
        """
        q = np.asarray(q, dtype=float)
        if np.any(~(q > 0)):
            raise DomainError("g(Q) requires strictly positive discharge")
        log_q = np.log(q)
        return self.p0 + (self.p1 - 1) * log_q + self.p2 * log_q**2

    def to_dict(self) -> dict[str, float]:
        return {"p0": self.p0, "p1": self.p1, "p2": self.p2, "r_squared": self.r_squared}


def fit_sensitivity(bins: pl.DataFrame) -> SensitivityModel:
    """Fit the quadratic recession model to binned means.

    Args:
        bins: Bin summary with mean_log_q, mean_log_dq and weight columns

    Returns:
        Fitted SensitivityModel

    Raises:
        InsufficientDataError: If there are fewer than three bins or the
            weighted design matrix is singular
    """
    if len(bins) < 3:
        raise InsufficientDataError(f"A quadratic fit needs at least 3 bins, got {len(bins)}")

    log_q = bins["mean_log_q"].to_numpy()
    y = bins["mean_log_dq"].to_numpy()
    weights = bins["weight"].to_numpy()

    X = np.column_stack([log_q, log_q**2])
    design = np.column_stack([np.ones_like(log_q), X]) * np.sqrt(weights)[:, None]
    if np.linalg.matrix_rank(design) < 3:
        raise InsufficientDataError("Weighted design matrix is singular; bins do not span enough log_q values")

    reg = LinearRegression()
    reg.fit(X, y, sample_weight=weights)
    r_squared = reg.score(X, y, sample_weight=weights)

    model = SensitivityModel(
        p0=float(reg.intercept_),
        p1=float(reg.coef_[0]),
        p2=float(reg.coef_[1]),
        r_squared=float(r_squared),
    )
    logger.info(
        f"Fitted g(Q): p0={model.p0:.4f}, p1={model.p1:.4f}, p2={model.p2:.4f}, R²={model.r_squared:.3f}"
    )
    return model
