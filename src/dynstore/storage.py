"""Direct storage from the sensitivity function.

For daily discharge Q[1..N]:

    dQ[i] = Q[i - 1] - Q[i]        i = 2..N
    y[i]  = dQ[i] / g(Q[i])

The cumulative trapezoidal integral of y over x = 1..N-1 (starting at 0),
prefixed with S_d[1] = 0, gives the direct storage. Negative values are
clamped to zero.
"""

import numpy as np
from scipy.integrate import cumulative_trapezoid

from .exceptions import InsufficientDataError
from .regression import SensitivityModel


def integrate_direct_storage(daily_q: np.ndarray, model: SensitivityModel) -> np.ndarray:
    """Cumulative direct storage (mm), one value per day.

    Args:
        daily_q: Mean daily discharge depth (mm/day)
        model: Fitted sensitivity model

    Returns:
        Array of the same length as daily_q, first value exactly 0

    Raises:
        InsufficientDataError: If fewer than two days are given
        DomainError: If any discharge after the first day is non-positive
    """
    q = np.asarray(daily_q, dtype=float)
    if q.size < 2:
        raise InsufficientDataError(f"Direct storage needs at least 2 days of discharge, got {q.size}")

    y = (q[:-1] - q[1:]) / model.g(q[1:])
    x = np.arange(1, q.size, dtype=float)
    s_d = np.concatenate([[0.0], cumulative_trapezoid(y, x, initial=0)])
    return np.clip(s_d, 0.0, None)
