"""Unit tests for direct storage integration."""

import numpy as np
import pytest

from dynstore.exceptions import DomainError, InsufficientDataError
from dynstore.regression import SensitivityModel
from dynstore.storage import integrate_direct_storage

CONSTANT_G = SensitivityModel(p0=2.0, p1=1.0, p2=0.0, r_squared=1.0)


class TestIntegrateDirectStorage:
    """Tests for integrate_direct_storage."""

    def test_trapezoidal_integral(self) -> None:
        """dQ / g is integrated with the trapezoid rule after a leading zero."""
        s_d = integrate_direct_storage(np.array([10.0, 8.0, 6.0, 6.0]), CONSTANT_G)
        # y = [1, 1, 0] over x = [1, 2, 3]
        assert s_d.tolist() == pytest.approx([0.0, 0.0, 1.0, 1.5])

    def test_first_value_exactly_zero(self) -> None:
        rng = np.random.default_rng(2)
        s_d = integrate_direct_storage(rng.uniform(1, 20, 50), CONSTANT_G)
        assert s_d[0] == 0.0
        assert len(s_d) == 50

    def test_negative_storage_clamped(self) -> None:
        """A negative g drives the integral below zero, which is clamped."""
        model = SensitivityModel(p0=-2.0, p1=1.0, p2=0.0, r_squared=1.0)
        s_d = integrate_direct_storage(np.array([10.0, 8.0, 6.0, 6.0]), model)
        assert s_d.tolist() == [0.0, 0.0, 0.0, 0.0]

    def test_never_negative(self) -> None:
        """Rising and falling discharge never yields negative storage."""
        q = 5.0 + np.sin(np.linspace(0, 12, 120))
        s_d = integrate_direct_storage(q, CONSTANT_G)
        assert np.all(s_d >= 0)

    def test_single_day_raises(self) -> None:
        with pytest.raises(InsufficientDataError):
            integrate_direct_storage(np.array([3.0]), CONSTANT_G)

    def test_zero_discharge_raises(self) -> None:
        """g is undefined where discharge is zero."""
        with pytest.raises(DomainError):
            integrate_direct_storage(np.array([3.0, 2.0, 0.0]), CONSTANT_G)
