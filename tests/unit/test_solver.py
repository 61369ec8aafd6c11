"""Tests for the bounded bisection solver."""

import pytest

from autax.sdk.solver import bisect_increasing


class TestBisectIncreasing:
    """Tests for bisect_increasing."""

    def test_linear(self):
        result = bisect_increasing(lambda x: 2 * x, 10, 0, 100)
        assert result.converged
        assert result.value == pytest.approx(5, abs=0.01)

    def test_endpoint_match_needs_no_iterations(self):
        result = bisect_increasing(lambda x: x, 0, 0, 100)
        assert result.value == 0
        assert result.iterations == 0

    def test_step_function(self):
        # Rounded output, like whole-dollar withholding
        result = bisect_increasing(lambda x: x - round(x * 0.3), 700, 700, 1400)
        assert result.converged
        value = result.value
        assert abs(value - round(value * 0.3) - 700) <= 0.01

    def test_iteration_cap(self):
        # Target unreachable within tolerance: jumps from 0 to 1
        result = bisect_increasing(lambda x: 0.0 if x < 1 else 1.0, 0.5, 0, 2, max_iterations=10)
        assert not result.converged
        assert result.iterations == 10
        assert 0 <= result.value <= 2

    def test_tolerance(self):
        result = bisect_increasing(lambda x: x, 3.3, 0, 10, tolerance=0.5)
        assert abs(result.value - 3.3) <= 0.5
