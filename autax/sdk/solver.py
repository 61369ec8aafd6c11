"""Bounded bisection for inverting non-decreasing functions.

Used to turn a forward calculation (gross -> net) into a reverse one
(net -> gross) where no closed form exists because withholding is
piecewise linear and rounded to whole dollars.
"""

import logging
from typing import Callable, NamedTuple

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 0.01
DEFAULT_MAX_ITERATIONS = 50


class SolveResult(NamedTuple):
    value: float
    iterations: int
    converged: bool


def bisect_increasing(
    fn: Callable[[float], float],
    target: float,
    low: float,
    high: float,
    tolerance: float = DEFAULT_TOLERANCE,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> SolveResult:
    """Find x in [low, high] where fn(x) is within tolerance of target.

    fn should be non-decreasing over the interval. The loop never runs more
    than max_iterations times; if it stops without meeting the tolerance, the
    midpoint with the smallest error seen so far is returned with
    converged=False.

    Args:
        fn: Function to invert
        target: Desired output value
        low: Lower bound of the search interval
        high: Upper bound of the search interval
        tolerance: Acceptable |fn(x) - target|
        max_iterations: Hard cap on bisection steps

    Returns:
        SolveResult(value, iterations, converged)
    """
    for endpoint in (low, high):
        if abs(fn(endpoint) - target) <= tolerance:
            return SolveResult(endpoint, 0, True)

    best_x = low
    best_error = abs(fn(low) - target)

    for iteration in range(1, max_iterations + 1):
        mid = (low + high) / 2
        value = fn(mid)
        error = abs(value - target)

        if error < best_error:
            best_x, best_error = mid, error

        if error <= tolerance:
            logger.debug(f"Converged to {mid:.4f} after {iteration} iterations")
            return SolveResult(mid, iteration, True)

        if value < target:
            low = mid
        else:
            high = mid

    logger.warning(
        f"Bisection did not converge after {max_iterations} iterations "
        f"(target {target:.2f}, best error {best_error:.4f})"
    )
    return SolveResult(best_x, max_iterations, False)
