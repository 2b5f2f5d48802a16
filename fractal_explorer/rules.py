"""Escape-time iteration rules, scalar and lane-batched.

Each rule returns the number of iterations performed before the escape (or
convergence) test succeeded, saturating at :data:`MAX_ITERATIONS`. Reaching
the budget is an ordinary result, not an error.
"""

from __future__ import annotations

from typing import Callable

import numpy as np

from .errors import ConfigurationError
from .simd import SimdComplex, SimdCounter

MAX_ITERATIONS = 255
ESCAPE_RADIUS_SQUARED = 4.0
EPSILON = 1e-5
# Compared against the squared step length, i.e. a distance of 1e-5.
SIMD_EPSILON = 1e-10

ComplexFunction = Callable[[complex], complex]
SimdFunction = Callable[[SimdComplex], SimdComplex]


def norm_squared(z: complex) -> float:
    return z.real * z.real + z.imag * z.imag


def _check_budget(max_iterations: int) -> None:
    # Counts are stored as bytes.
    if not 0 <= max_iterations <= MAX_ITERATIONS:
        raise ConfigurationError(f"iteration budget must be within [0, {MAX_ITERATIONS}], got {max_iterations}")


def julia(z: complex, c: complex, max_iterations: int = MAX_ITERATIONS) -> int:
    _check_budget(max_iterations)
    # Works on the parts directly so the arithmetic matches the lane version.
    zr, zi = z.real, z.imag
    cr, ci = c.real, c.imag
    for i in range(max_iterations):
        if zr * zr + zi * zi > ESCAPE_RADIUS_SQUARED:
            return i
        zr, zi = zr * zr - zi * zi + cr, zi * zr + zr * zi + ci
    return max_iterations


def mandelbrot(c: complex, max_iterations: int = MAX_ITERATIONS) -> int:
    return julia(0j, c, max_iterations)


def nova(
    z: complex,
    c: complex,
    f: ComplexFunction,
    df: ComplexFunction,
    max_iterations: int = MAX_ITERATIONS,
    epsilon: float = EPSILON,
) -> int:
    _check_budget(max_iterations)
    for i in range(max_iterations):
        try:
            z_next = z - f(z) / df(z) + c
        except ZeroDivisionError:
            # A vanishing derivative makes the orbit undefined; it can never converge.
            return max_iterations
        if abs(z_next - z) < epsilon:
            return i
        z = z_next
    return max_iterations


def newton(
    z: complex,
    f: ComplexFunction,
    df: ComplexFunction,
    max_iterations: int = MAX_ITERATIONS,
    epsilon: float = EPSILON,
) -> int:
    return nova(z, 0j, f, df, max_iterations, epsilon)


def julia_simd(z: SimdComplex, c: SimdComplex, max_iterations: int = MAX_ITERATIONS) -> np.ndarray:
    """Lane-batched :func:`julia`; lane ``k`` equals ``julia(z[k], c[k])``."""

    _check_budget(max_iterations)
    counter = SimdCounter(z.lanes)
    # Frozen lanes are still squared before being masked out and may overflow.
    with np.errstate(over="ignore", invalid="ignore"):
        for _ in range(max_iterations):
            counter.increment_where(z.norm_squared() <= ESCAPE_RADIUS_SQUARED)
            if not counter.modified:
                break
            z = (z * z + c).where(counter.active, z)
    return counter.counts()


def mandelbrot_simd(c: SimdComplex, max_iterations: int = MAX_ITERATIONS) -> np.ndarray:
    return julia_simd(SimdComplex.zeros(c.lanes), c, max_iterations)


def nova_simd(
    z: SimdComplex,
    c: SimdComplex,
    f: SimdFunction,
    df: SimdFunction,
    max_iterations: int = MAX_ITERATIONS,
    epsilon: float = SIMD_EPSILON,
) -> np.ndarray:
    _check_budget(max_iterations)
    counter = SimdCounter(z.lanes)
    with np.errstate(over="ignore", invalid="ignore"):
        for _ in range(max_iterations):
            z_next = z - f(z) / df(z) + c
            # NaN steps compare false, so they stay "not converged".
            converged = (z_next - z).norm_squared() < epsilon
            counter.increment_where(~converged)
            if not counter.modified:
                break
            z = z_next.where(counter.active, z)
    return counter.counts()


def newton_simd(
    z: SimdComplex,
    f: SimdFunction,
    df: SimdFunction,
    max_iterations: int = MAX_ITERATIONS,
    epsilon: float = SIMD_EPSILON,
) -> np.ndarray:
    return nova_simd(z, SimdComplex.zeros(z.lanes), f, df, max_iterations, epsilon)


def cubic(z):
    """z**3 - 1, for ``complex`` and :class:`SimdComplex` alike."""

    return z * z * z - 1.0


def cubic_derivative(z):
    return z * z * 3.0
