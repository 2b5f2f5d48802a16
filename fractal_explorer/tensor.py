"""TensorFlow evaluation of the iteration rules over batches of any width."""

from __future__ import annotations

import numpy as np
import tensorflow as tf

from .rules import ESCAPE_RADIUS_SQUARED, MAX_ITERATIONS, SIMD_EPSILON, _check_budget
from .simd import SimdComplex

DEVICE = "/CPU:0"

_LANE_SPEC = tf.TensorSpec(shape=[None], dtype=tf.float64)
_SCALAR_INT_SPEC = tf.TensorSpec(shape=[], dtype=tf.int32)
_SCALAR_FLOAT_SPEC = tf.TensorSpec(shape=[], dtype=tf.float64)


@tf.function
def _julia_step(zr: tf.Tensor, zi: tf.Tensor, cr: tf.Tensor, ci: tf.Tensor, ns: tf.Tensor, active: tf.Tensor) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Count bounded points, then advance only the points that are still active."""

    horizon = tf.constant(ESCAPE_RADIUS_SQUARED, dtype=tf.float64)
    active = tf.logical_and(active, zr * zr + zi * zi <= horizon)
    ns = ns + tf.cast(active, tf.int32)
    zr_new = zr * zr - zi * zi + cr
    zi_new = zi * zr + zr * zi + ci
    zr = tf.where(active, zr_new, zr)
    zi = tf.where(active, zi_new, zi)
    return zr, zi, ns, active


@tf.function(input_signature=[_LANE_SPEC, _LANE_SPEC, _LANE_SPEC, _LANE_SPEC, _SCALAR_INT_SPEC])
def _julia_run(zr: tf.Tensor, zi: tf.Tensor, cr: tf.Tensor, ci: tf.Tensor, max_iterations: tf.Tensor) -> tf.Tensor:
    """Iterate ``z <- z*z + c`` with a TensorFlow while loop until every point escaped."""

    i = tf.constant(0, dtype=tf.int32)
    ns = tf.zeros_like(zr, tf.int32)
    active = tf.ones_like(zr, tf.bool)

    def cond(i, zr, zi, ns, active):
        return tf.logical_and(tf.less(i, max_iterations), tf.reduce_any(active))

    def body(i, zr, zi, ns, active):
        zr, zi, ns, active = _julia_step(zr, zi, cr, ci, ns, active)
        return i + 1, zr, zi, ns, active

    _, _, _, ns, _ = tf.while_loop(cond, body, (i, zr, zi, ns, active))
    return ns


@tf.function
def _newton_step(zr: tf.Tensor, zi: tf.Tensor, cr: tf.Tensor, ci: tf.Tensor, ns: tf.Tensor, active: tf.Tensor, epsilon: tf.Tensor) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """One Nova step for the cubic ``z**3 - 1``, with a lane mask on convergence."""

    z2r = zr * zr - zi * zi
    z2i = zi * zr + zr * zi
    # f(z) = z**3 - 1
    fr = z2r * zr - z2i * zi - 1.0
    fi = z2i * zr + z2r * zi
    # f'(z) = 3 z**2
    dfr = z2r * 3.0
    dfi = z2i * 3.0
    norm = dfr * dfr + dfi * dfi
    qr = (fr * dfr + fi * dfi) / norm
    qi = (fi * dfr - fr * dfi) / norm
    zr_next = zr - qr + cr
    zi_next = zi - qi + ci
    dr = zr_next - zr
    di = zi_next - zi
    converged = dr * dr + di * di < epsilon
    active = tf.logical_and(active, tf.logical_not(converged))
    ns = ns + tf.cast(active, tf.int32)
    zr = tf.where(active, zr_next, zr)
    zi = tf.where(active, zi_next, zi)
    return zr, zi, ns, active


@tf.function(input_signature=[_LANE_SPEC, _LANE_SPEC, _LANE_SPEC, _LANE_SPEC, _SCALAR_INT_SPEC, _SCALAR_FLOAT_SPEC])
def _newton_run(zr: tf.Tensor, zi: tf.Tensor, cr: tf.Tensor, ci: tf.Tensor, max_iterations: tf.Tensor, epsilon: tf.Tensor) -> tf.Tensor:
    i = tf.constant(0, dtype=tf.int32)
    ns = tf.zeros_like(zr, tf.int32)
    active = tf.ones_like(zr, tf.bool)

    def cond(i, zr, zi, ns, active):
        return tf.logical_and(tf.less(i, max_iterations), tf.reduce_any(active))

    def body(i, zr, zi, ns, active):
        zr, zi, ns, active = _newton_step(zr, zi, cr, ci, ns, active, epsilon)
        return i + 1, zr, zi, ns, active

    _, _, _, ns, _ = tf.while_loop(cond, body, (i, zr, zi, ns, active))
    return ns


def _lanes(batch: SimdComplex) -> tuple[tf.Tensor, tf.Tensor]:
    return (
        tf.convert_to_tensor(batch.re, dtype=tf.float64),
        tf.convert_to_tensor(batch.im, dtype=tf.float64),
    )


def _to_counts(ns: tf.Tensor) -> np.ndarray:
    return ns.numpy().astype(np.uint8)


def julia_tensor(z: SimdComplex, c: SimdComplex, max_iterations: int = MAX_ITERATIONS) -> np.ndarray:
    _check_budget(max_iterations)
    with tf.device(DEVICE):
        zr, zi = _lanes(z)
        cr, ci = _lanes(c)
        ns = _julia_run(zr, zi, cr, ci, tf.constant(max_iterations, dtype=tf.int32))
    return _to_counts(ns)


def mandelbrot_tensor(c: SimdComplex, max_iterations: int = MAX_ITERATIONS) -> np.ndarray:
    return julia_tensor(SimdComplex.zeros(c.lanes), c, max_iterations)


def nova_tensor(
    z: SimdComplex,
    c: SimdComplex,
    max_iterations: int = MAX_ITERATIONS,
    epsilon: float = SIMD_EPSILON,
) -> np.ndarray:
    """Nova iteration of the cubic ``z**3 - 1`` over a whole batch."""

    _check_budget(max_iterations)
    with tf.device(DEVICE):
        zr, zi = _lanes(z)
        cr, ci = _lanes(c)
        ns = _newton_run(
            zr,
            zi,
            cr,
            ci,
            tf.constant(max_iterations, dtype=tf.int32),
            tf.constant(epsilon, dtype=tf.float64),
        )
    return _to_counts(ns)


def newton_tensor(z: SimdComplex, max_iterations: int = MAX_ITERATIONS, epsilon: float = SIMD_EPSILON) -> np.ndarray:
    return nova_tensor(z, SimdComplex.zeros(z.lanes), max_iterations, epsilon)
