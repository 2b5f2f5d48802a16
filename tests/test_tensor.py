import numpy as np

from fractal_explorer import SimdComplex, rules, tensor
from fractal_explorer.rules import MAX_ITERATIONS, cubic, cubic_derivative


def grid(n=12):
    xs = np.linspace(-1.8, 1.8, n)
    ys = np.linspace(-1.3, 1.3, n)
    return [complex(x, y) for y in ys for x in xs]


def test_julia_tensor_matches_scalar():
    points = grid()
    seed = complex(-0.7768, 0.1374)
    counts = tensor.julia_tensor(SimdComplex.from_points(points), SimdComplex.from_complex(seed, len(points)))
    assert counts.dtype == np.uint8
    assert counts.tolist() == [rules.julia(z, seed) for z in points]


def test_mandelbrot_tensor_matches_lanes():
    points = grid(10)
    batch = SimdComplex.from_points(points)
    np.testing.assert_array_equal(tensor.mandelbrot_tensor(batch), rules.mandelbrot_simd(batch))


def test_tensor_batches_of_different_width():
    for width in (1, 3, 8, 33):
        points = grid(6)[:width]
        counts = tensor.mandelbrot_tensor(SimdComplex.from_points(points))
        assert counts.tolist() == [rules.mandelbrot(c) for c in points]


def test_saturation_and_immediate_escape():
    counts = tensor.mandelbrot_tensor(SimdComplex.from_points([0j, 3 + 0j]))
    assert counts.tolist() == [MAX_ITERATIONS, 1]
    counts = tensor.julia_tensor(SimdComplex.from_points([2.5 + 0j]), SimdComplex.zeros(1))
    assert counts.tolist() == [0]


def test_newton_tensor_matches_lanes():
    points = [1 + 0j, 0j, 2 + 0j, -1 + 1j, 0.5 - 2j, 3 + 3j]
    batch = SimdComplex.from_points(points)
    expected = rules.newton_simd(batch, cubic, cubic_derivative)
    np.testing.assert_array_equal(tensor.newton_tensor(batch), expected)


def test_nova_tensor_matches_lanes():
    points = [0.4 + 0.2j, -1 + 0.5j, 2 - 1j]
    seed = complex(0.1, 0.0)
    batch = SimdComplex.from_points(points)
    expected = rules.nova_simd(batch, SimdComplex.from_complex(seed, 3), cubic, cubic_derivative)
    np.testing.assert_array_equal(tensor.nova_tensor(batch, SimdComplex.from_complex(seed, 3)), expected)
