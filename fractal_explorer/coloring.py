"""Coloring functions that compose an iteration rule, a palette and a seed."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

import numpy as np

from . import rules
from .color import Palette, Rgb
from .errors import ConfigurationError
from .simd import SimdComplex

BACKENDS = ("scalar", "simd", "tensor")


class FractalKind(Enum):
    JULIA = "julia"
    MANDELBROT = "mandelbrot"
    NEWTON = "newton"
    NOVA = "nova"

    @classmethod
    def parse(cls, name: str) -> "FractalKind":
        try:
            return cls(name.lower())
        except ValueError:
            valid = ", ".join(kind.value for kind in cls)
            raise ConfigurationError(f"unknown fractal '{name}'. Valid choices: {valid}.") from None


@dataclass(frozen=True)
class ColorComputer:
    """Pure, picklable coloring function for one fractal family.

    ``computer(z)`` colors a single plane point; ``computer.batch(points)``
    colors a :class:`SimdComplex` batch lane by lane. Newton and Nova use the
    cubic ``z**3 - 1``.
    """

    kind: FractalKind
    palette: Palette
    seed: complex = 0j
    backend: str = "simd"

    def __post_init__(self) -> None:
        if self.backend not in BACKENDS:
            raise ConfigurationError(f"unknown backend '{self.backend}'. Valid choices: {', '.join(BACKENDS)}.")

    def with_seed(self, seed: complex) -> "ColorComputer":
        return replace(self, seed=complex(seed))

    def count(self, z: complex) -> int:
        kind = self.kind
        if kind is FractalKind.JULIA:
            return rules.julia(z, self.seed)
        if kind is FractalKind.MANDELBROT:
            return rules.mandelbrot(z)
        if kind is FractalKind.NEWTON:
            return rules.newton(z, rules.cubic, rules.cubic_derivative)
        return rules.nova(z, self.seed, rules.cubic, rules.cubic_derivative)

    def counts(self, points: SimdComplex) -> np.ndarray:
        if self.backend == "tensor":
            return self._tensor_counts(points)
        if self.backend == "scalar":
            return np.array([self.count(z) for z in points.to_complex()], dtype=np.uint8)
        seed = SimdComplex.from_complex(self.seed, points.lanes)
        kind = self.kind
        if kind is FractalKind.JULIA:
            return rules.julia_simd(points, seed)
        if kind is FractalKind.MANDELBROT:
            return rules.mandelbrot_simd(points)
        if kind is FractalKind.NEWTON:
            return rules.newton_simd(points, rules.cubic, rules.cubic_derivative)
        return rules.nova_simd(points, seed, rules.cubic, rules.cubic_derivative)

    def _tensor_counts(self, points: SimdComplex) -> np.ndarray:
        # TensorFlow is only imported when the tensor backend is used.
        from . import tensor

        seed = SimdComplex.from_complex(self.seed, points.lanes)
        kind = self.kind
        if kind is FractalKind.JULIA:
            return tensor.julia_tensor(points, seed)
        if kind is FractalKind.MANDELBROT:
            return tensor.mandelbrot_tensor(points)
        if kind is FractalKind.NEWTON:
            return tensor.newton_tensor(points)
        return tensor.nova_tensor(points, seed)

    def __call__(self, z: complex) -> Rgb:
        return self.palette.color(self.count(z))

    def batch(self, points: SimdComplex) -> list[Rgb]:
        return self.palette.colors(self.counts(points).tolist())
