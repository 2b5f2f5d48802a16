"""Lane-wise complex arithmetic on fixed-width numpy batches."""

from __future__ import annotations

from typing import Iterable, Sequence, Union

import numpy as np

from .errors import ConfigurationError

# Batch width used by the renderer unless told otherwise.
LANES = 8

Operand = Union["SimdComplex", float, int]


def _lane_array(values, lanes: int | None = None) -> np.ndarray:
    array = np.asarray(values, dtype=np.float64)
    if array.ndim == 0:
        if lanes is None:
            raise ConfigurationError("lane count is required to broadcast a scalar")
        return np.full(lanes, array, dtype=np.float64)
    return array


class SimdComplex:
    """A batch of complex numbers stored as parallel real and imaginary lanes."""

    __slots__ = ("re", "im")

    def __init__(self, re, im) -> None:
        re = _lane_array(re)
        im = _lane_array(im)
        if re.ndim != 1 or re.shape != im.shape:
            raise ConfigurationError(f"lane shapes do not match: {re.shape} and {im.shape}")
        if re.size < 1:
            raise ConfigurationError("a batch needs at least one lane")
        self.re = re
        self.im = im

    @classmethod
    def splat(cls, re: float, im: float, lanes: int = LANES) -> "SimdComplex":
        if lanes < 1:
            raise ConfigurationError(f"lane count must be positive, got {lanes}")
        return cls(_lane_array(re, lanes), _lane_array(im, lanes))

    @classmethod
    def from_complex(cls, z: complex, lanes: int = LANES) -> "SimdComplex":
        return cls.splat(z.real, z.imag, lanes)

    @classmethod
    def from_points(cls, points: Sequence[complex] | Iterable[complex]) -> "SimdComplex":
        values = np.asarray(list(points), dtype=np.complex128)
        return cls(values.real.copy(), values.imag.copy())

    @classmethod
    def zeros(cls, lanes: int = LANES) -> "SimdComplex":
        return cls.splat(0.0, 0.0, lanes)

    @property
    def lanes(self) -> int:
        return int(self.re.size)

    def norm_squared(self) -> np.ndarray:
        return self.re * self.re + self.im * self.im

    def to_complex(self) -> list[complex]:
        return [complex(re, im) for re, im in zip(self.re.tolist(), self.im.tolist())]

    def where(self, mask: np.ndarray, other: "SimdComplex") -> "SimdComplex":
        """Take lanes from ``self`` where ``mask`` is set and from ``other`` elsewhere."""

        return SimdComplex(np.where(mask, self.re, other.re), np.where(mask, self.im, other.im))

    def _coerce(self, other: Operand) -> "SimdComplex":
        if isinstance(other, SimdComplex):
            return other
        return SimdComplex.splat(float(other), 0.0, self.lanes)

    def __add__(self, other: Operand) -> "SimdComplex":
        other = self._coerce(other)
        return SimdComplex(self.re + other.re, self.im + other.im)

    def __sub__(self, other: Operand) -> "SimdComplex":
        other = self._coerce(other)
        return SimdComplex(self.re - other.re, self.im - other.im)

    def __mul__(self, other: Operand) -> "SimdComplex":
        if not isinstance(other, SimdComplex):
            factor = np.float64(other)
            return SimdComplex(self.re * factor, self.im * factor)
        return SimdComplex(
            self.re * other.re - self.im * other.im,
            self.im * other.re + self.re * other.im,
        )

    def __truediv__(self, other: Operand) -> "SimdComplex":
        with np.errstate(divide="ignore", invalid="ignore"):
            if not isinstance(other, SimdComplex):
                factor = np.float64(other)
                return SimdComplex(self.re / factor, self.im / factor)
            norm = other.norm_squared()
            re = self.re * other.re + self.im * other.im
            im = self.im * other.re - self.re * other.im
            return SimdComplex(re / norm, im / norm)

    __radd__ = __add__
    __rmul__ = __mul__

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SimdComplex):
            return NotImplemented
        return bool(np.array_equal(self.re, other.re) and np.array_equal(self.im, other.im))

    __hash__ = None  # type: ignore[assignment]

    def __len__(self) -> int:
        return self.lanes

    def __repr__(self) -> str:
        return f"SimdComplex(re={self.re.tolist()!r}, im={self.im.tolist()!r})"


class SimdCounter:
    """Per-lane iteration counter with lane freezing and an early-exit flag.

    A lane stops counting the first time it falls outside the mask and never
    counts again, even if a later mask would include it.
    """

    def __init__(self, lanes: int = LANES) -> None:
        self._counts = np.zeros(lanes, dtype=np.int64)
        self._active = np.ones(lanes, dtype=bool)
        self._modified = False

    def increment_where(self, mask: np.ndarray) -> None:
        incremented = np.logical_and(self._active, mask)
        self._counts += incremented
        self._active = incremented
        self._modified = bool(incremented.any())

    @property
    def active(self) -> np.ndarray:
        return self._active

    @property
    def modified(self) -> bool:
        return self._modified

    def counts(self) -> np.ndarray:
        return self._counts.astype(np.uint8)
