"""Value types describing regions of the complex plane."""

from __future__ import annotations

import cmath
import math
from dataclasses import dataclass

import numpy as np

# Relative distance to the right or top side still counted as on the side.
EDGE_TOLERANCE = 1e-9


@dataclass(frozen=True)
class Segment:
    """A closed interval of real values (both boundaries are included)."""

    min: float
    max: float

    def __post_init__(self) -> None:
        if not math.isfinite(self.min):
            raise ValueError(f"Segment minimum must be finite, got {self.min!r}")
        if not math.isfinite(self.max):
            raise ValueError(f"Segment maximum must be finite, got {self.max!r}")
        if self.min > self.max:
            raise ValueError(f"Segment minimum {self.min} is greater than maximum {self.max}")

    @property
    def length(self) -> float:
        return self.max - self.min

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max

    def interpolate(self, t):
        """Map ``t`` in [0, 1] linearly onto the segment."""

        return self.min + t * self.length


@dataclass(frozen=True)
class Area:
    """Axis-aligned rectangle of the complex plane given by two corners."""

    left_bottom: complex
    right_top: complex

    def __post_init__(self) -> None:
        object.__setattr__(self, "left_bottom", complex(self.left_bottom))
        object.__setattr__(self, "right_top", complex(self.right_top))
        if not cmath.isfinite(self.left_bottom) or not cmath.isfinite(self.right_top):
            raise ValueError(f"Area corners must be finite, got {self.left_bottom} and {self.right_top}")
        if not (
            self.right_top.real > self.left_bottom.real
            and self.right_top.imag > self.left_bottom.imag
        ):
            raise ValueError(
                "right_top should have greater real and imaginary parts "
                f"than left_bottom ({self.left_bottom} vs {self.right_top})"
            )

    @classmethod
    def square(cls, size: float, center: complex = 0j) -> "Area":
        """Build a square area of side ``size`` around ``center``."""

        half = complex(size / 2, size / 2)
        return cls(center - half, center + half)

    @property
    def width(self) -> float:
        return self.right_top.real - self.left_bottom.real

    @property
    def height(self) -> float:
        return self.right_top.imag - self.left_bottom.imag

    @property
    def center(self) -> complex:
        return 0.5 * (self.left_bottom + self.right_top)

    @property
    def real_range(self) -> Segment:
        return Segment(self.left_bottom.real, self.right_top.real)

    @property
    def imag_range(self) -> Segment:
        return Segment(self.left_bottom.imag, self.right_top.imag)

    def contains(self, point: complex, tolerance: float = 0.0) -> bool:
        """Check whether ``point`` lies inside the area shrunk by ``tolerance``.

        ``tolerance`` is relative to the area size along each axis.
        """

        dx = self.width * tolerance
        dy = self.height * tolerance
        return (
            self.left_bottom.real + dx <= point.real <= self.right_top.real - dx
            and self.left_bottom.imag + dy <= point.imag <= self.right_top.imag - dy
        )

    def plot_position(self, values, width: int, height: int):
        """Map complex ``values`` onto a ``width`` x ``height`` pixel grid.

        Returns ``(rows, cols, inside)`` where rows count from the top edge and
        ``inside`` flags the points landing on the grid. The area is closed:
        points on its right and top sides go to the last column and row.
        Accepts a scalar or a numpy array of complex values; non-finite values
        are never inside.
        """

        values = np.asarray(values, dtype=np.complex128)
        with np.errstate(invalid="ignore", over="ignore"):
            x = np.floor((values.real - self.left_bottom.real) / self.width * width)
            y = np.floor((values.imag - self.left_bottom.imag) / self.height * height)
            on_right = np.abs(values.real - self.right_top.real) <= EDGE_TOLERANCE * self.width
            on_top = np.abs(values.imag - self.right_top.imag) <= EDGE_TOLERANCE * self.height
            x = np.where((x == width) & on_right, width - 1, x)
            y = np.where((y == height) & on_top, height - 1, y)
            inside = (x >= 0) & (x < width) & (y >= 0) & (y < height)
        cols = np.where(inside, x, 0).astype(np.int64)
        rows = np.where(inside, height - 1 - y, 0).astype(np.int64)
        return rows, cols, inside
