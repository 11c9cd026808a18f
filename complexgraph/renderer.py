"""Domain-coloring rasterization of complex functions.

Every sample of the preimage grid gets a color from its position (hue along
the real axis, lightness along the imaginary axis, full saturation on the
mesh) and is drawn at the pixel its image lands on. When several samples land
on one pixel the sample with the largest ordering key wins.
"""

from __future__ import annotations

import enum
import math
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .color import hsl_to_rgb_array
from .function import Function
from .geometry import Area, Segment

HUE_RANGE = Segment(0.0, 0.95)
LIGHTNESS_RANGE = Segment(0.05, 0.9)

DEFAULT_SATURATION = 0.5
MESH_SATURATION = 1.0

# Mesh lines per axis and their thickness relative to the larger area side.
MESH_COUNT = 11
MESH_THICK = 4e-3

LOCK_STRIPES = 1024


class OrderKey(enum.Enum):
    """Which scalar of a source sample decides pixel collisions."""

    REAL = "real"
    IMAG = "imag"
    MAGNITUDE = "magnitude"

    def of(self, points: np.ndarray) -> np.ndarray:
        if self is OrderKey.REAL:
            return np.real(points)
        if self is OrderKey.IMAG:
            return np.imag(points)
        return np.abs(points)


@dataclass(frozen=True)
class RenderParameters:
    """Parameters of a single function rendering."""

    width: int
    height: int
    real_samples: Optional[int] = None
    imag_samples: Optional[int] = None
    hue_range: Segment = HUE_RANGE
    lightness_range: Segment = LIGHTNESS_RANGE
    order: OrderKey = OrderKey.REAL
    workers: Optional[int] = None

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Raster size must be positive, got {self.width}x{self.height}")
        for name in ("real_samples", "imag_samples", "workers"):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
        for name in ("hue_range", "lightness_range"):
            segment = getattr(self, name)
            if segment.min < 0.0 or segment.max > 1.0:
                raise ValueError(f"{name} must lie within [0, 1], got [{segment.min}, {segment.max}]")

    @property
    def grid_size(self) -> tuple[int, int]:
        return self.real_samples or self.width, self.imag_samples or self.height

    @property
    def worker_count(self) -> int:
        return self.workers or os.cpu_count() or 1


@dataclass(frozen=True)
class SampleGrid:
    """Positions and color steps of the preimage sampling grid."""

    left: float
    bottom: float
    real_step: float
    imag_step: float
    real_count: int
    imag_count: int
    hue_min: float
    hue_step: float
    lightness_min: float
    lightness_step: float
    center: complex
    mesh_step_x: float
    mesh_step_y: float
    mesh_thick: float

    def reals(self) -> np.ndarray:
        return self.left + np.arange(self.real_count, dtype=np.float64) * self.real_step

    def imag(self, row: int) -> float:
        return self.bottom + row * self.imag_step


def _step(length: float, count: int) -> float:
    return length / (count - 1) if count > 1 else 0.0


def sample_grid(area: Area, params: RenderParameters) -> SampleGrid:
    """Lay the samples over ``area`` so that the first and last hit its corners."""

    real_count, imag_count = params.grid_size
    return SampleGrid(
        left=area.left_bottom.real,
        bottom=area.left_bottom.imag,
        real_step=_step(area.width, real_count),
        imag_step=_step(area.height, imag_count),
        real_count=real_count,
        imag_count=imag_count,
        hue_min=params.hue_range.min,
        hue_step=_step(params.hue_range.length, real_count),
        lightness_min=params.lightness_range.min,
        lightness_step=_step(params.lightness_range.length, imag_count),
        center=area.center,
        mesh_step_x=area.width / (MESH_COUNT + 1),
        mesh_step_y=area.height / (MESH_COUNT + 1),
        mesh_thick=max(area.width, area.height) * MESH_THICK,
    )


def on_mesh(coordinates, center: float, step: float, thick: float) -> np.ndarray:
    """Flag coordinates within ``thick / 2`` of a mesh line.

    Mesh lines run through ``center`` and repeat every ``step``.
    """

    offset = np.fmod(np.asarray(coordinates, dtype=np.float64) - center, step)
    offset = np.where(offset < 0, offset + step, offset)
    half = thick / 2
    return (offset <= half) | (offset >= step - half)


def sample_colors(grid: SampleGrid, columns: np.ndarray, rows: np.ndarray) -> np.ndarray:
    """Colors of the samples with the given grid indices (broadcast together)."""

    reals = grid.left + columns * grid.real_step
    imags = grid.bottom + rows * grid.imag_step
    mesh = on_mesh(reals, grid.center.real, grid.mesh_step_x, grid.mesh_thick) | on_mesh(
        imags, grid.center.imag, grid.mesh_step_y, grid.mesh_thick
    )
    hue = grid.hue_min + columns * grid.hue_step
    lightness = grid.lightness_min + rows * grid.lightness_step
    saturation = np.where(mesh, MESH_SATURATION, DEFAULT_SATURATION)
    return hsl_to_rgb_array(hue, saturation, lightness)


def _sample(func: Function):
    def call(point: complex) -> complex:
        try:
            return complex(func(point))
        except (ZeroDivisionError, OverflowError, ValueError):
            return complex(math.nan, math.nan)

    return call


def evaluate(func: Function, points: np.ndarray) -> np.ndarray:
    """Evaluate ``func`` elementwise, turning arithmetic faults into inf/nan.

    Mappings built from numpy ufuncs take the whole array at once. Mappings
    that only accept one number (``cmath`` functions, plain Python code) are
    called sample by sample.
    """

    with np.errstate(all="ignore"):
        try:
            values = np.asarray(func(points), dtype=np.complex128)
        except (TypeError, ValueError):
            values = np.vectorize(_sample(func), otypes=[np.complex128])(points)
    return np.broadcast_to(values, points.shape)


@dataclass(frozen=True)
class Raster:
    """Rendered RGB pixels (row-major, top-left origin) and their winning keys."""

    pixels: np.ndarray
    keys: np.ndarray

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def written(self) -> np.ndarray:
        return np.isfinite(self.keys)


class OrderedBuffer:
    """Pixel buffer where each pixel keeps the write with the largest key.

    Writers never block each other at the row or buffer level: a write reads
    the stored key and swaps it only if it is still unchanged, retrying
    otherwise. The swap of one pixel is made atomic by a lock chosen from a
    fixed table by pixel index. Lock-free at buffer level but not wait-free.
    """

    def __init__(self, width: int, height: int, stripes: int = LOCK_STRIPES) -> None:
        self.width = width
        self.height = height
        self.keys = np.full((height, width), -np.inf, dtype=np.float64)
        self.pixels = np.zeros((height, width, 3), dtype=np.uint8)
        self._locks = [threading.Lock() for _ in range(stripes)]

    def compare_and_swap(self, row: int, col: int, expected: float, key: float, color) -> bool:
        with self._locks[(row * self.width + col) % len(self._locks)]:
            if self.keys[row, col] != expected:
                return False
            self.keys[row, col] = key
            self.pixels[row, col] = color
            return True

    def offer(self, row: int, col: int, key: float, color) -> bool:
        """Write ``color`` unless the pixel already holds a key >= ``key``."""

        while True:
            current = self.keys[row, col]
            if not key > current:
                return False
            if self.compare_and_swap(row, col, current, key, color):
                return True

    def raster(self) -> Raster:
        return Raster(pixels=self.pixels, keys=self.keys)


def _render_row(
    func: Function,
    area: Area,
    params: RenderParameters,
    grid: SampleGrid,
    buffer: OrderedBuffer,
    row: int,
) -> int:
    points = grid.reals() + 1j * grid.imag(row)
    values = evaluate(func, points)
    pixel_rows, pixel_cols, inside = area.plot_position(values, params.width, params.height)
    if not inside.any():
        return 0

    columns = np.arange(grid.real_count, dtype=np.float64)
    colors = sample_colors(grid, columns, np.float64(row))
    keys = params.order.of(points)

    written = 0
    for i in np.flatnonzero(inside):
        if buffer.offer(int(pixel_rows[i]), int(pixel_cols[i]), float(keys[i]), colors[i]):
            written += 1
    return written


def render_function(func: Function, area: Area, params: RenderParameters) -> Raster:
    """Render the image of ``area`` under ``func`` using a pool of row workers."""

    grid = sample_grid(area, params)
    buffer = OrderedBuffer(params.width, params.height)

    def work(row: int) -> int:
        return _render_row(func, area, params, grid, buffer, row)

    with ThreadPoolExecutor(max_workers=params.worker_count) as pool:
        list(pool.map(work, range(grid.imag_count)))

    return buffer.raster()
