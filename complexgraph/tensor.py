"""Vectorized rasterization with collisions resolved on a TensorFlow device."""

from __future__ import annotations

from typing import Optional

import numpy as np
import tensorflow as tf

from .function import Function
from .geometry import Area
from .renderer import Raster, RenderParameters, evaluate, sample_colors, sample_grid


@tf.function
def _resolve_collisions(keys: tf.Tensor, segments: tf.Tensor, num_segments: tf.Tensor) -> tuple[tf.Tensor, tf.Tensor]:
    """Pick, for every pixel, the sample with the largest key.

    Ties go to the sample with the smallest index. Pixels without samples get
    an index equal to the number of samples.
    """

    best = tf.math.unsorted_segment_max(keys, segments, num_segments)
    is_best = tf.equal(keys, tf.gather(best, segments))
    count = tf.size(keys, out_type=tf.int64)
    indices = tf.range(count, dtype=tf.int64)
    candidates = tf.where(is_best, indices, tf.fill(tf.shape(indices), count))
    winners = tf.math.unsorted_segment_min(candidates, segments, num_segments)
    return best, tf.minimum(winners, count)


def render_function_tensor(
    func: Function,
    area: Area,
    params: RenderParameters,
    *,
    device: Optional[str] = None,
) -> Raster:
    """Render like :func:`complexgraph.renderer.render_function` in one pass.

    Samples are numbered row by row from the bottom-left corner; on equal keys
    the lowest number wins, so the result is deterministic.
    """

    grid = sample_grid(area, params)
    width, height = params.width, params.height

    columns = np.arange(grid.real_count, dtype=np.float64)
    rows = np.arange(grid.imag_count, dtype=np.float64)[:, None]
    points = (grid.left + columns * grid.real_step) + 1j * (grid.bottom + rows * grid.imag_step)

    values = evaluate(func, points)
    pixel_rows, pixel_cols, inside = area.plot_position(values, width, height)

    pixels = np.zeros((height * width, 3), dtype=np.uint8)
    keys = np.full(height * width, -np.inf, dtype=np.float64)

    selected = np.flatnonzero(inside.ravel())
    if selected.size:
        colors = sample_colors(grid, columns, rows).reshape(-1, 3)[selected]
        sample_keys = params.order.of(points).ravel()[selected]
        segments = pixel_rows.ravel()[selected] * width + pixel_cols.ravel()[selected]

        with tf.device(device if device is not None else "/CPU:0"):
            best, winners = _resolve_collisions(
                tf.convert_to_tensor(sample_keys, dtype=tf.float64),
                tf.convert_to_tensor(segments, dtype=tf.int64),
                tf.constant(height * width, dtype=tf.int64),
            )

        winners = winners.numpy()
        filled = winners < selected.size
        pixels[filled] = colors[winners[filled]]
        keys[filled] = best.numpy()[filled]

    return Raster(pixels=pixels.reshape(height, width, 3), keys=keys.reshape(height, width))
