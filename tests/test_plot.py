import math

import numpy as np
import pytest

from complexgraph.geometry import Area
from complexgraph.plot import (
    BACKGROUND,
    INK,
    Box,
    choose_tick_step,
    default_origin,
    draw_axes,
    draw_function_name,
    format_tick,
    new_plot,
    paste_raster,
    series_tick_step,
)
from complexgraph.renderer import Raster

UNIT = Area(-1 - 1j, 1 + 1j)


def test_new_plot_layout():
    plot = new_plot(100, 80)
    assert plot.canvas.size == (4 * 10 + 100 + 2 * 100, 2 * 10 + 80)
    assert plot.preimage == Box(10, 10, 100, 80)
    assert plot.image == Box(130, 10, 100, 80)
    assert plot.canvas.getpixel((0, 0)) == BACKGROUND
    assert plot.preimage.right < plot.image.left


@pytest.mark.parametrize(
    "area, expected",
    [
        (UNIT, 0.2),
        (Area.square(10), 2.0),
        (Area.square(2 * math.pi), 0.4),
        (Area(0j, 0.5 + 0.1j), 0.04),
    ],
)
def test_choose_tick_step(area, expected):
    assert choose_tick_step(area) == pytest.approx(expected)


@pytest.mark.parametrize("size, expected", [(2 * math.pi, 1), (0.3, 0.05), (6, 1), (100, 7.5)])
def test_series_tick_step(size, expected):
    assert series_tick_step(size) == expected


@pytest.mark.parametrize(
    "value, text",
    [(1.0, "1"), (0.25, "0.25"), (2.5, "2.5"), (10.0, "10"), (0.0, "0"), (-0.001, "0"), (-1.5, "-1.5")],
)
def test_format_tick(value, text):
    assert format_tick(value) == text


@pytest.mark.parametrize(
    "area, origin",
    [
        (UNIT, 0j),
        (Area(1 + 1j, 3 + 2j), 2 + 1.5j),
        (Area(-1 + 1j, 1 + 3j), 2j),
        (Area(0j, 1 + 1j), 0j),
    ],
)
def test_default_origin(area, origin):
    assert default_origin(area) == origin


def test_paste_raster():
    plot = new_plot(4, 3)
    pixels = np.zeros((3, 4, 3), dtype=np.uint8)
    pixels[0, 0] = (10, 20, 30)
    paste_raster(plot.canvas, plot.image, Raster(pixels, np.zeros((3, 4))))
    assert plot.canvas.getpixel((plot.image.left, plot.image.top)) == (10, 20, 30)
    assert plot.canvas.getpixel((plot.image.left + 1, plot.image.top)) == (0, 0, 0)


def test_paste_raster_size_mismatch():
    plot = new_plot(10, 10)
    raster = Raster(np.zeros((5, 5, 3), dtype=np.uint8), np.full((5, 5), -np.inf))
    with pytest.raises(ValueError):
        paste_raster(plot.canvas, plot.preimage, raster)


def test_draw_axes_crosses_at_origin():
    plot = new_plot(100, 100)
    box = plot.preimage
    draw_axes(plot.canvas, box, UNIT, 0.5)

    # origin 0 lands on column 50, row 49 of the box
    assert plot.canvas.getpixel((box.left + 25, box.top + 49)) == INK
    assert plot.canvas.getpixel((box.left + 50, box.top + 75)) == INK
    assert plot.canvas.getpixel((plot.image.left + 50, plot.image.top + 49)) == BACKGROUND


@pytest.mark.parametrize("tick_step, origin", [(0.0, None), (-1.0, None), (0.5, 5 + 5j), (0.5, 0.95 + 0j)])
def test_draw_axes_rejects_bad_arguments(tick_step, origin):
    plot = new_plot(50, 50)
    with pytest.raises(ValueError):
        draw_axes(plot.canvas, plot.preimage, UNIT, tick_step, origin)


def test_draw_function_name_frames_label():
    plot = new_plot(100, 100)
    box = plot.image
    draw_function_name(plot.canvas, box, "(exp #)")
    assert plot.canvas.getpixel((box.left + 3, box.top + 3)) == INK
