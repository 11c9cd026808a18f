import cmath

import numpy as np
import pytest

pytest.importorskip("tensorflow")

from complexgraph.function import Function, FunctionName
from complexgraph.geometry import Area
from complexgraph.parser import parse_function
from complexgraph.renderer import OrderKey, RenderParameters, render_function, sample_colors, sample_grid
from complexgraph.tensor import render_function_tensor

UNIT = Area(-1 - 1j, 1 + 1j)


@pytest.mark.parametrize("description", ["z", "exp z", "z^2", "1/z"])
def test_matches_threaded_keys(description):
    f = parse_function(description)
    params = RenderParameters(width=20, height=16, order=OrderKey.MAGNITUDE)

    threaded = render_function(f, UNIT, params)
    tensor = render_function_tensor(f, UNIT, params)

    np.testing.assert_array_equal(tensor.written, threaded.written)
    np.testing.assert_array_equal(tensor.keys, threaded.keys)


def test_injective_function_matches_threaded_pixels():
    f = parse_function("z + 0.1")
    params = RenderParameters(width=12, height=12)
    np.testing.assert_array_equal(
        render_function_tensor(f, UNIT, params).pixels,
        render_function(f, UNIT, params).pixels,
    )


def test_ties_go_to_first_sample():
    area = Area(0j, 1 + 1j)
    params = RenderParameters(width=3, height=3, real_samples=4, imag_samples=4)
    collapse = Function(FunctionName("0*#"), lambda z: np.full_like(z, 0.5 + 0.5j))
    raster = render_function_tensor(collapse, area, params)

    grid = sample_grid(area, params)
    # largest real part is in the last column; the bottom row comes first
    expected = sample_colors(grid, np.float64(grid.real_count - 1), np.float64(0))
    np.testing.assert_array_equal(raster.pixels[1, 1], expected)
    assert raster.written.sum() == 1


def test_everything_outside():
    collapse = Function(FunctionName("0*#"), lambda z: np.full_like(z, 9 + 9j))
    raster = render_function_tensor(collapse, UNIT, RenderParameters(width=4, height=4))
    assert not raster.written.any()
    assert not raster.pixels.any()


def test_scalar_mapping():
    f = Function.identity().right_compose("exp(#)", cmath.exp)
    params = RenderParameters(width=10, height=10, order=OrderKey.MAGNITUDE)
    np.testing.assert_allclose(
        render_function_tensor(f, UNIT, params).keys,
        render_function(f, UNIT, params).keys,
    )
