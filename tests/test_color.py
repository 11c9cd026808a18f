import numpy as np
import pytest

from complexgraph.color import HSL, hsl_to_rgb, hsl_to_rgb_array


@pytest.mark.parametrize(
    "hsl, rgb",
    [
        ((0.0, 1.0, 0.5), (255, 0, 0)),
        ((1.0 / 3, 1.0, 0.5), (0, 255, 0)),
        ((2.0 / 3, 1.0, 0.5), (0, 0, 255)),
        ((0.5, 0.0, 1.0), (255, 255, 255)),
        ((0.25, 0.7, 0.0), (0, 0, 0)),
        ((0.9, 0.0, 0.5), (127, 127, 127)),
    ],
)
def test_reference_colors(hsl, rgb):
    assert hsl_to_rgb(*hsl) == rgb
    assert HSL(*hsl).to_rgb() == rgb


def test_vectorized_matches_scalar():
    hue = np.linspace(0.0, 0.95, 17)
    lightness = np.linspace(0.05, 0.9, 17)
    colors = hsl_to_rgb_array(hue, 0.5, lightness)

    assert colors.shape == (17, 3)
    assert colors.dtype == np.uint8
    for h, l, color in zip(hue, lightness, colors):
        assert hsl_to_rgb(h, 0.5, l) == tuple(int(c) for c in color)


def test_saturation_boost_changes_color():
    assert hsl_to_rgb(0.1, 0.5, 0.5) != hsl_to_rgb(0.1, 1.0, 0.5)


@pytest.mark.parametrize("components", [(-0.1, 0.5, 0.5), (0.5, 1.1, 0.5), (0.5, 0.5, 2.0)])
def test_out_of_range_components(components):
    with pytest.raises(ValueError):
        HSL(*components)
