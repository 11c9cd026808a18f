"""HSL to RGB conversion."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

CHANNEL_MAX = 255


@dataclass(frozen=True)
class HSL:
    """A color given by hue, saturation and lightness, each in [0, 1]."""

    hue: float
    saturation: float = 1.0
    lightness: float = 0.5

    def __post_init__(self) -> None:
        for field_name in ("hue", "saturation", "lightness"):
            value = getattr(self, field_name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{field_name} should be in range [0; 1], got {value!r}")

    def to_rgb(self) -> tuple[int, int, int]:
        return hsl_to_rgb(self.hue, self.saturation, self.lightness)


def _channel(t, p, q):
    t = np.where(t > 1.0, t - 1.0, t)
    t = np.where(t < 0.0, t + 1.0, t)
    return np.select(
        [t < 1.0 / 6, t < 0.5, t < 2.0 / 3],
        [p + (q - p) * 6.0 * t, q, p + (q - p) * (2.0 / 3 - t) * 6.0],
        default=p,
    )


def hsl_to_rgb_array(hue, saturation, lightness) -> np.ndarray:
    """Vectorized HSL to RGB conversion.

    Inputs broadcast against each other; the result has a trailing axis of
    three ``uint8`` channels.
    """

    hue, saturation, lightness = np.broadcast_arrays(
        np.asarray(hue, dtype=np.float64),
        np.asarray(saturation, dtype=np.float64),
        np.asarray(lightness, dtype=np.float64),
    )
    q = np.where(
        lightness < 0.5,
        lightness * (saturation + 1.0),
        lightness + saturation - lightness * saturation,
    )
    p = 2.0 * lightness - q
    channels = [_channel(hue + shift, p, q) for shift in (1.0 / 3, 0.0, -1.0 / 3)]
    rgb = np.clip(np.stack(channels, axis=-1), 0.0, 1.0)
    return (rgb * CHANNEL_MAX).astype(np.uint8)


def hsl_to_rgb(hue: float, saturation: float, lightness: float) -> tuple[int, int, int]:
    """Convert a single HSL triple to 8-bit RGB."""

    r, g, b = hsl_to_rgb_array(hue, saturation, lightness)
    return int(r), int(g), int(b)
