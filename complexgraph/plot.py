"""Composing rendered rasters into annotated plot pictures."""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np
import PIL.Image
import PIL.ImageDraw
import PIL.ImageFont

from .geometry import Area
from .renderer import Raster

BACKGROUND = (211, 211, 211)
INK = (0, 0, 0)
PAPER = (255, 255, 255)

# Sizes relative to the larger side of a panel.
LINE_THICK = 0.004
TICK_SIZE = 5 * LINE_THICK
FONT_SIZE = 6 * LINE_THICK

SERIES_TICK_STEPS = (0.01, 0.02, 0.05, 0.075, 0.1, 0.2, 0.5, 0.75, 1, 2, 5, 7.5)

_FONT_CANDIDATES = (
    "/usr/share/fonts/truetype/dejavu/DejaVuSerif.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSerif-Regular.ttf",
    "/usr/share/fonts/truetype/freefont/FreeSerif.ttf",
)


@dataclass(frozen=True)
class Box:
    """A rectangular region of the canvas, in pixels."""

    left: int
    top: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.left + self.width

    @property
    def bottom(self) -> int:
        return self.top + self.height


@dataclass
class Plot:
    """A canvas with the preimage panel on the left and the image panel on the right."""

    canvas: PIL.Image.Image
    preimage: Box
    image: Box

    def save(self, path: Path, image_format: Optional[str] = None) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        self.canvas.save(str(path), format=image_format)

    def to_array(self) -> np.ndarray:
        return np.asarray(self.canvas.convert("RGB"))


def new_plot(width: int, height: int, margin: int = 10, spacing: int = 100) -> Plot:
    canvas = PIL.Image.new(
        "RGB",
        (4 * margin + spacing + 2 * width, 2 * margin + height),
        BACKGROUND,
    )
    preimage = Box(margin, margin, width, height)
    image = Box(3 * margin + spacing + width, margin, width, height)
    return Plot(canvas=canvas, preimage=preimage, image=image)


def paste_raster(canvas: PIL.Image.Image, box: Box, raster: Raster) -> None:
    """Copy the rendered pixels into ``box``; unwritten pixels stay black."""

    if (raster.width, raster.height) != (box.width, box.height):
        raise ValueError(
            f"Raster of {raster.width}x{raster.height} does not fit a {box.width}x{box.height} box"
        )
    canvas.paste(PIL.Image.fromarray(raster.pixels, "RGB"), (box.left, box.top))


def load_font(size: int) -> PIL.ImageFont.ImageFont:
    size = max(8, int(round(size)))
    for path in _FONT_CANDIDATES:
        font_path = Path(path)
        if font_path.exists():
            try:
                return PIL.ImageFont.truetype(str(font_path), size)
            except OSError:
                continue
    return PIL.ImageFont.load_default()


def _measure(draw: PIL.ImageDraw.ImageDraw, text: str, font) -> tuple[int, int]:
    bbox = draw.textbbox((0, 0), text, font=font)
    return int(round(bbox[2] - bbox[0])), int(round(bbox[3] - bbox[1]))


def format_tick(value: float) -> str:
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text in {"-0", ""} else text


def choose_tick_step(area: Area) -> float:
    """Pick a power-of-ten based tick step giving at least five ticks."""

    size = max(area.width, area.height)
    step = 10.0 ** round(math.log10(size))
    while step > size / 5:
        step /= 5
    return step


def series_tick_step(size: float) -> float:
    """Pick a tick step from the fixed ladder for a square area of ``size``."""

    for step in SERIES_TICK_STEPS[1:]:
        if step > size / 7:
            return step
    return SERIES_TICK_STEPS[-1]


def default_origin(area: Area) -> complex:
    """Zero on each axis the area spans, the area center otherwise."""

    center = area.center
    x = 0.0 if area.left_bottom.real <= 0.0 < area.right_top.real else center.real
    y = 0.0 if area.left_bottom.imag <= 0.0 < area.right_top.imag else center.imag
    return complex(x, y)


def _position(area: Area, box: Box, point: complex) -> Optional[tuple[int, int]]:
    rows, cols, inside = area.plot_position(point, box.width, box.height)
    if not bool(inside):
        return None
    return box.left + int(cols), box.top + int(rows)


def _draw_arrow(draw, start, end, width: int, head: float) -> None:
    draw.line([start, end], fill=INK, width=width)
    angle = math.atan2(end[1] - start[1], end[0] - start[0])
    left = (
        end[0] - head * math.cos(angle - math.pi / 8),
        end[1] - head * math.sin(angle - math.pi / 8),
    )
    right = (
        end[0] - head * math.cos(angle + math.pi / 8),
        end[1] - head * math.sin(angle + math.pi / 8),
    )
    draw.polygon([end, left, right], fill=INK)


def _ticks(origin: float, low: float, high: float, step: float) -> list[float]:
    ticks = []
    t = origin + step
    while t < high:
        ticks.append(t)
        t += step
    t = origin - step
    while t > low:
        ticks.append(t)
        t -= step
    return ticks


def draw_axes(
    canvas: PIL.Image.Image,
    box: Box,
    area: Area,
    tick_step: float,
    origin: Optional[complex] = None,
) -> None:
    """Draw the real and imaginary axes with ticks over ``box``."""

    if tick_step <= 0:
        raise ValueError(f"Tick step must be positive, got {tick_step}")
    if origin is None:
        origin = default_origin(area)
    elif not area.contains(origin, 0.1):
        raise ValueError("Defined coordinate origin is invalid")

    position = _position(area, box, origin)
    if position is None:
        raise ValueError("Coordinate origin is drawn outside of the plot")
    x_pos, y_pos = position

    size = max(box.width, box.height)
    line_width = max(1, int(round(size * LINE_THICK)))
    tick_size = max(2, int(size * TICK_SIZE))
    font_size = size * FONT_SIZE
    font = load_font(font_size)
    draw = PIL.ImageDraw.Draw(canvas)

    _draw_arrow(draw, (box.left, y_pos), (box.right, y_pos), line_width, font_size)
    _draw_arrow(draw, (x_pos, box.bottom), (x_pos, box.top), line_width, font_size)

    for tick in _ticks(origin.real, area.left_bottom.real, area.right_top.real, tick_step):
        point = _position(area, box, complex(tick, origin.imag))
        if point is None:
            continue
        x, y = point
        draw.line([(x, y), (x, y - tick_size)], fill=INK, width=line_width)
        label = format_tick(tick)
        label_width, label_height = _measure(draw, label, font)
        draw.text((x - label_width / 2, y - tick_size - label_height - 2), label, font=font, fill=INK)

    for tick in _ticks(origin.imag, area.left_bottom.imag, area.right_top.imag, tick_step):
        point = _position(area, box, complex(origin.real, tick))
        if point is None:
            continue
        x, y = point
        draw.line([(x, y), (x + tick_size, y)], fill=INK, width=line_width)
        label = format_tick(tick)
        _, label_height = _measure(draw, label, font)
        draw.text((x + tick_size + 2, y - label_height / 2), label, font=font, fill=INK)

    re_label, im_label = "Re z", "Im z"
    re_width, re_height = _measure(draw, re_label, font)
    im_width, _ = _measure(draw, im_label, font)
    draw.text((box.right - re_width, y_pos + re_height), re_label, font=font, fill=INK)
    draw.text((x_pos - im_width - font_size, box.top), im_label, font=font, fill=INK)


def draw_function_name(canvas: PIL.Image.Image, box: Box, name: str) -> None:
    """Draw ``name`` in a framed white label at the top-left corner of ``box``."""

    font = load_font(FONT_SIZE * max(box.width, box.height))
    draw = PIL.ImageDraw.Draw(canvas)
    text_width, text_height = _measure(draw, name, font)
    x, y = box.left + 5, box.top + 5
    draw.rectangle(
        [(x - 2, y - 2), (x + text_width + 6, y + text_height + 6)],
        fill=PAPER,
        outline=INK,
        width=2,
    )
    draw.text((x + 2, y), name, font=font, fill=INK)
