"""Public API for complex function domain-coloring utilities."""

from .color import HSL, hsl_to_rgb, hsl_to_rgb_array
from .function import Function, FunctionName
from .geometry import Area, Segment
from .literal import LiteralError, format_complex, parse_complex, try_parse_complex
from .parser import ExpressionError, parse_function, tokenize
from .renderer import (
    OrderKey,
    OrderedBuffer,
    Raster,
    RenderParameters,
    render_function,
)

__all__ = [
    "Area",
    "ExpressionError",
    "Function",
    "FunctionName",
    "HSL",
    "LiteralError",
    "OrderKey",
    "OrderedBuffer",
    "Raster",
    "RenderParameters",
    "Segment",
    "format_complex",
    "hsl_to_rgb",
    "hsl_to_rgb_array",
    "parse_complex",
    "parse_function",
    "render_function",
    "tokenize",
    "try_parse_complex",
]
