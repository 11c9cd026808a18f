"""Reading and writing complex number literals.

Three forms are understood, tried in this order:

* ``2.5`` - a real number;
* ``-0.5i`` or ``i`` - an imaginary number;
* ``{3,0.5i}`` - a pair of real and imaginary parts.
"""

from __future__ import annotations

import math
import re
from typing import Optional

EPS = 1e-12

IMAGINARY_UNIT = "i"
SEPARATOR = ","
START = "{"
END = "}"

# Plain ASCII decimal notation, optionally with an exponent.
_DECIMAL = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?", re.ASCII)


class LiteralError(ValueError):
    """Raised when a string is not a complex number literal."""


def _real(text: str) -> Optional[float]:
    text = text.strip()
    if _DECIMAL.fullmatch(text) is None:
        return None
    value = float(text)
    return value if math.isfinite(value) else None


def _imaginary(text: str) -> Optional[float]:
    text = text.strip()
    if not text.endswith(IMAGINARY_UNIT):
        return None
    coefficient = text[:-1]
    if coefficient in {"", "+"}:
        return 1.0
    if coefficient == "-":
        return -1.0
    return _real(coefficient)


def try_parse_complex(text: str) -> Optional[complex]:
    """Return the complex number written in ``text`` or ``None``."""

    if not text:
        return None

    real = _real(text)
    if real is not None:
        return complex(real, 0.0)

    im = _imaginary(text)
    if im is not None:
        return complex(0.0, im)

    if text.startswith(START) and text.endswith(END):
        parts = text[1:-1].split(SEPARATOR)
        if len(parts) != 2:
            return None
        real = _real(parts[0])
        im = _imaginary(parts[1])
        if real is None or im is None:
            return None
        return complex(real, im)

    return None


def parse_complex(text: str) -> complex:
    """Parse a complex literal, raising :class:`LiteralError` on failure."""

    value = try_parse_complex(text)
    if value is None:
        raise LiteralError(f"Not a complex number literal: {text!r}")
    return value


def _number(value: float) -> str:
    value = float(value)
    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


def format_complex(value: complex) -> str:
    """Write ``value`` in the shortest form accepted by :func:`parse_complex`."""

    value = complex(value)
    if abs(value.imag) < EPS:
        return _number(value.real)

    if abs(value.real) < EPS:
        if abs(value.imag - 1.0) < EPS:
            return IMAGINARY_UNIT
        return f"{_number(value.imag)}{IMAGINARY_UNIT}"

    return f"{START}{_number(value.real)}{SEPARATOR}{_number(value.imag)}{IMAGINARY_UNIT}{END}"
