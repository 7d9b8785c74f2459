"""Deterministic number -> text conversion for CIF output.

Double values keep 9 significant digits and single (float32) values keep 6,
which is enough for the text to parse back to the same value. Formatting goes
through printf-style ``%`` formatting, which ignores the locale.
"""

from __future__ import annotations

import numpy as np

DOUBLE_DIGITS = 9
SINGLE_DIGITS = 6
MAX_FIXED_PRECISION = 6
FIXED_LIMIT = 1e8


def format_number(value: float, single: bool = False) -> str:
    """Shortest ``%g`` text that round-trips ``value`` at its width.

    numpy.float32 values are treated as single width.
    """
    if single or isinstance(value, np.float32):
        return "%.*g" % (SINGLE_DIGITS, float(np.float32(value)))
    return "%.*g" % (DOUBLE_DIGITS, float(value))


def format_fixed(value: float, precision: int) -> str:
    """Text with exactly ``precision`` fractional digits.

    Values outside (-1e8, 1e8), and NaN, fall back to ``%g``.
    """
    if not 0 <= precision <= MAX_FIXED_PRECISION:
        raise ValueError(f"unsupported precision: {precision}")
    value = float(value)
    if -FIXED_LIMIT < value < FIXED_LIMIT:
        return "%.*f" % (precision, value)
    return "%g" % value
