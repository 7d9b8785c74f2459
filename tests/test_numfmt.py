"""Tests for the number formatter."""

import math

import numpy as np
import pytest

from cifstruct.core.numfmt import format_fixed, format_number


@pytest.mark.parametrize(
    "value, expected",
    [
        (0.0, "0"),
        (1.0, "1"),
        (0.1, "0.1"),
        (-2.5, "-2.5"),
        (123456789.0, "123456789"),
        (1234567891.0, "1.23456789e+09"),
        (1e-8, "1e-08"),
        (0.0001, "0.0001"),
        (0.00001, "1e-05"),
        (1.0 / 3.0, "0.333333333"),
    ],
)
def test_format_number_double(value, expected):
    assert format_number(value) == expected


def test_format_number_single():
    assert format_number(1.0 / 3.0, single=True) == "0.333333"
    assert format_number(np.float32(0.1)) == "0.1"
    assert format_number(np.float32(1234567.0)) == "1.23457e+06"


def test_format_number_round_trip():
    magnitudes = np.geomspace(1e-8, 1e8, 400)
    values = [0.0] + [float(v) for v in magnitudes] + [-float(v) for v in magnitudes]
    values += [math.pi * 10 ** k for k in range(-8, 8)]
    for v in values:
        back = float(format_number(v))
        assert math.isclose(back, v, rel_tol=1e-8, abs_tol=0.0), (v, format_number(v))


def test_format_number_single_round_trip():
    for v in np.geomspace(1e-6, 1e6, 100, dtype=np.float32):
        assert math.isclose(float(format_number(v)), float(v), rel_tol=1e-5)


def test_format_number_is_deterministic():
    v = 12.345678901234
    assert len({format_number(v) for _ in range(20)}) == 1


@pytest.mark.parametrize(
    "value, precision, expected",
    [
        (1.0, 3, "1.000"),
        (-0.5, 3, "-0.500"),
        (12.3456, 2, "12.35"),
        (2.6, 0, "3"),
        (0.1234567, 6, "0.123457"),
        (99999999.0, 3, "99999999.000"),
        (1e9, 3, "1e+09"),
        (-1e8, 3, "-1e+08"),
        (1e8, 1, "1e+08"),
    ],
)
def test_format_fixed(value, precision, expected):
    assert format_fixed(value, precision) == expected


def test_format_fixed_always_three_digits():
    values = [0.0, -0.0004, 1e-8, 7.0, -123.4567, 12345678.9, -99999999.9]
    values += [float(v) for v in np.linspace(-1e7, 1e7, 101)]
    for v in values:
        text = format_fixed(v, 3)
        whole, frac = text.split(".")
        assert len(frac) == 3, text


@pytest.mark.parametrize("precision", [-1, 7])
def test_format_fixed_rejects_precision(precision):
    with pytest.raises(ValueError, match="precision"):
        format_fixed(1.0, precision)
