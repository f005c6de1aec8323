"""
Tests for numeric helpers (src/math_utils.py)
"""

import sys

import pytest

sys.path.insert(0, "src")

from math_utils import (
    approximately_equal,
    calculate_percentage,
    clamp,
    distribute_evenly,
    format_currency,
    is_numeric,
    round_numeric_leaves,
    round_to_cents,
    round_to_digits,
)


class TestIsNumeric:
    @pytest.mark.parametrize("value,expected", [
        (1, True),
        (0.5, True),
        (-3, True),
        (True, False),
        ("1", False),
        (None, False),
        (float("inf"), False),
        (float("nan"), False),
    ])
    def test_is_numeric(self, value, expected):
        assert is_numeric(value) is expected


class TestRounding:
    """Half-up rounding on the decimal representation."""

    @pytest.mark.parametrize("value,digits,expected", [
        (0.125, 2, 0.13),
        (2.675, 2, 2.68),
        (1.005, 2, 1.01),
        (0.3333333, 2, 0.33),
        (-0.125, 2, -0.13),
        (1234.5, 0, 1235.0),
        (0.00049, 3, 0.0),
    ])
    def test_round_to_digits(self, value, digits, expected):
        assert round_to_digits(value, digits) == expected

    def test_round_to_cents(self):
        assert round_to_cents(10 / 3) == 3.33

    def test_round_numeric_leaves(self):
        """Floats are rounded; ints, strings and None are untouched."""
        tree = {
            "author": 1 / 3,
            "count": 7,
            "point": None,
            "buyers": {"alice": 2 / 3, "bob": 0.0},
            "history": [0.125, "x"],
        }

        assert round_numeric_leaves(tree) == {
            "author": 0.33,
            "count": 7,
            "point": None,
            "buyers": {"alice": 0.67, "bob": 0.0},
            "history": [0.13, "x"],
        }

    def test_round_numeric_leaves_keeps_int_type(self):
        assert isinstance(round_numeric_leaves({"n": 3})["n"], int)


class TestArithmetic:
    def test_calculate_percentage(self):
        assert calculate_percentage(200, 15) == 30

    def test_distribute_evenly(self):
        assert distribute_evenly(10, 4) == 2.5
        assert distribute_evenly(10, 0) == 0.0

    def test_approximately_equal(self):
        assert approximately_equal(0.1 + 0.2, 0.3)
        assert not approximately_equal(1.0, 1.001)

    def test_clamp(self):
        assert clamp(5, 0, 3) == 3
        assert clamp(-1, 0, 3) == 0
        assert clamp(2, 0, 3) == 2

    @pytest.mark.parametrize("value,expected", [
        (1234.5, "$1,234.50"),
        (0.005, "$0.01"),
        (-12, "-$12.00"),
    ])
    def test_format_currency(self, value, expected):
        assert format_currency(value) == expected
