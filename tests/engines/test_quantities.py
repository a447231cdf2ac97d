"""
Tests for quantity input coercion and clamping.
"""

from decimal import Decimal

import pytest

from issuance_engines.quantities import clamp_mif_quantity, coerce_quantity, to_int


class TestCoerceQuantity:
    @pytest.mark.parametrize("value,expected", [
        (0, 0),
        (7, 7),
        ("7", 7),
        (" 12 ", 12),
        (3.0, 3),
        ("4.0", 4),
        (Decimal("9"), 9),
    ])
    def test_accepts_whole_non_negative_numbers(self, value, expected):
        assert coerce_quantity(value) == expected

    @pytest.mark.parametrize("value", [
        None, "", "   ", "abc", -1, "-3", 2.5, "1.5",
        float("nan"), float("inf"), True, False, [], {},
    ])
    def test_rejects_unusable_input(self, value):
        assert coerce_quantity(value) is None


class TestToInt:
    def test_falls_back_to_default(self):
        assert to_int(None) == 0
        assert to_int("junk", default=5) == 5

    def test_reads_numeric_strings(self):
        assert to_int("15") == 15


class TestClampMifQuantity:
    def test_within_bounds_unchanged(self):
        assert clamp_mif_quantity(5, 10) == 5

    def test_clamped_to_upper_bound(self):
        assert clamp_mif_quantity(12, 10) == 10

    def test_negative_bound_clamps_to_zero(self):
        assert clamp_mif_quantity(3, -2) == 0
