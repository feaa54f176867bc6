# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 NVIDIA Corporation

"""Unit tests for the unit-tagged scalar kernel."""

import math

import pytest
from spatial3d import InvalidRangeError, Quantity, UnitMismatchError, unit, units
from spatial3d.units import div_unit, mul_unit, sqrt_unit


class TestConstruction:
    def test_quantity_carries_value_and_unit(self, meter):
        length = units.quantity(meter, 2.5)
        assert length == Quantity(2.5, "m")
        assert units.value_of(length) == 2.5
        assert float(length) == 2.5

    def test_dimensionless(self):
        assert units.dimensionless(3.0).unit == "1"

    def test_quantity_is_immutable(self, meter):
        length = units.quantity(meter, 1.0)
        with pytest.raises(AttributeError):
            length.value = 2.0


class TestArithmetic:
    def test_add_sub_neg_abs(self, meter):
        a = units.quantity(meter, 3.0)
        b = units.quantity(meter, 1.5)
        assert units.add(a, b) == Quantity(4.5, "m")
        assert units.sub(b, a) == Quantity(-1.5, "m")
        assert units.neg(a) == Quantity(-3.0, "m")
        assert units.abs(units.neg(a)) == a

    def test_add_rejects_mixed_units(self, meter, second):
        with pytest.raises(UnitMismatchError, match="expected unit 'm', got 's'"):
            units.add(units.quantity(meter, 1.0), units.quantity(second, 1.0))

    def test_min_max(self, meter):
        a = units.quantity(meter, 3.0)
        b = units.quantity(meter, -1.0)
        assert units.min(a, b) == b
        assert units.max(a, b) == a

    def test_scale_keeps_unit(self, meter):
        assert units.scale(units.quantity(meter, 2.0), 4.0) == Quantity(8.0, "m")

    def test_mul_and_div_build_unit_expressions(self, meter, second):
        distance = units.quantity(meter, 10.0)
        duration = units.quantity(second, 4.0)
        speed = units.div(distance, duration)
        assert speed == Quantity(2.5, "m/s")
        area = units.mul(distance, distance)
        assert area == Quantity(100.0, "m*m")

    def test_div_by_zero_follows_ieee(self, meter):
        result = units.div(units.quantity(meter, 1.0), units.dimensionless(0.0))
        assert result.value == math.inf
        nan_result = units.div(units.quantity(meter, 0.0), units.dimensionless(0.0))
        assert math.isnan(nan_result.value)

    def test_sqrt_of_square_unit(self, meter):
        area = units.quantity(unit("m*m"), 9.0)
        assert units.sqrt(area) == units.quantity(meter, 3.0)

    def test_sqrt_rejects_non_square_unit(self, meter):
        with pytest.raises(UnitMismatchError, match="not a perfect square"):
            units.sqrt(units.quantity(meter, 4.0))

    def test_sqrt_of_negative_is_nan(self):
        assert math.isnan(units.sqrt(units.dimensionless(-1.0)).value)


class TestUnitAlgebra:
    @pytest.mark.parametrize(
        "left, right, expected",
        [
            ("1", "m", "m"),
            ("m", "1", "m"),
            ("m", "s", "m*s"),
        ],
    )
    def test_mul_unit(self, left, right, expected):
        assert mul_unit(left, right) == expected

    @pytest.mark.parametrize(
        "left, right, expected",
        [
            ("m", "1", "m"),
            ("1", "s", "1/s"),
            ("m", "s", "m/s"),
        ],
    )
    def test_div_unit(self, left, right, expected):
        assert div_unit(left, right) == expected

    def test_sqrt_unit(self):
        assert sqrt_unit("1") == "1"
        assert sqrt_unit("m*s*m*s") == "m*s"
        with pytest.raises(UnitMismatchError):
            sqrt_unit("m*s")


class TestClamp:
    def test_clamp_inside_and_outside(self, meter):
        lo = units.quantity(meter, 0.0)
        hi = units.quantity(meter, 10.0)
        assert units.clamp(units.quantity(meter, 5.0), lo, hi).value == 5.0
        assert units.clamp(units.quantity(meter, -1.0), lo, hi) == lo
        assert units.clamp(units.quantity(meter, 11.0), lo, hi) == hi

    def test_clamp_rejects_inverted_bounds(self, meter):
        with pytest.raises(InvalidRangeError, match="minValue must be <= maxValue"):
            units.clamp(
                units.quantity(meter, 5.0),
                units.quantity(meter, 10.0),
                units.quantity(meter, 0.0),
            )

    def test_clamp_unsafe_with_inverted_bounds_returns_lower_bound(self, meter):
        lo = units.quantity(meter, 10.0)
        hi = units.quantity(meter, 0.0)
        assert units.clamp_unsafe(units.quantity(meter, 5.0), lo, hi) == lo


class TestComparison:
    def test_eq_is_exact(self):
        assert not units.eq(units.dimensionless(0.1 + 0.2), units.dimensionless(0.3))

    def test_approx_eq_default_tolerance(self):
        assert units.approx_eq(units.dimensionless(0.1 + 0.2), units.dimensionless(0.3))
        assert not units.approx_eq(units.dimensionless(1.0), units.dimensionless(1.0 + 1e-9))

    def test_approx_eq_custom_tolerance(self):
        assert units.approx_eq(units.dimensionless(1.0), units.dimensionless(1.05), tolerance=0.1)

    def test_ordering(self, meter):
        a = units.quantity(meter, 1.0)
        b = units.quantity(meter, 2.0)
        assert units.lt(a, b) and units.lte(a, a)
        assert units.gt(b, a) and units.gte(b, b)

    def test_ordering_rejects_mixed_units(self, meter, second):
        with pytest.raises(UnitMismatchError):
            units.lt(units.quantity(meter, 1.0), units.quantity(second, 2.0))


class TestAggregates:
    def test_sum(self, meter):
        values = [units.quantity(meter, v) for v in (1.0, 2.0, 3.5)]
        assert units.sum(values) == Quantity(6.5, "m")

    def test_sum_of_empty_needs_unit(self, meter):
        assert units.sum([], meter) == Quantity(0.0, "m")
        with pytest.raises(ValueError, match="explicit unit_tag"):
            units.sum([])

    def test_sum_rejects_mixed_units(self, meter, second):
        with pytest.raises(UnitMismatchError):
            units.sum([units.quantity(meter, 1.0), units.quantity(second, 1.0)])

    def test_average(self, meter):
        values = [units.quantity(meter, v) for v in (1.0, 2.0, 6.0)]
        assert units.average(values) == Quantity(3.0, "m")

    def test_average_of_empty_raises(self):
        with pytest.raises(ValueError, match="at least one"):
            units.average([])
