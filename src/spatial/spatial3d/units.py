# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 NVIDIA Corporation

"""Unit-tagged scalar quantities.

Arithmetic is plain float arithmetic; the unit tag is carried alongside the
value and compared for identity. Units are never converted.

The operation names mirror the usual scalar vocabulary (``add``, ``min``,
``abs``, ``sum``...) and are meant to be used through the module namespace::

    from spatial3d import units

    total = units.add(a, b)
"""

from __future__ import annotations

import builtins
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional

import numpy as np
from spatial3d.config import DEFAULT_TOLERANCES
from spatial3d.errors import InvalidRangeError, UnitMismatchError
from spatial3d.frames import DIMENSIONLESS, UnitTag, ensure_same_unit


@dataclass(frozen=True)
class Quantity:
    """A scalar value tagged with a unit."""

    value: float
    unit: UnitTag

    def __float__(self) -> float:
        return float(self.value)

    def __repr__(self) -> str:
        return f"Quantity({self.value!r}, {self.unit!r})"


def mul_unit(left: UnitTag, right: UnitTag) -> UnitTag:
    """Unit of a product."""
    if left == DIMENSIONLESS:
        return right
    if right == DIMENSIONLESS:
        return left
    return UnitTag(f"{left}*{right}")


def div_unit(left: UnitTag, right: UnitTag) -> UnitTag:
    """Unit of a quotient."""
    if right == DIMENSIONLESS:
        return left
    if left == DIMENSIONLESS:
        return UnitTag(f"{DIMENSIONLESS}/{right}")
    return UnitTag(f"{left}/{right}")


def sqrt_unit(squared: UnitTag) -> UnitTag:
    """Unit of a square root; only ``1`` and ``u*u`` have one."""
    if squared == DIMENSIONLESS:
        return squared
    tokens = squared.split("*")
    half = len(tokens) // 2
    if len(tokens) % 2 == 0 and tokens[:half] == tokens[half:]:
        return UnitTag("*".join(tokens[:half]))
    raise UnitMismatchError(f"Unit {squared!r} is not a perfect square")


def quantity(unit_tag: UnitTag, value: float) -> Quantity:
    return Quantity(value, unit_tag)


def dimensionless(value: float) -> Quantity:
    return Quantity(value, DIMENSIONLESS)


def value_of(value: Quantity) -> float:
    return value.value


def _same_unit(left: Quantity, right: Quantity, what: str) -> UnitTag:
    ensure_same_unit(left.unit, right.unit, what)
    return left.unit


def add(left: Quantity, right: Quantity) -> Quantity:
    return Quantity(left.value + right.value, _same_unit(left, right, "add"))


def sub(left: Quantity, right: Quantity) -> Quantity:
    return Quantity(left.value - right.value, _same_unit(left, right, "sub"))


def neg(value: Quantity) -> Quantity:
    return Quantity(-value.value, value.unit)


def abs(value: Quantity) -> Quantity:
    return Quantity(builtins.abs(value.value), value.unit)


def min(left: Quantity, right: Quantity) -> Quantity:
    return Quantity(builtins.min(left.value, right.value), _same_unit(left, right, "min"))


def max(left: Quantity, right: Quantity) -> Quantity:
    return Quantity(builtins.max(left.value, right.value), _same_unit(left, right, "max"))


def clamp_unsafe(value: Quantity, min_value: Quantity, max_value: Quantity) -> Quantity:
    """Clamp without checking that the bounds are ordered.

    With inverted bounds the result is ``min_value``.
    """
    return max(min_value, min(value, max_value))


def clamp(value: Quantity, min_value: Quantity, max_value: Quantity) -> Quantity:
    """Clamp a quantity to the inclusive range [min_value, max_value].

    Raises:
        InvalidRangeError: If ``min_value > max_value``.
    """
    _same_unit(min_value, max_value, "clamp bounds")
    if min_value.value > max_value.value:
        raise InvalidRangeError("minValue must be <= maxValue")
    return clamp_unsafe(value, min_value, max_value)


def scale(value: Quantity, scalar: float) -> Quantity:
    """Multiply by a unitless scalar."""
    return Quantity(value.value * scalar, value.unit)


def mul(left: Quantity, right: Quantity) -> Quantity:
    return Quantity(left.value * right.value, mul_unit(left.unit, right.unit))


def div(left: Quantity, right: Quantity) -> Quantity:
    # IEEE semantics: a zero divisor gives inf/nan instead of ZeroDivisionError.
    with np.errstate(divide="ignore", invalid="ignore"):
        result = float(np.float64(left.value) / right.value)
    return Quantity(result, div_unit(left.unit, right.unit))


def sqrt(value: Quantity) -> Quantity:
    """Square root of a quantity whose unit is a perfect square."""
    result_unit = sqrt_unit(value.unit)
    with np.errstate(invalid="ignore"):
        result = float(np.sqrt(np.float64(value.value)))
    return Quantity(result, result_unit)


def eq(left: Quantity, right: Quantity) -> bool:
    """Exact equality; does not absorb floating-point rounding."""
    _same_unit(left, right, "eq")
    return left.value == right.value


def approx_eq(
    left: Quantity,
    right: Quantity,
    tolerance: float = DEFAULT_TOLERANCES.approx_eq_tolerance,
) -> bool:
    """True when the absolute difference is within ``tolerance``."""
    _same_unit(left, right, "approx_eq")
    return builtins.abs(left.value - right.value) <= tolerance


def lt(left: Quantity, right: Quantity) -> bool:
    _same_unit(left, right, "lt")
    return left.value < right.value


def lte(left: Quantity, right: Quantity) -> bool:
    _same_unit(left, right, "lte")
    return left.value <= right.value


def gt(left: Quantity, right: Quantity) -> bool:
    _same_unit(left, right, "gt")
    return left.value > right.value


def gte(left: Quantity, right: Quantity) -> bool:
    _same_unit(left, right, "gte")
    return left.value >= right.value


def sum(values: Sequence[Quantity], unit_tag: Optional[UnitTag] = None) -> Quantity:
    """Sum same-unit quantities.

    ``unit_tag`` is required for an empty sequence, where it names the unit of
    the zero result; otherwise it is checked against the values.
    """
    if not values:
        if unit_tag is None:
            raise ValueError("sum of an empty sequence needs an explicit unit_tag")
        return Quantity(0.0, unit_tag)

    result_unit = values[0].unit if unit_tag is None else unit_tag
    total = 0.0
    for item in values:
        ensure_same_unit(result_unit, item.unit, "sum")
        total += item.value
    return Quantity(total, result_unit)


def average(values: Sequence[Quantity]) -> Quantity:
    """Mean of a non-empty sequence of same-unit quantities."""
    if not values:
        raise ValueError("average requires at least one quantity")
    total = sum(values)
    return Quantity(total.value / len(values), total.unit)
