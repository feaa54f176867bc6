# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 NVIDIA Corporation

"""Frame- and unit-tagged 3D vectors.

Three kinds share one storage layout (a read-only float64 array of shape (3,)):

- Point3: an absolute location. Points are not summable with each other;
  point - point gives a Delta3 and point + Delta3 gives a point.
- Delta3: a displacement that can be added, scaled and projected.
- Dir3: a dimensionless Delta3 used for directions and axes. Construction does
  not enforce unit length; functions that need a unit vector normalize it.

Safe functions raise DegenerateVectorError when a length is at or below
``DEFAULT_TOLERANCES.near_zero`` (an absolute threshold, 1e-14). Their
``_unsafe`` twins divide unconditionally and may return nan/inf.
"""

from __future__ import annotations

import math
from collections.abc import Iterator
from numbers import Real
from typing import Optional, TypeVar, Union

import numpy as np

from spatial3d.config import DEFAULT_TOLERANCES
from spatial3d.errors import DegenerateVectorError
from spatial3d.frames import (
    DIMENSIONLESS,
    FrameTag,
    UnitTag,
    ensure_same_frame,
    ensure_same_unit,
)
from spatial3d.units import Quantity, mul_unit

NEAR_ZERO = DEFAULT_TOLERANCES.near_zero

Component = Union[Quantity, float]
V = TypeVar("V", bound="Vec3")


class Vec3:
    """Shared storage and accessors for Point3, Delta3 and Dir3."""

    __slots__ = ("_data", "_frame", "_unit")

    def __init__(
        self,
        frame_tag: FrameTag,
        x: float,
        y: float,
        z: float,
        unit_tag: UnitTag = DIMENSIONLESS,
    ):
        self._set(frame_tag, np.array([x, y, z], dtype=np.float64), unit_tag)

    def _set(self, frame_tag: FrameTag, data: np.ndarray, unit_tag: UnitTag) -> None:
        data.flags.writeable = False
        self._data = data
        self._frame = frame_tag
        self._unit = unit_tag

    @classmethod
    def _wrap(cls: type[V], frame_tag: FrameTag, data: np.ndarray, unit_tag: UnitTag) -> V:
        """Build without copying; ``data`` must be a fresh float64 (3,) array."""
        obj = cls.__new__(cls)
        obj._set(frame_tag, data, unit_tag)
        return obj

    @property
    def frame(self) -> FrameTag:
        return self._frame

    @property
    def unit(self) -> UnitTag:
        return self._unit

    @property
    def x(self) -> float:
        return float(self._data[0])

    @property
    def y(self) -> float:
        return float(self._data[1])

    @property
    def z(self) -> float:
        return float(self._data[2])

    def as_array(self) -> np.ndarray:
        """Components as a writable float64 copy of shape (3,)."""
        return self._data.copy()

    def __len__(self) -> int:
        return 3

    def __getitem__(self, index: int) -> float:
        return float(self._data[index])

    def __iter__(self) -> Iterator[float]:
        return (float(v) for v in self._data)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return (
            self._frame == other._frame
            and self._unit == other._unit
            and bool(np.array_equal(self._data, other._data))
        )

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._frame, self._unit, tuple(self)))

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(frame={self._frame!r}, "
            f"x={self.x!r}, y={self.y!r}, z={self.z!r}, unit={self._unit!r})"
        )


class Point3(Vec3):
    """Absolute location in a frame."""

    __slots__ = ()


class Delta3(Vec3):
    """Displacement (translation) vector in a frame."""

    __slots__ = ()


class Dir3(Delta3):
    """Dimensionless direction in a frame; not necessarily unit length."""

    __slots__ = ()

    def __init__(self, frame_tag: FrameTag, x: float, y: float, z: float):
        super().__init__(frame_tag, x, y, z, DIMENSIONLESS)

    @classmethod
    def _wrap(cls, frame_tag: FrameTag, data: np.ndarray, unit_tag: UnitTag = DIMENSIONLESS) -> "Dir3":
        ensure_same_unit(DIMENSIONLESS, unit_tag, "Dir3")
        obj = cls.__new__(cls)
        obj._set(frame_tag, data, DIMENSIONLESS)
        return obj


# =============================================================================
# Construction
# =============================================================================


def _split_components(
    x: Component, y: Component, z: Component, unit_tag: Optional[UnitTag]
) -> tuple[np.ndarray, UnitTag]:
    components = (x, y, z)
    tagged = [c for c in components if isinstance(c, Quantity)]
    if tagged and len(tagged) != 3:
        raise TypeError("Components must be all Quantity or all plain numbers")

    if tagged:
        result_unit = tagged[0].unit if unit_tag is None else unit_tag
        for c in tagged:
            ensure_same_unit(result_unit, c.unit, "vector component")
        values = [c.value for c in tagged]
    else:
        for c in components:
            if not isinstance(c, Real):
                raise TypeError(f"Vector component must be a number, got {type(c).__name__}")
        result_unit = DIMENSIONLESS if unit_tag is None else unit_tag
        values = list(components)

    return np.array(values, dtype=np.float64), result_unit


def delta3(
    frame_tag: FrameTag,
    x: Component,
    y: Component,
    z: Component,
    unit: Optional[UnitTag] = None,
) -> Delta3:
    """Construct a displacement.

    Components are either three Quantity values sharing one unit, or three plain
    numbers tagged with ``unit`` (dimensionless when omitted).
    """
    data, unit_tag = _split_components(x, y, z, unit)
    return Delta3._wrap(frame_tag, data, unit_tag)


def point3(
    frame_tag: FrameTag,
    x: Component,
    y: Component,
    z: Component,
    unit: Optional[UnitTag] = None,
) -> Point3:
    """Construct a point; components follow the same rules as delta3."""
    data, unit_tag = _split_components(x, y, z, unit)
    return Point3._wrap(frame_tag, data, unit_tag)


def dir3(frame_tag: FrameTag, x: Component, y: Component, z: Component) -> Dir3:
    """Construct a dimensionless direction."""
    data, unit_tag = _split_components(x, y, z, None)
    return Dir3._wrap(frame_tag, data, unit_tag)


def zero_vec3(unit_tag: UnitTag, frame_tag: FrameTag) -> Delta3:
    return Delta3._wrap(frame_tag, np.zeros(3, dtype=np.float64), unit_tag)


# =============================================================================
# Kind and tag checks
# =============================================================================


def _require_delta(value: Vec3, what: str) -> None:
    if not isinstance(value, Delta3):
        raise TypeError(f"{what} expects a Delta3 or Dir3, got {type(value).__name__}")


def _require_point(value: Vec3, what: str) -> None:
    if not isinstance(value, Point3):
        raise TypeError(f"{what} expects a Point3, got {type(value).__name__}")


def _require_dir(value: Vec3, what: str) -> None:
    if not isinstance(value, Dir3):
        raise TypeError(f"{what} expects a Dir3, got {type(value).__name__}")


def _same_kind(left: Vec3, right: Vec3, what: str) -> type[Vec3]:
    """Common kind of two operands: Point3 with Point3, Delta3 with Delta3."""
    if isinstance(left, Point3) and isinstance(right, Point3):
        return Point3
    if isinstance(left, Delta3) and isinstance(right, Delta3):
        if isinstance(left, Dir3) and isinstance(right, Dir3):
            return Dir3
        return Delta3
    raise TypeError(
        f"{what} expects two points or two displacements, "
        f"got {type(left).__name__} and {type(right).__name__}"
    )


def _check_peers(left: Vec3, right: Vec3, what: str) -> None:
    ensure_same_frame(left.frame, right.frame, what)
    ensure_same_unit(left.unit, right.unit, what)


def vec3_like(template: Vec3, data: np.ndarray, frame_tag: FrameTag, unit_tag: UnitTag) -> Vec3:
    """Wrap ``data`` in the kind of ``template``.

    A Dir3 template keeps its kind only while the result stays dimensionless.
    """
    kind = type(template)
    if kind is Dir3 and unit_tag != DIMENSIONLESS:
        kind = Delta3
    return kind._wrap(frame_tag, data, unit_tag)


# =============================================================================
# Algebra
# =============================================================================


def add_vec3(left: Delta3, right: Delta3) -> Delta3:
    _require_delta(left, "add_vec3")
    _require_delta(right, "add_vec3")
    _check_peers(left, right, "add_vec3")
    return Delta3._wrap(left.frame, left._data + right._data, left.unit)


def sub_vec3(left: Delta3, right: Delta3) -> Delta3:
    _require_delta(left, "sub_vec3")
    _require_delta(right, "sub_vec3")
    _check_peers(left, right, "sub_vec3")
    return Delta3._wrap(left.frame, left._data - right._data, left.unit)


def neg_vec3(value: Delta3) -> Delta3:
    _require_delta(value, "neg_vec3")
    return Delta3._wrap(value.frame, -value._data, value.unit)


def scale_vec3(value: Delta3, scalar: float) -> Delta3:
    """Multiply each component by a unitless scalar."""
    _require_delta(value, "scale_vec3")
    return Delta3._wrap(value.frame, value._data * scalar, value.unit)


def scale_dir3(value: Dir3, magnitude: Quantity) -> Delta3:
    """Scale a direction by a unitful magnitude, giving a displacement in that unit."""
    _require_dir(value, "scale_dir3")
    return Delta3._wrap(value.frame, value._data * magnitude.value, magnitude.unit)


def add_point3(point: Point3, delta: Delta3) -> Point3:
    """Translate a point by a displacement."""
    _require_point(point, "add_point3")
    _require_delta(delta, "add_point3")
    _check_peers(point, delta, "add_point3")
    return Point3._wrap(point.frame, point._data + delta._data, point.unit)


def sub_point3_delta3(point: Point3, delta: Delta3) -> Point3:
    _require_point(point, "sub_point3_delta3")
    _require_delta(delta, "sub_point3_delta3")
    _check_peers(point, delta, "sub_point3_delta3")
    return Point3._wrap(point.frame, point._data - delta._data, point.unit)


def sub_point3(left: Point3, right: Point3) -> Delta3:
    """Displacement from ``right`` to ``left``."""
    _require_point(left, "sub_point3")
    _require_point(right, "sub_point3")
    _check_peers(left, right, "sub_point3")
    return Delta3._wrap(left.frame, left._data - right._data, left.unit)


# =============================================================================
# Geometry
# =============================================================================


def _dot(left: np.ndarray, right: np.ndarray) -> float:
    return float(left[0] * right[0] + left[1] * right[1] + left[2] * right[2])


def _cross(left: np.ndarray, right: np.ndarray) -> np.ndarray:
    return np.array(
        [
            left[1] * right[2] - left[2] * right[1],
            left[2] * right[0] - left[0] * right[2],
            left[0] * right[1] - left[1] * right[0],
        ],
        dtype=np.float64,
    )


def _hypot(data: np.ndarray) -> float:
    return math.hypot(float(data[0]), float(data[1]), float(data[2]))


def dot_vec3(left: Delta3, right: Delta3) -> Quantity:
    _require_delta(left, "dot_vec3")
    _require_delta(right, "dot_vec3")
    ensure_same_frame(left.frame, right.frame, "dot_vec3")
    return Quantity(_dot(left._data, right._data), mul_unit(left.unit, right.unit))


def cross_vec3(left: Delta3, right: Delta3) -> Delta3:
    _require_delta(left, "cross_vec3")
    _require_delta(right, "cross_vec3")
    ensure_same_frame(left.frame, right.frame, "cross_vec3")
    return Delta3._wrap(
        left.frame, _cross(left._data, right._data), mul_unit(left.unit, right.unit)
    )


def length_squared_vec3(value: Delta3) -> Quantity:
    return dot_vec3(value, value)


def length_vec3(value: Delta3) -> Quantity:
    """Euclidean length computed with hypot to avoid overflow."""
    _require_delta(value, "length_vec3")
    return Quantity(_hypot(value._data), value.unit)


def distance_vec3(left: Vec3, right: Vec3) -> Quantity:
    """Distance between two points or two displacements."""
    _same_kind(left, right, "distance_vec3")
    _check_peers(left, right, "distance_vec3")
    return Quantity(_hypot(left._data - right._data), left.unit)


def distance_point3(left: Point3, right: Point3) -> Quantity:
    _require_point(left, "distance_point3")
    _require_point(right, "distance_point3")
    return distance_vec3(left, right)


def normalize_vec3_unsafe(value: Delta3) -> Dir3:
    """Normalize without a length guard; a zero vector yields nan components."""
    _require_delta(value, "normalize_vec3_unsafe")
    magnitude = _hypot(value._data)
    with np.errstate(divide="ignore", invalid="ignore"):
        data = value._data / magnitude
    return Dir3._wrap(value.frame, data)


def normalize_vec3(value: Delta3, *, epsilon: float = NEAR_ZERO) -> Dir3:
    """Normalize to unit length.

    Raises:
        DegenerateVectorError: If the length is <= ``epsilon`` (1e-14 by default).
    """
    _require_delta(value, "normalize_vec3")
    if _hypot(value._data) <= epsilon:
        raise DegenerateVectorError("Cannot normalize a zero-length vector")
    return normalize_vec3_unsafe(value)


def lerp_vec3(start: V, end: V, t: float) -> V:
    """Linear interpolation ``start*(1-t) + end*t``.

    Works on two points or two displacements. ``t`` is not clamped, so values
    outside [0, 1] extrapolate.
    """
    kind = _same_kind(start, end, "lerp_vec3")
    _check_peers(start, end, "lerp_vec3")
    inverse_t = 1.0 - t
    return kind._wrap(start.frame, start._data * inverse_t + end._data * t, start.unit)


def project_vec3_unsafe(value: Delta3, onto: Delta3) -> Delta3:
    """Project ``value`` onto ``onto`` without a zero-length guard."""
    _require_delta(value, "project_vec3")
    _require_delta(onto, "project_vec3")
    ensure_same_frame(value.frame, onto.frame, "project_vec3")
    onto_length_squared = _dot(onto._data, onto._data)
    with np.errstate(divide="ignore", invalid="ignore"):
        scalar = np.float64(_dot(value._data, onto._data)) / onto_length_squared
        data = onto._data * scalar
    return Delta3._wrap(value.frame, data, value.unit)


def project_vec3(value: Delta3, onto: Delta3, *, epsilon: float = NEAR_ZERO) -> Delta3:
    """Project ``value`` onto ``onto``; the result keeps ``value``'s unit.

    Raises:
        DegenerateVectorError: If ``|onto|^2 <= epsilon**2``.
    """
    _require_delta(onto, "project_vec3")
    if _dot(onto._data, onto._data) <= epsilon * epsilon:
        raise DegenerateVectorError("Cannot project onto a zero-length vector")
    return project_vec3_unsafe(value, onto)


def _reflect(incident: Delta3, normal_hat: Dir3) -> Delta3:
    ensure_same_frame(incident.frame, normal_hat.frame, "reflect_vec3")
    scale = 2.0 * _dot(incident._data, normal_hat._data)
    data = incident._data - normal_hat._data * scale
    return vec3_like(incident, data, incident.frame, incident.unit)


def reflect_vec3_unsafe(incident: Delta3, normal: Dir3) -> Delta3:
    _require_delta(incident, "reflect_vec3")
    _require_dir(normal, "reflect_vec3")
    return _reflect(incident, normalize_vec3_unsafe(normal))


def reflect_vec3(incident: Delta3, normal: Dir3, *, epsilon: float = NEAR_ZERO) -> Delta3:
    """Reflect ``incident`` about the plane with normal ``normal``.

    ``normal`` is normalized first.

    Raises:
        DegenerateVectorError: If ``normal`` has length <= ``epsilon``.
    """
    _require_delta(incident, "reflect_vec3")
    _require_dir(normal, "reflect_vec3")
    return _reflect(incident, normalize_vec3(normal, epsilon=epsilon))


def _angle(left: Delta3, right: Delta3, epsilon: Optional[float]) -> float:
    _require_delta(left, "angle_between_vec3")
    _require_delta(right, "angle_between_vec3")
    ensure_same_frame(left.frame, right.frame, "angle_between_vec3")
    left_length = _hypot(left._data)
    right_length = _hypot(right._data)
    if epsilon is not None and (left_length <= epsilon or right_length <= epsilon):
        raise DegenerateVectorError("Cannot compute angle with a zero-length vector")

    with np.errstate(divide="ignore", invalid="ignore"):
        cosine = np.float64(_dot(left._data, right._data)) / (left_length * right_length)
    # Rounding can push |cosine| slightly past 1.
    return float(np.arccos(np.clip(cosine, -1.0, 1.0)))


def angle_between_vec3_unsafe(left: Delta3, right: Delta3) -> float:
    return _angle(left, right, None)


def angle_between_vec3(left: Delta3, right: Delta3, *, epsilon: float = NEAR_ZERO) -> float:
    """Angle in radians between two non-zero vectors.

    Raises:
        DegenerateVectorError: If either length is <= ``epsilon`` (1e-14 by default).
    """
    return _angle(left, right, epsilon)
