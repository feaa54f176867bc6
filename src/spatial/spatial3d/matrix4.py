# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 NVIDIA Corporation

"""4x4 homogeneous transforms between tagged frames.

Storage is row-major: element ``(row r, column c)`` is ``values[4 * r + c]``,
so the translation column is ``values[3]``, ``values[7]`` and ``values[11]``.
``Mat4.matrix`` exposes the same storage as a read-only 4x4 numpy view and all
formulas below are written against that view.

Matrices are built with the ``mat4*`` functions; calling the classes directly
raises ``TypeError``.

Matrix kinds:

- Mat4: affine transform ``from_frame -> to_frame`` whose translation column
  carries ``unit``.
- LinearMat4: a Mat4 with zero translation and dimensionless unit
  (rotations, scales, normal matrices). It can transform points of any unit.
- ProjectionMat4: perspective projection; shares the storage but is not a
  Mat4, so it cannot be composed, inverted or used with transform_point3.
"""

from __future__ import annotations

import math
from collections.abc import Iterator, Sequence
from typing import Any

import numpy as np

from spatial3d.config import DEFAULT_TOLERANCES
from spatial3d.errors import (
    DegenerateLookAtError,
    InvalidLengthError,
    InvalidProjectionParamsError,
    NotRigidTransformError,
    SingularTransformError,
    UndefinedPerspectiveDivideError,
)
from spatial3d.frames import (
    DIMENSIONLESS,
    FrameTag,
    UnitTag,
    ensure_distinct_frames,
    ensure_same_frame,
    ensure_same_unit,
)
from spatial3d.quaternion import (
    Quaternion,
    ensure_nonzero_quat,
    is_rotation_basis,
    quat_from_rotation_matrix,
    rotation_matrix_from_quat,
)
from spatial3d.units import Quantity
from spatial3d.vector3 import Delta3, Dir3, Point3, vec3_like

_IDENTITY = np.eye(4, dtype=np.float64)


class _Mat4Storage:
    """Immutable 16-value row-major storage with frame and unit tags."""

    __slots__ = ("_data", "_to_frame", "_from_frame", "_unit")

    def __init__(self, *args: Any, **kwargs: Any):
        raise TypeError(f"{type(self).__name__} values are built with the mat4* functions")

    def _set(self, to_frame: FrameTag, from_frame: FrameTag, unit_tag: UnitTag, data: np.ndarray) -> None:
        data.flags.writeable = False
        self._data = data
        self._to_frame = to_frame
        self._from_frame = from_frame
        self._unit = unit_tag

    @classmethod
    def _from_values(cls, to_frame: FrameTag, from_frame: FrameTag, unit_tag: UnitTag, values: Sequence[float]):
        data = np.array(values, dtype=np.float64).reshape(-1)
        if data.shape != (16,):
            raise InvalidLengthError(f"Mat4 expects 16 values, received {data.size}")
        obj = cls.__new__(cls)
        obj._set(to_frame, from_frame, unit_tag, data)
        return obj

    @classmethod
    def _from_rows(cls, to_frame: FrameTag, from_frame: FrameTag, unit_tag: UnitTag, rows: np.ndarray):
        """Wrap a 4x4 array indexed ``rows[row, column]``."""
        obj = cls.__new__(cls)
        obj._set(to_frame, from_frame, unit_tag, np.asarray(rows, dtype=np.float64).flatten())
        return obj

    @property
    def to_frame(self) -> FrameTag:
        return self._to_frame

    @property
    def from_frame(self) -> FrameTag:
        return self._from_frame

    @property
    def unit(self) -> UnitTag:
        return self._unit

    @property
    def values(self) -> tuple[float, ...]:
        """The 16 row-major values."""
        return tuple(float(v) for v in self._data)

    @property
    def matrix(self) -> np.ndarray:
        """Read-only 4x4 view, ``matrix[row, column]``."""
        return self._data.reshape(4, 4)

    def __len__(self) -> int:
        return 16

    def __getitem__(self, index: int) -> float:
        return float(self._data[index])

    def __iter__(self) -> Iterator[float]:
        return (float(v) for v in self._data)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return (
            self._to_frame == other._to_frame
            and self._from_frame == other._from_frame
            and self._unit == other._unit
            and bool(np.array_equal(self._data, other._data))
        )

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._to_frame, self._from_frame, self._unit, self.values))

    def __repr__(self) -> str:
        rows = np.array2string(self.matrix, precision=6, separator=", ")
        return (
            f"{type(self).__name__}(to_frame={self._to_frame!r}, from_frame={self._from_frame!r}, "
            f"unit={self._unit!r},\n{rows})"
        )


class Mat4(_Mat4Storage):
    """Affine transform from ``from_frame`` into ``to_frame``."""

    __slots__ = ()

    def translation(self) -> Delta3:
        """Translation column as a displacement in ``to_frame``."""
        return Delta3._wrap(self._to_frame, self._data[3:12:4].copy(), self._unit)

    def quat(self) -> Quaternion:
        """Orientation of the linear block.

        Raises:
            InvalidRotationBasisError: If the block is not a pure rotation.
        """
        return quat_from_rotation_matrix(self._to_frame, self._from_frame, self)


class LinearMat4(Mat4):
    """Mat4 with zero translation and dimensionless unit."""

    __slots__ = ()


class ProjectionMat4(_Mat4Storage):
    """Perspective projection; ``unit`` is the depth unit of projected points."""

    __slots__ = ()


def _require_affine(value: Any, what: str) -> None:
    if not isinstance(value, Mat4):
        raise TypeError(f"{what} expects a Mat4, got {type(value).__name__}")


def _linear_rows(to_frame: FrameTag, from_frame: FrameTag, block: np.ndarray) -> LinearMat4:
    rows = _IDENTITY.copy()
    rows[:3, :3] = block
    return LinearMat4._from_rows(to_frame, from_frame, DIMENSIONLESS, rows)


def _affine_rows(
    to_frame: FrameTag, from_frame: FrameTag, unit_tag: UnitTag, block: np.ndarray, translation: np.ndarray
) -> Mat4:
    rows = _IDENTITY.copy()
    rows[:3, :3] = block
    rows[:3, 3] = translation
    return Mat4._from_rows(to_frame, from_frame, unit_tag, rows)


# =============================================================================
# Construction
# =============================================================================


def mat4_unsafe(
    to_frame: FrameTag, from_frame: FrameTag, unit_tag: UnitTag, values: Sequence[float]
) -> Mat4:
    """Construct from row-major values, keeping at most the first 16."""
    ensure_distinct_frames(to_frame, from_frame)
    return Mat4._from_values(to_frame, from_frame, unit_tag, list(values)[:16])


def mat4(to_frame: FrameTag, from_frame: FrameTag, unit_tag: UnitTag, values: Sequence[float]) -> Mat4:
    """Construct from exactly 16 row-major values.

    Raises:
        IdenticalFramesError: If ``to_frame == from_frame``.
        InvalidLengthError: If ``values`` does not hold 16 entries.
    """
    ensure_distinct_frames(to_frame, from_frame)
    if len(values) != 16:
        raise InvalidLengthError(f"Mat4 expects 16 values, received {len(values)}")
    return Mat4._from_values(to_frame, from_frame, unit_tag, values)


def mat4_from_matrix(to_frame: FrameTag, from_frame: FrameTag, unit_tag: UnitTag, array: Any) -> Mat4:
    """Construct from a row-major 4x4 array such as ``Mat4.matrix``."""
    ensure_distinct_frames(to_frame, from_frame)
    rows = np.asarray(array, dtype=np.float64)
    if rows.shape != (4, 4):
        raise InvalidLengthError(f"Mat4 expects a 4x4 array, received shape {rows.shape}")
    return Mat4._from_rows(to_frame, from_frame, unit_tag, rows)


def mat4_identity(frame_tag: FrameTag) -> LinearMat4:
    return LinearMat4._from_rows(frame_tag, frame_tag, DIMENSIONLESS, _IDENTITY)


def mat4_from_translation(frame_tag: FrameTag, translation: Delta3) -> Mat4:
    """Pure translation within ``frame_tag``; the unit follows ``translation``."""
    ensure_same_frame(frame_tag, translation.frame, "mat4_from_translation")
    return _affine_rows(frame_tag, frame_tag, translation.unit, np.eye(3), translation._data)


def mat4_from_scale(frame_tag: FrameTag, x_scale: float, y_scale: float, z_scale: float) -> LinearMat4:
    return _linear_rows(frame_tag, frame_tag, np.diag([x_scale, y_scale, z_scale]))


def _check_rotation_frames(to_frame: FrameTag, from_frame: FrameTag, rotation: Quaternion, what: str) -> None:
    ensure_same_frame(to_frame, rotation.to_frame, what)
    ensure_same_frame(from_frame, rotation.from_frame, what)


def mat4_from_quaternion_unsafe(to_frame: FrameTag, from_frame: FrameTag, rotation: Quaternion) -> LinearMat4:
    _check_rotation_frames(to_frame, from_frame, rotation, "mat4_from_quaternion")
    return _linear_rows(to_frame, from_frame, rotation_matrix_from_quat(rotation))


def mat4_from_quaternion(to_frame: FrameTag, from_frame: FrameTag, rotation: Quaternion) -> LinearMat4:
    """Rotation matrix of ``rotation``.

    Raises:
        DegenerateQuaternionError: If ``rotation`` has zero norm.
    """
    ensure_nonzero_quat(rotation)
    return mat4_from_quaternion_unsafe(to_frame, from_frame, rotation)


def _check_translation(to_frame: FrameTag, translation: Delta3, what: str) -> None:
    if not isinstance(translation, Delta3):
        raise TypeError(f"{what} expects a Delta3 translation, got {type(translation).__name__}")
    ensure_same_frame(to_frame, translation.frame, what)


def mat4_from_rigid_transform_unsafe(
    to_frame: FrameTag, from_frame: FrameTag, rotation: Quaternion, translation: Delta3
) -> Mat4:
    _check_rotation_frames(to_frame, from_frame, rotation, "mat4_from_rigid_transform")
    _check_translation(to_frame, translation, "mat4_from_rigid_transform")
    return _affine_rows(
        to_frame, from_frame, translation.unit, rotation_matrix_from_quat(rotation), translation._data
    )


def mat4_from_rigid_transform(
    to_frame: FrameTag, from_frame: FrameTag, rotation: Quaternion, translation: Delta3
) -> Mat4:
    """Pose with orientation ``rotation`` and position ``translation`` (in ``to_frame``).

    Raises:
        DegenerateQuaternionError: If ``rotation`` has zero norm.
    """
    ensure_nonzero_quat(rotation)
    return mat4_from_rigid_transform_unsafe(to_frame, from_frame, rotation, translation)


def mat4_from_trs_unsafe(
    to_frame: FrameTag,
    from_frame: FrameTag,
    translation: Delta3,
    rotation: Quaternion,
    scale: Dir3,
) -> Mat4:
    _check_rotation_frames(to_frame, from_frame, rotation, "mat4_from_trs")
    _check_translation(to_frame, translation, "mat4_from_trs")
    if not isinstance(scale, Dir3):
        raise TypeError(f"mat4_from_trs expects a Dir3 scale, got {type(scale).__name__}")
    ensure_same_frame(from_frame, scale.frame, "mat4_from_trs scale")
    ensure_same_unit(DIMENSIONLESS, scale.unit, "mat4_from_trs scale")
    # Scaling each rotation column applies scale in from_frame before rotating.
    block = rotation_matrix_from_quat(rotation) * scale._data
    return _affine_rows(to_frame, from_frame, translation.unit, block, translation._data)


def mat4_from_trs(
    to_frame: FrameTag,
    from_frame: FrameTag,
    translation: Delta3,
    rotation: Quaternion,
    scale: Dir3,
) -> Mat4:
    """Translate * Rotate * Scale.

    Scale is applied in ``from_frame``, then the rotation into ``to_frame``,
    then the translation in ``to_frame``.

    Raises:
        DegenerateQuaternionError: If ``rotation`` has zero norm.
    """
    ensure_nonzero_quat(rotation)
    return mat4_from_trs_unsafe(to_frame, from_frame, translation, rotation, scale)


# =============================================================================
# Composition and inversion
# =============================================================================


def transpose_mat4(value: Mat4) -> Mat4:
    """Transpose all 16 entries; the frame pair is swapped."""
    _require_affine(value, "transpose_mat4")
    return type(value)._from_rows(value.from_frame, value.to_frame, value.unit, value.matrix.T)


def compose_mat4(outer: Mat4, inner: Mat4) -> Mat4:
    """Matrix product ``outer @ inner``: ``inner`` is applied first.

    The result is a LinearMat4 when both inputs are linear; otherwise it takes
    the translation unit of the affine operand(s).

    Raises:
        FrameMismatchError: If ``outer.from_frame != inner.to_frame``.
        UnitMismatchError: If both operands are affine with different units.
    """
    _require_affine(outer, "compose_mat4")
    _require_affine(inner, "compose_mat4")
    ensure_same_frame(outer.from_frame, inner.to_frame, "compose_mat4")

    product = outer.matrix @ inner.matrix
    outer_linear = isinstance(outer, LinearMat4)
    inner_linear = isinstance(inner, LinearMat4)
    if outer_linear and inner_linear:
        return LinearMat4._from_rows(outer.to_frame, inner.from_frame, DIMENSIONLESS, product)
    if outer_linear:
        unit_tag = inner.unit
    elif inner_linear:
        unit_tag = outer.unit
    else:
        ensure_same_unit(outer.unit, inner.unit, "compose_mat4")
        unit_tag = outer.unit
    return Mat4._from_rows(outer.to_frame, inner.from_frame, unit_tag, product)


def is_rigid_transform(value: Any, *, epsilon: float = DEFAULT_TOLERANCES.rigid_transform_eps) -> bool:
    """True for a rotation block, a finite translation and a ``[0, 0, 0, 1]`` bottom row."""
    rows = np.asarray(getattr(value, "matrix", value), dtype=np.float64)
    if rows.shape != (4, 4):
        return False
    if not is_rotation_basis(rows, epsilon=epsilon):
        return False
    if not np.all(np.isfinite(rows[:3, 3])):
        return False
    return bool(np.all(np.abs(rows[3] - (0.0, 0.0, 0.0, 1.0)) <= epsilon))


def invert_rigid_mat4_unsafe(value: Mat4) -> Mat4:
    """Rigid inverse ``[R^T | -R^T t]``; wrong for input with scale or shear."""
    _require_affine(value, "invert_rigid_mat4")
    rows = value.matrix
    rotation_t = rows[:3, :3].T
    inverse_translation = -(rotation_t @ rows[:3, 3])
    if isinstance(value, LinearMat4):
        return _linear_rows(value.from_frame, value.to_frame, rotation_t)
    return _affine_rows(value.from_frame, value.to_frame, value.unit, rotation_t, inverse_translation)


def invert_rigid_mat4(value: Mat4, *, epsilon: float = DEFAULT_TOLERANCES.rigid_transform_eps) -> Mat4:
    """Invert a rigid transform, swapping the frame pair.

    Raises:
        NotRigidTransformError: If ``value`` is not rigid within ``epsilon``.
    """
    _require_affine(value, "invert_rigid_mat4")
    if not is_rigid_transform(value, epsilon=epsilon):
        raise NotRigidTransformError("Matrix is not a rigid transform")
    return invert_rigid_mat4_unsafe(value)


def _cofactors(block: np.ndarray) -> tuple[np.ndarray, float]:
    (a, b, c), (d, e, f), (g, h, i) = block
    cofactor = np.array(
        [
            [e * i - f * h, f * g - d * i, d * h - e * g],
            [c * h - b * i, a * i - c * g, b * g - a * h],
            [b * f - c * e, c * d - a * f, a * e - b * d],
        ],
        dtype=np.float64,
    )
    determinant = float(a * cofactor[0, 0] + b * cofactor[0, 1] + c * cofactor[0, 2])
    return cofactor, determinant


def normal_matrix_from_mat4_unsafe(value: Mat4) -> LinearMat4:
    _require_affine(value, "normal_matrix_from_mat4")
    cofactor, determinant = _cofactors(value.matrix[:3, :3])
    with np.errstate(divide="ignore", invalid="ignore"):
        block = cofactor / np.float64(determinant)
    return _linear_rows(value.to_frame, value.from_frame, block)


def normal_matrix_from_mat4(value: Mat4) -> LinearMat4:
    """Inverse-transpose of the linear block, for transforming surface normals.

    Raises:
        SingularTransformError: If the linear block's determinant is exactly 0.
    """
    _require_affine(value, "normal_matrix_from_mat4")
    _, determinant = _cofactors(value.matrix[:3, :3])
    if determinant == 0:
        raise SingularTransformError("Cannot build a normal matrix from a singular transform")
    return normal_matrix_from_mat4_unsafe(value)


# =============================================================================
# Projection and cameras
# =============================================================================


def mat4_perspective_unsafe(
    to_frame: FrameTag,
    from_frame: FrameTag,
    field_of_view_y_radians: float,
    aspect: float,
    near: Quantity,
    far: Quantity,
) -> ProjectionMat4:
    ensure_same_unit(near.unit, far.unit, "mat4_perspective")
    with np.errstate(divide="ignore", invalid="ignore"):
        f = 1.0 / np.tan(np.float64(field_of_view_y_radians) * 0.5)
        range_inverse = 1.0 / (np.float64(near.value) - far.value)
        rows = np.array(
            [
                [f / aspect, 0.0, 0.0, 0.0],
                [0.0, f, 0.0, 0.0],
                [0.0, 0.0, (far.value + near.value) * range_inverse, 2.0 * far.value * near.value * range_inverse],
                [0.0, 0.0, -1.0, 0.0],
            ],
            dtype=np.float64,
        )
    return ProjectionMat4._from_rows(to_frame, from_frame, near.unit, rows)


def mat4_perspective(
    to_frame: FrameTag,
    from_frame: FrameTag,
    field_of_view_y_radians: float,
    aspect: float,
    near: Quantity,
    far: Quantity,
) -> ProjectionMat4:
    """Right-handed perspective projection onto the NDC depth range [-1, 1].

    Raises:
        InvalidProjectionParamsError: Unless ``0 < fov < pi``, ``aspect > 0``
            and ``0 < near < far``.
    """
    ensure_same_unit(near.unit, far.unit, "mat4_perspective")
    if not 0 < field_of_view_y_radians < math.pi:
        raise InvalidProjectionParamsError("fieldOfViewYRadians must be in (0, PI)")
    if not aspect > 0:
        raise InvalidProjectionParamsError("aspect must be > 0")
    if not (near.value > 0 and far.value > 0 and near.value < far.value):
        raise InvalidProjectionParamsError("near and far must satisfy 0 < near < far")
    return mat4_perspective_unsafe(to_frame, from_frame, field_of_view_y_radians, aspect, near, far)


def _clip(projection: ProjectionMat4, point: Point3) -> np.ndarray:
    if not isinstance(projection, ProjectionMat4):
        raise TypeError(f"project_point3 expects a ProjectionMat4, got {type(projection).__name__}")
    if not isinstance(point, Point3):
        raise TypeError(f"project_point3 expects a Point3, got {type(point).__name__}")
    ensure_same_frame(projection.from_frame, point.frame, "project_point3")
    ensure_same_unit(projection.unit, point.unit, "project_point3")
    return projection.matrix @ np.append(point._data, 1.0)


def project_point3_unsafe(projection: ProjectionMat4, point: Point3) -> Point3:
    clip = _clip(projection, point)
    with np.errstate(divide="ignore", invalid="ignore"):
        ndc = clip[:3] / clip[3]
    return Point3._wrap(projection.to_frame, ndc, DIMENSIONLESS)


def project_point3(projection: ProjectionMat4, point: Point3) -> Point3:
    """Project and perspective-divide into a dimensionless NDC point.

    Raises:
        UndefinedPerspectiveDivideError: If the homogeneous w is exactly 0.
    """
    clip = _clip(projection, point)
    if clip[3] == 0:
        raise UndefinedPerspectiveDivideError("Perspective divide is undefined for w = 0")
    return Point3._wrap(projection.to_frame, clip[:3] / clip[3], DIMENSIONLESS)


def _look_at_inputs(from_frame: FrameTag, eye: Point3, target: Point3, up: Dir3) -> None:
    if not (isinstance(eye, Point3) and isinstance(target, Point3)):
        raise TypeError("mat4_look_at expects Point3 eye and target")
    ensure_same_frame(from_frame, eye.frame, "mat4_look_at eye")
    ensure_same_frame(from_frame, target.frame, "mat4_look_at target")
    ensure_same_frame(from_frame, up.frame, "mat4_look_at up")
    ensure_same_unit(eye.unit, target.unit, "mat4_look_at")


def _look_at_basis(eye: Point3, target: Point3, up: Dir3) -> tuple[np.ndarray, float, float, float]:
    """Unnormalized forward and right axes plus the three lengths the guards need."""
    forward = target._data - eye._data
    forward_length = math.hypot(*forward)
    up_length = math.hypot(*up._data)
    with np.errstate(divide="ignore", invalid="ignore"):
        forward_hat = forward / forward_length
        up_hat = up._data / up_length
        right = np.cross(forward_hat, up_hat)
    return np.stack([forward_hat, right]), forward_length, up_length, math.hypot(*right)


def mat4_look_at_unsafe(
    to_frame: FrameTag, from_frame: FrameTag, eye: Point3, target: Point3, up: Dir3
) -> Mat4:
    _look_at_inputs(from_frame, eye, target, up)
    (forward_hat, right), _, _, right_length = _look_at_basis(eye, target, up)
    with np.errstate(divide="ignore", invalid="ignore"):
        right_hat = right / right_length
        up_orthogonal = np.cross(right_hat, forward_hat)
        translation = np.array(
            [
                -np.dot(right_hat, eye._data),
                -np.dot(up_orthogonal, eye._data),
                np.dot(forward_hat, eye._data),
            ]
        )

    block = np.stack([right_hat, up_orthogonal, -forward_hat])
    return _affine_rows(to_frame, from_frame, eye.unit, block, translation)


def mat4_look_at(to_frame: FrameTag, from_frame: FrameTag, eye: Point3, target: Point3, up: Dir3) -> Mat4:
    """View matrix looking from ``eye`` towards ``target``; the camera looks down -Z.

    Raises:
        DegenerateLookAtError: If eye and target coincide, ``up`` is zero or
            ``up`` is parallel to the viewing direction.
    """
    _look_at_inputs(from_frame, eye, target, up)
    _, forward_length, up_length, right_length = _look_at_basis(eye, target, up)
    if forward_length == 0:
        raise DegenerateLookAtError("LookAt requires eye and target to be distinct")
    if up_length == 0:
        raise DegenerateLookAtError("LookAt requires a non-zero up direction")
    if right_length == 0:
        raise DegenerateLookAtError("LookAt up direction cannot be parallel to forward")
    return mat4_look_at_unsafe(to_frame, from_frame, eye, target, up)


# =============================================================================
# Applying transforms
# =============================================================================


def transform_point3(matrix: Mat4, point: Point3) -> Point3:
    """Apply the full affine transform, translation included.

    A LinearMat4 accepts points of any unit; other matrices require
    ``point.unit == matrix.unit``.
    """
    _require_affine(matrix, "transform_point3")
    if not isinstance(point, Point3):
        raise TypeError(f"transform_point3 expects a Point3, got {type(point).__name__}")
    ensure_same_frame(matrix.from_frame, point.frame, "transform_point3")
    if not isinstance(matrix, LinearMat4):
        ensure_same_unit(matrix.unit, point.unit, "transform_point3")

    rows = matrix.matrix
    data = rows[:3, :3] @ point._data + rows[:3, 3]
    return Point3._wrap(matrix.to_frame, data, point.unit)


def transform_direction3(matrix: Mat4, direction: Delta3) -> Delta3:
    """Apply only the linear block; translation is ignored.

    A Dir3 input gives a Dir3 result.
    """
    _require_affine(matrix, "transform_direction3")
    if not isinstance(direction, Delta3):
        raise TypeError(f"transform_direction3 expects a Delta3 or Dir3, got {type(direction).__name__}")
    ensure_same_frame(matrix.from_frame, direction.frame, "transform_direction3")

    data = matrix.matrix[:3, :3] @ direction._data
    return vec3_like(direction, data, matrix.to_frame, direction.unit)
