# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 NVIDIA Corporation

"""Frame-aware rotation quaternions.

A ``Quaternion`` maps vectors expressed in ``from_frame`` into ``to_frame``.
Components are stored in scalar-last ``(x, y, z, w)`` order, the same order
``scipy.spatial.transform.Rotation.from_quat`` expects.

Composition follows the "inner applied first" convention::

    rotate_vec3_by_quat(compose_quats(outer, inner), v)
        == rotate_vec3_by_quat(outer, rotate_vec3_by_quat(inner, v))
"""

from __future__ import annotations

import math
from collections.abc import Iterator
from typing import Any, Literal

import numpy as np

from spatial3d.config import DEFAULT_TOLERANCES
from spatial3d.errors import (
    DegenerateQuaternionError,
    InvalidLengthError,
    InvalidRotationBasisError,
)
from spatial3d.frames import FrameTag, ensure_distinct_frames, ensure_same_frame
from spatial3d.vector3 import (
    Delta3,
    Dir3,
    normalize_vec3,
    normalize_vec3_unsafe,
    vec3_like,
)

NEAR_ZERO = DEFAULT_TOLERANCES.near_zero

EulerOrder = Literal["XYZ", "XZY", "YXZ", "YZX", "ZXY", "ZYX"]
EULER_ORDERS = ("XYZ", "XZY", "YXZ", "YZX", "ZXY", "ZYX")


class Quaternion:
    """Rotation from ``from_frame`` into ``to_frame``; immutable."""

    __slots__ = ("_data", "_to_frame", "_from_frame")

    def __init__(
        self,
        to_frame: FrameTag,
        from_frame: FrameTag,
        x: float,
        y: float,
        z: float,
        w: float,
    ):
        self._set(to_frame, from_frame, np.array([x, y, z, w], dtype=np.float64))

    def _set(self, to_frame: FrameTag, from_frame: FrameTag, data: np.ndarray) -> None:
        data.flags.writeable = False
        self._data = data
        self._to_frame = to_frame
        self._from_frame = from_frame

    @classmethod
    def _wrap(cls, to_frame: FrameTag, from_frame: FrameTag, data: np.ndarray) -> "Quaternion":
        obj = cls.__new__(cls)
        obj._set(to_frame, from_frame, data)
        return obj

    @property
    def to_frame(self) -> FrameTag:
        return self._to_frame

    @property
    def from_frame(self) -> FrameTag:
        return self._from_frame

    @property
    def x(self) -> float:
        return float(self._data[0])

    @property
    def y(self) -> float:
        return float(self._data[1])

    @property
    def z(self) -> float:
        return float(self._data[2])

    @property
    def w(self) -> float:
        return float(self._data[3])

    def as_array(self) -> np.ndarray:
        """Components as a writable ``(x, y, z, w)`` float64 copy."""
        return self._data.copy()

    def __len__(self) -> int:
        return 4

    def __getitem__(self, index: int) -> float:
        return float(self._data[index])

    def __iter__(self) -> Iterator[float]:
        return (float(v) for v in self._data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Quaternion):
            return NotImplemented
        return (
            self._to_frame == other._to_frame
            and self._from_frame == other._from_frame
            and bool(np.array_equal(self._data, other._data))
        )

    def __hash__(self) -> int:
        return hash((self._to_frame, self._from_frame, tuple(self)))

    def __repr__(self) -> str:
        return (
            f"Quaternion(to_frame={self._to_frame!r}, from_frame={self._from_frame!r}, "
            f"x={self.x!r}, y={self.y!r}, z={self.z!r}, w={self.w!r})"
        )


def quat(
    to_frame: FrameTag,
    from_frame: FrameTag,
    x: float,
    y: float,
    z: float,
    w: float,
) -> Quaternion:
    """Construct a rotation between two distinct frames.

    Raises:
        IdenticalFramesError: If ``to_frame == from_frame``. Same-frame rotations
            are built with quat_identity, quat_from_axis_angle or quat_from_euler.
    """
    ensure_distinct_frames(to_frame, from_frame)
    return Quaternion(to_frame, from_frame, x, y, z, w)


def quat_identity(frame_tag: FrameTag) -> Quaternion:
    return Quaternion(frame_tag, frame_tag, 0.0, 0.0, 0.0, 1.0)


def quat_x(value: Quaternion) -> float:
    return value.x


def quat_y(value: Quaternion) -> float:
    return value.y


def quat_z(value: Quaternion) -> float:
    return value.z


def quat_w(value: Quaternion) -> float:
    return value.w


def quat_conjugate(value: Quaternion) -> Quaternion:
    """Conjugate; the frame direction is swapped."""
    x, y, z, w = value._data
    return Quaternion._wrap(
        value.from_frame, value.to_frame, np.array([-x, -y, -z, w], dtype=np.float64)
    )


def quat_norm_squared(value: Quaternion) -> float:
    x, y, z, w = value
    return x * x + y * y + z * z + w * w


def quat_norm(value: Quaternion) -> float:
    return math.sqrt(quat_norm_squared(value))


def quat_normalize_unsafe(value: Quaternion) -> Quaternion:
    norm = quat_norm(value)
    with np.errstate(divide="ignore", invalid="ignore"):
        data = value._data / norm
    return Quaternion._wrap(value.to_frame, value.from_frame, data)


def ensure_nonzero_quat(value: Quaternion, epsilon: float = NEAR_ZERO) -> None:
    """Raise DegenerateQuaternionError if the norm is <= ``epsilon``."""
    if quat_norm(value) <= epsilon:
        raise DegenerateQuaternionError("Cannot normalize a zero-length quaternion")


def quat_normalize(value: Quaternion, *, epsilon: float = NEAR_ZERO) -> Quaternion:
    """Scale to unit norm.

    Raises:
        DegenerateQuaternionError: If the norm is <= ``epsilon`` (1e-14 by default).
    """
    ensure_nonzero_quat(value, epsilon)
    return quat_normalize_unsafe(value)


def quat_inverse_unsafe(value: Quaternion) -> Quaternion:
    norm_squared = quat_norm_squared(value)
    conjugate = quat_conjugate(value)
    with np.errstate(divide="ignore", invalid="ignore"):
        data = conjugate._data / norm_squared
    return Quaternion._wrap(conjugate.to_frame, conjugate.from_frame, data)


def quat_inverse(value: Quaternion, *, epsilon: float = NEAR_ZERO) -> Quaternion:
    """Inverse rotation (conjugate over squared norm), mapping to_frame back to from_frame.

    Raises:
        DegenerateQuaternionError: If the squared norm is <= ``epsilon**2``.
    """
    if quat_norm_squared(value) <= epsilon * epsilon:
        raise DegenerateQuaternionError("Cannot invert a zero-length quaternion")
    return quat_inverse_unsafe(value)


def _hamilton(outer: np.ndarray, inner: np.ndarray) -> np.ndarray:
    x1, y1, z1, w1 = inner
    x2, y2, z2, w2 = outer
    return np.array(
        [
            w2 * x1 + x2 * w1 + y2 * z1 - z2 * y1,
            w2 * y1 - x2 * z1 + y2 * w1 + z2 * x1,
            w2 * z1 + x2 * y1 - y2 * x1 + z2 * w1,
            w2 * w1 - x2 * x1 - y2 * y1 - z2 * z1,
        ],
        dtype=np.float64,
    )


def compose_quats(outer: Quaternion, inner: Quaternion) -> Quaternion:
    """Hamilton product ``outer * inner``: ``inner`` is applied first.

    Raises:
        FrameMismatchError: If ``outer.from_frame != inner.to_frame``.
    """
    ensure_same_frame(outer.from_frame, inner.to_frame, "compose_quats")
    return Quaternion._wrap(outer.to_frame, inner.from_frame, _hamilton(outer._data, inner._data))


def rotate_vec3_by_quat_unsafe(rotation: Quaternion, value: Delta3) -> Delta3:
    """Rotate a displacement or direction; ``rotation`` is normalized without a guard."""
    if not isinstance(value, Delta3):
        raise TypeError(f"rotate_vec3_by_quat expects a Delta3 or Dir3, got {type(value).__name__}")
    ensure_same_frame(rotation.from_frame, value.frame, "rotate_vec3_by_quat")

    qx, qy, qz, qw = quat_normalize_unsafe(rotation)._data
    vx, vy, vz = value._data

    # t = 2 * cross(q.xyz, v); v' = v + w * t + cross(q.xyz, t)
    tx = 2.0 * (qy * vz - qz * vy)
    ty = 2.0 * (qz * vx - qx * vz)
    tz = 2.0 * (qx * vy - qy * vx)

    data = np.array(
        [
            vx + qw * tx + (qy * tz - qz * ty),
            vy + qw * ty + (qz * tx - qx * tz),
            vz + qw * tz + (qx * ty - qy * tx),
        ],
        dtype=np.float64,
    )
    return vec3_like(value, data, rotation.to_frame, value.unit)


def rotate_vec3_by_quat(rotation: Quaternion, value: Delta3) -> Delta3:
    """Rotate ``value`` from ``rotation.from_frame`` into ``rotation.to_frame``.

    A Dir3 input gives a Dir3 result.

    Raises:
        DegenerateQuaternionError: If ``rotation`` has zero norm.
    """
    ensure_nonzero_quat(rotation)
    return rotate_vec3_by_quat_unsafe(rotation, value)


def _axis_angle(frame_tag: FrameTag, axis_hat: Dir3, angle_radians: float) -> Quaternion:
    half_angle = angle_radians * 0.5
    sin_half = math.sin(half_angle)
    data = np.empty(4, dtype=np.float64)
    data[:3] = axis_hat._data * sin_half
    data[3] = math.cos(half_angle)
    return Quaternion._wrap(frame_tag, frame_tag, data)


def quat_from_axis_angle_unsafe(frame_tag: FrameTag, axis: Dir3, angle_radians: float) -> Quaternion:
    ensure_same_frame(frame_tag, axis.frame, "quat_from_axis_angle")
    return _axis_angle(frame_tag, normalize_vec3_unsafe(axis), angle_radians)


def quat_from_axis_angle(frame_tag: FrameTag, axis: Dir3, angle_radians: float) -> Quaternion:
    """Rotation of ``angle_radians`` about ``axis`` (normalized first).

    Raises:
        DegenerateVectorError: If ``axis`` has zero length.
    """
    ensure_same_frame(frame_tag, axis.frame, "quat_from_axis_angle")
    return _axis_angle(frame_tag, normalize_vec3(axis), angle_radians)


def _single_axis_quat(frame_tag: FrameTag, axis: str, angle_radians: float) -> Quaternion:
    half = angle_radians * 0.5
    sin_half = math.sin(half)
    cos_half = math.cos(half)
    if axis == "X":
        return Quaternion(frame_tag, frame_tag, sin_half, 0.0, 0.0, cos_half)
    if axis == "Y":
        return Quaternion(frame_tag, frame_tag, 0.0, sin_half, 0.0, cos_half)
    return Quaternion(frame_tag, frame_tag, 0.0, 0.0, sin_half, cos_half)


def quat_from_euler_unsafe(
    frame_tag: FrameTag,
    x_radians: float,
    y_radians: float,
    z_radians: float,
    order: EulerOrder = "ZYX",
) -> Quaternion:
    if order not in EULER_ORDERS:
        raise ValueError(f"Unsupported Euler order {order!r}; expected one of {EULER_ORDERS}")

    angles = {"X": x_radians, "Y": y_radians, "Z": z_radians}
    result = quat_identity(frame_tag)
    # order[0] is the innermost rotation, applied first.
    for axis in order:
        result = compose_quats(_single_axis_quat(frame_tag, axis, angles[axis]), result)
    return quat_normalize_unsafe(result)


def quat_from_euler(
    frame_tag: FrameTag,
    x_radians: float,
    y_radians: float,
    z_radians: float,
    order: EulerOrder = "ZYX",
) -> Quaternion:
    """Compose per-axis rotations in ``order``, first letter applied first.

    ``"ZYX"`` rotates about Z, then Y, then X, all about the fixed axes of
    ``frame_tag``.

    Raises:
        ValueError: If ``order`` is not a permutation of ``"XYZ"``.
    """
    return quat_normalize(quat_from_euler_unsafe(frame_tag, x_radians, y_radians, z_radians, order))


def _check_interpolation_pair(start: Quaternion, end: Quaternion, what: str) -> None:
    ensure_same_frame(start.to_frame, end.to_frame, what)
    ensure_same_frame(start.from_frame, end.from_frame, what)


def _shortest_path(start: Quaternion, end: Quaternion) -> tuple[float, np.ndarray]:
    """Cosine between the rotations and ``end`` flipped onto the same hemisphere."""
    end_data = end._data
    cosine = float(np.dot(start._data, end_data))
    if cosine < 0:
        return -cosine, -end_data
    return cosine, end_data


def _nlerp_blend(start: Quaternion, end_data: np.ndarray, t: float) -> Quaternion:
    inverse_t = 1.0 - t
    data = start._data * inverse_t + end_data * t
    return Quaternion._wrap(start.to_frame, start.from_frame, data)


def quat_nlerp_unsafe(start: Quaternion, end: Quaternion, t: float) -> Quaternion:
    _check_interpolation_pair(start, end, "quat_nlerp")
    _, end_data = _shortest_path(start, end)
    return quat_normalize_unsafe(_nlerp_blend(start, end_data, t))


def quat_nlerp(start: Quaternion, end: Quaternion, t: float) -> Quaternion:
    """Normalized linear interpolation along the shortest path.

    Raises:
        DegenerateQuaternionError: If the blend has zero norm.
    """
    _check_interpolation_pair(start, end, "quat_nlerp")
    _, end_data = _shortest_path(start, end)
    return quat_normalize(_nlerp_blend(start, end_data, t))


def _slerp_blend(start: Quaternion, end_data: np.ndarray, cosine: float, t: float) -> Quaternion:
    theta0 = float(np.arccos(np.clip(cosine, -1.0, 1.0)))
    sin_theta0 = math.sin(theta0)
    theta = theta0 * t
    with np.errstate(divide="ignore", invalid="ignore"):
        s0 = np.float64(math.sin(theta0 - theta)) / sin_theta0
        s1 = np.float64(math.sin(theta)) / sin_theta0
        data = start._data * s0 + end_data * s1
    return Quaternion._wrap(start.to_frame, start.from_frame, data)


def quat_slerp_unsafe(
    start: Quaternion,
    end: Quaternion,
    t: float,
    *,
    threshold: float = DEFAULT_TOLERANCES.slerp_nlerp_threshold,
) -> Quaternion:
    _check_interpolation_pair(start, end, "quat_slerp")
    cosine, end_data = _shortest_path(start, end)
    if cosine > threshold:
        return quat_normalize_unsafe(_nlerp_blend(start, end_data, t))
    return quat_normalize_unsafe(_slerp_blend(start, end_data, cosine, t))


def quat_slerp(
    start: Quaternion,
    end: Quaternion,
    t: float,
    *,
    threshold: float = DEFAULT_TOLERANCES.slerp_nlerp_threshold,
) -> Quaternion:
    """Spherical linear interpolation along the shortest path.

    Falls back to quat_nlerp when the rotations are nearly parallel
    (cosine > ``threshold``, 0.9995 by default), where ``1/sin(theta)`` is
    ill-conditioned.

    Raises:
        DegenerateQuaternionError: If the blend has zero norm.
    """
    _check_interpolation_pair(start, end, "quat_slerp")
    cosine, end_data = _shortest_path(start, end)
    if cosine > threshold:
        return quat_normalize(_nlerp_blend(start, end_data, t))
    return quat_normalize(_slerp_blend(start, end_data, cosine, t))


# =============================================================================
# Rotation matrix interop
# =============================================================================


def linear_block(matrix: Any) -> np.ndarray:
    """Upper-left 3x3 block, row-major, of a Mat4 or a 3x3/4x4 array."""
    array = np.asarray(getattr(matrix, "matrix", matrix), dtype=np.float64)
    if array.shape not in ((3, 3), (4, 4)):
        raise InvalidLengthError(f"Expected a 3x3 or 4x4 matrix, got shape {array.shape}")
    return array[:3, :3]


def is_rotation_basis(matrix: Any, *, epsilon: float = DEFAULT_TOLERANCES.rotation_basis_eps) -> bool:
    """True if the linear block is a right-handed orthonormal basis.

    Checks finite entries, unit column lengths, pairwise orthogonal columns and
    a determinant of +1, each within the absolute ``epsilon``.
    """
    block = linear_block(matrix)
    if not np.all(np.isfinite(block)):
        return False

    gram = block.T @ block
    if not np.all(np.abs(gram - np.eye(3)) <= epsilon):
        return False
    return bool(abs(np.linalg.det(block) - 1.0) <= epsilon)


def _check_matrix_frames(to_frame: FrameTag, from_frame: FrameTag, matrix: Any) -> None:
    matrix_to = getattr(matrix, "to_frame", None)
    matrix_from = getattr(matrix, "from_frame", None)
    if matrix_to is not None:
        ensure_same_frame(to_frame, matrix_to, "quat_from_rotation_matrix")
    if matrix_from is not None:
        ensure_same_frame(from_frame, matrix_from, "quat_from_rotation_matrix")


def quat_from_rotation_matrix_unsafe(
    to_frame: FrameTag, from_frame: FrameTag, matrix: Any
) -> Quaternion:
    """Trace-based extraction with no basis validation; always returns a normalized quaternion."""
    _check_matrix_frames(to_frame, from_frame, matrix)
    m = linear_block(matrix)
    m00, m01, m02 = m[0]
    m10, m11, m12 = m[1]
    m20, m21, m22 = m[2]
    trace = m00 + m11 + m22

    with np.errstate(divide="ignore", invalid="ignore"):
        if trace > 0:
            s = 2.0 * np.sqrt(trace + 1.0)
            w, x, y, z = 0.25 * s, (m21 - m12) / s, (m02 - m20) / s, (m10 - m01) / s
        elif m00 > m11 and m00 > m22:
            s = 2.0 * np.sqrt(1.0 + m00 - m11 - m22)
            w, x, y, z = (m21 - m12) / s, 0.25 * s, (m01 + m10) / s, (m02 + m20) / s
        elif m11 > m22:
            s = 2.0 * np.sqrt(1.0 + m11 - m00 - m22)
            w, x, y, z = (m02 - m20) / s, (m01 + m10) / s, 0.25 * s, (m12 + m21) / s
        else:
            s = 2.0 * np.sqrt(1.0 + m22 - m00 - m11)
            w, x, y, z = (m10 - m01) / s, (m02 + m20) / s, (m12 + m21) / s, 0.25 * s

    raw = Quaternion._wrap(to_frame, from_frame, np.array([x, y, z, w], dtype=np.float64))
    return quat_normalize_unsafe(raw)


def quat_from_rotation_matrix(
    to_frame: FrameTag,
    from_frame: FrameTag,
    matrix: Any,
    *,
    epsilon: float = DEFAULT_TOLERANCES.rotation_basis_eps,
) -> Quaternion:
    """Recover the rotation of a Mat4 (or a 3x3/4x4 array).

    Raises:
        InvalidRotationBasisError: If the linear block is not a rotation within ``epsilon``.
    """
    if not is_rotation_basis(matrix, epsilon=epsilon):
        raise InvalidRotationBasisError("Input matrix is not a valid rotation matrix")
    return quat_from_rotation_matrix_unsafe(to_frame, from_frame, matrix)


def rotation_matrix_from_quat(value: Quaternion) -> np.ndarray:
    """Row-major 3x3 rotation matrix of ``value`` (normalized without a guard)."""
    x, y, z, w = quat_normalize_unsafe(value)._data
    xx, yy, zz = x * x, y * y, z * z
    xy, xz, yz = x * y, x * z, y * z
    wx, wy, wz = w * x, w * y, w * z
    return np.array(
        [
            [1.0 - 2.0 * (yy + zz), 2.0 * (xy - wz), 2.0 * (xz + wy)],
            [2.0 * (xy + wz), 1.0 - 2.0 * (xx + zz), 2.0 * (yz - wx)],
            [2.0 * (xz - wy), 2.0 * (yz + wx), 1.0 - 2.0 * (xx + yy)],
        ],
        dtype=np.float64,
    )
