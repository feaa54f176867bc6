# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 NVIDIA Corporation

"""
spatial3d - Frame- and unit-aware 3D spatial math.

This package provides:
- Point3 / Delta3 / Dir3: tagged vectors and the Vector3 kernel
- Quaternion: rotations between frames, composition and NLERP/SLERP
- Mat4 / LinearMat4 / ProjectionMat4: homogeneous transforms, rigid
  inversion, normal matrices, perspective projection and look-at
- TrsMat4Cache: single-slot memoization of TRS matrix construction
- units: unit-tagged scalar arithmetic (used as ``units.add(...)``)

Every validating function has an ``_unsafe`` twin that skips numeric guards
and may return nan/inf instead of raising. Frame and unit tags are checked by
both.

Example usage:
    from spatial3d import (
        delta3, frame, mat4_from_rigid_transform, point3, quat, transform_point3, unit,
    )

    world, vehicle = frame("world"), frame("vehicle")
    meter = unit("m")
    pose_world_vehicle = mat4_from_rigid_transform(
        world, vehicle, quat(world, vehicle, 0, 0, 0, 1), delta3(world, 10, 2, 0, unit=meter)
    )
    point_world = transform_point3(pose_world_vehicle, point3(vehicle, 1, 0, 0, unit=meter))
"""

from spatial3d import units
from spatial3d.config import DEFAULT_TOLERANCES, ToleranceConfig, load_tolerance_config
from spatial3d.errors import (
    DegenerateLookAtError,
    DegenerateQuaternionError,
    DegenerateVectorError,
    FrameMismatchError,
    GeometryError,
    IdenticalFramesError,
    InvalidLengthError,
    InvalidProjectionParamsError,
    InvalidRangeError,
    InvalidRotationBasisError,
    NotRigidTransformError,
    SingularTransformError,
    UndefinedPerspectiveDivideError,
    UnitMismatchError,
)
from spatial3d.frames import DIMENSIONLESS, FrameTag, UnitTag, frame, unit
from spatial3d.matrix4 import (
    LinearMat4,
    Mat4,
    ProjectionMat4,
    compose_mat4,
    invert_rigid_mat4,
    invert_rigid_mat4_unsafe,
    is_rigid_transform,
    mat4,
    mat4_from_matrix,
    mat4_from_quaternion,
    mat4_from_quaternion_unsafe,
    mat4_from_rigid_transform,
    mat4_from_rigid_transform_unsafe,
    mat4_from_scale,
    mat4_from_translation,
    mat4_from_trs,
    mat4_from_trs_unsafe,
    mat4_identity,
    mat4_look_at,
    mat4_look_at_unsafe,
    mat4_perspective,
    mat4_perspective_unsafe,
    mat4_unsafe,
    normal_matrix_from_mat4,
    normal_matrix_from_mat4_unsafe,
    project_point3,
    project_point3_unsafe,
    transform_direction3,
    transform_point3,
    transpose_mat4,
)
from spatial3d.quaternion import (
    EulerOrder,
    Quaternion,
    compose_quats,
    is_rotation_basis,
    quat,
    quat_conjugate,
    quat_from_axis_angle,
    quat_from_axis_angle_unsafe,
    quat_from_euler,
    quat_from_euler_unsafe,
    quat_from_rotation_matrix,
    quat_from_rotation_matrix_unsafe,
    quat_identity,
    quat_inverse,
    quat_inverse_unsafe,
    quat_nlerp,
    quat_nlerp_unsafe,
    quat_norm,
    quat_norm_squared,
    quat_normalize,
    quat_normalize_unsafe,
    quat_slerp,
    quat_slerp_unsafe,
    quat_w,
    quat_x,
    quat_y,
    quat_z,
    rotate_vec3_by_quat,
    rotate_vec3_by_quat_unsafe,
)
from spatial3d.trs_cache import TrsMat4Cache, create_trs_mat4_cache
from spatial3d.units import Quantity
from spatial3d.vector3 import (
    Delta3,
    Dir3,
    Point3,
    Vec3,
    add_point3,
    add_vec3,
    angle_between_vec3,
    angle_between_vec3_unsafe,
    cross_vec3,
    delta3,
    dir3,
    distance_point3,
    distance_vec3,
    dot_vec3,
    length_squared_vec3,
    length_vec3,
    lerp_vec3,
    neg_vec3,
    normalize_vec3,
    normalize_vec3_unsafe,
    point3,
    project_vec3,
    project_vec3_unsafe,
    reflect_vec3,
    reflect_vec3_unsafe,
    scale_dir3,
    scale_vec3,
    sub_point3,
    sub_point3_delta3,
    sub_vec3,
    zero_vec3,
)

__all__ = [
    # Tags, config and errors
    "DIMENSIONLESS",
    "FrameTag",
    "UnitTag",
    "frame",
    "unit",
    "units",
    "Quantity",
    "ToleranceConfig",
    "DEFAULT_TOLERANCES",
    "load_tolerance_config",
    "GeometryError",
    "DegenerateVectorError",
    "DegenerateQuaternionError",
    "InvalidRangeError",
    "InvalidLengthError",
    "IdenticalFramesError",
    "InvalidRotationBasisError",
    "NotRigidTransformError",
    "SingularTransformError",
    "InvalidProjectionParamsError",
    "UndefinedPerspectiveDivideError",
    "DegenerateLookAtError",
    "FrameMismatchError",
    "UnitMismatchError",
    # Vectors
    "Vec3",
    "Point3",
    "Delta3",
    "Dir3",
    "delta3",
    "point3",
    "dir3",
    "zero_vec3",
    "add_vec3",
    "sub_vec3",
    "neg_vec3",
    "scale_vec3",
    "scale_dir3",
    "add_point3",
    "sub_point3_delta3",
    "sub_point3",
    "dot_vec3",
    "cross_vec3",
    "length_squared_vec3",
    "length_vec3",
    "distance_vec3",
    "distance_point3",
    "normalize_vec3",
    "normalize_vec3_unsafe",
    "lerp_vec3",
    "project_vec3",
    "project_vec3_unsafe",
    "reflect_vec3",
    "reflect_vec3_unsafe",
    "angle_between_vec3",
    "angle_between_vec3_unsafe",
    # Quaternions
    "EulerOrder",
    "Quaternion",
    "quat",
    "quat_identity",
    "quat_x",
    "quat_y",
    "quat_z",
    "quat_w",
    "quat_conjugate",
    "quat_norm_squared",
    "quat_norm",
    "quat_normalize",
    "quat_normalize_unsafe",
    "quat_inverse",
    "quat_inverse_unsafe",
    "compose_quats",
    "rotate_vec3_by_quat",
    "rotate_vec3_by_quat_unsafe",
    "quat_from_axis_angle",
    "quat_from_axis_angle_unsafe",
    "quat_from_euler",
    "quat_from_euler_unsafe",
    "quat_nlerp",
    "quat_nlerp_unsafe",
    "quat_slerp",
    "quat_slerp_unsafe",
    "is_rotation_basis",
    "quat_from_rotation_matrix",
    "quat_from_rotation_matrix_unsafe",
    # Matrices
    "Mat4",
    "LinearMat4",
    "ProjectionMat4",
    "mat4",
    "mat4_unsafe",
    "mat4_from_matrix",
    "mat4_identity",
    "mat4_from_translation",
    "mat4_from_scale",
    "mat4_from_quaternion",
    "mat4_from_quaternion_unsafe",
    "mat4_from_rigid_transform",
    "mat4_from_rigid_transform_unsafe",
    "mat4_from_trs",
    "mat4_from_trs_unsafe",
    "transpose_mat4",
    "compose_mat4",
    "is_rigid_transform",
    "invert_rigid_mat4",
    "invert_rigid_mat4_unsafe",
    "normal_matrix_from_mat4",
    "normal_matrix_from_mat4_unsafe",
    "mat4_perspective",
    "mat4_perspective_unsafe",
    "project_point3",
    "project_point3_unsafe",
    "mat4_look_at",
    "mat4_look_at_unsafe",
    "transform_point3",
    "transform_direction3",
    # TRS cache
    "TrsMat4Cache",
    "create_trs_mat4_cache",
]
