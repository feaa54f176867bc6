# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 NVIDIA Corporation

"""End-to-end usage scenarios across the vector, quaternion and matrix kernels.

The last group pins the behavior of the fixed absolute tolerances at extreme
coordinate scales.
"""

import math

import numpy as np
import pytest
from conftest import COS_45, SIN_45, assert_vec3_close
from numpy.testing import assert_allclose
from spatial3d import (
    DegenerateVectorError,
    InvalidRotationBasisError,
    SingularTransformError,
    add_point3,
    compose_mat4,
    create_trs_mat4_cache,
    delta3,
    dir3,
    frame,
    invert_rigid_mat4,
    is_rigid_transform,
    is_rotation_basis,
    length_vec3,
    mat4_from_quaternion,
    mat4_from_rigid_transform,
    mat4_from_scale,
    mat4_from_trs,
    mat4_perspective,
    normal_matrix_from_mat4,
    normalize_vec3,
    point3,
    project_point3,
    quat,
    quat_slerp,
    rotate_vec3_by_quat,
    transform_direction3,
    transform_point3,
    units,
)

SIN_15 = math.sin(math.pi / 12)
COS_15 = math.cos(math.pi / 12)


@pytest.fixture
def lidar():
    return frame("lidar")


def test_sensor_extrinsics_chain(world, vehicle, lidar, camera, meter):
    pose_world_vehicle = mat4_from_rigid_transform(
        world, vehicle, quat(world, vehicle, 0, 0, SIN_45, COS_45), delta3(world, 10, 1, 0, unit=meter)
    )
    pose_vehicle_lidar = mat4_from_rigid_transform(
        vehicle, lidar, quat(vehicle, lidar, 0, 0, 0, 1), delta3(vehicle, 1, 0, 1, unit=meter)
    )
    pose_vehicle_camera = mat4_from_rigid_transform(
        vehicle, camera, quat(vehicle, camera, 0, SIN_15, 0, COS_15), delta3(vehicle, 0.5, 0.2, 1.2, unit=meter)
    )

    pose_world_lidar = compose_mat4(pose_world_vehicle, pose_vehicle_lidar)
    pose_world_camera = compose_mat4(pose_world_vehicle, pose_vehicle_camera)

    hit_lidar = point3(lidar, 2, -0.5, 0, unit=meter)
    hit_camera = point3(camera, 1.5, 0.1, 0.3, unit=meter)
    hit_world = transform_point3(pose_world_lidar, hit_lidar)
    hit_world_from_camera = transform_point3(pose_world_camera, hit_camera)

    assert hit_world.frame == "world"
    assert hit_world.z == pytest.approx(1.0, abs=1e-10)
    assert_vec3_close(transform_point3(invert_rigid_mat4(pose_world_lidar), hit_world), hit_lidar.as_array())
    assert_vec3_close(
        transform_point3(invert_rigid_mat4(pose_world_camera), hit_world_from_camera), hit_camera.as_array()
    )


def test_world_to_ndc_chain(world, vehicle, camera, meter):
    view = frame("view")
    ndc = frame("ndc")

    pose_world_vehicle = mat4_from_rigid_transform(
        world, vehicle, quat(world, vehicle, 0, 0, SIN_15, COS_15), delta3(world, 10, 2, 0, unit=meter)
    )
    pose_vehicle_camera = mat4_from_rigid_transform(
        vehicle, camera, quat(vehicle, camera, 0, 0, 0, 1), delta3(vehicle, 0.5, 0.1, 1.4, unit=meter)
    )
    pose_view_camera = mat4_from_rigid_transform(
        view, camera, quat(view, camera, 0, 0, 0, 1), delta3(view, 0, 0, 0, unit=meter)
    )

    pose_world_camera = compose_mat4(pose_world_vehicle, pose_vehicle_camera)
    pose_view_world = compose_mat4(pose_view_camera, invert_rigid_mat4(pose_world_camera))

    feature_camera = point3(camera, 0.5, 0.2, -5, unit=meter)
    feature_world = transform_point3(pose_world_camera, feature_camera)
    feature_view = transform_point3(pose_view_world, feature_world)
    assert_vec3_close(feature_view, [0.5, 0.2, -5])

    projection = mat4_perspective(
        ndc, view, math.pi / 3, 16 / 9, units.quantity(meter, 0.1), units.quantity(meter, 100.0)
    )
    feature_ndc = project_point3(projection, feature_view)
    assert feature_ndc.frame == "ndc"
    assert feature_ndc.unit == "1"
    assert np.all(np.abs(feature_ndc.as_array()) <= 1.0)


def test_pose_decomposition(world, meter):
    body = frame("body")
    pose_world_body = mat4_from_rigid_transform(
        world, body, quat(world, body, 0, 0, SIN_45, COS_45), delta3(world, 5, -2, 1, unit=meter)
    )

    translation = pose_world_body.translation()
    assert_vec3_close(translation, [5, -2, 1])
    assert translation.unit == "m"

    orientation = pose_world_body.quat()
    forward = rotate_vec3_by_quat(orientation, delta3(body, 1, 0, 0, unit=meter))
    assert_vec3_close(forward, [0, 1, 0])

    rebuilt = mat4_from_quaternion(world, body, orientation)
    assert_allclose(rebuilt.matrix[:3, :3], pose_world_body.matrix[:3, :3], atol=1e-10)

    with pytest.raises(InvalidRotationBasisError, match="Input matrix is not a valid rotation matrix"):
        mat4_from_scale(world, 2, 1, 1).quat()


def test_normal_matrix_fallback(world, meter):
    obj = frame("object")
    flattened = mat4_from_trs(
        world, obj, delta3(world, 0, 0, 0, unit=meter), quat(world, obj, 0, 0, 0, 1), dir3(obj, 1, 0, 1)
    )

    try:
        normal_matrix = normal_matrix_from_mat4(flattened)
    except SingularTransformError:
        normal_matrix = mat4_from_quaternion(world, obj, quat(world, obj, 0, 0, 0, 1))

    shaded = transform_direction3(normal_matrix, dir3(obj, 0, 1, 0))
    assert_vec3_close(shaded, [0, 1, 0])


def test_constant_acceleration_loop(world, meter, second):
    # Unit tags are symbolic, so velocity keeps the literal product unit.
    dt = units.quantity(second, 0.5)
    acceleration = units.quantity(units.div_unit(meter, "s^2"), 2.0)
    speed = units.quantity(units.mul_unit(acceleration.unit, second), 0.0)
    step_unit = units.mul_unit(speed.unit, second)
    position = point3(world, 0, 0, 0, unit=step_unit)

    for _ in range(4):
        step = units.add(units.mul(speed, dt), units.scale(units.mul(acceleration, units.mul(dt, dt)), 0.5))
        speed = units.add(speed, units.mul(acceleration, dt))
        zero = units.quantity(step.unit, 0.0)
        position = add_point3(position, delta3(world, step, zero, zero))

    assert speed.unit == "m/s^2*s"
    assert units.value_of(speed) == pytest.approx(4.0)
    assert position.unit == "m/s^2*s*s"
    assert position.x == pytest.approx(4.0)


def test_interpolated_attitude_with_cached_pose(world, meter):
    body = frame("body")
    start = quat(world, body, 0, 0, 0, 1)
    end = quat(world, body, 0, 0, SIN_45, COS_45)
    mid = quat_slerp(start, end, 0.5)

    forward = rotate_vec3_by_quat(mid, delta3(body, 1, 0, 0, unit=meter))
    assert_vec3_close(forward, [math.sqrt(0.5), math.sqrt(0.5), 0])

    build_pose = create_trs_mat4_cache(world, body, meter)
    scale = dir3(body, 1, 1, 1)
    pose = build_pose(delta3(world, 2, 3, 4, unit=meter), mid, scale)
    assert build_pose(delta3(world, 2, 3, 4, unit=meter), mid, scale) is pose

    shifted = build_pose(delta3(world, 3, 3, 4, unit=meter), mid, scale)
    p = point3(body, 1, 0, 0, unit=meter)
    assert transform_point3(shifted, p).x - transform_point3(pose, p).x == pytest.approx(1.0)


# =============================================================================
# Fixed absolute tolerances
# =============================================================================


class TestAbsoluteTolerances:
    def test_tiny_but_nonzero_vector_is_rejected(self, world):
        tiny = delta3(world, 1e-15, 0, 0)
        assert length_vec3(tiny).value > 0
        with pytest.raises(DegenerateVectorError):
            normalize_vec3(tiny)

    def test_same_direction_at_normal_scale_is_accepted(self, world):
        assert_vec3_close(normalize_vec3(delta3(world, 1e-3, 0, 0)), [1, 0, 0])

    def test_small_scale_drift_passes_rotation_check(self):
        # A 2e-9 uniform scale error stays inside the 1e-8 basis tolerance.
        drifted = np.eye(3) * (1.0 + 2e-9)
        assert is_rotation_basis(drifted)
        assert not is_rotation_basis(np.eye(3) * (1.0 + 1e-7))

    def test_rigidity_ignores_translation_magnitude(self, world, vehicle, meter):
        far_away = mat4_from_rigid_transform(
            world, vehicle, quat(world, vehicle, 0, 0, 0, 1), delta3(world, 1e300, -1e300, 0, unit=meter)
        )
        assert is_rigid_transform(far_away)
