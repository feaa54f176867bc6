# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 NVIDIA Corporation

import pytest
from spatial3d import (
    DIMENSIONLESS,
    FrameMismatchError,
    GeometryError,
    IdenticalFramesError,
    UnitMismatchError,
    frame,
    mat4,
    quat,
    unit,
)
from spatial3d.frames import ensure_distinct_frames, ensure_same_frame, ensure_same_unit


def test_tags_are_plain_strings():
    assert frame("world") == "world"
    assert unit("m") == "m"
    assert DIMENSIONLESS == "1"


@pytest.mark.parametrize("factory", [frame, unit])
def test_tags_reject_non_strings(factory):
    with pytest.raises(TypeError, match="must be a string"):
        factory(42)


def test_distinct_frames_guard(world, vehicle):
    ensure_distinct_frames(world, vehicle)
    with pytest.raises(IdenticalFramesError, match="toFrameTag and fromFrameTag must be different"):
        ensure_distinct_frames(world, frame("world"))


def test_quat_rejects_identical_frames(world):
    with pytest.raises(IdenticalFramesError):
        quat(world, world, 0.0, 0.0, 0.0, 1.0)


def test_mat4_rejects_identical_frames(world):
    values = [1.0, 0.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 0.0, 1.0]
    with pytest.raises(IdenticalFramesError):
        mat4(world, world, DIMENSIONLESS, values)


def test_same_frame_and_unit_guards(world, vehicle, meter, second):
    ensure_same_frame(world, frame("world"), "test")
    ensure_same_unit(meter, unit("m"), "test")
    with pytest.raises(FrameMismatchError, match="expected frame 'world', got 'vehicle'"):
        ensure_same_frame(world, vehicle, "test")
    with pytest.raises(UnitMismatchError, match="expected unit 'm', got 's'"):
        ensure_same_unit(meter, second, "test")


def test_errors_are_value_errors():
    assert issubclass(IdenticalFramesError, GeometryError)
    assert issubclass(GeometryError, ValueError)
