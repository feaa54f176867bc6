# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 NVIDIA Corporation

"""Shared test fixtures and helpers for spatial3d tests."""

import math

import numpy as np
import pytest
from spatial3d import FrameTag, UnitTag, Vec3, frame, unit

GEOM_EPS = 1e-10


def assert_vec3_close(value: Vec3, expected, atol: float = GEOM_EPS) -> None:
    """Compare the numeric components of a tagged vector."""
    np.testing.assert_allclose(value.as_array(), np.asarray(expected, dtype=np.float64), atol=atol, rtol=0)


def random_unit_quaternions(count: int, seed: int = 7) -> np.ndarray:
    """(count, 4) array of random unit quaternions in xyzw order."""
    rng = np.random.default_rng(seed)
    raw = rng.normal(size=(count, 4))
    return raw / np.linalg.norm(raw, axis=1, keepdims=True)


SIN_45 = math.sin(math.pi / 4)
COS_45 = math.cos(math.pi / 4)


@pytest.fixture
def world() -> FrameTag:
    return frame("world")


@pytest.fixture
def vehicle() -> FrameTag:
    return frame("vehicle")


@pytest.fixture
def camera() -> FrameTag:
    return frame("camera")


@pytest.fixture
def meter() -> UnitTag:
    return unit("m")


@pytest.fixture
def second() -> UnitTag:
    return unit("s")
