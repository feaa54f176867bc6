# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 NVIDIA Corporation

"""Frame and unit tags plus the runtime guards that compare them.

Tags are plain strings. Two frames are the same frame iff their tags compare
equal; units are never converted, only compared for identity.
"""

from __future__ import annotations

from typing import NewType

from spatial3d.errors import FrameMismatchError, IdenticalFramesError, UnitMismatchError

FrameTag = NewType("FrameTag", str)
UnitTag = NewType("UnitTag", str)


def frame(name: str) -> FrameTag:
    """Create a frame tag."""
    if not isinstance(name, str):
        raise TypeError(f"Frame tag must be a string, got {type(name).__name__}")
    return FrameTag(name)


def unit(name: str) -> UnitTag:
    """Create a unit tag."""
    if not isinstance(name, str):
        raise TypeError(f"Unit tag must be a string, got {type(name).__name__}")
    return UnitTag(name)


DIMENSIONLESS: UnitTag = unit("1")


def ensure_distinct_frames(to_frame: FrameTag, from_frame: FrameTag) -> None:
    """Reject a two-frame construction whose frames are the same."""
    if to_frame == from_frame:
        raise IdenticalFramesError("toFrameTag and fromFrameTag must be different")


def ensure_same_frame(expected: FrameTag, actual: FrameTag, what: str) -> None:
    if expected != actual:
        raise FrameMismatchError(
            f"{what}: expected frame {expected!r}, got {actual!r}"
        )


def ensure_same_unit(expected: UnitTag, actual: UnitTag, what: str) -> None:
    if expected != actual:
        raise UnitMismatchError(f"{what}: expected unit {expected!r}, got {actual!r}")
