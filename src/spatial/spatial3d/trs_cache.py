# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 NVIDIA Corporation

"""Single-slot memoization for TRS matrix construction.

Animation and simulation loops often rebuild the same pose every tick. The
cache remembers the last translation/rotation/scale triple and returns the
previously built Mat4 instance when all ten scalars are bit-identical, so
callers can skip downstream work with an ``is`` check.

Only the most recent inputs are kept; two alternating input sets rebuild on
every call. The cache is not thread-safe.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from spatial3d.frames import FrameTag, UnitTag, ensure_same_frame, ensure_same_unit
from spatial3d.matrix4 import Mat4, mat4_from_trs
from spatial3d.quaternion import Quaternion
from spatial3d.vector3 import Delta3, Dir3

logger = logging.getLogger(__name__)


class TrsMat4Cache:
    """Callable ``(translation, rotation, scale) -> Mat4`` with a one-entry memo."""

    def __init__(self, to_frame: FrameTag, from_frame: FrameTag, unit_tag: UnitTag):
        self.to_frame = to_frame
        self.from_frame = from_frame
        self.unit = unit_tag
        self._last_inputs: Optional[np.ndarray] = None
        self._last_matrix: Optional[Mat4] = None
        self.hits = 0
        self.rebuilds = 0

    def __call__(self, translation: Delta3, rotation: Quaternion, scale: Dir3) -> Mat4:
        self._check_tags(translation, rotation, scale)
        inputs = np.concatenate((translation.as_array(), rotation.as_array(), scale.as_array()))

        # Exact comparison: NaN never matches, and -0.0 matches 0.0.
        if self._last_matrix is not None and np.array_equal(inputs, self._last_inputs):
            self.hits += 1
            logger.debug("TRS cache hit for %s <- %s", self.to_frame, self.from_frame)
            return self._last_matrix

        # Validates frames and rotation before anything is stored.
        matrix = mat4_from_trs(self.to_frame, self.from_frame, translation, rotation, scale)
        self._last_inputs = inputs
        self._last_matrix = matrix
        self.rebuilds += 1
        logger.debug(
            "Rebuilt TRS matrix for %s <- %s (rebuild #%d)",
            self.to_frame,
            self.from_frame,
            self.rebuilds,
        )
        return matrix

    def _check_tags(self, translation: Delta3, rotation: Quaternion, scale: Dir3) -> None:
        if not isinstance(translation, Delta3):
            raise TypeError(f"TrsMat4Cache expects a Delta3 translation, got {type(translation).__name__}")
        if not isinstance(rotation, Quaternion):
            raise TypeError(f"TrsMat4Cache expects a Quaternion rotation, got {type(rotation).__name__}")
        if not isinstance(scale, Dir3):
            raise TypeError(f"TrsMat4Cache expects a Dir3 scale, got {type(scale).__name__}")
        ensure_same_frame(self.to_frame, translation.frame, "TrsMat4Cache translation")
        ensure_same_unit(self.unit, translation.unit, "TrsMat4Cache translation")
        ensure_same_frame(self.to_frame, rotation.to_frame, "TrsMat4Cache rotation")
        ensure_same_frame(self.from_frame, rotation.from_frame, "TrsMat4Cache rotation")
        ensure_same_frame(self.from_frame, scale.frame, "TrsMat4Cache scale")

    def clear(self) -> None:
        """Drop the cached entry; the next call always rebuilds."""
        self._last_inputs = None
        self._last_matrix = None


def create_trs_mat4_cache(to_frame: FrameTag, from_frame: FrameTag, unit_tag: UnitTag) -> TrsMat4Cache:
    return TrsMat4Cache(to_frame, from_frame, unit_tag)
