# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 NVIDIA Corporation

"""Exception types raised by the validating ("safe") geometry API.

All errors are deterministic and derived from the inputs; callers can recover
by catching them at the call site. Unsafe variants never raise these for
numeric reasons.
"""


class GeometryError(ValueError):
    """Base class for all spatial3d errors."""


class DegenerateVectorError(GeometryError):
    """Vector length is at or below the near-zero floor."""


class DegenerateQuaternionError(GeometryError):
    """Quaternion norm is at or below the near-zero floor."""


class InvalidRangeError(GeometryError):
    """Clamp bounds are inverted."""


class InvalidLengthError(GeometryError):
    """Matrix payload does not have the expected number of values."""


class IdenticalFramesError(GeometryError):
    """A two-frame constructor was given equal frame tags."""


class InvalidRotationBasisError(GeometryError):
    """Matrix linear block is not a right-handed orthonormal rotation."""


class NotRigidTransformError(GeometryError):
    """Matrix is not a rigid (rotation + translation) transform."""


class SingularTransformError(GeometryError):
    """Linear block has a zero determinant."""


class InvalidProjectionParamsError(GeometryError):
    """Field of view, aspect or clip planes are out of range."""


class UndefinedPerspectiveDivideError(GeometryError):
    """Homogeneous w is exactly zero."""


class DegenerateLookAtError(GeometryError):
    """Eye, target and up do not span an orthonormal camera basis."""


class FrameMismatchError(GeometryError):
    """Operands are expressed in incompatible coordinate frames."""


class UnitMismatchError(GeometryError):
    """Operands carry incompatible unit tags."""
