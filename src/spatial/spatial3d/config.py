# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 NVIDIA Corporation

"""Numeric tolerances shared by the geometry kernels.

The defaults are absolute thresholds, not relative ones, so they are not
scale-invariant: very large or very small coordinates can trip them
spuriously. They are kept as-is for compatibility.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from typing import Any, Optional, Union

from omegaconf import OmegaConf

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToleranceConfig:
    """Tolerances used by the validating geometry API."""

    near_zero: float = 1e-14  # Length floor for vectors and quaternions
    rotation_basis_eps: float = 1e-8  # Orthonormality check for rotation matrices
    rigid_transform_eps: float = 1e-10  # Orthonormality check for rigid inversion
    approx_eq_tolerance: float = 1e-10  # Default for units.approx_eq
    slerp_nlerp_threshold: float = 0.9995  # |cos| above which SLERP falls back to NLERP


DEFAULT_TOLERANCES = ToleranceConfig()


def load_tolerance_config(
    path: Optional[Union[str, os.PathLike]] = None,
    overrides: Optional[Union[dict[str, Any], list[str]]] = None,
) -> ToleranceConfig:
    """Build a ToleranceConfig from defaults, an optional YAML file and overrides.

    Args:
        path: Optional YAML file with any subset of the ToleranceConfig fields.
        overrides: Either a mapping or an OmegaConf dotlist
            (e.g. ``["near_zero=1e-12"]``) applied last.

    Raises:
        ValueError: If any tolerance is not strictly positive.
    """
    schema = OmegaConf.structured(ToleranceConfig)
    # Frozen dataclasses produce read-only configs; the merge needs a writable base.
    OmegaConf.set_readonly(schema, False)
    layers = [schema]
    if path is not None:
        logger.debug("Loading tolerance config from %s", path)
        layers.append(OmegaConf.load(path))
    if overrides:
        if isinstance(overrides, dict):
            layers.append(OmegaConf.create(overrides))
        else:
            layers.append(OmegaConf.from_dotlist(list(overrides)))

    merged = OmegaConf.merge(*layers)
    config: ToleranceConfig = OmegaConf.to_object(merged)

    for f in fields(config):
        value = getattr(config, f.name)
        if not value > 0:
            raise ValueError(f"Tolerance {f.name} must be > 0, got {value}")
    if config.slerp_nlerp_threshold >= 1.0:
        raise ValueError("slerp_nlerp_threshold must be < 1")

    return config
