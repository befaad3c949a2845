"""
target.py
Fixed folded target for a chain of n units.

The target is a right-handed helix wound around the z-axis:

    x_i = sin(i·π/5) · R
    y_i = cos(i·π/5) · R
    z_i = i · pitch

with R = 1.5 and pitch = 0.2, i.e. ten units per full turn. Each unit's
rendered position starts on the unfolded line (i · 0.5, 0, 0).
"""

from __future__ import annotations

import numpy as np

from .chain import (
    UNIT_SPACING,
    ChainSnapshot,
    ChainUnit,
    ColorTag,
    Vec3,
    validate_chain_size,
)

HELIX_RADIUS = 1.5
HELIX_PITCH = 0.2       # rise per unit along z
UNITS_PER_TURN = 10


def helix_point(i: int) -> Vec3:
    """Target position of unit i on the helix."""
    angle = 2.0 * np.pi * i / UNITS_PER_TURN
    return Vec3(
        float(np.sin(angle) * HELIX_RADIUS),
        float(np.cos(angle) * HELIX_RADIUS),
        float(i * HELIX_PITCH),
    )


def build_target(n: int) -> ChainSnapshot:
    """
    Build the target snapshot for a chain of n units.

    Parameters
    ----------
    n : int
        Chain size (positive).

    Returns
    -------
    target : ChainSnapshot
        Immutable tuple of n units tagged ColorTag.TARGET.
    """
    n = validate_chain_size(n)
    return tuple(
        ChainUnit(
            position=Vec3(i * UNIT_SPACING, 0.0, 0.0),
            target_position=helix_point(i),
            color=ColorTag.TARGET,
        )
        for i in range(n)
    )
