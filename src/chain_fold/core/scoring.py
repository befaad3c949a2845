"""
scoring.py
Correctness of a chain snapshot relative to the target.

A unit is "correct" when its target position lies within
CORRECTNESS_THRESHOLD of the corresponding target unit, measured in the
XY plane only. Correctness is the percentage of correct units.

The z component is excluded: the helix rises 0.2 per unit, so a 3D distance
would be dominated by height for every unit that never leaves z = 0.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from .chain import ChainSnapshot, snapshot_coordinates
from .errors import LengthMismatchError

logger = logging.getLogger(__name__)

CORRECTNESS_THRESHOLD = 0.2


def check_lengths(candidate: ChainSnapshot, target: ChainSnapshot) -> None:
    """Raise LengthMismatchError unless candidate and target are index-aligned."""
    if len(candidate) != len(target):
        raise LengthMismatchError(expected=len(target), got=len(candidate))


def unit_distances(candidate: ChainSnapshot, target: ChainSnapshot) -> np.ndarray:
    """
    Per-unit XY distance between candidate and target.

    Returns
    -------
    d : np.ndarray, shape (N,)
    """
    check_lengths(candidate, target)
    diff = snapshot_coordinates(candidate)[:, :2] - snapshot_coordinates(target)[:, :2]
    return np.sqrt(np.sum(diff * diff, axis=1))


def correct_mask(
    candidate: ChainSnapshot,
    target: ChainSnapshot,
    threshold: float = CORRECTNESS_THRESHOLD,
) -> np.ndarray:
    """Boolean array, True where a unit is within `threshold` of its target."""
    return unit_distances(candidate, target) < threshold


def score_correctness(
    candidate: Optional[ChainSnapshot],
    target: ChainSnapshot,
    threshold: float = CORRECTNESS_THRESHOLD,
) -> float:
    """
    Percentage (0..100) of candidate units within `threshold` of the target.

    An empty or missing candidate scores 0. A candidate whose length differs
    from the target also scores 0; the mismatch is logged, not raised.
    """
    if not candidate:
        return 0.0
    try:
        mask = correct_mask(candidate, target, threshold)
    except LengthMismatchError as e:
        logger.warning("Scoring misaligned snapshot as 0%%: %s", e)
        return 0.0
    return float(100.0 * np.count_nonzero(mask) / len(candidate))
