"""
chain.py
Data model for the simplified chain: units, snapshots and folding runs.

A chain is an ordered list of point-like units standing in for the residues
of a short peptide. Every snapshot of a chain is index-aligned with every
other snapshot and with the target: unit i always means residue i.

All types here are immutable values:
  - Vec3        : named 3-component vector
  - ChainUnit   : frozen dataclass (position, target_position, color)
  - ChainSnapshot : tuple of ChainUnit
  - FoldingRun  : frozen dataclass pairing snapshots with scores

Deriving a new snapshot therefore never aliases an existing one; a new unit
is built with dataclasses.replace and shares only immutable values.
"""

from __future__ import annotations

import numbers
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, NamedTuple, Tuple

import numpy as np

from .errors import InvalidInputError

# ═══════════════════════════════════════════════════════════════════════════
# Fixed geometry of the unfolded chain
# ═══════════════════════════════════════════════════════════════════════════

UNIT_SPACING = 0.5  # distance between neighbouring units on the unfolded line


class Vec3(NamedTuple):
    """Immutable 3D vector."""
    x: float
    y: float
    z: float

    def with_xy(self, x: float, y: float) -> "Vec3":
        return Vec3(float(x), float(y), self.z)

    def with_y(self, y: float) -> "Vec3":
        return Vec3(self.x, float(y), self.z)


class ColorTag(str, Enum):
    """
    Per-unit classification tag. The value is the display colour.
    Tags carry no behaviour; the scorer never reads them.
    """
    TARGET = "purple"
    QUANTUM_INITIAL = "skyblue"
    CLASSICAL_INITIAL = "blue"
    CORRECT = "green"
    INCORRECT = "red"
    CLASSICAL = "orange"


@dataclass(frozen=True)
class ChainUnit:
    """
    One unit of the chain.

    position        : rendered location, owned by the display layer
    target_position : location computed by the engine, read by the scorer
    color           : classification tag
    """
    position: Vec3
    target_position: Vec3
    color: ColorTag

    def moved_to(self, target_position: Vec3, color: ColorTag) -> "ChainUnit":
        """Return a copy with a new target position and tag."""
        return replace(self, target_position=target_position, color=color)

    def to_dict(self) -> Dict:
        return {
            "position": list(self.position),
            "target_position": list(self.target_position),
            "color": self.color.value,
        }


ChainSnapshot = Tuple[ChainUnit, ...]


def validate_chain_size(n) -> int:
    """Return n as int, or raise InvalidInputError if it is not a positive integer."""
    if isinstance(n, bool) or not isinstance(n, numbers.Integral):
        raise InvalidInputError(f"Chain size must be an integer, got {n!r}")
    if n <= 0:
        raise InvalidInputError(f"Chain size must be positive, got {n}")
    return int(n)


def initial_chain(n: int, color: ColorTag) -> ChainSnapshot:
    """
    Unfolded straight-line chain of n units along +x.

    Both position and target_position sit at (i * UNIT_SPACING, 0, 0).
    """
    n = validate_chain_size(n)
    units = []
    for i in range(n):
        start = Vec3(i * UNIT_SPACING, 0.0, 0.0)
        units.append(ChainUnit(position=start, target_position=start, color=color))
    return tuple(units)


def snapshot_coordinates(snapshot: ChainSnapshot) -> np.ndarray:
    """
    Target positions of a snapshot as an (N, 3) float array.
    The array is a fresh copy; writing to it never touches the snapshot.
    """
    if not snapshot:
        return np.zeros((0, 3), dtype=np.float64)
    return np.array([unit.target_position for unit in snapshot], dtype=np.float64)


# ═══════════════════════════════════════════════════════════════════════════
# Folding run
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class FoldingRun:
    """
    Ordered snapshots produced by one strategy, with one correctness
    score (percent, 0..100) per snapshot.
    """
    steps: Tuple[ChainSnapshot, ...]
    scores: Tuple[float, ...]
    label: str = ""
    metadata: Dict = field(default_factory=dict, compare=False)

    def __post_init__(self):
        if len(self.steps) != len(self.scores):
            raise InvalidInputError(
                f"FoldingRun needs one score per step "
                f"({len(self.steps)} steps, {len(self.scores)} scores)"
            )
        for s in self.scores:
            if not 0.0 <= s <= 100.0:
                raise InvalidInputError(f"Score {s} outside [0, 100]")

    def __len__(self) -> int:
        return len(self.steps)

    @property
    def final_score(self) -> float:
        return self.scores[-1] if self.scores else 0.0

    def step_at(self, cursor: int) -> Tuple[ChainSnapshot, float]:
        """Snapshot and score for an external step cursor, wrapped modulo the run length."""
        if not self.steps:
            raise InvalidInputError("Cannot index an empty FoldingRun")
        i = cursor % len(self.steps)
        return self.steps[i], self.scores[i]

    def coordinates(self, index: int) -> np.ndarray:
        """(N, 3) target positions of step `index`."""
        return snapshot_coordinates(self.steps[index])

    def to_dict(self) -> Dict:
        return {
            "label": self.label,
            "scores": [float(s) for s in self.scores],
            "steps": [[unit.to_dict() for unit in snap] for snap in self.steps],
            "metadata": dict(self.metadata),
        }

