"""
classical.py
Deterministic ("classical") baseline strategy.

A fixed oscillatory trajectory: at step s (0-based) unit idx sits at

    y = sin(idx + s)

with x and z left on the unfolded line. The strategy never steers toward
the target; the target is used only for scoring. No randomness.
"""

from __future__ import annotations

import logging
import math

from ..core.chain import (
    ChainSnapshot,
    ColorTag,
    FoldingRun,
    initial_chain,
    validate_chain_size,
)
from ..core.errors import LengthMismatchError
from ..core.scoring import score_correctness

logger = logging.getLogger(__name__)

N_CLASSICAL_STEPS = 5


def classical_step(initial: ChainSnapshot, step: int) -> ChainSnapshot:
    """Snapshot for 0-based step `step`, derived from `initial`."""
    return tuple(
        unit.moved_to(unit.target_position.with_y(math.sin(idx + step)), ColorTag.CLASSICAL)
        for idx, unit in enumerate(initial)
    )


def run_deterministic_fold(n: int, target: ChainSnapshot) -> FoldingRun:
    """
    Run the deterministic strategy.

    Returns a FoldingRun of N_CLASSICAL_STEPS + 1 snapshots; identical
    across calls for the same n.
    """
    n = validate_chain_size(n)
    if len(target) != n:
        raise LengthMismatchError(expected=n, got=len(target))

    initial = initial_chain(n, ColorTag.CLASSICAL_INITIAL)
    steps = [initial]
    scores = [score_correctness(initial, target)]

    for s in range(N_CLASSICAL_STEPS):
        snapshot = classical_step(initial, s)
        steps.append(snapshot)
        scores.append(score_correctness(snapshot, target))
        logger.debug("classical step %d: correctness=%.1f%%", s, scores[-1])

    return FoldingRun(
        steps=tuple(steps),
        scores=tuple(scores),
        label="classical",
        metadata={"n_units": n, "n_steps": N_CLASSICAL_STEPS},
    )
