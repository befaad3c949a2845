"""
quantum.py
Probabilistic ("quantum") folding strategy.

Starting from the unfolded line, each of N_QUANTUM_STEPS steps re-derives
the chain from the initial snapshot. At step s every unit independently
folds onto its target XY position with probability

    P(s) = min(1, s / N_QUANTUM_STEPS) · p

where p ∈ [0.1, 1.0] is the user-tunable multiplier. A unit that fails lands
at a uniformly random XY position in [-1, 1]². The z component never moves,
matching the XY-only correctness metric.

Only the expected correctness trend is guaranteed (non-decreasing in s for
fixed p); individual trajectories are random. With p = 1 the final step is
deterministic: P = 1 and every unit lands on the target.
"""

from __future__ import annotations

import logging
import math
import numbers
from typing import Optional

from ..core.chain import (
    ChainSnapshot,
    ColorTag,
    FoldingRun,
    initial_chain,
    validate_chain_size,
)
from ..core.errors import InvalidInputError, LengthMismatchError
from ..core.scoring import score_correctness
from .sampling import Sampler, bernoulli_sampler, make_rng

logger = logging.getLogger(__name__)

N_QUANTUM_STEPS = 10
MIN_PROBABILITY = 0.1
MAX_PROBABILITY = 1.0
_PROBABILITY_TOLERANCE = 1e-9  # slider arithmetic (0.1 * 3 etc.)


def validate_probability(p) -> float:
    """Return p as float clipped to [0.1, 1.0], or raise InvalidInputError."""
    if isinstance(p, bool) or not isinstance(p, numbers.Real) or not math.isfinite(p):
        raise InvalidInputError(f"Probability must be a finite number, got {p!r}")
    if p < MIN_PROBABILITY - _PROBABILITY_TOLERANCE or p > MAX_PROBABILITY + _PROBABILITY_TOLERANCE:
        raise InvalidInputError(
            f"Probability must lie in [{MIN_PROBABILITY}, {MAX_PROBABILITY}], got {p}"
        )
    return min(max(float(p), MIN_PROBABILITY), MAX_PROBABILITY)


def ramp_factor(step: int, n_steps: int = N_QUANTUM_STEPS) -> float:
    """min(1, step / n_steps)."""
    return min(1.0, step / n_steps)


def quantum_step(
    initial: ChainSnapshot,
    target: ChainSnapshot,
    probability: float,
    rng,
    sampler: Sampler = bernoulli_sampler,
) -> ChainSnapshot:
    """
    One folding step derived from `initial`.

    Per unit: one success draw, then (on failure only) an x draw and a
    y draw, in that order.
    """
    units = []
    for unit, ref in zip(initial, target):
        if sampler(probability, rng):
            goal = ref.target_position
            units.append(unit.moved_to(
                unit.target_position.with_xy(goal.x, goal.y), ColorTag.CORRECT,
            ))
        else:
            x = rng.uniform(-1.0, 1.0)
            y = rng.uniform(-1.0, 1.0)
            units.append(unit.moved_to(
                unit.target_position.with_xy(x, y), ColorTag.INCORRECT,
            ))
    return tuple(units)


def run_probabilistic_fold(
    n: int,
    target: ChainSnapshot,
    p: float,
    rng=None,
    sampler: Optional[Sampler] = None,
) -> FoldingRun:
    """
    Run the probabilistic folding strategy.

    Parameters
    ----------
    n : int
        Chain size.
    target : ChainSnapshot
        Target from build_target(n); read only.
    p : float
        Probability multiplier in [0.1, 1.0].
    rng : generator, optional
        Source of uniform draws. A fresh numpy Generator if omitted.
    sampler : callable, optional
        Success sampler (default: bernoulli_sampler).

    Returns
    -------
    run : FoldingRun
        N_QUANTUM_STEPS + 1 snapshots (the unfolded line first) and scores.
    """
    n = validate_chain_size(n)
    p = validate_probability(p)
    if len(target) != n:
        raise LengthMismatchError(expected=n, got=len(target))
    if rng is None:
        rng = make_rng()
    if sampler is None:
        sampler = bernoulli_sampler

    initial = initial_chain(n, ColorTag.QUANTUM_INITIAL)
    steps = [initial]
    scores = [score_correctness(initial, target)]

    for s in range(1, N_QUANTUM_STEPS + 1):
        probability = ramp_factor(s) * p
        snapshot = quantum_step(initial, target, probability, rng, sampler)
        steps.append(snapshot)
        scores.append(score_correctness(snapshot, target))
        logger.debug("quantum step %d: P=%.3f correctness=%.1f%%", s, probability, scores[-1])

    return FoldingRun(
        steps=tuple(steps),
        scores=tuple(scores),
        label="quantum",
        metadata={"n_units": n, "probability": p, "n_steps": N_QUANTUM_STEPS},
    )
