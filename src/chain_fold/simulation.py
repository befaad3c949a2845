"""
simulation.py
Runs both folding strategies against one target and keeps the latest result.

Usage:
    runner = SimulationRunner(SimulationConfig(n_units=10, probability=0.7))
    result = runner.run()
    runner.set_probability(0.4)   # discards `result`, computes a fresh pair
"""

from __future__ import annotations

import logging
import numbers
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from .algorithms.classical import run_deterministic_fold
from .algorithms.quantum import run_probabilistic_fold, validate_probability
from .algorithms.sampling import SAMPLERS, Sampler, get_sampler, make_rng
from .core.chain import ChainSnapshot, FoldingRun, validate_chain_size
from .core.errors import InvalidInputError
from .core.target import build_target

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationConfig:
    """Simulation parameters (immutable)."""
    n_units: int = 10
    probability: float = 1.0
    seed: Optional[int] = None    # None: fresh OS entropy on every run
    sampler: str = "numpy"        # "numpy" or "qubit"

    def validate(self) -> "SimulationConfig":
        """Return a normalised copy, or raise InvalidInputError."""
        if self.seed is not None and (isinstance(self.seed, bool) or not isinstance(self.seed, numbers.Integral) or self.seed < 0):
            raise InvalidInputError(f"Seed must be a non-negative integer or None, got {self.seed!r}")
        if not isinstance(self.sampler, str) or self.sampler.lower() not in SAMPLERS:
            raise InvalidInputError(f"Unknown sampler '{self.sampler}'")
        return replace(
            self,
            n_units=validate_chain_size(self.n_units),
            probability=validate_probability(self.probability),
            seed=None if self.seed is None else int(self.seed),
            sampler=self.sampler.lower(),
        )

    def with_probability(self, p: float) -> "SimulationConfig":
        return replace(self, probability=p).validate()


@dataclass(frozen=True)
class SimulationResult:
    """Target plus one run of each strategy."""
    config: SimulationConfig
    target: ChainSnapshot
    quantum: FoldingRun
    classical: FoldingRun

    def frame(self, cursor: int) -> Dict[str, Tuple[ChainSnapshot, float]]:
        """
        Snapshot/score pairs for an external step cursor. Each run wraps
        the cursor modulo its own length (11 quantum, 6 classical).
        """
        return {
            "quantum": self.quantum.step_at(cursor),
            "classical": self.classical.step_at(cursor),
        }

    def to_dict(self) -> Dict:
        return {
            "config": {
                "n_units": self.config.n_units,
                "probability": self.config.probability,
                "seed": self.config.seed,
                "sampler": self.config.sampler,
            },
            "target": [unit.to_dict() for unit in self.target],
            "quantum": self.quantum.to_dict(),
            "classical": self.classical.to_dict(),
        }


def run_simulation(
    config: SimulationConfig,
    sampler: Optional[Sampler] = None,
    run_index: int = 0,
) -> SimulationResult:
    """
    Build the target once and run both strategies against it.

    The two strategies share nothing but the immutable target; the
    probabilistic one gets its own generator. A seeded config yields one
    reproducible stream per (seed, run_index); an unseeded one draws fresh
    OS entropy on every call.
    """
    config = config.validate()
    if sampler is None:
        sampler = get_sampler(config.sampler)

    target = build_target(config.n_units)
    quantum = run_probabilistic_fold(
        config.n_units, target, config.probability,
        rng=make_rng(None if config.seed is None else [config.seed, run_index]),
        sampler=sampler,
    )
    classical = run_deterministic_fold(config.n_units, target)

    logger.info(
        "Simulation n=%d p=%.2f: quantum final %.1f%%, classical final %.1f%%",
        config.n_units, config.probability, quantum.final_score, classical.final_score,
    )
    return SimulationResult(config=config, target=target, quantum=quantum, classical=classical)


class RunnerState(str, Enum):
    IDLE = "idle"
    COMPUTING = "computing"
    READY = "ready"


class SimulationRunner:
    """
    Holds the current configuration and the latest SimulationResult.

    Every change of the probability triggers a complete fresh run; the
    previous result object is dropped, never updated in place, so a
    listener can never observe a half-updated pair of runs.
    """

    def __init__(self, config: Optional[SimulationConfig] = None):
        self.config = (config or SimulationConfig()).validate()
        self.state = RunnerState.IDLE
        self.result: Optional[SimulationResult] = None
        self._sampler = get_sampler(self.config.sampler)
        self._listeners: List[Callable[[SimulationResult], None]] = []
        self.n_runs = 0

    def subscribe(self, callback: Callable[[SimulationResult], None]):
        """Call `callback(result)` after every completed run."""
        self._listeners.append(callback)

    def run(self) -> SimulationResult:
        self.state = RunnerState.COMPUTING
        self.result = None
        try:
            result = run_simulation(self.config, sampler=self._sampler, run_index=self.n_runs)
        except Exception:
            self.state = RunnerState.IDLE
            raise
        self.result = result
        self.state = RunnerState.READY
        self.n_runs += 1
        for callback in self._listeners:
            callback(result)
        return result

    def set_probability(self, p: float) -> SimulationResult:
        """Validate p, replace the configuration and re-run both strategies."""
        self.config = self.config.with_probability(p)
        logger.debug("Probability changed to %.2f, re-running", self.config.probability)
        return self.run()
