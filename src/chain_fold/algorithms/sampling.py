"""
sampling.py
Random capabilities injected into the folders.

A *generator* is anything exposing ``random()`` (uniform on [0, 1)) and
``uniform(low, high)``; numpy's Generator is the default, and Python's
random.Random also qualifies, which keeps tests deterministic.

A *sampler* decides whether one unit folds correctly:

    sampler(probability, rng) -> bool

Two samplers are provided:
  - bernoulli_sampler : one uniform draw against the probability
  - QubitSampler      : the probability is first realised as the |1⟩
                        population of a single qubit prepared with
                        RY(2·arcsin√p) on a PennyLane device, then
                        sampled with the injected generator.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional, Sequence, Union

import numpy as np
import pennylane as qml

from ..core.errors import InvalidInputError

logger = logging.getLogger(__name__)

Sampler = Callable[[float, object], bool]


def make_rng(seed: Optional[Union[int, Sequence[int]]] = None) -> np.random.Generator:
    """
    Fresh, independent generator. seed=None draws OS entropy; a sequence
    of ints (e.g. [seed, run_index]) selects one of many independent streams.
    """
    return np.random.default_rng(seed)


def bernoulli_sampler(probability: float, rng) -> bool:
    """True with the given probability."""
    if probability >= 1.0:
        return True
    if probability <= 0.0:
        return False
    return bool(rng.random() < probability)


class QubitSampler:
    """
    Success sampler backed by a single-qubit rotation.

    For a success probability p the qubit is rotated by θ = 2·arcsin(√p),
    so that |⟨1|RY(θ)|0⟩|² = sin²(θ/2) = p. The exact |1⟩ population is
    read from an analytic ``default.qubit`` device and cached per distinct
    probability (one circuit evaluation per folding step), then compared
    against a uniform draw from the injected generator.
    """

    def __init__(self):
        self.dev = qml.device("default.qubit", wires=1)

        @qml.qnode(self.dev)
        def circuit(theta):
            qml.RY(theta, wires=0)
            return qml.probs(wires=0)

        self._circuit = circuit
        self._cache: Dict[float, float] = {}
        self.n_circuit_evals = 0

    @staticmethod
    def rotation_angle(probability: float) -> float:
        p = float(np.clip(probability, 0.0, 1.0))
        return float(2.0 * np.arcsin(np.sqrt(p)))

    def excited_population(self, probability: float) -> float:
        """|1⟩ population of RY(2·arcsin√p)|0⟩."""
        key = round(float(probability), 12)
        if key not in self._cache:
            probs = self._circuit(self.rotation_angle(key))
            self._cache[key] = float(probs[1])
            self.n_circuit_evals += 1
            logger.debug("Qubit population for p=%.4f: %.6f", key, self._cache[key])
        return self._cache[key]

    def __call__(self, probability: float, rng) -> bool:
        if probability >= 1.0:
            return True
        if probability <= 0.0:
            return False
        return bool(rng.random() < self.excited_population(probability))


SAMPLERS = ("numpy", "qubit")


def get_sampler(name: str) -> Sampler:
    """Sampler by name: "numpy" or "qubit"."""
    key = name.lower()
    if key == "numpy":
        return bernoulli_sampler
    if key == "qubit":
        return QubitSampler()
    raise InvalidInputError(f"Unknown sampler '{name}'. Choose from {list(SAMPLERS)}")
