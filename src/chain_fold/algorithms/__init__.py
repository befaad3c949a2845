"""Folding strategies and the random capabilities they consume."""

from .classical import N_CLASSICAL_STEPS, run_deterministic_fold
from .quantum import N_QUANTUM_STEPS, run_probabilistic_fold, validate_probability
from .sampling import QubitSampler, bernoulli_sampler, get_sampler, make_rng
