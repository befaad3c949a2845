"""
statistics.py
Statistical analysis of repeated folding runs.

Provides:
  • Bootstrap confidence intervals
  • Monte Carlo correctness trend of the probabilistic strategy
  • Analytic expected correctness per step
  • Cohen's d effect size
  • Wilcoxon signed-rank test (tie-corrected)
  • Final-step comparison of the two strategies
  • Plain-text step table for one simulation

References:
  [1] Efron & Tibshirani, An Introduction to the Bootstrap (1993)
  [2] Cohen, Statistical Power Analysis for the Behavioral Sciences (1988)
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from ..algorithms.classical import run_deterministic_fold
from ..algorithms.quantum import N_QUANTUM_STEPS, ramp_factor, run_probabilistic_fold, validate_probability
from ..algorithms.sampling import Sampler, make_rng
from ..core.chain import ColorTag, initial_chain, validate_chain_size
from ..core.errors import InvalidInputError
from ..core.scoring import score_correctness
from ..core.target import build_target

logger = logging.getLogger(__name__)


def bootstrap_ci(
    data: np.ndarray,
    statistic: str = "mean",
    n_bootstrap: int = 2000,
    confidence: float = 0.95,
    seed: Optional[int] = None,
) -> Tuple[float, float, float]:
    """
    Compute bootstrap confidence interval for a statistic.

    Parameters
    ----------
    data : array-like
        Sample data.
    statistic : str
        "mean", "median", or "min".
    n_bootstrap : int
        Number of bootstrap resamples.
    confidence : float
        Confidence level (e.g. 0.95 for 95% CI).
    seed : int, optional

    Returns
    -------
    point_estimate : float
    ci_lower : float
    ci_upper : float
    """
    data = np.asarray(data, dtype=np.float64)
    if data.size == 0:
        raise InvalidInputError("bootstrap_ci needs at least one sample")
    rng = np.random.default_rng(seed)

    stat_fn = {"mean": np.mean, "median": np.median, "min": np.min}
    fn = stat_fn.get(statistic, np.mean)

    point = float(fn(data))

    idx = rng.integers(0, len(data), size=(n_bootstrap, len(data)))
    bootstrap_stats = fn(data[idx], axis=1)

    alpha = 1 - confidence
    ci_lower = float(np.percentile(bootstrap_stats, 100 * alpha / 2))
    ci_upper = float(np.percentile(bootstrap_stats, 100 * (1 - alpha / 2)))

    return point, ci_lower, ci_upper


# ═══════════════════════════════════════════════════════════════════════════
# Expected correctness
# ═══════════════════════════════════════════════════════════════════════════

def expected_correctness(n: int, p: float) -> np.ndarray:
    """
    Expected score of every probabilistic step, shape (N_QUANTUM_STEPS + 1,).

    Step 0 is the unfolded line's score. For s >= 1 each unit is on target
    with probability min(1, s/10)·p, so E[score] = 100·min(1, s/10)·p. A
    failed unit is drawn from [-1, 1]², which never comes within the
    threshold of a helix point (radius 1.5), so the formula is exact.
    """
    n = validate_chain_size(n)
    p = validate_probability(p)
    target = build_target(n)
    baseline = score_correctness(initial_chain(n, ColorTag.QUANTUM_INITIAL), target)
    curve = [baseline] + [100.0 * ramp_factor(s) * p for s in range(1, N_QUANTUM_STEPS + 1)]
    return np.array(curve, dtype=np.float64)


# ═══════════════════════════════════════════════════════════════════════════
# Comparison between strategies
# ═══════════════════════════════════════════════════════════════════════════

def cohens_d(group1: np.ndarray, group2: np.ndarray) -> float:
    """
    Cohen's d with pooled standard deviation, d = (μ₁ − μ₂) / s_pooled.

    Groups with fewer than two samples give 0. When both groups are
    constant the effect is ±inf if their means differ and 0 otherwise.
    """
    a = np.asarray(group1, dtype=np.float64)
    b = np.asarray(group2, dtype=np.float64)
    if len(a) < 2 or len(b) < 2:
        return 0.0

    shift = float(a.mean() - b.mean())
    dof = len(a) + len(b) - 2
    pooled = math.sqrt((np.var(a, ddof=1) * (len(a) - 1) + np.var(b, ddof=1) * (len(b) - 1)) / dof)
    if pooled < 1e-15:
        return 0.0 if abs(shift) < 1e-12 else math.copysign(math.inf, shift)
    return shift / pooled


def _average_ranks(values: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """1-based ranks with ties sharing their mean rank, plus the tie group sizes."""
    order = np.argsort(values, kind="mergesort")
    ranks = np.empty(len(values), dtype=np.float64)
    ranks[order] = np.arange(1, len(values) + 1)
    _, group, counts = np.unique(values, return_inverse=True, return_counts=True)
    return np.bincount(group, weights=ranks)[group] / counts[group], counts


def wilcoxon_signed_rank(
    x: np.ndarray, y: np.ndarray
) -> Tuple[float, float]:
    """
    Wilcoxon signed-rank test for paired samples.

    Zero differences are dropped. The variance of W carries the usual tie
    correction, which matters here since scores move in steps of 100/n.

    Returns
    -------
    w : float
        min(W+, W-).
    p_value : float
        Two-tailed, normal approximation.
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    if x.shape != y.shape:
        raise InvalidInputError(f"Paired samples differ in shape: {x.shape} vs {y.shape}")
    diff = (x - y).ravel()
    diff = diff[diff != 0]
    n = len(diff)
    if n == 0:
        return 0.0, 1.0

    ranks, ties = _average_ranks(np.abs(diff))
    w = float(min(ranks[diff > 0].sum(), ranks[diff < 0].sum()))

    variance = n * (n + 1) * (2 * n + 1) / 24 - float(np.sum(ties ** 3 - ties)) / 48
    if variance <= 0:
        return w, 1.0
    z = (w - n * (n + 1) / 4) / math.sqrt(variance)
    return w, 1.0 + math.erf(-abs(z) / math.sqrt(2.0))  # 2·Φ(-|z|)


@dataclass(frozen=True)
class StrategyComparison:
    """Final-step quantum scores of a trend set against the classical final score."""
    classical_final: float
    quantum_mean: float
    effect_size: float
    wilcoxon_w: float
    p_value: float

    def to_dict(self) -> dict:
        # non-finite effect sizes (constant groups) export as null
        return {
            "classical_final": self.classical_final,
            "quantum_mean": self.quantum_mean,
            "effect_size": self.effect_size if math.isfinite(self.effect_size) else None,
            "wilcoxon_w": self.wilcoxon_w,
            "p_value": self.p_value,
        }


def compare_final_scores(quantum_final: np.ndarray, classical_final: float) -> StrategyComparison:
    """
    Compare one final quantum score per trial with the (deterministic)
    classical final score, which is paired against every trial.
    """
    quantum_final = np.asarray(quantum_final, dtype=np.float64)
    classical = np.full_like(quantum_final, classical_final)
    w, p_value = wilcoxon_signed_rank(quantum_final, classical)
    return StrategyComparison(
        classical_final=float(classical_final),
        quantum_mean=float(quantum_final.mean()),
        effect_size=cohens_d(quantum_final, classical),
        wilcoxon_w=w,
        p_value=p_value,
    )


# ═══════════════════════════════════════════════════════════════════════════
# Monte Carlo trend
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class TrendResult:
    """Per-step summary of many probabilistic runs."""
    n_units: int
    probability: float
    n_trials: int
    scores: np.ndarray      # (n_trials, n_steps + 1)
    mean: np.ndarray
    std: np.ndarray
    ci_lower: np.ndarray
    ci_upper: np.ndarray
    expected: np.ndarray
    comparison: StrategyComparison

    @property
    def steps(self) -> np.ndarray:
        return np.arange(self.scores.shape[1])

    def monotonic_violations(self, tolerance: float = 0.0) -> List[int]:
        """Steps whose mean score drops by more than `tolerance` below the previous step."""
        drops = np.diff(self.mean) < -tolerance
        return [int(s) + 1 for s in np.flatnonzero(drops)]


def correctness_trend(
    n: int,
    p: float,
    n_trials: int = 200,
    seed: Optional[int] = None,
    sampler: Optional[Sampler] = None,
    confidence: float = 0.95,
) -> TrendResult:
    """
    Repeat the probabilistic strategy `n_trials` times and summarise the
    correctness of every step.

    All trials share one generator seeded from `seed`, so the trials are
    independent draws but the whole experiment is reproducible. The final
    step of every trial is also compared with the classical run on the
    same target.
    """
    if n_trials < 1:
        raise InvalidInputError(f"n_trials must be >= 1, got {n_trials}")
    n = validate_chain_size(n)
    p = validate_probability(p)
    target = build_target(n)
    rng = make_rng(seed)

    scores = np.array([
        run_probabilistic_fold(n, target, p, rng=rng, sampler=sampler).scores
        for _ in range(n_trials)
    ], dtype=np.float64)

    lower, upper = [], []
    for s in range(scores.shape[1]):
        _, lo, hi = bootstrap_ci(scores[:, s], confidence=confidence, seed=None if seed is None else seed + s)
        lower.append(lo)
        upper.append(hi)

    comparison = compare_final_scores(scores[:, -1], run_deterministic_fold(n, target).final_score)

    trend = TrendResult(
        n_units=n,
        probability=p,
        n_trials=n_trials,
        scores=scores,
        mean=scores.mean(axis=0),
        std=scores.std(axis=0),
        ci_lower=np.array(lower),
        ci_upper=np.array(upper),
        expected=expected_correctness(n, p),
        comparison=comparison,
    )
    logger.info(
        "Trend over %d trials (n=%d, p=%.2f): final mean %.1f%% (expected %.1f%%), classical %.1f%%",
        n_trials, n, p, trend.mean[-1], trend.expected[-1], comparison.classical_final,
    )
    return trend


def summary_table(result) -> str:
    """
    Step-by-step table of a SimulationResult.

    The classical run is shorter; its rows are blank past the last step.
    """
    q, c = result.quantum, result.classical
    lines = []
    lines.append("=" * 52)
    lines.append(f"{'Step':>5} {'Quantum %':>12} {'Classical %':>14} {'On target':>12}")
    lines.append("-" * 52)

    for i in range(max(len(q), len(c))):
        q_str = f"{q.scores[i]:.2f}" if i < len(q) else ""
        c_str = f"{c.scores[i]:.2f}" if i < len(c) else ""
        n_ok = sum(1 for u in q.steps[i] if u.color == ColorTag.CORRECT) if i < len(q) else 0
        lines.append(f"{i:>5} {q_str:>12} {c_str:>14} {n_ok:>12}")

    lines.append("=" * 52)
    lines.append(
        f"n={result.config.n_units}  p={result.config.probability:.2f}  "
        f"final quantum {q.final_score:.2f}%  final classical {c.final_score:.2f}%"
    )
    return "\n".join(lines)
