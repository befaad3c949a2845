"""
plotting.py
Static report figures for folding runs.

All plots use Matplotlib with the non-interactive Agg backend and are saved
to disk (PNG, 300 DPI). Nothing here animates; the step-by-step display of a
run belongs to whatever front end consumes SimulationResult.

Provides:
  • 3D snapshot plots (units coloured by tag, spline-smoothed trace)
  • Correctness-vs-step comparison of both strategies
  • Monte Carlo trend plot with confidence band
"""

from __future__ import annotations

import os
from typing import Optional, Tuple

import matplotlib
matplotlib.use("Agg")  # non-interactive backend
import matplotlib.pyplot as plt
from mpl_toolkits.mplot3d import Axes3D  # noqa: F401  (registers the 3d projection)
import numpy as np
from scipy.interpolate import splev, splprep

from ..core.chain import ChainSnapshot, snapshot_coordinates


# ─── Global style ─────────────────────────────────────────────────────────
plt.rcParams.update({
    "font.family": "serif",
    "font.size": 11,
    "axes.labelsize": 12,
    "axes.titlesize": 13,
    "legend.fontsize": 10,
    "figure.dpi": 150,
    "savefig.dpi": 300,
    "savefig.bbox": "tight",
    "axes.grid": True,
    "grid.alpha": 0.3,
})

_TRACE_COLOR = "#616161"
_QUANTUM_COLOR = "#2E7D32"
_CLASSICAL_COLOR = "#EF6C00"
_EXPECTED_COLOR = "#1976D2"


def _save(fig, filename: str) -> str:
    directory = os.path.dirname(filename)
    if directory:
        os.makedirs(directory, exist_ok=True)
    fig.savefig(filename)
    plt.close(fig)
    return filename


def smooth_trace(coords: np.ndarray, samples_per_unit: int = 10) -> np.ndarray:
    """
    Cubic B-spline through the chain, shape (len(coords) * samples_per_unit, 3).
    Chains too short for a cubic spline are returned unchanged.
    """
    if len(coords) <= 3:
        return coords
    try:
        tck, _ = splprep([coords[:, 0], coords[:, 1], coords[:, 2]], s=0, k=3)
    except ValueError:
        # coincident consecutive units
        return coords
    u = np.linspace(0, 1, len(coords) * samples_per_unit)
    return np.array(splev(u, tck)).T


def plot_snapshot(
    snapshot: ChainSnapshot,
    title: str = "Chain snapshot",
    filename: Optional[str] = None,
    target: Optional[ChainSnapshot] = None,
    smooth: bool = True,
    figsize: Tuple[float, float] = (7, 6),
):
    """
    3D plot of a snapshot's target positions.

    Parameters
    ----------
    snapshot : ChainSnapshot
        Units to draw, each in its tag colour.
    title : str
    filename : str, optional
        Save to this path and return it; otherwise return the figure.
    target : ChainSnapshot, optional
        Drawn faded underneath for reference.
    smooth : bool
        Draw a spline-smoothed backbone instead of straight segments.
    """
    coords = snapshot_coordinates(snapshot)
    fig = plt.figure(figsize=figsize)
    ax = fig.add_subplot(111, projection="3d")

    if target is not None:
        t = snapshot_coordinates(target)
        ax.plot(t[:, 0], t[:, 1], t[:, 2], color="gray", alpha=0.3, linewidth=1.5)
        ax.scatter(t[:, 0], t[:, 1], t[:, 2], c="gray", s=40, alpha=0.25)

    trace = smooth_trace(coords) if smooth else coords
    ax.plot(trace[:, 0], trace[:, 1], trace[:, 2], color=_TRACE_COLOR, linewidth=2, alpha=0.7)
    ax.scatter(
        coords[:, 0], coords[:, 1], coords[:, 2],
        c=[unit.color.value for unit in snapshot], s=90,
        edgecolors="k", linewidth=0.6, depthshade=True,
    )

    ax.set_title(title)
    ax.set_xlabel("X")
    ax.set_ylabel("Y")
    ax.set_zlabel("Z")

    if filename:
        return _save(fig, filename)
    return fig


def plot_correctness(
    result,
    filename: Optional[str] = None,
    figsize: Tuple[float, float] = (7, 4.5),
):
    """Correctness per step for the quantum and classical runs of a SimulationResult."""
    fig, ax = plt.subplots(figsize=figsize)
    q, c = result.quantum, result.classical

    ax.plot(np.arange(len(q)), q.scores, "o-", color=_QUANTUM_COLOR,
            label=f"Quantum (p={result.config.probability:.1f})")
    ax.plot(np.arange(len(c)), c.scores, "s--", color=_CLASSICAL_COLOR, label="Classical")

    ax.set_xlabel("Step")
    ax.set_ylabel("Correctness (%)")
    ax.set_ylim(-5, 105)
    ax.set_title(f"Folding correctness (n={result.config.n_units})")
    ax.legend()

    if filename:
        return _save(fig, filename)
    return fig


def plot_trend(
    trend,
    filename: Optional[str] = None,
    figsize: Tuple[float, float] = (7, 4.5),
):
    """Monte Carlo mean correctness with its confidence band and the analytic expectation."""
    fig, ax = plt.subplots(figsize=figsize)
    steps = trend.steps

    ax.fill_between(steps, trend.ci_lower, trend.ci_upper, color=_QUANTUM_COLOR, alpha=0.2,
                    label="Bootstrap CI")
    ax.plot(steps, trend.mean, "o-", color=_QUANTUM_COLOR, label=f"Mean of {trend.n_trials} runs")
    ax.plot(steps, trend.expected, ":", color=_EXPECTED_COLOR, linewidth=2, label="Expected")

    ax.set_xlabel("Step")
    ax.set_ylabel("Correctness (%)")
    ax.set_ylim(-5, 105)
    ax.set_title(f"Correctness trend (n={trend.n_units}, p={trend.probability:.1f})")
    ax.legend(loc="upper left")

    if filename:
        return _save(fig, filename)
    return fig
