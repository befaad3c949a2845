"""
main.py
Command-line driver: fold a chain with both strategies and report.

Usage:
  python -m chain_fold.main --n 10 --probability 0.7 --seed 42
  python -m chain_fold.main --probability 1.0 --trials 500 --plot
  python -m chain_fold.main --sampler qubit --outdir results
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from chain_fold.core.errors import InvalidInputError
from chain_fold.logging_config import setup_logging
from chain_fold.simulation import SimulationConfig, run_simulation


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Quantum vs classical chain folding",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # One seeded comparison
  python -m chain_fold.main --probability 0.7 --seed 42

  # Expected trend over 500 probabilistic runs, with figures
  python -m chain_fold.main --trials 500 --plot
        """,
    )
    parser.add_argument("--n", type=int, default=10, help="Number of chain units")
    parser.add_argument("--probability", type=float, default=1.0,
                        help="Success probability multiplier in [0.1, 1.0]")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--sampler", type=str, default="numpy", choices=["numpy", "qubit"])
    parser.add_argument("--trials", type=int, default=0,
                        help="Monte Carlo trials for the correctness trend (0 = skip)")
    parser.add_argument("--outdir", type=str, default="results")
    parser.add_argument("--plot", action="store_true", help="Write PNG figures to --outdir")
    parser.add_argument("--log-level", type=str, default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=getattr(logging, args.log_level))

    config = SimulationConfig(
        n_units=args.n,
        probability=args.probability,
        seed=args.seed,
        sampler=args.sampler,
    )
    try:
        result = run_simulation(config)
    except InvalidInputError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    from chain_fold.utils.statistics import correctness_trend, summary_table

    print(f"\nChain folding: n={result.config.n_units}, p={result.config.probability:.2f}, "
          f"sampler={result.config.sampler}")
    print(summary_table(result))

    os.makedirs(args.outdir, exist_ok=True)
    tag = f"p{result.config.probability:.2f}"
    output = result.to_dict()

    trend = None
    if args.trials > 0:
        trend = correctness_trend(
            result.config.n_units, result.config.probability,
            n_trials=args.trials, seed=args.seed,
        )
        print(f"\nMonte Carlo trend over {trend.n_trials} runs:")
        print(f"{'Step':>5} {'Mean %':>10} {'CI low':>10} {'CI high':>10} {'Expected':>10}")
        for s in trend.steps:
            print(f"{s:>5} {trend.mean[s]:>10.2f} {trend.ci_lower[s]:>10.2f} "
                  f"{trend.ci_upper[s]:>10.2f} {trend.expected[s]:>10.2f}")
        violations = trend.monotonic_violations(tolerance=1.0)
        if violations:
            print(f"  Warning: mean correctness dropped at steps {violations}")
        cmp = trend.comparison
        print(f"\nFinal step, quantum vs classical ({cmp.classical_final:.2f}%):")
        print(f"  Mean quantum:  {cmp.quantum_mean:.2f}%")
        print(f"  Cohen's d:     {cmp.effect_size:.3f}")
        print(f"  Wilcoxon:      W={cmp.wilcoxon_w:.1f}, p={cmp.p_value:.3g}")
        output["trend"] = {
            "comparison": cmp.to_dict(),
            "n_trials": trend.n_trials,
            "mean": trend.mean.tolist(),
            "ci_lower": trend.ci_lower.tolist(),
            "ci_upper": trend.ci_upper.tolist(),
            "expected": trend.expected.tolist(),
        }

    results_file = os.path.join(args.outdir, f"results_{tag}.json")
    with open(results_file, "w") as f:
        json.dump(output, f, indent=2)
    print(f"\nResults saved: {results_file}")

    if args.plot:
        from chain_fold.utils.plotting import plot_correctness, plot_snapshot, plot_trend

        files = [
            plot_correctness(result, os.path.join(args.outdir, f"correctness_{tag}.png")),
            plot_snapshot(result.quantum.steps[-1], title="Quantum: final step",
                          target=result.target,
                          filename=os.path.join(args.outdir, f"quantum_final_{tag}.png")),
            plot_snapshot(result.classical.steps[-1], title="Classical: final step",
                          target=result.target,
                          filename=os.path.join(args.outdir, f"classical_final_{tag}.png")),
            plot_snapshot(result.target, title="Target",
                          filename=os.path.join(args.outdir, "target.png")),
        ]
        if trend is not None:
            files.append(plot_trend(trend, os.path.join(args.outdir, f"trend_{tag}.png")))
        print(f"  Exported figures: {', '.join(files)}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
