"""
chain_fold — quantum vs classical chain folding

Generates folding steps for a simplified chain with a probabilistic
("quantum") and a deterministic ("classical") strategy and scores every
step against a fixed helical target.
"""

from .algorithms.classical import run_deterministic_fold
from .algorithms.quantum import run_probabilistic_fold
from .core.chain import ChainSnapshot, ChainUnit, ColorTag, FoldingRun, Vec3
from .core.errors import ChainFoldError, InvalidInputError, LengthMismatchError
from .core.scoring import score_correctness
from .core.target import build_target
from .simulation import SimulationConfig, SimulationResult, SimulationRunner, run_simulation

__version__ = "1.0.0"
