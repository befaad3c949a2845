"""Chain model, target construction and correctness scoring."""

from .chain import (
    ChainSnapshot,
    ChainUnit,
    ColorTag,
    FoldingRun,
    Vec3,
    initial_chain,
    snapshot_coordinates,
    validate_chain_size,
)
from .errors import ChainFoldError, InvalidInputError, LengthMismatchError
from .scoring import CORRECTNESS_THRESHOLD, score_correctness
from .target import build_target
