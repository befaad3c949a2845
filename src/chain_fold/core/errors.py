"""
errors.py
Exception types raised at the engine boundary.
"""

from __future__ import annotations


class ChainFoldError(Exception):
    """Base class for all chain_fold errors."""


class InvalidInputError(ChainFoldError, ValueError):
    """Chain size, probability or run shape is outside the accepted domain."""


class LengthMismatchError(InvalidInputError):
    """A candidate snapshot is not index-aligned with its target."""

    def __init__(self, expected: int, got: int):
        self.expected = expected
        self.got = got
        super().__init__(f"Expected a snapshot of {expected} units, got {got}")
