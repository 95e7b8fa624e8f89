"""Error taxonomy for the statistical helpers."""

from __future__ import annotations


class AnalysisError(ValueError):
    """Base class for every failure raised by :mod:`energy.analysis`."""


class InvalidInputError(AnalysisError):
    """Structurally invalid input, e.g. series of different lengths."""


class DegenerateInputError(AnalysisError):
    """The result is mathematically undefined for the given input."""


class InsufficientDataError(DegenerateInputError):
    """Fewer samples than the algorithm needs."""
