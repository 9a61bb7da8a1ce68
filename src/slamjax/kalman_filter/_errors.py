"""Exceptions raised when a filter invariant is violated.

Every error here signals a numerically ill-posed input (a malformed noise
model, a degenerate transition or observation function) rather than an
ordinary runtime condition.  They are raised before the filter replaces its
belief, so the belief of a filter whose step failed is the one it held
before the call.
"""

from __future__ import annotations


class FilterError(RuntimeError):
    """Base class for violated filter invariants."""


class SymmetryViolationError(FilterError):
    """A covariance matrix failed the symmetry check."""


class NegativeDefinitenessError(FilterError):
    """A covariance matrix has an eigenvalue below the PSD tolerance."""


class NonZeroMeanNoiseError(FilterError):
    """Measurement noise passed to ``observe`` does not have zero mean."""


class MeanSolverDivergenceError(FilterError):
    """The manifold mean solver exceeded its iteration cap or step-size floor."""


class SingularInnovationError(FilterError):
    """The innovation covariance is not invertible."""
