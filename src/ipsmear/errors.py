"""Exception hierarchy for the track-smearing engine.

Configuration problems (unreadable covariance source, malformed or
non-positive-semi-definite matrices, bin tables that cannot be resolved) are
fatal and derive from `SmearingConfigError`. A smeared track that violates a
physical postcondition raises `SmearedTrackError`.
"""

from __future__ import annotations


class SmearingConfigError(ValueError):
    """Fatal configuration error detected while building or running the engine."""


class CovarianceSourceError(SmearingConfigError):
    """The covariance-matrix source cannot be opened or parsed."""


class CovarianceMatrixError(SmearingConfigError):
    """A covariance matrix is malformed, asymmetric, or not positive semi-definite."""


class BinResolutionError(SmearingConfigError):
    """No covariance matrix is reachable for a (pt, eta) bin."""


class SmearedTrackError(RuntimeError):
    """A smeared track is physically inconsistent (e.g. negative pt)."""
