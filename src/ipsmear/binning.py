"""Resolution binning in pt and |eta|.

A continuous `(pt, eta)` pair maps to a `(pt_bin, eta_bin)` key: the index of
the highest threshold strictly exceeded. `pt_bin == -1` denotes the synthetic
bin below the lowest pt threshold, which reuses the `pt_bin == 0` source
matrix with inflated impact-parameter uncertainties.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Sequence

from .errors import SmearingConfigError
from .models import BinKey

DEFAULT_PT_BINS: tuple[float, ...] = (10.0, 20.0, 50.0, 100.0, 200.0, 250.0, 500.0, 750.0)
DEFAULT_ETA_BINS: tuple[float, ...] = (0.0, 0.4, 0.8, 1.05, 1.5, 1.7, 2.0, 2.25, 2.7)


@dataclass(frozen=True)
class BinTable:
    """Ascending pt (GeV) and |eta| thresholds."""

    pt_bins: tuple[float, ...] = DEFAULT_PT_BINS
    eta_bins: tuple[float, ...] = DEFAULT_ETA_BINS

    def __post_init__(self) -> None:
        object.__setattr__(self, "pt_bins", _validate_thresholds(self.pt_bins, "pt"))
        object.__setattr__(self, "eta_bins", _validate_thresholds(self.eta_bins, "eta"))

    @property
    def n_pt_bins(self) -> int:
        return len(self.pt_bins)

    @property
    def n_eta_bins(self) -> int:
        return len(self.eta_bins)

    def pt_bin(self, pt: float) -> int:
        """Return the highest index with `pt_bins[i] < pt`, or -1."""
        return _highest_exceeded(self.pt_bins, pt)

    def eta_bin(self, eta: float) -> int:
        """Return the |eta| bin index, or -1 below the first threshold.

        The first bin includes its lower edge so that `|eta| == eta_bins[0]`
        (typically a track at exactly eta = 0) lands in bin 0.
        """
        abs_eta = abs(eta)
        if abs_eta == self.eta_bins[0]:
            return 0
        return _highest_exceeded(self.eta_bins, abs_eta)

    def bin_key(self, pt: float, eta: float) -> BinKey:
        return self.pt_bin(pt), self.eta_bin(eta)

    def bin_keys(self) -> Iterator[BinKey]:
        """Yield every configured key, starting from the synthetic `pt_bin == -1`."""
        for ipt in range(-1, self.n_pt_bins):
            for ieta in range(self.n_eta_bins):
                yield ipt, ieta


def covariance_key(key: BinKey) -> str:
    """Canonical source identifier of a bin, e.g. `covmat_ptbin00_etabin03`.

    The synthetic low-pt bin reads the `pt_bin == 0` matrix.
    """
    pt_bin, eta_bin = key
    return f"covmat_ptbin{max(pt_bin, 0):02d}_etabin{eta_bin:02d}"


def _highest_exceeded(thresholds: Sequence[float], value: float) -> int:
    index = -1
    for i, threshold in enumerate(thresholds):
        if value > threshold:
            index = i
    return index


def _validate_thresholds(values: Sequence[float], label: str) -> tuple[float, ...]:
    thresholds = tuple(float(v) for v in values)
    if not thresholds:
        raise SmearingConfigError(f"At least one {label} threshold is required.")
    for lo, hi in zip(thresholds, thresholds[1:]):
        if hi <= lo:
            raise SmearingConfigError(
                f"{label} thresholds must be strictly increasing, got {thresholds!r}."
            )
    return thresholds
