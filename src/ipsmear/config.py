"""Engine configuration read once at initialization."""

from __future__ import annotations

from dataclasses import dataclass

from .binning import DEFAULT_ETA_BINS, DEFAULT_PT_BINS, BinTable
from .covariance import LOW_PT_INFLATION, MEV_PER_GEV
from .errors import SmearingConfigError

DEFAULT_PARAM_FILE = "Parametrisation/IDParametrisierung.json"


@dataclass(frozen=True)
class SmearingConfig:
    """Settings of one smearing run.

    `smearing_multiple` scales every covariance matrix (global resolution
    knob). `input_array`/`output_array` name the upstream and downstream
    track collections.
    """

    param_file: str = DEFAULT_PARAM_FILE
    smearing_multiple: float = 1.0
    pt_bins: tuple[float, ...] = DEFAULT_PT_BINS
    eta_bins: tuple[float, ...] = DEFAULT_ETA_BINS
    low_pt_inflation: float = LOW_PT_INFLATION
    mev_per_gev: float = MEV_PER_GEV
    seed: int | None = None
    input_array: str = "TrackMerger/tracks"
    output_array: str = "tracks"

    def __post_init__(self) -> None:
        if self.smearing_multiple < 0.0:
            raise SmearingConfigError(
                f"smearing_multiple must be non-negative, got {self.smearing_multiple}."
            )
        if self.low_pt_inflation <= 0.0:
            raise SmearingConfigError(
                f"low_pt_inflation must be positive, got {self.low_pt_inflation}."
            )
        if self.mev_per_gev <= 0.0:
            raise SmearingConfigError(f"mev_per_gev must be positive, got {self.mev_per_gev}.")

    def bin_table(self) -> BinTable:
        return BinTable(pt_bins=tuple(self.pt_bins), eta_bins=tuple(self.eta_bins))
