"""High-level smearing engine for truth-matched tracks."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence

from .binning import BinTable
from .codec import decode_track_parameters, encode_track_parameters
from .config import SmearingConfig
from .covariance import CholeskyCache, CovarianceBank, open_covariance_source
from .errors import BinResolutionError
from .gaussian import GaussianSource, NormalSampler
from .logger import logger
from .matrix import mat_vec
from .models import (
    D0,
    BinKey,
    EventInput,
    InputTrack,
    SmearedEvent,
    SmearedTrack,
    TrackParameters,
)


@dataclass
class TrackSmearer:
    """Draw reconstructed tracks from binned detector-resolution covariances.

    `bank` and `factors` are read-only after construction. `sampler` and
    `bin_misses` are the only state mutated while smearing.
    """

    bank: CovarianceBank
    factors: CholeskyCache
    bin_table: BinTable = field(default_factory=BinTable)
    sampler: NormalSampler = field(default_factory=GaussianSource)
    bin_misses: int = 0

    @classmethod
    def from_config(cls, config: SmearingConfig) -> "TrackSmearer":
        """Open the covariance source and build a ready-to-use engine."""
        bin_table = config.bin_table()
        source = open_covariance_source(config.param_file)
        bank = CovarianceBank.load(
            source,
            bin_table,
            smearing_multiple=config.smearing_multiple,
            low_pt_inflation=config.low_pt_inflation,
            mev_per_gev=config.mev_per_gev,
        )
        factors = CholeskyCache.from_bank(bank)
        logger.info(
            "Track smearing initialized from %s (smearing multiple %g)",
            config.param_file,
            config.smearing_multiple,
        )
        return cls(
            bank=bank,
            factors=factors,
            bin_table=bin_table,
            sampler=GaussianSource(seed=config.seed),
        )

    def resolve_bin(self, pt_bin: int, eta_bin: int) -> BinKey:
        """Return the bin whose smearing factor is used for `(pt_bin, eta_bin)`.

        The requested bin is used when defined. Otherwise lower eta bins are
        tried in turn, counting one miss per step. Reaching `eta_bin == 0`
        without a defined matrix is fatal.
        """
        if eta_bin < 0:
            raise BinResolutionError(
                f"eta bin {eta_bin} is below the first eta threshold (pt bin {pt_bin})."
            )
        ieta = eta_bin
        while (pt_bin, ieta) not in self.factors:
            if ieta == 0:
                raise BinResolutionError(f"no eta bins for pt bin: {pt_bin}")
            self.bin_misses += 1
            ieta -= 1
        return pt_bin, ieta

    def smear_track(self, track: InputTrack, event_id: str | None = None) -> SmearedTrack:
        """Smear one track.

        Kinematics come from the truth particle to avoid smearing twice; the
        impact position `(xd, yd, zd)` comes from the track.
        """
        particle = track.particle
        truth = particle.momentum
        charge = particle.charge
        params = encode_track_parameters(truth, charge, track.xd, track.yd, track.zd)

        key = self.resolve_bin(*self.bin_table.bin_key(truth.pt, truth.eta))
        smearing_matrix = self.factors.factors[key]
        smearing = mat_vec(smearing_matrix, self.sampler.sample5())
        smeared = TrackParameters.from_vector(
            [p + s for p, s in zip(params, smearing, strict=True)]
        )

        decoded = decode_track_parameters(smeared, truth, charge)
        cov = self.bank[key]
        return SmearedTrack(
            track_id=track.track_id,
            parameters=smeared,
            covariance=cov,
            momentum=decoded.momentum,
            charge=charge,
            xd=decoded.xd,
            yd=decoded.yd,
            zd=decoded.zd,
            dxy=smeared.d0,
            sdxy=math.sqrt(abs(cov[D0][D0])),
            parent=track,
            event_id=event_id,
        )

    def smear_tracks(
        self,
        tracks: Sequence[InputTrack],
        event_id: str | None = None,
    ) -> list[SmearedTrack]:
        """Smear a track collection, preserving input order."""
        return [self.smear_track(track, event_id=event_id) for track in tracks]

    def smear_events(self, events: Sequence[EventInput]) -> list[SmearedEvent]:
        """Run `smear_tracks` on a list of events."""
        return [
            SmearedEvent(
                event_id=event.event_id,
                tracks=tuple(self.smear_tracks(event.tracks, event_id=event.event_id)),
            )
            for event in events
        ]

    def finish(self) -> int:
        """Report the number of bin fallbacks of the run and return it."""
        if self.bin_misses:
            logger.warning("PROBLEM: %d bin misses in track smearing", self.bin_misses)
        else:
            logger.debug("No bin misses in track smearing")
        return self.bin_misses
