"""Core data models used by the track-smearing engine.

This module defines:
- immutable kinematic objects (`LorentzVector`, `TrackParameters`)
- the lineage chain (`TruthParticle` -> `InputTrack` -> `SmearedTrack`)
- event containers (`EventInput`, `SmearedEvent`)
- matrix/vector aliases and the canonical covariance flattening order.
"""

from __future__ import annotations
__author__ = "Renato Quagliani <rquaglia@cern.ch>"


import math
from dataclasses import dataclass
from typing import Iterator, Sequence

Vector5 = tuple[float, float, float, float, float]
Matrix5x5 = tuple[Vector5, Vector5, Vector5, Vector5, Vector5]
BinKey = tuple[int, int]

D0, Z0, PHI, THETA, QOVERP = range(5)
PARAMETER_NAMES = ("d0", "z0", "phi", "theta", "qoverp")

# Order in which the 15 independent covariance entries are exported.
COVARIANCE_INDICES: tuple[tuple[int, int], ...] = (
    (D0, D0),
    (Z0, Z0),
    (Z0, D0),
    (PHI, PHI),
    (PHI, D0),
    (PHI, Z0),
    (THETA, THETA),
    (THETA, D0),
    (THETA, Z0),
    (THETA, PHI),
    (QOVERP, QOVERP),
    (QOVERP, D0),
    (QOVERP, Z0),
    (QOVERP, PHI),
    (QOVERP, THETA),
)
COVARIANCE_NAMES: tuple[str, ...] = tuple(
    f"cov_{PARAMETER_NAMES[i]}_{PARAMETER_NAMES[j]}" for i, j in COVARIANCE_INDICES
)


@dataclass(frozen=True)
class LorentzVector:
    """Simple 4-vector with collider kinematics properties."""

    px: float
    py: float
    pz: float
    e: float

    @classmethod
    def from_pt_eta_phi_m(cls, pt: float, eta: float, phi: float, mass: float) -> "LorentzVector":
        """Build a 4-vector from `(pt, eta, phi, m)`."""
        px = pt * math.cos(phi)
        py = pt * math.sin(phi)
        pz = pt * math.sinh(eta)
        energy = math.sqrt(px * px + py * py + pz * pz + mass * mass)
        return cls(px=px, py=py, pz=pz, e=energy)

    @property
    def pt(self) -> float:
        """Transverse momentum."""
        return math.hypot(self.px, self.py)

    @property
    def p2(self) -> float:
        """Squared 3-momentum magnitude."""
        return self.px * self.px + self.py * self.py + self.pz * self.pz

    @property
    def p(self) -> float:
        return math.sqrt(self.p2)

    @property
    def eta(self) -> float:
        """Pseudorapidity, saturated at +-1e9 along the beam axis."""
        pt = self.pt
        if pt == 0.0:
            return 1e9 if self.pz >= 0 else -1e9
        return math.asinh(self.pz / pt)

    @property
    def phi(self) -> float:
        return math.atan2(self.py, self.px)

    @property
    def mass2(self) -> float:
        """Invariant mass squared."""
        return self.e * self.e - self.p2

    @property
    def mass(self) -> float:
        """Invariant mass with signed handling for small negative mass2 values."""
        m2 = self.mass2
        return m2**0.5 if m2 >= 0.0 else -((-m2) ** 0.5)


@dataclass(frozen=True)
class TrackParameters:
    """Perigee track parameters `(d0, z0, phi, theta, qoverp)`.

    Momentum-dependent quantities are expressed in GeV, so `qoverp` is in
    1/GeV. The covariance matrices of the smearing engine use the same order.
    """

    d0: float
    z0: float
    phi: float
    theta: float
    qoverp: float

    @classmethod
    def from_vector(cls, values: Sequence[float]) -> "TrackParameters":
        """Build parameters from a length-5 sequence in canonical order."""
        if len(values) != 5:
            raise ValueError(f"Track parameter vector must have 5 entries, got {len(values)}.")
        return cls(*(float(v) for v in values))

    def as_tuple(self) -> Vector5:
        return (self.d0, self.z0, self.phi, self.theta, self.qoverp)

    def __iter__(self) -> Iterator[float]:
        return iter(self.as_tuple())


@dataclass(frozen=True)
class TruthParticle:
    """Generated particle at the root of a track lineage chain."""

    particle_id: str
    momentum: LorentzVector
    charge: int
    pdg_id: int | None = None


@dataclass(frozen=True)
class InputTrack:
    """Unsmeared track candidate with exactly one truth-particle reference.

    `(xd, yd, zd)` is the impact position taken at perigee by the upstream
    stage. `momentum` may already carry upstream smearing and is only kept
    for provenance: the smearing engine reads kinematics from `particle`.
    """

    track_id: str
    momentum: LorentzVector
    charge: int
    xd: float
    yd: float
    zd: float
    particle: TruthParticle


@dataclass(frozen=True)
class SmearedTrack:
    """Smeared track with its reported covariance and lineage.

    The lineage is `SmearedTrack -> InputTrack (parent) -> TruthParticle`.
    """

    track_id: str
    parameters: TrackParameters
    covariance: Matrix5x5
    momentum: LorentzVector
    charge: int
    xd: float
    yd: float
    zd: float
    dxy: float
    sdxy: float
    parent: InputTrack
    event_id: str | None = None

    @property
    def particle(self) -> TruthParticle:
        """Truth particle the parent track was built from."""
        return self.parent.particle

    @property
    def ancestry(self) -> tuple[InputTrack, TruthParticle]:
        """Two-level ancestry chain: original track, then truth particle."""
        return self.parent, self.parent.particle

    @property
    def cov15(self) -> tuple[float, ...]:
        """Independent covariance entries in `COVARIANCE_INDICES` order."""
        return tuple(self.covariance[i][j] for i, j in COVARIANCE_INDICES)


@dataclass(frozen=True)
class EventInput:
    """One event payload with its own track list."""

    event_id: str
    tracks: tuple[InputTrack, ...]


@dataclass(frozen=True)
class SmearedEvent:
    """Smeared tracks of one event, in input order."""

    event_id: str
    tracks: tuple[SmearedTrack, ...]
