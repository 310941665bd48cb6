"""Conversion between collider kinematics and perigee track parameters.

Encoding reads pt, eta, phi, px and py from the truth momentum rather than
from an already-smeared upstream track. Neither phi nor the transverse
momentum components are extrapolated to perigee, which would add a small
magnetic-field deflection; downstream consumers are calibrated against this
approximation.
"""

from __future__ import annotations
__author__ = "Renato Quagliani <rquaglia@cern.ch>"


import math
from dataclasses import dataclass

from .errors import SmearedTrackError
from .models import LorentzVector, TrackParameters


@dataclass(frozen=True)
class DecodedTrack:
    """Physical quantities recovered from smeared track parameters."""

    momentum: LorentzVector
    xd: float
    yd: float
    zd: float


def encode_track_parameters(
    momentum: LorentzVector,
    charge: int,
    xd: float,
    yd: float,
    zd: float,
) -> TrackParameters:
    """Build `(d0, z0, phi, theta, qoverp)` from truth kinematics.

    - `qoverp = charge / (pt * cosh(eta))`
    - `theta = 2 * atan(exp(-eta))`
    - `d0 = (xd * py - yd * px) / pt`, `z0 = zd`
    """
    pt = momentum.pt
    if pt <= 0.0:
        raise ValueError("Cannot encode track parameters for a particle with zero pt.")
    eta = momentum.eta
    qoverp = charge / (pt * math.cosh(eta))
    theta = 2.0 * math.atan(math.exp(-eta))
    d0 = (xd * momentum.py - yd * momentum.px) / pt
    return TrackParameters(d0=d0, z0=zd, phi=momentum.phi, theta=theta, qoverp=qoverp)


def decode_track_parameters(
    smeared: TrackParameters,
    truth_momentum: LorentzVector,
    charge: int,
) -> DecodedTrack:
    """Recover momentum and impact position from smeared parameters.

    The pt conversion uses the truth eta; the reconstructed eta comes from
    the smeared theta. The invariant mass is taken from the truth momentum.
    The impact position is rotated by the smeared phi shift so that it stays
    consistent with the smeared d0.

    Raises `SmearedTrackError` when the smeared parameters do not describe a
    physical track (negative pt, theta outside `(0, pi)`).
    """
    truth_eta = truth_momentum.eta
    truth_phi = truth_momentum.phi
    if charge == 0:
        pt = 0.0
    elif smeared.qoverp == 0.0:
        raise SmearedTrackError("Smeared q/p is zero for a charged track.")
    else:
        pt = charge / (smeared.qoverp * math.cosh(truth_eta))
    if pt < 0.0:
        raise SmearedTrackError(
            f"Smeared pt is negative ({pt:g} GeV): q/p changed sign "
            f"(charge={charge}, smeared q/p={smeared.qoverp:g})."
        )
    if not 0.0 < smeared.theta < math.pi:
        raise SmearedTrackError(f"Smeared theta {smeared.theta:g} is outside (0, pi).")
    eta = -math.log(math.tan(smeared.theta / 2.0))
    momentum = LorentzVector.from_pt_eta_phi_m(pt, eta, smeared.phi, truth_momentum.mass)

    phi_d0 = truth_phi - math.pi / 2.0
    phi_d0_reco = phi_d0 + (smeared.phi - truth_phi)
    return DecodedTrack(
        momentum=momentum,
        xd=smeared.d0 * math.cos(phi_d0_reco),
        yd=smeared.d0 * math.sin(phi_d0_reco),
        zd=smeared.z0,
    )
