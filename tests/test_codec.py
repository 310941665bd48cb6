"""Unit tests for the kinematics <-> track-parameter conversion."""

from __future__ import annotations

import math
import unittest

from ipsmear import LorentzVector, SmearedTrackError, TrackParameters
from ipsmear.codec import decode_track_parameters, encode_track_parameters


def _perigee_position(d0: float, phi: float, z0: float) -> tuple[float, float, float]:
    """Impact position perpendicular to the transverse momentum direction."""
    return d0 * math.sin(phi), -d0 * math.cos(phi), z0


class TestTrackParameterCodec(unittest.TestCase):
    """Validate encoding, decoding, and their postconditions."""

    def test_encode_matches_closed_form(self) -> None:
        """Encoded parameters follow the q/p, theta, and d0 definitions."""
        p4 = LorentzVector.from_pt_eta_phi_m(25.0, 1.2, -0.7, 0.13957039)
        params = encode_track_parameters(p4, -1, 0.02, 0.03, 4.0)
        self.assertAlmostEqual(params.qoverp, -1.0 / (25.0 * math.cosh(1.2)), places=12)
        self.assertAlmostEqual(params.theta, 2.0 * math.atan(math.exp(-1.2)), places=12)
        self.assertAlmostEqual(params.phi, -0.7, places=12)
        self.assertAlmostEqual(params.d0, (0.02 * p4.py - 0.03 * p4.px) / 25.0, places=12)
        self.assertEqual(params.z0, 4.0)

    def test_zero_smearing_round_trip(self) -> None:
        """Decoding unsmeared parameters recovers the truth kinematics."""
        cases = [
            (5.0, 0.2, 0.3, 1, 0.01, 1.0),
            (42.0, -1.9, 2.8, -1, -0.05, -12.0),
            (310.0, 2.6, -3.0, 1, 0.002, 0.5),
        ]
        mass = 0.493677
        for pt, eta, phi, charge, d0, z0 in cases:
            with self.subTest(pt=pt, eta=eta, phi=phi):
                truth = LorentzVector.from_pt_eta_phi_m(pt, eta, phi, mass)
                xd, yd, zd = _perigee_position(d0, phi, z0)
                params = encode_track_parameters(truth, charge, xd, yd, zd)
                decoded = decode_track_parameters(params, truth, charge)
                self.assertAlmostEqual(decoded.momentum.pt, pt, delta=1e-9 * pt)
                self.assertAlmostEqual(decoded.momentum.eta, eta, places=9)
                self.assertAlmostEqual(decoded.momentum.phi, phi, places=9)
                self.assertAlmostEqual(decoded.momentum.mass, mass, places=6)
                self.assertAlmostEqual(decoded.xd, xd, places=12)
                self.assertAlmostEqual(decoded.yd, yd, places=12)
                self.assertAlmostEqual(decoded.zd, zd, places=12)

    def test_impact_position_follows_phi_shift(self) -> None:
        """A smeared phi rotates the reconstructed impact position."""
        truth = LorentzVector.from_pt_eta_phi_m(30.0, 0.0, 0.0, 0.0)
        smeared = TrackParameters(d0=0.1, z0=2.0, phi=0.25, theta=math.pi / 2.0, qoverp=1.0 / 30.0)
        decoded = decode_track_parameters(smeared, truth, 1)
        self.assertAlmostEqual(decoded.xd, 0.1 * math.cos(0.25 - math.pi / 2.0), places=12)
        self.assertAlmostEqual(decoded.yd, 0.1 * math.sin(0.25 - math.pi / 2.0), places=12)
        self.assertAlmostEqual(decoded.momentum.pt, 30.0, places=9)
        self.assertAlmostEqual(decoded.momentum.eta, 0.0, places=12)

    def test_sign_flip_in_qoverp_is_flagged(self) -> None:
        """A smeared q/p of opposite sign to the charge is a postcondition failure."""
        truth = LorentzVector.from_pt_eta_phi_m(5.0, 0.2, 0.3, 0.13957039)
        smeared = TrackParameters(d0=0.0, z0=0.0, phi=0.3, theta=1.4, qoverp=-0.01)
        with self.assertRaises(SmearedTrackError):
            decode_track_parameters(smeared, truth, 1)

    def test_theta_outside_range_is_flagged(self) -> None:
        """Smeared theta must stay within (0, pi)."""
        truth = LorentzVector.from_pt_eta_phi_m(5.0, 0.2, 0.3, 0.13957039)
        smeared = TrackParameters(d0=0.0, z0=0.0, phi=0.3, theta=-0.01, qoverp=0.2)
        with self.assertRaises(SmearedTrackError):
            decode_track_parameters(smeared, truth, 1)

    def test_neutral_track_decodes_to_zero_pt(self) -> None:
        """Charge zero encodes q/p=0 and decodes to zero transverse momentum."""
        truth = LorentzVector.from_pt_eta_phi_m(5.0, 0.2, 0.3, 0.0)
        params = encode_track_parameters(truth, 0, 0.0, 0.0, 0.0)
        self.assertEqual(params.qoverp, 0.0)
        smeared = TrackParameters(params.d0, params.z0, params.phi, params.theta, 1e-3)
        decoded = decode_track_parameters(smeared, truth, 0)
        self.assertEqual(decoded.momentum.pt, 0.0)

    def test_zero_pt_cannot_be_encoded(self) -> None:
        """A particle along the beam axis has no perigee parametrization."""
        with self.assertRaises(ValueError):
            encode_track_parameters(LorentzVector(0.0, 0.0, 10.0, 10.0), 1, 0.0, 0.0, 0.0)


if __name__ == "__main__":
    unittest.main()
