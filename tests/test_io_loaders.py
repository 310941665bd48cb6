"""Unit tests for JSON input loaders, table output, and the CLI."""

from __future__ import annotations
__author__ = "Renato Quagliani <rquaglia@cern.ch>"


import json
import tempfile
import unittest
from pathlib import Path

import pandas as pd

from ipsmear import CovarianceMatrixError, GaussianSource
from ipsmear.cli import main
from ipsmear.io import load_covariance_json, load_events_json, load_tracks_json, write_smeared_tracks_table
from ipsmear.models import COVARIANCE_NAMES

from test_smearer import _cov_mev, _make_smearer, _track


def _events_payload():
    """Two events: one track given by species name, one by explicit 4-vector."""
    return {
        "events": [
            {
                "event_id": "evt42",
                "tracks": [
                    {
                        "track_id": "t0",
                        "xd": 0.01,
                        "yd": -0.02,
                        "zd": 3.0,
                        "particle": {
                            "particle_id": "g0",
                            "pt": 12.0,
                            "eta": 0.5,
                            "phi": 1.0,
                            "charge": -1,
                            "pid": "kaon",
                        },
                    }
                ],
            },
            {
                "event_id": "evt43",
                "tracks": [
                    {
                        "track_id": "t1",
                        "particle": {
                            "particle_id": "g1",
                            "px": 3.0,
                            "py": 4.0,
                            "pz": 1.0,
                            "e": 6.0,
                            "charge": 1,
                        },
                        "momentum": {"pt": 5.1, "eta": 0.2, "phi": 0.9},
                    }
                ],
            },
        ]
    }


class TestIOLoaders(unittest.TestCase):
    """Validate parsing for event-batch and covariance JSON inputs."""

    def test_load_events_json_parses_event_payload(self) -> None:
        """Event loader should parse tracks with their truth particles."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "events.json"
            path.write_text(json.dumps(_events_payload()), encoding="utf-8")
            events = load_events_json(path)
        self.assertEqual([e.event_id for e in events], ["evt42", "evt43"])
        first = events[0].tracks[0]
        self.assertEqual(first.track_id, "t0")
        self.assertEqual(first.charge, -1)
        self.assertEqual(first.particle.pdg_id, 321)
        self.assertAlmostEqual(first.particle.momentum.mass, 0.493677, places=6)
        self.assertAlmostEqual(first.particle.momentum.pt, 12.0, places=9)
        self.assertEqual(first.momentum, first.particle.momentum)
        self.assertEqual((first.xd, first.yd, first.zd), (0.01, -0.02, 3.0))
        second = events[1].tracks[0]
        self.assertAlmostEqual(second.particle.momentum.pt, 5.0, places=12)
        self.assertAlmostEqual(second.momentum.pt, 5.1, places=12)
        self.assertAlmostEqual(second.momentum.mass, second.particle.momentum.mass, places=6)

    def test_single_event_tracks_document(self) -> None:
        """A top-level `tracks` list is read as one event."""
        payload = {"tracks": _events_payload()["events"][0]["tracks"]}
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "tracks.json"
            path.write_text(json.dumps(payload), encoding="utf-8")
            tracks = load_tracks_json(path)
            [event] = load_events_json(path)
        self.assertEqual([t.track_id for t in tracks], ["t0"])
        self.assertEqual(event.event_id, "evt0")

    def test_track_without_truth_particle_is_rejected(self) -> None:
        """Every track needs exactly one truth reference."""
        payload = {"tracks": [{"track_id": "t0", "xd": 0.0}]}
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "tracks.json"
            path.write_text(json.dumps(payload), encoding="utf-8")
            with self.assertRaises(ValueError):
                load_tracks_json(path)

    def test_particle_without_mass_is_rejected(self) -> None:
        """(pt, eta, phi) momenta need a mass or a species."""
        payload = {
            "tracks": [
                {"track_id": "t0", "particle": {"pt": 1.0, "eta": 0.0, "phi": 0.0, "charge": 1}}
            ]
        }
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "tracks.json"
            path.write_text(json.dumps(payload), encoding="utf-8")
            with self.assertRaises(ValueError):
                load_tracks_json(path)

    def test_covariance_json_rejects_bad_matrix(self) -> None:
        """Non-numeric covariance entries are a matrix error."""
        matrix = [list(row) for row in _cov_mev()]
        matrix[2][2] = "oops"
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "cov.json"
            path.write_text(json.dumps({"covmat_ptbin00_etabin00": matrix}), encoding="utf-8")
            with self.assertRaises(CovarianceMatrixError):
                load_covariance_json(path)


class TestOutput(unittest.TestCase):
    """Validate table export and the command line entry point."""

    def test_write_table_has_one_row_per_track(self) -> None:
        """CSV output keeps track order and all covariance columns."""
        smearer = _make_smearer({"covmat_ptbin00_etabin00": _cov_mev()}, GaussianSource(seed=5))
        tracks = smearer.smear_tracks([_track("a"), _track("b", pt=8.0)], event_id="evt0")
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "tracks.csv"
            write_smeared_tracks_table(path, tracks)
            df = pd.read_csv(path)
        self.assertEqual(list(df["track_id"]), ["a", "b"])
        for name in COVARIANCE_NAMES:
            self.assertIn(name, df.columns)
        self.assertAlmostEqual(df["cov_d0_d0"].iloc[0], tracks[0].covariance[0][0], places=15)
        self.assertAlmostEqual(df["truth_pt"].iloc[1], 8.0, places=9)

    def test_unsupported_output_suffix_raises(self) -> None:
        """Only parquet, csv, and pickle outputs are supported."""
        with tempfile.TemporaryDirectory() as tmpdir:
            with self.assertRaises(ValueError):
                write_smeared_tracks_table(Path(tmpdir) / "tracks.txt", [])

    def test_cli_smears_events_into_table(self) -> None:
        """The CLI reads events and matrices and writes a pickle table."""
        matrix = [list(row) for row in _cov_mev()]
        cov_payload = {
            "covariance_matrices": {
                "covmat_ptbin00_etabin00": matrix,
                "covmat_ptbin01_etabin00": matrix,
            }
        }
        with tempfile.TemporaryDirectory() as tmpdir:
            events_path = Path(tmpdir) / "events.json"
            cov_path = Path(tmpdir) / "cov.json"
            out_path = Path(tmpdir) / "smeared.pkl"
            events_path.write_text(json.dumps(_events_payload()), encoding="utf-8")
            cov_path.write_text(json.dumps(cov_payload), encoding="utf-8")
            with self.assertLogs("ipsmear", level="WARNING") as logs:
                code = main(
                    [
                        "--tracks",
                        str(events_path),
                        "--cov-matrices",
                        str(cov_path),
                        "--out",
                        str(out_path),
                        "--seed",
                        "1",
                        "--verbosity",
                        "warning",
                    ]
                )
            df = pd.read_pickle(out_path)
        self.assertEqual(code, 0)
        self.assertEqual(list(df["event_id"]), ["evt42", "evt43"])
        self.assertIn("1 bin misses", logs.output[0])


if __name__ == "__main__":
    unittest.main()
