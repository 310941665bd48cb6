"""Command-line interface for smearing truth-matched tracks."""

from __future__ import annotations

import argparse
from pathlib import Path

from .binning import DEFAULT_ETA_BINS, DEFAULT_PT_BINS
from .config import DEFAULT_PARAM_FILE, SmearingConfig
from .io import load_events_json, write_smeared_tracks_table
from .logger import logger
from .smearer import TrackSmearer


def build_parser() -> argparse.ArgumentParser:
    """Define and return the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="track-smear",
        description="Smear truth-matched tracks with binned (pt, eta) resolution covariances.",
    )
    parser.add_argument(
        "--tracks",
        required=True,
        help="Input JSON with key 'events' (or a single-event 'tracks' list).",
    )
    parser.add_argument(
        "--cov-matrices",
        default=DEFAULT_PARAM_FILE,
        help="JSON file with covmat_ptbinXX_etabinYY 5x5 matrices (MeV units).",
    )
    parser.add_argument(
        "--out",
        required=True,
        help="Output table file for smeared tracks (.parquet, .csv, .pkl).",
    )
    parser.add_argument(
        "--smearing-multiple",
        type=float,
        default=1.0,
        help="Scale factor applied to every covariance matrix.",
    )
    parser.add_argument(
        "--pt-bins",
        type=str,
        default=None,
        help="Comma-separated ascending pt thresholds in GeV.",
    )
    parser.add_argument(
        "--eta-bins",
        type=str,
        default=None,
        help="Comma-separated ascending |eta| thresholds.",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed for the smearing stream.")
    parser.add_argument(
        "--verbosity",
        default="info",
        choices=["debug", "info", "warning", "error"],
        help="Logging level.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint: load inputs, smear tracks, write table, report bin misses."""
    args = build_parser().parse_args(argv)
    logger.setLevel(args.verbosity.upper())
    config = SmearingConfig(
        param_file=args.cov_matrices,
        smearing_multiple=args.smearing_multiple,
        pt_bins=DEFAULT_PT_BINS if args.pt_bins is None else _parse_thresholds(args.pt_bins),
        eta_bins=DEFAULT_ETA_BINS if args.eta_bins is None else _parse_thresholds(args.eta_bins),
        seed=args.seed,
    )
    smearer = TrackSmearer.from_config(config)
    events = load_events_json(args.tracks)
    smeared_events = smearer.smear_events(events)
    tracks = [trk for event in smeared_events for trk in event.tracks]
    write_smeared_tracks_table(args.out, tracks)
    logger.info("Wrote %d smeared tracks from %d events to %s", len(tracks), len(events), Path(args.out))
    smearer.finish()
    return 0


def _parse_thresholds(value: str) -> tuple[float, ...]:
    """Parse a comma-separated threshold list."""
    return tuple(float(x) for x in value.split(",") if x.strip())


if __name__ == "__main__":
    raise SystemExit(main())
