"""Input/output helpers for JSON inputs and tabular result export."""

from __future__ import annotations
__author__ = "Renato Quagliani <rquaglia@cern.ch>"


import json
from pathlib import Path
from typing import Any, Sequence

from .errors import CovarianceSourceError
from .matrix import as_matrix5x5
from .models import (
    COVARIANCE_NAMES,
    EventInput,
    InputTrack,
    LorentzVector,
    Matrix5x5,
    SmearedTrack,
    TruthParticle,
)
from .particles import species_from_name, species_from_pdg_id


def load_tracks_json(path: str | Path) -> list[InputTrack]:
    """Load a single-event track container JSON into `InputTrack` objects."""
    data = _load_json(path)
    tracks_data = data.get("tracks")
    if not isinstance(tracks_data, list):
        raise ValueError("Input JSON must contain a list under key 'tracks'.")
    return [
        _parse_track_item(item=item, idx=idx, context=f"{path}")
        for idx, item in enumerate(tracks_data)
    ]


def load_events_json(path: str | Path) -> list[EventInput]:
    """Load multi-event input JSON into `EventInput` objects.

    Expected shape:
    {
      "events": [
        {"event_id": "...", "tracks": [...]},
        ...
      ]
    }
    A single-event document with a top-level `tracks` list is also accepted
    and returned as one event.
    """
    data = _load_json(path)
    events_data = data.get("events")
    if events_data is None and isinstance(data.get("tracks"), list):
        events_data = [{"event_id": str(data.get("event_id", "evt0")), "tracks": data["tracks"]}]
    if not isinstance(events_data, list):
        raise ValueError("Events JSON must contain a list under key 'events'.")
    out: list[EventInput] = []
    for idx, event in enumerate(events_data):
        if not isinstance(event, dict):
            raise ValueError(f"Event entry at index {idx} must be an object.")
        event_id = str(event.get("event_id", f"evt{idx}"))
        tracks_data = event.get("tracks")
        if not isinstance(tracks_data, list):
            raise ValueError(f"Event '{event_id}' must contain a list under key 'tracks'.")
        tracks = tuple(
            _parse_track_item(item=track_item, idx=tidx, context=f"event '{event_id}'")
            for tidx, track_item in enumerate(tracks_data)
        )
        out.append(EventInput(event_id=event_id, tracks=tracks))
    return out


def load_covariance_json(path: str | Path) -> dict[str, Matrix5x5]:
    """Load keyed 5x5 covariance matrices (MeV units) from JSON.

    Matrices are read from the `covariance_matrices` object when present,
    otherwise from the top-level object itself:
    {"covariance_matrices": {"covmat_ptbin00_etabin00": [[...], ...], ...}}
    """
    try:
        data = _load_json(path)
    except FileNotFoundError as exc:
        raise CovarianceSourceError(f"bad file: {path}") from exc
    except (OSError, ValueError) as exc:
        raise CovarianceSourceError(f"bad file: {path} ({exc})") from exc
    matrices = data.get("covariance_matrices", data)
    if not isinstance(matrices, dict):
        raise CovarianceSourceError(
            f"Covariance JSON at {path} key 'covariance_matrices' must be an object."
        )
    return {
        str(key): as_matrix5x5(value, context=f"Covariance matrix '{key}' in {path}")
        for key, value in matrices.items()
    }


def write_smeared_tracks_table(path: str | Path, tracks: Sequence[SmearedTrack]) -> None:
    """Write smeared tracks into Parquet/CSV/Pickle table."""
    pd = _require_pandas()
    df = pd.DataFrame(_track_rows(tracks))
    out = Path(path)
    suffix = out.suffix.lower()
    if suffix == ".parquet":
        df.to_parquet(out, index=False)
    elif suffix in (".pkl", ".pickle"):
        df.to_pickle(out)
    elif suffix == ".csv":
        df.to_csv(out, index=False)
    else:
        raise ValueError(
            f"Unsupported output format '{suffix}'. Use .parquet, .csv, or .pkl"
        )


def _track_rows(tracks: Sequence[SmearedTrack]) -> list[dict[str, Any]]:
    """Flatten smeared tracks into DataFrame-ready row dictionaries."""
    rows: list[dict[str, Any]] = []
    for trk in tracks:
        truth = trk.particle.momentum
        row: dict[str, Any] = {
            "event_id": trk.event_id,
            "track_id": trk.track_id,
            "parent_track_id": trk.parent.track_id,
            "particle_id": trk.particle.particle_id,
            "pdg_id": trk.particle.pdg_id,
            "charge": trk.charge,
            "d0": trk.parameters.d0,
            "z0": trk.parameters.z0,
            "phi": trk.parameters.phi,
            "theta": trk.parameters.theta,
            "qoverp": trk.parameters.qoverp,
            "pt": trk.momentum.pt,
            "eta": trk.momentum.eta,
            "px": trk.momentum.px,
            "py": trk.momentum.py,
            "pz": trk.momentum.pz,
            "energy": trk.momentum.e,
            "xd": trk.xd,
            "yd": trk.yd,
            "zd": trk.zd,
            "dxy": trk.dxy,
            "sdxy": trk.sdxy,
            "truth_pt": truth.pt,
            "truth_eta": truth.eta,
            "truth_phi": truth.phi,
            "truth_mass": truth.mass,
            "truth_xd": trk.parent.xd,
            "truth_yd": trk.parent.yd,
            "truth_zd": trk.parent.zd,
        }
        for name, value in zip(COVARIANCE_NAMES, trk.cov15, strict=True):
            row[name] = value
        rows.append(row)
    return rows


def _require_pandas():
    """Import pandas lazily and provide a clear installation hint on failure."""
    try:
        import pandas as pd  # type: ignore
    except ModuleNotFoundError as exc:
        raise ModuleNotFoundError(
            "pandas is required to write output tables. Install pandas and pyarrow."
        ) from exc
    return pd


def _parse_track_item(item: Any, idx: int, context: str) -> InputTrack:
    """Parse one track dictionary into an `InputTrack`."""
    if not isinstance(item, dict):
        raise ValueError(f"Track entry at index {idx} in {context} must be an object.")
    if "track_id" not in item:
        raise ValueError(f"Track at index {idx} in {context} must define 'track_id'.")
    track_id = str(item["track_id"])
    particle_data = item.get("particle")
    if not isinstance(particle_data, dict):
        raise ValueError(
            f"Track '{track_id}' in {context} must reference its truth particle under 'particle'."
        )
    particle = _parse_particle_item(particle_data, context=f"track '{track_id}' in {context}")
    momentum_data = item.get("momentum")
    if momentum_data is None:
        momentum = particle.momentum
    else:
        momentum = _parse_momentum(momentum_data, mass=particle.momentum.mass, context=context)
    return InputTrack(
        track_id=track_id,
        momentum=momentum,
        charge=int(item.get("charge", particle.charge)),
        xd=float(item.get("xd", 0.0)),
        yd=float(item.get("yd", 0.0)),
        zd=float(item.get("zd", 0.0)),
        particle=particle,
    )


def _parse_particle_item(item: dict[str, Any], context: str) -> TruthParticle:
    """Parse one truth-particle dictionary into a `TruthParticle`."""
    if "charge" not in item:
        raise ValueError(f"Truth particle of {context} must define 'charge'.")
    pdg_id = item.get("pdg_id")
    if "mass" in item:
        mass = float(item["mass"])
    elif "pid" in item:
        species = species_from_name(str(item["pid"]))
        mass = species.mass
        pdg_id = species.pdg_id if pdg_id is None else pdg_id
    elif pdg_id is not None:
        mass = species_from_pdg_id(int(pdg_id)).mass
    else:
        mass = None
    return TruthParticle(
        particle_id=str(item.get("particle_id", "")),
        momentum=_parse_momentum(item, mass=mass, context=context),
        charge=int(item["charge"]),
        pdg_id=None if pdg_id is None else int(pdg_id),
    )


def _parse_momentum(value: Any, mass: float | None, context: str) -> LorentzVector:
    """Parse `{px, py, pz, e}` or `{pt, eta, phi}` into a `LorentzVector`."""
    if not isinstance(value, dict):
        raise ValueError(f"Momentum of {context} must be an object.")
    if all(k in value for k in ("px", "py", "pz", "e")):
        return LorentzVector(
            px=float(value["px"]),
            py=float(value["py"]),
            pz=float(value["pz"]),
            e=float(value["e"]),
        )
    if all(k in value for k in ("pt", "eta", "phi")):
        m = float(value["mass"]) if "mass" in value else mass
        if m is None:
            raise ValueError(
                f"Momentum of {context} needs 'mass', 'pid', or 'pdg_id' with (pt, eta, phi)."
            )
        return LorentzVector.from_pt_eta_phi_m(
            float(value["pt"]), float(value["eta"]), float(value["phi"]), m
        )
    raise ValueError(f"Momentum of {context} must define (px, py, pz, e) or (pt, eta, phi).")


def _load_json(path: str | Path) -> dict[str, Any]:
    """Read and validate a JSON object document from disk."""
    raw = Path(path).read_text(encoding="utf-8")
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError(f"JSON document at {path} must be an object.")
    return data
