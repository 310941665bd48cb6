"""Charged-particle species used to assign truth masses.

Input files may give a truth particle's mass directly, or through a species
name (`"pi"`, `"kaon"`, ...) or a PDG id.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ParticleSpecies:
    """Named charged species with its mass (GeV) and PDG id."""

    name: str
    mass: float
    pdg_id: int


_PION = ParticleSpecies(name="pi", mass=0.13957039, pdg_id=211)
_KAON = ParticleSpecies(name="K", mass=0.493677, pdg_id=321)
_PROTON = ParticleSpecies(name="p", mass=0.93827208816, pdg_id=2212)
_MUON = ParticleSpecies(name="mu", mass=0.1056583755, pdg_id=13)
_ELECTRON = ParticleSpecies(name="e", mass=0.00051099895, pdg_id=11)

_NAME_TO_SPECIES: dict[str, ParticleSpecies] = {
    "pi": _PION,
    "pion": _PION,
    "k": _KAON,
    "kaon": _KAON,
    "p": _PROTON,
    "proton": _PROTON,
    "mu": _MUON,
    "muon": _MUON,
    "e": _ELECTRON,
    "electron": _ELECTRON,
}

_PDG_TO_SPECIES: dict[int, ParticleSpecies] = {
    s.pdg_id: s for s in (_PION, _KAON, _PROTON, _MUON, _ELECTRON)
}


def species_from_name(name: str) -> ParticleSpecies:
    """Resolve a short particle name (e.g. `pi`, `kaon`) into a species."""
    key = name.strip().lower()
    try:
        return _NAME_TO_SPECIES[key]
    except KeyError as exc:
        supported = ", ".join(sorted(_NAME_TO_SPECIES))
        raise ValueError(
            f"Unknown particle name '{name}'. Supported names: {supported}"
        ) from exc


def species_from_pdg_id(pdg_id: int) -> ParticleSpecies:
    """Resolve a (signed) PDG id into a species."""
    try:
        return _PDG_TO_SPECIES[abs(int(pdg_id))]
    except KeyError as exc:
        supported = ", ".join(str(k) for k in sorted(_PDG_TO_SPECIES))
        raise ValueError(
            f"Unknown PDG id {pdg_id}. Supported ids: {supported}"
        ) from exc
