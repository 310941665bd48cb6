"""Standard-normal random streams used to draw smearing vectors."""

from __future__ import annotations

from random import Random
from typing import Protocol

from .models import Vector5


class NormalSampler(Protocol):
    """Anything able to provide five independent N(0, 1) draws."""

    def sample5(self) -> Vector5:
        """Return a vector of five independent standard-normal values."""


class GaussianSource:
    """Stateful N(0, 1) stream backed by `random.Random`.

    One instance is shared by every smearing call of a run. Workers running
    in parallel must each own an independent instance (e.g. seeded with
    distinct seeds).
    """

    def __init__(self, seed: int | None = None, rng: Random | None = None) -> None:
        if seed is not None and rng is not None:
            raise ValueError("Provide either seed or rng, not both.")
        self.rng = rng if rng is not None else Random(seed)

    def next_standard_normal(self) -> float:
        return self.rng.gauss(0.0, 1.0)

    def sample5(self) -> Vector5:
        return (
            self.next_standard_normal(),
            self.next_standard_normal(),
            self.next_standard_normal(),
            self.next_standard_normal(),
            self.next_standard_normal(),
        )
