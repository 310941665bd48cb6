"""Binned covariance matrices and their Cholesky factors.

Matrices are read once from a keyed source (`covmat_ptbinXX_etabinYY`), in
which momentum-related entries are expressed in MeV. At load time each
matrix is:
1. validated (5x5, finite, symmetric),
2. converted to GeV by scaling the `qoverp` row and column,
3. for the synthetic `pt_bin == -1`, inflated on the d0/z0 rows and columns,
4. multiplied by the global smearing multiple.

Bins without a source matrix are absent from the bank; the smearer falls
back to lower eta bins for them.
"""

from __future__ import annotations
__author__ = "Renato Quagliani <rquaglia@cern.ch>"


from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Mapping, Protocol

from .binning import BinTable, covariance_key
from .errors import CovarianceMatrixError, CovarianceSourceError, SmearingConfigError
from .logger import logger
from .matrix import as_matrix5x5, cholesky_lower, is_symmetric, scale, scale_similarity
from .models import D0, QOVERP, Z0, BinKey, Matrix5x5

MEV_PER_GEV = 1000.0
LOW_PT_INFLATION = 2.0


class CovarianceSource(Protocol):
    """Keyed store of 5x5 covariance matrices (MeV units)."""

    def get(self, key: str) -> Matrix5x5 | None:
        """Return the matrix stored under `key`, or `None` if absent."""


@dataclass(frozen=True)
class MappingCovarianceSource:
    """Covariance source backed by an in-memory mapping."""

    matrices: Mapping[str, Matrix5x5]

    def get(self, key: str) -> Matrix5x5 | None:
        return self.matrices.get(key)


@dataclass(frozen=True)
class JsonCovarianceSource(MappingCovarianceSource):
    """Covariance source read from a JSON document."""

    path: str = ""

    @classmethod
    def open(cls, path: str | Path) -> "JsonCovarianceSource":
        """Read every matrix of a JSON file, see `io.load_covariance_json`."""
        from .io import load_covariance_json

        return cls(matrices=load_covariance_json(path), path=str(path))


def convert_units_to_gev(matrix: Matrix5x5, mev_per_gev: float = MEV_PER_GEV) -> Matrix5x5:
    """Rescale the `qoverp` row and column from 1/MeV to 1/GeV."""
    factors = [1.0] * 5
    factors[QOVERP] = mev_per_gev
    return scale_similarity(matrix, factors)


def inflate_low_pt(matrix: Matrix5x5, factor: float = LOW_PT_INFLATION) -> Matrix5x5:
    """Inflate d0/z0 uncertainties for momenta below the lowest pt threshold.

    Applied as `H * M * H` with `H = diag(factor, factor, 1, 1, 1)`: d0/z0
    variances grow by `factor**2`, their correlations with other parameters
    by `factor`.
    """
    factors = [1.0] * 5
    for comp in (D0, Z0):
        factors[comp] = factor
    return scale_similarity(matrix, factors)


@dataclass(frozen=True)
class CovarianceBank:
    """Per-bin covariance matrices in GeV units, keyed by `(pt_bin, eta_bin)`."""

    matrices: Mapping[BinKey, Matrix5x5] = field(default_factory=dict)

    @classmethod
    def load(
        cls,
        source: CovarianceSource,
        bin_table: BinTable,
        smearing_multiple: float = 1.0,
        low_pt_inflation: float = LOW_PT_INFLATION,
        mev_per_gev: float = MEV_PER_GEV,
    ) -> "CovarianceBank":
        """Read every configured bin from `source`.

        Missing keys are expected and only logged. Malformed matrices raise
        `CovarianceMatrixError`.
        """
        if smearing_multiple < 0.0:
            raise CovarianceMatrixError(
                f"Smearing multiple must be non-negative, got {smearing_multiple}."
            )
        matrices: dict[BinKey, Matrix5x5] = {}
        for key in bin_table.bin_keys():
            name = covariance_key(key)
            raw = source.get(name)
            if raw is None:
                logger.info("no smearing defined for pt-eta %d %d", key[0], key[1])
                continue
            raw = as_matrix5x5(raw, context=f"Covariance matrix '{name}'")
            if not is_symmetric(raw):
                raise CovarianceMatrixError(f"Covariance matrix '{name}' is not symmetric.")
            cov = convert_units_to_gev(raw, mev_per_gev)
            if key[0] == -1:
                cov = inflate_low_pt(cov, low_pt_inflation)
            matrices[key] = scale(cov, smearing_multiple)
        logger.info(
            "Loaded %d covariance matrices for %d pt x %d eta bins",
            len(matrices),
            bin_table.n_pt_bins + 1,
            bin_table.n_eta_bins,
        )
        return cls(matrices=matrices)

    def get(self, key: BinKey) -> Matrix5x5 | None:
        return self.matrices.get(key)

    def __getitem__(self, key: BinKey) -> Matrix5x5:
        return self.matrices[key]

    def __contains__(self, key: object) -> bool:
        return key in self.matrices

    def __iter__(self) -> Iterator[BinKey]:
        return iter(self.matrices)

    def __len__(self) -> int:
        return len(self.matrices)


@dataclass(frozen=True)
class CholeskyCache:
    """Lower Cholesky factors of every matrix in a `CovarianceBank`."""

    factors: Mapping[BinKey, Matrix5x5] = field(default_factory=dict)

    @classmethod
    def from_bank(cls, bank: CovarianceBank) -> "CholeskyCache":
        """Factorize every bank matrix; a non-PSD matrix is fatal."""
        factors: dict[BinKey, Matrix5x5] = {}
        for key in bank:
            try:
                factors[key] = cholesky_lower(bank[key])
            except CovarianceMatrixError as exc:
                raise CovarianceMatrixError(
                    f"Cannot factorize covariance of bin {key} ({covariance_key(key)}): {exc}"
                ) from exc
        return cls(factors=factors)

    def factor(self, key: BinKey) -> Matrix5x5 | None:
        """Return the smearing factor of a bin, or `None` when undefined."""
        return self.factors.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self.factors

    def __len__(self) -> int:
        return len(self.factors)


def open_covariance_source(path: str | Path) -> JsonCovarianceSource:
    """Open the covariance file, wrapping any read failure as fatal."""
    try:
        return JsonCovarianceSource.open(path)
    except SmearingConfigError:
        raise
    except (OSError, ValueError) as exc:
        raise CovarianceSourceError(f"bad file: {path} ({exc})") from exc
