"""Small dense-matrix helpers for 5x5 track covariances."""

from __future__ import annotations
__author__ = "Renato Quagliani <rquaglia@cern.ch>"


import math
from typing import Any, Sequence

from .errors import CovarianceMatrixError
from .models import Matrix5x5, Vector5

SYMMETRY_RTOL = 1e-9
PSD_RTOL = 1e-12


def as_matrix5x5(value: Any, context: str = "covariance") -> Matrix5x5:
    """Validate and convert a nested sequence into a finite 5x5 tuple."""
    if not isinstance(value, (list, tuple)) or len(value) != 5:
        raise CovarianceMatrixError(f"{context} must be a 5x5 matrix.")
    rows: list[Vector5] = []
    for row in value:
        if not isinstance(row, (list, tuple)) or len(row) != 5:
            raise CovarianceMatrixError(f"{context} must be a 5x5 matrix.")
        try:
            parsed = tuple(float(x) for x in row)
        except (TypeError, ValueError) as exc:
            raise CovarianceMatrixError(f"{context} contains non-numeric entries.") from exc
        if not all(math.isfinite(x) for x in parsed):
            raise CovarianceMatrixError(f"{context} contains non-finite entries.")
        rows.append(parsed)  # type: ignore[arg-type]
    return (rows[0], rows[1], rows[2], rows[3], rows[4])


def is_symmetric(mat: Matrix5x5, rtol: float = SYMMETRY_RTOL) -> bool:
    """Check `mat[i][j] == mat[j][i]` up to a tolerance relative to the diagonal."""
    for i in range(5):
        for j in range(i + 1, 5):
            scale = math.sqrt(abs(mat[i][i] * mat[j][j]))
            if abs(mat[i][j] - mat[j][i]) > rtol * max(scale, 1e-300):
                return False
    return True


def scale_similarity(mat: Matrix5x5, factors: Sequence[float]) -> Matrix5x5:
    """Return `D * mat * D` with `D = diag(factors)`.

    Entry `(i, j)` is multiplied by `factors[i] * factors[j]`, which keeps the
    matrix symmetric and positive semi-definite.
    """
    return tuple(
        tuple(mat[i][j] * factors[i] * factors[j] for j in range(5)) for i in range(5)
    )  # type: ignore[return-value]


def scale(mat: Matrix5x5, factor: float) -> Matrix5x5:
    """Multiply every entry by a scalar."""
    return tuple(tuple(x * factor for x in row) for row in mat)  # type: ignore[return-value]


def mat_vec(mat: Matrix5x5, vec: Sequence[float]) -> Vector5:
    """Matrix-vector product."""
    return tuple(sum(mat[i][j] * vec[j] for j in range(5)) for i in range(5))  # type: ignore[return-value]


def mat_mat_t(a: Matrix5x5) -> Matrix5x5:
    """Return `a * a^T`."""
    return tuple(
        tuple(sum(a[i][k] * a[j][k] for k in range(5)) for j in range(5)) for i in range(5)
    )  # type: ignore[return-value]


def cholesky_lower(mat: Matrix5x5, rtol: float = PSD_RTOL) -> Matrix5x5:
    """Lower Cholesky factor `L` with `L * L^T == mat`.

    Positive semi-definite input is accepted: a pivot that vanishes (relative
    to its own diagonal entry) yields a zero column, provided the rest of
    that column vanishes as well. Anything else raises
    `CovarianceMatrixError`.
    """
    if not is_symmetric(mat):
        raise CovarianceMatrixError("Matrix is not symmetric.")
    low = [[0.0] * 5 for _ in range(5)]
    for j in range(5):
        tol = rtol * abs(mat[j][j])
        pivot = mat[j][j] - sum(low[j][k] * low[j][k] for k in range(j))
        if pivot < -tol:
            raise CovarianceMatrixError(
                f"Matrix is not positive semi-definite (pivot {j} = {pivot:g})."
            )
        if pivot <= tol:
            # Zero pivot: the remaining column must be degenerate too.
            for i in range(j + 1, 5):
                residual = mat[i][j] - sum(low[i][k] * low[j][k] for k in range(j))
                if abs(residual) > math.sqrt(tol * abs(mat[i][i])):
                    raise CovarianceMatrixError(
                        f"Matrix is not positive semi-definite (singular pivot {j})."
                    )
            continue
        diag = math.sqrt(pivot)
        low[j][j] = diag
        for i in range(j + 1, 5):
            low[i][j] = (mat[i][j] - sum(low[i][k] * low[j][k] for k in range(j))) / diag
    return tuple(tuple(row) for row in low)  # type: ignore[return-value]


def max_abs_difference(a: Matrix5x5, b: Matrix5x5) -> float:
    """Largest absolute entry-wise difference between two matrices."""
    return max(abs(a[i][j] - b[i][j]) for i in range(5) for j in range(5))
