"""Residualisation and least-squares fitting.

Two operations carry all of the numerical work:

1. **Residualisation** — remove the linear effect of the nuisance
   regressors Z from any N×· array V via the residual-forming matrix

       R = I_N − Z · pinv(Z)

   R is the orthogonal projector onto the complement of the column
   space of Z, so ``Z' R V = 0`` up to rounding.  The pseudo-inverse
   is computed by SVD (:func:`numpy.linalg.pinv`), which tolerates
   rank-deficient Z and makes the empty case (K = 0) fall out
   naturally as R = I.

2. **Least squares** — the full model ``[I X Z] · b = Y`` is solved
   with :func:`numpy.linalg.lstsq` (also SVD-based).  Only the first
   coefficient, the interaction effect, feeds into the plots; it
   scales the product-term mesh of continuous-by-continuous
   interactions.  Per-group slopes for the grouped scatter are
   no-intercept simple regressions on already residualised data.

Why residualise both axes?
~~~~~~~~~~~~~~~~~~~~~~~~~~
By the Frisch–Waugh–Lovell theorem the slope of R·Y on R·X equals the
coefficient of X in the regression of Y on [X Z].  Plotting the
residualised pair therefore shows the partial relationship the GLM
actually estimates, with the nuisance variables held fixed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
import statsmodels.api as sm
from sklearn.linear_model import LinearRegression

from ._exceptions import SingularDesignWarning, _warn

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------ #
# Residualizer
# ------------------------------------------------------------------ #


def residual_forming_matrix(Z: np.ndarray, n: int | None = None) -> np.ndarray:
    """Return ``R = I − Z · pinv(Z)`` for nuisance matrix *Z*.

    Args:
        Z: Nuisance regressors, shape ``(n, k)``.  ``k`` may be zero.
        n: Number of observations.  Only needed when *Z* carries no
            shape information (e.g. an empty ``(0, 0)`` array).

    Returns:
        Symmetric idempotent matrix of shape ``(n, n)``.
    """
    Z = np.asarray(Z, dtype=float)
    if n is None:
        n = Z.shape[0]
    if Z.ndim != 2 or Z.size == 0:
        return np.eye(n)
    return np.eye(n) - Z @ np.linalg.pinv(Z)


class Residualizer:
    """Apply the nuisance projection of a fixed *Z* to any array.

    The residual-forming matrix is built once in the constructor and
    reused for every call, so residualising the outcome and one or two
    regressors costs a single pseudo-inverse.

    Args:
        Z: Nuisance regressors, shape ``(n, k)``, ``k >= 0``.
        n: Number of observations (required when *Z* is ``(0, 0)``).
    """

    def __init__(self, Z: np.ndarray, n: int | None = None) -> None:
        Z = np.asarray(Z, dtype=float)
        self.n = Z.shape[0] if n is None else n
        self.n_nuisance = Z.shape[1] if Z.ndim == 2 and Z.size else 0
        self.R = residual_forming_matrix(Z, self.n)

    def __call__(self, V: np.ndarray) -> np.ndarray:
        """Return ``R · V`` with the same shape as *V* (1-D or 2-D)."""
        V = np.asarray(V, dtype=float)
        if self.n_nuisance == 0:
            return V.copy()
        return self.R @ V


def residualize(V: np.ndarray, Z: np.ndarray) -> np.ndarray:
    """Remove the linear effect of *Z* from *V*.

    Convenience wrapper around :class:`Residualizer` for one-off use.

    Args:
        V: Array to residualise, shape ``(n,)`` or ``(n, m)``.
        Z: Nuisance regressors, shape ``(n, k)``.

    Returns:
        ``R · V``; an unchanged copy of *V* when ``k == 0``.
    """
    V = np.asarray(V, dtype=float)
    return Residualizer(Z, n=V.shape[0])(V)


# ------------------------------------------------------------------ #
# ModelFitter
# ------------------------------------------------------------------ #


@dataclass(frozen=True)
class GLMFit:
    """Least-squares solution of ``[I X Z] · b = Y``."""

    coefficients: np.ndarray
    """Coefficients in design order: interaction, main effects, nuisance."""

    rank: int
    """Numerical rank of the stacked design."""

    n_columns: int
    """Number of columns of the stacked design."""

    has_interaction: bool
    """Whether the first coefficient belongs to an interaction term."""

    @property
    def interaction_coef(self) -> float | None:
        """Coefficient of the interaction term, or ``None`` if absent."""
        if not self.has_interaction:
            return None
        return float(self.coefficients[0])


def fit_glm(
    Y: np.ndarray,
    X: np.ndarray,
    Z: np.ndarray,
    I: np.ndarray | None = None,  # noqa: E741
) -> GLMFit:
    """Solve the full model ``[I X Z] · b = Y`` by least squares.

    Args:
        Y: Outcome, shape ``(n, 1)`` or ``(n,)``.
        X: Main effects, shape ``(n, j)``.
        Z: Nuisance regressors, shape ``(n, k)`` (``k`` may be 0).
        I: Interaction term, shape ``(n, 1)``, or ``None``.

    Returns:
        A :class:`GLMFit`.  When the design is rank-deficient a
        :class:`SingularDesignWarning` is emitted and the minimum-norm
        solution is returned.
    """
    y = np.asarray(Y, dtype=float).ravel()
    blocks = [] if I is None else [np.asarray(I, dtype=float).reshape(len(y), -1)]
    blocks.append(np.asarray(X, dtype=float).reshape(len(y), -1))
    Z = np.asarray(Z, dtype=float)
    if Z.size:
        blocks.append(Z)
    design = np.hstack(blocks)

    beta, _, rank, _ = np.linalg.lstsq(design, y, rcond=None)
    n_cols = design.shape[1]
    if rank < n_cols:
        _warn(
            f"Design matrix [I X Z] is rank-deficient (rank {rank} < "
            f"{n_cols} columns); using the minimum-norm solution.",
            SingularDesignWarning,
        )
    logger.debug("fit_glm: %d columns, rank %d", n_cols, rank)
    return GLMFit(
        coefficients=beta,
        rank=int(rank),
        n_columns=n_cols,
        has_interaction=I is not None,
    )


def fit_through_origin(x: np.ndarray, y: np.ndarray) -> float:
    """Slope of the no-intercept regression ``y ~ x``.

    Both inputs are expected to be residualised already, so the
    intercept has been absorbed into the nuisance projection.

    Returns:
        The slope, or ``nan`` when *x* is empty or identically zero.
    """
    x = np.asarray(x, dtype=float).ravel()
    y = np.asarray(y, dtype=float).ravel()
    if x.size == 0 or not np.any(x):
        return float("nan")
    model = LinearRegression(fit_intercept=False).fit(x.reshape(-1, 1), y)
    return float(model.coef_[0])


def _poly22_design(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    """Columns ``1, x, y, x², xy, y²`` of the quadratic surface."""
    x = np.asarray(x, dtype=float).ravel()
    y = np.asarray(y, dtype=float).ravel()
    return np.column_stack([np.ones_like(x), x, y, x**2, x * y, y**2])


def fit_poly22(x: np.ndarray, y: np.ndarray, z: np.ndarray):
    """Fit the quadratic surface ``z ~ 1 + x + y + x² + xy + y²``.

    Returns:
        The fitted statsmodels OLS results object.  Evaluate it on a
        grid with :func:`evaluate_poly22`.
    """
    design = _poly22_design(x, y)
    return sm.OLS(np.asarray(z, dtype=float).ravel(), design).fit()


def evaluate_poly22(results, xg: np.ndarray, yg: np.ndarray) -> np.ndarray:
    """Evaluate a fitted quadratic surface on grid arrays of equal shape."""
    design = _poly22_design(xg, yg)
    return np.asarray(results.predict(design)).reshape(np.shape(xg))


# ------------------------------------------------------------------ #
# Correlation helper
# ------------------------------------------------------------------ #


def abs_correlation(A: np.ndarray, B: np.ndarray) -> np.ndarray:
    """Absolute Pearson correlations between the columns of *A* and *B*.

    Args:
        A: Shape ``(n, p)``.
        B: Shape ``(n, q)``.

    Returns:
        ``(p, q)`` matrix of ``|corr(A[:, i], B[:, j])|``.  Pairs that
        involve a constant column are ``nan``.
    """
    A = np.asarray(A, dtype=float)
    B = np.asarray(B, dtype=float)
    if A.shape[1] == 0 or B.shape[1] == 0:
        return np.empty((A.shape[1], B.shape[1]))
    Ac = A - A.mean(axis=0)
    Bc = B - B.mean(axis=0)
    with np.errstate(invalid="ignore", divide="ignore"):
        Ac = Ac / np.linalg.norm(Ac, axis=0)
        Bc = Bc / np.linalg.norm(Bc, axis=0)
        return np.abs(Ac.T @ Bc)
