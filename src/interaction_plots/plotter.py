"""Interaction plot orchestration.

:class:`InteractionPlotter` runs the pipeline that turns raw model
inputs into plot-ready coordinates:

    validate → fit [I X Z] → residualise → select variant → build data

and, for 3-way interactions, recurses into the same pipeline once per
level of a two-level main effect (see :mod:`interaction_plots.decompose`).

Inputs
~~~~~~
* ``Y`` — outcome, one column.
* ``X`` — main effects, 1 to 3 columns.  At most two of them may be
  continuous; with three columns one must have exactly two levels.
* ``I`` — the interaction term, one column.  Leave it ``None``, empty
  or all-NaN when the plot is not of an interaction.
* ``Z`` — nuisance regressors.  Z must not contain the interaction
  being plotted, otherwise its effect is projected out of the outcome.

Surfaces drawn for two continuous main effects are visual aids, not
the fitted GLM effect: the product-term mesh ``x · y · b₁ · factor``
ignores the main-effect coefficients, and the ``"poly22"`` surface is
a separate quadratic fit to the residualised points.
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np
from scipy import stats

from ._compat import MatrixLike, _as_2d_float
from ._config import render_by_default
from ._exceptions import EmptyCellWarning, ShapeError, _warn
from ._results import (
    CellMeansData,
    GroupedScatterData,
    InteractionPlotResult,
    ScatterData,
    SurfaceData,
)
from .decompose import decompose_three_way
from .dispatch import PlotVariant, classify_columns, select_variant
from .labels import PlotLabels, _ensure_labels
from .linalg import (
    GLMFit,
    Residualizer,
    evaluate_poly22,
    fit_glm,
    fit_poly22,
    fit_through_origin,
)
from .options import MeshScale, SurfaceOption, _resolve_surface_option

logger = logging.getLogger(__name__)

DEFAULT_RESOLUTION = 30


# ------------------------------------------------------------------ #
# Validation
# ------------------------------------------------------------------ #


def _interaction_or_none(I: np.ndarray) -> np.ndarray | None:  # noqa: E741
    """``None`` when a shape-checked interaction term is empty or all NaN."""
    if I.size == 0 or np.all(np.isnan(I)):
        return None
    return I


def _validate_inputs(
    Y: MatrixLike,
    X: MatrixLike,
    I: MatrixLike | None,  # noqa: E741
    Z: MatrixLike | None,
) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray | None]:
    """Coerce inputs to 2-D float arrays and check their shapes.

    Returns:
        ``(Y, X, Z, I)`` with ``Z`` of shape ``(n, k)`` (``k`` may be
        0) and ``I`` either ``(n, 1)`` or ``None``.

    Raises:
        ShapeError: If Y or I has more than one column, X has fewer
            than 1 or more than 3 columns, there are no observations,
            or the row counts disagree.
    """
    Y = _as_2d_float(Y, name="Y")
    X = _as_2d_float(X, name="X")
    I = _as_2d_float(I, name="I")  # noqa: E741
    Z = _as_2d_float(Z, name="Z")

    if Y.shape[1] > 1:
        raise ShapeError(f"Y must have exactly 1 column, got {Y.shape[1]}.")
    if I.shape[1] > 1:
        raise ShapeError(
            f"The interaction term I must have exactly 1 column, got {I.shape[1]}."
        )
    if not 1 <= X.shape[1] <= 3:
        raise ShapeError(
            f"X must have between 1 and 3 columns (inclusive), got {X.shape[1]}."
        )

    n = Y.shape[0]
    if n == 0:
        raise ShapeError("Y must contain at least one observation.")
    if Y.shape[1] == 0:
        raise ShapeError(
            f"Y has {n} rows but no columns; it must have exactly 1 column."
        )
    if Z.size == 0:
        Z = np.empty((n, 0))

    rows = {"X": X.shape[0], "Z": Z.shape[0]}
    if I.size:
        rows["I"] = I.shape[0]
    mismatched = {k: v for k, v in rows.items() if v != n}
    if mismatched:
        detail = ", ".join(f"{k} has {v}" for k, v in mismatched.items())
        raise ShapeError(
            f"Input variables must all have the same number of rows: "
            f"Y has {n}, {detail}."
        )
    return Y, X, Z, _interaction_or_none(I)


# ------------------------------------------------------------------ #
# Variant builders
# ------------------------------------------------------------------ #


def _scatter_data(X: np.ndarray, rY: np.ndarray, resid: Residualizer) -> ScatterData:
    return ScatterData(x=resid(X[:, 0]), y=rY)


def _grouped_scatter_data(
    X: np.ndarray,
    rY: np.ndarray,
    resid: Residualizer,
    group_column: int,
) -> GroupedScatterData:
    """Per-level points and no-intercept lines over a shared x domain."""
    groups = X[:, group_column]
    rC = resid(X[:, 1 - group_column])
    levels = np.unique(groups)

    xs = tuple(rC[groups == u] for u in levels)
    ys = tuple(rY[groups == u] for u in levels)
    slopes = np.array([fit_through_origin(x, y) for x, y in zip(xs, ys)])

    # Both lines span the union of the groups' ranges so they can be
    # compared over the same domain.
    domain = (
        float(min(x.min() for x in xs)),
        float(max(x.max() for x in xs)),
    )
    line_y = np.outer(slopes, domain)
    return GroupedScatterData(
        group_column=group_column,
        levels=levels,
        x=xs,
        y=ys,
        slopes=slopes,
        x_domain=domain,
        line_y=line_y,
    )


def _cell_means_data(X: np.ndarray, rY: np.ndarray) -> CellMeansData:
    """Mean and standard error of rY in each (level of A, level of B) cell."""
    A, B = X[:, 0], X[:, 1]
    levels_a, levels_b = np.unique(A), np.unique(B)
    shape = (levels_a.size, levels_b.size)
    means = np.full(shape, np.nan)
    ses = np.full(shape, np.nan)
    counts = np.zeros(shape, dtype=int)

    for ia, ua in enumerate(levels_a):
        for ib, ub in enumerate(levels_b):
            cell = rY[(A == ua) & (B == ub)]
            counts[ia, ib] = cell.size
            if cell.size == 0:
                _warn(
                    f"Cell (A={ua:g}, B={ub:g}) has no observations; its mean "
                    f"and standard error are undefined.",
                    EmptyCellWarning,
                )
                continue
            means[ia, ib] = cell.mean()
            # A single observation has zero spread, not an undefined one.
            ses[ia, ib] = stats.sem(cell, ddof=1) if cell.size > 1 else 0.0

    return CellMeansData(
        levels_a=levels_a,
        levels_b=levels_b,
        means=means,
        standard_errors=ses,
        counts=counts,
    )


def _surface_data(
    X: np.ndarray,
    rY: np.ndarray,
    resid: Residualizer,
    fit: GLMFit,
    option: SurfaceOption,
    resolution: int,
) -> SurfaceData:
    """Residualised point cloud and the requested surface on a grid."""
    rA = resid(X[:, 0])
    rB = resid(X[:, 1])
    xg, yg = np.meshgrid(
        np.linspace(rA.min(), rA.max(), resolution),
        np.linspace(rB.min(), rB.max(), resolution),
    )
    if isinstance(option, MeshScale):
        b1 = fit.interaction_coef
        if b1 is None:
            raise ShapeError(
                "A scaled product-term surface needs an interaction term I; "
                "pass I or use opt='poly22'."
            )
        zg = xg * yg * b1 * option.factor
    else:
        zg = evaluate_poly22(fit_poly22(rA, rB, rY), xg, yg)
    return SurfaceData(
        x=rA, y=rB, z=rY, grid_x=xg, grid_y=yg, grid_z=zg, option=option
    )


# ------------------------------------------------------------------ #
# InteractionPlotter
# ------------------------------------------------------------------ #


class InteractionPlotter:
    """Compute (and optionally draw) an interaction plot.

    Args:
        resolution: Number of grid points per axis for surfaces of two
            continuous main effects.  Must be at least 2.
        labels: Optional :class:`~interaction_plots.PlotLabels` or a
            mapping of its fields.
        opt: Surface option: a scale factor for the product-term mesh
            (default 1), ``"poly22"`` for a quadratic surface, or a
            :class:`~interaction_plots.MeshScale` /
            :class:`~interaction_plots.Poly22` instance.

    Raises:
        TypeError: If *labels* is not a record or *opt* is not a
            number, string or option object.
        ValueError: If *resolution* is below 2 or *opt* is an unknown
            string.

    Examples:
        >>> plotter = InteractionPlotter(labels={"title": "Age x Dose"})
        >>> result = plotter.compute(y, X, I=X[:, 0] * X[:, 1], Z=Z)
        >>> result.variant
        <PlotVariant.SURFACE: 'E'>
    """

    def __init__(
        self,
        resolution: int = DEFAULT_RESOLUTION,
        labels: PlotLabels | dict[str, Any] | None = None,
        opt: Any = None,
    ) -> None:
        if int(resolution) < 2:
            raise ValueError(f"resolution must be at least 2, got {resolution}.")
        self.resolution = int(resolution)
        self.labels = _ensure_labels(labels)
        self.option = _resolve_surface_option(opt)

    def compute(
        self,
        Y: MatrixLike,
        X: MatrixLike,
        I: MatrixLike | None = None,  # noqa: E741
        Z: MatrixLike | None = None,
    ) -> InteractionPlotResult:
        """Build the plot data without drawing anything.

        Args:
            Y: Outcome, ``(n,)`` or ``(n, 1)``.
            X: Main effects, ``(n, j)`` with ``1 <= j <= 3``.
            I: Interaction term ``(n,)`` / ``(n, 1)``, or ``None``.
            Z: Nuisance regressors ``(n, k)``, or ``None``.

        Returns:
            An :class:`~interaction_plots.InteractionPlotResult`.

        Raises:
            ShapeError: On incompatible input shapes.
            UndefinedSplitError: For three main effects none of which
                has exactly two levels.
        """
        return self._compute(Y, X, Z, I, self.option, depth=0)

    def plot(
        self,
        Y: MatrixLike,
        X: MatrixLike,
        I: MatrixLike | None = None,  # noqa: E741
        Z: MatrixLike | None = None,
        ax: Any = None,
    ) -> InteractionPlotResult:
        """Compute the plot data and draw it with matplotlib.

        Same arguments as :meth:`compute`, plus an optional Axes to
        draw into (ignored for 3-way interactions, which need one
        subplot per level).
        """
        from .display import render_result

        result = self.compute(Y, X, I=I, Z=Z)
        render_result(result, ax=ax)
        return result

    def _compute(
        self,
        Y: MatrixLike,
        X: MatrixLike,
        Z: MatrixLike | None,
        I: MatrixLike | None,  # noqa: E741
        option: SurfaceOption,
        depth: int,
    ) -> InteractionPlotResult:
        Y, X, Z, I = _validate_inputs(Y, X, I, Z)  # noqa: E741
        n = Y.shape[0]
        logger.debug(
            "Depth %d: n=%d, %d main effect(s), %d nuisance column(s), "
            "interaction %s",
            depth,
            n,
            X.shape[1],
            Z.shape[1],
            "present" if I is not None else "absent",
        )

        fit = fit_glm(Y, X, Z, I)
        resid = Residualizer(Z, n=n)
        rY = resid(Y[:, 0])

        classes = classify_columns(X)
        variant = select_variant(classes)

        if variant is PlotVariant.SCATTER:
            data: Any = _scatter_data(X, rY, resid)
        elif variant is PlotVariant.GROUPED_BY_FIRST:
            data = _grouped_scatter_data(X, rY, resid, group_column=0)
        elif variant is PlotVariant.GROUPED_BY_SECOND:
            data = _grouped_scatter_data(X, rY, resid, group_column=1)
        elif variant is PlotVariant.CELL_MEANS:
            data = _cell_means_data(X, rY)
        elif variant is PlotVariant.SURFACE:
            data = _surface_data(X, rY, resid, fit, option, self.resolution)
        else:
            data = decompose_three_way(
                Y,
                X,
                Z,
                I,
                option,
                compute_child=self._compute,
                depth=depth,
            )

        return InteractionPlotResult(
            variant=variant,
            classes=classes,
            data=data,
            fit=fit,
            labels=self.labels,
            option=option,
            n_observations=n,
            depth=depth,
        )


def plot_interaction(
    Y: MatrixLike,
    X: MatrixLike,
    I: MatrixLike | None = None,  # noqa: E741
    Z: MatrixLike | None = None,
    resolution: int = DEFAULT_RESOLUTION,
    labels: PlotLabels | dict[str, Any] | None = None,
    opt: Any = None,
    *,
    render: bool | None = None,
    ax: Any = None,
) -> InteractionPlotResult:
    """Plot the effect of an interaction after removing nuisance effects.

    The outcome is residualised against *Z* and, depending on how many
    main effects there are and which of them have exactly two levels,
    one of six plots is built:

    * 1 main effect: scatter of residualised Y against residualised X.
    * 2 main effects, one binary: scatter per level of the binary one
      with a no-intercept line per level over a shared x range.
    * 2 binary main effects: 2×2 bar chart of cell means with standard
      error bars.
    * 2 continuous main effects: 3D surface and point cloud.
    * 3 main effects: the sample is split on the last two-level column
      and each half is plotted as a 2-way interaction.

    Args:
        Y: Outcome, ``(n,)`` or ``(n, 1)``.
        X: Main effects, ``(n, j)`` with ``1 <= j <= 3``.
        I: Interaction term, or ``None`` if the plot is not of an
            interaction.
        Z: Nuisance regressors, or ``None``.  Must not contain *I*.
        resolution: Grid points per axis for surfaces.
        labels: Optional :class:`PlotLabels` or mapping of its fields.
        opt: Surface option: scale factor for the product-term mesh
            (default 1) or ``"poly22"``.  Neither surface matches the
            fitted GLM exactly.
        render: Draw the result with matplotlib.  ``None`` draws unless the
            ``INTERACTION_PLOTS_RENDER`` environment variable is ``0``
            (or ``false``, ``no``, ``off``).
        ax: Optional matplotlib Axes to draw into.

    Returns:
        The computed :class:`InteractionPlotResult`.
    """
    plotter = InteractionPlotter(resolution=resolution, labels=labels, opt=opt)
    if render is None:
        render = render_by_default()
    if render:
        return plotter.plot(Y, X, I=I, Z=Z, ax=ax)
    return plotter.compute(Y, X, I=I, Z=Z)
