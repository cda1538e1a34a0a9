"""matplotlib rendering of interaction plot results.

Every function here draws a result object computed by
:class:`~interaction_plots.InteractionPlotter`; none of them computes
statistics of its own.  Each accepts an optional Axes and returns the
Axes it drew into, so plots can be embedded in larger figures::

    fig, (ax1, ax2) = plt.subplots(1, 2)
    result = plot_interaction(y, X, I, Z, render=False)
    plot_grouped_scatter(result.data, result.labels, ax=ax1)

Surfaces need a 3D Axes (``fig.add_subplot(projection="3d")``); one is
created when *ax* is ``None``.

Groups are coloured from the fixed cycle ``b r g y m c k``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import matplotlib.pyplot as plt
import numpy as np

from .dispatch import PlotVariant
from .options import MeshScale

if TYPE_CHECKING:
    from matplotlib.axes import Axes

    from ._results import (
        CellMeansData,
        GroupedScatterData,
        InteractionPlotResult,
        ScatterData,
        SurfaceData,
    )
    from .labels import PlotLabels

COLORS = "brgymck"


def _color(i: int) -> str:
    return COLORS[i % len(COLORS)]


def _new_axes(projection: str | None = None) -> Axes:
    fig = plt.figure()
    return fig.add_subplot(projection=projection)


def _group_names(names: tuple[str, ...], levels: np.ndarray) -> list[str]:
    """Legend entries: the supplied names, or the level values."""
    if len(names) >= len(levels):
        return list(names[: len(levels)])
    return [f"{u:g}" for u in levels]


def plot_scatter(
    data: ScatterData,
    labels: PlotLabels | None = None,
    ax: Axes | None = None,
) -> Axes:
    """Residualised outcome against a residualised main effect."""
    if ax is None:
        ax = _new_axes()
    ax.scatter(data.x, data.y)
    if labels is not None:
        ax.set_title(labels.title or "")
        ax.set_xlabel(labels.xlabel or "")
        ax.set_ylabel(labels.ylabel or "")
    return ax


def plot_grouped_scatter(
    data: GroupedScatterData,
    labels: PlotLabels | None = None,
    ax: Axes | None = None,
) -> Axes:
    """Per-level points plus a fitted line per level over the shared domain.

    When the first main effect is the grouping factor the continuous
    axis is the second main effect, so it is labelled with ``ylabel``
    and the legend uses ``xnames``; otherwise ``xlabel`` and
    ``ynames``.  The outcome axis is labelled with ``zlabel``.
    """
    if ax is None:
        ax = _new_axes()
    if data.group_column == 0:
        names = labels.xnames if labels is not None else ()
        x_label = labels.ylabel if labels is not None else None
    else:
        names = labels.ynames if labels is not None else ()
        x_label = labels.xlabel if labels is not None else None
    legend = _group_names(names, data.levels)

    for i in range(len(data.levels)):
        ax.scatter(data.x[i], data.y[i], c=_color(i), marker=".", label=legend[i])
    for i in range(len(data.levels)):
        ax.plot(data.x_domain, data.line_y[i], color=_color(i))
    ax.set_xlim(data.x_domain)

    if labels is not None:
        ax.set_title(labels.title or "")
        ax.set_xlabel(x_label or "")
        ax.set_ylabel(labels.zlabel or "")
        ax.legend(loc=labels.legend_location)
    return ax


def plot_cell_means(
    data: CellMeansData,
    labels: PlotLabels | None = None,
    ax: Axes | None = None,
) -> Axes:
    """Grouped bars of cell means with standard-error bars.

    Bar groups sit at x = 1, 2, … (levels of the first factor); within
    a group there is one bar per level of the second factor.
    """
    if ax is None:
        ax = _new_axes()
    n_groups, n_bars = data.means.shape
    group_width = min(0.8, n_bars / (n_bars + 1.5))
    bar_width = group_width / n_bars
    centres = np.arange(1, n_groups + 1)

    names = labels.ynames if labels is not None else ()
    legend = _group_names(names, data.levels_b)
    for b in range(n_bars):
        xpos = centres - group_width / 2 + (2 * b + 1) * group_width / (2 * n_bars)
        ax.bar(xpos, data.means[:, b], width=bar_width, color=_color(b), label=legend[b])
        ax.errorbar(
            xpos,
            data.means[:, b],
            yerr=data.standard_errors[:, b],
            fmt=".",
            color="k",
        )

    ax.set_xticks(centres)
    if labels is not None and len(labels.xnames) >= n_groups:
        ax.set_xticklabels(labels.xnames[:n_groups])
    else:
        ax.set_xticklabels([f"{u:g}" for u in data.levels_a])

    if labels is not None:
        ax.set_title(labels.title or "")
        ax.set_xlabel(labels.xlabel or "")
        ax.set_ylabel(labels.zlabel or "")
        ax.legend(loc=labels.legend_location)
    return ax


def plot_surface(
    data: SurfaceData,
    labels: PlotLabels | None = None,
    ax: Axes | None = None,
) -> Axes:
    """Residualised point cloud with a product-term mesh or quadratic surface."""
    if ax is None:
        ax = _new_axes(projection="3d")
    if isinstance(data.option, MeshScale):
        ax.plot_wireframe(data.grid_x, data.grid_y, data.grid_z, linewidth=0.5)
    else:
        ax.plot_surface(data.grid_x, data.grid_y, data.grid_z, cmap="viridis", alpha=0.6)
    ax.scatter(data.x, data.y, data.z, c="k", marker=".")
    if labels is not None:
        ax.set_title(labels.title or "")
        ax.set_xlabel(labels.xlabel or "")
        ax.set_ylabel(labels.ylabel or "")
        ax.set_zlabel(labels.zlabel or "")
    return ax


_RENDERERS = {
    PlotVariant.SCATTER: plot_scatter,
    PlotVariant.GROUPED_BY_FIRST: plot_grouped_scatter,
    PlotVariant.GROUPED_BY_SECOND: plot_grouped_scatter,
    PlotVariant.CELL_MEANS: plot_cell_means,
    PlotVariant.SURFACE: plot_surface,
}


def render_result(result: InteractionPlotResult, ax: Axes | None = None) -> Any:
    """Draw any :class:`~interaction_plots.InteractionPlotResult`.

    Args:
        result: The computed result.
        ax: Axes to draw into.  Ignored for 3-way interactions, which
            get a new figure with one subplot per level of the split.

    Returns:
        The Axes drawn into, or a list of Axes for a 3-way interaction.
    """
    if result.variant is not PlotVariant.THREE_WAY:
        return _RENDERERS[result.variant](result.data, result.labels, ax=ax)

    data = result.data
    fig = plt.figure(figsize=(6 * len(data.children), 5))
    axes = []
    for i, (level, child) in enumerate(zip(data.levels, data.children)):
        projection = "3d" if child.variant is PlotVariant.SURFACE else None
        child_ax = fig.add_subplot(1, len(data.children), i + 1, projection=projection)
        _RENDERERS[child.variant](child.data, child.labels, ax=child_ax)
        prefix = f"{child.labels.title} | " if child.labels and child.labels.title else ""
        child_ax.set_title(f"{prefix}column {data.split_column} = {level:g}")
        axes.append(child_ax)
    fig.tight_layout()
    return axes
