"""interaction_plots — Visualise GLM interaction effects net of nuisance covariates.

Residualises the outcome (and any plotted continuous regressor) against
nuisance variables, then builds the plot that fits the main effects:
a scatter, per-group scatter with fitted lines, a 2×2 bar chart of cell
means with standard errors, a 3D surface, or a recursive split of a
3-way interaction into two 2-way plots.

Public API:
    .. autosummary::
        plot_interaction
        InteractionPlotter
        InteractionPlotResult
        ScatterData
        GroupedScatterData
        CellMeansData
        SurfaceData
        DecompositionData
        PlotLabels
        MeshScale
        Poly22
        PlotVariant
        VariableClass
        select_variant
        classify_column
        residualize
        Residualizer
        fit_glm
        drop_near_collinear
        render_result
        ShapeError
        UndefinedSplitError
        SingularDesignWarning
        EmptyCellWarning
"""

from ._exceptions import (
    EmptyCellWarning,
    ShapeError,
    SingularDesignWarning,
    UndefinedSplitError,
)
from ._results import (
    CellMeansData,
    DecompositionData,
    GroupedScatterData,
    InteractionPlotResult,
    ScatterData,
    SurfaceData,
)
from .decompose import drop_near_collinear
from .dispatch import PlotVariant, VariableClass, classify_column, select_variant
from .display import render_result
from .labels import PlotLabels
from .linalg import Residualizer, fit_glm, residualize
from .options import MeshScale, Poly22
from .plotter import InteractionPlotter, plot_interaction

__all__ = [
    "plot_interaction",
    "InteractionPlotter",
    "InteractionPlotResult",
    "ScatterData",
    "GroupedScatterData",
    "CellMeansData",
    "SurfaceData",
    "DecompositionData",
    "PlotLabels",
    "MeshScale",
    "Poly22",
    "PlotVariant",
    "VariableClass",
    "select_variant",
    "classify_column",
    "residualize",
    "Residualizer",
    "fit_glm",
    "drop_near_collinear",
    "render_result",
    "ShapeError",
    "UndefinedSplitError",
    "SingularDesignWarning",
    "EmptyCellWarning",
]

__version__ = "0.1.0"
