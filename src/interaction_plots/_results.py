"""Typed result objects for interaction plots.

Frozen dataclasses that provide:

* **Attribute access** — ``result.variant``, ``result.data.means``, etc.
* **Dict-like access** — ``result["variant"]``, ``result.get("key")``,
  ``"key" in result`` for consumers that prefer bracket syntax.
* **Serialisation** — ``.to_dict()`` returns a plain ``dict[str, Any]``
  with all NumPy types converted to native Python.

Every variant has its own payload class holding exactly the
coordinates the rendering layer needs:

* :class:`ScatterData` — variant A.
* :class:`GroupedScatterData` — variants B and C.
* :class:`CellMeansData` — variant D.
* :class:`SurfaceData` — variant E.
* :class:`DecompositionData` — variant F, with one child
  :class:`InteractionPlotResult` per level of the split.

The payload is wrapped by :class:`InteractionPlotResult`, which also
records the variant, the column classes and the full-model fit.
Results are snapshots of a finished computation and are immutable.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import TYPE_CHECKING, Any, ClassVar

import numpy as np

if TYPE_CHECKING:
    from .dispatch import PlotVariant, VariableClass
    from .labels import PlotLabels
    from .linalg import GLMFit
    from .options import SurfaceOption

# ------------------------------------------------------------------ #
# Serialisation helper
# ------------------------------------------------------------------ #


def _numpy_to_python(obj: Any) -> Any:
    """Recursively convert NumPy scalars/arrays to Python-native types.

    Handles nested dicts, lists, np.ndarray, np.integer, np.floating
    and nested result objects so that :meth:`to_dict` returns a fully
    JSON-serialisable structure.
    """
    if isinstance(obj, _DictAccessMixin):
        return obj.to_dict()
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, (np.integer, np.bool_)):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, dict):
        return {k: _numpy_to_python(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        converted = [_numpy_to_python(item) for item in obj]
        return type(obj)(converted)
    return obj


def _option_to_dict(opt: Any) -> dict[str, Any] | None:
    if opt is None:
        return None
    return {"type": type(opt).__name__, **asdict(opt)}


def _fit_to_dict(fit: Any) -> dict[str, Any] | None:
    if fit is None:
        return None
    return {
        "coefficients": fit.coefficients,
        "rank": fit.rank,
        "n_columns": fit.n_columns,
        "interaction_coef": fit.interaction_coef,
    }


# ------------------------------------------------------------------ #
# Dict-compatibility mixin
# ------------------------------------------------------------------ #


class _DictAccessMixin:
    """Dict-like access convenience for result dataclasses.

    Supports three access patterns:

    1. ``result["key"]``     — raises ``KeyError`` on miss
    2. ``result.get(key, d)`` — returns *d* on miss (default ``None``)
    3. ``"key" in result``   — membership test

    Subclasses may override ``_SERIALIZERS`` to register conversion
    functions for non-primitive fields (enums, option records).
    Serializers compose with :func:`_numpy_to_python`.
    """

    _SERIALIZERS: ClassVar[dict[str, Any]] = {}

    def __getitem__(self, key: str) -> Any:
        """Attribute lookup via bracket syntax."""
        try:
            return getattr(self, key)
        except AttributeError:
            raise KeyError(key) from None

    def get(self, key: str, default: Any = None) -> Any:
        """Attribute lookup with a fallback default."""
        return getattr(self, key, default)

    def __contains__(self, key: object) -> bool:
        """Membership test: ``"key" in result``."""
        if not isinstance(key, str):
            return False
        return hasattr(self, key)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary.

        Applies per-field serializers from ``_SERIALIZERS``, then runs
        :func:`_numpy_to_python` on every value.
        """
        result: dict[str, Any] = {}
        for f in fields(self):  # type: ignore[arg-type]
            val = getattr(self, f.name)
            if f.name in self._SERIALIZERS:
                val = self._SERIALIZERS[f.name](val)
            result[f.name] = _numpy_to_python(val)
        return result


# ------------------------------------------------------------------ #
# Variant payloads
# ------------------------------------------------------------------ #


@dataclass(frozen=True)
class ScatterData(_DictAccessMixin):
    """Residualised outcome against a single residualised main effect."""

    x: np.ndarray
    """Residualised main effect ``(n,)``."""

    y: np.ndarray
    """Residualised outcome ``(n,)``."""

    @property
    def n_points(self) -> int:
        return int(self.x.size)


@dataclass(frozen=True)
class GroupedScatterData(_DictAccessMixin):
    """Per-level scatter and fitted lines for a binary-by-continuous pair."""

    group_column: int
    """Index (0 or 1) of the binary grouping column."""

    levels: np.ndarray
    """The two levels of the grouping column, ascending."""

    x: tuple[np.ndarray, ...]
    """Residualised continuous predictor, one array per level."""

    y: tuple[np.ndarray, ...]
    """Residualised outcome, one array per level."""

    slopes: np.ndarray
    """No-intercept slope per level."""

    x_domain: tuple[float, float]
    """Union of the per-level x ranges; every line spans this domain."""

    line_y: np.ndarray
    """Line end points ``(n_levels, 2)``, i.e. ``x_domain · slope``."""


@dataclass(frozen=True)
class CellMeansData(_DictAccessMixin):
    """Residualised outcome summarised over the cells of two binary factors.

    Rows index the levels of the first column, columns those of the
    second.  Empty cells hold ``nan`` in ``means`` and
    ``standard_errors``.
    """

    levels_a: np.ndarray
    levels_b: np.ndarray
    means: np.ndarray
    standard_errors: np.ndarray
    counts: np.ndarray


@dataclass(frozen=True)
class SurfaceData(_DictAccessMixin):
    """Residualised point cloud plus a surface on a regular grid."""

    _SERIALIZERS: ClassVar[dict[str, Any]] = {"option": _option_to_dict}

    x: np.ndarray
    y: np.ndarray
    z: np.ndarray
    grid_x: np.ndarray
    """Grid abscissae ``(resolution, resolution)``."""

    grid_y: np.ndarray
    """Grid ordinates ``(resolution, resolution)``."""

    grid_z: np.ndarray
    """Surface height at every grid node."""

    option: SurfaceOption
    """Which surface was built (scaled mesh or quadratic fit)."""


@dataclass(frozen=True)
class DecompositionData(_DictAccessMixin):
    """Split of a 3-way interaction on a two-level main effect."""

    split_column: int
    """Index of the column the sample was split on."""

    levels: np.ndarray
    """The two levels of the split column, ascending."""

    children: tuple[InteractionPlotResult, ...]
    """One sub-plot result per level, in the order of ``levels``."""

    dropped_main_effects: tuple[tuple[int, ...], ...]
    """Per level, indices of remaining main effects pruned as collinear."""

    dropped_nuisance: tuple[tuple[int, ...], ...]
    """Per level, indices of nuisance columns pruned as collinear."""


# ------------------------------------------------------------------ #
# InteractionPlotResult
# ------------------------------------------------------------------ #


@dataclass(frozen=True)
class InteractionPlotResult(_DictAccessMixin):
    """Everything needed to draw one interaction plot.

    Returned by :func:`~interaction_plots.plot_interaction` and
    :meth:`~interaction_plots.InteractionPlotter.compute`.
    """

    _SERIALIZERS: ClassVar[dict[str, Any]] = {
        "variant": lambda v: v.value,
        "classes": lambda cs: [c.value for c in cs],
        "labels": lambda lb: asdict(lb) if lb is not None else None,
        "option": _option_to_dict,
        "fit": _fit_to_dict,
    }

    variant: PlotVariant
    """The selected plot family."""

    classes: tuple[VariableClass, ...]
    """Class of each main-effect column, in column order."""

    data: ScatterData | GroupedScatterData | CellMeansData | SurfaceData | DecompositionData
    """Variant-specific plot coordinates."""

    fit: GLMFit
    """Least-squares fit of the full model ``[I X Z]``."""

    labels: PlotLabels | None
    """Pass-through labelling record."""

    option: SurfaceOption
    """Surface option in effect for this (sub-)plot."""

    n_observations: int
    """Number of rows used."""

    depth: int = 0
    """Recursion depth; 0 for the top-level call."""


__all__ = [
    "CellMeansData",
    "DecompositionData",
    "GroupedScatterData",
    "InteractionPlotResult",
    "ScatterData",
    "SurfaceData",
]
