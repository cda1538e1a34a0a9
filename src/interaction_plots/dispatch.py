"""Plot-variant selection from the main-effect layout.

The plot that makes sense for an interaction depends only on how many
main effects there are and whether each one is a two-level factor:

* One main effect — a residualised scatter (variant A).
* Two main effects — a lookup on the pair of variable classes:

  ============  ============  =====================================
  column 1      column 2      variant
  ============  ============  =====================================
  binary        continuous    B: grouped scatter, grouped by col 1
  continuous    binary        C: grouped scatter, grouped by col 2
  binary        binary        D: 2×2 cell means with SE bars
  continuous    continuous    E: 3D surface
  ============  ============  =====================================

* Three main effects — recursive decomposition (variant F).

"Binary" means *exactly* two distinct values.  Any other count,
including a constant column, is treated as continuous.  The selection
is a pure function of the column count and these classes, never of the
values themselves.
"""

from __future__ import annotations

import logging
from enum import Enum

import numpy as np

logger = logging.getLogger(__name__)


class VariableClass(Enum):
    """Cardinality class of a single main-effect column."""

    BINARY = "binary"
    CONTINUOUS = "continuous"


class PlotVariant(Enum):
    """The six plot families."""

    SCATTER = "A"
    GROUPED_BY_FIRST = "B"
    GROUPED_BY_SECOND = "C"
    CELL_MEANS = "D"
    SURFACE = "E"
    THREE_WAY = "F"


_TWO_WAY_VARIANTS: dict[tuple[VariableClass, VariableClass], PlotVariant] = {
    (VariableClass.BINARY, VariableClass.CONTINUOUS): PlotVariant.GROUPED_BY_FIRST,
    (VariableClass.CONTINUOUS, VariableClass.BINARY): PlotVariant.GROUPED_BY_SECOND,
    (VariableClass.BINARY, VariableClass.BINARY): PlotVariant.CELL_MEANS,
    (VariableClass.CONTINUOUS, VariableClass.CONTINUOUS): PlotVariant.SURFACE,
}


def classify_column(values: np.ndarray) -> VariableClass:
    """Return ``BINARY`` for exactly two distinct values, else ``CONTINUOUS``."""
    n_unique = np.unique(np.asarray(values).ravel()).size
    return VariableClass.BINARY if n_unique == 2 else VariableClass.CONTINUOUS


def classify_columns(X: np.ndarray) -> tuple[VariableClass, ...]:
    """Classify every column of a 2-D main-effect matrix."""
    X = np.asarray(X)
    return tuple(classify_column(X[:, j]) for j in range(X.shape[1]))


def select_variant(classes: tuple[VariableClass, ...]) -> PlotVariant:
    """Pick the plot variant for a tuple of per-column classes.

    Args:
        classes: One :class:`VariableClass` per main-effect column,
            in column order.  Length 1, 2 or 3.

    Returns:
        The :class:`PlotVariant` to build.

    Raises:
        ValueError: If the number of classes is not 1, 2 or 3.
    """
    n = len(classes)
    if n == 1:
        variant = PlotVariant.SCATTER
    elif n == 2:
        variant = _TWO_WAY_VARIANTS[(classes[0], classes[1])]
    elif n == 3:
        variant = PlotVariant.THREE_WAY
    else:
        raise ValueError(f"Expected 1 to 3 main-effect columns, got {n}.")
    logger.debug(
        "Classes %s -> variant %s",
        [c.value for c in classes],
        variant.value,
    )
    return variant
