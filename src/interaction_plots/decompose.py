"""Recursive decomposition of 3-way interactions.

A three-way interaction cannot be drawn directly.  Instead the sample
is split on one of the main effects that has exactly two levels, and
each half is plotted as an ordinary two-way interaction of the
remaining main effects.

Split rule:
    Among the three columns, the **last** one (in column order) with
    exactly two distinct values is the splitting column C.  If there
    is none, :class:`~interaction_plots.UndefinedSplitError` is raised;
    there is no fallback rule.

Within each level of C the sub-sample can become degenerate — e.g.
when the interaction term is the product of the main effects, fixing
C at one level can make I an exact copy of one remaining column.
Before recursing, three pruning passes remove such columns:

1. main effects near-collinear with I;
2. nuisance columns near-collinear with any column of [I, X'];
3. nuisance columns near-collinear with a *later* nuisance column.

"Near-collinear" means ``|corr| > 1 − 10·eps``.  Constant columns
(an intercept, typically) have undefined correlation and are kept.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import numpy as np

from ._exceptions import SingularDesignWarning, UndefinedSplitError, _warn
from ._results import DecompositionData
from .dispatch import VariableClass, classify_columns
from .linalg import abs_correlation
from .options import SurfaceOption, _option_for_level

logger = logging.getLogger(__name__)

COLLINEARITY_THRESHOLD = 1.0 - 10.0 * np.finfo(float).eps


def drop_near_collinear(
    candidates: np.ndarray,
    reference: np.ndarray | None = None,
    threshold: float = COLLINEARITY_THRESHOLD,
) -> np.ndarray:
    """Mask of candidate columns that are *not* near-collinear.

    Args:
        candidates: Columns that may be dropped, shape ``(n, p)``.
        reference: Columns to compare against, shape ``(n, q)``.  When
            ``None``, each candidate column is compared with the
            candidate columns to its right, so of a pair of duplicates
            only the last survives.
        threshold: A column is dropped when its absolute correlation
            with a reference column exceeds this value.

    Returns:
        Boolean array of length ``p``; ``True`` means keep.
    """
    candidates = np.asarray(candidates, dtype=float)
    p = candidates.shape[1]
    if p == 0:
        return np.ones(0, dtype=bool)

    if reference is None:
        corr = abs_correlation(candidates, candidates)
        # Strict upper triangle: pair (i, j) with j > i drops column i.
        corr = np.where(np.triu(np.ones((p, p), dtype=bool), k=1), corr, 0.0)
        with np.errstate(invalid="ignore"):
            return ~np.any(corr > threshold, axis=1)

    reference = np.asarray(reference, dtype=float)
    if reference.shape[1] == 0:
        return np.ones(p, dtype=bool)
    corr = abs_correlation(reference, candidates)
    with np.errstate(invalid="ignore"):
        return ~np.any(corr > threshold, axis=0)


def find_split_column(X: np.ndarray) -> int:
    """Index of the last column of *X* with exactly two distinct values.

    Raises:
        UndefinedSplitError: If no column has exactly two values.
    """
    classes = classify_columns(X)
    binary = [j for j, c in enumerate(classes) if c is VariableClass.BINARY]
    if not binary:
        raise UndefinedSplitError(
            "A 3-way interaction needs at least one main effect with exactly "
            "two distinct values to split on; found cardinalities "
            f"{[np.unique(X[:, j]).size for j in range(X.shape[1])]}."
        )
    return binary[-1]


def decompose_three_way(
    Y: np.ndarray,
    X: np.ndarray,
    Z: np.ndarray,
    I: np.ndarray | None,  # noqa: E741
    option: SurfaceOption,
    compute_child: Callable[..., Any],
    depth: int = 0,
) -> DecompositionData:
    """Split a 3-way interaction and compute one sub-plot per level.

    Args:
        Y: Outcome ``(n, 1)``.
        X: Main effects ``(n, 3)``.
        Z: Nuisance regressors ``(n, k)``.
        I: Interaction term ``(n, 1)`` or ``None``.
        option: Surface option of the parent call.
        compute_child: Called as ``compute_child(Y, X, Z, I, option,
            depth)`` for each sub-sample; returns the child result.
        depth: Recursion depth of the parent call.

    Returns:
        A :class:`DecompositionData` with one child per level.
    """
    split = find_split_column(X)
    C = X[:, split]
    X_rest = np.delete(X, split, axis=1)
    levels = np.unique(C)
    logger.debug("Depth %d: splitting on column %d, levels %s", depth, split, levels)

    children = []
    dropped_x: list[tuple[int, ...]] = []
    dropped_z: list[tuple[int, ...]] = []
    for level in levels:
        rows = C == level
        Yu = Y[rows]
        Iu = None if I is None else I[rows]
        Xu = X_rest[rows]
        Zu = Z[rows]

        if Iu is None:
            keep_x = np.ones(Xu.shape[1], dtype=bool)
        else:
            keep_x = drop_near_collinear(Xu, Iu)
        Xu = Xu[:, keep_x]

        ref = Xu if Iu is None else np.hstack([Iu, Xu])
        keep_z = drop_near_collinear(Zu, ref)
        # Self-pruning runs on the survivors of the previous pass.
        keep_z[keep_z] = drop_near_collinear(Zu[:, keep_z])
        Zu = Zu[:, keep_z]

        gone_x = tuple(int(j) for j in np.flatnonzero(~keep_x))
        gone_z = tuple(int(j) for j in np.flatnonzero(~keep_z))
        if gone_x or gone_z:
            logger.debug(
                "Level %s: dropped main effects %s and nuisance columns %s",
                level,
                gone_x,
                gone_z,
            )
            _warn(
                f"At level {level:g} of column {split}, dropped "
                f"{len(gone_x)} main effect(s) and {len(gone_z)} nuisance "
                f"column(s) that are near-collinear with other regressors.",
                SingularDesignWarning,
            )
        dropped_x.append(gone_x)
        dropped_z.append(gone_z)

        children.append(
            compute_child(Yu, Xu, Zu, Iu, _option_for_level(option, level), depth + 1)
        )

    return DecompositionData(
        split_column=split,
        levels=levels,
        children=tuple(children),
        dropped_main_effects=tuple(dropped_x),
        dropped_nuisance=tuple(dropped_z),
    )
