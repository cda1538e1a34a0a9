"""Plot labelling record.

:class:`PlotLabels` is pure pass-through metadata: the computational
core never inspects it beyond checking that it is a record (or absent),
and the rendering layer reads whichever fields it needs for the
variant being drawn.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, fields
from typing import Any

import numpy as np

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlotLabels:
    """Titles, axis labels and group names for an interaction plot.

    Which fields are used depends on the plot variant:

    * Scatter (one main effect): ``title``, ``xlabel``, ``ylabel``.
    * Grouped scatter, binary first column: ``ylabel`` on the x-axis,
      ``zlabel`` on the y-axis, ``xnames`` in the legend.
    * Grouped scatter, binary second column: ``xlabel`` on the x-axis,
      ``zlabel`` on the y-axis, ``ynames`` in the legend.
    * Cell means: ``xlabel``, ``zlabel``, ``xnames`` as tick labels,
      ``ynames`` in the legend.
    * Surface: ``title``, ``xlabel``, ``ylabel``, ``zlabel``.
    """

    title: str | None = None
    xlabel: str | None = None
    ylabel: str | None = None
    zlabel: str | None = None
    xnames: tuple[str, ...] = ()
    ynames: tuple[str, ...] = ()
    legend_location: str = "best"

    def __post_init__(self) -> None:
        # Lists are accepted for convenience; store tuples so the
        # record stays hashable.
        object.__setattr__(self, "xnames", tuple(self.xnames))
        object.__setattr__(self, "ynames", tuple(self.ynames))

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> PlotLabels:
        """Build a :class:`PlotLabels` from a mapping of its fields.

        Keys that are not fields of the record are ignored.
        """
        names = {f.name for f in fields(cls)}
        unknown = sorted(set(mapping) - names)
        if unknown:
            logger.debug("Ignoring unknown label fields: %s", unknown)
        return cls(**{k: v for k, v in mapping.items() if k in names})


def _is_empty(obj: Any) -> bool:
    """``True`` for the values that mean "no labels were given"."""
    if obj is None:
        return True
    if isinstance(obj, float) and np.isnan(obj):
        return True
    if isinstance(obj, np.ndarray):
        if obj.size == 0:
            return True
        try:
            return bool(np.all(np.isnan(obj.astype(float))))
        except (TypeError, ValueError):
            return False
    if isinstance(obj, (Sequence, Mapping)) and len(obj) == 0:
        return True
    return False


def _ensure_labels(obj: Any) -> PlotLabels | None:
    """Validate plot labels and normalise it to :class:`PlotLabels`.

    Args:
        obj: ``None`` (or another empty value), a :class:`PlotLabels`
            instance, or a mapping of its fields.

    Returns:
        The normalised record, or ``None`` when no labels were given.

    Raises:
        TypeError: If *obj* is neither empty nor a structured record.
    """
    if isinstance(obj, PlotLabels):
        return obj
    if _is_empty(obj):
        return None
    if isinstance(obj, Mapping):
        return PlotLabels.from_mapping(obj)
    raise TypeError(
        f"labels must be a PlotLabels instance or a mapping, "
        f"got {type(obj).__name__}."
    )
