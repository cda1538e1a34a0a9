"""Surface options for continuous-by-continuous interactions.

The surface drawn for two continuous main effects comes in two
mutually exclusive flavours:

* :class:`MeshScale` — the planar product term ``x · y · b₁ · factor``
  evaluated on a regular grid, where ``b₁`` is the fitted interaction
  coefficient.
* :class:`Poly22` — a full quadratic surface
  ``z ~ 1 + x + y + x² + xy + y²`` fitted to the residualised points.

Neither surface is the exact fitted GLM interaction effect; they are
visual aids.  The public API accepts a number (→ ``MeshScale``) or the
string ``"poly22"`` (→ ``Poly22``) in place of the option objects.
"""

from __future__ import annotations

import numbers
from dataclasses import dataclass
from typing import Any, TypeAlias

import numpy as np


@dataclass(frozen=True)
class MeshScale:
    """Scale the product-term mesh along the vertical axis."""

    factor: float = 1.0


@dataclass(frozen=True)
class Poly22:
    """Fit a quadratic surface in both variables instead of the mesh."""


SurfaceOption: TypeAlias = MeshScale | Poly22


def _resolve_surface_option(opt: Any) -> SurfaceOption:
    """Normalise a user-supplied surface option.

    Args:
        opt: ``None`` (default scale of 1), a real number, the string
            ``"poly22"`` (case-insensitive), or an existing
            :class:`MeshScale` / :class:`Poly22`.

    Returns:
        The corresponding option object.

    Raises:
        ValueError: If *opt* is a string other than ``"poly22"``.
        TypeError: If *opt* is of any other type.
    """
    if opt is None:
        return MeshScale()
    if isinstance(opt, (MeshScale, Poly22)):
        return opt
    # bool is a numbers.Real; a flag is almost certainly a mistake here.
    if isinstance(opt, numbers.Real) and not isinstance(opt, bool):
        return MeshScale(float(opt))
    if isinstance(opt, str):
        if opt.strip().lower() == "poly22":
            return Poly22()
        raise ValueError(
            f"Unknown surface option '{opt}'. Use a number or 'poly22'."
        )
    raise TypeError(
        f"opt must be a number or 'poly22', got {type(opt).__name__}."
    )


def _option_for_level(opt: SurfaceOption, level: float) -> SurfaceOption:
    """Surface option handed to the sub-plot for one level of a split.

    A scaled mesh is replaced by the sign of the level value, so the
    two halves of a ``{-1, +1}`` split are drawn with opposite
    orientation; a quadratic fit is passed on unchanged.
    """
    if isinstance(opt, MeshScale):
        return MeshScale(float(np.sign(level)))
    return opt
