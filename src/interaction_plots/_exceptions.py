"""Exception and warning classes raised by interaction_plots.

Errors subclass :class:`ValueError` so callers that already guard
against bad input with ``except ValueError`` keep working.  Warnings
subclass :class:`UserWarning` and never abort a computation.
"""

from __future__ import annotations

import inspect
import os
import warnings

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__)) + os.sep


class ShapeError(ValueError):
    """Inputs have incompatible row or column counts."""


class UndefinedSplitError(ValueError):
    """No main-effect column with exactly two levels in a 3-way interaction.

    The recursive decomposition splits the sample on a two-level
    column; without one there is no rule for choosing the split.
    """


class SingularDesignWarning(UserWarning):
    """The design is rank-deficient or near-collinear columns were dropped."""


class EmptyCellWarning(UserWarning):
    """A cell of the two-by-two layout contains no observations."""


def _warn(message: str, category: type[Warning]) -> None:
    """Issue *category* attributed to the first caller outside this package."""
    frame = inspect.currentframe()
    level = 1
    try:
        while frame is not None and os.path.abspath(
            frame.f_code.co_filename
        ).startswith(_PACKAGE_DIR):
            frame = frame.f_back
            level += 1
    finally:
        del frame
    warnings.warn(message, category, stacklevel=level)


__all__ = [
    "EmptyCellWarning",
    "ShapeError",
    "SingularDesignWarning",
    "UndefinedSplitError",
]
