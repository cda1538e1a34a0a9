"""Environment configuration for interaction_plots.

:func:`~interaction_plots.plot_interaction` draws its result unless told
otherwise.  On headless machines and in batch jobs that only need the
residualised coordinates, drawing can be switched off for every call
without touching the code::

    export INTERACTION_PLOTS_RENDER=0

An explicit ``render=`` argument always takes precedence.
"""

from __future__ import annotations

import logging
import os

logger = logging.getLogger(__name__)

RENDER_ENV_VAR = "INTERACTION_PLOTS_RENDER"

_FALSE_VALUES = frozenset({"0", "false", "no", "off"})
_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


def render_by_default() -> bool:
    """Whether results are drawn when ``render`` is not given.

    Reads :data:`RENDER_ENV_VAR`.  Unset, empty or unrecognised values
    mean ``True``.
    """
    raw = os.environ.get(RENDER_ENV_VAR, "").strip().lower()
    if raw in _FALSE_VALUES:
        return False
    if raw and raw not in _TRUE_VALUES:
        logger.debug("Ignoring unrecognised %s=%r", RENDER_ENV_VAR, raw)
    return True
