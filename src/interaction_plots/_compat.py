"""Input compatibility layer for optional Polars support.

The public API accepts NumPy arrays, pandas objects and plain lists.
This module adds transparent support for Polars: a ``polars.DataFrame``
or ``polars.Series`` is converted at the boundary so that the
linear-algebra code only ever sees 2-D float NumPy arrays.

Polars is **not** a required dependency.  If it is not installed, the
converter simply handles NumPy and pandas inputs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeAlias

import numpy as np
import pandas as pd

if TYPE_CHECKING:
    import polars as pl

    MatrixLike: TypeAlias = (
        np.ndarray | pd.DataFrame | pd.Series | pl.DataFrame | pl.Series | list
    )
else:
    MatrixLike: TypeAlias = np.ndarray | pd.DataFrame | pd.Series | list

# Runtime detection; Polars is an optional dependency.
try:
    import polars as pl

    _HAS_POLARS = True
except ImportError:
    _HAS_POLARS = False


def _to_numpy(obj: Any, *, name: str) -> np.ndarray:
    if isinstance(obj, np.ndarray):
        return obj
    if isinstance(obj, (pd.DataFrame, pd.Series)):
        return obj.to_numpy()
    if _HAS_POLARS and isinstance(obj, (pl.DataFrame, pl.Series)):
        return obj.to_numpy()
    if isinstance(obj, (list, tuple)):
        return np.asarray(obj)
    raise TypeError(
        f"'{name}' must be a NumPy array, pandas DataFrame/Series"
        + (", Polars DataFrame/Series" if _HAS_POLARS else "")
        + f" or list, got {type(obj).__name__}."
    )


def _as_2d_float(obj: MatrixLike | None, *, name: str = "input") -> np.ndarray:
    """Convert *obj* to a 2-D float array with observations in rows.

    Accepted types:
        * ``numpy.ndarray`` — 0-D, 1-D or 2-D.
        * ``pandas.DataFrame`` / ``pandas.Series``.
        * ``polars.DataFrame`` / ``polars.Series`` (when installed).
        * ``list`` / ``tuple`` of numbers or rows.
        * ``None`` — returned as an empty ``(0, 0)`` array.

    1-D inputs become a single column, so a length-``n`` vector is
    returned with shape ``(n, 1)``.

    Args:
        obj: The array-like to convert.
        name: Label used in error messages (e.g. ``"X"`` or ``"Z"``).

    Returns:
        A ``float64`` array with ``ndim == 2``.

    Raises:
        TypeError: If *obj* is not a recognised array type or holds
            non-numeric values.
    """
    if obj is None:
        return np.empty((0, 0), dtype=float)

    arr = _to_numpy(obj, name=name)
    try:
        arr = arr.astype(float)
    except (TypeError, ValueError) as exc:
        raise TypeError(f"'{name}' must contain numeric values: {exc}") from exc

    if arr.ndim == 0:
        return arr.reshape(1, 1)
    if arr.ndim == 1:
        return arr.reshape(-1, 1)
    if arr.ndim > 2:
        raise TypeError(f"'{name}' must be at most 2-D, got {arr.ndim}-D.")
    return arr
