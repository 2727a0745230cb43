"""Utility functions for composite operations."""

from typing import Union, overload

import numpy as np
from numpy.typing import NDArray


def divide(
    a: NDArray[np.floating], b: NDArray[np.floating], fill: float = 0.0
) -> NDArray[np.floating]:
    """Safe division for color ops."""
    with np.errstate(divide="ignore", invalid="ignore"):
        c = np.true_divide(a, b)
        c[~np.isfinite(c)] = fill
    return c


@overload
def union(backdrop: float, source: float) -> float: ...


@overload
def union(
    backdrop: NDArray[np.floating], source: NDArray[np.floating]
) -> NDArray[np.floating]: ...


@overload
def union(backdrop: float, source: NDArray[np.floating]) -> NDArray[np.floating]: ...


@overload
def union(backdrop: NDArray[np.floating], source: float) -> NDArray[np.floating]: ...


def union(
    backdrop: Union[float, NDArray[np.floating]],
    source: Union[float, NDArray[np.floating]],
) -> Union[float, NDArray[np.floating]]:
    """Generalized union of shape."""
    return backdrop + source - (backdrop * source)


def clip(x: NDArray[np.floating]) -> NDArray[np.floating]:
    """Clip between [0, 1]."""
    return np.clip(x, 0.0, 1.0)
