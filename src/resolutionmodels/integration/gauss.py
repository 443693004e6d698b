from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt


def gauss_points_weights(n_points: int) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    """
    Generate Gauss-Legendre points and weights on the interval [-1, 1].

    Args:
        n_points: Number of integration points.

    Raises:
        ValueError: If `n_points` is smaller than 1.

    Returns:
        A tuple containing the Gauss points and weights.
    """
    if n_points < 1:
        raise ValueError(f"Unsupported number of Gauss points: {n_points}. "
                         f"'n_points' must be at least 1.")
    return np.polynomial.legendre.leggauss(n_points)


def gauss_points_weights_interval(
    n_points: int,
    lower: float,
    upper: float
) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    """
    Generate Gauss-Legendre points and weights mapped onto [lower, upper].

    Args:
        n_points: Number of integration points.
        lower: Lower integration limit.
        upper: Upper integration limit.

    Returns:
        A tuple containing the Gauss points and weights.
    """
    points, weights = gauss_points_weights(n_points)
    half_width = 0.5 * (upper - lower)
    midpoint = 0.5 * (upper + lower)
    return midpoint + half_width * points, half_width * weights
