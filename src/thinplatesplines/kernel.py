"""
Radial basis kernel of the thin-plate spline.

The basis function is U(r) = r^2 log(r), extended by continuity to U(0) = 0.
Distances below the machine epsilon of their dtype are treated as exact zeros
so that log(0) is never evaluated.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from scipy.spatial.distance import cdist, pdist, squareform

if TYPE_CHECKING:
    from numpy.typing import ArrayLike, NDArray


def basis(r: ArrayLike) -> NDArray[np.floating]:
    """Evaluate the thin-plate basis U(r) = r^2 log(r) elementwise.

    Args:
        r: Non-negative Euclidean distances (scalar or array)

    Returns:
        Array of the same shape as ``r`` with U(r), exactly 0 where
        ``r`` is below machine epsilon
    """
    r = np.asarray(r)
    if not np.issubdtype(r.dtype, np.floating):
        r = r.astype(np.float64)

    out = np.zeros_like(r)
    mask = r >= np.finfo(r.dtype).eps
    rm = r[mask]
    out[mask] = rm * rm * np.log(rm)
    return out


def kernel_matrix(points: NDArray[np.floating]) -> NDArray[np.floating]:
    """Compute the symmetric kernel matrix of a set of control points.

    Each unordered pair is evaluated once and mirrored into the full matrix.

    Args:
        points: Control points, shape (n_points, n_dims)

    Returns:
        Kernel matrix Phi with Phi[i, j] = U(|x_i - x_j|),
        shape (n_points, n_points), zero diagonal
    """
    return squareform(basis(pdist(points)), checks=False)


def cross_kernel(
    query: NDArray[np.floating],
    points: NDArray[np.floating],
) -> NDArray[np.floating]:
    """Evaluate the basis between every query point and every control point.

    Args:
        query: Query points, shape (n_query, n_dims)
        points: Control points, shape (n_points, n_dims)

    Returns:
        Matrix of U(|q_i - x_k|), shape (n_query, n_points)
    """
    return basis(cdist(query, points))
