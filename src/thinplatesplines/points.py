"""
Point-sequence adapters for the thin-plate spline functions.

Geometry code often carries landmarks as sequences of point objects
(tuples, named tuples, small vector classes) rather than coordinate
matrices. These helpers stack such sequences into (n_points, n_dims)
matrices before calling the matrix API and unstack the result back into
the caller's point type.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Sequence

import numpy as np

from thinplatesplines.tps import Deformation, MissingAffineError, deform, solve

if TYPE_CHECKING:
    from numpy.typing import NDArray


def stack_points(points: Sequence[Any]) -> NDArray[np.floating]:
    """Stack a sequence of points into a coordinate matrix.

    Args:
        points: Sequence of points, each iterable over its coordinates

    Returns:
        Coordinate matrix, shape (n_points, n_dims)

    Raises:
        ValueError: If the sequence is empty or the points differ in length
    """
    if len(points) == 0:
        raise ValueError("Cannot stack an empty sequence of points")

    rows = [np.asarray(tuple(p), dtype=np.float64) for p in points]
    n_dims = rows[0].shape
    for i, row in enumerate(rows):
        if row.ndim != 1 or row.shape != n_dims:
            raise ValueError(
                f"Point {i} has shape {row.shape}, expected {n_dims}"
            )
    return np.vstack(rows)


def unstack_points(
    matrix: NDArray[np.floating],
    like: Any,
) -> list[Any]:
    """Convert rows of a coordinate matrix into points of the same type as ``like``.

    Args:
        matrix: Coordinate matrix, shape (n_points, n_dims)
        like: Example point whose type is reproduced

    Returns:
        List of points, one per row
    """
    factory = _point_factory(like)
    return [factory(row) for row in matrix]


def solve_points(
    control: Sequence[Any],
    target: Sequence[Any],
    stiffness: float,
    compute_affine: bool = True,
) -> Deformation:
    """Solve a thin-plate spline from sequences of points.

    See ``thinplatesplines.solve``.
    """
    return solve(
        stack_points(control),
        stack_points(target),
        stiffness,
        compute_affine=compute_affine,
    )


def deform_points(
    query: Sequence[Any],
    deformation: Deformation,
) -> list[Any]:
    """Deform a sequence of points, returning points of the same type.

    An empty query gives an empty list.

    See ``thinplatesplines.deform``.
    """
    if len(query) == 0:
        if not deformation.has_affine:
            raise MissingAffineError()
        return []
    deformed = deform(stack_points(query), deformation)
    return unstack_points(deformed, query[0])


def _point_factory(like: Any) -> Callable[[NDArray[np.floating]], Any]:
    """Return a callable building a point of ``like``'s type from coordinates."""
    if isinstance(like, np.ndarray):
        return lambda row: row.astype(like.dtype, copy=True)

    point_type = type(like)
    if point_type is tuple:
        return lambda row: tuple(float(v) for v in row)
    if point_type is list:
        return lambda row: [float(v) for v in row]
    if isinstance(like, tuple) and hasattr(point_type, "_fields"):
        # Named tuple: one positional argument per coordinate
        return lambda row: point_type(*(float(v) for v in row))
    return lambda row: point_type(row)
