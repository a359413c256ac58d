"""
Thin-plate spline solve, deformation and bending energy.

Given K control points X and their images Y in D dimensions, the solver
derives the map f(p) = [1, p] @ A + sum_k U(|p - x_k|) * C[k] that
interpolates (or, for a positive stiffness, approximates) the control
correspondences while minimizing bending energy.

The warping coefficients C are constrained to the orthogonal complement of
the affine column space of the homogeneous control points, which makes the
split into affine and non-affine parts unique.

Based on http://en.wikipedia.org/wiki/Thin_plate_spline and Bookstein (1989)
"Principal warps: thin-plate splines and the decomposition of deformations".
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
import scipy.linalg as sp

from thinplatesplines.kernel import cross_kernel, kernel_matrix

if TYPE_CHECKING:
    from numpy.typing import ArrayLike, NDArray

logger = logging.getLogger(__name__)


class MissingAffineError(ValueError):
    """Raised when deforming with a spline solved without its affine part."""

    def __init__(self) -> None:
        super().__init__(
            "Affine component not available; re-solve with compute_affine=True."
        )


@dataclass(frozen=True, eq=False)
class Deformation:
    """Coefficients of a solved thin-plate spline.

    All arrays are read-only after construction.

    Attributes:
        stiffness: Regularization weight (lambda) used in the solve
        control_points: Control points X, shape (n_points, n_dims)
        homogeneous_target: Target points with a leading column of ones,
            shape (n_points, n_dims + 1)
        kernel: Kernel matrix Phi of the control points, shape (n_points, n_points)
        affine: Affine coefficients, shape (n_dims + 1, n_dims + 1), or None
            if the spline was solved with ``compute_affine=False``
        warp: Non-affine coefficients C, shape (n_points, n_dims + 1)
    """

    stiffness: float
    control_points: NDArray[np.floating]
    homogeneous_target: NDArray[np.floating]
    kernel: NDArray[np.floating]
    affine: NDArray[np.floating] | None
    warp: NDArray[np.floating]

    def __post_init__(self) -> None:
        for name in ("control_points", "homogeneous_target", "kernel", "affine", "warp"):
            value = getattr(self, name)
            if value is None:
                continue
            value = np.array(value)
            value.flags.writeable = False
            object.__setattr__(self, name, value)

    @property
    def n_points(self) -> int:
        return self.control_points.shape[0]

    @property
    def n_dims(self) -> int:
        return self.control_points.shape[1]

    @property
    def has_affine(self) -> bool:
        return self.affine is not None


def solve(
    control: ArrayLike,
    target: ArrayLike,
    stiffness: float,
    compute_affine: bool = True,
) -> Deformation:
    """Solve for the thin-plate spline mapping control points onto targets.

    Args:
        control: Control points X, shape (n_points, n_dims)
        target: Deformed control points Y, shape (n_points, n_dims)
        stiffness: Regularization weight lambda >= 0. Zero gives exact
            interpolation; larger values give smoother maps that no longer
            pass exactly through the targets.
        compute_affine: If False, skip the affine back-substitution. The
            result then supports ``energy`` but not ``deform``.

    Returns:
        Deformation holding the spline coefficients

    Raises:
        ValueError: If control and target shapes disagree
        numpy.linalg.LinAlgError: If there are fewer than n_dims + 1 control
            points, or the regularized system is singular
    """
    x = _as_matrix(control, "control")
    y = _as_matrix(target, "target")
    if x.shape != y.shape:
        raise ValueError(
            f"Control and target points must have the same shape, "
            f"got {x.shape} and {y.shape}"
        )

    n_points, n_dims = x.shape
    n_affine = n_dims + 1
    if n_points < n_affine:
        raise np.linalg.LinAlgError(
            f"At least {n_affine} control points are needed in {n_dims} "
            f"dimensions, got {n_points}"
        )
    if stiffness < 0:
        logger.warning("Negative stiffness %g inverts the regularization", stiffness)

    logger.debug(
        "Solving thin-plate spline: %d points, %d dims, stiffness=%g, affine=%s",
        n_points,
        n_dims,
        stiffness,
        compute_affine,
    )

    # Homogeneous coordinates
    xh = _homogeneous(x)
    yh = _homogeneous(y)

    phi = kernel_matrix(x)

    # Full QR: q1 spans the affine functions, q2 its orthogonal complement
    q, r = sp.qr(xh, mode="full")
    q1 = q[:, :n_affine]
    q2 = q[:, n_affine:]

    n_free = n_points - n_affine
    if n_free == 0:
        # No room for warping: the map is purely affine
        warp = np.zeros_like(yh)
    else:
        projected = q2.T @ phi @ q2 + stiffness * np.eye(n_free)
        warp = q2 @ _solve_projected(projected, q2.T @ yh)

    affine = None
    if compute_affine:
        affine = sp.solve_triangular(r[:n_affine], q1.T @ (yh - phi @ warp))

    return Deformation(
        stiffness=stiffness,
        control_points=x,
        homogeneous_target=yh,
        kernel=phi,
        affine=affine,
        warp=warp,
    )


def deform(*args, compute_affine: bool | None = None) -> NDArray[np.floating]:
    """Deform points with a thin-plate spline.

    Two call forms are supported::

        deform(query, deformation)
        deform(control, query, target, stiffness, compute_affine=True)

    The second form solves the spline first and is equivalent to
    ``deform(query, solve(control, target, stiffness, compute_affine))``.

    Args:
        query: Points to deform, shape (n_query, n_dims)
        deformation: Solved spline (with affine component)
        control: Control points, shape (n_points, n_dims)
        target: Deformed control points, shape (n_points, n_dims)
        stiffness: Regularization weight
        compute_affine: Passed to ``solve`` in the second form (default
            True). Not accepted with a solved deformation.

    Returns:
        Deformed points, shape (n_query, n_dims)

    Raises:
        MissingAffineError: If the spline has no affine component
        ValueError: If the query dimensionality does not match the spline
        TypeError: If called with an unsupported number of arguments, or
            with ``compute_affine`` alongside a solved deformation
    """
    if len(args) == 2:
        if compute_affine is not None:
            raise TypeError(
                "compute_affine only applies to deform(control, query, target, stiffness)"
            )
        query, deformation = args
    elif len(args) == 4:
        control, query, target, stiffness = args
        if compute_affine is None:
            compute_affine = True
        deformation = solve(control, target, stiffness, compute_affine=compute_affine)
    else:
        raise TypeError(
            "deform() takes (query, deformation) or "
            f"(control, query, target, stiffness), got {len(args)} arguments"
        )
    return _deform(query, deformation)


def energy(deformation: Deformation) -> float:
    """Bending energy of a solved thin-plate spline.

    Computed as lambda * trace(C @ Yh.T). Zero for a purely affine map.

    Args:
        deformation: Solved spline (affine component not required)

    Returns:
        Bending energy (scalar)
    """
    # trace(C @ Yh.T) without forming the (n_points, n_points) product
    trace = np.sum(deformation.warp * deformation.homogeneous_target)
    return float(deformation.stiffness * trace)


def _solve_projected(
    projected: NDArray[np.floating],
    rhs: NDArray[np.floating],
) -> NDArray[np.floating]:
    """Solve the projected system, treating an ill-conditioned matrix as singular."""
    with warnings.catch_warnings():
        warnings.simplefilter("error", sp.LinAlgWarning)
        try:
            return sp.solve(projected, rhs, assume_a="sym")
        except sp.LinAlgWarning as e:
            raise np.linalg.LinAlgError(
                f"Projected thin-plate system is singular: {e}"
            ) from e


def _deform(
    query: ArrayLike,
    deformation: Deformation,
) -> NDArray[np.floating]:
    """Evaluate the affine plus warping terms at every query point."""
    if not deformation.has_affine:
        raise MissingAffineError()

    q = _as_matrix(query, "query")
    if q.shape[1] != deformation.n_dims:
        raise ValueError(
            f"Query points have {q.shape[1]} dimensions, "
            f"spline has {deformation.n_dims}"
        )

    result = _homogeneous(q) @ deformation.affine
    result += cross_kernel(q, deformation.control_points) @ deformation.warp

    # Drop the homogeneous coordinate
    return result[:, 1:]


def _homogeneous(points: NDArray[np.floating]) -> NDArray[np.floating]:
    """Prepend a column of ones to a point matrix."""
    return np.hstack([np.ones((points.shape[0], 1), dtype=points.dtype), points])


def _as_matrix(points: ArrayLike, name: str) -> NDArray[np.floating]:
    """Convert array-like points to a floating (n_points, n_dims) matrix."""
    points = np.asarray(points)
    if points.ndim != 2:
        raise ValueError(
            f"{name} must be a 2-D array of shape (n_points, n_dims), "
            f"got {points.ndim}-D array with shape {points.shape}"
        )
    if not np.issubdtype(points.dtype, np.floating):
        points = points.astype(np.float64)
    return points
