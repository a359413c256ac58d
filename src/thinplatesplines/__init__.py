"""
ThinPlateSplines - thin-plate spline deformations in any dimension.

Solves the thin-plate spline that maps a set of control points onto their
deformed counterparts, evaluates the resulting smooth mapping at arbitrary
points, and reports its bending energy.

Example usage:
    >>> import numpy as np
    >>> import thinplatesplines as tps
    >>>
    >>> control = np.array([[0.0, 1.0], [1.0, 0.0], [1.0, 1.0]])
    >>> target = np.array([[0.0, 1.0], [1.1, 0.0], [1.2, 1.5]])
    >>>
    >>> # Solve once, deform any number of point sets
    >>> spline = tps.solve(control, target, stiffness=1.0)
    >>> warped = tps.deform(np.array([[1.0, 0.0], [2.0, 2.0]]), spline)
    >>>
    >>> # Bending energy of the solved spline
    >>> bending = tps.energy(spline)
"""

import logging

from thinplatesplines.kernel import (
    basis,
    cross_kernel,
    kernel_matrix,
)
from thinplatesplines.logging_config import setup_logging
from thinplatesplines.points import (
    deform_points,
    solve_points,
    stack_points,
    unstack_points,
)
from thinplatesplines.tps import (
    Deformation,
    MissingAffineError,
    deform,
    energy,
    solve,
)

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Version
    "__version__",
    # Spline functions
    "Deformation",
    "MissingAffineError",
    "solve",
    "deform",
    "energy",
    # Kernel functions
    "basis",
    "kernel_matrix",
    "cross_kernel",
    # Point adapters
    "solve_points",
    "deform_points",
    "stack_points",
    "unstack_points",
    # Logging
    "setup_logging",
]
