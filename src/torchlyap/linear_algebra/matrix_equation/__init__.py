"""Matrix equation solvers.

Functions
---------
continuous_lyapunov_equation
    Solves the real continuous Lyapunov equation A^T X + X A = -Q for the
    symmetric matrix X by the Bartels-Stewart method.

solve_1x1_continuous_lyapunov_equation
    Closed-form solution of a 1x1 reduced Lyapunov equation.

solve_2x2_continuous_lyapunov_equation
    Closed-form solution of a 2x2 reduced Lyapunov equation, reading only
    one triangle of the right-hand side.

Exceptions
----------
LyapunovEquationError
    Base class of the errors below.

DimensionError
    A or Q is not square, or their shapes differ.

SingularSystemError
    Some eigenvalue pair of A sums to (nearly) zero; no unique solution.

NumericalFailureError
    The real Schur decomposition of A failed.

Warnings
--------
IllConditionedLyapunovWarning
    The Lyapunov operator is close to singular.
"""

from torchlyap.linear_algebra.matrix_equation._continuous_lyapunov_equation import (
    continuous_lyapunov_equation,
)
from torchlyap.linear_algebra.matrix_equation._exceptions import (
    DimensionError,
    IllConditionedLyapunovWarning,
    LyapunovEquationError,
    NumericalFailureError,
    SingularSystemError,
)
from torchlyap.linear_algebra.matrix_equation._small_lyapunov import (
    solve_1x1_continuous_lyapunov_equation,
    solve_2x2_continuous_lyapunov_equation,
)

__all__ = [
    "DimensionError",
    "IllConditionedLyapunovWarning",
    "LyapunovEquationError",
    "NumericalFailureError",
    "SingularSystemError",
    "continuous_lyapunov_equation",
    "solve_1x1_continuous_lyapunov_equation",
    "solve_2x2_continuous_lyapunov_equation",
]
