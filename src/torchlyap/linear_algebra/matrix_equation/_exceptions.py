"""Exceptions for matrix equation solvers."""


class LyapunovEquationError(Exception):
    """Base exception for Lyapunov equation solver errors."""

    pass


class DimensionError(LyapunovEquationError, ValueError):
    """Raised when the coefficient matrices have incompatible shapes.

    This occurs when:
    - A is not square
    - Q is not square
    - A and Q differ in size or batch shape
    """

    pass


class SingularSystemError(LyapunovEquationError):
    """Raised when the Lyapunov equation has no unique solution.

    The continuous Lyapunov equation is uniquely solvable iff
    lambda_i + lambda_j != 0 for every pair of eigenvalues of A, a value
    paired with itself included. This occurs when:
    - A has a zero eigenvalue
    - A has an eigenvalue pair symmetric about the imaginary axis
    - Either holds to within the solver tolerance
    """

    def __init__(self, separation: float, tol: float):
        super().__init__(
            f"Lyapunov equation has no unique solution: "
            f"min |lambda_i + lambda_j| = {separation:.3e} "
            f"is below tol = {tol:.3e}."
        )
        self.separation = separation
        self.tol = tol


class NumericalFailureError(LyapunovEquationError):
    """Raised when the real Schur decomposition of A fails.

    This occurs when:
    - The QR iteration does not converge
    - A contains infs or NaNs
    """

    pass


class IllConditionedLyapunovWarning(UserWarning):
    """Warning when the Lyapunov operator is close to singular."""

    pass
