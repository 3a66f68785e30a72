"""Linear algebra operations with PyTorch integration.

Submodules
----------
decomposition
    Matrix decompositions (real Schur decomposition).
matrix_equation
    Matrix equation solvers (continuous Lyapunov equation).
"""

from torchlyap.linear_algebra import decomposition, matrix_equation

__all__ = ["decomposition", "matrix_equation"]
