from typing import NamedTuple

from torch import Tensor


class SchurDecompositionResult(NamedTuple):
    """Result of real Schur decomposition A = QTQ^T."""

    T: Tensor
    Q: Tensor
    eigenvalues: Tensor
    info: Tensor


class SchurBlock(NamedTuple):
    """Diagonal block of a quasi-upper-triangular Schur factor.

    A block of ``size`` 1 holds a real eigenvalue at ``T[start, start]``.
    A block of ``size`` 2 spans ``T[start:start + 2, start:start + 2]`` and
    holds a complex conjugate eigenvalue pair.
    """

    start: int
    size: int
