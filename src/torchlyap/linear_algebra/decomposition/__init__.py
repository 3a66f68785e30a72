"""Matrix decompositions used by the matrix equation solvers.

Functions
---------
schur_decomposition
    Computes the real Schur decomposition A = QTQ^T where Q is orthogonal
    and T is quasi-upper-triangular.

schur_blocks
    Partitions the diagonal of a real Schur factor into 1x1 blocks (real
    eigenvalues) and 2x2 blocks (complex conjugate eigenvalue pairs).

schur_eigenvalues
    Reads the eigenvalues off the diagonal blocks of a real Schur factor.

Result Types
------------
SchurDecompositionResult
    Named tuple with T, Q, eigenvalues, info.

SchurBlock
    Named tuple with start, size.
"""

from torchlyap.linear_algebra.decomposition._result_types import (
    SchurBlock,
    SchurDecompositionResult,
)
from torchlyap.linear_algebra.decomposition._schur_decomposition import (
    schur_blocks,
    schur_decomposition,
    schur_eigenvalues,
)

__all__ = [
    "SchurBlock",
    "SchurDecompositionResult",
    "schur_blocks",
    "schur_decomposition",
    "schur_eigenvalues",
]
