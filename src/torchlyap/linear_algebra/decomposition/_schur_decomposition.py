"""Real Schur decomposition."""

from typing import List

import numpy
import scipy.linalg
import torch
from torch import Tensor

from torchlyap.linear_algebra.decomposition._result_types import (
    SchurBlock,
    SchurDecompositionResult,
)


def schur_blocks(T: Tensor) -> List[SchurBlock]:
    """Partition the diagonal of a real Schur factor into 1x1 and 2x2 blocks.

    LAPACK writes exact zeros on the subdiagonal between blocks, so a nonzero
    ``T[i + 1, i]`` marks the start of a 2x2 block.
    """
    if T.dim() != 2 or T.shape[0] != T.shape[1]:
        raise ValueError(f"T must be a square 2D tensor, got shape {T.shape}")

    n = T.shape[-1]
    subdiagonal = torch.diagonal(T, offset=-1).tolist()

    blocks = []
    i = 0
    while i < n:
        if i < n - 1 and subdiagonal[i] != 0:
            blocks.append(SchurBlock(start=i, size=2))
            i += 2
        else:
            blocks.append(SchurBlock(start=i, size=1))
            i += 1
    return blocks


def schur_eigenvalues(T: Tensor) -> Tensor:
    """Eigenvalues of a real Schur factor, read off its diagonal blocks."""
    eigenvalues = []
    for block in schur_blocks(T):
        i = block.start
        if block.size == 1:
            eigenvalues.append(T[i, i].to(torch.complex128))
            continue

        a = T[i, i]
        b = T[i, i + 1]
        c = T[i + 1, i]
        d = T[i + 1, i + 1]
        # Eigenvalues of [[a, b], [c, d]] are (a+d)/2 +/- sqrt((a-d)^2/4 + bc)
        trace = ((a + d) / 2).to(torch.complex128)
        disc = ((a - d) / 2) ** 2 + b * c
        sqrt_disc = torch.sqrt(disc.to(torch.complex128))
        eigenvalues.append(trace + sqrt_disc)
        eigenvalues.append(trace - sqrt_disc)

    if not eigenvalues:
        return torch.empty(0, dtype=torch.complex128, device=T.device)
    return torch.stack(eigenvalues)


def schur_decomposition(a: Tensor) -> SchurDecompositionResult:
    r"""
    Real Schur decomposition.

    Computes the real Schur decomposition :math:`A = QTQ^T` where :math:`Q`
    is orthogonal and :math:`T` is quasi-upper-triangular: upper triangular
    except for 2x2 diagonal blocks holding complex conjugate eigenvalue
    pairs.

    .. note::
        This function does not support gradients. The factorization is
        computed by LAPACK through :func:`scipy.linalg.schur` on detached
        inputs.

    Parameters
    ----------
    a : Tensor
        Real input matrix of shape (..., n, n).

    Returns
    -------
    SchurDecompositionResult
        A named tuple containing:

        - **T** (*Tensor*) - Quasi-upper-triangular Schur form of shape
          (..., n, n).
        - **Q** (*Tensor*) - Orthogonal matrix of shape (..., n, n).
        - **eigenvalues** (*Tensor*) - Complex eigenvalues of shape (..., n),
          in the order of the diagonal blocks of T.
        - **info** (*Tensor*) - Integer tensor of shape (...). A value of 0
          indicates success, 1 that the factorization failed (T, Q and
          eigenvalues of that matrix are NaN).

    Raises
    ------
    ValueError
        If input is not at least 2D, not square, or complex.

    Examples
    --------
    >>> import torch
    >>> from torchlyap.linear_algebra.decomposition import schur_decomposition
    >>> a = torch.tensor([[0., 1., 0.], [-1., -1., 0.], [0., 0., -1.]])
    >>> result = schur_decomposition(a)
    >>> torch.allclose(result.Q @ result.T @ result.Q.mT, a, atol=1e-6)
    True
    """
    if a.dim() < 2:
        raise ValueError(f"a must be at least 2D, got {a.dim()}D")
    if a.shape[-2] != a.shape[-1]:
        raise ValueError(f"a must be square, got shape {a.shape}")
    if a.is_complex():
        raise ValueError(f"a must be real, got dtype {a.dtype}")

    a = a.detach()
    dtype = a.dtype
    if dtype not in (torch.float32, torch.float64):
        dtype = torch.float64
        a = a.to(dtype)

    batch_shape = a.shape[:-2]
    n = a.shape[-1]

    if a.numel() == 0:
        return SchurDecompositionResult(
            T=torch.empty(*batch_shape, n, n, dtype=dtype, device=a.device),
            Q=torch.empty(*batch_shape, n, n, dtype=dtype, device=a.device),
            eigenvalues=torch.empty(
                *batch_shape, n, dtype=torch.complex128, device=a.device
            ),
            info=torch.zeros(batch_shape, dtype=torch.int32, device=a.device),
        )

    # Flatten batch dimensions for processing
    a_flat = a.reshape(-1, n, n)
    batch_size = a_flat.shape[0]

    T_list = []
    Q_list = []
    eigenvalues_list = []
    info_list = []

    for i in range(batch_size):
        a_i = a_flat[i].cpu().numpy()
        try:
            T_np, Q_np = scipy.linalg.schur(a_i, output="real")

            T_i = torch.from_numpy(numpy.ascontiguousarray(T_np)).to(a.device)
            Q_i = torch.from_numpy(numpy.ascontiguousarray(Q_np)).to(a.device)
            eigenvalues_i = schur_eigenvalues(T_i)
            info_i = 0
        except (numpy.linalg.LinAlgError, ValueError):
            # LinAlgError: QR iteration did not converge.
            # ValueError: input holds infs or NaNs.
            T_i = torch.full(
                (n, n), float("nan"), dtype=dtype, device=a.device
            )
            Q_i = torch.full(
                (n, n), float("nan"), dtype=dtype, device=a.device
            )
            eigenvalues_i = torch.full(
                (n,), float("nan"), dtype=torch.complex128, device=a.device
            )
            info_i = 1

        T_list.append(T_i.to(dtype))
        Q_list.append(Q_i.to(dtype))
        eigenvalues_list.append(eigenvalues_i)
        info_list.append(info_i)

    T = torch.stack(T_list).reshape(*batch_shape, n, n)
    Q = torch.stack(Q_list).reshape(*batch_shape, n, n)
    eigenvalues = torch.stack(eigenvalues_list).reshape(*batch_shape, n)
    info = torch.tensor(info_list, dtype=torch.int32, device=a.device).reshape(
        batch_shape
    )

    return SchurDecompositionResult(
        T=T, Q=Q, eigenvalues=eigenvalues, info=info
    )
