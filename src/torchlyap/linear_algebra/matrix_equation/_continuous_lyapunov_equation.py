"""Real continuous Lyapunov equation."""

import math
import warnings
from typing import List, Optional

import torch
from torch import Tensor
from torch.autograd import Function

from torchlyap.linear_algebra.decomposition import (
    SchurBlock,
    schur_blocks,
    schur_decomposition,
)
from torchlyap.linear_algebra.matrix_equation._exceptions import (
    DimensionError,
    IllConditionedLyapunovWarning,
    NumericalFailureError,
    SingularSystemError,
)
from torchlyap.linear_algebra.matrix_equation._small_lyapunov import (
    _solve_sylvester_block,
    solve_1x1_continuous_lyapunov_equation,
    solve_2x2_continuous_lyapunov_equation,
)


def _check_inputs(a: Tensor, q: Tensor) -> None:
    if a.dim() < 2:
        raise DimensionError(f"a must be at least 2D, got {a.dim()}D")
    if q.dim() < 2:
        raise DimensionError(f"q must be at least 2D, got {q.dim()}D")
    if a.shape[-2] != a.shape[-1]:
        raise DimensionError(f"a must be square, got shape {a.shape}")
    if q.shape[-2] != q.shape[-1]:
        raise DimensionError(f"q must be square, got shape {q.shape}")
    if a.shape != q.shape:
        raise DimensionError(
            f"a and q must have the same shape, got {a.shape} and {q.shape}"
        )


def _symmetric_from_triangle(q: Tensor, UPLO: str) -> Tensor:
    if UPLO == "L":
        return torch.tril(q) + torch.tril(q, diagonal=-1).mT
    return torch.triu(q) + torch.triu(q, diagonal=1).mT


def _check_unique_solution(
    eigenvalues: Tensor,
    tol: Optional[float],
    dtype: torch.dtype,
    warn: bool = True,
) -> None:
    """Reject A when some eigenvalue pair sums to (nearly) zero."""
    if eigenvalues.numel() == 0:
        return

    eps = torch.finfo(dtype).eps
    scale = max(1.0, eigenvalues.abs().max().item())
    if tol is None:
        tol = max(1e-10, 100 * eps) * scale

    # All pairs (i, j), i == j included
    sums = eigenvalues[:, None] + eigenvalues[None, :]
    separation = sums.abs().min().item()

    if separation < tol:
        raise SingularSystemError(separation, tol)

    if warn and separation < math.sqrt(eps) * scale:
        warnings.warn(
            f"Lyapunov operator is nearly singular "
            f"(min |lambda_i + lambda_j| = {separation:.2e}, "
            f"max |lambda| = {scale:.2e}). "
            f"The solution may have lost about half its significant digits.",
            IllConditionedLyapunovWarning,
        )


def _solve_reduced_continuous_lyapunov_equation(
    t: Tensor,
    q: Tensor,
    blocks: List[SchurBlock],
) -> Tensor:
    r"""Solve :math:`T^T Y + Y T = -Q` for quasi-upper-triangular T.

    Block (k, j) of the equation, j >= k, reads

    .. math::

        T_{kk}^T Y_{kj} + Y_{kj} T_{jj}
            = -Q_{kj} - \sum_{l<k} T_{lk}^T Y_{lj} - \sum_{l<j} Y_{kl} T_{lj}

    so sweeping block rows from the top and, within a row, block columns from
    the diagonal outwards, every term on the right is already known. This is
    the last-to-first sweep of the index-reversed form
    :math:`\hat{T} \hat{Y} + \hat{Y} \hat{T}^T = -\hat{Q}` with
    :math:`\hat{T} = J T^T J` and :math:`J` the reversal permutation.
    """
    y = torch.zeros_like(q)

    for k, block_k in enumerate(blocks):
        s_k = block_k.start
        rows = slice(s_k, s_k + block_k.size)
        t_kk = t[rows, rows]

        for block_j in blocks[k:]:
            s_j = block_j.start
            cols = slice(s_j, s_j + block_j.size)

            c = (
                -q[rows, cols]
                - t[:s_k, rows].mT @ y[:s_k, cols]
                - y[rows, :s_j] @ t[:s_j, cols]
            )

            if s_j == s_k:
                if block_k.size == 1:
                    y[rows, rows] = solve_1x1_continuous_lyapunov_equation(
                        t_kk, -c
                    )
                else:
                    y[rows, rows] = solve_2x2_continuous_lyapunov_equation(
                        t_kk, -c
                    )
                continue

            z = _solve_sylvester_block(t_kk, t[cols, cols], c)
            y[rows, cols] = z
            y[cols, rows] = z.mT

    return y


def _solve_continuous_lyapunov_equation(
    a: Tensor,
    q: Tensor,
    tol: Optional[float],
    warn: bool = True,
) -> Tensor:
    batch_shape = a.shape[:-2]
    n = a.shape[-1]

    if a.numel() == 0:
        return torch.zeros_like(q)

    result = schur_decomposition(a)
    if (result.info != 0).any():
        raise NumericalFailureError(
            "Real Schur decomposition of a failed; "
            "a may contain infs or NaNs."
        )

    T = result.T.reshape(-1, n, n)
    U = result.Q.reshape(-1, n, n)
    eigenvalues = result.eigenvalues.reshape(-1, n)
    q_flat = q.reshape(-1, n, n)

    X_list = []
    for i in range(T.shape[0]):
        _check_unique_solution(eigenvalues[i], tol, a.dtype, warn=warn)

        q_bar = U[i].mT @ q_flat[i] @ U[i]
        y = _solve_reduced_continuous_lyapunov_equation(
            T[i], q_bar, schur_blocks(T[i])
        )

        x = U[i] @ y @ U[i].mT
        X_list.append((x + x.mT) / 2)

    return torch.stack(X_list).reshape(*batch_shape, n, n)


class ContinuousLyapunovEquationFunction(Function):
    """Autograd function for the real continuous Lyapunov equation."""

    @staticmethod
    def forward(ctx, a: Tensor, q: Tensor, tol: Optional[float]):
        x = _solve_continuous_lyapunov_equation(a, q, tol)

        ctx.save_for_backward(a, x)
        ctx.tol = tol

        return x

    @staticmethod
    def backward(ctx, grad_x):
        a, x = ctx.saved_tensors

        grad_a = None
        grad_q = None

        if ctx.needs_input_grad[0] or ctx.needs_input_grad[1]:
            # Adjoint equation: A L + L A^T = -sym(grad_x). A^T has the
            # spectrum of A, already checked and warned about in forward.
            adjoint = _solve_continuous_lyapunov_equation(
                a.mT, (grad_x + grad_x.mT) / 2, ctx.tol, warn=False
            )

            if ctx.needs_input_grad[0]:
                grad_a = 2 * x @ adjoint

            if ctx.needs_input_grad[1]:
                grad_q = adjoint

        return grad_a, grad_q, None


def continuous_lyapunov_equation(
    a: Tensor,
    q: Tensor,
    *,
    UPLO: str = "L",
    tol: Optional[float] = None,
) -> Tensor:
    r"""
    Real continuous Lyapunov equation.

    Solves :math:`A^T X + X A = -Q` for the symmetric matrix :math:`X`,
    given a real square matrix :math:`A` and a real symmetric matrix
    :math:`Q`.

    Parameters
    ----------
    a : Tensor
        Coefficient matrix of shape (..., n, n).
    q : Tensor
        Symmetric right-hand side of shape (..., n, n). Only the diagonal and
        the triangle selected by ``UPLO`` are read.
    UPLO : str
        ``"L"`` reads the lower triangle of ``q``, ``"U"`` the upper one.
        Default: ``"L"``.
    tol : float, optional
        Smallest admissible :math:`\min |\lambda_i + \lambda_j|` over the
        eigenvalues of ``a``. Default: ``1e-10 * max(1, max |lambda|)``
        (``100 * eps`` replaces ``1e-10`` where it is larger, for
        ``float32``).

    Returns
    -------
    Tensor
        Symmetric solution of shape (..., n, n).

    Raises
    ------
    DimensionError
        If ``a`` or ``q`` is not square, or their shapes differ.
    SingularSystemError
        If some pair of eigenvalues of ``a`` sums to within ``tol`` of zero,
        in which case the solution is not unique.
    NumericalFailureError
        If the real Schur decomposition of ``a`` fails.
    ValueError
        If ``UPLO`` is not ``"L"`` or ``"U"``, or an input is complex.

    Warns
    -----
    IllConditionedLyapunovWarning
        If :math:`\min |\lambda_i + \lambda_j|` passes ``tol`` but is below
        :math:`\sqrt{\epsilon} \max(1, \max |\lambda|)`.

    Notes
    -----
    The solver follows Bartels and Stewart. With the real Schur
    decomposition :math:`A = U T U^T`, the equation becomes

    .. math::

        T^T Y + Y T = -U^T Q U, \qquad X = U Y U^T

    :math:`T` is quasi-upper-triangular, with 1x1 blocks for real eigenvalues
    and 2x2 blocks for complex conjugate pairs. :math:`Y` is computed one
    block at a time: diagonal blocks in closed form, off-diagonal blocks by
    direct solves of at most four unknowns. The result is symmetrized as
    :math:`(X + X^T) / 2`.

    The solution is unique iff :math:`\lambda_i + \lambda_j \neq 0` for all
    eigenvalues of :math:`A`, which holds in particular when :math:`A` is
    Hurwitz stable.

    Gradients with respect to ``a`` and ``q`` are computed by solving the
    adjoint equation :math:`A \Lambda + \Lambda A^T = -\bar{G}`, where
    :math:`\bar{G}` is the symmetrized output gradient, giving
    :math:`\partial L / \partial Q = \Lambda` and
    :math:`\partial L / \partial A = 2 X \Lambda`.

    Examples
    --------
    >>> import torch
    >>> from torchlyap.linear_algebra.matrix_equation import (
    ...     continuous_lyapunov_equation,
    ... )
    >>> a = torch.tensor([[0., 1., 0.], [-1., -1., 0.], [0., 0., -1.]],
    ...                  dtype=torch.float64)
    >>> x = continuous_lyapunov_equation(a, torch.eye(3, dtype=torch.float64))
    >>> torch.allclose(a.mT @ x + x @ a, -torch.eye(3, dtype=torch.float64))
    True
    """
    _check_inputs(a, q)

    if UPLO not in ("L", "U"):
        raise ValueError(f"UPLO must be 'L' or 'U', got {UPLO!r}")
    if a.is_complex() or q.is_complex():
        raise ValueError(
            f"a and q must be real, got dtypes {a.dtype} and {q.dtype}"
        )

    dtype = torch.promote_types(a.dtype, q.dtype)
    if dtype not in (torch.float32, torch.float64):
        dtype = torch.float64

    a = a.to(dtype)
    q = _symmetric_from_triangle(q.to(dtype), UPLO)

    return ContinuousLyapunovEquationFunction.apply(a, q, tol)
