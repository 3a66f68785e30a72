"""Closed-form solvers for the diagonal blocks of a reduced Lyapunov equation.

These operate on blocks of a real Schur factor and do no input validation.
"""

import torch
from torch import Tensor


def solve_1x1_continuous_lyapunov_equation(a: Tensor, q: Tensor) -> Tensor:
    r"""
    Solve the 1x1 continuous Lyapunov equation :math:`a^T x + x a = -q`.

    The equation reduces to :math:`2 a x = -q`, so :math:`x = -q / (2a)`.

    Parameters
    ----------
    a : Tensor
        1x1 block of a real Schur factor. Must be nonzero.
    q : Tensor
        1x1 right-hand side.

    Returns
    -------
    Tensor
        1x1 solution.

    Examples
    --------
    >>> import torch
    >>> from torchlyap.linear_algebra.matrix_equation import (
    ...     solve_1x1_continuous_lyapunov_equation,
    ... )
    >>> solve_1x1_continuous_lyapunov_equation(
    ...     torch.tensor([[-1.0]]), torch.tensor([[1.0]])
    ... )
    tensor([[0.5000]])
    """
    return -q / (2 * a)


def solve_2x2_continuous_lyapunov_equation(
    a: Tensor,
    q: Tensor,
    *,
    UPLO: str = "L",
) -> Tensor:
    r"""
    Solve the 2x2 continuous Lyapunov equation :math:`a^T X + X a = -q`.

    Writing the symmetric solution as :math:`X = [[x_1, x_2], [x_2, x_3]]`,
    the four scalar equations collapse to three independent ones

    .. math::

        \begin{pmatrix}
            2 a_{11} & 2 a_{21} & 0 \\
            a_{12} & a_{11} + a_{22} & a_{21} \\
            0 & 2 a_{12} & 2 a_{22}
        \end{pmatrix}
        \begin{pmatrix} x_1 \\ x_2 \\ x_3 \end{pmatrix}
        = -\begin{pmatrix} q_{11} \\ q_{12} \\ q_{22} \end{pmatrix}

    whose determinant is :math:`4\,\mathrm{tr}(a) \det(a)`. The system is
    solved by Cramer's rule.

    Parameters
    ----------
    a : Tensor
        2x2 diagonal block of a real Schur factor. Both ``tr(a)`` and
        ``det(a)`` must be nonzero.
    q : Tensor
        Symmetric 2x2 right-hand side. Only the diagonal and the off-diagonal
        entry of the triangle selected by ``UPLO`` are read.
    UPLO : str
        ``"L"`` reads ``q[1, 0]``, ``"U"`` reads ``q[0, 1]``. Default: ``"L"``.

    Returns
    -------
    Tensor
        Symmetric 2x2 solution.
    """
    if UPLO not in ("L", "U"):
        raise ValueError(f"UPLO must be 'L' or 'U', got {UPLO!r}")

    a11, a12 = a[0, 0], a[0, 1]
    a21, a22 = a[1, 0], a[1, 1]

    b1 = -q[0, 0]
    b2 = -q[1, 0] if UPLO == "L" else -q[0, 1]
    b3 = -q[1, 1]

    trace = a11 + a22
    denominator = 2 * trace * (a11 * a22 - a12 * a21)

    x1 = (
        (a22 * trace - a12 * a21) * b1 - 2 * a21 * a22 * b2 + a21**2 * b3
    ) / denominator
    x2 = (2 * a11 * a22 * b2 - a11 * a21 * b3 - a12 * a22 * b1) / denominator
    x3 = (
        (a11 * trace - a12 * a21) * b3 - 2 * a11 * a12 * b2 + a12**2 * b1
    ) / denominator

    return torch.stack([torch.stack([x1, x2]), torch.stack([x2, x3])])


def _solve_sylvester_block(a: Tensor, b: Tensor, c: Tensor) -> Tensor:
    """Solve a^T Z + Z b = c for blocks a (p x p) and b (q x q), p, q <= 2."""
    p = a.shape[-1]
    q = b.shape[-1]

    eye_p = torch.eye(p, dtype=a.dtype, device=a.device)
    eye_q = torch.eye(q, dtype=b.dtype, device=b.device)

    # Row-major vectorization: vec(A Z B) = kron(A, B^T) vec(Z).
    # kron needs contiguous operands; blocks arrive as strided views.
    kronecker = torch.kron(a.mT.contiguous(), eye_q) + torch.kron(
        eye_p, b.mT.contiguous()
    )
    z = torch.linalg.solve(kronecker, c.reshape(p * q))

    return z.reshape(p, q)
