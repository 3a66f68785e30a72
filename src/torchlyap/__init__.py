"""torchlyap: PyTorch solvers for Lyapunov matrix equations."""

from . import linear_algebra

__all__ = [
    "linear_algebra",
]

__version__ = "0.1.0"
