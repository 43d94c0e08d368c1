"""Operator returning the real part of the input."""

import torch

from bpsense.operators.LinearOperator import LinearOperator


class RealPartOp(LinearOperator):
    r"""Real part of a tensor.

    Maps :math:`x` to :math:`\mathrm{Re}(x)`, returned in the complex dtype of the input.

    :math:`\mathrm{Re}` is not linear over the complex numbers, but it is linear over the real numbers,
    and self-adjoint with respect to the real inner product :math:`\mathrm{Re}\langle x, y\rangle`.
    Composed into the sparsifying operators of the reconstruction, it restricts the optimization
    to real-valued images.
    """

    def forward(self, x: torch.Tensor) -> tuple[torch.Tensor,]:
        """Apply the real part operator.

        Parameters
        ----------
        x
            input tensor

        Returns
        -------
            real part of x, same dtype as x
        """
        if not x.is_complex():
            return (x,)
        return (torch.complex(x.real, torch.zeros_like(x.real)),)

    def adjoint(self, x: torch.Tensor) -> tuple[torch.Tensor,]:
        """Apply the adjoint, identical to the forward."""
        return self.forward(x)

    @property
    def gram(self) -> LinearOperator:
        """Gram operator, identical to the operator itself as Re is a projection."""
        return self
