"""Identity Operator."""

import torch

from bpsense.operators.LinearOperator import LinearOperator


class IdentityOp(LinearOperator):
    r"""The Identity Operator.

    A Linear Operator that returns a single input unchanged.
    Used as the sparsifying operator of the wavelet regularizer, whose transform
    is part of the proximal mapping.
    """

    def forward(self, x: torch.Tensor) -> tuple[torch.Tensor,]:
        """Apply forward of IdentityOp.

        .. note::
           Prefer calling the instance of the IdentityOp operator as ``operator(x)`` over directly calling this method.
        """
        return (x,)

    def adjoint(self, x: torch.Tensor) -> tuple[torch.Tensor,]:
        """Apply the adjoint of the identity operation.

        The identity operator is self-adjoint, so this returns the input unchanged.
        """
        return (x,)
