"""Class for Cartesian Sampling Operator."""

import torch

from bpsense.operators.LinearOperator import LinearOperator


class SamplingOp(LinearOperator):
    """Cartesian sampling operator.

    Multiplies k-space data with a sampling pattern. For a binary pattern, this selects the acquired
    k-space points and zeroes all others.
    The pattern is broadcast along all axes in which it is singleton, typically the coil and map axes.
    """

    def __init__(self, pattern: torch.Tensor) -> None:
        """Initialize a Sampling Operator.

        Parameters
        ----------
        pattern
            real-valued sampling pattern, typically with shape ``(x y z 1 1)``
        """
        super().__init__()
        if pattern.is_complex():
            raise ValueError('The sampling pattern must be real-valued.')
        self.pattern = pattern

    def forward(self, x: torch.Tensor) -> tuple[torch.Tensor,]:
        """Sample k-space data.

        Parameters
        ----------
        x
            k-space data on the Cartesian grid

        Returns
        -------
            sampled k-space data
        """
        return (x * self.pattern,)

    def adjoint(self, y: torch.Tensor) -> tuple[torch.Tensor,]:
        """Adjoint of sampling, which is identical to the forward for a real-valued pattern.

        Parameters
        ----------
        y
            sampled k-space data

        Returns
        -------
            k-space data on the Cartesian grid
        """
        return (y * self.pattern,)

    @property
    def gram(self) -> LinearOperator:
        """Gram operator, a multiplication with the squared pattern."""
        return SamplingOp(self.pattern.square())
